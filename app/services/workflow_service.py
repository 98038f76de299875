"""워크플로우 서비스 — 요청 단위로 워크플로우 코어를 DB 세션에 연결.

Workflow Service — Binds the workflow core (transition engine, step manager,
resolution handler) to the SQLAlchemy stores of one request session, and
turns core results into API responses.

The core only flushes. Transition comments are written into the same session
before the router commits, so they land or roll back with the status change.
The router then hands the remaining notification effects to
``notification_service.dispatch``, so a failing notification can never undo a
committed transition.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.issue import WorkflowStep
from app.models.user import User
from app.repositories.workflow_stores import SqlIssueStore, SqlUserDirectory, SqlWorkflowStepStore
from app.schemas.issue import TransitionRequest
from app.services.comment_service import comment_service
from app.services.issue_service import issue_service
from app.services.transition_service import TransitionEngine
from app.services.workflow_contracts import StepOutcome, TransitionResult
from app.utils.exceptions import BadRequestError


class WorkflowService:

    def engine(self, db: AsyncSession) -> TransitionEngine:
        """세션에 바인딩된 전이 엔진 — Transition engine over the session's stores."""
        return TransitionEngine(
            SqlIssueStore(db),
            SqlWorkflowStepStore(db),
            SqlUserDirectory(db),
        )

    async def request_transition(
        self,
        db: AsyncSession,
        issue_id: UUID,
        data: TransitionRequest,
        requesting_user_id: UUID,
    ) -> TransitionResult:
        approver_id: UUID | None = None
        if data.approver_id is not None:
            try:
                approver_id = UUID(data.approver_id)
            except ValueError:
                raise BadRequestError("Invalid approver id")

        result = await self.engine(db).request_transition(
            issue_id,
            data.to_status,
            requesting_user_id,
            comment=data.comment,
            approver_id=approver_id,
            actual_hours=data.actual_hours,
        )
        result.effects = await comment_service.write_requested(db, result.effects)
        return result

    async def available_transitions(self, db: AsyncSession, issue_id: UUID) -> list[dict]:
        edges = await self.engine(db).available_transitions(issue_id)
        return [
            {
                "to_status": target.value,
                "requires_approval": requirement.requires_approval,
                "approver_role": requirement.approver_role.value if requirement.approver_role else None,
            }
            for target, requirement in edges
        ]

    async def approve_step(
        self,
        db: AsyncSession,
        step_id: UUID,
        user_id: UUID,
        comments: str | None = None,
    ) -> StepOutcome:
        return await self.engine(db).steps.approve(step_id, user_id, comments)

    async def reject_step(
        self,
        db: AsyncSession,
        step_id: UUID,
        user_id: UUID,
        comments: str | None,
    ) -> StepOutcome:
        return await self.engine(db).steps.reject(step_id, user_id, comments)

    async def get_step(self, db: AsyncSession, step_id: UUID) -> WorkflowStep:
        return await self.engine(db).steps.get_step(step_id)

    async def list_steps(self, db: AsyncSession, issue_id: UUID) -> list[WorkflowStep]:
        return await self.engine(db).steps.list_steps(issue_id)

    async def pending_for_user(self, db: AsyncSession, user_id: UUID) -> list[WorkflowStep]:
        return await self.engine(db).steps.pending_for_approver(user_id)

    # --- 응답 변환 (Response builders) ---

    async def build_step_response(self, db: AsyncSession, step: WorkflowStep) -> dict:
        approver_name: str | None = None
        if step.approver_id:
            r = await db.execute(select(User.full_name).where(User.id == step.approver_id))
            approver_name = r.scalar()

        return {
            "id": str(step.id),
            "issue_id": str(step.issue_id),
            "step_type": step.step_type,
            "status": step.status,
            "approver_id": str(step.approver_id) if step.approver_id else None,
            "approver_name": approver_name,
            "comments": step.comments,
            "created_at": step.created_at,
            "completed_at": step.completed_at,
        }

    async def build_transition_response(self, db: AsyncSession, result: TransitionResult) -> dict:
        return {
            "result": result.kind,
            "issue": await issue_service.build_response(db, result.issue),
            "workflow_step": (
                await self.build_step_response(db, result.step) if result.step is not None else None
            ),
        }

    async def build_outcome_response(self, db: AsyncSession, outcome: StepOutcome) -> dict:
        return {
            "workflow_step": await self.build_step_response(db, outcome.step),
            "issue": await issue_service.build_response(db, outcome.issue),
        }


workflow_service: WorkflowService = WorkflowService()
