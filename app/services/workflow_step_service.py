"""워크플로우 단계 관리 서비스.

Workflow Step Manager — Creates, approves and rejects approval steps.
Approving or rejecting a step hands it to the approval resolution handler,
which moves the owning issue forward or back.
"""

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from app.config import settings
from app.models.enums import STEP_APPROVER_ROLE, UserRole, WorkflowStepStatus, WorkflowStepType
from app.models.issue import WorkflowStep
from app.services.workflow_contracts import (
    ApprovalRequired,
    IssueStore,
    StepOutcome,
    UserDirectory,
    WorkflowEffect,
    WorkflowStepStore,
    utcnow,
)
from app.utils.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from app.services.approval_resolution_service import ApprovalResolutionHandler


class WorkflowStepManager:
    """승인 단계 관리자.

    Workflow step manager bound to one set of collaborators.

    Attributes:
        issues: 이슈 저장소 (Issue store)
        steps: 승인 단계 저장소 (Workflow step store)
        users: 사용자/역할 디렉터리 (User/role directory)
        resolution: 승인/반려 후속 처리기 (Approval resolution handler)
    """

    def __init__(
        self,
        issues: IssueStore,
        steps: WorkflowStepStore,
        users: UserDirectory,
        resolution: "ApprovalResolutionHandler",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.issues: IssueStore = issues
        self.steps: WorkflowStepStore = steps
        self.users: UserDirectory = users
        self.resolution: "ApprovalResolutionHandler" = resolution
        self._clock: Callable[[], datetime] = clock

    async def create_step(
        self,
        issue_id: UUID,
        step_type: WorkflowStepType,
        approver_id: UUID | None = None,
    ) -> StepOutcome:
        """pending 상태의 승인 단계를 생성합니다.

        Insert a new pending step for the issue. When an approver is given,
        an approval-required notification effect is attached.

        Raises:
            NotFoundError: 이슈가 없을 때 (Issue does not exist)
        """
        issue = await self.issues.get(issue_id)
        if issue is None:
            raise NotFoundError("Issue not found")

        step_type = WorkflowStepType(step_type)
        step = await self.steps.insert(
            {
                "issue_id": issue.id,
                "step_type": step_type.value,
                "status": WorkflowStepStatus.PENDING.value,
                "approver_id": approver_id,
                "comments": None,
                "created_at": self._clock(),
                "completed_at": None,
            }
        )

        effects: list[WorkflowEffect] = []
        if approver_id is not None:
            effects.append(ApprovalRequired(issue.id, approver_id, issue.title, step_type))
        return StepOutcome(step=step, issue=issue, effects=effects)

    async def approve(
        self,
        step_id: UUID,
        approver_user_id: UUID,
        comments: str | None = None,
    ) -> StepOutcome:
        """승인 단계를 승인하고 이슈를 다음 상태로 이동시킵니다.

        Approve a pending step, then let the resolution handler advance the issue.

        Raises:
            NotFoundError: 단계가 없을 때 (Step does not exist)
            AuthorizationError: 지정 승인자가 아니거나 승인 역할이 아닐 때
            ConflictError: 이미 처리된 단계 (Step already approved/rejected)
        """
        step = await self._load_resolvable(step_id, approver_user_id)
        completed = await self._complete(step, WorkflowStepStatus.APPROVED, approver_user_id, comments)
        return await self.resolution.on_approved(completed)

    async def reject(
        self,
        step_id: UUID,
        approver_user_id: UUID,
        comments: str | None,
    ) -> StepOutcome:
        """승인 단계를 반려하고 이슈를 이전 상태로 되돌립니다.

        Reject a pending step with a mandatory reason, then let the resolution
        handler move the issue back.

        Raises:
            ValidationError: 반려 사유 누락 또는 최소 길이 미달 (Missing/short reason)
            NotFoundError, AuthorizationError, ConflictError: approve와 동일
        """
        min_length = settings.REJECTION_COMMENT_MIN_LENGTH
        if comments is None or len(comments.strip()) < min_length:
            raise ValidationError(
                f"Rejection reason is required and must be at least {min_length} characters"
            )

        step = await self._load_resolvable(step_id, approver_user_id)
        completed = await self._complete(step, WorkflowStepStatus.REJECTED, approver_user_id, comments)
        return await self.resolution.on_rejected(completed)

    async def find_approver(self, role: UserRole) -> UUID | None:
        """역할을 가진 활성 사용자 한 명 (id 순 첫 번째) — First active user holding the role."""
        return await self.users.find_active_user_by_role(UserRole(role))

    async def get_step(self, step_id: UUID) -> WorkflowStep:
        step = await self.steps.get(step_id)
        if step is None:
            raise NotFoundError("Workflow step not found")
        return step

    async def list_steps(self, issue_id: UUID) -> list[WorkflowStep]:
        """이슈의 승인 이력 (생성 순) — Step history of an issue, oldest first."""
        if await self.issues.get(issue_id) is None:
            raise NotFoundError("Issue not found")
        return await self.steps.list_by_issue(issue_id)

    async def pending_for_approver(self, user_id: UUID) -> list[WorkflowStep]:
        return await self.steps.list_pending_for_approver(user_id)

    async def _load_resolvable(self, step_id: UUID, user_id: UUID) -> WorkflowStep:
        step = await self.get_step(step_id)

        if step.approver_id is not None and step.approver_id != user_id:
            raise AuthorizationError("You are not authorized to resolve this workflow step")

        # 지정 승인자라도 승인 역할 필요 (The approver role is required even for the named approver)
        required_role = STEP_APPROVER_ROLE[WorkflowStepType(step.step_type)]
        if await self.users.get_active_role(user_id) != required_role:
            raise AuthorizationError(
                f"Only a {required_role.value} can resolve a {step.step_type} step"
            )

        if step.status != WorkflowStepStatus.PENDING:
            raise ConflictError("Workflow step has already been processed")
        return step

    async def _complete(
        self,
        step: WorkflowStep,
        outcome: WorkflowStepStatus,
        user_id: UUID,
        comments: str | None,
    ) -> WorkflowStep:
        completed = await self.steps.update_if_pending(
            step.id,
            {
                "status": outcome.value,
                "approver_id": user_id,
                "comments": comments,
                "completed_at": self._clock(),
            },
        )
        if completed is None:
            # 검증과 기록 사이에 다른 요청이 처리함 — Resolved concurrently
            raise ConflictError("Workflow step has already been processed")
        return completed
