"""워크플로우 단계 레포지토리.

Workflow step repository — Handles workflow_steps DB queries.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import WorkflowStepStatus
from app.models.issue import WorkflowStep
from app.repositories.base import BaseRepository


class WorkflowStepRepository(BaseRepository[WorkflowStep]):

    def __init__(self) -> None:
        super().__init__(WorkflowStep)

    async def get_by_issue(
        self,
        db: AsyncSession,
        issue_id: UUID,
    ) -> Sequence[WorkflowStep]:
        """이슈의 승인 이력 (생성 순) — Step history of an issue, oldest first."""
        query: Select = (
            select(WorkflowStep)
            .where(WorkflowStep.issue_id == issue_id)
            .order_by(WorkflowStep.created_at.asc(), WorkflowStep.id)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_pending_for_approver(
        self,
        db: AsyncSession,
        approver_id: UUID,
    ) -> Sequence[WorkflowStep]:
        """사용자에게 지정된 승인 대기 단계 — Pending steps assigned to a user."""
        query: Select = (
            select(WorkflowStep)
            .where(
                WorkflowStep.approver_id == approver_id,
                WorkflowStep.status == WorkflowStepStatus.PENDING.value,
            )
            .order_by(WorkflowStep.created_at.asc())
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def update_if_pending(
        self,
        db: AsyncSession,
        step_id: UUID,
        values: dict[str, Any],
    ) -> WorkflowStep | None:
        # pending → approved/rejected 은 한 번만 — A step leaves pending exactly once
        return await self.update_where(
            db, step_id, {"status": WorkflowStepStatus.PENDING.value}, values
        )


workflow_step_repository: WorkflowStepRepository = WorkflowStepRepository()
