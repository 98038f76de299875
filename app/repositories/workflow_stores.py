"""워크플로우 코어용 세션 바인딩 저장소 어댑터.

Session-bound store adapters — Implement the workflow core's store
contracts (IssueStore, WorkflowStepStore, UserDirectory) on top of the
module-level repositories and one AsyncSession. The adapters only flush;
the router owns the commit.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import UserRole
from app.models.issue import Issue, WorkflowStep
from app.repositories.issue_repository import issue_repository
from app.repositories.user_repository import user_repository
from app.repositories.workflow_step_repository import workflow_step_repository


class SqlIssueStore:

    def __init__(self, db: AsyncSession) -> None:
        self.db: AsyncSession = db

    async def get(self, issue_id: UUID) -> Issue | None:
        return await issue_repository.get_by_id(self.db, issue_id)

    async def update_if_status(
        self,
        issue_id: UUID,
        expected_status: str,
        fields: dict[str, Any],
    ) -> Issue | None:
        return await issue_repository.update_if_status(self.db, issue_id, expected_status, fields)


class SqlWorkflowStepStore:

    def __init__(self, db: AsyncSession) -> None:
        self.db: AsyncSession = db

    async def insert(self, fields: dict[str, Any]) -> WorkflowStep:
        return await workflow_step_repository.create(self.db, fields)

    async def get(self, step_id: UUID) -> WorkflowStep | None:
        return await workflow_step_repository.get_by_id(self.db, step_id)

    async def update_if_pending(
        self,
        step_id: UUID,
        fields: dict[str, Any],
    ) -> WorkflowStep | None:
        return await workflow_step_repository.update_if_pending(self.db, step_id, fields)

    async def list_by_issue(self, issue_id: UUID) -> list[WorkflowStep]:
        return list(await workflow_step_repository.get_by_issue(self.db, issue_id))

    async def list_pending_for_approver(self, user_id: UUID) -> list[WorkflowStep]:
        return list(await workflow_step_repository.get_pending_for_approver(self.db, user_id))


class SqlUserDirectory:

    def __init__(self, db: AsyncSession) -> None:
        self.db: AsyncSession = db

    async def find_active_user_by_role(self, role: UserRole) -> UUID | None:
        user = await user_repository.find_active_by_role(self.db, UserRole(role).value)
        return user.id if user is not None else None

    async def get_active_role(self, user_id: UUID) -> UserRole | None:
        user = await user_repository.get_active(self.db, user_id)
        if user is None:
            return None
        try:
            return UserRole(user.role)
        except ValueError:
            return None
