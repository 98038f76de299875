"""이슈 서비스.

Issue service — Business logic for issue CRUD. Status is not editable here;
status changes go through the workflow service.
"""

from datetime import datetime, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.enums import UserRole
from app.models.issue import Issue
from app.models.user import User
from app.repositories.issue_repository import issue_repository
from app.repositories.user_repository import user_repository
from app.schemas.issue import IssueCreate, IssueUpdate
from app.services.notification_service import notification_service
from app.utils.exceptions import AuthorizationError, BadRequestError, NotFoundError

# 정렬 가능 필드 — Sortable fields of the issue list
SORT_FIELDS: tuple[str, ...] = ("created_at", "updated_at", "priority", "status", "title")


class IssueService:

    async def build_response(self, db: AsyncSession, issue: Issue) -> dict:
        creator_result = await db.execute(
            select(User.full_name).where(User.id == issue.created_by)
        )
        created_by_name: str = creator_result.scalar() or "Unknown"

        assigned_to_name: str | None = None
        if issue.assigned_to:
            r = await db.execute(
                select(User.full_name).where(User.id == issue.assigned_to)
            )
            assigned_to_name = r.scalar()

        return {
            "id": str(issue.id),
            "title": issue.title,
            "description": issue.description,
            "type": issue.type,
            "priority": issue.priority,
            "status": issue.status,
            "created_by": str(issue.created_by),
            "created_by_name": created_by_name,
            "assigned_to": str(issue.assigned_to) if issue.assigned_to else None,
            "assigned_to_name": assigned_to_name,
            "estimated_hours": issue.estimated_hours,
            "actual_hours": issue.actual_hours,
            "created_at": issue.created_at,
            "updated_at": issue.updated_at,
            "resolved_at": issue.resolved_at,
        }

    async def list_issues(
        self,
        db: AsyncSession,
        filters: dict[str, Any],
        search: str | None = None,
        sort_field: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Issue], int]:
        """이슈 목록 조회 — 필터/검색/정렬/페이지네이션.

        List issues. ``per_page`` is capped at ISSUE_PAGE_SIZE_MAX.

        Raises:
            BadRequestError: 지원하지 않는 정렬 필드 (Unsupported sort field)
        """
        if sort_field not in SORT_FIELDS:
            raise BadRequestError(f"Unsupported sort field: {sort_field}")
        per_page = max(1, min(per_page, settings.ISSUE_PAGE_SIZE_MAX))
        page = max(1, page)
        return await issue_repository.get_filtered(
            db, filters, search, sort_field, sort_order, page, per_page
        )

    async def get_detail(self, db: AsyncSession, issue_id: UUID) -> Issue:
        issue = await issue_repository.get_by_id(db, issue_id)
        if issue is None:
            raise NotFoundError("Issue not found")
        return issue

    async def create_issue(
        self,
        db: AsyncSession,
        data: IssueCreate,
        created_by: UUID,
    ) -> Issue:
        """이슈 생성 — 항상 new 상태로 시작합니다.

        Create an issue in status ``new``. A given assignee must be an active
        user and receives an assignment notification.
        """
        assigned_to = await self._resolve_assignee(db, data.assigned_to)
        now = datetime.now(timezone.utc)
        issue = await issue_repository.create(
            db,
            {
                "title": data.title.strip(),
                "description": data.description,
                "type": data.type.value,
                "priority": data.priority.value,
                "status": "new",
                "created_by": created_by,
                "assigned_to": assigned_to,
                "estimated_hours": data.estimated_hours,
                "created_at": now,
                "updated_at": now,
            },
        )
        if assigned_to is not None and assigned_to != created_by:
            await notification_service.create_for_assignment(db, issue)
        return issue

    async def update_issue(
        self,
        db: AsyncSession,
        issue_id: UUID,
        data: IssueUpdate,
        current_user: User,
    ) -> Issue:
        """이슈 수정 (상태 제외).

        Update the non-status fields of an issue. Only the reporter, the
        assignee, QA or a product manager may edit. A changed assignee
        receives an assignment notification.

        Raises:
            NotFoundError: 이슈 또는 담당자가 없을 때 (Issue or assignee missing)
            AuthorizationError: 수정 권한 없음 (Caller may not edit this issue)
        """
        issue = await self.get_detail(db, issue_id)
        self._ensure_may_edit(issue, current_user)

        update_data = data.model_dump(exclude_unset=True)
        for key in ("type", "priority"):
            if update_data.get(key) is not None:
                update_data[key] = update_data[key].value
            elif key in update_data:
                del update_data[key]
        if update_data.get("title") is None:
            update_data.pop("title", None)
        if "description" in update_data and update_data["description"] is None:
            update_data["description"] = ""

        previous_assignee = issue.assigned_to
        if "assigned_to" in update_data:
            update_data["assigned_to"] = await self._resolve_assignee(db, update_data["assigned_to"])
        update_data["updated_at"] = datetime.now(timezone.utc)

        updated = await issue_repository.update(db, issue_id, update_data)
        if updated is None:
            raise NotFoundError("Issue not found")

        if updated.assigned_to is not None and updated.assigned_to != previous_assignee:
            await notification_service.create_for_assignment(db, updated)
        return updated

    async def _resolve_assignee(self, db: AsyncSession, raw_id: str | None) -> UUID | None:
        if raw_id is None:
            return None
        try:
            assignee_id = UUID(raw_id)
        except ValueError:
            raise BadRequestError("Invalid assignee id")
        if await user_repository.get_active(db, assignee_id) is None:
            raise NotFoundError("Assignee not found")
        return assignee_id

    @staticmethod
    def _ensure_may_edit(issue: Issue, user: User) -> None:
        if user.id in (issue.created_by, issue.assigned_to):
            return
        if user.role in (UserRole.QA.value, UserRole.PRODUCT_MANAGER.value):
            return
        raise AuthorizationError("Only the reporter, the assignee, QA or a product manager can edit this issue")


issue_service: IssueService = IssueService()
