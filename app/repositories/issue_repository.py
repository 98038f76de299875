"""이슈 레포지토리.

Issue repository — Handles issues DB queries: filtered listing with
status-rank sorting and the status compare-and-swap used by transitions.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, case, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.issue import Issue
from app.repositories.base import BaseRepository
from app.services.status_graph import STATUS_RANK

# 우선순위 정렬 순서 — Priority sort rank (high first)
_PRIORITY_RANK: dict[str, int] = {"high": 1, "medium": 2, "low": 3}


class IssueRepository(BaseRepository[Issue]):

    def __init__(self) -> None:
        super().__init__(Issue)

    async def get_filtered(
        self,
        db: AsyncSession,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
        sort_field: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Issue], int]:
        """필터/검색/정렬이 적용된 이슈 목록을 조회합니다.

        Retrieve a filtered, searched and sorted page of issues.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            filters: 컬럼 필터 {'status': ..., 'priority': ..., ...} (Column equality filters)
            search: 제목/설명 부분 일치 검색어 (Title/description substring)
            sort_field: created_at | updated_at | priority | status | title
            sort_order: asc | desc
            page: 페이지 번호 (Page number, 1-based)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[Issue], int]: (이슈 목록, 전체 개수) (Issues, total count)
        """
        query: Select = select(Issue)

        if filters:
            for column_name, value in filters.items():
                if value is not None and hasattr(Issue, column_name):
                    query = query.where(getattr(Issue, column_name) == value)

        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Issue.title.ilike(pattern), Issue.description.ilike(pattern)))

        sort_key = self._sort_expression(sort_field)
        query = query.order_by(sort_key.asc() if sort_order == "asc" else sort_key.desc(), Issue.id)
        return await self.get_paginated(db, query, page, per_page)

    async def update_if_status(
        self,
        db: AsyncSession,
        issue_id: UUID,
        expected_status: str,
        values: dict[str, Any],
    ) -> Issue | None:
        """현재 상태가 expected_status일 때만 갱신합니다.

        Compare-and-swap on the issue status. Returns None when the issue is
        missing or its status is no longer ``expected_status``.
        """
        return await self.update_where(
            db, issue_id, {"status": getattr(expected_status, "value", expected_status)}, values
        )

    @staticmethod
    def _sort_expression(sort_field: str) -> Any:
        if sort_field == "status":
            # 표시용 상태 순위 정렬 — Presentation rank, not alphabetical
            return case({s.value: r for s, r in STATUS_RANK.items()}, value=Issue.status, else_=len(STATUS_RANK) + 1)
        if sort_field == "priority":
            return case(_PRIORITY_RANK, value=Issue.priority, else_=len(_PRIORITY_RANK) + 1)
        if sort_field in ("created_at", "updated_at", "title"):
            return getattr(Issue, sort_field)
        return Issue.created_at


issue_repository: IssueRepository = IssueRepository()
