"""코멘트 레포지토리.

Comment repository — Handles issue comment queries.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import Comment
from app.repositories.base import BaseRepository


class CommentRepository(BaseRepository[Comment]):

    def __init__(self) -> None:
        super().__init__(Comment)

    async def get_by_issue(
        self,
        db: AsyncSession,
        issue_id: UUID,
        include_internal: bool = True,
    ) -> Sequence[Comment]:
        query: Select = (
            select(Comment)
            .where(Comment.issue_id == issue_id)
            .order_by(Comment.created_at.asc())
        )
        if not include_internal:
            query = query.where(Comment.is_internal.is_(False))
        result = await db.execute(query)
        return result.scalars().all()


comment_repository: CommentRepository = CommentRepository()
