"""코멘트 서비스: 이슈 코멘트 작성/수정/삭제/조회.

Comment Service. Issue discussion. Comments are written by users directly
or as the comment attached to a status transition; the latter are persisted
in the same transaction as the status change they describe.

Permissions:
    - 작성: 인증된 모든 사용자 (Any authenticated user)
    - 수정: 작성자 본인만, edited 플래그 설정 (Author only, marks the comment edited)
    - 삭제: 작성자 또는 product_manager (Author or a product manager)
"""

from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import Comment
from app.models.enums import UserRole
from app.models.user import User
from app.repositories.comment_repository import comment_repository
from app.repositories.issue_repository import issue_repository
from app.repositories.workflow_step_repository import workflow_step_repository
from app.schemas.issue import CommentCreate, CommentUpdate
from app.services.workflow_contracts import CommentRequested, WorkflowEffect
from app.utils.exceptions import AuthorizationError, BadRequestError, NotFoundError, ValidationError


class CommentService:

    async def build_response(self, db: AsyncSession, comment: Comment) -> dict:
        author = await db.execute(select(User.full_name).where(User.id == comment.author_id))
        return {
            "id": str(comment.id),
            "issue_id": str(comment.issue_id),
            "workflow_step_id": str(comment.workflow_step_id) if comment.workflow_step_id else None,
            "author_id": str(comment.author_id),
            "author_name": author.scalar(),
            "content": comment.content,
            "is_internal": comment.is_internal,
            "edited": comment.edited,
            "created_at": comment.created_at,
            "updated_at": comment.updated_at,
        }

    async def list_comments(
        self,
        db: AsyncSession,
        issue_id: UUID,
        include_internal: bool = False,
    ) -> Sequence[Comment]:
        """이슈 코멘트 (작성 순). 내부 코멘트는 요청 시에만 포함.

        Comments of an issue, oldest first. Internal comments are left out
        unless ``include_internal`` is set.
        """
        await self._load_issue(db, issue_id)
        return await comment_repository.get_by_issue(db, issue_id, include_internal)

    async def create_comment(
        self,
        db: AsyncSession,
        issue_id: UUID,
        data: CommentCreate,
        author_id: UUID,
    ) -> Comment:
        """코멘트 작성.

        Raises:
            NotFoundError: 이슈 또는 워크플로우 단계 없음 (Issue or referenced step missing)
            BadRequestError: 다른 이슈의 단계 참조 (Step belongs to another issue)
            ValidationError: 공백뿐인 내용 (Blank content)
        """
        await self._load_issue(db, issue_id)
        content = self._clean(data.content)

        step_id: UUID | None = None
        if data.workflow_step_id is not None:
            step_id = await self._resolve_step(db, issue_id, data.workflow_step_id)

        now = datetime.now(timezone.utc)
        return await comment_repository.create(
            db,
            {
                "issue_id": issue_id,
                "workflow_step_id": step_id,
                "author_id": author_id,
                "content": content,
                "is_internal": data.is_internal,
                "edited": False,
                "created_at": now,
                "updated_at": now,
            },
        )

    async def update_comment(
        self,
        db: AsyncSession,
        issue_id: UUID,
        comment_id: UUID,
        data: CommentUpdate,
        current_user: User,
    ) -> Comment:
        comment = await self._load_comment(db, issue_id, comment_id)
        if comment.author_id != current_user.id:
            raise AuthorizationError("You can only edit your own comments")

        updated = await comment_repository.update(
            db,
            comment.id,
            {
                "content": self._clean(data.content),
                "edited": True,
                "updated_at": datetime.now(timezone.utc),
            },
        )
        if updated is None:
            raise NotFoundError("Comment not found")
        return updated

    async def delete_comment(
        self,
        db: AsyncSession,
        issue_id: UUID,
        comment_id: UUID,
        current_user: User,
    ) -> None:
        comment = await self._load_comment(db, issue_id, comment_id)
        if comment.author_id != current_user.id and current_user.role != UserRole.PRODUCT_MANAGER.value:
            raise AuthorizationError("You can only delete your own comments")
        await comment_repository.delete(db, comment.id)

    async def write_requested(
        self,
        db: AsyncSession,
        effects: Sequence[WorkflowEffect],
    ) -> list[WorkflowEffect]:
        """전이 코멘트를 현재 트랜잭션에 기록하고 나머지 효과를 반환합니다.

        Persist the comments a transition asked for inside the caller's
        transaction and return the remaining (notification) effects. A failing
        write propagates, so the transition is rolled back with it.
        """
        remaining: list[WorkflowEffect] = []
        for effect in effects:
            if not isinstance(effect, CommentRequested):
                remaining.append(effect)
                continue
            await comment_repository.create(
                db,
                {
                    "issue_id": effect.issue_id,
                    "author_id": effect.author_id,
                    "content": effect.content,
                },
            )
        return remaining

    @staticmethod
    def _clean(content: str) -> str:
        content = content.strip()
        if not content:
            raise ValidationError("Comment content is required")
        return content

    async def _load_issue(self, db: AsyncSession, issue_id: UUID) -> None:
        if await issue_repository.get_by_id(db, issue_id) is None:
            raise NotFoundError("Issue not found")

    async def _load_comment(self, db: AsyncSession, issue_id: UUID, comment_id: UUID) -> Comment:
        comment = await comment_repository.get_by_id(db, comment_id)
        if comment is None or comment.issue_id != issue_id:
            raise NotFoundError("Comment not found")
        return comment

    async def _resolve_step(self, db: AsyncSession, issue_id: UUID, raw_id: str) -> UUID:
        try:
            step_id = UUID(raw_id)
        except ValueError:
            raise BadRequestError("Invalid workflow step id")
        step = await workflow_step_repository.get_by_id(db, step_id)
        if step is None:
            raise NotFoundError("Workflow step not found")
        if step.issue_id != issue_id:
            raise BadRequestError("Workflow step belongs to another issue")
        return step_id


comment_service: CommentService = CommentService()
