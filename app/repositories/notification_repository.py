"""알림 레포지토리 — 사용자별 알림 조회/읽음 처리.

Notification queries scoped to one recipient. Notifications past their
``expires_at`` stay in the table but no longer show up in listings or in
the unread badge count.
"""

from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy import ColumnElement, Select, and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.repositories.base import BaseRepository


def _visible_to(user_id: UUID) -> ColumnElement[bool]:
    """수신자 본인 + 만료 전 — Owned by ``user_id`` and not yet expired."""
    now = datetime.now(timezone.utc)
    return and_(
        Notification.user_id == user_id,
        or_(Notification.expires_at.is_(None), Notification.expires_at > now),
    )


class NotificationRepository(BaseRepository[Notification]):
    """알림 레포지토리 — Recipient-scoped notification queries."""

    def __init__(self) -> None:
        super().__init__(Notification)

    async def get_user_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        """최신순 알림 한 페이지 — One page of the user's notifications, newest first.

        Returns:
            tuple[Sequence[Notification], int]: (알림, 전체 개수) (Notifications, total)
        """
        query: Select = select(Notification).where(_visible_to(user_id))
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        return await self.get_paginated(
            db, query.order_by(Notification.created_at.desc()), page, per_page
        )

    async def get_unread_count(self, db: AsyncSession, user_id: UUID) -> int:
        query: Select = (
            select(func.count(Notification.id))
            .where(_visible_to(user_id), Notification.is_read.is_(False))
        )
        return (await db.execute(query)).scalar() or 0

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> bool:
        """알림 하나를 읽음 처리 — 다른 사용자의 알림이면 False.

        Mark one notification read; False when it does not belong to ``user_id``.
        """
        result = await db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        return result.rowcount > 0

    async def mark_all_read(self, db: AsyncSession, user_id: UUID) -> int:
        """읽지 않은 알림 전부 읽음 처리, 변경 건수 반환 — Returns rows changed."""
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount

    async def create_notification(
        self,
        db: AsyncSession,
        user_id: UUID,
        related_issue_id: UUID,
        notification_type: str,
        title: str,
        message: str,
    ) -> Notification:
        """이슈 관련 알림 생성 — Record a notification about an issue for one recipient.

        ``expires_at`` comes from the model default (30 days).
        """
        return await self.create(
            db,
            {
                "user_id": user_id,
                "related_issue_id": related_issue_id,
                "type": notification_type,
                "title": title,
                "message": message,
            },
        )


# 싱글턴 인스턴스 — Singleton instance
notification_repository: NotificationRepository = NotificationRepository()
