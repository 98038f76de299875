"""알림 관련 SQLAlchemy ORM 모델 정의.

Notification SQLAlchemy ORM model definitions.
Every notification points back at the issue that triggered it.

Tables:
    - notifications: 사용자 알림 (User notifications tied to an issue)
"""

import uuid
from datetime import datetime, timedelta, timezone
from sqlalchemy import CheckConstraint, String, Boolean, DateTime, ForeignKey, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.config import settings
from app.database import Base


def _default_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=settings.NOTIFICATION_TTL_DAYS)


class Notification(Base):
    """알림 모델 — 사용자에게 전달되는 워크플로우 알림.

    Notification model — Workflow notifications delivered to users.

    Notification Types (type 필드 값):
        - "assignment": 이슈 담당자 지정 (Issue assigned to the user)
        - "status_change": 이슈 상태 변경 (Issue status changed)
        - "approval_required": 승인 요청 (Review step awaiting the user's approval)
        - "comment_added": 코멘트 등록 (New comment on an issue)
        - "mention": 멘션 (User mentioned in a comment)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 수신자 FK (Recipient user foreign key)
        related_issue_id: 관련 이슈 FK (Issue that triggered the notification)
        type: 알림 유형 (Notification type, see above)
        title: 알림 제목 (Short title)
        message: 알림 메시지 (Human-readable notification message)
        is_read: 읽음 여부 (Whether the user has read this notification)
        created_at: 생성 일시 UTC (Creation timestamp)
        expires_at: 만료 일시 UTC (Hidden from listings after this time)
    """

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    related_issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=_default_expiry, nullable=True)

    __table_args__ = (
        Index("ix_notifications_user_unread", "user_id", "is_read"),
        CheckConstraint(
            "type IN ('assignment', 'status_change', 'approval_required', 'comment_added', 'mention')",
            name="ck_notifications_type",
        ),
    )
