"""여러 라우터가 공유하는 응답 스키마.

Response schemas shared by the issue, workflow step and notification
routers: the paged list envelope, plain confirmations, and notifications.
"""

from datetime import datetime
from typing import Any
from pydantic import BaseModel


class PaginatedResponse(BaseModel):
    """페이지 단위 목록 — ``items`` 한 페이지와 전체 건수.

    Attributes:
        total: 필터 적용 후 전체 건수 (Rows matching the filters, all pages)
        page: 1부터 시작 (1-based)
    """

    items: list[Any]
    total: int
    page: int
    per_page: int


class MessageResponse(BaseModel):
    """확인 메시지 — e.g. "Marked 3 notifications as read"."""

    message: str


class NotificationResponse(BaseModel):
    """수신자에게 보이는 알림 한 건.

    A notification as shown to its recipient. ``related_issue_id`` is the
    issue the client opens when the notification is clicked.
    """

    id: str
    type: str  # assignment | status_change | approval_required | comment_added | mention
    title: str
    message: str
    related_issue_id: str
    is_read: bool
    created_at: datetime
    expires_at: datetime | None = None  # 이후 목록/배지에서 제외 (Hidden after this instant)
