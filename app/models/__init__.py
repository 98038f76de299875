"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
``Base.metadata.create_all`` in tests.

Modules:
    user: 사용자 및 워크플로우 역할 (Users and their workflow role)
    issue: 이슈 및 승인 단계 (Issues and workflow steps)
    comment: 이슈 코멘트 (Issue comments)
    notification: 알림 (User notifications)
    enums: 상태/유형 열거형 (Status and type enumerations)
"""

from app.models.user import User
from app.models.issue import Issue, WorkflowStep
from app.models.comment import Comment
from app.models.notification import Notification

__all__ = [
    "User",
    "Issue", "WorkflowStep",
    "Comment",
    "Notification",
]
