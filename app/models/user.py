"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
Each user holds exactly one workflow role which decides the review
steps they may approve.

Tables:
    - users: 사용자 계정 (User profiles with workflow role)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import CheckConstraint, String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """사용자 모델 — 이슈 트래커 사용자 프로필.

    User model — Issue tracker user profile.
    Authentication lives in the external auth service; this table only
    mirrors the profile and the workflow role.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier, same as the auth subject)
        email: 이메일 (Email address, unique)
        full_name: 실명 (Full display name)
        role: 워크플로우 역할 (Workflow role: developer | qa | product_manager)
        is_active: 활성 상태 (Inactive users are never picked as approvers)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 워크플로우 역할 — developer | qa | product_manager
    role: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("role IN ('developer', 'qa', 'product_manager')", name="ck_users_role"),
    )
