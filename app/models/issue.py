"""이슈 및 워크플로우 단계 SQLAlchemy ORM 모델 정의.

Issue and workflow step SQLAlchemy ORM model definitions.
An issue moves through the review workflow; every approval request is
recorded as a workflow step and kept as history.

Tables:
    - issues: 이슈 (Bugs and features tracked through the review workflow)
    - workflow_steps: 승인 단계 (Approval requests tied to an issue review stage)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import CheckConstraint, String, DateTime, Text, Numeric, ForeignKey, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Issue(Base):
    """이슈 모델 — 워크플로우를 따라 이동하는 작업 단위.

    Issue model — A trackable unit of work (bug or feature).
    The status column is only written by the transition engine, always
    through a compare-and-swap on the previous status.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        title: 제목 (Title, max 200 chars)
        description: 상세 설명 (Description)
        type: 유형 (bug | feature)
        priority: 우선순위 (high | medium | low)
        status: 상태 (new → in_progress → dev_review → qa_review → pm_review → resolved | rejected)
        created_by: 작성자 FK (Reporter user)
        assigned_to: 담당자 FK (Assignee, optional)
        estimated_hours: 예상 시간 (Estimated hours, > 0)
        actual_hours: 실제 소요 시간 (Actual hours, > 0)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
        resolved_at: 해결 일시 UTC (Set only while status is resolved)
    """

    __tablename__ = "issues"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # bug, feature
    priority: Mapped[str] = mapped_column(String(20), nullable=False)  # high, medium, low
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 담당자 — 사용자 삭제 시 NULL (SET NULL on user delete)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    estimated_hours: Mapped[float | None] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)
    actual_hours: Mapped[float | None] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_issues_status", "status"),
        Index("ix_issues_created_by", "created_by"),
        Index("ix_issues_assigned_status", "assigned_to", "status"),
        Index("ix_issues_status_priority", "status", "priority"),
        CheckConstraint("type IN ('bug', 'feature')", name="ck_issues_type"),
        CheckConstraint("priority IN ('high', 'medium', 'low')", name="ck_issues_priority"),
        CheckConstraint(
            "status IN ('new', 'in_progress', 'dev_review', 'qa_review', 'pm_review', 'resolved', 'rejected')",
            name="ck_issues_status",
        ),
        CheckConstraint("estimated_hours IS NULL OR estimated_hours > 0", name="ck_issues_estimated_hours"),
        CheckConstraint("actual_hours IS NULL OR actual_hours > 0", name="ck_issues_actual_hours"),
    )


class WorkflowStep(Base):
    """워크플로우 단계 모델 — 검토 단계별 승인 요청 기록.

    Workflow step model — One approval request for a review stage of an issue.
    Created pending; terminal (and immutable) once approved or rejected.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        issue_id: 이슈 FK (Owning issue)
        step_type: 검토 유형 (dev_review | qa_review | pm_review)
        status: 승인 상태 (pending | approved | rejected)
        approver_id: 승인자 FK (Designated approver, then the actual one)
        comments: 코멘트 (Required when rejecting)
        created_at: 생성 일시 UTC (Creation timestamp)
        completed_at: 처리 일시 UTC (Set when approved or rejected)
    """

    __tablename__ = "workflow_steps"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
    step_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    approver_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_workflow_steps_status", "status"),
        CheckConstraint("step_type IN ('dev_review', 'qa_review', 'pm_review')", name="ck_workflow_steps_type"),
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_workflow_steps_status"),
    )
