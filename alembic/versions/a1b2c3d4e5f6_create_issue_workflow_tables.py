"""create_issue_workflow_tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 10:00:00.000000

이슈 워크플로우 기본 테이블 생성.
users, issues, workflow_steps, comments, notifications 및 인덱스.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(30), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('developer', 'qa', 'product_manager')", name="ck_users_role"),
    )
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_is_active", "users", ["is_active"])

    op.create_table(
        "issues",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), server_default="new", nullable=False),
        sa.Column("created_by", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_to", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("estimated_hours", sa.Numeric(8, 2), nullable=True),
        sa.Column("actual_hours", sa.Numeric(8, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("type IN ('bug', 'feature')", name="ck_issues_type"),
        sa.CheckConstraint("priority IN ('high', 'medium', 'low')", name="ck_issues_priority"),
        sa.CheckConstraint(
            "status IN ('new', 'in_progress', 'dev_review', 'qa_review', 'pm_review', 'resolved', 'rejected')",
            name="ck_issues_status",
        ),
        sa.CheckConstraint("estimated_hours IS NULL OR estimated_hours > 0", name="ck_issues_estimated_hours"),
        sa.CheckConstraint("actual_hours IS NULL OR actual_hours > 0", name="ck_issues_actual_hours"),
    )
    op.create_index("ix_issues_status", "issues", ["status"])
    op.create_index("ix_issues_created_by", "issues", ["created_by"])
    op.create_index("ix_issues_assigned_status", "issues", ["assigned_to", "status"])
    op.create_index("ix_issues_status_priority", "issues", ["status", "priority"])

    op.create_table(
        "workflow_steps",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("issue_id", UUID(as_uuid=True), sa.ForeignKey("issues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("step_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), server_default="pending", nullable=False),
        sa.Column("approver_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("step_type IN ('dev_review', 'qa_review', 'pm_review')", name="ck_workflow_steps_type"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_workflow_steps_status"),
    )
    op.create_index("ix_workflow_steps_issue_id", "workflow_steps", ["issue_id"])
    op.create_index("ix_workflow_steps_approver_id", "workflow_steps", ["approver_id"])
    op.create_index("ix_workflow_steps_status", "workflow_steps", ["status"])

    op.create_table(
        "comments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("issue_id", UUID(as_uuid=True), sa.ForeignKey("issues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("workflow_step_id", UUID(as_uuid=True), sa.ForeignKey("workflow_steps.id", ondelete="SET NULL"), nullable=True),
        sa.Column("author_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_internal", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("edited", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_comments_issue_id", "comments", ["issue_id"])

    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("related_issue_id", UUID(as_uuid=True), sa.ForeignKey("issues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.String(1000), nullable=False),
        sa.Column("is_read", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), server_default=sa.text("now() + interval '30 days'"), nullable=True),
        sa.CheckConstraint(
            "type IN ('assignment', 'status_change', 'approval_required', 'comment_added', 'mention')",
            name="ck_notifications_type",
        ),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_related_issue_id", "notifications", ["related_issue_id"])
    op.create_index("ix_notifications_user_unread", "notifications", ["user_id", "is_read"])


def downgrade() -> None:
    op.drop_index("ix_notifications_user_unread")
    op.drop_index("ix_notifications_related_issue_id")
    op.drop_index("ix_notifications_user_id")
    op.drop_table("notifications")
    op.drop_index("ix_comments_issue_id")
    op.drop_table("comments")
    op.drop_index("ix_workflow_steps_status")
    op.drop_index("ix_workflow_steps_approver_id")
    op.drop_index("ix_workflow_steps_issue_id")
    op.drop_table("workflow_steps")
    op.drop_index("ix_issues_status_priority")
    op.drop_index("ix_issues_assigned_status")
    op.drop_index("ix_issues_created_by")
    op.drop_index("ix_issues_status")
    op.drop_table("issues")
    op.drop_index("ix_users_is_active")
    op.drop_index("ix_users_role")
    op.drop_table("users")
