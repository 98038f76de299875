"""알림 서비스 — 알림 비즈니스 로직.

Notification Service — Business logic for notification management.
Handles notification listing, read/unread operations, and dispatching the
notification effects returned by the workflow core (approval requests and
status changes) into rows. Transition comments are not dispatched here; the
workflow service writes them in the transition's own transaction.

Dispatch is fire-and-forget: each effect is committed on its own and a
failure is logged and rolled back without touching the workflow change that
produced it, which has already been committed by the caller.
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import NotificationType
from app.models.issue import Issue
from app.models.notification import Notification
from app.repositories.notification_repository import notification_repository
from app.services.workflow_contracts import (
    ApprovalRequired,
    StatusChanged,
    WorkflowEffect,
)

logger: logging.Logger = logging.getLogger(__name__)


class NotificationService:
    """알림 조회/읽음 처리 및 워크플로우 효과 기록 — Reads, read marks and effect dispatch."""

    # --- 공통 조회/읽음 처리 (Shared read/unread operations) ---

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        """만료되지 않은 알림, 최신순 — Unexpired notifications, newest first."""
        return await notification_repository.get_user_notifications(
            db, user_id, unread_only, page, per_page
        )

    async def get_unread_count(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        return await notification_repository.get_unread_count(db, user_id)

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> bool:
        return await notification_repository.mark_read(db, notification_id, user_id)

    async def mark_all_read(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        return await notification_repository.mark_all_read(db, user_id)

    # --- 자동 생성 (Auto-creation) ---

    async def create_for_assignment(
        self,
        db: AsyncSession,
        issue: Issue,
    ) -> Notification:
        """이슈 담당자 지정 시 알림을 자동 생성합니다.

        Auto-create a notification for the new assignee of an issue.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            issue: 담당자가 지정된 이슈 (Issue with its new assignee)

        Returns:
            Notification: 생성된 알림 (Created notification)
        """
        return await notification_repository.create_notification(
            db,
            user_id=issue.assigned_to,
            related_issue_id=issue.id,
            notification_type=NotificationType.ASSIGNMENT.value,
            title="Issue Assigned",
            message=f'You have been assigned to "{issue.title}"',
        )

    async def dispatch(
        self,
        db: AsyncSession,
        effects: Sequence[WorkflowEffect],
    ) -> int:
        """워크플로우 효과를 알림으로 기록합니다.

        Write each workflow effect and commit it on its own. Failures are
        logged and rolled back; they never propagate to the caller.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            effects: 워크플로우 코어가 반환한 효과 (Effects returned by the core)

        Returns:
            int: 기록에 성공한 효과 수 (Number of effects written)
        """
        written = 0
        for effect in effects:
            try:
                await self._write_effect(db, effect)
                await db.commit()
                written += 1
            except Exception:
                logger.exception("Failed to dispatch workflow effect %r", effect)
                await db.rollback()
        return written

    async def _write_effect(self, db: AsyncSession, effect: WorkflowEffect) -> None:
        if isinstance(effect, ApprovalRequired):
            review = effect.step_type.value.replace("_", " ").upper()
            await notification_repository.create_notification(
                db,
                user_id=effect.approver_id,
                related_issue_id=effect.issue_id,
                notification_type=NotificationType.APPROVAL_REQUIRED.value,
                title=f"{review} Approval Required",
                message=f'"{effect.issue_title}" requires your approval',
            )
        elif isinstance(effect, StatusChanged):
            await notification_repository.create_notification(
                db,
                user_id=effect.user_id,
                related_issue_id=effect.issue_id,
                notification_type=NotificationType.STATUS_CHANGE.value,
                title="Issue Status Updated",
                message=f'"{effect.issue_title}" status changed to {effect.new_status.value}',
            )
        else:
            raise TypeError(f"Unknown workflow effect: {type(effect).__name__}")


# 싱글턴 인스턴스 — Singleton instance
notification_service: NotificationService = NotificationService()
