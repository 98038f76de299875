"""상태 전이 엔진 — 이슈 상태 변경 요청의 검증과 적용.

Transition Engine — Validates a requested status change against the status
graph and either opens an approval step or applies the change directly.

Ordering:
    각 요청은 "읽기 → 검증 → compare-and-swap 쓰기" 순서로 처리됩니다.
    Every write is conditioned on the status read in the same request, so a
    concurrent transition of the same issue surfaces as ConflictError instead
    of being silently overwritten.

The engine is also the composition root of the core: it owns the workflow
step manager and the approval resolution handler built on the same stores.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import UUID

from app.models.enums import IssueStatus, UserRole, WorkflowStepStatus
from app.models.issue import Issue
from app.services import status_graph
from app.services.approval_resolution_service import ApprovalResolutionHandler
from app.services.status_graph import TransitionRequirement
from app.services.workflow_contracts import (
    CommentRequested,
    IssueStore,
    StatusChanged,
    TransitionResult,
    UserDirectory,
    WorkflowEffect,
    WorkflowStepStore,
    utcnow,
)
from app.services.workflow_step_service import WorkflowStepManager
from app.utils.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

# 담당/작성 여부와 무관하게 상태를 변경할 수 있는 역할
# Roles allowed to move any issue, regardless of authorship or assignment
_REVIEWER_ROLES: frozenset[UserRole] = frozenset({UserRole.QA, UserRole.PRODUCT_MANAGER})


class TransitionEngine:
    """상태 전이 엔진.

    Transition engine bound to one set of collaborators.

    Attributes:
        issues: 이슈 저장소 (Issue store)
        users: 사용자/역할 디렉터리 (User/role directory)
        steps: 승인 단계 관리자 (Workflow step manager)
        resolution: 승인 결과 처리기 (Approval resolution handler)
    """

    def __init__(
        self,
        issues: IssueStore,
        step_store: WorkflowStepStore,
        users: UserDirectory,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.issues: IssueStore = issues
        self.users: UserDirectory = users
        self._step_store: WorkflowStepStore = step_store
        self._clock: Callable[[], datetime] = clock
        self.resolution: ApprovalResolutionHandler = ApprovalResolutionHandler(self)
        self.steps: WorkflowStepManager = WorkflowStepManager(
            issues, step_store, users, self.resolution, clock
        )

    async def request_transition(
        self,
        issue_id: UUID,
        to_status: IssueStatus | str,
        requesting_user_id: UUID,
        comment: str | None = None,
        approver_id: UUID | None = None,
        actual_hours: float | None = None,
    ) -> TransitionResult:
        """이슈 상태 변경을 요청합니다.

        Request a status change. Approval edges create a pending workflow step
        and leave the issue untouched; direct edges are applied immediately.

        Args:
            issue_id: 이슈 UUID (Issue UUID)
            to_status: 목표 상태 (Requested status)
            requesting_user_id: 요청자 UUID (Requesting user)
            comment: 전이 코멘트, 직접 전이 시 코멘트로 기록 (Comment for direct transitions)
            approver_id: 승인자 지정, 승인 역할을 가진 활성 사용자여야 함, 없으면 역할로 자동 선택
                         (Explicit approver holding the approver role, else found by role)
            actual_hours: 실제 소요 시간, 직접 전이에서만 허용 (Direct transitions only)

        Returns:
            TransitionResult: "applied" 또는 "pending_approval"

        Raises:
            NotFoundError: 이슈가 없을 때 (Issue does not exist)
            InvalidTransitionError: 그래프에 없는 전이 (Edge not in the status graph)
            AuthorizationError: 이슈를 변경할 권한 없음 (Requester may not move this issue)
            ConflictError: 승인 대기 단계가 이미 있거나 동시 변경 감지
                           (Pending step already open, or concurrent status change)
            ValidationError: 지정 승인자가 승인 역할이 아니거나, 승인 전이에 actual_hours 전달
                             (Approver lacks the role, or actual_hours on a gated edge)
        """
        issue = await self._load(issue_id)
        from_status = issue.status
        target = self._parse_status(from_status, to_status)
        requirement: TransitionRequirement = status_graph.transition_requirement(from_status, target)
        await self._ensure_may_move(issue, requesting_user_id)

        if requirement.requires_approval:
            if actual_hours is not None:
                # 승인 대기 중에는 이슈를 수정하지 않음 (The issue row stays untouched while pending)
                raise ValidationError("actual_hours can only be recorded on a transition that applies directly")
            await self._ensure_no_pending_step(issue.id)
            if approver_id is not None:
                await self._ensure_can_approve(approver_id, requirement.approver_role)
                approver = approver_id
            else:
                approver = await self.steps.find_approver(requirement.approver_role)
            created = await self.steps.create_step(issue.id, requirement.step_type, approver)
            return TransitionResult(
                kind="pending_approval",
                issue=created.issue,
                step=created.step,
                effects=created.effects,
            )

        extra: dict[str, Any] = {}
        if actual_hours is not None:
            extra["actual_hours"] = actual_hours
        updated = await self._write_status(issue, target, extra)

        effects: list[WorkflowEffect] = []
        if comment:
            effects.append(CommentRequested(updated.id, requesting_user_id, comment))
        if updated.assigned_to is not None:
            effects.append(StatusChanged(updated.id, updated.assigned_to, updated.title, target))
        return TransitionResult(kind="applied", issue=updated, effects=effects)

    async def apply_direct(self, issue_id: UUID, to_status: IssueStatus | str) -> Issue:
        """승인 결과를 반영하여 상태를 즉시 적용합니다 (그래프/승인 검사 없음).

        Apply a status unconditionally. Used by the approval resolution handler
        once a step outcome has been decided.
        """
        issue = await self._load(issue_id)
        return await self._write_status(issue, IssueStatus(to_status), {})

    async def available_transitions(
        self, issue_id: UUID
    ) -> list[tuple[IssueStatus, TransitionRequirement]]:
        """현재 상태에서 가능한 전이와 요건 (표시 순위 정렬).

        Edges out of the issue's current status with their requirements,
        ordered by display rank.
        """
        issue = await self._load(issue_id)
        targets = sorted(status_graph.get_available_transitions(issue.status), key=status_graph.status_rank)
        return [(t, status_graph.transition_requirement(issue.status, t)) for t in targets]

    async def _load(self, issue_id: UUID) -> Issue:
        issue = await self.issues.get(issue_id)
        if issue is None:
            raise NotFoundError("Issue not found")
        return issue

    @staticmethod
    def _parse_status(from_status: str, to_status: IssueStatus | str) -> IssueStatus:
        try:
            return IssueStatus(to_status)
        except ValueError:
            raise InvalidTransitionError(from_status, to_status)

    async def _ensure_may_move(self, issue: Issue, user_id: UUID) -> None:
        if user_id in (issue.created_by, issue.assigned_to):
            return
        if await self.users.get_active_role(user_id) in _REVIEWER_ROLES:
            return
        raise AuthorizationError("Only the reporter, the assignee, QA or a product manager can change this issue")

    async def _ensure_can_approve(self, approver_id: UUID, role: UserRole) -> None:
        # 미존재/비활성 사용자도 역할 None으로 거부 (Unknown and inactive users have no role)
        if await self.users.get_active_role(approver_id) != role:
            raise ValidationError(f"Approver must be an active {role.value}")

    async def _ensure_no_pending_step(self, issue_id: UUID) -> None:
        for step in await self._step_store.list_by_issue(issue_id):
            if step.status == WorkflowStepStatus.PENDING:
                raise ConflictError("Issue already has a pending approval step")

    async def _write_status(self, issue: Issue, target: IssueStatus, extra: dict[str, Any]) -> Issue:
        now = self._clock()
        fields: dict[str, Any] = {"status": target.value, "updated_at": now, **extra}
        if target is IssueStatus.RESOLVED:
            fields["resolved_at"] = now
        elif issue.status == IssueStatus.RESOLVED:
            # 재오픈 시 해결 일시 초기화 — Leaving resolved clears resolved_at
            fields["resolved_at"] = None

        updated = await self.issues.update_if_status(issue.id, issue.status, fields)
        if updated is None:
            raise ConflictError("Issue status changed concurrently, reload and retry")
        return updated
