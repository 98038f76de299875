"""워크플로우 코어의 협력자 계약, 효과(effect) 및 결과 타입.

Collaborator contracts, effects and result types of the workflow core.

The core never talks to the database or the notification system directly.
It reads and writes through the store protocols below (implemented over
SQLAlchemy in ``app.repositories.workflow_stores`` and over dicts in the
tests) and returns the notifications/comments it wants emitted as effect
values, which the caller dispatches after the state change is committed.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Protocol
from uuid import UUID

from app.models.enums import IssueStatus, UserRole, WorkflowStepType
from app.models.issue import Issue, WorkflowStep


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# 저장소 계약 — Store contracts
# ---------------------------------------------------------------------------
class IssueStore(Protocol):
    async def get(self, issue_id: UUID) -> Issue | None: ...

    async def update_if_status(
        self,
        issue_id: UUID,
        expected_status: str,
        fields: dict[str, Any],
    ) -> Issue | None:
        """status == expected_status 일 때만 갱신, 아니면 None (compare-and-swap)."""
        ...


class WorkflowStepStore(Protocol):
    async def insert(self, fields: dict[str, Any]) -> WorkflowStep: ...

    async def get(self, step_id: UUID) -> WorkflowStep | None: ...

    async def update_if_pending(
        self,
        step_id: UUID,
        fields: dict[str, Any],
    ) -> WorkflowStep | None:
        """단계가 아직 pending일 때만 갱신, 아니면 None (compare-and-swap)."""
        ...

    async def list_by_issue(self, issue_id: UUID) -> list[WorkflowStep]: ...

    async def list_pending_for_approver(self, user_id: UUID) -> list[WorkflowStep]: ...


class UserDirectory(Protocol):
    async def find_active_user_by_role(self, role: UserRole) -> UUID | None: ...

    async def get_active_role(self, user_id: UUID) -> UserRole | None: ...


# ---------------------------------------------------------------------------
# 효과 — Effects returned to the caller for dispatch
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ApprovalRequired:
    issue_id: UUID
    approver_id: UUID
    issue_title: str
    step_type: WorkflowStepType


@dataclass(frozen=True)
class StatusChanged:
    issue_id: UUID
    user_id: UUID
    issue_title: str
    new_status: IssueStatus


@dataclass(frozen=True)
class CommentRequested:
    issue_id: UUID
    author_id: UUID
    content: str


WorkflowEffect = ApprovalRequired | StatusChanged | CommentRequested


# ---------------------------------------------------------------------------
# 결과 — Results
# ---------------------------------------------------------------------------
@dataclass
class TransitionResult:
    """상태 전이 요청 결과.

    Result of a transition request.

    Attributes:
        kind: "applied" (상태 변경됨) 또는 "pending_approval" (승인 대기, 상태 불변)
        issue: 요청 처리 후의 이슈 (Issue after the request)
        step: 생성된 승인 단계 (Created step, pending_approval only)
        effects: 코멘트 요청 및 알림 (Comment requests written with the change,
                 notifications dispatched after commit)
    """

    kind: Literal["applied", "pending_approval"]
    issue: Issue
    step: WorkflowStep | None = None
    effects: list[WorkflowEffect] = field(default_factory=list)


@dataclass
class StepOutcome:
    """승인 단계 생성/처리 결과 — Result of creating or resolving a workflow step."""

    step: WorkflowStep
    issue: Issue
    effects: list[WorkflowEffect] = field(default_factory=list)
