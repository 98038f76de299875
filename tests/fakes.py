"""워크플로우 코어 테스트용 인메모리 저장소.

In-memory implementations of the workflow core's store contracts.
Rows are transient ORM instances, so the core sees the same types it gets
from the SQLAlchemy stores.
"""

import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from app.models.enums import UserRole
from app.models.issue import Issue, WorkflowStep
from app.services.transition_service import TransitionEngine


class FixedClock:
    """호출마다 1초씩 증가하는 시계 — Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now: datetime = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


class FakeIssueStore:

    def __init__(self) -> None:
        self.rows: dict[uuid.UUID, Issue] = {}
        # update 직전에 실행되는 훅 — Runs between the read and the conditional write
        self.before_update: Callable[[Issue], None] | None = None

    def add(self, **fields: Any) -> Issue:
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        values: dict[str, Any] = {
            "id": uuid.uuid4(),
            "title": "Login button does nothing",
            "description": "",
            "type": "bug",
            "priority": "medium",
            "status": "new",
            "assigned_to": None,
            "estimated_hours": None,
            "actual_hours": None,
            "created_at": now,
            "updated_at": now,
            "resolved_at": None,
        }
        values.update(fields)
        issue = Issue(**values)
        self.rows[issue.id] = issue
        return issue

    async def get(self, issue_id: uuid.UUID) -> Issue | None:
        return self.rows.get(issue_id)

    async def update_if_status(
        self,
        issue_id: uuid.UUID,
        expected_status: str,
        fields: dict[str, Any],
    ) -> Issue | None:
        issue = self.rows.get(issue_id)
        if issue is not None and self.before_update is not None:
            self.before_update(issue)
        if issue is None or issue.status != expected_status:
            return None
        for key, value in fields.items():
            setattr(issue, key, value)
        return issue


class FakeStepStore:

    def __init__(self) -> None:
        self.rows: dict[uuid.UUID, WorkflowStep] = {}

    async def insert(self, fields: dict[str, Any]) -> WorkflowStep:
        step = WorkflowStep(id=uuid.uuid4(), **fields)
        self.rows[step.id] = step
        return step

    async def get(self, step_id: uuid.UUID) -> WorkflowStep | None:
        return self.rows.get(step_id)

    async def update_if_pending(
        self,
        step_id: uuid.UUID,
        fields: dict[str, Any],
    ) -> WorkflowStep | None:
        step = self.rows.get(step_id)
        if step is None or step.status != "pending":
            return None
        for key, value in fields.items():
            setattr(step, key, value)
        return step

    async def list_by_issue(self, issue_id: uuid.UUID) -> list[WorkflowStep]:
        steps = [s for s in self.rows.values() if s.issue_id == issue_id]
        return sorted(steps, key=lambda s: s.created_at)

    async def list_pending_for_approver(self, user_id: uuid.UUID) -> list[WorkflowStep]:
        return [s for s in self.rows.values() if s.approver_id == user_id and s.status == "pending"]


class FakeUserDirectory:

    def __init__(self) -> None:
        self.users: dict[uuid.UUID, tuple[UserRole, bool]] = {}

    def add(self, role: UserRole, active: bool = True) -> uuid.UUID:
        user_id = uuid.uuid4()
        self.users[user_id] = (role, active)
        return user_id

    async def find_active_user_by_role(self, role: UserRole) -> uuid.UUID | None:
        candidates = [uid for uid, (r, active) in self.users.items() if r == role and active]
        return min(candidates) if candidates else None

    async def get_active_role(self, user_id: uuid.UUID) -> UserRole | None:
        entry = self.users.get(user_id)
        if entry is None or not entry[1]:
            return None
        return entry[0]


class Workbench:
    """엔진과 가짜 저장소 묶음 — Engine wired onto fresh fakes."""

    def __init__(self) -> None:
        self.issues = FakeIssueStore()
        self.steps = FakeStepStore()
        self.users = FakeUserDirectory()
        self.clock = FixedClock()
        self.engine = TransitionEngine(self.issues, self.steps, self.users, clock=self.clock)
