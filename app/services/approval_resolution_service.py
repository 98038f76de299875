"""승인 결과 처리기 — 승인/반려된 단계에 따라 이슈 상태를 이동.

Approval Resolution Handler — Moves the owning issue after a step outcome.
Trusts its caller: the pending-status guard lives in the step manager.
"""

from typing import TYPE_CHECKING

from app.models.enums import IssueStatus, WorkflowStepType
from app.models.issue import WorkflowStep
from app.services.workflow_contracts import StatusChanged, StepOutcome, WorkflowEffect

if TYPE_CHECKING:
    from app.services.transition_service import TransitionEngine

# 승인 시 다음 상태 — Status after an approved step
NEXT_STATUS: dict[WorkflowStepType, IssueStatus] = {
    WorkflowStepType.DEV_REVIEW: IssueStatus.QA_REVIEW,
    WorkflowStepType.QA_REVIEW: IssueStatus.PM_REVIEW,
    WorkflowStepType.PM_REVIEW: IssueStatus.RESOLVED,
}

# 반려 시 되돌릴 상태 — Status after a rejected step
PREVIOUS_STATUS: dict[WorkflowStepType, IssueStatus] = {
    WorkflowStepType.DEV_REVIEW: IssueStatus.IN_PROGRESS,
    WorkflowStepType.QA_REVIEW: IssueStatus.DEV_REVIEW,
    WorkflowStepType.PM_REVIEW: IssueStatus.QA_REVIEW,
}


class ApprovalResolutionHandler:

    def __init__(self, engine: "TransitionEngine") -> None:
        self._engine: "TransitionEngine" = engine

    async def on_approved(self, step: WorkflowStep) -> StepOutcome:
        return await self._move(step, NEXT_STATUS[WorkflowStepType(step.step_type)])

    async def on_rejected(self, step: WorkflowStep) -> StepOutcome:
        return await self._move(step, PREVIOUS_STATUS[WorkflowStepType(step.step_type)])

    async def _move(self, step: WorkflowStep, target: IssueStatus) -> StepOutcome:
        issue = await self._engine.apply_direct(step.issue_id, target)

        effects: list[WorkflowEffect] = []
        if issue.assigned_to is not None:
            effects.append(StatusChanged(issue.id, issue.assigned_to, issue.title, target))
        return StepOutcome(step=step, issue=issue, effects=effects)
