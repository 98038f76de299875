"""워크플로우 단계 Pydantic 스키마.

Workflow step request/response schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.issue import IssueResponse


class StepApproveRequest(BaseModel):
    comments: str | None = Field(default=None, max_length=1000)


class StepRejectRequest(BaseModel):
    """반려 요청 스키마 — 반려 사유 필수.

    Step rejection request. The reason is required; the minimum length
    (after trimming) is enforced by the step manager.
    """

    comments: str | None = Field(default=None, max_length=1000)  # 반려 사유 (Rejection reason)


class WorkflowStepResponse(BaseModel):
    """워크플로우 단계 응답 스키마.

    Attributes:
        id: 단계 UUID (Step identifier)
        issue_id: 이슈 UUID (Owning issue)
        step_type: dev_review | qa_review | pm_review
        status: pending | approved | rejected
        approver_id: 승인자 UUID (Designated or actual approver)
        approver_name: 승인자 이름 (Approver display name)
        comments: 코멘트 (Approval/rejection comments)
        created_at: 생성 일시 (Creation timestamp)
        completed_at: 처리 일시 (Resolution timestamp)
    """

    id: str
    issue_id: str
    step_type: str
    status: str
    approver_id: str | None = None
    approver_name: str | None = None
    comments: str | None = None
    created_at: datetime
    completed_at: datetime | None = None


class TransitionResponse(BaseModel):
    """상태 전이 결과 응답 스키마.

    Attributes:
        result: "applied" (즉시 적용) 또는 "pending_approval" (승인 대기)
        issue: 요청 처리 후의 이슈 (Issue after the request)
        workflow_step: 생성된 승인 단계 (Created step, pending_approval only)
    """

    result: str
    issue: IssueResponse
    workflow_step: WorkflowStepResponse | None = None


class StepResolutionResponse(BaseModel):
    workflow_step: WorkflowStepResponse
    issue: IssueResponse
