"""이슈 Pydantic 스키마.

Issue request/response schemas. Status is never accepted on create or
update; it only changes through the transition endpoint.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from app.models.enums import IssuePriority, IssueStatus, IssueType


class IssueCreate(BaseModel):
    title: str = Field(min_length=5, max_length=200)
    description: str = Field(default="", max_length=5000)
    type: IssueType
    priority: IssuePriority = IssuePriority.MEDIUM
    assigned_to: str | None = None  # 담당자 UUID (Assignee UUID)
    estimated_hours: float | None = Field(default=None, gt=0, le=1000)


class IssueUpdate(BaseModel):
    """이슈 수정 요청 스키마 (부분 업데이트, 상태 제외).

    Partial update of the non-status fields of an issue.
    """

    title: str | None = Field(default=None, min_length=5, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    type: IssueType | None = None
    priority: IssuePriority | None = None
    assigned_to: str | None = None  # null이면 담당자 해제 (null clears the assignee)
    estimated_hours: float | None = Field(default=None, gt=0, le=1000)
    actual_hours: float | None = Field(default=None, gt=0, le=1000)


class IssueResponse(BaseModel):
    """이슈 응답 스키마.

    Attributes:
        id: 이슈 UUID (Issue identifier)
        status: 현재 상태 (Current workflow status)
        created_by_name: 작성자 이름 (Reporter display name)
        assigned_to_name: 담당자 이름 (Assignee display name)
        resolved_at: 해결 일시 (Set only while resolved)
    """

    id: str
    title: str
    description: str
    type: str
    priority: str
    status: str
    created_by: str
    created_by_name: str
    assigned_to: str | None = None
    assigned_to_name: str | None = None
    estimated_hours: float | None = None
    actual_hours: float | None = None
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None = None


class TransitionRequest(BaseModel):
    """상태 전이 요청 스키마.

    Status transition request.

    Attributes:
        to_status: 목표 상태 (Requested status)
        comment: 코멘트, 직접 전이 시 이슈 코멘트로 기록 (Recorded as a comment on direct transitions)
        approver_id: 승인자 지정, 없으면 역할로 자동 선택 (Explicit approver UUID)
        actual_hours: 실제 소요 시간 (Actual hours to record)
    """

    to_status: IssueStatus
    comment: str | None = Field(default=None, max_length=1000)
    approver_id: str | None = None
    actual_hours: float | None = Field(default=None, gt=0, le=1000)


class AvailableTransitionResponse(BaseModel):
    to_status: str  # 이동 가능한 상태 (Reachable status)
    requires_approval: bool  # 승인 필요 여부 (Approval-gated edge)
    approver_role: str | None = None  # 승인 역할 (Role that must approve)


class CommentCreate(BaseModel):
    """코멘트 작성 요청. 공백만 있는 내용은 서비스에서 거부.

    New comment. Whitespace-only content is rejected by the service.
    """

    content: str = Field(min_length=1, max_length=2000)
    is_internal: bool = False  # 팀 내부 코멘트 (Team-only comment)
    workflow_step_id: str | None = None  # 같은 이슈의 승인 단계 UUID (Step of the same issue)


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    id: str
    issue_id: str
    workflow_step_id: str | None = None
    author_id: str
    author_name: str | None = None
    content: str
    is_internal: bool
    edited: bool
    created_at: datetime
    updated_at: datetime
