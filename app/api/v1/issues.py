"""이슈 라우터 — 이슈 CRUD 및 상태 전이 API.

Issue Router — Issue CRUD, status transitions, step history and comments.
Any authenticated user can read and create; editing and transitions are
authorized by the services.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.config import settings
from app.database import get_db
from app.models.enums import IssuePriority, IssueStatus, IssueType
from app.models.user import User
from app.schemas.common import MessageResponse, PaginatedResponse
from app.schemas.issue import (
    AvailableTransitionResponse,
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    IssueCreate,
    IssueResponse,
    IssueUpdate,
    TransitionRequest,
)
from app.schemas.workflow import TransitionResponse, WorkflowStepResponse
from app.services.comment_service import comment_service
from app.services.issue_service import issue_service
from app.services.notification_service import notification_service
from app.services.workflow_service import workflow_service

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_issues(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    status: IssueStatus | None = Query(None),
    priority: IssuePriority | None = Query(None),
    type: IssueType | None = Query(None),
    assigned_to: UUID | None = Query(None),
    created_by: UUID | None = Query(None),
    search: str | None = Query(None, max_length=200),
    sort: str = Query("created_at"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=settings.ISSUE_PAGE_SIZE_MAX),
) -> dict:
    """이슈 목록 조회 — 필터, 검색, 정렬 (status는 워크플로우 순서)."""
    filters = {
        "status": status.value if status else None,
        "priority": priority.value if priority else None,
        "type": type.value if type else None,
        "assigned_to": assigned_to,
        "created_by": created_by,
    }
    issues, total = await issue_service.list_issues(db, filters, search, sort, order, page, per_page)
    items = [await issue_service.build_response(db, i) for i in issues]
    return {"items": items, "total": total, "page": page, "per_page": per_page}


@router.post("", response_model=IssueResponse, status_code=201)
async def create_issue(
    data: IssueCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """이슈 생성. 항상 new 상태로 시작."""
    issue = await issue_service.create_issue(db, data, current_user.id)
    await db.commit()
    return await issue_service.build_response(db, issue)


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    issue = await issue_service.get_detail(db, issue_id)
    return await issue_service.build_response(db, issue)


@router.patch("/{issue_id}", response_model=IssueResponse)
async def update_issue(
    issue_id: UUID,
    data: IssueUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """이슈 수정 (상태 제외). 작성자/담당자/QA/PM 가능."""
    issue = await issue_service.update_issue(db, issue_id, data, current_user)
    await db.commit()
    return await issue_service.build_response(db, issue)


@router.get("/{issue_id}/transitions", response_model=list[AvailableTransitionResponse])
async def list_available_transitions(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[dict]:
    """현재 상태에서 가능한 전이 목록."""
    return await workflow_service.available_transitions(db, issue_id)


@router.post("/{issue_id}/transitions", response_model=TransitionResponse)
async def request_transition(
    issue_id: UUID,
    data: TransitionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """상태 전이 요청.

    Request a status change. Approval edges answer ``pending_approval`` with
    the created workflow step and leave the issue status unchanged.

    Args:
        issue_id: 이슈 UUID (Issue UUID)
        data: 전이 요청 (Transition request)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 요청자 (Requesting user)

    Returns:
        dict: 전이 결과와 이슈, 생성된 단계 (Result kind, issue and created step)
    """
    result = await workflow_service.request_transition(db, issue_id, data, current_user.id)
    await db.commit()
    response = await workflow_service.build_transition_response(db, result)
    await notification_service.dispatch(db, result.effects)
    return response


@router.get("/{issue_id}/workflow-steps", response_model=list[WorkflowStepResponse])
async def list_workflow_steps(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[dict]:
    """이슈의 승인 이력 (생성 순)."""
    steps = await workflow_service.list_steps(db, issue_id)
    return [await workflow_service.build_step_response(db, s) for s in steps]


@router.get("/{issue_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    include_internal: bool = Query(False),
) -> list[dict]:
    """이슈 코멘트 (작성 순). 내부 코멘트는 include_internal=true일 때만."""
    comments = await comment_service.list_comments(db, issue_id, include_internal)
    return [await comment_service.build_response(db, c) for c in comments]


@router.post("/{issue_id}/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    issue_id: UUID,
    data: CommentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    comment = await comment_service.create_comment(db, issue_id, data, current_user.id)
    await db.commit()
    return await comment_service.build_response(db, comment)


@router.patch("/{issue_id}/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    issue_id: UUID,
    comment_id: UUID,
    data: CommentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """코멘트 수정 (작성자 본인만). edited 플래그가 설정됩니다."""
    comment = await comment_service.update_comment(db, issue_id, comment_id, data, current_user)
    await db.commit()
    return await comment_service.build_response(db, comment)


@router.delete("/{issue_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    issue_id: UUID,
    comment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """코멘트 삭제 (작성자 또는 PM)."""
    await comment_service.delete_comment(db, issue_id, comment_id, current_user)
    await db.commit()
    return {"message": "Comment deleted"}
