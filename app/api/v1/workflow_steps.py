"""워크플로우 단계 라우터 — 승인 요청 조회 및 승인/반려 API.

Workflow Step Router — Pending approvals, step detail, approve and reject.
Whether the caller may resolve a step is decided by the step manager.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.workflow import (
    StepApproveRequest,
    StepRejectRequest,
    StepResolutionResponse,
    WorkflowStepResponse,
)
from app.services.notification_service import notification_service
from app.services.workflow_service import workflow_service

router: APIRouter = APIRouter()


@router.get("/pending", response_model=list[WorkflowStepResponse])
async def list_pending_steps(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[dict]:
    """내게 지정된 승인 대기 단계 목록."""
    steps = await workflow_service.pending_for_user(db, current_user.id)
    return [await workflow_service.build_step_response(db, s) for s in steps]


@router.get("/{step_id}", response_model=WorkflowStepResponse)
async def get_step(
    step_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    step = await workflow_service.get_step(db, step_id)
    return await workflow_service.build_step_response(db, step)


@router.post("/{step_id}/approve", response_model=StepResolutionResponse)
async def approve_step(
    step_id: UUID,
    data: StepApproveRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """승인 단계 승인 — 이슈를 다음 검토 단계로 이동.

    Approve a pending step and advance its issue.

    Args:
        step_id: 단계 UUID (Workflow step UUID)
        data: 승인 코멘트 (Optional approval comments)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 승인자 (Approving user)

    Returns:
        dict: 처리된 단계와 이동된 이슈 (Resolved step and moved issue)
    """
    outcome = await workflow_service.approve_step(db, step_id, current_user.id, data.comments)
    await db.commit()
    response = await workflow_service.build_outcome_response(db, outcome)
    await notification_service.dispatch(db, outcome.effects)
    return response


@router.post("/{step_id}/reject", response_model=StepResolutionResponse)
async def reject_step(
    step_id: UUID,
    data: StepRejectRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """승인 단계 반려 — 반려 사유 필수, 이슈를 이전 단계로 되돌림."""
    outcome = await workflow_service.reject_step(db, step_id, current_user.id, data.comments)
    await db.commit()
    response = await workflow_service.build_outcome_response(db, outcome)
    await notification_service.dispatch(db, outcome.effects)
    return response
