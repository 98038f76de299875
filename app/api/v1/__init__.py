"""API v1 라우터 패키지 — 모든 엔드포인트 통합.

API v1 Router package — Aggregates all endpoints into a single router for
inclusion in the FastAPI application.

Included routers:
    - issues: 이슈 CRUD, 상태 전이, 승인 이력, 코멘트 (Issues, transitions, history, comments)
    - workflow_steps: 승인 대기 조회 및 승인/반려 (Pending approvals, approve/reject)
    - notifications: 알림 조회 및 읽음 처리 (Notifications)
"""

from fastapi import APIRouter

from app.api.v1.issues import router as issues_router
from app.api.v1.notifications import router as notifications_router
from app.api.v1.workflow_steps import router as workflow_steps_router

# v1 통합 라우터 — Aggregated v1 router
api_router: APIRouter = APIRouter()

api_router.include_router(issues_router, prefix="/issues", tags=["Issues"])
api_router.include_router(workflow_steps_router, prefix="/workflow-steps", tags=["Workflow Steps"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
