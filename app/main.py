"""이슈 워크플로우 API 엔트리포인트.

Builds the FastAPI app: request logging to Axiom, CORS, ``/health`` and
the versioned API under ``/api/v1``.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import api_router
from app.config import settings
from app.middleware.axiom_logging import AxiomLoggingMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app: FastAPI = FastAPI(title=settings.APP_NAME, version="1.0.0")

# Axiom 요청/응답 로깅 — One Axiom event per API request
app.add_middleware(AxiomLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """로드밸런서 헬스체크 — Liveness probe."""
    return {"status": "ok"}
