"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per API request to Axiom: endpoint, method,
status, duration, the requesting user, and for workflow calls the issue or
step being acted on and the requested status. Sensitive fields are masked.
Pass-through when AXIOM_API_TOKEN/AXIOM_DATASET are not configured.
"""

import json
import logging
import re
import time
from typing import Any

import jwt
from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings
from app.utils.jwt import decode_token

logger: logging.Logger = logging.getLogger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and query strings
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

# 워크플로우 경로 — /api/v1/issues/{id}/... and /api/v1/workflow-steps/{id}/...
_WORKFLOW_PATH = re.compile(
    r"/api/v1/(?P<resource>issues|workflow-steps)/(?P<id>[0-9a-fA-F-]{36})(?:/(?P<action>[a-z-]+))?"
)

_MAX_ERROR_LEN = 500


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(k) else _mask(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > 2000:
        return data[:2000] + "...(truncated)"
    return data


def _user_id(request: Request) -> str | None:
    """Bearer 토큰의 sub (검증 실패 시 None) — Token subject, None when absent or invalid."""
    header = request.headers.get("authorization", "")
    if not header.lower().startswith("bearer "):
        return None
    try:
        return decode_token(header[7:]).get("sub")
    except jwt.InvalidTokenError:
        return None


def _workflow_fields(path: str, body: Any) -> dict[str, Any]:
    match = _WORKFLOW_PATH.match(path)
    if match is None:
        return {}
    key = "issue_id" if match.group("resource") == "issues" else "workflow_step_id"
    fields: dict[str, Any] = {key: match.group("id")}
    if match.group("action"):
        fields["action"] = match.group("action")
    if isinstance(body, dict) and "to_status" in body:
        fields["to_status"] = body["to_status"]
    return fields


async def _read_body(request: Request) -> Any:
    body_bytes = await request.body()
    if not body_bytes:
        return None
    try:
        return _mask(json.loads(body_bytes))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


async def _drain_error(response: Response) -> tuple[Response, str]:
    """에러 응답 본문에서 사유 추출 후 응답 재구성.

    Read the error detail out of a streamed error response and return an
    equivalent response built from the consumed body.
    """
    body = b""
    async for chunk in response.body_iterator:
        body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

    try:
        data = json.loads(body)
        detail = data.get("detail", data) if isinstance(data, dict) else data
        error = detail if isinstance(detail, str) else json.dumps(detail, default=str)
    except (json.JSONDecodeError, UnicodeDecodeError):
        error = body.decode("utf-8", errors="replace")

    rebuilt = Response(
        content=body,
        status_code=response.status_code,
        headers=dict(response.headers),
        media_type=response.media_type,
    )
    return rebuilt, error[:_MAX_ERROR_LEN]


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs all API requests and responses to Axiom.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 제외 경로 및 미설정시 패스스루 — Skip excluded paths, pass through if Axiom not configured
        if not self._client or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.time()
        body: Any = await _read_body(request) if request.method in ("POST", "PUT", "PATCH") else None

        event: dict[str, Any] = {
            "service": settings.APP_NAME,
            "method": request.method,
            "path": request.url.path,
            "status_code": 500,
            "user_id": _user_id(request),
            **_workflow_fields(request.url.path, body),
        }
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))
        if body is not None:
            event["request_body"] = body

        try:
            response = await call_next(request)
            event["status_code"] = response.status_code
            if response.status_code >= 400:
                response, event["error"] = await _drain_error(response)
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.time() - start_time) * 1000, 2)
            self._send(event)

        return response

    def _send(self, event: dict[str, Any]) -> None:
        # 로깅 실패는 요청 처리에 영향 없음 — A failed ingest never fails the request
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            logger.warning("Axiom ingest failed for %s %s", event["method"], event["path"], exc_info=True)
