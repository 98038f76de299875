"""JWT 액세스 토큰 유틸리티.

Access tokens are issued by the external auth service; this API verifies
them with the shared secret. ``create_access_token`` exists for local
tooling and the test suite.

Payload: {"sub": "<user uuid>", "exp": <unix timestamp>}
"""

from datetime import datetime, timedelta, timezone
from typing import Any
import jwt

from app.config import settings


def create_access_token(data: dict[str, Any]) -> str:
    """``data``에 만료 시각을 붙여 서명한 토큰 — Signed token for ``data`` plus an expiry claim."""
    expires_at: datetime = datetime.now(timezone.utc) + timedelta(
        minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
    )
    claims: dict[str, Any] = {**data, "exp": expires_at}
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """서명과 만료를 검증하고 클레임을 반환합니다.

    Raises:
        jwt.InvalidTokenError: 서명 불일치, 만료 등 (Bad signature, expired, malformed)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
