"""인증 의존성 — 요청자 확인.

Resolves the Bearer token on each request to an active ``User``. Which
role may move or approve what is decided by the workflow core, not here.
"""

from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.repositories.user_repository import user_repository
from app.utils.exceptions import UnauthorizedError
from app.utils.jwt import decode_token

bearer_scheme: HTTPBearer = HTTPBearer()


def _subject(token: str) -> UUID:
    """토큰의 sub 클레임을 UUID로 — The token subject as a UUID."""
    try:
        subject: str | None = decode_token(token).get("sub")
        if subject is None:
            raise UnauthorizedError("Invalid token")
        return UUID(subject)
    except (jwt.InvalidTokenError, ValueError):
        raise UnauthorizedError("Invalid or expired token")


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """현재 요청자 — 존재하고 활성 상태인 사용자만 허용.

    Raises:
        UnauthorizedError: 토큰 무효/만료, 사용자 없음 또는 비활성
                           (Bad or expired token, unknown or inactive user)
    """
    user: User | None = await user_repository.get_by_id(db, _subject(credentials.credentials))
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive")
    return user
