"""데이터베이스 엔진 및 세션 설정 모듈.

Async SQLAlchemy engine, session factory and declarative base for the
issue workflow database (PostgreSQL via asyncpg).
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

# DEBUG이면 SQL 출력 — SQL echo follows DEBUG
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# 커밋 후에도 응답 생성 시 속성 접근 가능 — Objects stay readable after the router commits
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """ORM 모델 공통 베이스 — Declarative base of every model."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 세션 의존성.

    Request-scoped session. Routers commit explicitly; anything left
    uncommitted when the request ends, including after an error, is rolled
    back by ``close()``.
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
