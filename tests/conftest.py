"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite (aiosqlite) DB, session, and httpx
client fixtures. Each test gets a fresh database; the schema is created
from the ORM metadata.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.utils.jwt import create_access_token

# ---------------------------------------------------------------------------
# 테스트 DB 설정 — 연결 하나를 공유하는 인메모리 DB
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 스키마를 새로 생성합니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def session_client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient, None]:
    """요청마다 새 세션을 여는 클라이언트 (운영 get_db와 같은 트랜잭션 경계).

    Client whose requests each get their own session, closed (and so rolled
    back) at the end of the request like the production ``get_db``. Data set
    up through ``db`` must be committed first. Unhandled errors come back as
    500 responses.
    """
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 사용자 생성
# ---------------------------------------------------------------------------
async def _make_user(db: AsyncSession, email: str, full_name: str, role: str, is_active: bool = True):
    from app.models.user import User
    user = User(email=email, full_name=full_name, role=role, is_active=is_active)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def developer(db: AsyncSession):
    """개발자 사용자를 생성합니다."""
    return await _make_user(db, "dev@test.com", "Test Developer", "developer")


@pytest_asyncio.fixture
async def qa_user(db: AsyncSession):
    """QA 사용자를 생성합니다."""
    return await _make_user(db, "qa@test.com", "Test QA", "qa")


@pytest_asyncio.fixture
async def pm_user(db: AsyncSession):
    """프로덕트 매니저 사용자를 생성합니다."""
    return await _make_user(db, "pm@test.com", "Test PM", "product_manager")


@pytest_asyncio.fixture
async def reporter(db: AsyncSession):
    """이슈 작성자 (개발자 역할) 를 생성합니다."""
    return await _make_user(db, "reporter@test.com", "Test Reporter", "developer")


@pytest_asyncio.fixture
async def inactive_user(db: AsyncSession):
    return await _make_user(db, "gone@test.com", "Inactive User", "qa", is_active=False)


def make_token(user) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id)})


def auth_header(token_or_user) -> dict[str, str]:
    token = token_or_user if isinstance(token_or_user, str) else make_token(token_or_user)
    return {"Authorization": f"Bearer {token}"}
