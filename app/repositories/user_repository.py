"""사용자 레포지토리 — 역할 기반 사용자 조회.

User Repository — Role lookups used to pick and authorize approvers.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def find_active_by_role(
        self,
        db: AsyncSession,
        role: str,
    ) -> User | None:
        """역할을 가진 활성 사용자 한 명을 조회합니다.

        Return one active user holding ``role``. Among several candidates
        the one with the lowest id is chosen, so the pick is deterministic.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            role: 워크플로우 역할 (developer | qa | product_manager)

        Returns:
            User | None: 사용자 또는 None (User, or None when nobody holds the role)
        """
        query: Select = (
            select(User)
            .where(User.role == role, User.is_active.is_(True))
            .order_by(User.id)
            .limit(1)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_active(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> User | None:
        result = await db.execute(
            select(User).where(User.id == user_id, User.is_active.is_(True))
        )
        return result.scalar_one_or_none()


user_repository: UserRepository = UserRepository()
