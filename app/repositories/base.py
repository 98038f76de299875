"""기본 레포지토리 — 모든 레포지토리의 부모 클래스.

Base repository shared by the domain repositories: lookup by id, paging,
create, partial update, and the conditional update (compare-and-swap) the
workflow stores build their status guards on.

Usage:
    class IssueRepository(BaseRepository[Issue]):
        def __init__(self) -> None:
            super().__init__(Issue)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

# SQLAlchemy 모델 타입 변수 — Model type handled by a repository
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """모델 하나에 대한 공통 쿼리.

    Attributes:
        model: 대상 SQLAlchemy 모델 클래스 (Managed model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> ModelType | None:
        result = await db.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """정렬된 쿼리의 한 페이지와 전체 개수를 반환합니다.

        Run ``query`` for one page and count all of its rows.

        Returns:
            tuple[Sequence[ModelType], int]: (페이지 항목, 전체 개수) (Page items, total rows)
        """
        # 정렬 제거 후 카운트 — Count without the ORDER BY
        count_query: Select = select(func.count()).select_from(query.order_by(None).subquery())
        total: int = (await db.execute(count_query)).scalar() or 0

        result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
        return result.scalars().all(), total

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """레코드를 추가하고 flush 후 DB 기본값까지 읽어 반환합니다.

        Insert a row, flush, and return it with server/default values loaded.
        The caller owns the commit.
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
    ) -> ModelType | None:
        """부분 업데이트 — 전달된 필드만 변경 (None 값 포함).

        Apply the given fields (None included) to the row; None when missing.
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return None

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update_where(
        self,
        db: AsyncSession,
        record_id: UUID,
        expected: dict[str, Any],
        values: dict[str, Any],
    ) -> ModelType | None:
        """조건이 일치할 때만 레코드를 업데이트합니다 (compare-and-swap).

        Atomically update a record only while its columns still hold the
        ``expected`` values. A single ``UPDATE ... WHERE`` statement, so the
        check and the write cannot interleave with another request.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 업데이트할 레코드의 UUID (UUID of the record to update)
            expected: 현재 값 조건 {'컬럼명': 값} (Expected current column values)
            values: 새 값 (New column values)

        Returns:
            ModelType | None: 갱신된 레코드, 조건 불일치/미존재 시 None
                              (Updated record, or None when missing or changed)
        """
        stmt = update(self.model).where(self.model.id == record_id)
        for column_name, value in expected.items():
            stmt = stmt.where(getattr(self.model, column_name) == value)
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        result = await db.execute(stmt)
        if result.rowcount != 1:
            return None

        # 세션 캐시의 낡은 객체를 DB 값으로 갱신 — Reload the row over any stale identity-map copy
        return await db.get(self.model, record_id, populate_existing=True)

    async def delete(self, db: AsyncSession, record_id: UUID) -> bool:
        """레코드 삭제, 없으면 False (Delete a row; False when it does not exist)."""
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return False

        await db.delete(db_obj)
        await db.flush()
        return True
