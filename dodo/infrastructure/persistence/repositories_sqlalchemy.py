"""SQLAlchemy implementations of the record repositories."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dodo.application.interfaces import (
    BlobStore,
    EntityStore,
    JobRepository,
    LullabyRepository,
    RecordRepository,
)
from dodo.domain import models as domain
from dodo.domain.errors import StorageError
from dodo.models import Child, GenerationJob, Lullaby, VoiceProfile

DomainT = TypeVar("DomainT", bound=BaseModel)


@contextmanager
def _storage_errors(action: str, table: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageError(f"Failed to {action} {table}: {exc}") from exc


class SQLAlchemyRepository(RecordRepository[DomainT]):
    """Generic table repository; each call runs in its own short session."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        entity: Type[Any],
        schema: Type[DomainT],
    ) -> None:
        self._session_factory = session_factory
        self._entity = entity
        self._schema = schema
        self._table = entity.__tablename__

    async def insert(self, **values: Any) -> DomainT:
        with _storage_errors("insert into", self._table):
            async with self._session_factory() as session:
                row = self._entity(**values)
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return self._schema.model_validate(row)

    async def update_by_id(self, record_id: UUID, **values: Any) -> Optional[DomainT]:
        with _storage_errors("update", self._table):
            async with self._session_factory() as session:
                row = await session.get(self._entity, record_id)
                if row is None:
                    return None
                for field, value in values.items():
                    setattr(row, field, value)
                await session.commit()
                await session.refresh(row)
                return self._schema.model_validate(row)

    async def get_by_id(self, record_id: UUID) -> Optional[DomainT]:
        with _storage_errors("read", self._table):
            async with self._session_factory() as session:
                row = await session.get(self._entity, record_id)
                return self._schema.model_validate(row) if row else None

    async def list(self, *, newest_first: bool = False) -> List[DomainT]:
        order = (
            self._entity.created_at.desc()
            if newest_first
            else self._entity.created_at.asc()
        )
        with _storage_errors("list", self._table):
            async with self._session_factory() as session:
                result = await session.execute(select(self._entity).order_by(order))
                return [self._schema.model_validate(row) for row in result.scalars().all()]


class SQLAlchemyJobRepository(SQLAlchemyRepository[domain.GenerationJob], JobRepository):
    """Generation job ledger backed by the generation_jobs table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, GenerationJob, domain.GenerationJob)

    async def list_unfinished(self) -> List[domain.GenerationJob]:
        with _storage_errors("list unfinished", self._table):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(GenerationJob)
                    .where(GenerationJob.state != domain.JobState.COMPLETED)
                    .order_by(GenerationJob.created_at.asc())
                )
                return [
                    domain.GenerationJob.model_validate(row)
                    for row in result.scalars().all()
                ]


class SQLAlchemyLullabyRepository(SQLAlchemyRepository[domain.Lullaby], LullabyRepository):
    """Lullaby table with a compare-and-set terminal write."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, Lullaby, domain.Lullaby)

    async def settle(
        self,
        record_id: UUID,
        *,
        status: domain.LullabyStatus,
        audio_url: Optional[str],
    ) -> bool:
        with _storage_errors("settle", self._table):
            async with self._session_factory() as session:
                result = await session.execute(
                    update(Lullaby)
                    .where(
                        Lullaby.id == record_id,
                        Lullaby.status == domain.LullabyStatus.GENERATING,
                    )
                    .values(status=status, audio_url=audio_url)
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
                return result.rowcount == 1


def build_entity_store(
    session_factory: async_sessionmaker[AsyncSession],
    blobs: BlobStore,
) -> EntityStore:
    """Wire every table repository plus the blob store into one adapter."""

    return EntityStore(
        children=SQLAlchemyRepository(session_factory, Child, domain.Child),
        voice_profiles=SQLAlchemyRepository(
            session_factory, VoiceProfile, domain.VoiceProfile
        ),
        lullabies=SQLAlchemyLullabyRepository(session_factory),
        jobs=SQLAlchemyJobRepository(session_factory),
        blobs=blobs,
    )


__all__ = [
    "SQLAlchemyRepository",
    "SQLAlchemyJobRepository",
    "SQLAlchemyLullabyRepository",
    "build_entity_store",
]
