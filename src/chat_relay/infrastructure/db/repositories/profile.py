from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from chat_relay.application.exceptions import StoreError
from chat_relay.domain.entities.profile import Profile
from chat_relay.infrastructure.db.mappers import profile as mapper
from chat_relay.infrastructure.db.models.profile import ProfileModel

_INSERTS: dict[str, Callable[..., Any]] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class ProfileReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_profiles(self) -> dict[str, Profile]:
        result = await self._session.execute(select(ProfileModel))
        return {m.id: mapper.model_to_entity(m) for m in result.scalars().all()}


class ProfileWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, profile: Profile) -> None:
        """Insert the profile or overwrite every column of the existing row."""
        dialect = self._session.bind.dialect.name
        insert = _INSERTS.get(dialect)
        if insert is None:
            raise StoreError(f"profile upsert not supported on {dialect}")

        stmt = insert(ProfileModel).values(**mapper.entity_to_values(profile))
        stmt = stmt.on_conflict_do_update(
            index_elements=[ProfileModel.id],
            set_={
                "name": stmt.excluded.name,
                "avatar": stmt.excluded.avatar,
                "pseudo": stmt.excluded.pseudo,
            },
        )
        await self._session.execute(stmt)
