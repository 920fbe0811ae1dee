"""
Magasin cle-valeur / Key-value store.
Lecture/ecriture de chaines par cle fixe, adosse a la table kv_entries.
Get/set strings by fixed key, backed by the kv_entries table.
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inspection_pro.database import init_db
from inspection_pro.models.key_value import KeyValueEntry


class KeyValueStore:
    """Magasin cle-valeur SQL / SQL key-value store."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def init_schema(self) -> None:
        """Creer la table si absente / Create the table if missing."""
        await init_db(self._session_factory.kw["bind"])

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            result = await session.execute(select(KeyValueEntry.value).where(KeyValueEntry.key == key))
            return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat(timespec="seconds")
        async with self._session_factory() as session:
            entry = await session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value, updated_at=now))
            else:
                entry.value = value
                entry.updated_at = now
            await session.commit()
