"""Per-account key/value settings store."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tweetsearch.db.models.core import SettingEntry
from tweetsearch.db.session import Database
from tweetsearch.logging import logger


class KeyValueStore(Protocol):
    async def get_int(self, key: str) -> int: ...

    async def set_int(self, key: str, value: int) -> None: ...

    async def get_string(self, key: str) -> str | None: ...

    async def set_string(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class DbKeyValueStore:
    """Key/value pairs stored in ``settings_entries`` for a single account.

    Every call runs in its own committed unit of work so the store can
    outlive the update that created it. Missing integers read as ``0`` and
    missing strings as ``None``.
    """

    def __init__(self, database: Database, account_id: int) -> None:
        self._database = database
        self.account_id = account_id

    async def _find(self, session: AsyncSession, key: str) -> SettingEntry | None:
        stmt = select(SettingEntry).where(
            SettingEntry.account_id == self.account_id,
            SettingEntry.key == key,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def _upsert(self, key: str, *, int_value: int | None = None, str_value: str | None = None) -> None:
        async with self._database.session() as session:
            entry = await self._find(session, key)
            if entry is None:
                entry = SettingEntry(account_id=self.account_id, key=key)
                session.add(entry)
            entry.int_value = int_value
            entry.str_value = str_value
            await session.commit()

    async def get_int(self, key: str) -> int:
        async with self._database.session() as session:
            entry = await self._find(session, key)
        if entry is None or entry.int_value is None:
            return 0
        return entry.int_value

    async def set_int(self, key: str, value: int) -> None:
        await self._upsert(key, int_value=value)

    async def get_string(self, key: str) -> str | None:
        async with self._database.session() as session:
            entry = await self._find(session, key)
        return entry.str_value if entry is not None else None

    async def set_string(self, key: str, value: str) -> None:
        await self._upsert(key, str_value=value)

    async def delete(self, key: str) -> None:
        async with self._database.session() as session:
            await session.execute(
                delete(SettingEntry).where(
                    SettingEntry.account_id == self.account_id,
                    SettingEntry.key == key,
                )
            )
            await session.commit()
        logger.debug("settings_entry_deleted", account_id=self.account_id, key=key)


__all__ = ["DbKeyValueStore", "KeyValueStore"]
