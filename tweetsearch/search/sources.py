"""Candidate sources feeding a search session."""

from __future__ import annotations

from typing import Protocol

from tweetsearch.domain.rows import Row, TextCandidate, UserCandidate
from tweetsearch.logging import logger
from tweetsearch.services.directory import UserDirectory
from tweetsearch.services.store import KeyValueStore

HISTORY_COUNT_KEY = "searches"
HISTORY_ENTRY_KEY = "u-{index}"
DEFAULT_HISTORY_LIMIT = 50


class CandidateSource(Protocol):
    async def load(self) -> list[Row]: ...


class DirectorySource:
    """Known users ordered by screenname."""

    def __init__(self, directory: UserDirectory) -> None:
        self._directory = directory

    async def load(self) -> list[Row]:
        users = await self._directory.list_users()
        return [UserCandidate(screenname=user.screenname, user=user) for user in users]


class HistorySource:
    """Past free-text searches persisted in a key/value store.

    The stored layout is a ``searches`` count followed by ``u-0`` ...
    ``u-<n-1>`` entries. Terms are read once; :meth:`record` rewrites the
    whole list, keeping only the ``limit`` most recent terms.
    """

    def __init__(self, store: KeyValueStore, *, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._store = store
        self._limit = limit
        self._stored_count = 0
        self._loaded = False
        self.terms: list[str] = []

    async def load(self) -> list[Row]:
        if not self._loaded:
            count = await self._store.get_int(HISTORY_COUNT_KEY)
            for index in range(count):
                value = await self._store.get_string(HISTORY_ENTRY_KEY.format(index=index))
                if value is None:
                    continue
                self.terms.append(value)
            self._stored_count = count
            self._loaded = True
            logger.debug("history_loaded", count=count, terms=len(self.terms))
        return [TextCandidate(label=term) for term in self.terms]

    async def record(self, term: str) -> None:
        self.terms.append(term)
        if len(self.terms) > self._limit:
            dropped = len(self.terms) - self._limit
            self.terms = self.terms[dropped:]
            logger.info("history_trimmed", dropped=dropped, limit=self._limit)
        await self._persist()

    async def _persist(self) -> None:
        await self._store.set_int(HISTORY_COUNT_KEY, len(self.terms))
        for index, term in enumerate(self.terms):
            await self._store.set_string(HISTORY_ENTRY_KEY.format(index=index), term)
        for index in range(len(self.terms), self._stored_count):
            await self._store.delete(HISTORY_ENTRY_KEY.format(index=index))
        self._stored_count = len(self.terms)


__all__ = [
    "CandidateSource",
    "DirectorySource",
    "HISTORY_COUNT_KEY",
    "HISTORY_ENTRY_KEY",
    "HistorySource",
]
