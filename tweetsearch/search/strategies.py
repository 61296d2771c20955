"""Search strategies: mirror template, candidate population and selection policy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from tweetsearch.domain.rows import Row
from tweetsearch.logging import logger
from tweetsearch.search.sources import CandidateSource, HistorySource

DIRECTORY_TEMPLATE = "Go to user `{0}`"
SELECT_TEMPLATE = "@{0}"
HISTORY_TEMPLATE = "Search `{0}`"


@dataclass(frozen=True, slots=True)
class Selection:
    """A resolved tap: the row's text, its index and the live query."""

    text: str
    index: int
    query: str


class Navigator(Protocol):
    """Surface-level actions a strategy can trigger."""

    async def open_profile(self, screenname: str) -> None: ...

    async def open_search(self, query: str) -> None: ...

    async def close(self) -> None: ...


class SearchStrategy(Protocol):
    name: str

    def mirror_template(self) -> str: ...

    async def populate(self) -> list[Row]: ...

    async def on_selected(self, selection: Selection) -> bool:
        """Handle a selection; return ``True`` to finish the session."""
        ...

    async def on_finish(self) -> None: ...


class DirectorySearch:
    """Browse known users and open the chosen profile."""

    name = "directory"

    def __init__(
        self,
        source: CandidateSource,
        navigator: Navigator,
        *,
        template: str = DIRECTORY_TEMPLATE,
    ) -> None:
        self._source = source
        self._navigator = navigator
        self._template = template

    def mirror_template(self) -> str:
        return self._template

    async def populate(self) -> list[Row]:
        return await self._source.load()

    async def on_selected(self, selection: Selection) -> bool:
        logger.info("directory_user_opened", screenname=selection.text)
        await self._navigator.open_profile(selection.text)
        return False

    async def on_finish(self) -> None:
        return None


class DirectorySelect:
    """Pick a user and hand the screenname back to the caller."""

    name = "directory_select"

    def __init__(
        self,
        source: CandidateSource,
        navigator: Navigator,
        on_pick: Callable[[str], Awaitable[None]],
        *,
        template: str = SELECT_TEMPLATE,
    ) -> None:
        self._source = source
        self._navigator = navigator
        self._on_pick = on_pick
        self._template = template

    def mirror_template(self) -> str:
        return self._template

    async def populate(self) -> list[Row]:
        return await self._source.load()

    async def on_selected(self, selection: Selection) -> bool:
        await self._on_pick(selection.text)
        return True

    async def on_finish(self) -> None:
        await self._navigator.close()


class HistorySearch:
    """Re-run past searches; the typed query is remembered on selection."""

    name = "history"

    def __init__(
        self,
        history: HistorySource,
        navigator: Navigator,
        *,
        template: str = HISTORY_TEMPLATE,
    ) -> None:
        self._history = history
        self._navigator = navigator
        self._template = template

    def mirror_template(self) -> str:
        return self._template

    async def populate(self) -> list[Row]:
        return await self._history.load()

    async def on_selected(self, selection: Selection) -> bool:
        if selection.query:
            await self._history.record(selection.query)
        else:
            logger.info("history_persist_skipped", reason="empty_mirror_selection", text=selection.text)
        await self._navigator.open_search(selection.text)
        return False

    async def on_finish(self) -> None:
        return None


__all__ = [
    "DIRECTORY_TEMPLATE",
    "DirectorySearch",
    "DirectorySelect",
    "HISTORY_TEMPLATE",
    "HistorySearch",
    "Navigator",
    "SELECT_TEMPLATE",
    "SearchStrategy",
    "Selection",
]
