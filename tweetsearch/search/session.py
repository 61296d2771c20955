"""Incremental search session: query changes, filtering and selection dispatch."""

from __future__ import annotations

from enum import Enum
from typing import Callable

from tweetsearch.domain.rows import MirrorCandidate, Row, RowKind, row_matches
from tweetsearch.logging import logger
from tweetsearch.search.strategies import SearchStrategy, Selection
from tweetsearch.services.exceptions import SessionClosed, UnknownCandidateKind


class SessionState(str, Enum):
    INITIALIZING = "initializing"
    ACTIVE = "active"
    TERMINATED = "terminated"


class SearchSession:
    """Drives one search surface from activation to dismissal.

    The working list is ``[mirror, *candidates]`` and never changes after
    :meth:`start`; query changes only recompute which indexes are visible.
    Selections refer to indexes of the working list.
    """

    def __init__(
        self,
        strategy: SearchStrategy,
        *,
        on_refresh: Callable[["SearchSession"], None] | None = None,
    ) -> None:
        self.strategy = strategy
        self.state = SessionState.INITIALIZING
        self.mirror: MirrorCandidate | None = None
        self.rows: list[Row] = []
        self._visible: list[int] = []
        self._on_refresh = on_refresh

    @property
    def query(self) -> str:
        return self.mirror.text if self.mirror is not None else ""

    async def start(self) -> None:
        if self.state is not SessionState.INITIALIZING:
            raise SessionClosed(f"session already {self.state.value}")
        self.mirror = MirrorCandidate(self.strategy.mirror_template())
        candidates = await self.strategy.populate()
        self.rows = [self.mirror, *candidates]
        self.state = SessionState.ACTIVE
        logger.info(
            "search_session_started",
            strategy=self.strategy.name,
            candidates=len(candidates),
        )
        self.change_query("")

    def change_query(self, text: str) -> list[Row]:
        self._ensure_active("change_query")
        assert self.mirror is not None
        self.mirror.set_text(text)
        self._visible = [index for index, row in enumerate(self.rows) if row_matches(row, text)]
        if self._on_refresh is not None:
            self._on_refresh(self)
        return self.visible_rows()

    def visible_indexes(self) -> list[int]:
        return list(self._visible)

    def visible_rows(self) -> list[Row]:
        return [self.rows[index] for index in self._visible]

    @staticmethod
    def resolve_text(row: Row) -> str:
        kind = getattr(row, "kind", None)
        if kind is RowKind.MIRROR:
            return row.text
        if kind is RowKind.TEXT:
            return row.label
        if kind is RowKind.USER:
            return row.screenname
        raise UnknownCandidateKind(f"cannot select row of kind {kind!r}")

    async def select(self, index: int) -> Selection:
        self._ensure_active("select")
        row = self.rows[index]
        selection = Selection(text=self.resolve_text(row), index=index, query=self.query)
        logger.info(
            "search_row_selected",
            strategy=self.strategy.name,
            index=index,
            kind=row.kind.value,
        )
        if await self.strategy.on_selected(selection):
            await self.finish()
        return selection

    async def finish(self) -> None:
        self._ensure_active("finish")
        self.state = SessionState.TERMINATED
        await self.strategy.on_finish()
        logger.info("search_session_finished", strategy=self.strategy.name)

    def _ensure_active(self, operation: str) -> None:
        if self.state is not SessionState.ACTIVE:
            raise SessionClosed(f"cannot {operation}: session is {self.state.value}")


__all__ = ["SearchSession", "SessionState"]
