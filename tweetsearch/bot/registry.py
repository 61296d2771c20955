"""In-process bookkeeping of open search surfaces per chat."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tweetsearch.logging import logger
from tweetsearch.search.remote import RemoteTweetSearch
from tweetsearch.search.session import SearchSession

if TYPE_CHECKING:
    from tweetsearch.bot.views import SessionScreen
    from tweetsearch.search.strategies import Navigator


@dataclass(slots=True)
class ActiveSearch:
    session: SearchSession
    navigator: "Navigator"
    screen: "SessionScreen"
    message_id: int | None = None
    last_query_message_id: int = 0

    def accept_query(self, message_id: int) -> bool:
        """Whether a query message is newer than the last one applied.

        Updates are dispatched as concurrent tasks, so keystrokes can reach
        the handler out of order; Telegram message ids increase per chat.
        """

        if message_id <= self.last_query_message_id:
            return False
        self.last_query_message_id = message_id
        return True


class SessionRegistry:
    """One interactive session per chat plus remote searches by results message.

    Updates are handled on a single event loop, so plain dicts are enough.
    """

    def __init__(self, max_remote_searches: int = 200) -> None:
        self._sessions: dict[int, ActiveSearch] = {}
        self._remote: dict[tuple[int, int], RemoteTweetSearch] = {}
        self._max_remote = max_remote_searches

    def get(self, chat_id: int) -> ActiveSearch | None:
        return self._sessions.get(chat_id)

    def open(self, chat_id: int, active: ActiveSearch) -> ActiveSearch | None:
        """Register ``active``; returns the session it replaces, if any."""

        previous = self._sessions.get(chat_id)
        self._sessions[chat_id] = active
        logger.debug("search_session_registered", chat_id=chat_id, strategy=active.session.strategy.name)
        return previous

    def close(self, chat_id: int) -> ActiveSearch | None:
        return self._sessions.pop(chat_id, None)

    def track_remote(self, chat_id: int, message_id: int, search: RemoteTweetSearch) -> None:
        self._remote[(chat_id, message_id)] = search
        while len(self._remote) > self._max_remote:
            oldest = next(iter(self._remote))
            del self._remote[oldest]

    def remote(self, chat_id: int, message_id: int) -> RemoteTweetSearch | None:
        return self._remote.get((chat_id, message_id))


__all__ = ["ActiveSearch", "SessionRegistry"]
