"""One-shot remote search pipeline: download, parse, render."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, Sequence, Union
from urllib.parse import quote_plus

from tweetsearch.config import RemoteSearchSettings
from tweetsearch.domain.models import TweetModel
from tweetsearch.domain.rows import ErrorCandidate, Row, Section, TweetCandidate
from tweetsearch.logging import logger

DEFAULT_ERROR_LABEL = "Unable to load search results"


@dataclass(frozen=True, slots=True)
class FetchIdle:
    pass


@dataclass(frozen=True, slots=True)
class FetchInFlight:
    request_id: int
    query: str


@dataclass(frozen=True, slots=True)
class FetchLoaded:
    items: tuple[TweetModel, ...]


@dataclass(frozen=True, slots=True)
class FetchFailed:
    reason: str


FetchState = Union[FetchIdle, FetchInFlight, FetchLoaded, FetchFailed]


class DownloadClient(Protocol):
    async def download(self, url: str) -> bytes | None: ...


class ResultView(Protocol):
    """Hosting view of a remote search."""

    async def show_progress(self, title: str) -> None: ...

    async def show_error(self, section: Section) -> None: ...

    async def show_results(self, section: Section) -> None: ...

    async def reload_complete(self) -> None: ...


Parser = Callable[[bytes], Sequence[TweetModel]]
LoadedHook = Callable[[Sequence[TweetModel]], Awaitable[None]]


class RemoteSearchFetch:
    """Issue remote searches and publish their outcome to a view.

    Each call to :meth:`fetch` gets a monotonically increasing request id.
    Overlapping fetches are not cancelled, but a completion whose id is no
    longer the latest is discarded, so the newest request always wins.
    """

    def __init__(
        self,
        downloader: DownloadClient,
        parser: Parser,
        view: ResultView,
        *,
        error_label: str = DEFAULT_ERROR_LABEL,
        on_loaded: LoadedHook | None = None,
    ) -> None:
        self._downloader = downloader
        self._parser = parser
        self.view = view
        self._error_label = error_label
        self._on_loaded = on_loaded
        self._latest_request = 0
        self.state: FetchState = FetchIdle()
        self.sections: list[Section] = []

    @property
    def rows(self) -> list[Row]:
        return self.sections[0].rows if self.sections else []

    async def fetch(self, query: str, url: str) -> FetchState | None:
        """Run one download/parse cycle; ``None`` means the result went stale."""

        self._latest_request += 1
        request_id = self._latest_request
        self.state = FetchInFlight(request_id=request_id, query=query)
        logger.info("remote_fetch_started", request_id=request_id, query=query)

        data = await self._downloader.download(url)
        if request_id != self._latest_request:
            logger.info(
                "remote_fetch_stale",
                request_id=request_id,
                latest_request=self._latest_request,
                query=query,
            )
            return None

        if data is None:
            self.state = FetchFailed(reason="download returned no data")
            section = Section(title=query, rows=[ErrorCandidate(label=self._error_label)])
            self.sections = [section]
            logger.warning("remote_fetch_failed", request_id=request_id, query=query)
            await self.view.show_error(section)
            return self.state

        try:
            items = tuple(self._parser(data))
        except Exception:
            logger.exception("remote_fetch_parse_failed", request_id=request_id, query=query)
            items = ()

        self.state = FetchLoaded(items=items)
        section = Section(title=query, rows=[TweetCandidate(tweet=item) for item in items])
        self.sections = [section]
        logger.info("remote_fetch_loaded", request_id=request_id, query=query, items=len(items))
        await self.view.show_results(section)
        await self.view.reload_complete()
        if self._on_loaded is not None and items:
            await self._on_loaded(items)
        return self.state


class RemoteTweetSearch:
    """Keyword tweet search for a fixed query."""

    name = "remote"

    def __init__(
        self,
        query: str,
        fetch: RemoteSearchFetch,
        settings: RemoteSearchSettings | None = None,
    ) -> None:
        self.query = query
        self._fetch = fetch
        self._settings = settings or RemoteSearchSettings()

    @property
    def title(self) -> str:
        return self.query

    @property
    def pipeline(self) -> RemoteSearchFetch:
        return self._fetch

    def build_url(self) -> str:
        endpoint = str(self._settings.endpoint)
        separator = "&" if "?" in endpoint else "?"
        return f"{endpoint}{separator}q={quote_plus(self.query)}"

    async def refresh(self) -> FetchState | None:
        await self._fetch.view.show_progress(self.title)
        return await self._fetch.fetch(self.query, self.build_url())


__all__ = [
    "DEFAULT_ERROR_LABEL",
    "FetchFailed",
    "FetchIdle",
    "FetchInFlight",
    "FetchLoaded",
    "FetchState",
    "RemoteSearchFetch",
    "RemoteTweetSearch",
    "ResultView",
]
