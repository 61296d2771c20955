"""Tests for the SearchSession state machine."""

from __future__ import annotations

import pytest

from tweetsearch.domain.models import TweetModel, UserModel
from tweetsearch.domain.rows import RowKind, TextCandidate, TweetCandidate, UserCandidate
from tweetsearch.search.session import SearchSession, SessionState
from tweetsearch.search.strategies import DirectorySearch, DirectorySelect
from tweetsearch.services.exceptions import SessionClosed, UnknownCandidateKind


class StaticSource:
    def __init__(self, rows):
        self.rows = list(rows)
        self.loads = 0

    async def load(self):
        self.loads += 1
        return list(self.rows)


class RecordingNavigator:
    def __init__(self) -> None:
        self.profiles: list[str] = []
        self.searches: list[str] = []
        self.closed = 0

    async def open_profile(self, screenname: str) -> None:
        self.profiles.append(screenname)

    async def open_search(self, query: str) -> None:
        self.searches.append(query)

    async def close(self) -> None:
        self.closed += 1


class RecordingStrategy:
    name = "recording"

    def __init__(self, rows, *, finish_on_select: bool = False) -> None:
        self.rows = rows
        self.selections = []
        self.finished = 0
        self.finish_on_select = finish_on_select

    def mirror_template(self) -> str:
        return "Search `{0}`"

    async def populate(self):
        return list(self.rows)

    async def on_selected(self, selection):
        self.selections.append(selection)
        return self.finish_on_select

    async def on_finish(self) -> None:
        self.finished += 1


def _users(*names):
    return [UserCandidate(name, UserModel(id=i + 1, screenname=name)) for i, name in enumerate(names)]


@pytest.mark.asyncio
async def test_start_shows_all_candidates_and_hides_mirror():
    session = SearchSession(RecordingStrategy([TextCandidate("a"), TextCandidate("b")]))
    assert session.state is SessionState.INITIALIZING

    await session.start()

    assert session.state is SessionState.ACTIVE
    assert session.rows[0] is session.mirror
    assert [row.label for row in session.visible_rows()] == ["a", "b"]
    assert session.visible_indexes() == [1, 2]


@pytest.mark.asyncio
async def test_directory_query_filters_and_shows_mirror_first():
    navigator = RecordingNavigator()
    source = StaticSource(_users("alice", "bob", "carol"))
    session = SearchSession(DirectorySearch(source, navigator))
    await session.start()

    visible = session.change_query("bo")

    assert [row.kind for row in visible] == [RowKind.MIRROR, RowKind.USER]
    assert visible[0].label == "Go to user `bo`"
    assert visible[1].screenname == "bob"
    assert source.loads == 1


@pytest.mark.asyncio
async def test_change_query_requests_refresh():
    refreshed = []
    session = SearchSession(RecordingStrategy([]), on_refresh=lambda s: refreshed.append(s.query))
    await session.start()

    session.change_query("x")
    session.change_query("xy")

    assert refreshed == ["", "x", "xy"]


@pytest.mark.asyncio
async def test_selecting_mirror_uses_latest_query_text():
    strategy = RecordingStrategy([TextCandidate("bar")])
    session = SearchSession(strategy)
    await session.start()

    session.change_query("f")
    session.change_query("fo")
    session.change_query("foo")
    selection = await session.select(0)

    assert selection.text == "foo"
    assert selection.query == "foo"
    assert strategy.selections == [selection]


@pytest.mark.asyncio
async def test_selection_resolves_text_and_user_rows():
    strategy = RecordingStrategy([TextCandidate("bar"), *_users("bob")])
    session = SearchSession(strategy)
    await session.start()
    session.change_query("b")

    text_sel = await session.select(1)
    user_sel = await session.select(2)

    assert (text_sel.text, text_sel.index, text_sel.query) == ("bar", 1, "b")
    assert (user_sel.text, user_sel.index) == ("bob", 2)


@pytest.mark.asyncio
async def test_selecting_unknown_row_kind_raises():
    tweet_row = TweetCandidate(TweetModel(id=1, text="hi", from_user="alice"))
    strategy = RecordingStrategy([tweet_row])
    session = SearchSession(strategy)
    await session.start()

    with pytest.raises(UnknownCandidateKind):
        await session.select(1)
    assert strategy.selections == []


@pytest.mark.asyncio
async def test_finish_terminates_and_rejects_events():
    strategy = RecordingStrategy([])
    session = SearchSession(strategy)
    await session.start()

    await session.finish()

    assert session.state is SessionState.TERMINATED
    assert strategy.finished == 1
    with pytest.raises(SessionClosed):
        session.change_query("late")
    with pytest.raises(SessionClosed):
        await session.select(0)
    with pytest.raises(SessionClosed):
        await session.finish()


@pytest.mark.asyncio
async def test_events_before_start_are_rejected():
    session = SearchSession(RecordingStrategy([]))

    with pytest.raises(SessionClosed):
        session.change_query("early")


@pytest.mark.asyncio
async def test_directory_search_opens_profile():
    navigator = RecordingNavigator()
    session = SearchSession(DirectorySearch(StaticSource(_users("alice", "bob")), navigator))
    await session.start()

    await session.select(2)

    assert navigator.profiles == ["bob"]
    assert session.state is SessionState.ACTIVE


@pytest.mark.asyncio
async def test_directory_select_invokes_callback_then_closes():
    navigator = RecordingNavigator()
    events = []

    async def on_pick(text: str) -> None:
        events.append(("picked", text, navigator.closed))

    strategy = DirectorySelect(StaticSource(_users("alice")), navigator, on_pick)
    session = SearchSession(strategy)
    await session.start()
    assert session.mirror.template == "@{0}"

    session.change_query("zed")
    await session.select(0)

    assert events == [("picked", "zed", 0)]
    assert navigator.closed == 1
    assert session.state is SessionState.TERMINATED


@pytest.mark.asyncio
async def test_directory_select_closes_on_finish():
    navigator = RecordingNavigator()

    async def on_pick(text: str) -> None:
        raise AssertionError("no selection expected")

    session = SearchSession(DirectorySelect(StaticSource([]), navigator, on_pick))
    await session.start()
    await session.finish()

    assert navigator.closed == 1
