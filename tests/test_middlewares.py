"""Tests for the account, throttle and db-session middlewares."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy import select

from tweetsearch.bot.middlewares import throttle as throttle_module
from tweetsearch.bot.middlewares.account import AccountMiddleware
from tweetsearch.bot.middlewares.db_session import DbSessionMiddleware
from tweetsearch.bot.middlewares.throttle import ThrottleMiddleware
from tweetsearch.db.models.core import Account


class DummyFromUser:
    def __init__(self, user_id: int = 1, username: str | None = None, language_code: str | None = "en") -> None:
        self.id = user_id
        self.username = username or f"user{user_id}"
        self.language_code = language_code
        self.full_name = "Test User"


class DummyMessage:
    def __init__(self, text: str = "hi", from_user: DummyFromUser | None = None) -> None:
        self.text = text
        self.from_user = from_user or DummyFromUser()
        self.answers: list[tuple[str, str | None]] = []

    async def answer(self, text: str, parse_mode: str | None = None):
        self.answers.append((text, parse_mode))
        return text


class DummyCallback:
    def __init__(self, from_user: DummyFromUser | None = None) -> None:
        self.from_user = from_user or DummyFromUser()
        self.answers: list[str] = []

    async def answer(self, text: str | None = None, **kwargs):
        self.answers.append(text)


@pytest.fixture(autouse=True)
def patch_aiogram_types(monkeypatch):
    monkeypatch.setattr(throttle_module, "Message", DummyMessage)
    monkeypatch.setattr(throttle_module, "CallbackQuery", DummyCallback)


@pytest.mark.asyncio
async def test_account_middleware_creates_account_once(session):
    middleware = AccountMiddleware()
    seen = []

    async def handler(event, data):
        seen.append(data["account"])
        return "ok"

    message = DummyMessage(from_user=DummyFromUser(user_id=10, language_code=None))
    assert await middleware(handler, message, {"session": session}) == "ok"
    await middleware(handler, message, {"session": session})

    accounts = (await session.execute(select(Account))).scalars().all()
    assert len(accounts) == 1
    assert accounts[0].telegram_id == 10
    assert accounts[0].language_code == "en"
    assert seen[0] is seen[1]
    assert seen[0].last_seen_at is not None


@pytest.mark.asyncio
async def test_account_middleware_passes_through_without_sender():
    middleware = AccountMiddleware()
    event = SimpleNamespace(from_user=None)

    async def handler(event, data):
        assert "account" not in data
        return "ok"

    assert await middleware(handler, event, {}) == "ok"


@pytest.mark.asyncio
async def test_throttle_blocks_excess_messages():
    settings = SimpleNamespace(request_limit=SimpleNamespace(interval_seconds=60, max_requests=1))
    middleware = ThrottleMiddleware(settings)
    message = DummyMessage(text="go")
    handled = []

    async def handler(event, data):
        handled.append("called")
        return "ok"

    await middleware(handler, message, {})
    await middleware(handler, message, {})

    assert handled == ["called"]
    assert message.answers[-1][0].startswith("Too many")


@pytest.mark.asyncio
async def test_throttle_answers_callbacks():
    settings = SimpleNamespace(request_limit=SimpleNamespace(interval_seconds=60, max_requests=1))
    middleware = ThrottleMiddleware(settings)
    callback = DummyCallback()

    async def handler(event, data):
        return "ok"

    assert await middleware(handler, callback, {}) == "ok"
    assert await middleware(handler, callback, {}) is None
    assert callback.answers[-1].startswith("Too many")


class DummyDbSession:
    def __init__(self) -> None:
        self.committed = 0
        self.rolled_back = 0

    async def commit(self) -> None:
        self.committed += 1

    async def rollback(self) -> None:
        self.rolled_back += 1


class SingleSessionDatabase:
    def __init__(self, session) -> None:
        self._session = session

    def session(self):
        outer = self

        class _Wrapper:
            async def __aenter__(self):
                return outer._session

            async def __aexit__(self, exc_type, exc, tb):
                return False

        return _Wrapper()


@pytest.mark.asyncio
async def test_db_session_middleware_commits():
    db_session = DummyDbSession()
    middleware = DbSessionMiddleware(SingleSessionDatabase(db_session))

    async def handler(event, data):
        assert data["session"] is db_session
        return "ok"

    assert await middleware(handler, object(), {}) == "ok"
    assert (db_session.committed, db_session.rolled_back) == (1, 0)


@pytest.mark.asyncio
async def test_db_session_middleware_rolls_back():
    db_session = DummyDbSession()
    middleware = DbSessionMiddleware(SingleSessionDatabase(db_session))

    async def handler(event, data):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await middleware(handler, object(), {})
    assert (db_session.committed, db_session.rolled_back) == (0, 1)
