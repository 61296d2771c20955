"""Resolve the Telegram sender to a persisted account."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tweetsearch.db.models.core import Account
from tweetsearch.logging import logger
from tweetsearch.utils.datetime import utc_now


class AccountMiddleware(BaseMiddleware):
    """Inject ``account`` for every update that carries a sender."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        from_user = getattr(event, "from_user", None)
        if from_user is None:
            return await handler(event, data)

        session: AsyncSession = data["session"]
        result = await session.execute(select(Account).where(Account.telegram_id == from_user.id))
        account = result.scalar_one_or_none()
        if account is None:
            account = Account(
                telegram_id=from_user.id,
                username=from_user.username,
                language_code=from_user.language_code or "en",
            )
            session.add(account)
            await session.flush()
            logger.info("account_created", account_id=account.id, telegram_id=from_user.id)

        account.last_seen_at = utc_now()
        data["account"] = account
        return await handler(event, data)


__all__ = ["AccountMiddleware"]
