"""Telegram sending helpers with retry support."""

from __future__ import annotations

from typing import Any

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest, TelegramNetworkError
from aiogram.types import Message

from tweetsearch.logging import logger
from tweetsearch.utils.retry import retry_async

TELEGRAM_SEND_MAX_ATTEMPTS = 3
TELEGRAM_SEND_BASE_DELAY = 0.3
TELEGRAM_MESSAGE_LIMIT = 4096


def clip_text(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return f"{text[: limit - 1].rstrip()}…"


async def answer_with_retry(message: Message, text: str, **kwargs: Any) -> Any:
    """Send a reply with retry/backoff."""

    async def _send():
        return await message.answer(clip_text(text), **kwargs)

    return await retry_async(
        _send,
        max_attempts=TELEGRAM_SEND_MAX_ATTEMPTS,
        base_delay=TELEGRAM_SEND_BASE_DELAY,
        retry_on=(TelegramNetworkError,),
        logger=logger,
        operation_name="telegram_answer",
    )


async def bot_send_with_retry(bot: Bot, *, chat_id: int, text: str, **kwargs: Any) -> Any:
    """Send a message via Bot with retry/backoff."""

    async def _send():
        return await bot.send_message(chat_id=chat_id, text=clip_text(text), **kwargs)

    return await retry_async(
        _send,
        max_attempts=TELEGRAM_SEND_MAX_ATTEMPTS,
        base_delay=TELEGRAM_SEND_BASE_DELAY,
        retry_on=(TelegramNetworkError,),
        logger=logger,
        operation_name="telegram_send_message",
    )


async def bot_edit_with_retry(
    bot: Bot,
    *,
    chat_id: int,
    message_id: int,
    text: str,
    **kwargs: Any,
) -> Any:
    """Edit a message in place; an unchanged message is not an error."""

    async def _edit():
        return await bot.edit_message_text(
            text=clip_text(text),
            chat_id=chat_id,
            message_id=message_id,
            **kwargs,
        )

    try:
        return await retry_async(
            _edit,
            max_attempts=TELEGRAM_SEND_MAX_ATTEMPTS,
            base_delay=TELEGRAM_SEND_BASE_DELAY,
            retry_on=(TelegramNetworkError,),
            logger=logger,
            operation_name="telegram_edit_message",
        )
    except TelegramBadRequest as exc:
        if "message is not modified" not in str(exc):
            raise
        logger.debug("telegram_edit_skipped", chat_id=chat_id, message_id=message_id)
        return None


__all__ = ["answer_with_retry", "bot_edit_with_retry", "bot_send_with_retry", "clip_text"]
