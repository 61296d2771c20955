"""Log unhandled bot errors and notify the administrator."""

from __future__ import annotations

import traceback

from aiogram import Bot
from aiogram.dispatcher.event.bases import UNHANDLED
from aiogram.types import ErrorEvent, Update

from tweetsearch.bot.utils.telegram import bot_send_with_retry
from tweetsearch.config import SearchBotSettings
from tweetsearch.logging import logger

TRACEBACK_CHAR_LIMIT = 1800


class ErrorMonitor:
    """Error observer; register ``handle_error`` on the dispatcher."""

    def __init__(self, settings: SearchBotSettings) -> None:
        self._settings = settings

    async def handle_error(self, event: ErrorEvent, bot: Bot):
        update_id = getattr(event.update, "update_id", None)
        logger.error(
            "bot_error_captured",
            exception_type=event.exception.__class__.__name__,
            exception=str(event.exception),
            update_id=update_id,
            update_type=self._update_type(event.update),
        )

        admin_id = self._settings.admin_telegram_id
        if admin_id is None:
            return UNHANDLED
        try:
            await bot_send_with_retry(bot, chat_id=admin_id, text=self._build_message(event), parse_mode=None)
        except Exception:
            logger.exception("error_monitor_notification_failed", update_id=update_id)
        return UNHANDLED

    def _build_message(self, event: ErrorEvent) -> str:
        exception = event.exception
        lines = [
            "SEARCH BOT ERROR",
            f"Environment: {self._settings.environment}",
            f"Exception: {exception.__class__.__name__}: {exception}",
            f"Update ID: {getattr(event.update, 'update_id', 'unknown')}",
            f"Update Type: {self._update_type(event.update)}",
        ]
        trace = "".join(traceback.format_exception(exception.__class__, exception, exception.__traceback__)).strip()
        if trace:
            if len(trace) > TRACEBACK_CHAR_LIMIT:
                trace = f"...{trace[-TRACEBACK_CHAR_LIMIT:]}"
            lines.extend(["", "Traceback:", trace])
        return "\n".join(lines)

    @staticmethod
    def _update_type(update: Update | None) -> str:
        if update is None:
            return "unknown"
        for field in ("message", "edited_message", "callback_query", "inline_query"):
            if getattr(update, field, None) is not None:
                return field
        return "unknown"


__all__ = ["ErrorMonitor"]
