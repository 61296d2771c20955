"""Render search sessions and remote results as Telegram messages."""

from __future__ import annotations

from aiogram import Bot
from aiogram.filters.callback_data import CallbackData
from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from tweetsearch.bot.utils.telegram import bot_edit_with_retry
from tweetsearch.domain.rows import Section
from tweetsearch.i18n import I18nService
from tweetsearch.logging import logger
from tweetsearch.search.session import SearchSession

BUTTON_LABEL_LIMIT = 64


class SearchCallback(CallbackData, prefix="search"):
    action: str
    index: int = -1


def _button_label(label: str) -> str:
    label = " ".join(label.split())
    if len(label) <= BUTTON_LABEL_LIMIT:
        return label
    return f"{label[: BUTTON_LABEL_LIMIT - 1]}…"


def build_session_keyboard(session: SearchSession, *, max_rows: int, finish_label: str) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for index in session.visible_indexes()[:max_rows]:
        row = session.rows[index]
        builder.button(
            text=_button_label(row.label),
            callback_data=SearchCallback(action="pick", index=index),
        )
    builder.button(text=finish_label, callback_data=SearchCallback(action="finish"))
    builder.adjust(1)
    return builder.as_markup()


def render_prompt(session: SearchSession, *, title: str, i18n: I18nService, locale: str) -> str:
    candidates = len(session.rows) - 1
    shown = sum(1 for index in session.visible_indexes() if index != 0)
    return i18n.gettext(
        "search.prompt",
        locale=locale,
        title=title,
        shown=shown,
        total=candidates,
    )


def build_results_keyboard(refresh_label: str) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.button(text=refresh_label, callback_data=SearchCallback(action="refresh"))
    return builder.as_markup()


class SessionScreen:
    """Latest prompt and keyboard for a session, recomputed on every refresh."""

    def __init__(self, *, title: str, i18n: I18nService, locale: str, max_rows: int, finish_label: str) -> None:
        self.title = title
        self._i18n = i18n
        self._locale = locale
        self._max_rows = max_rows
        self._finish_label = finish_label
        self.text: str | None = None
        self.keyboard: InlineKeyboardMarkup | None = None

    def __call__(self, session: SearchSession) -> None:
        self.text = render_prompt(session, title=self.title, i18n=self._i18n, locale=self._locale)
        self.keyboard = build_session_keyboard(
            session,
            max_rows=self._max_rows,
            finish_label=self._finish_label,
        )


def format_section(section: Section, *, max_rows: int, empty_text: str) -> str:
    lines = [section.title, ""]
    if not section.rows:
        lines.append(empty_text)
    lines.extend(row.label for row in section.rows[:max_rows])
    return "\n".join(lines)


class TelegramResultView:
    """Shows a remote search by editing a single results message."""

    def __init__(
        self,
        bot: Bot,
        *,
        chat_id: int,
        message_id: int,
        i18n: I18nService,
        locale: str,
        max_results: int,
    ) -> None:
        self._bot = bot
        self.chat_id = chat_id
        self.message_id = message_id
        self._i18n = i18n
        self._locale = locale
        self._max_results = max_results
        self.completed_reloads = 0

    def _refresh_keyboard(self) -> InlineKeyboardMarkup:
        return build_results_keyboard(self._i18n.gettext("search.refresh_button", locale=self._locale))

    async def _edit(self, text: str, reply_markup: InlineKeyboardMarkup | None = None) -> None:
        await bot_edit_with_retry(
            self._bot,
            chat_id=self.chat_id,
            message_id=self.message_id,
            text=text,
            reply_markup=reply_markup,
            parse_mode=None,
        )

    async def show_progress(self, title: str) -> None:
        await self._edit(self._i18n.gettext("tweets.loading", locale=self._locale, query=title))

    async def show_error(self, section: Section) -> None:
        await self._edit(
            format_section(section, max_rows=1, empty_text=""),
            reply_markup=self._refresh_keyboard(),
        )

    async def show_results(self, section: Section) -> None:
        text = format_section(
            section,
            max_rows=self._max_results,
            empty_text=self._i18n.gettext("tweets.empty", locale=self._locale),
        )
        await self._edit(text, reply_markup=self._refresh_keyboard())

    async def reload_complete(self) -> None:
        self.completed_reloads += 1
        logger.debug("remote_reload_complete", chat_id=self.chat_id, message_id=self.message_id)


__all__ = [
    "SearchCallback",
    "SessionScreen",
    "TelegramResultView",
    "build_results_keyboard",
    "build_session_keyboard",
    "format_section",
    "render_prompt",
]
