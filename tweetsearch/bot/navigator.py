"""Telegram implementation of the strategy navigation actions."""

from __future__ import annotations

from dataclasses import dataclass

from aiogram import Bot
from sqlalchemy.exc import SQLAlchemyError

from tweetsearch.bot.registry import SessionRegistry
from tweetsearch.bot.utils.telegram import bot_edit_with_retry, bot_send_with_retry
from tweetsearch.bot.views import TelegramResultView
from tweetsearch.config import SearchBotSettings
from tweetsearch.domain.models import TweetModel
from tweetsearch.i18n import I18nService
from tweetsearch.logging import logger
from tweetsearch.search.remote import RemoteSearchFetch, RemoteTweetSearch
from tweetsearch.services.directory import UserDirectory
from tweetsearch.services.download import Downloader
from tweetsearch.services.parser import parse_search_results


@dataclass(slots=True)
class SearchEnvironment:
    """Collaborators shared by everything a chat's search surface does."""

    bot: Bot
    chat_id: int
    registry: SessionRegistry
    directory: UserDirectory
    downloader: Downloader
    settings: SearchBotSettings
    i18n: I18nService
    locale: str

    def text(self, key: str, **kwargs) -> str:
        return self.i18n.gettext(key, locale=self.locale, **kwargs)


async def launch_remote_search(env: SearchEnvironment, query: str) -> RemoteTweetSearch:
    """Post a results message for ``query`` and run the first fetch into it."""

    sent = await bot_send_with_retry(
        env.bot,
        chat_id=env.chat_id,
        text=env.text("tweets.loading", query=query),
        parse_mode=None,
    )
    view = TelegramResultView(
        env.bot,
        chat_id=env.chat_id,
        message_id=sent.message_id,
        i18n=env.i18n,
        locale=env.locale,
        max_results=env.settings.remote_search.max_results_shown,
    )

    async def remember_authors(tweets: tuple[TweetModel, ...]) -> None:
        try:
            await env.directory.remember_authors(tweets)
        except SQLAlchemyError:
            logger.exception("directory_update_failed", chat_id=env.chat_id, query=query)

    fetch = RemoteSearchFetch(
        env.downloader,
        parse_search_results,
        view,
        error_label=env.text("tweets.error"),
        on_loaded=remember_authors,
    )
    search = RemoteTweetSearch(query, fetch, env.settings.remote_search)
    env.registry.track_remote(env.chat_id, sent.message_id, search)
    await search.refresh()
    return search


class TelegramNavigator:
    def __init__(self, env: SearchEnvironment) -> None:
        self.env = env

    async def open_profile(self, screenname: str) -> None:
        user = await self.env.directory.get(screenname)
        if user is None:
            text = self.env.text("profile.unknown", screenname=screenname)
        else:
            text = self.env.text("profile.summary", screenname=user.screenname, name=user.name or "-")
        await bot_send_with_retry(self.env.bot, chat_id=self.env.chat_id, text=text, parse_mode=None)

    async def open_search(self, query: str) -> None:
        await launch_remote_search(self.env, query)

    async def close(self) -> None:
        active = self.env.registry.close(self.env.chat_id)
        if active is None or active.message_id is None:
            return
        await bot_edit_with_retry(
            self.env.bot,
            chat_id=self.env.chat_id,
            message_id=active.message_id,
            text=self.env.text("search.closed"),
            reply_markup=None,
            parse_mode=None,
        )


__all__ = ["SearchEnvironment", "TelegramNavigator", "launch_remote_search"]
