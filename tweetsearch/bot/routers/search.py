"""Telegram handlers driving the incremental search surfaces."""

from __future__ import annotations

from aiogram import Bot, F, Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import CallbackQuery, Message

from tweetsearch.bot.navigator import SearchEnvironment, TelegramNavigator, launch_remote_search
from tweetsearch.bot.registry import ActiveSearch, SessionRegistry
from tweetsearch.bot.utils.telegram import answer_with_retry, bot_edit_with_retry, bot_send_with_retry
from tweetsearch.bot.views import SearchCallback, SessionScreen
from tweetsearch.config import SearchBotSettings
from tweetsearch.db.models.core import Account
from tweetsearch.db.session import Database
from tweetsearch.i18n import I18nService
from tweetsearch.logging import logger
from tweetsearch.search.session import SearchSession, SessionState
from tweetsearch.search.sources import DirectorySource, HistorySource
from tweetsearch.search.strategies import DirectorySearch, DirectorySelect, HistorySearch, SearchStrategy
from tweetsearch.services.directory import UserDirectory
from tweetsearch.services.download import Downloader
from tweetsearch.services.store import DbKeyValueStore

router = Router()


def _locale(account: Account | None, settings: SearchBotSettings) -> str:
    return (account.language_code if account else None) or settings.default_language


def _environment(
    bot: Bot,
    chat_id: int,
    account: Account | None,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
) -> SearchEnvironment:
    return SearchEnvironment(
        bot=bot,
        chat_id=chat_id,
        registry=registry,
        directory=UserDirectory(database),
        downloader=downloader,
        settings=settings,
        i18n=i18n,
        locale=_locale(account, settings),
    )


async def _render_session(env: SearchEnvironment, active: ActiveSearch) -> None:
    await bot_edit_with_retry(
        env.bot,
        chat_id=env.chat_id,
        message_id=active.message_id,
        text=active.screen.text,
        reply_markup=active.screen.keyboard,
        parse_mode=None,
    )


async def _close_previous(env: SearchEnvironment) -> None:
    previous = env.registry.close(env.chat_id)
    if previous is None:
        return
    if previous.session.state is SessionState.ACTIVE:
        await previous.session.finish()
    if previous.message_id is not None:
        await bot_edit_with_retry(
            env.bot,
            chat_id=env.chat_id,
            message_id=previous.message_id,
            text=env.text("search.closed"),
            reply_markup=None,
            parse_mode=None,
        )


async def _open_session(
    message: Message,
    env: SearchEnvironment,
    navigator: TelegramNavigator,
    strategy: SearchStrategy,
) -> ActiveSearch:
    await _close_previous(env)
    screen = SessionScreen(
        title=env.text("search.title"),
        i18n=env.i18n,
        locale=env.locale,
        max_rows=env.settings.max_rows,
        finish_label=env.text("search.finish_button"),
    )
    session = SearchSession(strategy, on_refresh=screen)
    await session.start()
    active = ActiveSearch(
        session=session,
        navigator=navigator,
        screen=screen,
        last_query_message_id=message.message_id,
    )
    sent = await answer_with_retry(message, screen.text, reply_markup=screen.keyboard, parse_mode=None)
    active.message_id = sent.message_id
    env.registry.open(env.chat_id, active)
    return active


@router.message(CommandStart())
async def handle_start(
    message: Message,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    greeting = i18n.gettext("start.greeting", locale=_locale(account, settings), name=message.from_user.full_name)
    await answer_with_retry(message, greeting, parse_mode=None)


@router.message(Command("help"))
async def handle_help(
    message: Message,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    await answer_with_retry(message, i18n.gettext("help.text", locale=_locale(account, settings)), parse_mode=None)


@router.message(Command("users"))
async def handle_users(
    message: Message,
    bot: Bot,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    env = _environment(bot, message.chat.id, account, database, registry, downloader, settings, i18n)
    navigator = TelegramNavigator(env)
    strategy = DirectorySearch(
        DirectorySource(env.directory),
        navigator,
        template=env.text("search.mirror.directory"),
    )
    await _open_session(message, env, navigator, strategy)


@router.message(Command("mention"))
async def handle_mention(
    message: Message,
    bot: Bot,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    env = _environment(bot, message.chat.id, account, database, registry, downloader, settings, i18n)
    navigator = TelegramNavigator(env)

    async def on_pick(screenname: str) -> None:
        await bot_send_with_retry(
            env.bot,
            chat_id=env.chat_id,
            text=env.text("mention.selected", screenname=screenname),
            parse_mode=None,
        )

    strategy = DirectorySelect(
        DirectorySource(env.directory),
        navigator,
        on_pick,
        template=env.text("search.mirror.select"),
    )
    await _open_session(message, env, navigator, strategy)


@router.message(Command("search"))
async def handle_search(
    message: Message,
    bot: Bot,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    if account is None:
        return
    env = _environment(bot, message.chat.id, account, database, registry, downloader, settings, i18n)
    navigator = TelegramNavigator(env)
    history = HistorySource(DbKeyValueStore(database, account.id), limit=settings.history.max_terms)
    strategy = HistorySearch(history, navigator, template=env.text("search.mirror.history"))
    await _open_session(message, env, navigator, strategy)


@router.message(Command("tweets"))
async def handle_tweets(
    message: Message,
    command: CommandObject,
    bot: Bot,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    env = _environment(bot, message.chat.id, account, database, registry, downloader, settings, i18n)
    query = (command.args or "").strip()
    if not query:
        await answer_with_retry(message, env.text("tweets.usage"), parse_mode=None)
        return
    logger.info("tweets_command", chat_id=env.chat_id, query=query)
    await launch_remote_search(env, query)


@router.message(Command("done"))
async def handle_done(
    message: Message,
    bot: Bot,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    env = _environment(bot, message.chat.id, account, database, registry, downloader, settings, i18n)
    active = registry.get(env.chat_id)
    if active is None:
        await answer_with_retry(message, env.text("search.none_active"), parse_mode=None)
        return
    await active.session.finish()
    await active.navigator.close()


@router.message(F.text, ~F.text.startswith("/"))
async def handle_query_text(
    message: Message,
    bot: Bot,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    env = _environment(bot, message.chat.id, account, database, registry, downloader, settings, i18n)
    active = registry.get(env.chat_id)
    if active is None:
        await answer_with_retry(message, env.text("search.none_active"), parse_mode=None)
        return
    if not active.accept_query(message.message_id):
        logger.info(
            "query_event_stale",
            chat_id=env.chat_id,
            message_id=message.message_id,
            latest_message_id=active.last_query_message_id,
        )
        return
    active.session.change_query(message.text.strip())
    await _render_session(env, active)


@router.callback_query(SearchCallback.filter(F.action == "pick"))
async def handle_pick(
    callback: CallbackQuery,
    callback_data: SearchCallback,
    bot: Bot,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    env = _environment(bot, callback.message.chat.id, account, database, registry, downloader, settings, i18n)
    active = registry.get(env.chat_id)
    if active is None or active.message_id != callback.message.message_id:
        await callback.answer(env.text("search.expired"))
        return
    await callback.answer()
    await active.session.select(callback_data.index)


@router.callback_query(SearchCallback.filter(F.action == "finish"))
async def handle_finish(
    callback: CallbackQuery,
    bot: Bot,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    env = _environment(bot, callback.message.chat.id, account, database, registry, downloader, settings, i18n)
    active = registry.get(env.chat_id)
    if active is None or active.message_id != callback.message.message_id:
        await callback.answer(env.text("search.expired"))
        return
    await callback.answer()
    await active.session.finish()
    await active.navigator.close()


@router.callback_query(SearchCallback.filter(F.action == "refresh"))
async def handle_refresh(
    callback: CallbackQuery,
    bot: Bot,
    database: Database,
    registry: SessionRegistry,
    downloader: Downloader,
    settings: SearchBotSettings,
    i18n: I18nService,
    account: Account | None = None,
) -> None:
    env = _environment(bot, callback.message.chat.id, account, database, registry, downloader, settings, i18n)
    search = registry.remote(env.chat_id, callback.message.message_id)
    if search is None:
        await callback.answer(env.text("tweets.missing"))
        return
    await callback.answer()
    await search.refresh()


__all__ = ["router"]
