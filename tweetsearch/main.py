"""Application entrypoint."""

from __future__ import annotations

import asyncio

import httpx
from aiogram import Bot, Dispatcher
from aiogram.client.session.aiohttp import AiohttpSession

from tweetsearch.bot.middlewares import (
    AccountMiddleware,
    DbSessionMiddleware,
    ThrottleMiddleware,
)
from tweetsearch.bot.registry import SessionRegistry
from tweetsearch.bot.routers import setup_routers
from tweetsearch.config import get_settings
from tweetsearch.db.session import Database
from tweetsearch.i18n import I18nService
from tweetsearch.logging import configure_logging, logger
from tweetsearch.services.download import Downloader
from tweetsearch.services.error_monitor import ErrorMonitor


async def main() -> None:
    configure_logging()
    settings = get_settings()

    session = (
        AiohttpSession(proxy=settings.telegram_proxy) if settings.telegram_proxy else None
    )
    bot = Bot(token=settings.telegram_token.get_secret_value(), session=session)
    dp = Dispatcher()
    dp.include_router(setup_routers())
    error_monitor = ErrorMonitor(settings=settings)
    dp.errors.register(error_monitor.handle_error)

    database = Database(settings=settings)
    await database.create_all()

    throttle_middleware = ThrottleMiddleware(settings)
    account_middleware = AccountMiddleware()
    dp.update.outer_middleware(DbSessionMiddleware(database))
    for observer in (dp.message, dp.callback_query):
        observer.middleware(throttle_middleware)
        observer.middleware(account_middleware)

    registry = SessionRegistry()
    i18n = I18nService(default_locale=settings.default_language)
    async with httpx.AsyncClient() as http_client:
        downloader = Downloader(http_client, settings.remote_search)
        logger.info("bot_starting", environment=settings.environment)
        try:
            await dp.start_polling(
                bot,
                database=database,
                registry=registry,
                downloader=downloader,
                settings=settings,
                i18n=i18n,
            )
        finally:
            await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
