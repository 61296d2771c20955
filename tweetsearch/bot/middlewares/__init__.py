from tweetsearch.bot.middlewares.account import AccountMiddleware
from tweetsearch.bot.middlewares.db_session import DbSessionMiddleware
from tweetsearch.bot.middlewares.throttle import ThrottleMiddleware

__all__ = [
    "AccountMiddleware",
    "DbSessionMiddleware",
    "ThrottleMiddleware",
]
