"""Incremental user, history and tweet search surfaces for Telegram."""

__version__ = "0.1.0"
