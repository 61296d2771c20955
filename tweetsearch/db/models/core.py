"""SQLAlchemy models for accounts, the known-user directory and settings."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tweetsearch.db.base import Base


class Account(Base):
    """Telegram user driving the bot; owns persisted settings."""

    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("telegram_id", name="uq_accounts_telegram_id"),)

    telegram_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    username: Mapped[str | None] = mapped_column(String(32))
    language_code: Mapped[str | None] = mapped_column(String(8))
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    settings: Mapped[list["SettingEntry"]] = relationship(back_populates="account")


class User(Base):
    """A known remote user, as seen in search results."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("screenname", name="uq_users_screenname"),)

    screenname: Mapped[str] = mapped_column(String(64), nullable=False)
    remote_id: Mapped[int | None] = mapped_column(BigInteger)
    name: Mapped[str | None] = mapped_column(String(128))
    profile_image_url: Mapped[str | None] = mapped_column(Text)
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)


class SettingEntry(Base):
    """One key of an account's key/value settings store."""

    __tablename__ = "settings_entries"
    __table_args__ = (UniqueConstraint("account_id", "key", name="uq_settings_entries_account_key"),)

    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    key: Mapped[str] = mapped_column(String(64), nullable=False)
    int_value: Mapped[int | None] = mapped_column(Integer)
    str_value: Mapped[str | None] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow, onupdate=datetime.utcnow
    )

    account: Mapped[Account] = relationship(back_populates="settings")


__all__ = ["Account", "SettingEntry", "User"]
