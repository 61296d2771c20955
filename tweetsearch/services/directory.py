"""Known-user directory backed by the relational store."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import select

from tweetsearch.db.models.core import User
from tweetsearch.db.session import Database
from tweetsearch.domain.models import TweetModel, UserModel
from tweetsearch.logging import logger
from tweetsearch.utils.datetime import utc_now


class UserDirectory:
    def __init__(self, database: Database) -> None:
        self._database = database

    async def list_users(self) -> list[UserModel]:
        """All known users ordered by screenname ascending."""

        async with self._database.session() as session:
            result = await session.execute(select(User).order_by(User.screenname))
            users = result.scalars().all()
        return [UserModel.model_validate(user) for user in users]

    async def get(self, screenname: str) -> UserModel | None:
        async with self._database.session() as session:
            result = await session.execute(select(User).where(User.screenname == screenname))
            user = result.scalar_one_or_none()
        return UserModel.model_validate(user) if user is not None else None

    async def remember_authors(self, tweets: Iterable[TweetModel]) -> int:
        """Record the authors of ``tweets``; returns how many were new."""

        latest: dict[str, TweetModel] = {}
        for tweet in tweets:
            latest[tweet.screenname] = tweet
        if not latest:
            return 0

        created = 0
        async with self._database.session() as session:
            result = await session.execute(select(User).where(User.screenname.in_(list(latest))))
            known = {user.screenname: user for user in result.scalars().all()}
            now = utc_now()
            for screenname, tweet in latest.items():
                user = known.get(screenname)
                if user is None:
                    user = User(screenname=screenname)
                    session.add(user)
                    created += 1
                user.remote_id = tweet.user_id or user.remote_id
                user.profile_image_url = tweet.profile_image_url or user.profile_image_url
                user.last_seen_at = now
            await session.commit()
        logger.info("directory_authors_recorded", seen=len(latest), created=created)
        return created


__all__ = ["UserDirectory"]
