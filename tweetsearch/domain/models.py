"""Pydantic models shared across the search and service layers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TweetModel(BaseModel):
    """A single record of a keyword search response."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    text: str
    screenname: str = Field(alias="from_user", min_length=1)
    user_id: int | None = Field(default=None, alias="from_user_id")
    profile_image_url: str | None = None
    created_at: str | None = None


class UserModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    screenname: str
    name: str | None = None
    profile_image_url: str | None = None


__all__ = ["TweetModel", "UserModel"]
