"""Selectable rows shown by the search surface.

Rows form a tagged union keyed by :class:`RowKind`; matching and text
resolution branch on the tag instead of on the concrete class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Union

from tweetsearch.domain.models import TweetModel, UserModel


class RowKind(str, Enum):
    MIRROR = "mirror"
    TEXT = "text"
    USER = "user"
    TWEET = "tweet"
    ERROR = "error"


@dataclass(slots=True, eq=False)
class MirrorCandidate:
    """Synthetic row echoing the live query ("use exactly what I typed")."""

    template: str
    text: str = ""
    label: str = field(init=False)
    kind: Literal[RowKind.MIRROR] = field(default=RowKind.MIRROR, init=False)

    def __post_init__(self) -> None:
        self.label = self.template.format(self.text)

    def set_text(self, text: str) -> None:
        self.text = text
        self.label = self.template.format(text)

    def matches(self, query: str) -> bool:
        # Shown whenever something was typed, whatever is being matched.
        return bool(self.text)


@dataclass(frozen=True, slots=True)
class TextCandidate:
    label: str
    kind: Literal[RowKind.TEXT] = field(default=RowKind.TEXT, init=False)


@dataclass(frozen=True, slots=True)
class UserCandidate:
    screenname: str
    user: UserModel | None = None
    kind: Literal[RowKind.USER] = field(default=RowKind.USER, init=False)

    @property
    def label(self) -> str:
        return self.screenname


@dataclass(frozen=True, slots=True)
class TweetCandidate:
    tweet: TweetModel
    kind: Literal[RowKind.TWEET] = field(default=RowKind.TWEET, init=False)

    @property
    def label(self) -> str:
        return f"@{self.tweet.screenname}: {self.tweet.text}"


@dataclass(frozen=True, slots=True)
class ErrorCandidate:
    label: str
    kind: Literal[RowKind.ERROR] = field(default=RowKind.ERROR, init=False)


Row = Union[MirrorCandidate, TextCandidate, UserCandidate, TweetCandidate, ErrorCandidate]


@dataclass(slots=True)
class Section:
    title: str
    rows: list[Row] = field(default_factory=list)


def row_matches(row: Row, query: str) -> bool:
    """Return whether ``row`` stays visible for ``query``.

    Ordinary rows use a case-insensitive substring test on their label; an
    empty query keeps every ordinary row.
    """

    if row.kind is RowKind.MIRROR:
        return row.matches(query)
    if not query:
        return True
    return query.casefold() in row.label.casefold()


__all__ = [
    "ErrorCandidate",
    "MirrorCandidate",
    "Row",
    "RowKind",
    "Section",
    "TextCandidate",
    "TweetCandidate",
    "UserCandidate",
    "row_matches",
]
