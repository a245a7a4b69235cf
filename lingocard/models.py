"""Canonical data model shared by every pipeline stage."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

UNKNOWN_LANGUAGE = "unknown"


@dataclass(frozen=True)
class CourseEntry:
    learning_language: str
    from_language: str = UNKNOWN_LANGUAGE
    xp: int = 0


@dataclass(frozen=True)
class UserStats:
    handle: str
    display_name: str
    streak: int = 0
    has_plus: bool = False
    total_xp: int = 0
    courses: Tuple[CourseEntry, ...] = ()
    picture_ref: Optional[str] = None
    followers: int = 0
    # None => no activity listing was fetched
    posts: Optional[int] = None
    likes: Optional[int] = None
    stocks: Optional[int] = None


@dataclass(frozen=True)
class Badge:
    code: str
    xp: int
    special: bool = False


@dataclass(frozen=True)
class BadgeSelection:
    badges: Tuple[Badge, ...] = field(default_factory=tuple)

    @property
    def codes(self) -> Tuple[str, ...]:
        return tuple(b.code for b in self.badges)

    def __len__(self) -> int:
        return len(self.badges)

    def __iter__(self) -> Iterator[Badge]:
        return iter(self.badges)
