"""
Map raw upstream payloads onto ``UserStats``.

This is the only module that knows upstream field names. Every logical field
has an ordered list of candidate names (most recent schema first); dotted
names walk nested objects.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import UNKNOWN_LANGUAGE, CourseEntry, UserStats

IDENTITY_FIELDS = ("username", "login", "id")

HANDLE_FIELDS = ("username", "login", "id")
NAME_FIELDS = ("name", "fullname", "displayName")
STREAK_FIELDS = ("streak", "site_streak", "streakData.currentStreak.length")
PLUS_FIELDS = ("hasPlus", "has_plus", "is_plus")
TOTAL_XP_FIELDS = ("totalXp", "total_xp", "xp")
PICTURE_FIELDS = ("picture", "avatar", "profile_image_url")
FOLLOWERS_FIELDS = ("followers_count", "followers", "followerCount")
COURSES_FIELDS = ("courses", "languages", "currentCourses")

COURSE_LEARNING_FIELDS = ("learningLanguage", "learning_language", "language")
COURSE_FROM_FIELDS = ("fromLanguage", "from_language")
COURSE_XP_FIELDS = ("xp", "points", "totalXp")

ITEM_LIKES_FIELDS = ("likes_count", "likes")
ITEM_STOCKS_FIELDS = ("stocks_count", "stocks")

TRUE_STRINGS = ("true", "1", "yes")

_MISSING = object()


def _lookup(record: Dict[str, Any], path: str) -> Any:
    node: Any = record
    for part in path.split("."):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def first_of(record: Dict[str, Any], fields: Sequence[str], default: Any = None) -> Any:
    """Value of the first field in ``fields`` that is present and not null."""
    for name in fields:
        value = _lookup(record, name)
        if value is not _MISSING and value is not None:
            return value
    return default


def _as_int(value: Any, default: int = 0) -> int:
    try:
        if isinstance(value, str):
            return int(float(value.strip()))
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return False


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def find_user_record(raw: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(raw, dict):
        return None
    users = raw.get("users")
    if isinstance(users, list):
        return users[0] if users and isinstance(users[0], dict) else None
    if isinstance(raw.get("user"), dict):
        return raw["user"]
    if any(raw.get(k) not in (None, "") for k in IDENTITY_FIELDS):
        return raw
    return None


def has_user_record(raw: Any) -> bool:
    return find_user_record(raw) is not None


def normalize_courses(entries: Any) -> List[CourseEntry]:
    if isinstance(entries, dict):
        # some payloads key the course list by language code
        entries = list(entries.values())
    if not isinstance(entries, list):
        return []
    courses = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        learning = _as_text(first_of(entry, COURSE_LEARNING_FIELDS))
        if not learning:
            continue
        from_lang = _as_text(first_of(entry, COURSE_FROM_FIELDS)) or UNKNOWN_LANGUAGE
        courses.append(CourseEntry(learning, from_lang, _as_int(first_of(entry, COURSE_XP_FIELDS, 0))))
    return courses


def _activity_counts(items: Optional[Iterable[Any]]):
    if items is None:
        return None, None, None
    items = [i for i in items if isinstance(i, dict)]
    likes = sum(max(0, _as_int(first_of(i, ITEM_LIKES_FIELDS, 0))) for i in items)
    stocks = sum(max(0, _as_int(first_of(i, ITEM_STOCKS_FIELDS, 0))) for i in items)
    return len(items), likes, stocks


def normalize(raw: Any, fallback_identifier: str, items: Optional[Iterable[Any]] = None) -> UserStats:
    posts, likes, stocks = _activity_counts(items)
    record = find_user_record(raw)
    if record is None:
        return UserStats(handle=fallback_identifier, display_name=fallback_identifier, posts=posts, likes=likes, stocks=stocks)

    handle = _as_text(first_of(record, HANDLE_FIELDS)) or fallback_identifier
    return UserStats(
        handle=handle,
        display_name=_as_text(first_of(record, NAME_FIELDS)) or handle,
        streak=max(0, _as_int(first_of(record, STREAK_FIELDS, 0))),
        has_plus=_as_bool(first_of(record, PLUS_FIELDS, False)),
        total_xp=max(0, _as_int(first_of(record, TOTAL_XP_FIELDS, 0))),
        courses=tuple(normalize_courses(first_of(record, COURSES_FIELDS, []))),
        picture_ref=_as_text(first_of(record, PICTURE_FIELDS)),
        followers=max(0, _as_int(first_of(record, FOLLOWERS_FIELDS, 0))),
        posts=posts,
        likes=likes,
        stocks=stocks,
    )
