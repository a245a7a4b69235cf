"""
Course aggregation: total XP and the ordered badge selection.

Courses can be recorded more than once upstream (platform migrations, legacy
field names), so XP is collapsed to the maximum per (learning, from) pair
before summing. Badges are one per learning language, ordered by XP.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from .config import Settings
from .models import Badge, BadgeSelection, CourseEntry, UserStats

SPECIAL_CODES = ("math", "music", "chess")
SPECIAL_XP = -1
MAX_BADGES = 50


@dataclass(frozen=True)
class BadgePolicy:
    max_badges: int = MAX_BADGES
    special_codes: Tuple[str, ...] = SPECIAL_CODES
    special_position: str = "last"  # 'last' | 'first'
    self_pair: str = "same"  # 'same' | 'english' | 'none'

    @classmethod
    def from_settings(cls, settings: Settings) -> "BadgePolicy":
        return cls(
            max_badges=settings.max_badges,
            special_position=settings.special_position,
            self_pair=settings.self_pair,
        )


DEFAULT_POLICY = BadgePolicy()


def course_totals(courses: Iterable[CourseEntry]) -> Dict[Tuple[str, str], int]:
    totals: Dict[Tuple[str, str], int] = {}
    for c in courses:
        key = (c.learning_language, c.from_language)
        totals[key] = max(totals.get(key, 0), c.xp)
    return totals


def is_self_pair(course: CourseEntry, rule: str) -> bool:
    if rule == "same":
        return course.learning_language == course.from_language
    if rule == "english":
        return course.learning_language == "en" and course.from_language == "en"
    return False


def real_badges(courses: Iterable[CourseEntry], self_pair: str = "same") -> List[Badge]:
    """First XP-bearing course per learning language, in input order."""
    seen = set()
    badges = []
    for c in courses:
        if c.xp <= 0 or c.learning_language in seen or is_self_pair(c, self_pair):
            continue
        seen.add(c.learning_language)
        badges.append(Badge(c.learning_language, c.xp))
    return badges


def aggregate(courses: Iterable[CourseEntry], include_special: bool,
              policy: BadgePolicy = DEFAULT_POLICY) -> Tuple[BadgeSelection, int]:
    courses = list(courses)
    total_xp = sum(course_totals(courses).values())

    real = real_badges(courses, policy.self_pair)
    # stable sort keeps input order among equal XP
    real.sort(key=lambda b: b.xp, reverse=True)

    specials: List[Badge] = []
    if include_special:
        earned = {b.code for b in real}
        specials = [Badge(code, SPECIAL_XP, special=True)
                    for code in policy.special_codes if code not in earned]

    ordered = specials + real if policy.special_position == "first" else real + specials
    return BadgeSelection(tuple(ordered[:policy.max_badges])), total_xp


def resolve_total_xp(stats: UserStats, recomputed: int, source: str = "recompute") -> int:
    if source == "upstream" and stats.total_xp > 0:
        return stats.total_xp
    return recomputed
