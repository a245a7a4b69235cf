"""
Runtime configuration.

Environment Variables:
  PROFILE_URL       : profile endpoint, '{identifier}' is substituted.
  ITEMS_URL         : optional paged activity endpoint ('{identifier}', '{page}').
                      Empty => posts/likes are not collected.
  ITEMS_MAX_PAGES   : upper bound on activity pages. Default 100.
  FLAG_URL          : flag asset per language code ('{code}').
  REQUEST_TIMEOUT   : seconds per upstream request. Default 5.
  USER_AGENT        : sent with every upstream request.
  MAX_BADGES        : badge cap. Default 50.
  SPECIAL_POSITION  : 'last' | 'first'. Where special badges go.
  SELF_PAIR_RULE    : 'same' | 'english' | 'none'. Which learning==from courses get no badge.
  XP_SOURCE         : 'recompute' | 'upstream'. Which total XP is shown.
  REQUIRE_USER      : '1' => a payload without a user record is a 404.
  CACHE_TYPE        : Flask-Caching backend. Default SimpleCache.
  CACHE_TTL         : seconds for the response cache and edge cache headers.
  NUMBER_SEPARATOR  : thousands separator. Default ','.
  ASSET_WORKERS     : concurrent flag downloads. Default 8.
  HOST / PORT       : bind address for `python -m lingocard serve`.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .util import warn

DEFAULT_PROFILE_URL = "https://www.duolingo.com/2017-06-30/users?username={identifier}"
DEFAULT_FLAG_URL = "https://d35aaqx5ub95lt.cloudfront.net/images/flags/{code}.svg"

SPECIAL_POSITIONS = ("last", "first")
SELF_PAIR_RULES = ("same", "english", "none")
XP_SOURCES = ("recompute", "upstream")


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        warn(f"Invalid {name}={raw!r}. Using default {default}.")
        return default


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        warn(f"Invalid {name}={raw!r}. Using default {default}.")
        return default


def _choice_env(env: Mapping[str, str], name: str, choices, default: str) -> str:
    raw = (env.get(name) or "").strip().lower()
    if not raw:
        return default
    if raw not in choices:
        warn(f"Invalid {name}={raw!r}. Expected one of {', '.join(choices)}. Using {default}.")
        return default
    return raw


@dataclass(frozen=True)
class Settings:
    profile_url: str = DEFAULT_PROFILE_URL
    items_url: str = ""
    items_max_pages: int = 100
    flag_url: str = DEFAULT_FLAG_URL
    timeout: float = 5.0
    user_agent: str = "lingocard/0.3"
    max_badges: int = 50
    special_position: str = "last"
    self_pair: str = "same"
    xp_source: str = "recompute"
    require_user: bool = True
    cache_type: str = "SimpleCache"
    cache_ttl: int = 86400
    number_separator: str = ","
    asset_workers: int = 8
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            profile_url=env.get("PROFILE_URL") or DEFAULT_PROFILE_URL,
            items_url=env.get("ITEMS_URL", ""),
            items_max_pages=max(1, _int_env(env, "ITEMS_MAX_PAGES", 100)),
            flag_url=env.get("FLAG_URL") or DEFAULT_FLAG_URL,
            timeout=_float_env(env, "REQUEST_TIMEOUT", 5.0),
            user_agent=env.get("USER_AGENT") or "lingocard/0.3",
            max_badges=max(0, _int_env(env, "MAX_BADGES", 50)),
            special_position=_choice_env(env, "SPECIAL_POSITION", SPECIAL_POSITIONS, "last"),
            self_pair=_choice_env(env, "SELF_PAIR_RULE", SELF_PAIR_RULES, "same"),
            xp_source=_choice_env(env, "XP_SOURCE", XP_SOURCES, "recompute"),
            require_user=env.get("REQUIRE_USER", "1") == "1",
            cache_type=env.get("CACHE_TYPE") or "SimpleCache",
            cache_ttl=_int_env(env, "CACHE_TTL", 86400),
            number_separator=env.get("NUMBER_SEPARATOR", ","),
            asset_workers=max(1, _int_env(env, "ASSET_WORKERS", 8)),
            host=env.get("HOST") or "0.0.0.0",
            port=_int_env(env, "PORT", 8000),
        )
