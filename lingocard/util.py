"""Small helpers shared across the pipeline."""

from __future__ import annotations
import os
import re
import sys

DEBUG = os.environ.get("DEBUG", "0") == "1"

SAFE_ID_PATTERN = re.compile(r"[^a-zA-Z0-9_-]")


def debug(msg: str):
    if DEBUG:
        print(f"[DEBUG] {msg}", file=sys.stderr)


def warn(msg: str):
    print(f"[WARN] {msg}", file=sys.stderr)


def format_int(num, separator: str = ",") -> str:
    """Group thousands; anything that is not an integer renders as plain text."""
    try:
        grouped = f"{int(num):,}"
    except (TypeError, ValueError):
        return str(num)
    return grouped if separator == "," else grouped.replace(",", separator)


def make_safe_id(text: str) -> str:
    return SAFE_ID_PATTERN.sub("_", text)[:64]


def truncate_text(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    if max_chars <= 1:
        return '…'
    return text[:max_chars-1] + '…'
