"""
SVG card rendering.

The card is assembled as an lxml element tree and serialized once. Geometry
is computed up front by ``card_layout`` so badge coordinates and canvas height
can be checked without parsing markup.

Layout (icon on the left; 'right' mirrors the header):

  +------------------------------------------------+
  | (avatar)  Display Name                  [PLUS] |
  |           @handle                              |
  | ---------------------------------------------- |
  |  Streak    Total XP    Courses    Followers    |
  |  Posts     Likes       Stocks  (activity only) |
  |  [flag][flag][flag] ... 10 per row             |
  +------------------------------------------------+
"""

from __future__ import annotations
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from lxml import etree

from .models import UserStats
from .themes import Theme, get_theme, parse_icon_position
from .util import format_int, make_safe_id, truncate_text

SVG_NS = "http://www.w3.org/2000/svg"
FONT_FAMILY = "system-ui, -apple-system, Segoe UI, sans-serif"

WIDTH = 420
BASE_HEIGHT = 140
ROW_HEIGHT = 30
BADGES_PER_ROW = 10
BADGE_SIZE = 24
BADGE_INSET_X = 20
BADGE_TOP = 136

AVATAR_CENTER = 44
AVATAR_RADIUS = 22
TEXT_OFFSET = 84
STATS_TOP = 84
STAT_ROW_HEIGHT = 44
STAT_BOX_WIDTH = 98
PILL_WIDTH = 40
PILL_HEIGHT = 18
MAX_NAME_CHARS = 24
MAX_HANDLE_CHARS = 32
MAX_ERROR_CHARS = 60

ERROR_WIDTH = 420
ERROR_HEIGHT = 80

# 24x24 stroke icons for the stat boxes
ICON_PATHS = {
    "streak": "M12 3c1 3.5 5 5.5 5 10a5 5 0 0 1-10 0c0-2.5 1.5-4 2.5-5 .3 1.7 1.2 2.7 2.5 3 0-3-1-5.5 0-8z",
    "xp": "M13 2 4 14h7l-1 8 9-12h-7z",
    "courses": "M4 5a2 2 0 0 1 2-2h13v16H6a2 2 0 0 0-2 2zM4 21V5",
    "followers": "M12 12a4 4 0 1 0 0-8 4 4 0 0 0 0 8zM5 21c0-3.9 3.1-7 7-7s7 3.1 7 7",
    "posts": "M15 8h2M15 12h2M17 16H7M7 8v4h4V8zM5 20h14a2 2 0 0 0 2-2V6a2 2 0 0 0-2-2H5a2 2 0 0 0-2 2v12a2 2 0 0 0 2 2z",
    "likes": "M12 20s-7-4.4-7-10a4 4 0 0 1 7-2.6A4 4 0 0 1 19 10c0 5.6-7 10-7 10z",
    "stocks": "M6 21V5a2 2 0 0 1 2-2h8a2 2 0 0 1 2 2v16l-6-3z",
}

ENTITY_NAMES = {'"': "quot", "'": "apos"}
QUOTE_PATTERN = re.compile(r"([\"'])")
# anything outside the XML 1.0 Char production, lone surrogates included
INVALID_XML_CHARS = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


@dataclass(frozen=True)
class Layout:
    width: int
    height: int
    avatar_cx: int
    text_x: int
    text_anchor: str
    pill_x: int
    badges: Tuple[Tuple[int, int], ...]


def badge_rows(count: int) -> int:
    return math.ceil(count / BADGES_PER_ROW) if count > 0 else 0


def canvas_height(badge_count: int, stat_row_count: int = 1) -> int:
    extra = STAT_ROW_HEIGHT * max(0, stat_row_count - 1)
    return BASE_HEIGHT + extra + ROW_HEIGHT * badge_rows(badge_count)


def badge_positions(count: int, top: int = BADGE_TOP) -> List[Tuple[int, int]]:
    return [
        (BADGE_INSET_X + ROW_HEIGHT * (i % BADGES_PER_ROW), top + ROW_HEIGHT * (i // BADGES_PER_ROW))
        for i in range(count)
    ]


def card_layout(badge_count: int, icon: str = "left", stat_row_count: int = 1) -> Layout:
    height = canvas_height(badge_count, stat_row_count)
    badges = tuple(badge_positions(badge_count, BADGE_TOP + STAT_ROW_HEIGHT * max(0, stat_row_count - 1)))
    if parse_icon_position(icon) == "right":
        return Layout(WIDTH, height, WIDTH - AVATAR_CENTER, WIDTH - TEXT_OFFSET, "end", 16, badges)
    return Layout(WIDTH, height, AVATAR_CENTER, TEXT_OFFSET, "start", WIDTH - 16 - PILL_WIDTH, badges)


def stat_rows(stats: UserStats, total_xp: int) -> List[List[Tuple[str, str, int]]]:
    """Rows of (icon key, label, value) boxes, left to right.

    The activity row only exists when an activity listing was fetched.
    """
    learned = {c.learning_language for c in stats.courses if c.xp > 0}
    rows = [[("streak", "Streak", stats.streak), ("xp", "Total XP", total_xp),
             ("courses", "Courses", len(learned)), ("followers", "Followers", stats.followers)]]
    if stats.posts is not None:
        rows.append([("posts", "Posts", stats.posts), ("likes", "Likes", stats.likes or 0),
                     ("stocks", "Stocks", stats.stocks or 0)])
    return rows


# ------------------ Tree helpers ------------------
def _tag(name: str) -> str:
    return f"{{{SVG_NS}}}{name}"


def _sub(parent: etree._Element, name: str, **attrs) -> etree._Element:
    # keyword names use '_' where SVG uses '-'
    return etree.SubElement(parent, _tag(name), {k.replace("_", "-"): str(v) for k, v in attrs.items()})


def set_text(el: etree._Element, text: str):
    """Set element text with all five markup characters escaped.

    lxml escapes & < > on serialization; quotes are emitted as entity
    references so they survive in any context the text is copied into.
    """
    parts = QUOTE_PATTERN.split(INVALID_XML_CHARS.sub("", text))
    el.text = parts[0] or None
    for i in range(1, len(parts), 2):
        entity = etree.Entity(ENTITY_NAMES[parts[i]])
        entity.tail = parts[i + 1] or None
        el.append(entity)


def _text(parent, content: str, **attrs) -> etree._Element:
    el = _sub(parent, "text", font_family=FONT_FAMILY, **attrs)
    set_text(el, content)
    return el


def _serialize(root: etree._Element) -> str:
    return etree.tostring(root, encoding="unicode")


# ------------------ Sections ------------------
def _defs(root, theme: Theme, layout: Layout, uid: str) -> Tuple[str, str]:
    defs = _sub(root, "defs")
    clip_id = f"avatar-{uid}"
    clip = _sub(defs, "clipPath", id=clip_id)
    _sub(clip, "circle", cx=layout.avatar_cx, cy=AVATAR_CENTER, r=AVATAR_RADIUS)
    fill = theme.background
    if theme.gradient:
        grad_id = f"bg-{uid}"
        grad = _sub(defs, "linearGradient", id=grad_id, x1=0, y1=0, x2=1, y2=1)
        _sub(grad, "stop", offset="0%", stop_color=theme.gradient[0])
        _sub(grad, "stop", offset="100%", stop_color=theme.gradient[1])
        fill = f"url(#{grad_id})"
    return clip_id, fill


def _header(root, stats: UserStats, avatar_data_uri: str, theme: Theme, layout: Layout, clip_id: str):
    cx = layout.avatar_cx
    _sub(root, "circle", cx=cx, cy=AVATAR_CENTER, r=AVATAR_RADIUS + 4, fill="none",
         stroke=theme.accent, stroke_width=2)
    _sub(root, "image", href=avatar_data_uri, x=cx - AVATAR_RADIUS, y=AVATAR_CENTER - AVATAR_RADIUS,
         width=AVATAR_RADIUS * 2, height=AVATAR_RADIUS * 2, clip_path=f"url(#{clip_id})",
         preserveAspectRatio="xMidYMid slice")

    _text(root, truncate_text(stats.display_name, MAX_NAME_CHARS), x=layout.text_x, y=36,
          font_size=16, font_weight=700, fill=theme.text, text_anchor=layout.text_anchor, id="display_name")
    _text(root, "@" + truncate_text(stats.handle, MAX_HANDLE_CHARS), x=layout.text_x, y=56,
          font_size=12, fill=theme.subtext, text_anchor=layout.text_anchor, id="handle")

    if stats.has_plus:
        pill = _sub(root, "g", id="plus_badge", transform=f"translate({layout.pill_x},16)")
        _sub(pill, "rect", width=PILL_WIDTH, height=PILL_HEIGHT, rx=9, fill=theme.accent)
        _text(pill, "PLUS", x=PILL_WIDTH // 2, y=13, font_size=10, font_weight=700,
              fill="#ffffff", text_anchor="middle")

    _sub(root, "line", x1=16, y1=74, x2=layout.width - 16, y2=74, stroke=theme.line, stroke_width=1)


def _stats(root, rows, theme: Theme, separator: str):
    group = _sub(root, "g", id="stats", transform=f"translate(16,{STATS_TOP})")
    for r, boxes in enumerate(rows):
        _stats_row(group, boxes, r * STAT_ROW_HEIGHT, theme, separator)


def _stats_row(group, boxes, y: int, theme: Theme, separator: str):
    for i, (icon, label, value) in enumerate(boxes):
        box = _sub(group, "g", transform=f"translate({i * STAT_BOX_WIDTH},{y})")
        glyph = _sub(box, "svg", x=6, y=8, width=20, height=20, viewBox="0 0 24 24")
        _sub(glyph, "path", d=ICON_PATHS[icon], fill="none", stroke=theme.accent, stroke_width=2,
             stroke_linecap="round", stroke_linejoin="round")
        _text(box, format_int(value, separator), x=32, y=18, font_size=14, font_weight=700,
              fill=theme.text, id=f"{icon}_data")
        _text(box, label, x=32, y=34, font_size=11, fill=theme.subtext)


def _badges(root, badge_images: Sequence[str], layout: Layout):
    if not badge_images:
        return
    group = _sub(root, "g", id="badges")
    for uri, (x, y) in zip(badge_images, layout.badges):
        _sub(group, "image", href=uri, x=x, y=y, width=BADGE_SIZE, height=BADGE_SIZE)


# ------------------ Public API ------------------
def build_card(stats: UserStats, total_xp: int, badge_images: Sequence[str], avatar_data_uri: str,
               theme: Union[str, Theme, None] = None, icon: Optional[str] = None,
               separator: str = ",") -> etree._Element:
    if not isinstance(theme, Theme):
        theme = get_theme(theme)
    rows = stat_rows(stats, total_xp)
    layout = card_layout(len(badge_images), icon or "left", len(rows))
    uid = make_safe_id(stats.handle)

    root = etree.Element(_tag("svg"), nsmap={None: SVG_NS}, attrib={
        "width": str(layout.width),
        "height": str(layout.height),
        "viewBox": f"0 0 {layout.width} {layout.height}",
        "role": "img",
    })
    set_text(_sub(root, "title"), f"{stats.display_name} (@{stats.handle})")
    clip_id, fill = _defs(root, theme, layout, uid)
    _sub(root, "rect", width=layout.width, height=layout.height, rx=12, fill=fill,
         stroke=theme.line, stroke_width=1)
    _header(root, stats, avatar_data_uri, theme, layout, clip_id)
    _stats(root, rows, theme, separator)
    _badges(root, badge_images, layout)
    return root


def render(stats: UserStats, total_xp: int, badge_images: Sequence[str], avatar_data_uri: str,
           theme: Union[str, Theme, None] = None, icon: Optional[str] = None, separator: str = ",") -> str:
    return _serialize(build_card(stats, total_xp, badge_images, avatar_data_uri, theme, icon, separator))


def render_error(message: str) -> str:
    root = etree.Element(_tag("svg"), nsmap={None: SVG_NS}, attrib={
        "width": str(ERROR_WIDTH),
        "height": str(ERROR_HEIGHT),
        "viewBox": f"0 0 {ERROR_WIDTH} {ERROR_HEIGHT}",
        "role": "img",
    })
    _sub(root, "rect", width="100%", height="100%", rx=12, fill="#fee2e2")
    _text(root, truncate_text(message, MAX_ERROR_CHARS), x=20, y=46, font_size=14, fill="#991b1b",
          id="error_message")
    return _serialize(root)
