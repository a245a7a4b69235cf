"""Run the fetch -> normalize -> aggregate -> assets -> render pipeline for one card."""

from __future__ import annotations
from typing import Optional

from .aggregate import BadgePolicy, aggregate, resolve_total_xp
from .assets import AssetResolver
from .client import UpstreamClient
from .config import Settings
from .errors import NotFound
from .normalize import has_user_record, normalize
from .render import render
from .util import debug


class CardService:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[UpstreamClient] = None,
                 resolver: Optional[AssetResolver] = None):
        self.settings = settings or Settings()
        self.client = client or UpstreamClient(self.settings)
        self.resolver = resolver or AssetResolver(self.client, self.settings)
        self.policy = BadgePolicy.from_settings(self.settings)

    def build(self, identifier: str, include_special: bool = False, theme: str = "light",
              icon: str = "left") -> str:
        # profile fetch gates everything else
        raw = self.client.fetch_profile(identifier)
        if self.settings.require_user and not has_user_record(raw):
            raise NotFound(f'User "{identifier}" not found')
        items = self.client.fetch_items(identifier) if self.settings.items_url else None

        stats = normalize(raw, identifier, items)
        badges, recomputed_xp = aggregate(stats.courses, include_special, self.policy)
        total_xp = resolve_total_xp(stats, recomputed_xp, self.settings.xp_source)
        debug(f"{stats.handle}: {len(stats.courses)} courses, xp={total_xp}, badges={','.join(badges.codes)}")

        avatar = self.resolver.resolve_avatar(stats.picture_ref)
        badge_images = self.resolver.resolve_badge_images(badges.codes)
        return render(stats, total_xp, badge_images, avatar, theme, icon, self.settings.number_separator)
