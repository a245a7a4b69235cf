"""
Turn picture references and badge codes into inline data URIs.

Nothing in here raises on a failed download: the avatar falls back to a
placeholder and missing flags are dropped from the result.
"""

from __future__ import annotations
import base64
import re
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence
from urllib.parse import quote

from .config import Settings
from .errors import UpstreamFailure
from .util import debug

DEFAULT_CONTENT_TYPE = "image/png"
AVATAR_SUFFIXES = ("/xlarge", "/large", "")
IMAGE_FILE_PATTERN = re.compile(r"\.(png|jpe?g|gif|webp|svg)$", re.IGNORECASE)

PLACEHOLDER_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="64" height="64" viewBox="0 0 64 64">'
    '<circle cx="32" cy="32" r="32" fill="#58cc02"/></svg>'
)


def to_data_uri(content: bytes, content_type: Optional[str] = None) -> str:
    b64 = base64.b64encode(content).decode('ascii')
    return f"data:{content_type or DEFAULT_CONTENT_TYPE};base64,{b64}"


PLACEHOLDER_AVATAR = to_data_uri(PLACEHOLDER_SVG.encode('utf-8'), "image/svg+xml")


def normalize_url(ref: str) -> str:
    ref = ref.strip()
    if ref.startswith("//"):
        return "https:" + ref
    return ref


def avatar_candidates(ref: str) -> List[str]:
    url = normalize_url(ref)
    path = url.split("?", 1)[0].rstrip("/")
    if IMAGE_FILE_PATTERN.search(path):
        return [url]
    return [path + suffix for suffix in AVATAR_SUFFIXES]


class AssetResolver:
    def __init__(self, client, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or Settings()

    def _fetch_data_uri(self, url: str) -> Optional[str]:
        try:
            content, content_type = self.client.fetch_asset(url)
        except UpstreamFailure as e:
            debug(f"asset {url} failed: {e.message}")
            return None
        # header may carry parameters, e.g. "image/png; charset=binary"
        if content_type:
            content_type = content_type.split(";", 1)[0].strip()
        return to_data_uri(content, content_type)

    def resolve_avatar(self, picture_ref: Optional[str]) -> str:
        if not picture_ref:
            return PLACEHOLDER_AVATAR
        for url in avatar_candidates(picture_ref):
            uri = self._fetch_data_uri(url)
            if uri:
                return uri
        debug(f"avatar {picture_ref}: all variants failed, using placeholder")
        return PLACEHOLDER_AVATAR

    def flag_url(self, code: str) -> str:
        return self.settings.flag_url.format(code=quote(code, safe=""))

    def resolve_badge_images(self, codes: Sequence[str]) -> List[str]:
        if not codes:
            return []
        urls = [self.flag_url(code) for code in codes]
        workers = min(self.settings.asset_workers, len(urls))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in submission order regardless of completion order
            results = list(pool.map(self._fetch_data_uri, urls))
        return [uri for uri in results if uri]
