"""
Upstream HTTP client.

Fetches raw profile JSON, the optional paged activity listing and binary
assets. Every call is bounded by the configured timeout and is never retried
here; failures come back as the typed errors in ``lingocard.errors``.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from .config import Settings
from .errors import NotFound, RateLimited, UpstreamError, UpstreamTimeout
from .util import debug

PER_PAGE = 100


def _error_message(r: requests.Response) -> Optional[str]:
    try:
        data = r.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("message"), str) and data["message"]:
        return data["message"]
    return None


class UpstreamClient:
    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or Settings()
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", self.settings.user_agent)

    def _get(self, url: str, tag: str, **kwargs) -> requests.Response:
        try:
            r = self.session.get(url, timeout=self.settings.timeout, **kwargs)
        except requests.Timeout as e:
            debug(f"{tag}: timeout after {self.settings.timeout}s ({url})")
            raise UpstreamTimeout() from e
        except requests.RequestException as e:
            debug(f"{tag}: network error {e}")
            raise UpstreamError(None, "Upstream API unreachable") from e
        if r.status_code == 404:
            raise NotFound()
        if r.status_code == 429:
            raise RateLimited()
        if not 200 <= r.status_code < 300:
            debug(f"{tag} failed: {r.status_code} {r.text[:300]}")
            raise UpstreamError(r.status_code, _error_message(r))
        return r

    def _get_json(self, url: str, tag: str, **kwargs) -> Any:
        r = self._get(url, tag, **kwargs)
        try:
            return r.json()
        except ValueError as e:
            raise UpstreamError(r.status_code, "Upstream API returned invalid JSON") from e

    def fetch_profile(self, identifier: str) -> Dict[str, Any]:
        url = self.settings.profile_url.format(identifier=quote(identifier, safe=""))
        try:
            return self._get_json(url, "profile")
        except NotFound:
            raise NotFound(f'User "{identifier}" not found') from None

    def fetch_items(self, identifier: str) -> List[Dict[str, Any]]:
        """Collect every page of the activity listing until an empty page."""
        if not self.settings.items_url:
            return []
        items: List[Dict[str, Any]] = []
        for page in range(1, self.settings.items_max_pages + 1):
            url = self.settings.items_url.format(identifier=quote(identifier, safe=""), page=page)
            data = self._get_json(url, "items", params={"per_page": PER_PAGE})
            if not isinstance(data, list) or not data:
                break
            items.extend(data)
        else:
            debug(f"items: stopped after {self.settings.items_max_pages} pages")
        return items

    def fetch_asset(self, url: str) -> Tuple[bytes, Optional[str]]:
        r = self._get(url, "asset")
        return r.content, r.headers.get("content-type")
