"""Error kinds surfaced to the request boundary.

Each error carries the HTTP status and the message shown on the error card.
Only messages the upstream chose to disclose (or our own fixed texts) end up
in ``message``.
"""

from __future__ import annotations
from typing import Optional


class CardError(Exception):
    status = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InternalError(CardError):
    pass


class UpstreamFailure(CardError):
    """Base for anything the upstream client raises."""


class NotFound(UpstreamFailure):
    status = 404
    default_message = "Not found"


class RateLimited(UpstreamFailure):
    status = 429
    default_message = "Rate limit exceeded"


class UpstreamTimeout(UpstreamFailure):
    status = 504
    default_message = "Upstream request timed out"


class UpstreamError(UpstreamFailure):
    def __init__(self, upstream_status: Optional[int] = None, message: Optional[str] = None):
        self.upstream_status = upstream_status
        if message is None:
            message = f"Upstream API error ({upstream_status})" if upstream_status else "Upstream API error"
        super().__init__(message)
