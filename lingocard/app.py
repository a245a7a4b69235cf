"""
HTTP layer.

  GET /<identifier>     card
  GET /<identifier>/s   card with special badges
  ?theme=light|dark|brand|gradient  ?icon=left|right

Every response body is an SVG, errors included.
"""

from __future__ import annotations
from typing import Optional

from flask import Flask, Response, request
from flask_caching import Cache

from .config import Settings
from .errors import CardError, InternalError
from .render import render_error
from .service import CardService
from .themes import DEFAULT_THEME, THEMES, parse_icon_position
from .util import warn

SVG_MIMETYPE = "image/svg+xml; charset=utf-8"


def parse_theme(value: Optional[str]) -> str:
    value = (value or "").strip().lower()
    return value if value in THEMES else DEFAULT_THEME


def cache_key(identifier: str, special: bool, theme: str, icon: str) -> str:
    return f"GET /{identifier}{'/s' if special else ''}?theme={theme}&icon={icon}"


def svg_response(svg: str, ttl: int) -> Response:
    return Response(svg, status=200, content_type=SVG_MIMETYPE, headers={
        "Access-Control-Allow-Origin": "*",
        "Cache-Control": f"public, max-age=0, s-maxage={ttl}, stale-while-revalidate={ttl}",
    })


def error_response(error: CardError) -> Response:
    return Response(render_error(error.message), status=error.status, content_type=SVG_MIMETYPE, headers={
        "Access-Control-Allow-Origin": "*",
        "Cache-Control": "no-store",
    })


def create_app(settings: Optional[Settings] = None, client=None, cache=None,
               service: Optional[CardService] = None) -> Flask:
    settings = settings or Settings.from_env()
    app = Flask("lingocard", static_folder=None)
    app.config.setdefault("CACHE_TYPE", settings.cache_type)
    app.config.setdefault("CACHE_DEFAULT_TIMEOUT", settings.cache_ttl)
    if cache is None:
        cache = Cache(app)
    service = service or CardService(settings, client)

    def card(identifier: str, special: bool) -> Response:
        identifier = identifier.strip()
        if not identifier:
            return Response(status=204)
        theme = parse_theme(request.args.get("theme"))
        icon = parse_icon_position(request.args.get("icon"))
        key = cache_key(identifier, special, theme, icon)

        try:
            cached = cache.get(key)
        except Exception as e:
            warn(f"cache read failed for {key}: {e}")
            cached = None
        if cached is not None:
            return svg_response(cached, settings.cache_ttl)

        try:
            svg = service.build(identifier, special, theme, icon)
        except CardError as e:
            return error_response(e)
        except Exception as e:
            warn(f"render failed for {identifier}: {e!r}")
            return error_response(InternalError())

        try:
            cache.set(key, svg)
        except Exception as e:
            warn(f"cache write failed for {key}: {e}")
        return svg_response(svg, settings.cache_ttl)

    @app.route("/")
    @app.route("/favicon.ico")
    def empty():
        return Response(status=204)

    @app.route("/<identifier>")
    def user_card(identifier):
        return card(identifier, False)

    @app.route("/<identifier>/s")
    def user_card_special(identifier):
        return card(identifier, True)

    return app
