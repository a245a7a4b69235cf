#!/usr/bin/env python3
"""
Command line entry point.

Usage:
  python -m lingocard serve [--host 0.0.0.0] [--port 8000]
  python -m lingocard render USERNAME [--theme dark] [--icon right] [--special] [-o card.svg]
"""

from __future__ import annotations
import argparse
import sys
import time

from .app import create_app, parse_theme
from .config import Settings
from .errors import CardError
from .service import CardService
from .themes import ICON_POSITIONS, THEMES, parse_icon_position


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lingocard", description="SVG stats cards for language learners")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP service")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    card = sub.add_parser("render", help="render one card to a file")
    card.add_argument("identifier")
    card.add_argument("--theme", choices=sorted(THEMES), default="light")
    card.add_argument("--icon", choices=ICON_POSITIONS, default="left")
    card.add_argument("--special", action="store_true", help="include special badges")
    card.add_argument("-o", "--output", default=None, help="output file (default: stdout)")
    return parser


def render_card(args, settings: Settings) -> int:
    print("Collecting stats...", file=sys.stderr)
    t0 = time.time()
    try:
        svg = CardService(settings).build(args.identifier, args.special,
                                          parse_theme(args.theme), parse_icon_position(args.icon))
    except CardError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        return 1
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(svg)
    else:
        sys.stdout.write(svg + "\n")
    print("Done in {:.2f}s".format(time.time() - t0), file=sys.stderr)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    if args.command == "serve":
        app = create_app(settings)
        app.run(host=args.host or settings.host, port=args.port or settings.port)
        return 0
    return render_card(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
