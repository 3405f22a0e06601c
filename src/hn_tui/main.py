#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys

from textual.theme import BUILTIN_THEMES

from .app import HackerNewsApp
from .config import DEFAULT_THEME, load_config, setup_logging
from .themes import load_themes

logger = logging.getLogger("hn")

FALLBACK_THEME = "dracula"


def _has_terminal() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


# --- Entrypoint ---
def main() -> None:
    parser = argparse.ArgumentParser(description="Hacker News top stories in your terminal")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    # Load themes to populate help text
    user_themes = load_themes()
    available_themes = sorted(set(user_themes) | set(BUILTIN_THEMES))
    parser.add_argument(
        "--theme",
        type=str,
        help=f"Set theme for this run. Available: {', '.join(available_themes)}",
    )
    args = parser.parse_args()

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    config = load_config()
    theme_name = args.theme or config.get("theme") or DEFAULT_THEME

    if theme_name not in available_themes:
        print(
            f"Theme '{theme_name}' not found, falling back to {FALLBACK_THEME}.",
            file=sys.stderr,
        )
        theme_name = FALLBACK_THEME

    logger.info("Using theme: %s", theme_name)

    if not _has_terminal():
        print("hn needs an interactive terminal to run.", file=sys.stderr)
        sys.exit(1)

    try:
        app = HackerNewsApp(theme=theme_name, config=config, user_themes=user_themes)
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(app.return_code or 0)


if __name__ == "__main__":
    main()
