from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
API_BASE = "https://hacker-news.firebaseio.com/v0"
TOP_STORIES_URL = f"{API_BASE}/topstories.json"
ITEM_URL = API_BASE + "/item/{id}.json"
HN_ITEM_PAGE_URL = "https://news.ycombinator.com/item?id={id}"
HTTP_TIMEOUT = 10
STORY_LIMIT = 30
MAX_WORKERS = 16
MAX_WORKERS_CAP = 20

CONFIG_PATH = os.path.expanduser("~/.config/hn/config.json")

REQUEST_HEADERS = {
    "User-Agent": "hn-tui/0.1 (+https://news.ycombinator.com)",
    "Accept": "application/json",
}
RETRY_ATTEMPTS = 2
INITIAL_RETRY_DELAY = 0.5

# Seconds between two drains of the progress channel
POLL_INTERVAL = 0.1

DEFAULT_THEME = "hacker-news"

# Default UI settings
UI_DEFAULTS = {
    "title": "📰 Hacker News TUI",
    "stories_title": "📋 Stories ({selected}/{total})",
}

# --- Logging ---
logger = logging.getLogger("hn")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging.

    The terminal belongs to the UI, so without ``--debug`` nothing is
    emitted at all; with it, everything goes to a file under /tmp.
    """
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/hn_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(threadName)s - %(name)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def load_config() -> Dict[str, Any]:
    """Load the main configuration file. A missing file is an empty config."""
    if not os.path.exists(CONFIG_PATH):
        logger.info("No config file at %s, using defaults.", CONFIG_PATH)
        return {}
    try:
        with open(CONFIG_PATH, "r") as f:
            config = json.load(f)
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", CONFIG_PATH, e)
        return {}
    if not isinstance(config, dict):
        logger.error("Ignoring config at %s: top level is not an object", CONFIG_PATH)
        return {}
    logger.info("Loaded config from %s", CONFIG_PATH)
    return config


def get_int_setting(
    config: Dict[str, Any], key: str, default: int, minimum: int, maximum: int
) -> int:
    """Read an integer setting, falling back to ``default`` and clamping."""
    value = config.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        logger.warning("Invalid value for %s: %r, using %d", key, value, default)
        value = default
    return max(minimum, min(maximum, value))
