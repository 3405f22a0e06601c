from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Dict

from textual.theme import Theme

logger = logging.getLogger("hn")

# --- Theme Configuration ---
DEFAULT_THEMES_PATH = Path(__file__).parent / "themes.json"
USER_THEMES_PATH = Path.home() / ".config/hn/themes.json"


def _themes_from_file(path: Path) -> Dict[str, Theme]:
    with open(path, "r") as f:
        themes_data = json.load(f)
    return {name: Theme(name=name, **definition) for name, definition in themes_data.items()}


def load_themes() -> Dict[str, Theme]:
    """
    Load themes from the user's config file, creating it from defaults if it
    doesn't exist.
    """
    if not USER_THEMES_PATH.exists():
        try:
            os.makedirs(USER_THEMES_PATH.parent, exist_ok=True)
            shutil.copy(DEFAULT_THEMES_PATH, USER_THEMES_PATH)
        except OSError as e:
            logger.warning("Could not copy default themes to %s: %s", USER_THEMES_PATH, e)
            return _themes_from_file(DEFAULT_THEMES_PATH)

    try:
        return _themes_from_file(USER_THEMES_PATH)
    except (IOError, json.JSONDecodeError, TypeError, AttributeError) as e:
        # Fallback to default themes if user file is corrupted
        logger.warning("Ignoring invalid themes file %s: %s", USER_THEMES_PATH, e)
        return _themes_from_file(DEFAULT_THEMES_PATH)
