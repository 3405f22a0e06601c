from __future__ import annotations

import logging
import webbrowser

from .errors import BrowserLaunchError

logger = logging.getLogger("hn")


def open_in_browser(url: str) -> None:
    """Hand ``url`` to the host's default browser.

    Console browsers may block until they exit, so callers run this off the
    UI loop.
    """
    logger.info("Opening %s", url)
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        raise BrowserLaunchError(f"Could not open {url}: {e}") from e
    if not opened:
        raise BrowserLaunchError(f"No browser available to open {url}")
