from __future__ import annotations

from enum import Enum
from typing import Dict


class Action(Enum):
    NONE = "none"
    QUIT = "quit"
    UP = "up"
    DOWN = "down"
    OPEN = "open"
    REFRESH = "refresh"
    RETRY = "retry"
    DETAILS = "details"


QUIT_KEYS: Dict[str, Action] = {
    "q": Action.QUIT,
    "Q": Action.QUIT,
    "escape": Action.QUIT,
}

KEYMAP: Dict[str, Dict[str, Action]] = {
    "loading": dict(QUIT_KEYS),
    "stories": {
        **QUIT_KEYS,
        "up": Action.UP,
        "k": Action.UP,
        "down": Action.DOWN,
        "j": Action.DOWN,
        "enter": Action.OPEN,
        "o": Action.OPEN,
        "r": Action.REFRESH,
        "R": Action.REFRESH,
        "d": Action.DETAILS,
        "space": Action.DETAILS,
    },
    "error": {
        **QUIT_KEYS,
        "r": Action.RETRY,
        "R": Action.RETRY,
    },
}

KEY_HINTS: Dict[str, str] = {
    "loading": "[b $accent]q[/] to quit",
    "stories": (
        "[b $accent]↑↓/jk[/] navigate, [b $accent]enter[/] open, "
        "[b $accent]d[/] details, [b $accent]r[/] refresh, [b $accent]q[/] quit"
    ),
    "error": "[b $accent]r[/] to retry, [b $accent]q[/] to quit",
}


def map_key(tag: str, key: str) -> Action:
    """Map a key pressed in the state tagged ``tag`` to an action.

    Unknown states and unbound keys map to ``Action.NONE``.
    """
    return KEYMAP.get(tag, {}).get(key, Action.NONE)
