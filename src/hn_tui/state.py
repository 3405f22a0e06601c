from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from .datamodels import (
    AppState,
    Completed,
    Error,
    Failed,
    Loading,
    Progress,
    ProgressEvent,
    Started,
    Stories,
)
from .keymap import Action, map_key

logger = logging.getLogger("hn")

EMPTY_RESULT_MESSAGE = "No stories were returned."


# --- Effects the UI loop has to carry out ---
@dataclass(frozen=True)
class StartFetch:
    generation: int


@dataclass(frozen=True)
class OpenUrl:
    url: str


@dataclass(frozen=True)
class Notice:
    message: str


@dataclass(frozen=True)
class Quit:
    return_code: int = 0


Effect = Union[StartFetch, OpenUrl, Notice, Quit]


class AppModel:
    """The single source of truth for what the interface shows.

    Only the UI loop mutates it: fetch events go through ``apply_event``
    and key presses through ``apply_action``. Neither performs I/O; side
    effects are returned to the caller as ``Effect`` values.
    """

    def __init__(self) -> None:
        self.state: AppState = Loading()
        self.generation = 0
        self.show_details = False

    @property
    def tag(self) -> str:
        return self.state.tag

    def start_fetch(self) -> StartFetch:
        """Enter a fresh ``Loading`` state under a new generation."""
        self.generation += 1
        self.state = Loading()
        self.show_details = False
        logger.debug("Starting fetch generation %d", self.generation)
        return StartFetch(self.generation)

    def apply_event(self, event: ProgressEvent) -> bool:
        """Apply one progress event. Returns True if the state changed."""
        if event.generation != self.generation:
            logger.debug(
                "Dropping %s from stale generation %d (current %d)",
                type(event).__name__,
                event.generation,
                self.generation,
            )
            return False
        if not isinstance(self.state, Loading):
            logger.debug("Dropping %s, no longer loading", type(event).__name__)
            return False

        previous = self.state
        if isinstance(event, Started):
            self.state = Loading(done=0, total=event.total)
        elif isinstance(event, Progress):
            self.state = Loading(done=event.done, total=event.total)
        elif isinstance(event, Completed):
            if event.stories:
                self.state = Stories(items=tuple(event.stories), selected=0)
            else:
                self.state = Error(EMPTY_RESULT_MESSAGE)
        elif isinstance(event, Failed):
            self.state = Error(event.message)
        return self.state != previous

    def apply_action(self, action: Action) -> Optional[Effect]:
        """Apply one input action, returning the side effect it asks for."""
        if self.show_details:
            # The overlay closes on the next input; a repeated "details" re-shows it.
            self.show_details = False

        if action is Action.QUIT:
            return Quit()

        state = self.state
        if isinstance(state, Error) and action is Action.RETRY:
            return self.start_fetch()

        if not isinstance(state, Stories):
            return None

        if action is Action.UP:
            self.state = replace(state, selected=max(0, state.selected - 1))
        elif action is Action.DOWN:
            self.state = replace(
                state, selected=min(len(state.items) - 1, state.selected + 1)
            )
        elif action is Action.REFRESH:
            return self.start_fetch()
        elif action is Action.DETAILS:
            self.show_details = True
        elif action is Action.OPEN:
            story = state.current
            if story.url:
                return OpenUrl(story.url)
            return Notice(f"'{story.title}' is a text post with no link.")
        return None

    def select(self, index: int) -> bool:
        """Move the selection straight to ``index``, clamped to the list.

        Only meaningful while showing stories. Returns True if the
        selection moved.
        """
        state = self.state
        if not isinstance(state, Stories):
            return False
        index = min(max(index, 0), len(state.items) - 1)
        if index == state.selected:
            return False
        self.state = replace(state, selected=index)
        self.show_details = False
        return True

    def press(self, key: str) -> Optional[Effect]:
        return self.apply_action(map_key(self.tag, key))
