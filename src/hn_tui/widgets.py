from __future__ import annotations

from textual.app import ComposeResult
from textual.reactive import reactive
from textual.widgets import ListItem, ListView, Static
from rich.text import Text

from .datamodels import AppState, Error, Loading, Story
from .formatting import story_details, story_line, story_stats
from .keymap import KEY_HINTS


# --- UI Widgets ---
class StoryListItem(ListItem):
    def __init__(self, story: Story, rank: int):
        super().__init__()
        self.story = story
        self.rank = rank

    def compose(self) -> ComposeResult:
        yield Static(story_line(self.story, self.rank), classes="story-title")
        yield Static(story_stats(self.story), classes="story-stats")


class StoryList(ListView, can_focus=False):
    """Story list driven by the app model.

    It never takes focus, so its own up/down bindings never fire. Mouse
    clicks still move the highlight; the app feeds those back through
    ``AppModel.select`` so the model stays the source of truth.
    """


class StoryDetails(Static):
    def show_story(self, story: Story) -> None:
        self.update(story_details(story))


class StatusBar(Static):
    """Footer showing what the app is doing and the keys that work right now."""

    state_tag = reactive(Loading.tag)
    status = reactive("")

    def on_mount(self) -> None:
        self.update(self.status_line())

    def show_state(self, state: AppState) -> None:
        self.state_tag = state.tag
        self.status = status_text(state)

    def status_line(self) -> str:
        parts = [self.status, KEY_HINTS.get(self.state_tag, "")]
        return " | ".join(part for part in parts if part)

    def watch_state_tag(self, state_tag: str) -> None:
        self.update(self.status_line())

    def watch_status(self, status: str) -> None:
        self.update(self.status_line())


def status_text(state: AppState) -> str:
    if isinstance(state, Loading):
        if state.total:
            return f"Loading {state.done}/{state.total}"
        return "Loading stories..."
    if isinstance(state, Error):
        return "Error"
    return f"Story {state.selected + 1} of {len(state.items)}"


class ErrorMessage(Static):
    def set_message(self, message: str) -> None:
        text = Text("❌ Connection Failed\n\n", style="bold red")
        text.append(message, style="bold")
        self.update(text)
