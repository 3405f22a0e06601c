from __future__ import annotations

import logging
import threading
from functools import partial
from typing import Any, Dict, Optional

from textual import events
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.theme import Theme
from textual.worker import Worker, WorkerState
from textual.widgets import ContentSwitcher, Header, ListView, ProgressBar, Static

from .browser import open_in_browser
from .channel import ProgressChannel
from .config import DEFAULT_THEME, POLL_INTERVAL, UI_DEFAULTS
from .datamodels import Error, Failed, Loading, Stories
from .fetcher import Fetcher
from .keymap import map_key
from .state import AppModel, Effect, Notice, OpenUrl, Quit, StartFetch
from .widgets import ErrorMessage, StatusBar, StoryDetails, StoryList, StoryListItem

logger = logging.getLogger("hn")

VIEW_IDS = {
    Loading.tag: "loading-view",
    Stories.tag: "stories-view",
    Error.tag: "error-view",
}


class HackerNewsApp(App):
    TITLE = "Hacker News"
    SUB_TITLE = "Top stories"

    CSS_PATH = "app.css"

    def __init__(
        self,
        theme: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        fetcher: Optional[Fetcher] = None,
        user_themes: Optional[Dict[str, Theme]] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self._requested_theme = theme or DEFAULT_THEME
        self.config = config or {}
        self.user_themes = user_themes or {}
        self.fetcher = fetcher or Fetcher(self.config)
        self.channel = ProgressChannel()
        self.model = AppModel()
        self._rendered_items: Optional[tuple] = None
        self._fetch_stop: Optional[threading.Event] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with ContentSwitcher(initial="loading-view", id="views"):
            with Vertical(id="loading-view"):
                yield Static(UI_DEFAULTS["title"], id="loading-title", classes="pane-title")
                yield ProgressBar(id="loading-progress", show_eta=False)
                yield Static("", id="loading-label")
            with Vertical(id="stories-view"):
                yield Static("", id="stories-title", classes="pane-title")
                yield StoryList(id="stories-list")
                yield StoryDetails(id="story-details")
            with Vertical(id="error-view"):
                yield ErrorMessage(id="error-message")
        yield StatusBar()

    async def on_mount(self) -> None:
        for theme in self.user_themes.values():
            self.register_theme(theme)
        if self._requested_theme in self.available_themes:
            self.theme = self._requested_theme
        else:
            logger.warning(
                "Theme %s is not available, keeping %s", self._requested_theme, self.theme
            )

        self.set_interval(POLL_INTERVAL, self.poll_channel)
        await self.run_effect(self.model.start_fetch())
        await self.render_state()

    # --- Fetching ---
    def _fetch_stories(self, generation: int, stop: threading.Event) -> None:
        """Thread body: runs the fetcher, reporting into the channel."""
        try:
            self.fetcher.fetch(generation, self.channel.send, cancelled=stop.is_set)
        except Exception as e:
            logger.exception("Fetch generation %d crashed", generation)
            self.channel.send(Failed(f"Unexpected error: {e}", generation=generation))

    def start_fetcher(self, generation: int) -> None:
        # Daemon thread: quitting must never wait on an in-flight request.
        self.cancel_fetch()
        self._fetch_stop = threading.Event()
        threading.Thread(
            target=self._fetch_stories,
            args=(generation, self._fetch_stop),
            name=f"hn-fetcher-{generation}",
            daemon=True,
        ).start()

    def cancel_fetch(self) -> None:
        if self._fetch_stop is not None:
            self._fetch_stop.set()
            self._fetch_stop = None

    async def poll_channel(self) -> None:
        changed = False
        for event in self.channel.drain():
            changed = self.model.apply_event(event) or changed
        if changed:
            await self.render_state()

    # --- Input ---
    async def on_key(self, event: events.Key) -> None:
        action = map_key(self.model.tag, event.key)
        logger.debug("Key %s in %s -> %s", event.key, self.model.tag, action.name)
        effect = self.model.apply_action(action)
        await self.run_effect(effect)
        if not isinstance(effect, Quit):
            await self.render_state()

    async def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        await self._sync_selection(event.list_view)

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        await self._sync_selection(event.list_view)

    async def _sync_selection(self, list_view: ListView) -> None:
        # Mouse clicks move the list directly; the model decides what sticks.
        if not isinstance(list_view, StoryList) or list_view.index is None:
            return
        changed = self.model.select(list_view.index)
        state = self.model.state
        if changed or (isinstance(state, Stories) and list_view.index != state.selected):
            await self.render_state()

    async def run_effect(self, effect: Optional[Effect]) -> None:
        if effect is None:
            return
        if isinstance(effect, Quit):
            self.cancel_fetch()
            self.exit(return_code=effect.return_code)
        elif isinstance(effect, StartFetch):
            self._rendered_items = None
            self.start_fetcher(effect.generation)
        elif isinstance(effect, OpenUrl):
            self.run_worker(
                partial(open_in_browser, effect.url),
                name="browser_launcher",
                exit_on_error=False,
                thread=True,
            )
        elif isinstance(effect, Notice):
            self.notify(effect.message, severity="warning")

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if getattr(event.worker, "name", None) != "browser_launcher":
            return
        if event.state is WorkerState.ERROR:
            error = getattr(event.worker, "error", None)
            logger.error("Browser launch failed: %s", error)
            self.notify(str(error) or "Could not open browser.", severity="error")

    # --- Rendering ---
    async def render_state(self) -> None:
        state = self.model.state
        self.query_one("#views", ContentSwitcher).current = VIEW_IDS[state.tag]
        self.query_one(StatusBar).show_state(state)

        if isinstance(state, Loading):
            self._render_loading(state)
        elif isinstance(state, Stories):
            await self._render_stories(state)
        else:
            self.query_one(ErrorMessage).set_message(state.message)

    def _render_loading(self, state: Loading) -> None:
        bar = self.query_one("#loading-progress", ProgressBar)
        bar.update(total=state.total or None, progress=state.done)
        label = f"{state.done}/{state.total} stories" if state.total else "Fetching top stories..."
        self.query_one("#loading-label", Static).update(label)

    async def _render_stories(self, state: Stories) -> None:
        stories_list = self.query_one(StoryList)
        if self._rendered_items is not state.items:
            await stories_list.clear()
            await stories_list.extend(
                StoryListItem(story, rank) for rank, story in enumerate(state.items, start=1)
            )
            self._rendered_items = state.items
        stories_list.index = state.selected

        self.query_one("#stories-title", Static).update(
            UI_DEFAULTS["stories_title"].format(
                selected=state.selected + 1, total=len(state.items)
            )
        )

        details = self.query_one(StoryDetails)
        details.display = self.model.show_details
        if self.model.show_details:
            details.show_story(state.current)
