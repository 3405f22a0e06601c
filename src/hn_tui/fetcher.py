from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import (
    HTTP_TIMEOUT,
    INITIAL_RETRY_DELAY,
    ITEM_URL,
    MAX_WORKERS,
    MAX_WORKERS_CAP,
    REQUEST_HEADERS,
    RETRY_ATTEMPTS,
    STORY_LIMIT,
    TOP_STORIES_URL,
    get_int_setting,
)
from .datamodels import Completed, Failed, Progress, ProgressEvent, Started, Story
from .errors import FetchError, MalformedResponse, NetworkError, PartialFetchError

logger = logging.getLogger("hn")

EMPTY_LIST_MESSAGE = "No stories were returned."
ALL_FAILED_MESSAGE = "Unable to load any stories."

Emit = Callable[[ProgressEvent], None]

# How long the collecting loop waits for a result before rechecking cancellation.
RESULT_WAIT = 0.1


class Fetcher:
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.story_limit = get_int_setting(self.config, "story_limit", STORY_LIMIT, 1, 500)
        self.max_workers = get_int_setting(
            self.config, "max_workers", MAX_WORKERS, 1, MAX_WORKERS_CAP
        )
        self.timeout = get_int_setting(self.config, "timeout", HTTP_TIMEOUT, 1, 120)
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        retries = Retry(
            total=2, backoff_factor=0.3, status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(
            max_retries=retries,
            pool_connections=self.max_workers,
            pool_maxsize=self.max_workers,
        )
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    def _get_json(self, url: str, attempts: int = RETRY_ATTEMPTS) -> Any:
        delay = INITIAL_RETRY_DELAY
        for attempt in range(1, attempts + 1):
            try:
                logger.debug("Fetching %s (attempt %d/%d)", url, attempt, attempts)
                resp = self.session.get(url, timeout=self.timeout)
                resp.raise_for_status()
                break
            except requests.RequestException as e:
                logger.debug("Fetch attempt %d failed for %s: %s", attempt, url, e)
                if attempt == attempts:
                    logger.warning("All fetch attempts failed for %s", url)
                    raise NetworkError(_describe_request_error(e)) from e
                time.sleep(delay)
                delay *= 2
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponse(f"invalid JSON from {url}") from e

    def get_top_story_ids(self) -> List[int]:
        data = self._get_json(TOP_STORIES_URL)
        if not isinstance(data, list):
            raise MalformedResponse("top stories response is not a list")
        for story_id in data:
            if isinstance(story_id, bool) or not isinstance(story_id, int):
                raise MalformedResponse(f"top stories contains a non-integer id: {story_id!r}")
        return _unique_ordered_ids(data)[: self.story_limit]

    def get_story(self, story_id: int) -> Story:
        data = self._get_json(ITEM_URL.format(id=story_id))
        return Story.from_json(data)

    def _fetch_story(self, story_id: int) -> Story:
        try:
            return self.get_story(story_id)
        except FetchError as e:
            raise PartialFetchError(story_id, str(e)) from e

    def _fetch_worker(
        self,
        pending: queue.SimpleQueue[int],
        results: queue.SimpleQueue[Tuple[int, Optional[Story]]],
        cancelled: Callable[[], bool],
    ) -> None:
        while not cancelled():
            try:
                story_id = pending.get_nowait()
            except queue.Empty:
                return
            try:
                results.put((story_id, self._fetch_story(story_id)))
            except PartialFetchError as e:
                logger.warning("Skipping %s", e)
                results.put((story_id, None))
            except Exception:
                logger.exception("Unexpected error fetching story %d", story_id)
                results.put((story_id, None))

    def fetch(
        self,
        generation: int,
        emit: Emit,
        cancelled: Optional[Callable[[], bool]] = None,
    ) -> None:
        """Load the top stories, reporting every step through ``emit``.

        Emits ``Started`` once, a ``Progress`` per finished detail request and
        exactly one terminal ``Completed`` or ``Failed``. Nothing further is
        emitted once ``cancelled()`` turns true.

        Detail requests run on at most ``max_workers`` daemon threads, so an
        abandoned fetch never holds up interpreter exit.
        """
        if cancelled is None:
            cancelled = _never
        try:
            ids = self.get_top_story_ids()
        except FetchError as e:
            logger.error("Failed to fetch top story ids: %s", e)
            if not cancelled():
                emit(Failed(str(e), generation=generation))
            return

        if cancelled():
            logger.debug("Fetch generation %d cancelled", generation)
            return
        if not ids:
            logger.warning("Top stories list is empty")
            emit(Failed(EMPTY_LIST_MESSAGE, generation=generation))
            return

        total = len(ids)
        emit(Started(total=total, generation=generation))

        pending: queue.SimpleQueue[int] = queue.SimpleQueue()
        for story_id in ids:
            pending.put(story_id)
        results: queue.SimpleQueue[Tuple[int, Optional[Story]]] = queue.SimpleQueue()
        for n in range(min(self.max_workers, total)):
            threading.Thread(
                target=self._fetch_worker,
                args=(pending, results, cancelled),
                name=f"hn-fetch-{generation}-{n}",
                daemon=True,
            ).start()

        loaded: Dict[int, Story] = {}
        done = 0
        while done < total:
            if cancelled():
                logger.debug("Fetch generation %d cancelled", generation)
                return
            try:
                story_id, story = results.get(timeout=RESULT_WAIT)
            except queue.Empty:
                continue
            if story is not None:
                loaded[story_id] = story
            done += 1
            emit(Progress(done=done, total=total, generation=generation))

        if cancelled():
            logger.debug("Fetch generation %d cancelled", generation)
            return
        stories = tuple(loaded[i] for i in ids if i in loaded)
        if not stories:
            logger.error("Every story request failed")
            emit(Failed(ALL_FAILED_MESSAGE, generation=generation))
            return
        logger.info("Loaded %d/%d stories", len(stories), total)
        emit(Completed(stories=stories, generation=generation))


def _never() -> bool:
    return False


def _unique_ordered_ids(items: Iterable[int]) -> List[int]:
    seen = set()
    out: List[int] = []
    for i in items:
        if i not in seen:
            seen.add(i)
            out.append(i)
    return out


def _describe_request_error(e: requests.RequestException) -> str:
    if isinstance(e, requests.Timeout):
        return "The request to Hacker News timed out."
    if isinstance(e, requests.ConnectionError):
        return "Could not connect to Hacker News. Check your network connection."
    if isinstance(e, requests.HTTPError) and e.response is not None:
        return f"Hacker News answered with HTTP {e.response.status_code}."
    return f"Request failed: {e}"
