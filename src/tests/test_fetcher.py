from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import item_json
from hn_tui.config import ITEM_URL, TOP_STORIES_URL
from hn_tui.datamodels import Completed, Failed, Progress, Started
from hn_tui.errors import MalformedResponse, NetworkError
from hn_tui.fetcher import ALL_FAILED_MESSAGE, EMPTY_LIST_MESSAGE, Fetcher


@pytest.fixture
def fetcher():
    return Fetcher({"max_workers": 4})


def fake_api(ids, items=None, failing=()):
    """Build a ``_get_json`` replacement serving ``ids`` and their items."""
    items = items or {}

    def get_json(url):
        if url == TOP_STORIES_URL:
            if isinstance(ids, Exception):
                raise ids
            return ids
        for story_id in ids:
            if url == ITEM_URL.format(id=story_id):
                if story_id in failing:
                    raise NetworkError("The request to Hacker News timed out.")
                return items.get(story_id, item_json(story_id))
        raise AssertionError(f"unexpected url {url}")

    return get_json


def run_fetch(fetcher, generation=1, cancelled=None):
    events = []
    fetcher.fetch(generation, events.append, cancelled=cancelled)
    return events


def test_fetch_emits_started_progress_completed_in_order(fetcher):
    ids = [5, 3, 9, 1, 7]
    with patch.object(fetcher, "_get_json", side_effect=fake_api(ids)):
        events = run_fetch(fetcher, generation=3)

    assert events[0] == Started(total=5, generation=3)
    progress = events[1:-1]
    assert [e.done for e in progress] == [1, 2, 3, 4, 5]
    assert all(isinstance(e, Progress) and e.total == 5 and e.generation == 3 for e in progress)
    completed = events[-1]
    assert isinstance(completed, Completed)
    assert completed.generation == 3
    assert [s.id for s in completed.stories] == ids


def test_single_story_failure_is_skipped(fetcher):
    ids = [1, 2, 3]
    with patch.object(fetcher, "_get_json", side_effect=fake_api(ids, failing={2})):
        events = run_fetch(fetcher)

    assert [e.done for e in events if isinstance(e, Progress)] == [1, 2, 3]
    assert [s.id for s in events[-1].stories] == [1, 3]


def test_malformed_story_is_skipped(fetcher):
    ids = [1, 2]
    api = fake_api(ids, items={1: {"id": 1, "type": "story"}})
    with patch.object(fetcher, "_get_json", side_effect=api):
        events = run_fetch(fetcher)
    assert [s.id for s in events[-1].stories] == [2]


def test_top_list_failure_emits_only_failed(fetcher):
    error = NetworkError("Could not connect to Hacker News. Check your network connection.")
    with patch.object(fetcher, "_get_json", side_effect=fake_api(error)):
        events = run_fetch(fetcher, generation=2)
    assert events == [Failed(str(error), generation=2)]


def test_malformed_top_list_emits_failed(fetcher):
    with patch.object(fetcher, "_get_json", side_effect=fake_api({"oops": 1})):
        events = run_fetch(fetcher)
    assert len(events) == 1
    assert isinstance(events[0], Failed)


def test_empty_top_list_is_a_failure(fetcher):
    with patch.object(fetcher, "_get_json", side_effect=fake_api([])):
        events = run_fetch(fetcher)
    assert events == [Failed(EMPTY_LIST_MESSAGE, generation=1)]


def test_all_stories_failing_is_a_failure(fetcher):
    ids = [1, 2]
    with patch.object(fetcher, "_get_json", side_effect=fake_api(ids, failing={1, 2})):
        events = run_fetch(fetcher)
    assert events[-1] == Failed(ALL_FAILED_MESSAGE, generation=1)
    assert sum(isinstance(e, Completed) for e in events) == 0


def test_top_ids_are_deduplicated_and_limited():
    fetcher = Fetcher({"story_limit": 3})
    with patch.object(fetcher, "_get_json", return_value=[4, 4, 2, 8, 2, 6]):
        assert fetcher.get_top_story_ids() == [4, 2, 8]


def test_top_ids_must_be_integers(fetcher):
    with patch.object(fetcher, "_get_json", return_value=[1, "2"]):
        with pytest.raises(MalformedResponse):
            fetcher.get_top_story_ids()


def test_cancelled_fetch_stops_emitting(fetcher):
    ids = [1, 2, 3]
    events = []

    def emit(event):
        events.append(event)

    with patch.object(fetcher, "_get_json", side_effect=fake_api(ids)):
        fetcher.fetch(1, emit, cancelled=lambda: any(isinstance(e, Progress) for e in events))
    assert events == [Started(total=3, generation=1), Progress(done=1, total=3, generation=1)]


def test_fetch_cancelled_before_start_emits_nothing(fetcher):
    with patch.object(fetcher, "_get_json", side_effect=fake_api([1, 2])):
        assert run_fetch(fetcher, cancelled=lambda: True) == []


def test_detail_requests_run_on_daemon_threads(fetcher):
    ids = [1, 2, 3, 4, 5, 6]
    api = fake_api(ids)
    threads = set()

    def get_json(url):
        if url != TOP_STORIES_URL:
            threads.add(threading.current_thread())
        return api(url)

    with patch.object(fetcher, "_get_json", side_effect=get_json):
        events = run_fetch(fetcher)
    assert isinstance(events[-1], Completed)
    assert threads
    assert len(threads) <= fetcher.max_workers
    assert all(t.daemon and t is not threading.main_thread() for t in threads)


def test_get_json_raises_network_error_after_retries(fetcher):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError(response=MagicMock(status_code=503))
    with patch.object(fetcher.session, "get", return_value=response) as mock_get, patch(
        "hn_tui.fetcher.time.sleep"
    ):
        with pytest.raises(NetworkError, match="HTTP 503"):
            fetcher._get_json(TOP_STORIES_URL)
    assert mock_get.call_count == 2
    assert mock_get.call_args.kwargs["timeout"] == fetcher.timeout


def test_get_json_timeout(fetcher):
    with patch.object(fetcher.session, "get", side_effect=requests.Timeout()), patch(
        "hn_tui.fetcher.time.sleep"
    ):
        with pytest.raises(NetworkError, match="timed out"):
            fetcher._get_json(TOP_STORIES_URL)


def test_get_json_invalid_body(fetcher):
    response = MagicMock()
    response.json.side_effect = ValueError("no json")
    with patch.object(fetcher.session, "get", return_value=response):
        with pytest.raises(MalformedResponse):
            fetcher._get_json(TOP_STORIES_URL)


def test_config_tunables_are_clamped():
    fetcher = Fetcher({"max_workers": 500, "story_limit": 0, "timeout": "soon"})
    assert fetcher.max_workers == 20
    assert fetcher.story_limit == 1
    assert fetcher.timeout == 10
