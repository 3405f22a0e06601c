from __future__ import annotations

from datetime import datetime, timezone

import pytest

from hn_tui.datamodels import Story


def make_story(story_id: int, title: str = "", url: str | None = "https://example.com") -> Story:
    return Story(
        id=story_id,
        title=title or f"Story {story_id}",
        author="pg",
        score=10 + story_id,
        comments=story_id,
        posted=datetime(2024, 1, 1, tzinfo=timezone.utc),
        url=url,
    )


def item_json(story_id: int, **overrides) -> dict:
    data = {
        "id": story_id,
        "title": f"Story {story_id}",
        "by": "pg",
        "score": 42,
        "descendants": 7,
        "time": 1704067200,
        "url": f"https://example.com/{story_id}",
        "type": "story",
    }
    data.update(overrides)
    return data


@pytest.fixture
def five_stories():
    return tuple(make_story(i, title) for i, title in enumerate("ABCDE", start=1))
