from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Optional, Tuple, Union

from .errors import MalformedResponse


def _require_int(data: dict, key: str, default: Optional[int] = None) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedResponse(f"field {key!r} is not an integer: {value!r}")
    if value < 0:
        raise MalformedResponse(f"field {key!r} is negative: {value!r}")
    return value


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise MalformedResponse(f"field {key!r} is not a string: {value!r}")
    return value


# --- Data models ---
@dataclass(frozen=True)
class Story:
    id: int
    title: str
    author: str
    score: int
    comments: int
    posted: datetime
    url: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> Story:
        """Build a story from an ``item/<id>.json`` payload."""
        if not isinstance(data, dict):
            raise MalformedResponse(f"expected an object, got {type(data).__name__}")
        if data.get("deleted") or data.get("dead"):
            raise MalformedResponse(f"item {data.get('id')} is deleted")
        url = data.get("url")
        if url is not None and not isinstance(url, str):
            raise MalformedResponse(f"field 'url' is not a string: {url!r}")
        return cls(
            id=_require_int(data, "id"),
            title=_require_str(data, "title"),
            author=_require_str(data, "by"),
            score=_require_int(data, "score"),
            comments=_require_int(data, "descendants", 0),
            posted=datetime.fromtimestamp(_require_int(data, "time"), tz=timezone.utc),
            url=url or None,
        )


# --- Progress events ---
# Each event carries the generation of the fetch that produced it so the
# UI can drop output from a fetch that has since been superseded.
@dataclass(frozen=True)
class Started:
    total: int
    generation: int = 0


@dataclass(frozen=True)
class Progress:
    done: int
    total: int
    generation: int = 0


@dataclass(frozen=True)
class Completed:
    stories: Tuple[Story, ...]
    generation: int = 0


@dataclass(frozen=True)
class Failed:
    message: str
    generation: int = 0


ProgressEvent = Union[Started, Progress, Completed, Failed]


# --- Application states ---
@dataclass(frozen=True)
class Loading:
    tag: ClassVar[str] = "loading"

    done: int = 0
    total: int = 0


@dataclass(frozen=True)
class Stories:
    tag: ClassVar[str] = "stories"

    items: Tuple[Story, ...]
    selected: int = 0

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("Stories requires at least one story")
        if not 0 <= self.selected < len(self.items):
            raise ValueError(
                f"selected index {self.selected} out of range for {len(self.items)} stories"
            )

    @property
    def current(self) -> Story:
        return self.items[self.selected]


@dataclass(frozen=True)
class Error:
    tag: ClassVar[str] = "error"

    message: str


AppState = Union[Loading, Stories, Error]
