from __future__ import annotations


class HNError(Exception):
    """Base class for errors raised by the Hacker News client."""


class FetchError(HNError):
    pass


class NetworkError(FetchError):
    """Connection failure, timeout or non-success HTTP status."""


class MalformedResponse(FetchError):
    """The API answered, but not with the JSON shape we expect."""


class PartialFetchError(FetchError):
    """A single story could not be loaded. The rest of the batch carries on."""

    def __init__(self, story_id: int, reason: str):
        self.story_id = story_id
        self.reason = reason
        super().__init__(f"story {story_id}: {reason}")


class BrowserLaunchError(HNError):
    pass
