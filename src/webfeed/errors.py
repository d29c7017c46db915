"""Error types raised or returned by the feed decoder."""

from __future__ import annotations


class WebfeedError(Exception):
    """Base class for webfeed errors."""


class FeedSyntaxError(WebfeedError, ValueError):
    """The document is not well-formed XML; no feed can be produced."""


class BadTimestamp(WebfeedError):
    """A date string that matched none of the known formats.

    Returned, not raised, by ``decode``: the feed it accompanies is
    complete apart from the unresolved instants.

    Attributes:
        value: The offending date string, exactly as found in the document.
    """

    def __init__(self, value: str) -> None:
        super().__init__(f"Unable to parse time: {value}")
        self.value = value


__all__ = ["WebfeedError", "FeedSyntaxError", "BadTimestamp"]
