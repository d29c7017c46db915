from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from .dialects import (
    AtomDocument,
    FeedDocument,
    RssDocument,
    RssItem,
    decode_document,
    parse_xml,
)
from .errors import BadTimestamp
from .markup import repair_html
from .timestamps import parse_atom_timestamp, parse_rss_timestamp

logger = logging.getLogger(__name__)

_RE_XML_DECL_ENCODING = re.compile(
    r'(<\?xml[^>]*encoding=["\'])([^"\']+)(["\'][^>]*\?>)', re.IGNORECASE
)


@dataclass(frozen=True)
class Entry:
    """One item of a feed.

    ``summary`` and ``content`` are UTF-8 HTML fragments that are safe to
    embed. ``content`` is only set when the source has a full-content field
    separate from the summary. ``when`` is None when the date is unknown.
    """

    title: str = ""
    link: str = ""
    summary: bytes = b""
    content: bytes = b""
    when: Optional[datetime.datetime] = None


@dataclass(frozen=True)
class Feed:
    """A decoded feed; ``entries`` are in document order."""

    title: str = ""
    link: str = ""
    updated: Optional[datetime.datetime] = None
    entries: tuple[Entry, ...] = ()


class _TimestampErrors:
    """Keeps the first unparsable timestamp seen during one decode call."""

    __slots__ = ("first",)

    def __init__(self) -> None:
        self.first: Optional[BadTimestamp] = None

    def resolve(
        self,
        parse: Callable[[str], Optional[datetime.datetime]],
        value: str,
    ) -> Optional[datetime.datetime]:
        try:
            return parse(value)
        except BadTimestamp as e:
            if self.first is None:
                self.first = e
            return None


def _repair(text: str) -> bytes:
    return repair_html(text.encode("utf-8"))


def _rss_entry_link(item: RssItem) -> str:
    if item.link:
        return item.link
    if item.guid_is_permalink and item.guid.startswith(("http://", "https://")):
        return item.guid
    return ""


def _rss_feed(
    doc: RssDocument, errors: _TimestampErrors, *, include_content: bool
) -> Feed:
    # The channel date is resolved before any item so it claims the error slot first.
    updated = errors.resolve(
        parse_rss_timestamp, doc.pub_date or doc.last_build_date
    )

    entries = []
    for item in doc.items:
        entries.append(
            Entry(
                title=item.title,
                link=_rss_entry_link(item),
                summary=_repair(item.description),
                content=_repair(item.content) if include_content else b"",
                when=errors.resolve(parse_rss_timestamp, item.pub_date),
            )
        )

    return Feed(
        title=doc.title,
        link=doc.link,
        updated=updated,
        entries=tuple(entries),
    )


def _atom_feed(
    doc: AtomDocument, errors: _TimestampErrors, *, include_content: bool
) -> Feed:
    updated = errors.resolve(parse_atom_timestamp, doc.updated)

    entries = []
    for item in doc.entries:
        content = b""
        if include_content:
            body = item.body()
            if body is not None:
                content = _repair(body)
        summary = _repair(item.summary.data()) if item.summary is not None else b""
        entries.append(
            Entry(
                title=item.title,
                link=item.link(),
                summary=summary,
                content=content,
                when=errors.resolve(
                    parse_atom_timestamp, item.updated or item.published
                ),
            )
        )

    return Feed(
        title=doc.title,
        link=doc.link(),
        updated=updated,
        entries=tuple(entries),
    )


def _normalize(
    doc: FeedDocument, *, include_content: bool
) -> tuple[Feed, Optional[BadTimestamp]]:
    errors = _TimestampErrors()
    if isinstance(doc, RssDocument):
        feed = _rss_feed(doc, errors, include_content=include_content)
    else:
        feed = _atom_feed(doc, errors, include_content=include_content)

    logger.debug("Decoded feed %r with %d entries", feed.title, len(feed.entries))
    if errors.first is not None:
        logger.debug("Feed %r has unparsable timestamps: %s", feed.title, errors.first)
    return feed, errors.first


def _ensure_utf8_xml_declaration(content: str) -> str:
    """Ensure the XML declaration's encoding matches the UTF-8 bytes we emit."""
    if not content.lstrip().startswith("<?xml"):
        return content
    return _RE_XML_DECL_ENCODING.sub(r"\1utf-8\3", content, count=1)


def _decode_bytes(
    content: bytes, *, include_content: bool
) -> tuple[Feed, Optional[BadTimestamp]]:
    root = parse_xml(content)
    return _normalize(decode_document(root), include_content=include_content)


def decode(
    stream: BinaryIO, *, include_content: bool = True
) -> tuple[Feed, Optional[BadTimestamp]]:
    """Decode an RSS or Atom document read from a binary stream.

    The stream is read to the end and left open; it stays the caller's.

    RSS is like the wild west with respect to time. A date that cannot be
    resolved does not stop decoding: the affected field is left as None and
    the first such failure in the document is returned next to the feed.

    Args:
        stream: Binary file-like object positioned at the start of the document
        include_content: Decode and repair the long-form body of each entry

    Returns:
        ``(feed, bad_timestamp)``, where ``bad_timestamp`` is None or the
        advisory BadTimestamp for the first unparsable date

    Raises:
        FeedSyntaxError: If the document is not well-formed XML
    """
    return _decode_bytes(stream.read(), include_content=include_content)


def parse(
    source: str | bytes, *, include_content: bool = True
) -> tuple[Feed, Optional[BadTimestamp]]:
    """Decode an in-memory document; see ``decode``.

    A ``str`` source has its XML declaration rewritten to UTF-8 and is
    decoded from its UTF-8 encoding.
    """
    if isinstance(source, str):
        source = _ensure_utf8_xml_declaration(source).encode("utf-8", errors="replace")
    return _decode_bytes(source, include_content=include_content)
