"""Reader for OPML subscription lists."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, BinaryIO

from .dialects import _children, _first_child, parse_xml

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)


def _walk_outlines(outline: _Element, urls: list[str]) -> None:
    url = (outline.get("xmlUrl") or "").strip()
    if url:
        urls.append(url)
    for _, local, child in _children(outline):
        if local == "outline":
            _walk_outlines(child, urls)


def read_opml(stream: BinaryIO) -> list[str]:
    """Return the feed URLs of an OPML document.

    Every ``xmlUrl`` under ``<body>`` is collected depth-first, a folder
    outline before the outlines nested in it.

    Raises:
        FeedSyntaxError: If the document is not well-formed XML
    """
    root = parse_xml(stream.read())
    urls: list[str] = []
    body = _first_child(root, "body")
    if body is not None:
        _walk_outlines(body, urls)
    logger.debug("Got %d URLs from OPML", len(urls))
    return urls
