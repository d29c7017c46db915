"""Markup repair for entry bodies.

Feeds embed entry bodies as raw HTML, escaped HTML, double-escaped HTML or
truncated fragments. Round-tripping a body through a full HTML parse fixes
bad nesting and undoes one layer of escaping; whenever that round trip
cannot produce a clean ``<body>`` the original bytes are escaped and
returned as literal text instead.
"""

from __future__ import annotations

import html as _html_mod
import logging
from typing import TYPE_CHECKING, Optional

from lxml import etree

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

_OPEN_BODY = b"<body>"
_CLOSE_BODY = b"</body>"

_HTML_PARSER = etree.HTMLParser(
    encoding="utf-8",
    recover=True,
    collect_ids=False,
    remove_comments=False,
)


def escape_html(wild: bytes) -> bytes:
    """Entity-escape ``wild`` so it renders as literal text."""
    if not wild:
        return b""
    text = wild.decode("utf-8", errors="replace")
    return _html_mod.escape(text, quote=True).encode("utf-8")


def _parse_document(wild: bytes) -> Optional[_Element]:
    if not wild.strip():
        return None
    try:
        doc = etree.fromstring(wild, parser=_HTML_PARSER)
    except (etree.ParseError, etree.ParserError):
        return None
    return doc


def _render_document(doc: _Element) -> Optional[bytes]:
    try:
        return etree.tostring(doc, method="html", encoding="utf-8")
    except etree.SerialisationError:
        return None


def _body_fragment(rendered: bytes) -> Optional[bytes]:
    start = rendered.find(_OPEN_BODY)
    if start < 0:
        return None
    start += len(_OPEN_BODY)
    end = rendered.find(_CLOSE_BODY, start)
    if end < 0:
        return None
    return rendered[start:end]


def repair_html(wild: bytes) -> bytes:
    """Return ``wild`` as a well-formed HTML fragment.

    The result is either the contents of ``<body>`` after an HTML parse and
    re-serialization, or ``wild`` escaped as text. Bad input never raises;
    running out of memory while parsing or rendering also falls back to
    escaping. Any other failure inside lxml propagates.
    """
    try:
        doc = _parse_document(wild)
        if doc is None:
            if not wild:
                return b""
            logger.debug("HTML parse failed, escaping %d bytes", len(wild))
            return escape_html(wild)

        # Head-only input (a lone <style>, <script> or comment) renders no body.
        if doc.find("body") is None:
            return b""

        rendered = _render_document(doc)
    except MemoryError:
        logger.warning("Body too large to repair, escaping %d bytes", len(wild))
        return escape_html(wild)

    if rendered is None:
        logger.debug("HTML render failed, escaping %d bytes", len(wild))
        return escape_html(wild)

    fragment = _body_fragment(rendered)
    if fragment is None:
        logger.debug("No <body> in rendered HTML, escaping %d bytes", len(wild))
        return escape_html(wild)

    return fragment
