"""Structural decoders for the two supported feed dialects.

A document is parsed once into an lxml tree. ``detect_dialect`` picks RSS or
Atom, and the matching decoder maps element names onto a dialect-local
record. Elements are matched by local name so that RSS 1.0 (RDF) channels
and prefixed Atom documents decode through the same tables. No semantic
validation happens here: a well-formed document with none of the expected
elements decodes to an empty record.
"""

from __future__ import annotations

import html as _html_mod
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, Optional, Union

from lxml import etree

from .errors import FeedSyntaxError

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

_Dialect = Literal["rss", "atom"]

_ATOM_NS = "http://www.w3.org/2005/Atom"
_RSS_CONTENT_ENCODED_TAG = "{http://purl.org/rss/1.0/modules/content/}encoded"

_STRICT_XML_PARSER = etree.XMLParser(
    ns_clean=True,
    recover=False,
    collect_ids=False,
    resolve_entities=False,
)


def parse_xml(content: bytes) -> _Element:
    """Parse ``content`` as XML, raising FeedSyntaxError if it is malformed."""
    try:
        root = etree.fromstring(content, parser=_STRICT_XML_PARSER)
    except etree.XMLSyntaxError as e:
        raise FeedSyntaxError(f"Failed to parse XML content: {e}") from e

    if root is None:
        raise FeedSyntaxError("Failed to parse XML: received empty content")
    return root


def _local_name(tag: str) -> str:
    return tag.split("}", 1)[1] if tag[0] == "{" else tag


def _namespace(tag: str) -> str:
    return tag[1:].split("}", 1)[0] if tag[0] == "{" else ""


def _children(element: _Element):
    """Yield ``(tag, local name, child)`` for element children, skipping comments and PIs."""
    for child in element:
        tag = child.tag
        if not isinstance(tag, str):
            continue
        yield tag, _local_name(tag), child


def _first_child(element: _Element, name: str) -> Optional[_Element]:
    for _, local, child in _children(element):
        if local == name:
            return child
    return None


def _raw_text(element: _Element) -> str:
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts)


def _text(element: _Element) -> str:
    """Character data directly inside ``element``, nested elements excluded."""
    return _raw_text(element).strip()


def _inner_xml(element: _Element) -> str:
    """Serialized contents of ``element`` without its own start and end tags."""
    parts = [_html_mod.escape(element.text, quote=False)] if element.text else []
    parts.extend(
        etree.tostring(child, encoding="unicode", method="xml", with_tail=True)
        for child in element
    )
    return "".join(parts)


@dataclass
class RssItem:
    title: str = ""
    link: str = ""
    description: str = ""
    # <content:encoded>, the one vendor extension carried through
    content: str = ""
    pub_date: str = ""
    guid: str = ""
    guid_is_permalink: bool = True


@dataclass
class RssDocument:
    title: str = ""
    link: str = ""
    description: str = ""
    pub_date: str = ""
    last_build_date: str = ""
    items: list[RssItem] = field(default_factory=list)


@dataclass
class AtomLink:
    rel: str = ""
    href: str = ""


@dataclass
class AtomContent:
    """An Atom text construct: its ``type`` attribute and raw inner markup."""

    type: str = ""
    raw: str = ""

    def data(self) -> str:
        # Non-xhtml content is escaped inline; xhtml is already literal markup.
        if self.type != "xhtml":
            return _html_mod.unescape(self.raw)
        return self.raw


def _alternate_href(links: list[AtomLink]) -> str:
    for link in links:
        if link.rel in ("", "alternate"):
            return link.href
    return ""


@dataclass
class AtomEntry:
    title: str = ""
    links: list[AtomLink] = field(default_factory=list)
    updated: str = ""
    published: str = ""
    summary: Optional[AtomContent] = None
    contents: list[AtomContent] = field(default_factory=list)

    def link(self) -> str:
        return _alternate_href(self.links)

    def body(self) -> Optional[str]:
        """The first content block, or None when the entry has none."""
        if not self.contents:
            return None
        return self.contents[0].data()


@dataclass
class AtomDocument:
    title: str = ""
    links: list[AtomLink] = field(default_factory=list)
    updated: str = ""
    entries: list[AtomEntry] = field(default_factory=list)

    def link(self) -> str:
        return _alternate_href(self.links)


FeedDocument = Union[RssDocument, AtomDocument]


def _rss_fields(element: _Element):
    """Children of an RSS element, minus Atom-namespace elements such as ``atom:link``."""
    for tag, local, child in _children(element):
        if _namespace(tag) == _ATOM_NS:
            continue
        yield tag, local, child


def _has_channel_title(channel: _Element) -> bool:
    # Whitespace counts: the check is on the unstripped text.
    for _, local, child in _rss_fields(channel):
        if local == "title" and _raw_text(child):
            return True
    return False


def detect_dialect(root: _Element) -> _Dialect:
    """Classify a document as RSS when its ``channel`` has a non-empty title.

    The title text is tested before stripping, so a whitespace-only title
    still marks the document as RSS.

    Anything else, including documents that are neither RSS nor Atom, is
    treated as Atom.
    """
    channel = _first_child(root, "channel")
    if channel is not None and _has_channel_title(channel):
        return "rss"
    return "atom"


def _decode_rss_item(item: _Element) -> RssItem:
    entry = RssItem()
    for tag, local, child in _rss_fields(item):
        if tag == _RSS_CONTENT_ENCODED_TAG:
            if not entry.content:
                entry.content = _text(child)
        elif local == "title" and not entry.title:
            entry.title = _text(child)
        elif local == "link" and not entry.link:
            entry.link = _text(child)
        elif local == "description" and not entry.description:
            entry.description = _text(child)
        elif local == "pubDate" and not entry.pub_date:
            entry.pub_date = _text(child)
        elif local == "guid" and not entry.guid:
            entry.guid = _text(child)
            entry.guid_is_permalink = child.get("isPermaLink", "true") != "false"
    return entry


def decode_rss(root: _Element) -> RssDocument:
    """Map an RSS ``channel`` and its items onto an RssDocument."""
    doc = RssDocument()
    channel = _first_child(root, "channel")
    if channel is None:
        return doc

    items: list[_Element] = []
    for _, local, child in _rss_fields(channel):
        if local == "item":
            items.append(child)
        elif local == "title" and not doc.title:
            doc.title = _text(child)
        elif local == "link" and not doc.link:
            doc.link = _text(child)
        elif local == "description" and not doc.description:
            doc.description = _text(child)
        elif local == "pubDate" and not doc.pub_date:
            doc.pub_date = _text(child)
        elif local == "lastBuildDate" and not doc.last_build_date:
            doc.last_build_date = _text(child)

    # RSS 1.0 keeps items beside the channel rather than inside it.
    if not items:
        items = [child for _, local, child in _rss_fields(root) if local == "item"]

    doc.items = [_decode_rss_item(item) for item in items]
    return doc


def _decode_atom_link(element: _Element) -> AtomLink:
    return AtomLink(
        rel=(element.get("rel") or "").strip(),
        href=(element.get("href") or "").strip(),
    )


def _decode_atom_content(element: _Element) -> AtomContent:
    return AtomContent(type=element.get("type", ""), raw=_inner_xml(element))


def _decode_atom_entry(item: _Element) -> AtomEntry:
    entry = AtomEntry()
    for _, local, child in _children(item):
        if local == "title" and not entry.title:
            entry.title = _text(child)
        elif local == "link":
            entry.links.append(_decode_atom_link(child))
        elif local == "updated" and not entry.updated:
            entry.updated = _text(child)
        elif local == "published" and not entry.published:
            entry.published = _text(child)
        elif local == "summary" and entry.summary is None:
            entry.summary = _decode_atom_content(child)
        elif local == "content":
            entry.contents.append(_decode_atom_content(child))
    return entry


def decode_atom(root: _Element) -> AtomDocument:
    """Map an Atom ``feed`` element and its entries onto an AtomDocument."""
    doc = AtomDocument()
    for _, local, child in _children(root):
        if local == "entry":
            doc.entries.append(_decode_atom_entry(child))
        elif local == "title" and not doc.title:
            doc.title = _text(child)
        elif local == "link":
            doc.links.append(_decode_atom_link(child))
        elif local == "updated" and not doc.updated:
            doc.updated = _text(child)
    return doc


def decode_document(root: _Element) -> FeedDocument:
    dialect = detect_dialect(root)
    logger.debug("Detected %s document with root <%s>", dialect, _local_name(root.tag))
    if dialect == "rss":
        return decode_rss(root)
    return decode_atom(root)
