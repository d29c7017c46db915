import logging

from .errors import BadTimestamp, FeedSyntaxError, WebfeedError
from .main import Entry, Feed, decode, parse
from .markup import escape_html, repair_html
from .opml import read_opml
from .timestamps import parse_atom_timestamp, parse_rss_timestamp

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BadTimestamp",
    "Entry",
    "Feed",
    "FeedSyntaxError",
    "WebfeedError",
    "decode",
    "escape_html",
    "parse",
    "parse_atom_timestamp",
    "parse_rss_timestamp",
    "read_opml",
    "repair_html",
]
