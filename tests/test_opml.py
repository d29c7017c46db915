import io

import pytest

from webfeed import FeedSyntaxError, read_opml

OPML = b"""<?xml version="1.0" encoding="utf-8"?>
<opml version="1.0">
  <head><title>Subscriptions</title></head>
  <body>
    <outline text="Tech" xmlUrl="https://tech.example/folder.xml">
      <outline text="A" xmlUrl="https://a.example/feed"/>
      <outline text="B" type="rss" xmlUrl="https://b.example/rss"/>
      <outline text="No feed"/>
    </outline>
    <outline text="C" xmlUrl="https://c.example/atom"/>
  </body>
</opml>
"""


def test_read_opml_depth_first():
    assert read_opml(io.BytesIO(OPML)) == [
        "https://tech.example/folder.xml",
        "https://a.example/feed",
        "https://b.example/rss",
        "https://c.example/atom",
    ]


def test_read_opml_without_body():
    assert read_opml(io.BytesIO(b"<opml><head/></opml>")) == []


def test_read_opml_malformed():
    with pytest.raises(FeedSyntaxError):
        read_opml(io.BytesIO(b"<opml><body><outline></body></opml>"))
