import datetime
import io

from webfeed import BadTimestamp, decode, parse

UTC = datetime.timezone.utc

ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Feed</title>
  <link rel="self" href="https://example.com/atom.xml"/>
  <link href="https://example.com/"/>
  <updated>2006-01-02T15:04:05Z</updated>
  <entry>
    <title>One</title>
    <link rel="self" href="https://example.com/1.atom"/>
    <link href="https://example.com/1"/>
    <updated>2006-01-02T15:04:05-07:00</updated>
    <summary type="html">&lt;p&gt;Short&lt;/p&gt;</summary>
    <content type="html">&lt;p&gt;Long &lt;em&gt;body&lt;/em&gt;&lt;/p&gt;</content>
  </entry>
  <entry>
    <title>Two</title>
    <link rel="enclosure" href="https://example.com/2.mp3"/>
    <link rel="alternate" href="https://example.com/2"/>
    <published>2006-01-03T00:00:00Z</published>
    <content type="xhtml"><div xmlns="http://www.w3.org/1999/xhtml"><p>Literal &amp;amp; markup</p></div></content>
    <content type="html">ignored</content>
  </entry>
  <entry>
    <title>Three</title>
    <link rel="self" href="https://example.com/3.atom"/>
  </entry>
</feed>
"""


def test_decode_atom():
    feed, err = decode(io.BytesIO(ATOM))
    assert err is None
    assert feed.title == "Atom Feed"
    assert feed.link == "https://example.com/"
    assert feed.updated == datetime.datetime(2006, 1, 2, 15, 4, 5, tzinfo=UTC)
    assert [e.title for e in feed.entries] == ["One", "Two", "Three"]


def test_atom_link_selection():
    feed, _ = parse(ATOM)
    assert [e.link for e in feed.entries] == [
        "https://example.com/1",
        "https://example.com/2",
        "",
    ]


def test_atom_escaped_html_bodies():
    feed, _ = parse(ATOM)
    one = feed.entries[0]
    assert b"<p>Short</p>" in one.summary
    assert b"<p>Long <em>body</em></p>" in one.content
    assert one.when.isoformat() == "2006-01-02T15:04:05-07:00"


def test_atom_xhtml_content_is_not_unescaped():
    feed, _ = parse(ATOM)
    two = feed.entries[1]
    assert b"<p>Literal &amp;amp; markup</p>" in two.content
    assert b"ignored" not in two.content
    assert two.summary == b""


def test_atom_published_fallback():
    feed, _ = parse(ATOM)
    assert feed.entries[1].when == datetime.datetime(2006, 1, 3, tzinfo=UTC)
    assert feed.entries[2].when is None


def test_atom_entry_without_content():
    feed, _ = parse(ATOM)
    three = feed.entries[2]
    assert three.content == b""
    assert three.summary == b""


def test_atom_cdata_content():
    xml = (
        '<feed xmlns="http://www.w3.org/2005/Atom"><entry><title>C</title>'
        '<content type="html"><![CDATA[<p>In <b>CDATA</b></p>]]></content>'
        "</entry></feed>"
    )
    feed, err = parse(xml)
    assert err is None
    assert b"<p>In <b>CDATA</b></p>" in feed.entries[0].content


def test_atom_xhtml_summary_keeps_markup():
    xml = (
        '<feed xmlns="http://www.w3.org/2005/Atom"><entry><title>X</title>'
        '<summary type="xhtml"><div xmlns="http://www.w3.org/1999/xhtml">'
        "<p>Hello <b>there</b></p></div></summary></entry></feed>"
    )
    feed, _ = parse(xml)
    assert b"<b>there</b>" in feed.entries[0].summary


def test_atom_bad_timestamp_is_advisory():
    xml = (
        '<feed xmlns="http://www.w3.org/2005/Atom"><title>F</title>'
        "<updated>2006-01-02T15:04:05Z</updated>"
        '<entry><title>A</title><link href="https://a/"/>'
        "<updated>yesterday</updated><summary>alpha</summary></entry>"
        "<entry><title>B</title><updated>tomorrow</updated></entry>"
        "</feed>"
    )
    feed, err = parse(xml)
    assert isinstance(err, BadTimestamp)
    assert err.value == "yesterday"
    assert feed.updated is not None
    first = feed.entries[0]
    assert first.title == "A"
    assert first.link == "https://a/"
    assert b"alpha" in first.summary
    assert first.when is None
