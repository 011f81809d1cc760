import xml.etree.ElementTree as ET
from datetime import date

import pytest

from inkwell.content import ContentEntry
from inkwell.feeds import FeedDocument, build_listing, render_rss, render_sitemap
from inkwell.templates import TemplateEngine

SITE = {
    "title": "Marioph",
    "description": "Personal site",
    "url": "https://example.com/",
    "feed_title": "Marioph Blog",
    "feed_description": "Sometimes I write about stuff.",
}


def _entry(slug, pub_date, draft=False, body="Hello.\n"):
    return ContentEntry(
        slug=slug,
        title=slug.upper(),
        description=f"About {slug}",
        pub_date=pub_date,
        body=body,
        draft=draft,
    )


@pytest.fixture
def entries():
    return [
        _entry("a", date(2024, 1, 1)),
        _entry("b", date(2024, 6, 1), draft=True),
        _entry("c", date(2023, 1, 1)),
    ]


def test_listing_excludes_drafts_and_sorts_newest_first(entries):
    listing, feed = build_listing(entries, SITE)
    assert listing.slugs() == ["a", "c"]
    assert feed.slugs() == ["a", "c"]
    first = listing[0]
    assert first.link == "/blog/a"
    assert first.date == "Jan 1, 2024"
    assert first.description == "About a"


def test_feed_channel_metadata(entries):
    _, feed = build_listing(entries, SITE)
    assert feed.title == "Marioph Blog"
    assert feed.description == "Sometimes I write about stuff."
    assert feed.site == "https://example.com/"
    assert feed.stylesheet == "/rss/styles.xsl"
    item = feed.items[0]
    assert item.link == "/blog/a"
    assert item.url == "https://example.com/blog/a"
    assert item.rfc822_date == "Mon, 01 Jan 2024 00:00:00 +0000"


def test_feed_falls_back_to_site_title_and_relative_links():
    _, feed = build_listing([_entry("a", date(2024, 1, 1))], {"title": "Plain"})
    assert feed.title == "Plain"
    assert feed.site == "/"
    assert feed.items[0].url == "/blog/a"


def test_latest_teaser_takes_three():
    entries = [_entry(f"p{i}", date(2024, 1, i + 1)) for i in range(5)]
    listing, _ = build_listing(entries, SITE)
    assert [item.slug for item in listing.latest()] == ["p4", "p3", "p2"]


def test_drafts_are_never_rendered_for_the_feed(entries):
    rendered = []

    def fake_renderer(body, mdx=False):
        rendered.append(body)
        return "<p>x</p>"

    _, feed = build_listing(entries, SITE, content_renderer=fake_renderer)
    assert len(rendered) == 2
    assert all(item.content == "<p>x</p>" for item in feed.items)


def test_feed_content_is_sanitized():
    entry = _entry("x", date(2024, 1, 1), body="Hi <script>alert(1)</script> there\n")
    _, feed = build_listing([entry], SITE)
    assert "script" not in feed.items[0].content
    assert "Hi" in feed.items[0].content


def test_empty_listing():
    listing, feed = build_listing([], SITE)
    assert len(listing) == 0
    assert listing.latest() == ()
    assert isinstance(feed, FeedDocument)
    assert feed.items == ()


def test_render_rss(entries):
    engine = TemplateEngine(SITE)
    _, feed = build_listing(entries, SITE)
    xml = render_rss(feed, engine)
    assert '<?xml-stylesheet href="/rss/styles.xsl" type="text/xsl"?>' in xml

    root = ET.fromstring(xml)
    channel = root.find("channel")
    assert channel.findtext("title") == "Marioph Blog"
    items = channel.findall("item")
    assert [i.findtext("link") for i in items] == [
        "https://example.com/blog/a",
        "https://example.com/blog/c",
    ]
    content = items[0].findtext("{http://purl.org/rss/1.0/modules/content/}encoded")
    assert content.strip() == "<p>Hello.</p>"
    atom = channel.find("{http://www.w3.org/2005/Atom}link")
    assert atom.get("href") == "https://example.com/rss.xml"


def test_render_rss_without_items():
    engine = TemplateEngine(SITE)
    _, feed = build_listing([], SITE)
    root = ET.fromstring(render_rss(feed, engine))
    assert root.find("channel").findall("item") == []


def test_render_sitemap(entries):
    engine = TemplateEngine(SITE)
    listing, _ = build_listing(entries, SITE)
    root = ET.fromstring(render_sitemap(listing, engine))
    ns = {"s": "http://www.sitemaps.org/schemas/sitemap/0.9"}
    locs = [u.findtext("s:loc", namespaces=ns) for u in root.findall("s:url", ns)]
    assert locs == [
        "https://example.com/",
        "https://example.com/blog",
        "https://example.com/blog/a",
        "https://example.com/blog/c",
    ]
    assert "blog/b" not in "".join(locs)
    lastmods = [u.findtext("s:lastmod", namespaces=ns) for u in root.findall("s:url", ns)]
    assert lastmods == ["2024-01-01", "2024-01-01", "2024-01-01", "2023-01-01"]
