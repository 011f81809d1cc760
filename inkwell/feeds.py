"""Index and feed building for Inkwell.

This module aggregates the published entries into the two views every
other listing is built from: the blog index listing and the syndication
feed. Both drop drafts and order entries newest first; entries sharing a
publish date keep their load order.

Classes:
    IndexItem: One row of the blog index.
    IndexListing: Ordered index rows plus the "latest N" teaser.
    FeedItem: One syndicated entry with sanitized HTML content.
    FeedDocument: Channel metadata plus ordered feed items.

Functions:
    build_listing: Build (IndexListing, FeedDocument) from entries.
    render_rss: Serialize a FeedDocument as RSS 2.0.
    render_sitemap: Serialize the sitemap of public routes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from .collections import EntryCollection
from .html_utils import join_root_url
from .renderers import render_feed_html
from .routes import BLOG_PATH, FEED_PATH, FEED_STYLESHEET_PATH, post_path
from .utils import format_date, rfc822_date

if TYPE_CHECKING:
    from .content import ContentEntry
    from .templates import TemplateEngine

TEASER_COUNT = 3


@dataclass(frozen=True)
class IndexItem:
    """A row of the blog index.

    Attributes:
        slug: Entry slug.
        title: Entry title.
        link: Root-relative link to the post page.
        description: Entry description.
        date: Display date, e.g. "Jan 5, 2024".
        pub_date: Publish date, for sorting and ``<time>`` elements.
    """

    slug: str
    title: str
    link: str
    description: str
    date: str
    pub_date: date


class IndexListing:
    """Published entries as index rows, newest first."""

    def __init__(self, items: Iterable[IndexItem]):
        self.items = tuple(items)

    def __iter__(self) -> Iterator[IndexItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, item):
        return self.items[item]

    def latest(self, count: int = TEASER_COUNT) -> tuple[IndexItem, ...]:
        return self.items[:count]

    def slugs(self) -> list[str]:
        return [item.slug for item in self.items]


@dataclass(frozen=True)
class FeedItem:
    """A syndicated entry.

    Attributes:
        slug: Entry slug.
        title: Entry title.
        pub_date: Publish date.
        description: Entry description.
        link: Root-relative link, ``/blog/{slug}``.
        url: Absolute link when the site URL is known, else ``link``.
        content: Sanitized HTML rendered from the entry body.
    """

    slug: str
    title: str
    pub_date: date
    description: str
    link: str
    url: str
    content: str

    @property
    def rfc822_date(self) -> str:
        return rfc822_date(self.pub_date)


@dataclass(frozen=True)
class FeedDocument:
    """Channel metadata and items of the RSS feed.

    Attributes:
        title: Channel title.
        description: Channel description.
        site: Site link (absolute when configured).
        stylesheet: Path of the XSL stylesheet referenced by the feed.
        items: Feed items, newest first.
    """

    title: str
    description: str
    site: str
    stylesheet: str
    items: tuple[FeedItem, ...]

    def slugs(self) -> list[str]:
        return [item.slug for item in self.items]


def build_listing(
    entries: Iterable[ContentEntry],
    site: dict[str, Any],
    content_renderer: Callable[..., str] = render_feed_html,
) -> tuple[IndexListing, FeedDocument]:
    """Build the blog index listing and the feed document.

    Args:
        entries: All loaded entries, drafts included.
        site: Site data; uses ``url``, ``feed_title``/``title`` and
            ``feed_description``/``description``.
        content_renderer: Converts an entry body to sanitized HTML.

    Returns:
        Tuple of (IndexListing, FeedDocument). Both are empty, not missing,
        when there are no published entries.
    """
    collection = entries if isinstance(entries, EntryCollection) else EntryCollection(entries)
    ordered = collection.published().sorted(reverse=True)
    site_url = str(site.get("url") or "").rstrip("/")

    index_items: list[IndexItem] = []
    feed_items: list[FeedItem] = []
    for entry in ordered:
        link = post_path(entry.slug)
        index_items.append(
            IndexItem(
                slug=entry.slug,
                title=entry.title,
                link=link,
                description=entry.description,
                date=format_date(entry.pub_date),
                pub_date=entry.pub_date,
            )
        )
        feed_items.append(
            FeedItem(
                slug=entry.slug,
                title=entry.title,
                pub_date=entry.pub_date,
                description=entry.description,
                link=link,
                url=join_root_url(site_url, link),
                content=content_renderer(entry.body, mdx=entry.is_mdx),
            )
        )

    feed = FeedDocument(
        title=str(site.get("feed_title") or site.get("title") or ""),
        description=str(site.get("feed_description") or site.get("description") or ""),
        site=f"{site_url}/" if site_url else "/",
        stylesheet=FEED_STYLESHEET_PATH,
        items=tuple(feed_items),
    )
    return IndexListing(index_items), feed


def render_rss(feed: FeedDocument, engine: TemplateEngine) -> str:
    """Serialize the feed as RSS 2.0 through the ``rss.xml.jinja`` template."""
    return engine.render("rss.xml.jinja", feed=feed, feed_url=engine.url_for(FEED_PATH))


def render_sitemap(listing: IndexListing, engine: TemplateEngine) -> str:
    """Serialize the sitemap: home, blog index and every published post."""
    newest = listing[0].pub_date.isoformat() if len(listing) else None
    urls = [
        (engine.url_for("/"), newest),
        (engine.url_for(BLOG_PATH), newest),
    ]
    urls.extend((engine.url_for(item.link), item.pub_date.isoformat()) for item in listing)
    return engine.render("sitemap.xml.jinja", urls=urls)
