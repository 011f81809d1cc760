"""Route generation for Inkwell.

Routes are a pure function of the entry set: every entry gets a post page,
entries without an author-supplied image also get a generated preview
image, and the aggregate pages (home, blog index, feed, sitemap, home
preview) are emitted exactly once, even for an empty store.

Key names:
- RouteKind: Enumeration of the artifacts the site produces.
- Route: Frozen (kind, path, slug) value with its output file path.
- generate_routes: Derive the full route set from entries.
- sorted_routes: Deterministic ordering for writing and listing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .content import ContentEntry


class RouteKind(str, Enum):
    POST_PAGE = "post-page"
    POST_PREVIEW_IMAGE = "post-preview-image"
    INDEX_PAGE = "index-page"
    FEED_DOCUMENT = "feed-document"
    HOME_PAGE = "home-page"
    HOME_PREVIEW_IMAGE = "home-preview-image"
    SITEMAP = "sitemap"


BLOG_PATH = "/blog"
FEED_PATH = "/rss.xml"
SITEMAP_PATH = "/sitemap.xml"
HOME_PREVIEW_PATH = "/og.png"
FEED_STYLESHEET_PATH = "/rss/styles.xsl"


def post_path(slug: str) -> str:
    return f"{BLOG_PATH}/{slug}"


def post_preview_path(slug: str) -> str:
    return f"{BLOG_PATH}/{slug}/og.png"


@dataclass(frozen=True)
class Route:
    """A single output of the build.

    Attributes:
        kind: What gets rendered for this route.
        path: URL path, e.g. ``/blog/hello``.
        slug: Entry slug for per-entry routes, None for aggregate routes.
    """

    kind: RouteKind
    path: str
    slug: str | None = None

    @property
    def output_path(self) -> str:
        """Relative file path written under the output directory.

        Paths with a file extension are written as-is; page paths become
        ``<path>/index.html``.
        """
        rel = self.path.strip("/")
        if PurePosixPath(rel).suffix:
            return rel
        return f"{rel}/index.html" if rel else "index.html"

    @property
    def is_html(self) -> bool:
        return self.output_path.endswith(".html")


def generate_routes(entries: Iterable[ContentEntry]) -> frozenset[Route]:
    """Derive every route of the site from the entry set.

    Args:
        entries: Loaded entries, drafts included.

    Returns:
        The route set. Calling this twice on the same entries returns equal sets.
    """
    routes = {
        Route(RouteKind.HOME_PAGE, "/"),
        Route(RouteKind.HOME_PREVIEW_IMAGE, HOME_PREVIEW_PATH),
        Route(RouteKind.INDEX_PAGE, BLOG_PATH),
        Route(RouteKind.FEED_DOCUMENT, FEED_PATH),
        Route(RouteKind.SITEMAP, SITEMAP_PATH),
    }
    for entry in entries:
        routes.add(Route(RouteKind.POST_PAGE, post_path(entry.slug), entry.slug))
        # Author-supplied images win over generated ones
        if not entry.image:
            routes.add(
                Route(
                    RouteKind.POST_PREVIEW_IMAGE,
                    post_preview_path(entry.slug),
                    entry.slug,
                )
            )
    return frozenset(routes)


def sorted_routes(routes: Iterable[Route]) -> list[Route]:
    return sorted(routes, key=lambda r: (r.path, r.kind.value))
