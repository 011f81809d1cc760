"""Artifact rendering for Inkwell.

Each route kind has one ArtifactRenderer that turns a Route into the bytes
written to disk. Renderers only read from the shared RenderContext, so
routes can be rendered in any order or concurrently.

Classes:
    RenderContext: Everything a renderer may read.
    ArtifactRenderer: Abstract base class for route renderers.
    PostPageRenderer, IndexPageRenderer, HomePageRenderer: HTML pages.
    PostPreviewRenderer, HomePreviewRenderer: PNG preview cards.
    FeedRenderer, SitemapRenderer: XML documents.
    ArtifactRegistry: Maps route kinds to renderers.

Functions:
    create_default_artifact_registry: Registry with every route kind.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from markupsafe import Markup

from .assets import is_remote
from .collections import EntryCollection
from .content import ContentEntry
from .feeds import FeedDocument, IndexListing, render_rss, render_sitemap
from .images import FontSet, ImageComposer, home_preview, post_preview
from .renderers import MarkdownRenderer
from .routes import (
    BLOG_PATH,
    HOME_PREVIEW_PATH,
    Route,
    RouteKind,
    post_preview_path,
)
from .templates import PageMeta, TemplateEngine


@dataclass(frozen=True)
class RenderContext:
    """Read-only inputs shared by every artifact renderer.

    Attributes:
        entries: All loaded entries, drafts included.
        listing: Published entries as index rows.
        feed: The feed document.
        data: Site data.
        engine: Template engine holding the page shell.
        fonts: Font bytes for preview images.
        markdown: Markdown renderer for post bodies.
    """

    entries: EntryCollection
    listing: IndexListing
    feed: FeedDocument
    data: dict[str, Any]
    engine: TemplateEngine
    fonts: FontSet
    markdown: MarkdownRenderer

    def entry_for(self, route: Route) -> ContentEntry:
        entry = self.entries.get(route.slug or "")
        if entry is None:
            raise KeyError(f"no entry for route {route.path}")
        return entry


def preview_image_path(entry: ContentEntry) -> str:
    """URL path of the image link previews use for an entry."""
    if entry.image:
        return entry.image if is_remote(entry.image) else "/" + entry.image.lstrip("/")
    return post_preview_path(entry.slug)


class ArtifactRenderer(ABC):
    """Abstract base class for route renderers."""

    @property
    @abstractmethod
    def kind(self) -> RouteKind:
        """Route kind this renderer handles."""
        ...

    @abstractmethod
    def render(self, route: Route, context: RenderContext) -> bytes:
        """Render the artifact for a route.

        Args:
            route: Route to render; its kind matches ``self.kind``.
            context: Shared read-only inputs.

        Returns:
            File contents.
        """
        ...


class PostPageRenderer(ArtifactRenderer):
    """Renders a post: markdown body, table of contents, page shell."""

    @property
    def kind(self) -> RouteKind:
        return RouteKind.POST_PAGE

    def render(self, route: Route, context: RenderContext) -> bytes:
        entry = context.entry_for(route)
        rendered = context.markdown.render(entry.body, mdx=entry.is_mdx)
        body = context.engine.render(
            "post.html.jinja",
            entry=entry,
            content=Markup(rendered.html),
            toc=rendered.toc,
        )
        meta = PageMeta(
            title=entry.title,
            description=entry.description,
            path=entry.url,
            image=preview_image_path(entry),
            og_type="article",
            noindex=entry.draft,
        )
        return context.engine.render_shell(body, meta).encode("utf-8")


class IndexPageRenderer(ArtifactRenderer):
    """Renders the blog index from the listing."""

    @property
    def kind(self) -> RouteKind:
        return RouteKind.INDEX_PAGE

    def render(self, route: Route, context: RenderContext) -> bytes:
        body = context.engine.render("blog.html.jinja", listing=context.listing)
        meta = PageMeta(
            title=f"blog | {context.data.get('title', '')}",
            description=str(context.data.get("feed_description") or ""),
            path=BLOG_PATH,
            image=HOME_PREVIEW_PATH,
        )
        return context.engine.render_shell(body, meta).encode("utf-8")


class HomePageRenderer(ArtifactRenderer):
    """Renders the home page with the latest posts teaser."""

    @property
    def kind(self) -> RouteKind:
        return RouteKind.HOME_PAGE

    def render(self, route: Route, context: RenderContext) -> bytes:
        body = context.engine.render("home.html.jinja", latest=context.listing.latest())
        meta = PageMeta(
            title=str(context.data.get("title", "")),
            description=str(context.data.get("description", "")),
            path="/",
            image=HOME_PREVIEW_PATH,
        )
        return context.engine.render_shell(body, meta).encode("utf-8")


class PostPreviewRenderer(ArtifactRenderer):
    """Renders the generated preview card of a post."""

    @property
    def kind(self) -> RouteKind:
        return RouteKind.POST_PREVIEW_IMAGE

    def render(self, route: Route, context: RenderContext) -> bytes:
        entry = context.entry_for(route)
        return ImageComposer(context.fonts).render(post_preview(entry, context.data))


class HomePreviewRenderer(ArtifactRenderer):
    """Renders the site's default preview card."""

    @property
    def kind(self) -> RouteKind:
        return RouteKind.HOME_PREVIEW_IMAGE

    def render(self, route: Route, context: RenderContext) -> bytes:
        return ImageComposer(context.fonts).render(home_preview(context.data))


class FeedRenderer(ArtifactRenderer):
    @property
    def kind(self) -> RouteKind:
        return RouteKind.FEED_DOCUMENT

    def render(self, route: Route, context: RenderContext) -> bytes:
        return render_rss(context.feed, context.engine).encode("utf-8")


class SitemapRenderer(ArtifactRenderer):
    @property
    def kind(self) -> RouteKind:
        return RouteKind.SITEMAP

    def render(self, route: Route, context: RenderContext) -> bytes:
        return render_sitemap(context.listing, context.engine).encode("utf-8")


class ArtifactRegistry:
    """Registry mapping each route kind to its renderer.

    Registering a renderer for a kind that already has one replaces it.
    """

    def __init__(self) -> None:
        self._renderers: dict[RouteKind, ArtifactRenderer] = {}

    def register(self, renderer: ArtifactRenderer) -> None:
        self._renderers[renderer.kind] = renderer

    def get_renderer(self, kind: RouteKind) -> ArtifactRenderer:
        try:
            return self._renderers[kind]
        except KeyError:
            raise LookupError(f"no renderer registered for {kind.value}") from None

    def render(self, route: Route, context: RenderContext) -> bytes:
        return self.get_renderer(route.kind).render(route, context)


def create_default_artifact_registry() -> ArtifactRegistry:
    """Create a registry with renderers for every route kind."""
    registry = ArtifactRegistry()
    for renderer in (
        PostPageRenderer(),
        PostPreviewRenderer(),
        IndexPageRenderer(),
        FeedRenderer(),
        HomePageRenderer(),
        HomePreviewRenderer(),
        SitemapRenderer(),
    ):
        registry.register(renderer)
    return registry
