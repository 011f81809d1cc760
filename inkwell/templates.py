"""Template rendering engine for Inkwell.

This module uses Jinja2 to render the site's HTML pages and XML documents.
Templates ship with the package and can be overridden per project by
dropping a file of the same name into ``<project>/templates``.

Key names:
- PageMeta: Metadata the shared page shell needs for one page.
- TemplateEngine: Jinja2 environment plus the shell composition function.
- render_toc: Nested table of contents from collected headings.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape
from markupsafe import Markup
from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from .html_utils import escape_html, join_root_url
from .renderers import Heading
from .utils import format_date

__all__ = ["PageMeta", "TemplateEngine", "render_toc"]


@dataclass(frozen=True)
class PageMeta:
    """Per-page values the shell turns into head and link-preview tags.

    Attributes:
        title: Document title.
        description: Meta description.
        path: Canonical URL path of the page.
        image: URL path of the social preview image.
        og_type: Open Graph type ("website" or "article").
        noindex: Ask crawlers not to index the page (drafts).
    """

    title: str
    description: str
    path: str
    image: str
    og_type: str = "website"
    noindex: bool = False


def render_toc(headings: list[Heading]) -> Markup:
    """Render a table of contents as nested HTML from page headings.

    Generates properly nested ``<ul><li><a href="#id">text</a></li></ul>``
    structure based on heading levels.

    Args:
        headings: Headings in document order.

    Returns:
        Markup-safe HTML string of the nested TOC, or empty Markup if no headings.
    """
    if not headings:
        return Markup("")

    html_parts: list[str] = []
    level_stack: list[int] = []

    for heading in headings:
        level = heading.level

        # Close nested lists when going to a shallower level
        while level_stack and level_stack[-1] > level:
            level_stack.pop()
            html_parts.append("</li></ul>")

        if level_stack and level_stack[-1] == level:
            html_parts.append("</li>")
        elif not level_stack or level > level_stack[-1]:  # pragma: no branch
            html_parts.append("<ul>")
            level_stack.append(level)

        html_parts.append(
            f'<li><a href="#{escape_html(heading.id)}">{escape_html(heading.text)}</a>'
        )

    while level_stack:
        level_stack.pop()
        html_parts.append("</li></ul>")

    return Markup("".join(html_parts))


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        data: Site data (title, url, signature, ...).
        env: Jinja2 environment.
        root_url: Base URL used by ``url_for`` for absolute links.
        highlight_style: Pygments style used for the code stylesheet.
    """

    def __init__(
        self,
        data: dict[str, Any],
        template_dir: Path | None = None,
        root_url: str | None = None,
        highlight_style: str = "default",
    ):
        """Initialize the template engine.

        Args:
            data: Global site data.
            template_dir: Optional project directory with template overrides.
            root_url: Optional base URL for absolute links; defaults to the
                site ``url``.
            highlight_style: Pygments style name.
        """
        self.data = data
        self.root_url = (root_url or str(data.get("url") or "")).rstrip("/")
        self.highlight_style = highlight_style
        loaders = []
        if template_dir is not None and template_dir.exists():
            loaders.append(FileSystemLoader(str(template_dir)))
        loaders.append(PackageLoader("inkwell", "templates"))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml", "html.jinja", "xml.jinja"]),
            keep_trailing_newline=True,
        )
        self._pygments_css = self._build_pygments_css()
        self._install_globals()

    def _install_globals(self) -> None:
        """Install global variables and functions in the Jinja environment."""
        self.env.globals["data"] = self.data
        self.env.globals["url_for"] = self.url_for
        self.env.globals["pygments_css"] = self._pygments_css
        self.env.globals["render_toc"] = render_toc
        self.env.filters["format_date"] = format_date

    def _build_pygments_css(self) -> str:
        try:
            formatter = HtmlFormatter(style=self.highlight_style)
        except ClassNotFound:
            print(f"Unknown Pygments style '{self.highlight_style}'; using default.")
            formatter = HtmlFormatter()
        return formatter.get_style_defs(".highlight")

    def url_for(self, path: str) -> str:
        """Generate an absolute URL for a site path when a root URL is known.

        Args:
            path: Site path, with or without a leading slash.

        Returns:
            ``root_url + path``, or the root-relative path.
        """
        if path.startswith(("http://", "https://", "//")):
            return path
        return join_root_url(self.root_url, path)

    def render(self, template_name: str, **context: Any) -> str:
        """Render a named template with the given context."""
        return self.env.get_template(template_name).render(**context)

    def render_shell(self, page_content: str, meta: PageMeta) -> str:
        """Wrap page-specific HTML in the shared page shell.

        This is the only way pages receive navigation and metadata tags; the
        shell has no state of its own.

        Args:
            page_content: Rendered body HTML of the page.
            meta: Title, description and link-preview values for the page.

        Returns:
            Complete HTML document.
        """
        return self.render("layout.html.jinja", page_content=Markup(page_content), meta=meta)
