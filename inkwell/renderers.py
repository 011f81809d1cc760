"""Markdown rendering for Inkwell.

Converts post bodies to HTML with Pygments syntax highlighting and collects
headings for the table of contents.

Key classes:
- Heading: One table-of-contents entry.
- RenderedMarkdown: HTML plus the headings found while rendering.
- MarkdownRenderer: Post body renderer (highlighting, anchors, TOC).

Key functions:
- render_feed_html: Plain markdown rendering for the feed, sanitized.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .extractors import strip_mdx_statements
from .html_utils import escape_html, sanitize_html, strip_tags
from .utils import parse_line_ranges

_PLUGINS = ["strikethrough", "footnotes", "table", "url"]


@dataclass(frozen=True)
class Heading:
    """A heading extracted from markdown content for TOC generation.

    Attributes:
        id: Anchor ID for the heading (URL-friendly slug).
        text: Plain text of the heading.
        level: Heading level (1-6).
    """

    id: str
    text: str
    level: int


@dataclass(frozen=True)
class RenderedMarkdown:
    html: str
    toc: list[Heading] = field(default_factory=list)


@dataclass(frozen=True)
class CodeInfo:
    """Parsed fenced code info string, e.g. ``ts {1,3-4} title="app.ts"``.

    Attributes:
        language: Language name, empty when the fence has none.
        lines: Lines to emphasise, empty when absent or malformed.
        title: Optional caption.
    """

    language: str = ""
    lines: tuple[int, ...] = ()
    title: str | None = None


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-") or "section"


def parse_code_info(info: str | None) -> CodeInfo:
    """Parse a fenced code info string.

    Unknown or malformed annotations are dropped; the language is kept.
    """
    if not info or not info.strip():
        return CodeInfo()
    language, _, rest = info.strip().partition(" ")
    # "ts{1,2}" written without a space
    if "{" in language:
        language, brace, tail = language.partition("{")
        rest = f"{brace}{tail} {rest}"
    lines: tuple[int, ...] = ()
    title = None
    ranges = re.search(r"\{[^}]*\}?", rest)
    if ranges:
        parsed = parse_line_ranges(ranges.group(0))
        lines = tuple(parsed) if parsed else ()
        rest = rest.replace(ranges.group(0), " ", 1)
    try:
        tokens = shlex.split(rest)
    except ValueError:
        tokens = []
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep and key == "title" and value:
            title = value
    return CodeInfo(language=language.lower(), lines=lines, title=title)


class _HighlightRenderer(mistune.HTMLRenderer):
    """Mistune HTML renderer with heading anchors and Pygments highlighting.

    Attributes:
        headings: Headings seen while rendering, in document order.
    """

    def __init__(self):
        super().__init__(escape=False)
        self.headings: list[Heading] = []
        self._issued_ids: set[str] = set()
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        """Render a heading with a unique anchor id and track it for the TOC."""
        plain = strip_tags(text).strip()
        base_id = _generate_heading_id(plain)

        heading_id = base_id
        count = self._heading_id_counts.get(base_id, 0)
        # "Setup 1" may already have taken "setup-1"
        while heading_id in self._issued_ids:
            count += 1
            heading_id = f"{base_id}-{count}"
        self._heading_id_counts[base_id] = count
        self._issued_ids.add(heading_id)

        self.headings.append(Heading(id=heading_id, text=plain, level=level))
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a fenced code block.

        Known languages are highlighted with Pygments; anything else falls
        back to an escaped ``<pre><code>`` block.
        """
        parsed = parse_code_info(info)
        body = None
        if parsed.language:
            try:
                lexer = get_lexer_by_name(parsed.language, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(cssclass="highlight", hl_lines=list(parsed.lines))
                body = highlight(code, lexer, formatter)
        if body is None:
            lang_class = (
                f' class="language-{escape_html(parsed.language)}"' if parsed.language else ""
            )
            body = f"<pre><code{lang_class}>{escape_html(code)}</code></pre>\n"
        if parsed.title:
            return (
                '<figure class="code-block">'
                f"<figcaption>{escape_html(parsed.title)}</figcaption>\n"
                f"{body}</figure>\n"
            )
        return body


class MarkdownRenderer:
    """Renders post bodies to HTML.

    Each call builds a fresh mistune parser, so one instance can be shared
    between concurrent renders.
    """

    def render(self, source: str, mdx: bool = False) -> RenderedMarkdown:
        """Render markdown to HTML.

        Args:
            source: Markdown source.
            mdx: Drop top-level MDX import/export statements first.

        Returns:
            Rendered HTML and the table of contents headings.
        """
        if mdx:
            source = strip_mdx_statements(source)
        renderer = _HighlightRenderer()
        markdown = mistune.create_markdown(renderer=renderer, plugins=_PLUGINS)
        html = markdown(source)
        return RenderedMarkdown(html=html, toc=list(renderer.headings))


def render_feed_html(source: str, mdx: bool = False) -> str:
    """Render markdown for syndication and sanitize the result.

    No highlighting is applied; feed readers get plain ``<pre><code>``.
    """
    if mdx:
        source = strip_mdx_statements(source)
    markdown = mistune.create_markdown(escape=False, plugins=_PLUGINS)
    return sanitize_html(markdown(source))
