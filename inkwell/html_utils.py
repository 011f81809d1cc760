"""HTML utility functions for Inkwell.

This module provides HTML manipulation utilities: escaping, URL
absolutization and sanitization of markup embedded in the feed.

Functions:
    escape_html: Escape special HTML characters in a string.
    strip_tags: Drop markup and keep text.
    join_root_url: Join a base URL with a path.
    absolutize_html_urls: Convert root-relative URLs to absolute in HTML.
    sanitize_html: Strip scripts, styles and unsafe attributes.
"""

from __future__ import annotations

import re

import nh3

# URL attribute regex pattern for finding href, src, action attributes
_URL_ATTR_RE = re.compile(
    r'(?P<prefix>\b(?:href|src|action|content)=["\'])(?P<url>/[^"\']*)(?P<suffix>["\'])'
)

_TAG_RE = re.compile(r"<[^>]+>")

# Tags whose contents are dropped entirely, not just unwrapped
_CLEAN_CONTENT_TAGS = {"script", "style"}


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Args:
        text: The string to escape.

    Returns:
        The escaped string, safe for inclusion in HTML.

    Examples:
        >>> escape_html('<b>"hi"</b> & bye')
        '&lt;b&gt;&quot;hi&quot;&lt;/b&gt; &amp; bye'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def strip_tags(html: str) -> str:
    """Remove tags from an HTML fragment, keeping its text."""
    return _TAG_RE.sub("", html)


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Args:
        root_url: Base URL (e.g., https://example.com/site).
        path: Path beginning with or without a leading slash.

    Returns:
        Combined URL with proper slash handling.

    Examples:
        >>> join_root_url('https://example.com/', '/blog')
        'https://example.com/blog'

        >>> join_root_url('', 'blog')
        '/blog'
    """
    suffix = path if path.startswith("/") else f"/{path}"
    if not root_url:
        return suffix
    return f"{root_url.rstrip('/')}{suffix}"


def absolutize_html_urls(html: str, root_url: str) -> str:
    """Rewrite root-relative URLs in HTML to live under ``root_url``.

    Processes href, src, action and meta content attributes whose value
    starts with a single slash. Protocol-relative URLs (``//``) are left
    unchanged.

    Args:
        html: HTML content to process.
        root_url: Base URL to prepend to root-relative paths.

    Returns:
        HTML with root-relative URLs converted.

    Examples:
        >>> absolutize_html_urls('<a href="/blog">Blog</a>', 'https://example.com')
        '<a href="https://example.com/blog">Blog</a>'
    """
    if not root_url:
        return html

    def repl(match: re.Match) -> str:
        url = match.group("url")
        if url.startswith("//"):
            return match.group(0)
        absolute = join_root_url(root_url, url)
        return f"{match.group('prefix')}{absolute}{match.group('suffix')}"

    return _URL_ATTR_RE.sub(repl, html)


def sanitize_html(html: str) -> str:
    """Sanitize an HTML fragment before embedding it in the feed.

    Script and style elements are removed together with their contents;
    event handler attributes, ``javascript:`` URLs and tags outside the
    allow-list are stripped.

    Examples:
        >>> sanitize_html('<p onclick="x()">hi<script>alert(1)</script></p>')
        '<p>hi</p>'
    """
    return nh3.clean(html, clean_content_tags=_CLEAN_CONTENT_TAGS)
