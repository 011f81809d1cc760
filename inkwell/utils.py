"""Utility functions for Inkwell.

String, date and path helpers shared across the pipeline.

Key functions:
    slugify: Convert filenames to URL slugs.
    format_date: Human-readable publish date ("Jan 5, 2024").
    rfc822_date: Publish date formatted for RSS.
    is_markdown: Check if a path is a Markdown or MDX file.
    is_hidden: Check if a path component marks an ignored file.
    ensure_clean_dir: Ensure a directory exists and is empty.
    parse_line_ranges: Parse "{1,3-5}" code block annotations.
"""

from __future__ import annotations

import re
import shutil
from datetime import date, datetime
from pathlib import Path

MARKDOWN_SUFFIXES = (".md", ".mdx")

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Convert a filename stem to a slug.

    Args:
        name: Filename without extension.

    Returns:
        Lowercase slug with runs of other characters collapsed to hyphens.
        Empty string if nothing usable remains.

    Examples:
        >>> slugify("Hello World")
        'hello-world'

        >>> slugify("2024_recap")
        '2024-recap'
    """
    return _SLUG_RE.sub("-", name.lower()).strip("-")


def format_date(value: date) -> str:
    """Format a publish date the way the site displays it.

    Examples:
        >>> format_date(date(2024, 1, 5))
        'Jan 5, 2024'
    """
    return f"{value:%b} {value.day}, {value.year}"


def rfc822_date(value: date) -> str:
    """Format a publish date for RSS ``pubDate`` elements.

    Dates carry no time of day, so midnight UTC is used.
    """
    moment = datetime(value.year, value.month, value.day)
    return moment.strftime("%a, %d %b %Y %H:%M:%S +0000")


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown or MDX file.

    Args:
        path: Path to check.

    Returns:
        True if the file has a .md or .mdx extension (case-insensitive).
    """
    return path.suffix.lower() in MARKDOWN_SUFFIXES


def is_mdx(path: Path) -> bool:
    return path.suffix.lower() == ".mdx"


def is_hidden(path: Path) -> bool:
    """Check if any path component starts with ``_`` or ``.``.

    Such files and folders are skipped when scanning the content store.
    """
    return any(part.startswith(("_", ".")) for part in path.parts)


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)


def parse_line_ranges(annotation: str) -> list[int] | None:
    """Parse a line range annotation such as ``{1,3-5}``.

    Args:
        annotation: Annotation text, braces included.

    Returns:
        Sorted list of line numbers, or None when the annotation is malformed.

    Examples:
        >>> parse_line_ranges("{1,3-5}")
        [1, 3, 4, 5]

        >>> parse_line_ranges("{2-x}") is None
        True
    """
    inner = annotation.strip()
    if not (inner.startswith("{") and inner.endswith("}")):
        return None
    lines: set[int] = set()
    for part in inner[1:-1].split(","):
        part = part.strip()
        if not part:
            continue
        start, sep, end = part.partition("-")
        if not start.isdigit() or (sep and not end.isdigit()):
            return None
        first = int(start)
        last = int(end) if sep else first
        if first < 1 or last < first:
            return None
        lines.update(range(first, last + 1))
    return sorted(lines) or None
