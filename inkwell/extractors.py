"""Front-matter extraction for Inkwell.

Every content file starts with a YAML block fenced by ``---`` lines. This
module splits that block from the markdown body and writes it back out.

Key functions:
- extract_frontmatter: Parse the YAML block and return it with the body.
- serialize_frontmatter: Inverse of extract_frontmatter.
- strip_mdx_statements: Drop top-level MDX import/export lines.
"""

from __future__ import annotations

import re
from typing import Any

import yaml

FRONTMATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(?P<meta>.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL
)

_FENCE_RE = re.compile(r"^\s*(`{3,}|~{3,})")
_MDX_STATEMENT_RE = re.compile(r"^(?:import|export)\s")


class FrontMatterError(ValueError):
    """Raised when a document has no front-matter block or it is not valid YAML."""


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML front-matter from content.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (front-matter mapping, remaining body).

    Raises:
        FrontMatterError: If the block is missing, is not valid YAML, or
            does not hold a mapping.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        raise FrontMatterError("missing front-matter block")
    try:
        data = yaml.safe_load(match.group("meta"))
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"invalid YAML in front-matter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError("front-matter must be a mapping of fields")
    return data, text[match.end() :]


def serialize_frontmatter(data: dict[str, Any], body: str) -> str:
    """Render a front-matter mapping and body back into document text.

    Keys keep their insertion order so files stay readable.
    """
    meta = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return f"---\n{meta}---\n{body}"


def strip_mdx_statements(body: str) -> str:
    """Remove top-level MDX ``import``/``export`` lines.

    Lines inside fenced code blocks are left untouched.
    """
    lines: list[str] = []
    fence: str | None = None
    for line in body.splitlines(keepends=True):
        opened = _FENCE_RE.match(line)
        if opened:
            marker = opened.group(1)
            if fence is None:
                fence = marker
            elif marker.startswith(fence):
                fence = None
        elif fence is None and _MDX_STATEMENT_RE.match(line):
            continue
        lines.append(line)
    return "".join(lines)
