"""Content loading for Inkwell.

This module reads the content store (one markdown or MDX file per post),
validates each file's front-matter against a fixed schema and produces
immutable ContentEntry objects.

Key classes:
- FrontMatter: Pydantic schema for the per-post metadata block.
- ContentEntry: Frozen dataclass representing one loaded post.
- ContentError: Load failure naming the offending file.
- FileContentLoader: Discovers content files in the store.
- CollectionLoader: Loads, validates and caches every entry of the store.

A file either produces a complete entry or raises ContentError; there are
no partially-populated entries.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .collections import EntryCollection
from .extractors import FrontMatterError, extract_frontmatter, serialize_frontmatter
from .utils import is_hidden, is_markdown, is_mdx, slugify

# Accepted in addition to ISO 8601 dates
_DATE_FORMATS = ("%b %d %Y", "%b %d, %Y", "%B %d %Y", "%B %d, %Y", "%Y/%m/%d")


class ContentError(Exception):
    """Error loading a content file.

    Attributes:
        source_path: Path to the content file that failed to load.
        message: Human-readable description of the problem.
    """

    def __init__(self, source_path: Path, message: str):
        self.source_path = source_path
        self.message = message
        super().__init__(f"{source_path}: {message}")


class FrontMatter(BaseModel):
    """Schema for the front-matter block of a post."""

    model_config = ConfigDict(
        extra="ignore", frozen=True, populate_by_name=True, str_strip_whitespace=True
    )

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    pub_date: date = Field(alias="pubDate")
    draft: bool = False
    image: str | None = None

    @field_validator("pub_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if not isinstance(value, str):
            return value
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"unparsable date {value!r}")

    @field_validator("image", mode="before")
    @classmethod
    def _blank_image_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@dataclass(frozen=True)
class ContentEntry:
    """A loaded post.

    Attributes:
        slug: Unique identifier derived from the filename; the route key.
        title: Post title.
        description: Short summary used in listings, feeds and meta tags.
        pub_date: Publication date.
        draft: Drafts are built but never listed.
        image: Optional static asset used as the social preview image.
        body: Raw markdown source (front-matter removed).
        path: Source file. Not part of equality.
    """

    slug: str
    title: str
    description: str
    pub_date: date
    body: str
    draft: bool = False
    image: str | None = None
    path: Path | None = field(default=None, compare=False)

    @property
    def url(self) -> str:
        return f"/blog/{self.slug}"

    @property
    def is_mdx(self) -> bool:
        return self.path is not None and is_mdx(self.path)


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "front-matter"
        problems.append(f"{location}: {error['msg']}")
    return "invalid front-matter (" + "; ".join(problems) + ")"


def parse_entry(text: str, path: Path) -> ContentEntry:
    """Build a ContentEntry from document text.

    Args:
        text: Full document content.
        path: Source path; the slug is derived from its stem.

    Returns:
        The validated entry.

    Raises:
        ContentError: If the slug is empty or the front-matter is missing,
            malformed or fails validation.
    """
    slug = slugify(path.stem)
    if not slug:
        raise ContentError(path, "filename does not produce a usable slug")
    try:
        data, body = extract_frontmatter(text)
    except FrontMatterError as exc:
        raise ContentError(path, str(exc)) from exc
    try:
        meta = FrontMatter.model_validate(data)
    except ValidationError as exc:
        raise ContentError(path, _format_validation_error(exc)) from exc
    return ContentEntry(
        slug=slug,
        title=meta.title,
        description=meta.description,
        pub_date=meta.pub_date,
        body=body,
        draft=meta.draft,
        image=meta.image,
        path=path,
    )


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentError(path, f"cannot read file: {exc}") from exc


def load_entry(path: Path) -> ContentEntry:
    """Load a single content file.

    Raises:
        ContentError: If the file cannot be read as UTF-8, or see parse_entry.
    """
    return parse_entry(_read_text(path), path)


def serialize_entry(entry: ContentEntry) -> str:
    """Render an entry back into document text.

    ``parse_entry(serialize_entry(e), path)`` reproduces ``e`` when ``path``
    has the entry's slug as its stem.
    """
    data: dict[str, Any] = {
        "title": entry.title,
        "description": entry.description,
        "pubDate": entry.pub_date,
    }
    if entry.draft:
        data["draft"] = True
    if entry.image:
        data["image"] = entry.image
    return serialize_frontmatter(data, entry.body)


class FileContentLoader:
    """Discovers content files in the content store.

    Attributes:
        content_dir: Directory holding one file per post.
    """

    def __init__(self, content_dir: Path):
        self.content_dir = content_dir

    def iter_files(self) -> list[Path]:
        """Return every markdown/MDX file in the store, sorted by path.

        Files and folders starting with ``_`` or ``.`` are skipped.
        """
        if not self.content_dir.exists():
            return []
        files: list[Path] = []
        for path in self.content_dir.rglob("*"):
            if path.is_dir():
                continue
            rel = path.relative_to(self.content_dir)
            if is_hidden(rel):
                continue
            if is_markdown(path):
                files.append(path)
        return sorted(files)


class CollectionLoader:
    """Loads the whole content store into an EntryCollection.

    Parsed entries are cached per file path and content digest, so calling
    load() again only re-parses files whose text changed.

    Attributes:
        content_dir: Directory holding one file per post.
    """

    def __init__(self, content_dir: Path, file_loader: FileContentLoader | None = None):
        self.content_dir = content_dir
        self._file_loader = file_loader or FileContentLoader(content_dir)
        self._cache: dict[Path, tuple[str, ContentEntry]] = {}

    def load(self) -> EntryCollection:
        """Load every entry of the store.

        Returns:
            Collection of entries in filename order.

        Raises:
            ContentError: On the first invalid file, or when two files map to
                the same slug.
        """
        entries: list[ContentEntry] = []
        seen: dict[str, Path] = {}
        for path in self._file_loader.iter_files():
            entry = self._load_cached(path)
            if entry.slug in seen:
                raise ContentError(
                    path, f"duplicate slug '{entry.slug}' (also used by {seen[entry.slug]})"
                )
            seen[entry.slug] = path
            entries.append(entry)
        return EntryCollection(entries)

    def _load_cached(self, path: Path) -> ContentEntry:
        text = _read_text(path)
        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        cached = self._cache.get(path)
        if cached is not None and cached[0] == digest:
            return cached[1]
        entry = parse_entry(text, path)
        self._cache[path] = (digest, entry)
        return entry
