from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .content import ContentEntry


class EntryCollection(Sequence["ContentEntry"]):
    """Read-only sequence of loaded entries with the queries the pipeline needs."""

    def __init__(self, entries: Iterable[ContentEntry]):
        self._entries = tuple(entries)
        self._by_slug = {entry.slug: entry for entry in self._entries}

    def __iter__(self) -> Iterator[ContentEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, item):
        return self._entries[item]

    def get(self, slug: str) -> ContentEntry | None:
        return self._by_slug.get(slug)

    def slugs(self) -> list[str]:
        return [entry.slug for entry in self._entries]

    def drafts(self) -> EntryCollection:
        return EntryCollection(e for e in self._entries if e.draft)

    def published(self) -> EntryCollection:
        return EntryCollection(e for e in self._entries if not e.draft)

    def sorted(self, reverse: bool = True) -> EntryCollection:
        """Sort entries by publish date, newest first by default.

        The sort is stable: entries sharing a date keep their load order
        in both directions.
        """
        return EntryCollection(
            sorted(self._entries, key=lambda e: e.pub_date, reverse=reverse)
        )

    def latest(self, count: int = 3) -> EntryCollection:
        return EntryCollection(self.sorted()[:count])

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"EntryCollection({len(self._entries)} entries)"
