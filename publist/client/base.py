"""Interfaces of the collaborators the renderer depends on."""

from collections.abc import Mapping, Sequence
from typing import Protocol

from publist.core.models import Record


class RecordStore(Protocol):
    """Source of posts and their attached files."""

    def fetch_records(
        self, owner: str, tags: Sequence[str], offset: int, count: int
    ) -> dict[str, Record]:
        """Posts of ``owner`` carrying all ``tags``, keyed by post id."""
        ...

    def fetch_document_bytes(
        self, owner: str, intra_hash: str, file_name: str
    ) -> bytes | None:
        """Content of a document, or None if it does not exist."""
        ...

    def fetch_preview_bytes(
        self, owner: str, intra_hash: str, file_name: str, size: str
    ) -> bytes | None:
        """Preview image of a document, or None if it does not exist."""
        ...

    def fetch_bibtex_text(self, owner: str, intra_hash: str) -> str:
        """BibTeX source of a post."""
        ...


class CitationRenderer(Protocol):
    """Batch citation formatting."""

    def render(
        self, records: Mapping[str, Record], style: str, format: str = "html"
    ) -> dict[str, str]:
        """One rendered citation per post id, numbered in iteration order."""
        ...
