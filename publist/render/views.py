"""Per-entry data handed from the pipeline to the assemblers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from publist.config import RenderOptions
from publist.core.models import Record, RecordId, YearValue, extract_year

DOI_RESOLVER = "https://dx.doi.org/"


@dataclass
class PreviewLink:
    """A cached preview image and the document it links to."""

    image: Path
    target: Path | None = None


@dataclass
class EntryView:
    """Everything needed to render one post, already fetched and cached."""

    post_id: str
    record_id: RecordId
    record: Record
    citation: str
    documents: list[Path] = field(default_factory=list)
    previews: list[PreviewLink] = field(default_factory=list)
    bibtex: str | None = None

    @property
    def year(self) -> YearValue:
        return extract_year(self.record)


def bibtex_url(options: RenderOptions, record_id: RecordId) -> str:
    """BibTeX export page of a post."""
    return (
        f"{options.bibsonomy_url.rstrip('/')}/bib/publication/"
        f"{record_id.intra_hash}/{record_id.user_name}"
    )


def post_url(options: RenderOptions, record_id: RecordId) -> str:
    """Canonical page of a post."""
    return (
        f"{options.bibsonomy_url.rstrip('/')}/publication/"
        f"{record_id.intra_hash}/{record_id.user_name}"
    )


def doi_url(doi: str) -> str:
    return DOI_RESOLVER + doi


def collect_headings(entries: list[EntryView]) -> list[str]:
    """Year headings in order of appearance, one per change of year."""
    headings = []
    last_year = None
    for entry in entries:
        year = entry.year.text
        if year != last_year:
            last_year = year
            headings.append(year)
    return headings
