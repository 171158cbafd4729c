"""Plain text rendering of publication lists."""

from __future__ import annotations

from publist.config import BibtexMode, RenderOptions

from .views import EntryView, bibtex_url, doi_url, post_url


class TextAssembler:
    """Compose a plain text list, one citation per paragraph.

    Actions are written on one indented line below the citation, joined by
    the configured option separator.
    """

    def __init__(self, options: RenderOptions):
        self.options = options

    def assemble(self, entries: list[EntryView]) -> str:
        blocks = []
        last_year = None
        for entry in entries:
            if self.options.year_headings:
                year = entry.year.text
                if year != last_year:
                    last_year = year
                    blocks.append(f"{year}\n{'=' * len(year)}")
            blocks.append(self.entry(entry))
        return "\n\n".join(blocks) + "\n" if blocks else ""

    def entry(self, entry: EntryView) -> str:
        lines = [entry.citation]

        actions = self.actions(entry)
        if actions:
            lines.append("  " + self.options.option_separator.join(actions))

        if self.options.show_abstract and entry.record.abstract:
            lines.append("  " + entry.record.abstract)

        if self.options.bibtex is BibtexMode.EMBEDDED and entry.bibtex is not None:
            lines.extend("  " + line for line in entry.bibtex.strip().splitlines())

        return "\n".join(lines)

    def actions(self, entry: EntryView) -> list[str]:
        options = self.options
        record = entry.record
        actions = []

        if options.bibtex is BibtexMode.LINK:
            actions.append(f"BibTeX: {bibtex_url(options, entry.record_id)}")

        for path in entry.documents:
            actions.append(f"PDF: {path.as_posix()}")

        if options.doi_link and record.doi:
            actions.append(f"DOI: {doi_url(record.doi)}")

        if options.url_link and record.url:
            actions.append(f"URL: {record.url}")

        if options.bibsonomy_link:
            actions.append(f"BibSonomy: {post_url(options, entry.record_id)}")

        return actions
