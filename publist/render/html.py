"""HTML assembly of publication lists.

Produces a self-contained fragment: a small toggle script, an optional
index of year headings and the list of entries. All values taken from
posts are escaped here; only the citation fragment, which the citation
formatter already produced as markup, is inserted as is.
"""

from __future__ import annotations

import html
import json
from pathlib import Path
from urllib.parse import urlsplit

from publist.config import BibtexMode, RenderOptions

from .views import (
    EntryView,
    bibtex_url,
    collect_headings,
    doi_url,
    post_url,
)

TOGGLE_SCRIPT = """<script>function toggleId(id) {
    var element = document.getElementById(id);
    element.style.display = (element.style.display == 'none' || element.style.display == '') ? 'block' : 'none';
    return false;
}</script>"""

SAFE_URL_SCHEMES = {"", "http", "https", "ftp", "mailto"}


class Trusted(str):
    """Markup that is inserted without escaping."""


def trusted(markup: str) -> Trusted:
    """Mark already rendered markup as safe."""
    return Trusted(markup)


def escape(value: object) -> str:
    """Escape a value for element content or a quoted attribute."""
    if isinstance(value, Trusted):
        return value
    if isinstance(value, Path):
        value = value.as_posix()
    return html.escape(str(value), quote=True)


def escape_url(url: str | Path) -> str:
    """Escape a link target, neutralizing script URLs."""
    if isinstance(url, Path):
        url = url.as_posix()
    if urlsplit(url.strip()).scheme.lower() not in SAFE_URL_SCHEMES:
        return "#"
    return escape(url)


def escape_js_string(value: str) -> str:
    """Quote a string for a JavaScript call inside an attribute."""
    return escape(json.dumps(value))


class HtmlAssembler:
    """Compose the HTML of a sorted list of entries."""

    def __init__(self, options: RenderOptions):
        self.options = options

    def assemble(self, entries: list[EntryView]) -> str:
        """Render all entries, grouped under year headings if enabled."""
        css_class = escape(self.options.css_class)
        result = TOGGLE_SCRIPT

        if self.options.show_group_menu and self.options.year_headings:
            result += self.group_menu(collect_headings(entries))

        result += f"<ul class='{css_class}'>\n"

        # sentinel: no year seen yet
        last_year = None
        for entry in entries:
            if self.options.year_headings:
                year = entry.year.text
                if year != last_year:
                    last_year = year
                    result += (
                        f"</ul>\n<h3><a name='group_{escape(year)}'></a>"
                        f"{escape(year)}</h3>\n<ul class='{css_class}'>\n"
                    )
            result += self.entry(entry)

        result += "</ul>\n"
        return result

    def group_menu(self, headings: list[str]) -> str:
        """Index linking to the year headings."""
        items = "".join(
            f"<li><a href='#group_{escape(heading)}'>{escape(heading)}</a></li>"
            for heading in headings
        )
        return f"<ul class='publication-actions'>{items}</ul>"

    def entry(self, entry: EntryView) -> str:
        """Render one list item."""
        result = (
            f"<li class='{escape(entry.record.type)}'>"
            "<div class='publication-info'>"
        )

        for preview in entry.previews:
            image = f"<img class='preview' src='{escape_url(preview.image)}' />"
            if preview.target is not None:
                image = f"<a href='{escape_url(preview.target)}'>{image}</a>"
            result += f"<div class='preview_container'>{image}</div>"

        result += f"<div class='item'>{escape(trusted(entry.citation))}</div></div>"

        actions, extra = self.actions(entry)
        if actions:
            items = "".join(f"<li>{action}</li>" for action in actions)
            result += f"<ul class='publication-actions'>{items}</ul>"

        result += extra
        result += "</li>\n"
        return result

    def actions(self, entry: EntryView) -> tuple[list[str], str]:
        """Build the action menu and the blocks shown after it.

        Returns:
            The action links in display order and the extra markup
            (abstract and BibTeX containers).
        """
        options = self.options
        record = entry.record
        actions = []
        extra = ""

        if options.show_abstract and record.abstract:
            abstract_id = entry.post_id + "_abstract"
            actions.append(self.show_menu(abstract_id, "abstract", "Abstract"))
            extra += (
                f"<div class='abstract' id='{escape(abstract_id)}' "
                "style='display:none'>"
                f"{escape(record.abstract)}"
                f"{self.hide_menu(abstract_id, 'Abstract')}</div>"
            )

        match options.bibtex:
            case BibtexMode.LINK:
                href = escape_url(bibtex_url(options, entry.record_id))
                actions.append(f"<a href='{href}'>BibTeX</a>")
            case BibtexMode.EMBEDDED if entry.bibtex is not None:
                bibtex_id = entry.post_id + "_bibtex"
                actions.append(self.show_menu(bibtex_id, "bibtex", "BibTeX"))
                extra += (
                    f"<div class='bibtex' id='{escape(bibtex_id)}' "
                    "style='display:none'>"
                    f"<pre>{escape(entry.bibtex)}</pre>"
                    f"{self.hide_menu(bibtex_id, 'BibTeX')}</div>"
                )

        for path in entry.documents:
            actions.append(f"<a href='{escape_url(path)}'>PDF</a>")

        if options.doi_link and record.doi:
            href = escape_url(doi_url(record.doi))
            actions.append(f"DOI: <a href='{href}'>{escape(record.doi)}</a>")

        if options.url_link and record.url:
            actions.append(f"<a href='{escape_url(record.url)}'>URL</a>")

        if options.bibsonomy_link:
            href = escape_url(post_url(options, entry.record_id))
            actions.append(f"<a href='{href}'>BibSonomy</a>")

        return actions, extra

    def show_menu(self, element_id: str, anchor: str, text: str) -> str:
        return (
            f"<a class='publication-toggle' href='#{escape(anchor)}' "
            f"onclick='return toggleId({escape_js_string(element_id)});'>"
            f"{escape(text)}</a>"
        )

    def hide_menu(self, element_id: str, what: str) -> str:
        return (
            " <a href='#hide' "
            f"onclick='return toggleId({escape_js_string(element_id)});'>"
            f"Hide {escape(what)}</a>"
        )
