"""Assembly of rendered publication lists."""

from publist.render.html import HtmlAssembler, escape, escape_url, trusted
from publist.render.text import TextAssembler
from publist.render.views import EntryView, PreviewLink, collect_headings

__all__ = [
    "EntryView",
    "HtmlAssembler",
    "PreviewLink",
    "TextAssembler",
    "collect_headings",
    "escape",
    "escape_url",
    "trusted",
]
