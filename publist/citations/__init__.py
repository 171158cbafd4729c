"""Citation formatting for publication posts.

Renders posts in APA, MLA, Chicago and IEEE style, as HTML fragments or
plain text.
"""

from publist.citations.styles import (
    APAStyle,
    AuthorFormatter,
    BaseStyle,
    ChicagoStyle,
    CitationFormatter,
    CitationStyle,
    DateFormatter,
    IEEEStyle,
    MLAStyle,
    StyleOptions,
    StyleRegistry,
    TitleFormatter,
)

__all__ = [
    "CitationFormatter",
    "CitationStyle",
    "StyleOptions",
    "StyleRegistry",
    "BaseStyle",
    "APAStyle",
    "MLAStyle",
    "ChicagoStyle",
    "IEEEStyle",
    "AuthorFormatter",
    "DateFormatter",
    "TitleFormatter",
]
