"""Citation style formatting for publication posts.

A small, CSL-inspired formatter for the common bibliography styles. Each
style renders one post either as an HTML fragment (italics as ``<i>``, all
field values escaped) or as plain text.
"""

from __future__ import annotations

import html
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from publist.core.models import Name, Record, extract_year
from publist.exceptions import StyleNotFoundError

ARTICLE_TYPES = {"article", "article-journal", "article-magazine", "article-newspaper"}
BOOK_TYPES = {"book"}
PART_TYPES = {"paper-conference", "chapter", "inproceedings", "entry-encyclopedia"}
THESIS_TYPES = {"thesis"}

FORMATS = ("html", "text")


@dataclass
class StyleOptions:
    """Configuration options for citation styles."""

    # Et al. rules
    et_al_min: int = 3
    et_al_use_first: int = 1

    # Formatting
    include_doi: bool = True
    include_url: bool = False

    # Separators
    and_separator: str = "&"

    # Page formatting
    page_prefix: str = "pp."

    # Title formatting
    title_case: str = "sentence"  # sentence, title, preserve

    def __post_init__(self):
        """Validate options."""
        if self.et_al_use_first > self.et_al_min:
            raise ValueError("et_al_use_first must be <= et_al_min")


class CitationStyle(Protocol):
    """Protocol for citation styles."""

    def format_bibliography(self, record: Record, number: int | None = None) -> str:
        """Format bibliography entry."""
        ...


class Output:
    """Target format of a rendered citation."""

    def __init__(self, format: str = "html"):
        if format not in FORMATS:
            raise ValueError(f"Unsupported citation format: {format}")
        self.format = format

    def text(self, value: object) -> str:
        """Field value in the target format."""
        if self.format == "html":
            return html.escape(str(value), quote=False)
        return str(value)

    def italic(self, value: object) -> str:
        if self.format == "html":
            return f"<i>{self.text(value)}</i>"
        return str(value)


class AuthorFormatter:
    """Formats CSL names according to style rules."""

    def format(
        self,
        name: Name,
        format: str = "last-first",
        initialize: bool = True,
    ) -> str:
        """Format a single name.

        Args:
            name: CSL name
            format: Format style (last-first, first-last, last-only)
            initialize: Whether to use initials

        Returns:
            Formatted name
        """
        if name.literal and not name.family:
            return name.literal

        last = name.family
        given = name.given.strip()
        if initialize and given:
            given = self._get_initials(given)

        match format:
            case "last-first":
                return f"{last}, {given}" if given else last
            case "first-last":
                return f"{given} {last}" if given else last
            case "last-only":
                return last
            case _:
                return f"{given} {last}".strip()

    def format_multiple(
        self,
        names: tuple[Name, ...] | list[Name],
        format: str = "last-first",
        and_sep: str = "&",
        delimiter: str = ", ",
        et_al_min: int = 99,
        et_al_use_first: int = 1,
    ) -> str:
        """Format a list of names."""
        if not names:
            return ""

        # Apply et al. rules
        if len(names) >= et_al_min:
            shown = names[:et_al_use_first]
            result = delimiter.join(self.format(n, format) for n in shown)
            return f"{result} et al."

        formatted = [self.format(n, format) for n in names]

        if len(formatted) == 1:
            return formatted[0]
        elif len(formatted) == 2:
            # For APA style, need comma before ampersand
            if delimiter == ", " and and_sep == "&":
                return f"{formatted[0]}, {and_sep} {formatted[1]}"
            return f"{formatted[0]} {and_sep} {formatted[1]}"
        else:
            # Oxford comma before 'and'
            return (
                f"{delimiter.join(formatted[:-1])}{delimiter}{and_sep} {formatted[-1]}"
            )

    def _get_initials(self, name: str) -> str:
        """Get initials from given names."""
        # CJK given names are kept in full
        if any(
            "\u4e00" <= c <= "\u9fff"  # CJK Unified Ideographs
            or "\u3400" <= c <= "\u4dbf"  # CJK Extension A
            or "\uac00" <= c <= "\ud7af"  # Hangul Syllables
            or "\u3040" <= c <= "\u30ff"  # Hiragana and Katakana
            for c in name
        ):
            return name

        # Handle hyphenated names
        parts = name.replace("-", " - ").split()
        initials = []

        for part in parts:
            if part == "-":
                initials.append("-")
            elif part:
                initials.append(f"{part[0].upper()}.")

        return " ".join(initials).replace(" - ", "-")


def format_ordinal(number: int | str) -> str:
    """Format number as ordinal (1st, 2nd, 3rd, etc.)."""
    try:
        n = int(str(number))
    except (ValueError, TypeError):
        # Not a number, return as-is
        return str(number)

    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")

    return f"{n}{suffix}"


class DateFormatter:
    """Formats issue dates."""

    YEAR_PATTERN = re.compile(r"[12][0-9]{3}")

    def format_year(self, record: Record, no_date: str = "n.d.") -> str:
        """Year of a post; a year is picked out of raw dates."""
        year = extract_year(record).text
        if not year:
            return no_date
        match = self.YEAR_PATTERN.search(year)
        return match.group(0) if match else year


class TitleFormatter:
    """Formats titles according to style rules."""

    # Common acronyms to preserve
    ACRONYMS = {
        "NASA",
        "IEEE",
        "ACM",
        "XML",
        "HTML",
        "CSS",
        "API",
        "SQL",
        "JSON",
        "URL",
        "URI",
        "DOI",
        "DNA",
        "RNA",
        "GDP",
        "USA",
        "UK",
        "EU",
        "UN",
    }

    # Words not to capitalize in title case
    LOWERCASE_WORDS = {
        "a",
        "an",
        "and",
        "as",
        "at",
        "but",
        "by",
        "for",
        "from",
        "in",
        "nor",
        "of",
        "on",
        "or",
        "so",
        "the",
        "to",
        "up",
        "with",
        "yet",
    }

    def format(self, title: str, case: str = "preserve") -> str:
        """Apply a case transformation to a title."""
        if not title:
            return ""
        words = title.split()
        match case:
            case "sentence":
                # First word capitalized, rest lowercase
                return " ".join(
                    word.upper()
                    if word.upper() in self.ACRONYMS
                    else word.capitalize()
                    if i == 0
                    else word.lower()
                    for i, word in enumerate(words)
                )
            case "title":
                result = []
                for i, word in enumerate(words):
                    if word.upper() in self.ACRONYMS:
                        result.append(word.upper())
                    # Don't capitalize small words (except first/last)
                    elif i == 0 or i == len(words) - 1:
                        result.append(word.capitalize())
                    elif word.lower() in self.LOWERCASE_WORDS:
                        result.append(word.lower())
                    else:
                        result.append(word.capitalize())
                return " ".join(result)
            case _:
                return title


class BaseStyle:
    """Base class for citation styles."""

    def __init__(self, options: StyleOptions | None = None, format: str = "html"):
        """Initialize style with options and output format."""
        self.options = options or self._get_default_options()
        self.out = Output(format)
        self.author_formatter = AuthorFormatter()
        self.date_formatter = DateFormatter()
        self.title_formatter = TitleFormatter()

    def _get_default_options(self) -> StyleOptions:
        """Get default options for this style."""
        return StyleOptions()

    def format_bibliography(self, record: Record, number: int | None = None) -> str:
        """Format bibliography entry."""
        raise NotImplementedError

    def _title(self, record: Record) -> str:
        return self.title_formatter.format(record.title, self.options.title_case)

    def _format_pages(self, pages: str | int) -> str:
        """Format page range."""
        if not pages:
            return ""

        pages = str(pages).replace("--", "–").replace("-", "–")
        if self.options.page_prefix:
            return f"{self.options.page_prefix} {pages}"
        return pages

    def _format_doi(self, doi: str) -> str:
        """Format DOI as resolver URL."""
        if not doi or not self.options.include_doi:
            return ""

        if not doi.startswith("http"):
            doi = f"https://doi.org/{doi}"

        return doi

    def _format_url(self, url: str) -> str:
        if not url or not self.options.include_url:
            return ""
        return url


class APAStyle(BaseStyle):
    """APA (American Psychological Association) citation style."""

    def _get_default_options(self) -> StyleOptions:
        """APA default options."""
        return StyleOptions(
            et_al_min=21,
            et_al_use_first=19,
            and_separator="&",
            title_case="sentence",
            include_doi=True,
            page_prefix="",
        )

    def format_bibliography(self, record: Record, number: int | None = None) -> str:
        """Format APA bibliography entry."""
        out = self.out
        parts = []

        # Authors, editors for edited books
        if record.author:
            parts.append(self._names(record.author))
        elif record.editor:
            eds = "Ed." if len(record.editor) == 1 else "Eds."
            parts.append(f"{self._names(record.editor)} ({eds})")

        parts.append(f"({out.text(self.date_formatter.format_year(record))})")

        if record.title:
            title = self._title(record)
            if record.type in BOOK_TYPES or record.type in THESIS_TYPES:
                parts.append(out.italic(title))
            else:
                parts.append(out.text(title))

        if record.type in ARTICLE_TYPES:
            source = []
            if record.container_title:
                source.append(out.italic(record.container_title))
            if record.volume:
                vol = out.italic(record.volume)
                if record.issue:
                    vol += f"({out.text(record.issue)})"
                source.append(vol)
            if record.page:
                source.append(out.text(self._format_pages(record.page)))
            if source:
                parts.append(", ".join(source))

        elif record.type in BOOK_TYPES:
            if record.edition:
                parts.append(f"({out.text(format_ordinal(record.edition))} ed.)")
            if record.publisher:
                parts.append(out.text(record.publisher))

        elif record.type in PART_TYPES:
            if record.container_title:
                container = f"In {out.italic(record.container_title)}"
                if record.page:
                    container += f" (pp. {out.text(self._format_pages(record.page))})"
                parts.append(container)
            if record.publisher:
                parts.append(out.text(record.publisher))

        elif record.publisher:
            parts.append(out.text(record.publisher))

        result = self._join(parts)

        doi = self._format_doi(record.doi)
        if doi:
            result += f" {out.text(doi)}"

        return result

    def _names(self, names: tuple[Name, ...]) -> str:
        return self.out.text(
            self.author_formatter.format_multiple(
                names,
                format="last-first",
                and_sep=self.options.and_separator,
                et_al_min=self.options.et_al_min,
                et_al_use_first=self.options.et_al_use_first,
            )
        )

    def _join(self, parts: list[str]) -> str:
        """Join parts with periods, avoiding double periods."""
        result = ""
        for i, part in enumerate(parts):
            if i > 0:
                if result.endswith(".") and not result.endswith(".."):
                    result += " "
                else:
                    result += ". "
            result += part

        if not result.endswith("."):
            result += "."

        return result


class MLAStyle(BaseStyle):
    """MLA (Modern Language Association) citation style."""

    def _get_default_options(self) -> StyleOptions:
        """MLA default options."""
        return StyleOptions(
            et_al_min=3,
            et_al_use_first=1,
            and_separator="and",
            title_case="title",
            include_url=True,
            page_prefix="pp.",
        )

    def format_bibliography(self, record: Record, number: int | None = None) -> str:
        """Format MLA bibliography entry."""
        out = self.out
        fmt = self.author_formatter
        parts = []

        names = record.persons
        if names:
            first = fmt.format(names[0], "last-first", initialize=False)
            if len(names) == 1:
                author = first
            elif len(names) == 2:
                second = fmt.format(names[1], "first-last", initialize=False)
                author = f"{first}, and {second}"
            else:
                author = f"{first}, et al"
            if not author.endswith("."):
                author += "."
            parts.append(out.text(author))

        if record.title:
            title = self._title(record)
            if record.type in BOOK_TYPES:
                parts.append(f"{out.italic(title)}.")
            else:
                parts.append(f"“{out.text(title)}.”")

        container = []
        if record.container_title:
            container.append(out.italic(record.container_title))
        if record.edition:
            container.append(f"{out.text(format_ordinal(record.edition))} ed.")
        if record.volume:
            container.append(f"vol. {out.text(record.volume)}")
        if record.issue:
            container.append(f"no. {out.text(record.issue)}")
        if record.publisher:
            container.append(out.text(record.publisher))
        container.append(out.text(self.date_formatter.format_year(record)))
        if record.page:
            container.append(out.text(self._format_pages(record.page)))
        parts.append(", ".join(container) + ".")

        url = self._format_doi(record.doi) or self._format_url(record.url)
        if url:
            parts.append(f"{out.text(url)}.")

        return " ".join(parts)


class ChicagoStyle(BaseStyle):
    """Chicago Manual of Style, author-date bibliography."""

    def _get_default_options(self) -> StyleOptions:
        """Chicago default options."""
        return StyleOptions(
            et_al_min=11,
            et_al_use_first=7,
            and_separator="and",
            title_case="title",
            include_doi=True,
        )

    def format_bibliography(self, record: Record, number: int | None = None) -> str:
        """Format Chicago bibliography entry."""
        out = self.out
        parts = []

        names = record.persons
        if names:
            first = self.author_formatter.format(
                names[0], "last-first", initialize=False
            )
            rest = [
                self.author_formatter.format(n, "first-last", initialize=False)
                for n in names[1:]
            ]
            if len(names) >= self.options.et_al_min:
                rest = rest[: self.options.et_al_use_first - 1] + ["et al"]
            if not rest:
                authors = first
            elif len(rest) == 1:
                authors = f"{first}, and {rest[0]}"
            else:
                authors = f"{first}, {', '.join(rest[:-1])}, and {rest[-1]}"
            if not authors.endswith("."):
                authors += "."
            parts.append(out.text(authors))

        parts.append(f"{out.text(self.date_formatter.format_year(record))}.")

        if record.title:
            title = self._title(record)
            if record.type in BOOK_TYPES:
                parts.append(f"{out.italic(title)}.")
            else:
                parts.append(f"“{out.text(title)}.”")

        if record.type in ARTICLE_TYPES and record.container_title:
            journal = out.italic(record.container_title)
            if record.volume:
                journal += f" {out.text(record.volume)}"
                if record.issue:
                    journal += f" ({out.text(record.issue)})"
            if record.page:
                pages = str(record.page).replace("--", "–").replace("-", "–")
                journal += f": {out.text(pages)}"
            parts.append(journal + ".")
        elif record.type in PART_TYPES and record.container_title:
            part = f"In {out.italic(record.container_title)}"
            if record.page:
                pages = str(record.page).replace("--", "–").replace("-", "–")
                part += f", {out.text(pages)}"
            parts.append(part + ".")

        if record.type not in ARTICLE_TYPES:
            pub_info = [p for p in (record.publisher_place, record.publisher) if p]
            if pub_info:
                parts.append(out.text(": ".join(pub_info)) + ".")

        doi = self._format_doi(record.doi)
        if doi:
            parts.append(f"{out.text(doi)}.")

        return " ".join(parts)


class IEEEStyle(BaseStyle):
    """IEEE citation style."""

    def _get_default_options(self) -> StyleOptions:
        """IEEE default options."""
        return StyleOptions(
            et_al_min=7,
            et_al_use_first=1,
            and_separator="and",
            title_case="preserve",
            page_prefix="pp.",
        )

    def format_bibliography(self, record: Record, number: int | None = None) -> str:
        """Format IEEE bibliography entry."""
        out = self.out
        parts = []

        if number:
            parts.append(f"[{number}]")

        names = record.persons
        if names:
            formatted = [
                self.author_formatter.format(n, "first-last", initialize=True)
                for n in names
            ]
            if len(formatted) >= self.options.et_al_min:
                authors = f"{formatted[0]} et al."
            elif len(formatted) > 2:
                authors = f"{', '.join(formatted[:-1])}, and {formatted[-1]}"
            else:
                authors = " and ".join(formatted)
            parts.append(out.text(authors) + ",")

        if record.title:
            title = self._title(record)
            if record.type in BOOK_TYPES:
                parts.append(out.italic(title) + ".")
            else:
                parts.append(f"“{out.text(title)},”")

        year = out.text(self.date_formatter.format_year(record))

        if record.type in ARTICLE_TYPES:
            if record.container_title:
                parts.append(out.italic(record.container_title) + ",")
            if record.volume:
                parts.append(f"vol. {out.text(record.volume)},")
            if record.issue:
                parts.append(f"no. {out.text(record.issue)},")
            if record.page:
                parts.append(f"{out.text(self._format_pages(record.page))},")
            parts.append(f"{year}.")

        elif record.type in PART_TYPES:
            if record.container_title:
                booktitle = record.container_title
                # Abbreviate common IEEE conference terms
                booktitle = booktitle.replace("Proceedings of the", "Proc.")
                booktitle = booktitle.replace("Proceedings of", "Proc.")
                booktitle = booktitle.replace("Conference", "Conf.")
                booktitle = booktitle.replace("International", "Int.")
                parts.append(f"in {out.italic(booktitle)},")
            if record.publisher_place:
                parts.append(f"{out.text(record.publisher_place)},")
            if record.page:
                parts.append(f"{year}, {out.text(self._format_pages(record.page))}.")
            else:
                parts.append(f"{year}.")

        else:
            if record.publisher_place:
                parts.append(f"{out.text(record.publisher_place)}:")
            if record.publisher:
                parts.append(f"{out.text(record.publisher)},")
            parts.append(f"{year}.")

        doi = record.doi
        if doi:
            parts.append(f"doi: {out.text(doi)}.")

        return " ".join(parts)


class StyleRegistry:
    """Registry of available citation styles."""

    def __init__(self):
        """Initialize with built-in styles."""
        self._styles: dict[str, type[BaseStyle]] = {
            "apa": APAStyle,
            "mla": MLAStyle,
            "chicago": ChicagoStyle,
            "ieee": IEEEStyle,
        }

        # Aliases
        self._aliases = {
            "apa7": "apa",
            "apa-6th-edition": "apa",
            "modern-language-association": "mla",
            "mla8": "mla",
            "mla9": "mla",
            "chicago-author-date": "chicago",
            "chicago17": "chicago",
        }

    def _normalize(self, name: str) -> str:
        name = name.strip().lower()
        if name.endswith(".csl"):
            name = name[: -len(".csl")]
        return self._aliases.get(name, name)

    def __contains__(self, name: str) -> bool:
        """Check if style is registered."""
        return self._normalize(name) in self._styles

    def get(self, name: str, format: str = "html") -> BaseStyle:
        """Get style by name, e.g. ``apa`` or ``apa.csl``."""
        key = self._normalize(name)
        if key not in self._styles:
            raise StyleNotFoundError(name)
        return self._styles[key](format=format)

    def register(self, name: str, style: type[BaseStyle]) -> None:
        """Register custom style."""
        self._styles[name.lower()] = style

    def list_styles(self) -> list[str]:
        """List available styles."""
        return list(self._styles.keys())


class CitationFormatter:
    """Batch renderer of citations for a set of posts."""

    def __init__(self, registry: StyleRegistry | None = None):
        self.registry = registry or StyleRegistry()

    def render(
        self,
        records: Mapping[str, Record],
        style: str,
        format: str = "html",
    ) -> dict[str, str]:
        """Render one bibliography entry per post.

        Posts are numbered from 1 in iteration order; styles with numbered
        labels (IEEE) print the number.

        Args:
            records: Posts keyed by post id, in display order
            style: Style name (``apa.csl``, ``ieee``, ...)
            format: ``html`` or ``text``

        Returns:
            Rendered citation per post id.

        Raises:
            StyleNotFoundError: If the style is unknown.
        """
        formatter = self.registry.get(style, format=format)
        return {
            post_id: formatter.format_bibliography(record, number)
            for number, (post_id, record) in enumerate(records.items(), start=1)
        }
