"""Render options for publication lists.

Options are an immutable struct handed to the renderer at call time. The
two historical BibTeX switches (``bibtex_link`` and ``bibtex_embedded``)
are folded into a single ``BibtexMode`` when options are built.
"""

import enum
import logging
import re
from collections.abc import Mapping
from typing import Any

import msgspec

from publist.core.documents import DEFAULT_PUBLIC_SUFFIX
from publist.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "apa.csl"
DEFAULT_BIBSONOMY_URL = "https://www.bibsonomy.org"


class BibtexMode(enum.Enum):
    """How the BibTeX of a post is offered."""

    NONE = "none"
    LINK = "link"
    EMBEDDED = "embedded"


class RenderOptions(msgspec.Struct, frozen=True, kw_only=True):
    """Rendering switches of a publication list.

    Attributes:
        pdf_directory: Where documents are downloaded to. No documents are
            downloaded or linked when unset.
        preview_directory: Where preview images are downloaded to. No
            previews are shown when unset.
        link_pdfs: Wrap preview images in a link to the document.
        style: Citation style used for the entries.
        year_headings: Group entries under year headings.
        show_group_menu: Render an index of the year headings.
        css_class: CSS class of the surrounding lists.
        doi_link: Link the DOI of a post.
        url_link: Link the URL of a post.
        bibtex: How BibTeX is offered.
        show_abstract: Add a toggle showing the abstract.
        bibsonomy_link: Link the post on BibSonomy.
        option_separator: Separator for plain text action menus.
        public_doc_postfix: Suffix marking the public document of a post
            that has several documents.
        preview_size: Size of downloaded preview images.
        bibsonomy_url: Base URL for BibTeX and post links.
    """

    pdf_directory: str | None = None
    preview_directory: str | None = None
    link_pdfs: bool = True
    style: str = DEFAULT_STYLE
    year_headings: bool = True
    show_group_menu: bool = False
    css_class: str = "publications"
    doi_link: bool = True
    url_link: bool = True
    bibtex: BibtexMode = BibtexMode.LINK
    show_abstract: bool = False
    bibsonomy_link: bool = True
    option_separator: str = " | "
    public_doc_postfix: str = DEFAULT_PUBLIC_SUFFIX
    preview_size: str = "small"
    bibsonomy_url: str = DEFAULT_BIBSONOMY_URL

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RenderOptions":
        """Build options from a configuration mapping.

        Keys may be snake_case or camelCase (``pdfDirectory``). The legacy
        ``bibtex_link`` / ``bibtex_embedded`` flags are accepted in place
        of ``bibtex``; a flag that is not given counts as disabled, so
        ``{"bibtexEmbedded": True}`` alone selects ``BibtexMode.EMBEDDED``
        and no link is rendered. An explicit ``bibtex`` key wins over both
        flags.

        Raises:
            ConfigError: On unknown keys or values of the wrong type.
        """
        options = {}
        for key, value in data.items():
            name = _normalize_key(key)
            if name not in _FIELDS and name not in _LEGACY_BIBTEX_FLAGS:
                raise ConfigError(key, "unknown option")
            options[name] = value

        link = options.pop("bibtex_link", None)
        embedded = options.pop("bibtex_embedded", None)
        if "bibtex" not in options and (link is not None or embedded is not None):
            options["bibtex"] = resolve_bibtex_mode(bool(link), bool(embedded)).value

        try:
            return msgspec.convert(options, cls)
        except msgspec.ValidationError as e:
            match = re.search(r"\$\.(\w+)", str(e))
            raise ConfigError(match.group(1) if match else "options", str(e)) from e

    def replace(self, **changes: Any) -> "RenderOptions":
        """Copy with some options changed."""
        return msgspec.structs.replace(self, **changes)


def resolve_bibtex_mode(link: bool, embedded: bool) -> BibtexMode:
    """Fold the two BibTeX switches into one mode; the link wins."""
    if link and embedded:
        logger.warning(
            "bibtex_link and bibtex_embedded are both enabled, rendering BibTeX links"
        )
    if link:
        return BibtexMode.LINK
    if embedded:
        return BibtexMode.EMBEDDED
    return BibtexMode.NONE


def _normalize_key(key: str) -> str:
    """Map camelCase and historical option names to field names."""
    key = _RENAMED.get(key, key)
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


_FIELDS = frozenset(RenderOptions.__struct_fields__)
_LEGACY_BIBTEX_FLAGS = frozenset({"bibtex_link", "bibtex_embedded"})
_RENAMED = {
    "pdf_dir": "pdf_directory",
    "pdf_previews_dir": "preview_directory",
    "opt_sep": "option_separator",
    "bibtexMode": "bibtex",
    "bibtex_mode": "bibtex",
}
