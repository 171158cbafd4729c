"""Render BibSonomy publication posts as grouped HTML publication lists."""

__version__ = "0.3.0"

from publist.config import BibtexMode, RenderOptions  # noqa: E402
from publist.pipeline import PublicationList  # noqa: E402

__all__ = [
    "BibtexMode",
    "PublicationList",
    "RenderOptions",
    "__version__",
]
