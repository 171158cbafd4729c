"""Local file cache for documents and preview images."""

from publist.cache.filecache import (
    DocumentCache,
    FileCache,
    PreviewCache,
)

__all__ = [
    "DocumentCache",
    "FileCache",
    "PreviewCache",
]
