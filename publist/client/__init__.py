"""Access to the remote publication service."""

from publist.client.base import CitationRenderer, RecordStore
from publist.client.bibsonomy import BibSonomyClient

__all__ = [
    "BibSonomyClient",
    "CitationRenderer",
    "RecordStore",
]
