"""Core domain models, ordering and document selection."""

# Models
from publist.core.models import (
    Document,
    Issued,
    Name,
    Record,
    RecordId,
    YearKind,
    YearValue,
    decode_records,
    extract_year,
)

# Document selection
from publist.core.documents import (
    DocumentFilter,
    document_cache_name,
    preview_cache_name,
)

# Sorting
from publist.core.sorting import (
    lead_name,
    sort_key,
    sort_record_ids,
)

__all__ = [
    # Models
    "Document",
    "Issued",
    "Name",
    "Record",
    "RecordId",
    "YearKind",
    "YearValue",
    "decode_records",
    "extract_year",
    # Document selection
    "DocumentFilter",
    "document_cache_name",
    "preview_cache_name",
    # Sorting
    "lead_name",
    "sort_key",
    "sort_record_ids",
]
