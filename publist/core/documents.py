"""Selection of the documents offered for download."""

from collections.abc import Sequence

from .models import Document

PDF_EXTENSION = ".pdf"
PREVIEW_EXTENSION = ".jpg"
DEFAULT_PUBLIC_SUFFIX = "_oa.pdf"


class DocumentFilter:
    """Pick the PDF files of a post that may be linked.

    A post with a single document exposes it if it is a PDF. When a post
    has several documents, only those explicitly marked as public (their
    file name ends with the public suffix, e.g. ``paper_oa.pdf``) are
    exposed, everything else is treated as private.
    """

    def __init__(self, public_suffix: str = DEFAULT_PUBLIC_SUFFIX):
        self.public_suffix = public_suffix

    def select(self, documents: Sequence[Document]) -> list[Document]:
        """Return the qualifying documents in their original order."""
        several = len(documents) >= 2
        return [
            doc
            for doc in documents
            if doc.file_name.endswith(PDF_EXTENSION)
            and (not several or doc.file_name.endswith(self.public_suffix))
        ]


def document_cache_name(
    file_name: str, public_suffix: str = DEFAULT_PUBLIC_SUFFIX
) -> str:
    """File name a document is cached under.

    The public marker is dropped, so ``paper_oa.pdf`` becomes ``paper.pdf``.
    """
    if public_suffix and file_name.endswith(public_suffix):
        return file_name[: -len(public_suffix)] + PDF_EXTENSION
    return file_name


def preview_cache_name(file_name: str) -> str:
    """File name a preview image is cached under."""
    return file_name + PREVIEW_EXTENSION
