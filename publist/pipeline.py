"""Rendering of publication lists.

Wires the collaborators together: posts are fetched once, their citations
rendered in one batch, then each post is processed in display order
(documents and previews fetched into the local caches, BibTeX fetched when
embedded) and the result assembled into HTML or text.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import partial

from publist.cache.filecache import DocumentCache, FileCache, PreviewCache
from publist.citations.styles import CitationFormatter
from publist.client.base import CitationRenderer, RecordStore
from publist.config import BibtexMode, RenderOptions
from publist.core.documents import DocumentFilter
from publist.core.models import Record, RecordId
from publist.core.sorting import sort_record_ids
from publist.exceptions import InvalidRecordIdError, TransportError
from publist.render.html import HtmlAssembler
from publist.render.text import TextAssembler
from publist.render.views import EntryView, PreviewLink

logger = logging.getLogger(__name__)


class PublicationList:
    """Render the publication posts of a user.

    The instance holds no per-render state: options are immutable and the
    duplicate file name bookkeeping is created anew for every call.
    """

    def __init__(
        self,
        store: RecordStore,
        options: RenderOptions | None = None,
        formatter: CitationRenderer | None = None,
        cache: FileCache | None = None,
    ):
        self.store = store
        self.options = options or RenderOptions()
        self.formatter = formatter or CitationFormatter()
        self.cache = cache or FileCache()
        self.document_filter = DocumentFilter(self.options.public_doc_postfix)

    def render(
        self,
        user: str,
        tags: Sequence[str] = (),
        count: int = 1000,
        format: str = "html",
    ) -> str:
        """Download ``count`` posts of ``user`` with ``tags`` and render them.

        Args:
            user: Owner of the posts
            tags: Tags all posts must carry (can be empty)
            count: Number of posts to download
            format: ``html`` or ``text``

        Returns:
            The rendered publication list.

        Raises:
            TransportError: If the posts cannot be fetched.
        """
        records = self.store.fetch_records(user, list(tags), 0, count)

        record_ids = []
        for post_id in sort_record_ids(records):
            try:
                record_ids.append(RecordId.parse(post_id))
            except InvalidRecordIdError as e:
                logger.warning(f"skipping post: {e}")

        # numbered styles count in display order
        ordered = {str(rid): records[str(rid)] for rid in record_ids}
        citations = self.formatter.render(ordered, self.options.style, format)

        documents = None
        if self.options.pdf_directory:
            documents = DocumentCache(
                self.cache, self.options.pdf_directory, self.options.public_doc_postfix
            )
        previews = None
        if self.options.preview_directory:
            previews = PreviewCache(
                self.cache, self.options.preview_directory, self.options.preview_size
            )

        entries = [
            self._entry(
                record_id,
                ordered[str(record_id)],
                citations.get(str(record_id), ""),
                documents,
                previews,
            )
            for record_id in record_ids
        ]

        if format == "text":
            result = TextAssembler(self.options).assemble(entries)
        else:
            result = HtmlAssembler(self.options).assemble(entries)

        logger.info(f"Rendered {len(entries)} posts of {user}")
        return result

    def _entry(
        self,
        record_id: RecordId,
        record: Record,
        citation: str,
        documents: DocumentCache | None,
        previews: PreviewCache | None,
    ) -> EntryView:
        """Fetch everything a post links to."""
        post_id = str(record_id)
        owner, intra_hash = record_id.user_name, record_id.intra_hash
        entry = EntryView(post_id, record_id, record, citation)

        public_docs = self.document_filter.select(record.documents)

        for doc in public_docs:
            if documents is not None:
                fetch = partial(
                    self.store.fetch_document_bytes, owner, intra_hash, doc.file_name
                )
                entry.documents.append(documents.fetch(record_id, doc, fetch))

            if previews is not None:
                fetch = partial(
                    self.store.fetch_preview_bytes,
                    owner,
                    intra_hash,
                    doc.file_name,
                    previews.size,
                )
                target = None
                if self.options.link_pdfs and documents is not None:
                    target = documents.path_for(doc)
                entry.previews.append(
                    PreviewLink(previews.fetch(record_id, doc, fetch), target)
                )

        if self.options.bibtex is BibtexMode.EMBEDDED:
            try:
                entry.bibtex = self.store.fetch_bibtex_text(owner, intra_hash)
            except TransportError as e:
                logger.warning(f"could not download BibTeX of post {post_id}: {e}")

        return entry
