"""Write-once local cache for downloaded documents and previews.

The filesystem is the cache: a file that exists is fresh, there is no
expiry or checksum. Downloads are written to a temporary file and renamed
into place, so a reader never sees a half written file. Concurrent
downloads of the same target within one process are serialized by a
per-path lock; the existence check before taking it is lock-free.
"""

from __future__ import annotations

import logging
import tempfile
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from publist.core.documents import (
    DEFAULT_PUBLIC_SUFFIX,
    document_cache_name,
    preview_cache_name,
)
from publist.core.models import Document, RecordId
from publist.exceptions import TransportError

logger = logging.getLogger(__name__)

Fetcher = Callable[[], bytes | None]


class FileCache:
    """Fetch-if-absent cache keyed by target path."""

    def __init__(self):
        # path -> (lock, number of callers using it)
        self._locks: dict[Path, tuple[threading.Lock, int]] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _locked(self, path: Path) -> Iterator[None]:
        """Hold the lock of a path; the entry is dropped when unused."""
        key = path.resolve()
        with self._locks_guard:
            if key in self._locks:
                lock, users = self._locks[key]
            else:
                lock, users = threading.Lock(), 0
            self._locks[key] = (lock, users + 1)

        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                lock, users = self._locks[key]
                if users == 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)

    def ensure_directory(self, directory: Path) -> None:
        """Create directory (and parents) if missing."""
        if not directory.is_dir():
            logger.warning(f"creating folder {directory}")
            directory.mkdir(parents=True, exist_ok=True)

    def fetch_if_absent(
        self,
        directory: str | Path,
        final_name: str,
        fetcher: Fetcher,
        *,
        label: str = "",
    ) -> Path:
        """Return the cached file, downloading it first if needed.

        Args:
            directory: Cache directory, created on demand.
            final_name: File name inside the directory.
            fetcher: Returns the file content, or None if it does not exist.
            label: Description of the requested file for warnings.

        Returns:
            Path of the cached file. The path is returned even if the
            download failed, the file then does not exist.
        """
        directory = Path(directory)
        self.ensure_directory(directory)
        path = directory / final_name

        if path.exists():
            return path

        with self._locked(path):
            if path.exists():
                return path

            what = label or final_name
            try:
                content = fetcher()
            except TransportError as e:
                logger.warning(f"could not download file {what}: {e}")
                return path

            if content is None:
                logger.warning(f"could not download file {what}")
                return path

            self._write(path, content)
            logger.debug(f"Cached {what} at {path}")

        return path

    def _write(self, path: Path, content: bytes) -> None:
        """Write bytes atomically."""
        temp_fd, temp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with open(temp_fd, "wb") as f:
                f.write(content)

            Path(temp_path).rename(path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise


class DocumentCache:
    """Cache of full documents for one render.

    Documents are stored under their public name (``paper_oa.pdf`` is
    stored as ``paper.pdf``). Different posts may thus map to the same
    file; such collisions are reported but not prevented.
    """

    def __init__(
        self,
        cache: FileCache,
        directory: str | Path,
        public_suffix: str = DEFAULT_PUBLIC_SUFFIX,
    ):
        self.cache = cache
        self.directory = Path(directory)
        self.public_suffix = public_suffix
        self.claimed: dict[str, tuple[str, str]] = {}

    def path_for(self, document: Document) -> Path:
        """Path a document is (or would be) cached at."""
        return self.directory / document_cache_name(
            document.file_name, self.public_suffix
        )

    def claim(self, record_id: RecordId, document: Document) -> str:
        """Reserve the cache name of a document for this render.

        Logs a warning if another document already claimed the name.
        """
        final_name = document_cache_name(document.file_name, self.public_suffix)
        source = (str(record_id), document.file_name)
        owner = self.claimed.setdefault(final_name, source)
        if owner != source:
            logger.warning(
                f"duplicate file name {final_name} for post {record_id.intra_hash}"
            )
        return final_name

    def fetch(
        self,
        record_id: RecordId,
        document: Document,
        fetcher: Fetcher,
    ) -> Path:
        """Claim and download a document if it is not cached yet."""
        final_name = self.claim(record_id, document)
        return self.cache.fetch_if_absent(
            self.directory,
            final_name,
            fetcher,
            label=f"{record_id.intra_hash}/{record_id.user_name}/{final_name}",
        )


class PreviewCache:
    """Cache of preview images, one subdirectory per preview size."""

    def __init__(self, cache: FileCache, directory: str | Path, size: str = "small"):
        self.cache = cache
        self.directory = Path(directory) / size
        self.size = size

    def fetch(
        self,
        record_id: RecordId,
        document: Document,
        fetcher: Fetcher,
    ) -> Path:
        """Download the preview of a document if it is not cached yet."""
        final_name = preview_cache_name(document.file_name)
        return self.cache.fetch_if_absent(
            self.directory,
            final_name,
            fetcher,
            label=(
                f"preview {record_id.intra_hash}/{record_id.user_name}/"
                f"{document.file_name}"
            ),
        )
