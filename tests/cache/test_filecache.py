"""Tests for the local document and preview cache."""

import logging
import threading

import pytest

from publist.cache.filecache import DocumentCache, FileCache, PreviewCache
from publist.core.models import Document, RecordId
from publist.exceptions import TransportError


@pytest.fixture
def cache():
    return FileCache()


@pytest.fixture
def record_id():
    return RecordId.parse("c" * 32 + "jaeschke")


def failing_fetcher():
    raise AssertionError("fetcher must not be called")


class TestFileCache:
    """Test fetch-if-absent semantics."""

    def test_downloads_missing_file(self, cache, tmp_path):
        """A missing file is fetched and written."""
        path = cache.fetch_if_absent(tmp_path, "paper.pdf", lambda: b"content")

        assert path == tmp_path / "paper.pdf"
        assert path.read_bytes() == b"content"

    def test_existing_file_is_not_fetched_again(self, cache, tmp_path):
        """A cached file is never refreshed."""
        cache.fetch_if_absent(tmp_path, "paper.pdf", lambda: b"first")
        path = cache.fetch_if_absent(tmp_path, "paper.pdf", failing_fetcher)

        assert path.read_bytes() == b"first"

    def test_file_from_earlier_run_is_kept(self, cache, tmp_path):
        """Files already on disk count as cached."""
        (tmp_path / "paper.pdf").write_bytes(b"old")

        path = cache.fetch_if_absent(tmp_path, "paper.pdf", failing_fetcher)

        assert path.read_bytes() == b"old"

    def test_creates_directory(self, cache, tmp_path, caplog):
        """Missing directories are created with a warning."""
        directory = tmp_path / "pdfs" / "nested"

        with caplog.at_level(logging.WARNING):
            cache.fetch_if_absent(directory, "paper.pdf", lambda: b"x")

        assert directory.is_dir()
        assert f"creating folder {directory}" in caplog.text

    def test_existing_directory_is_silent(self, cache, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            cache.fetch_if_absent(tmp_path, "paper.pdf", lambda: b"x")

        assert "creating folder" not in caplog.text

    def test_missing_remote_file(self, cache, tmp_path, caplog):
        """A file the service does not have is reported, the path returned."""
        with caplog.at_level(logging.WARNING):
            path = cache.fetch_if_absent(
                tmp_path, "paper.pdf", lambda: None, label="hash/user/paper.pdf"
            )

        assert path == tmp_path / "paper.pdf"
        assert not path.exists()
        assert "could not download file hash/user/paper.pdf" in caplog.text

    def test_transport_error_is_reported(self, cache, tmp_path, caplog):
        """Download failures do not abort the render."""

        def broken():
            raise TransportError("connection reset")

        with caplog.at_level(logging.WARNING):
            path = cache.fetch_if_absent(tmp_path, "paper.pdf", broken)

        assert not path.exists()
        assert "could not download file paper.pdf: connection reset" in caplog.text

    def test_failed_download_is_retried(self, cache, tmp_path):
        """Nothing is cached for a failed download."""
        cache.fetch_if_absent(tmp_path, "paper.pdf", lambda: None)
        path = cache.fetch_if_absent(tmp_path, "paper.pdf", lambda: b"later")

        assert path.read_bytes() == b"later"

    def test_no_temporary_files_left(self, cache, tmp_path):
        cache.fetch_if_absent(tmp_path, "paper.pdf", lambda: b"content")

        assert [p.name for p in tmp_path.iterdir()] == ["paper.pdf"]

    def test_concurrent_fetches_download_once(self, cache, tmp_path):
        """Concurrent requests for one file fetch it once."""
        calls = []
        started = threading.Barrier(4)

        def fetcher():
            calls.append(1)
            return b"content"

        def worker():
            started.wait()
            cache.fetch_if_absent(tmp_path, "paper.pdf", fetcher)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert (tmp_path / "paper.pdf").read_bytes() == b"content"
        assert cache._locks == {}

    def test_locks_are_released(self, cache, tmp_path):
        """No lock entries are kept for finished downloads."""
        for number in range(5):
            cache.fetch_if_absent(tmp_path, f"{number}.pdf", lambda: b"x")
        cache.fetch_if_absent(tmp_path, "missing.pdf", lambda: None)

        def broken():
            raise TransportError("reset")

        cache.fetch_if_absent(tmp_path, "broken.pdf", broken)

        assert cache._locks == {}

    def test_lock_is_held_during_download(self, cache, tmp_path):
        """The lock entry exists only while the download runs."""
        seen = []

        def fetcher():
            seen.append(dict(cache._locks))
            return b"x"

        cache.fetch_if_absent(tmp_path, "paper.pdf", fetcher)

        key = (tmp_path / "paper.pdf").resolve()
        assert list(seen[0]) == [key]
        assert seen[0][key][1] == 1
        assert cache._locks == {}


class TestDocumentCache:
    """Test caching documents under their public name."""

    def test_public_suffix_is_stripped(self, cache, tmp_path, record_id):
        documents = DocumentCache(cache, tmp_path)
        doc = Document(file_name="paper_oa.pdf")

        path = documents.fetch(record_id, doc, lambda: b"pdf")

        assert path == tmp_path / "paper.pdf"
        assert documents.path_for(doc) == path
        assert path.read_bytes() == b"pdf"

    def test_missing_document_label(self, cache, tmp_path, record_id, caplog):
        """Warnings name hash, owner and file."""
        documents = DocumentCache(cache, tmp_path)

        with caplog.at_level(logging.WARNING):
            documents.fetch(record_id, Document(file_name="paper.pdf"), lambda: None)

        assert (
            f"could not download file {'c' * 32}/jaeschke/paper.pdf" in caplog.text
        )

    def test_collision_is_reported_once(self, cache, tmp_path, caplog):
        """Two posts mapping to one file name produce one warning."""
        documents = DocumentCache(cache, tmp_path)
        first = RecordId.parse("1" * 32 + "jaeschke")
        second = RecordId.parse("2" * 32 + "jaeschke")
        doc = Document(file_name="fig.pdf")

        with caplog.at_level(logging.WARNING):
            first_path = documents.fetch(first, doc, lambda: b"first")
            second_path = documents.fetch(second, doc, failing_fetcher)

        assert first_path == second_path
        assert second_path.read_bytes() == b"first"
        warnings = [r for r in caplog.records if "duplicate file name" in r.message]
        assert len(warnings) == 1
        assert warnings[0].message == f"duplicate file name fig.pdf for post {'2' * 32}"

    def test_same_document_twice_is_no_collision(
        self, cache, tmp_path, record_id, caplog
    ):
        documents = DocumentCache(cache, tmp_path)
        doc = Document(file_name="fig.pdf")

        with caplog.at_level(logging.WARNING):
            documents.claim(record_id, doc)
            documents.claim(record_id, doc)

        assert "duplicate file name" not in caplog.text

    def test_stripped_name_collides_with_plain_name(self, cache, tmp_path, caplog):
        """``a_oa.pdf`` and ``a.pdf`` of different posts share ``a.pdf``."""
        documents = DocumentCache(cache, tmp_path)

        with caplog.at_level(logging.WARNING):
            documents.claim(
                RecordId.parse("1" * 32 + "u"), Document(file_name="a_oa.pdf")
            )
            documents.claim(RecordId.parse("2" * 32 + "u"), Document(file_name="a.pdf"))

        assert "duplicate file name a.pdf" in caplog.text


class TestPreviewCache:
    """Test caching preview images."""

    def test_preview_path(self, cache, tmp_path, record_id):
        """Previews are stored per size, named after the document."""
        previews = PreviewCache(cache, tmp_path, "small")

        path = previews.fetch(
            record_id, Document(file_name="paper_oa.pdf"), lambda: b"jpg"
        )

        assert path == tmp_path / "small" / "paper_oa.pdf.jpg"
        assert path.read_bytes() == b"jpg"

    def test_missing_preview_label(self, cache, tmp_path, record_id, caplog):
        previews = PreviewCache(cache, tmp_path)

        with caplog.at_level(logging.WARNING):
            previews.fetch(record_id, Document(file_name="paper.pdf"), lambda: None)

        assert (
            f"could not download file preview {'c' * 32}/jaeschke/paper.pdf"
            in caplog.text
        )
