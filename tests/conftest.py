"""Pytest configuration and fixtures."""

import os

import pytest

from publist.core.models import Document, Issued, Name, Record


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Isolate environment variables for each test.

    This prevents test pollution where one test's environment
    changes affect other tests.
    """
    # Save current environment
    original_env = os.environ.copy()

    for name in ("PUBLIST_STYLE", "PUBLIST_PDF_DIR", "PUBLIST_PREVIEW_DIR"):
        monkeypatch.delenv(name, raising=False)

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


def make_post_id(number: int, user: str = "jaeschke") -> str:
    """Post id with a 32 character intra hash built from ``number``."""
    return f"{number:032x}{user}"


def make_record(
    year: str = "2020",
    type: str = "article-journal",
    family: str = "Doe",
    files: tuple[str, ...] = (),
    **fields,
) -> Record:
    """Build a post with sensible defaults."""
    return Record(
        type=type,
        issued=Issued(literal=year),
        author=(Name(family=family, given="Jane"),) if family else (),
        documents=tuple(Document(file_name=name) for name in files),
        title=fields.pop("title", f"A paper by {family or 'nobody'}"),
        **fields,
    )


class FakeStore:
    """In-memory record store that records every call."""

    def __init__(self, records=None, documents=None, previews=None, bibtex=None):
        self.records = records or {}
        self.documents = documents or {}
        self.previews = previews or {}
        self.bibtex = bibtex or {}
        self.calls = []

    def fetch_records(self, owner, tags, offset, count):
        self.calls.append(("records", owner, list(tags), offset, count))
        return dict(self.records)

    def fetch_document_bytes(self, owner, intra_hash, file_name):
        self.calls.append(("document", owner, intra_hash, file_name))
        return self.documents.get((intra_hash, file_name), b"%PDF-1.4")

    def fetch_preview_bytes(self, owner, intra_hash, file_name, size):
        self.calls.append(("preview", owner, intra_hash, file_name, size))
        return self.previews.get((intra_hash, file_name), b"\xff\xd8\xff")

    def fetch_bibtex_text(self, owner, intra_hash):
        self.calls.append(("bibtex", owner, intra_hash))
        return self.bibtex.get(intra_hash, f"@article{{{intra_hash},\n}}\n")

    def count(self, kind):
        return sum(1 for call in self.calls if call[0] == kind)


@pytest.fixture
def post_id():
    """Factory for post ids."""
    return make_post_id


@pytest.fixture
def record():
    """Factory for posts."""
    return make_record


@pytest.fixture
def store():
    """Empty in-memory record store."""
    return FakeStore()


@pytest.fixture
def csl_payload():
    """CSL-JSON posts response as returned by the service."""
    return b"""{
        "00000000000000000000000000000001jaeschke": {
            "id": "00000000000000000000000000000001jaeschke",
            "type": "article-journal",
            "title": "Information retrieval in folksonomies",
            "author": [
                {"family": "Hotho", "given": "Andreas"},
                {"family": "J\\u00e4schke", "given": "Robert"}
            ],
            "issued": {"literal": "2006"},
            "container-title": "The Semantic Web",
            "volume": 4011,
            "page": "411-426",
            "DOI": "10.1007/11762256_31",
            "URL": "https://example.org/folksonomies",
            "documents": [
                {"fileName": "folksonomies_oa.pdf", "md5hash": "abc",
                 "fileHash": "def", "userName": "jaeschke"}
            ],
            "keyword": "folksonomy ranking"
        },
        "00000000000000000000000000000002jaeschke": {
            "type": "book",
            "title": "Proceedings",
            "editor": [{"family": "Stumme", "given": "Gerd"}],
            "issued": {"raw": "2019-05-01"}
        }
    }"""
