"""Data models for publication posts.

Posts arrive from the service as CSL-JSON: one object mapping each post id
to a CSL item. The structs below mirror the subset of CSL the renderer
needs, plus the BibSonomy specific ``documents`` list. Field names follow
Python conventions and are mapped back to the CSL spelling with
``msgspec.field(name=...)``.

Key components:
- Record: Immutable publication post
- Document: File attached to a post
- RecordId: Post id split into intra hash and owner
- YearValue: The year a post is grouped and sorted under
"""

import enum
import logging
from dataclasses import dataclass, field

import msgspec

from publist.exceptions import InvalidRecordIdError, RecordDecodeError

logger = logging.getLogger(__name__)

INTRA_HASH_LENGTH = 32


class Name(msgspec.Struct, frozen=True, kw_only=True):
    """A CSL name; institutions only carry ``literal``."""

    family: str = ""
    given: str = ""
    literal: str = ""


class Document(msgspec.Struct, frozen=True, kw_only=True):
    """A file attached to a post."""

    file_name: str = msgspec.field(name="fileName")
    file_hash: str = msgspec.field(name="fileHash", default="")
    md5hash: str = ""
    user_name: str = msgspec.field(name="userName", default="")


class Issued(msgspec.Struct, frozen=True, kw_only=True):
    """CSL issue date.

    Posts that only have a year carry it in ``literal``; everything else
    ends up in ``raw`` or ``date-parts``.
    """

    literal: str = ""
    raw: str = ""
    date_parts: tuple[tuple[int | str, ...], ...] = msgspec.field(
        name="date-parts", default=()
    )


class Record(msgspec.Struct, frozen=True, kw_only=True):
    """Immutable publication post as delivered by the service."""

    id: str = ""
    type: str = ""
    issued: Issued = msgspec.field(default_factory=Issued)
    author: tuple[Name, ...] = ()
    editor: tuple[Name, ...] = ()
    documents: tuple[Document, ...] = ()
    abstract: str = ""
    doi: str = msgspec.field(name="DOI", default="")
    url: str = msgspec.field(name="URL", default="")

    title: str = ""
    container_title: str = msgspec.field(name="container-title", default="")
    volume: str | int = ""
    issue: str | int = ""
    page: str | int = ""
    publisher: str = ""
    publisher_place: str = msgspec.field(name="publisher-place", default="")
    edition: str | int = ""

    @property
    def persons(self) -> tuple[Name, ...]:
        """Authors, or editors for edited volumes without authors."""
        return self.author or self.editor


@dataclass(frozen=True)
class RecordId:
    """Post id of the form ``<32 hex chars intra hash><user name>``."""

    intra_hash: str
    user_name: str

    @classmethod
    def parse(cls, post_id: str) -> "RecordId":
        """Split a post id into intra hash and owner.

        The user name is everything after the hash, whatever its length.

        Raises:
            InvalidRecordIdError: If the id is shorter than a hash.
        """
        if len(post_id) < INTRA_HASH_LENGTH:
            raise InvalidRecordIdError(post_id)
        return cls(post_id[:INTRA_HASH_LENGTH], post_id[INTRA_HASH_LENGTH:])

    def __str__(self) -> str:
        return self.intra_hash + self.user_name


class YearKind(enum.Enum):
    """Where a year value came from."""

    DISPLAY = "display"
    RAW_ISSUE_DATE = "raw"


@dataclass(frozen=True, order=True)
class YearValue:
    """Year used both as sort key and as heading text.

    Ordering compares ``text`` lexically; a raw issue date such as
    ``"2019-05-01"`` is not parsed.
    """

    text: str
    kind: YearKind = field(default=YearKind.DISPLAY, compare=False)

    def __str__(self) -> str:
        return self.text


def extract_year(record: Record) -> YearValue:
    """Get the grouping year of a record."""
    issued = record.issued
    if issued.literal:
        return YearValue(issued.literal, YearKind.DISPLAY)
    if issued.raw:
        return YearValue(issued.raw, YearKind.RAW_ISSUE_DATE)
    if issued.date_parts and issued.date_parts[0]:
        return YearValue(str(issued.date_parts[0][0]), YearKind.RAW_ISSUE_DATE)
    return YearValue("", YearKind.RAW_ISSUE_DATE)


_posts_decoder = msgspec.json.Decoder(dict[str, msgspec.Raw])
_record_decoder = msgspec.json.Decoder(Record)


def decode_records(payload: bytes | str) -> dict[str, Record]:
    """Decode a CSL-JSON posts response.

    Each post is decoded on its own: a post with malformed fields is
    logged and skipped, the remaining posts are still returned.

    Raises:
        RecordDecodeError: If the payload is not a JSON object.
    """
    try:
        posts = _posts_decoder.decode(payload)
    except msgspec.DecodeError as e:
        raise RecordDecodeError(str(e)) from e

    records = {}
    for post_id, raw in posts.items():
        try:
            records[post_id] = _record_decoder.decode(raw)
        except msgspec.DecodeError as e:
            logger.warning(f"skipping post {post_id}: {e}")
    return records
