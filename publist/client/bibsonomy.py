"""BibSonomy REST API client.

Implements the ``RecordStore`` interface on top of the BibSonomy REST API.
Posts are requested in the CSL-JSON format, documents and previews are
downloaded as raw bytes. Requests are authenticated with HTTP basic auth
using the user name and API key (see the settings page of BibSonomy).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import requests

from publist import __version__
from publist.core.models import Record, decode_records
from publist.exceptions import AuthenticationError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://www.bibsonomy.org/api"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = f"publist/{__version__}"

# BibSonomy calls publications "bibtex" resources
PUBLICATION_RESOURCE = "bibtex"


class BibSonomyClient:
    """Client for the BibSonomy REST API."""

    def __init__(
        self,
        user_name: str,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            user_name: BibSonomy user name
            api_key: API key of the user
            base_url: Root of the REST API
            timeout: Timeout per request in seconds
            session: Session to use, a new one by default
        """
        self.user_name = user_name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.auth = (user_name, api_key)
        self.session.headers.update({"User-Agent": USER_AGENT})

    def __enter__(self) -> BibSonomyClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def fetch_records(
        self, owner: str, tags: Sequence[str], offset: int, count: int
    ) -> dict[str, Record]:
        """Get the publication posts of a user.

        Args:
            owner: User whose posts are returned
            tags: Tags all posts must carry (may be empty)
            offset: Index of the first post
            count: Number of posts

        Returns:
            Posts keyed by post id.

        Raises:
            AuthenticationError: If the credentials are rejected
            TransportError: On any other request failure
            RecordDecodeError: If the response is not CSL-JSON
        """
        params: dict[str, Any] = {
            "format": "csl",
            "resourcetype": PUBLICATION_RESOURCE,
            "user": owner,
            "start": offset,
            "end": offset + count,
        }
        if tags:
            params["tags"] = " ".join(tags)

        logger.info(f"Fetching up to {count} posts of {owner}")
        response = self._get("/posts", params)
        records = decode_records(response.content)
        logger.debug(f"Received {len(records)} posts")
        return records

    def fetch_bibtex_text(self, owner: str, intra_hash: str) -> str:
        """Get the BibTeX source of a post."""
        response = self._get(self._post_path(owner, intra_hash), {"format": "bibtex"})
        return response.content.decode("utf-8", errors="replace")

    def fetch_document_bytes(
        self, owner: str, intra_hash: str, file_name: str
    ) -> bytes | None:
        """Download a document; None if the post has no such document."""
        response = self._get(
            self._document_path(owner, intra_hash, file_name), allow_missing=True
        )
        return response.content if response is not None else None

    def fetch_preview_bytes(
        self, owner: str, intra_hash: str, file_name: str, size: str
    ) -> bytes | None:
        """Download the preview image of a document."""
        response = self._get(
            self._document_path(owner, intra_hash, file_name),
            {"preview": size},
            allow_missing=True,
        )
        return response.content if response is not None else None

    def _post_path(self, owner: str, intra_hash: str) -> str:
        return f"/users/{quote(owner, safe='')}/posts/{quote(intra_hash, safe='')}"

    def _document_path(self, owner: str, intra_hash: str, file_name: str) -> str:
        return (
            f"{self._post_path(owner, intra_hash)}/documents/"
            f"{quote(file_name, safe='')}"
        )

    def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        allow_missing: bool = False,
    ) -> requests.Response | None:
        """Send a GET request and check the response status."""
        url = self.base_url + path
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(
                f"BibSonomy rejected the credentials of {self.user_name}", status
            )
        if status == 404 and allow_missing:
            logger.debug(f"Not found: {url}")
            return None
        if not response.ok:
            raise TransportError(f"Request to {url} returned HTTP {status}", status)
        return response
