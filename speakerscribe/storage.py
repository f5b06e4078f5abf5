"""
speakerscribe.storage - Local blob storage with signed upload locators.

Objects live under a root directory with a JSON metadata sidecar each.
Write access is granted per pathname through an HMAC token embedded in the
upload URL; reads are public, like a hosted blob store's public URLs.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
import uuid
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote, urlparse

import requests

from speakerscribe.exceptions import StorageError
from speakerscribe.io import atomic_write, read_json, write_json
from speakerscribe.models import BlobInfo

logger = logging.getLogger(__name__)

BLOB_ROUTE = "/api/blobs/"
DEFAULT_CONTENT_TYPE = "audio/m4a"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_pathname(pathname: str) -> str:
    """Reduce a client-supplied name to a single safe path component."""
    name = Path(pathname.replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("-", name).strip(".-")
    if not name:
        raise StorageError(f"Invalid blob pathname: {pathname!r}")
    return name


def unique_pathname(pathname: str) -> str:
    """Add a random suffix so uploads never overwrite each other."""
    name = sanitize_pathname(pathname)
    suffix = uuid.uuid4().hex[:12]
    if "." in name:
        stem, ext = name.rsplit(".", 1)
        return f"{stem}-{suffix}.{ext}"
    return f"{name}-{suffix}"


class BlobStore:
    """Filesystem-backed blob storage."""

    def __init__(self, root: Path, secret: str, base_url: str) -> None:
        self.root = root
        self.secret = secret.encode("utf-8")
        self.base_url = base_url.rstrip("/")

    def _data_path(self, pathname: str) -> Path:
        return self.root / sanitize_pathname(pathname)

    def _meta_path(self, pathname: str) -> Path:
        return self.root / f"{sanitize_pathname(pathname)}.meta.json"

    def url_for(self, pathname: str) -> str:
        return f"{self.base_url}{BLOB_ROUTE}{quote(pathname)}"

    def sign(self, pathname: str) -> str:
        return hmac.new(self.secret, pathname.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify(self, pathname: str, token: str | None) -> bool:
        if not token:
            return False
        return hmac.compare_digest(self.sign(pathname), token)

    def create_upload(self, pathname: str, content_type: str) -> dict[str, Any]:
        """Reserve a unique pathname and return its signed write locator.

        Returns:
            Dict with 'pathname', 'uploadUrl', 'blobUrl', 'contentType'
        """
        unique = unique_pathname(pathname)
        token = self.sign(unique)
        return {
            "pathname": unique,
            "uploadUrl": f"{self.url_for(unique)}?token={token}",
            "blobUrl": self.url_for(unique),
            "contentType": content_type,
        }

    def put(
        self,
        pathname: str,
        data: bytes,
        content_type: str | None,
        token: str | None,
    ) -> BlobInfo:
        """Store bytes under a pathname the caller holds a token for.

        Raises:
            StorageError: If the token does not match the pathname
        """
        if not self.verify(pathname, token):
            raise StorageError(f"Invalid upload token for {pathname}")

        atomic_write(self._data_path(pathname), data)

        info = BlobInfo(
            pathname=pathname,
            url=self.url_for(pathname),
            size=len(data),
            content_type=content_type or DEFAULT_CONTENT_TYPE,
        )
        write_json(self._meta_path(pathname), info.model_dump())
        logger.info("Stored blob %s (%d bytes)", pathname, info.size)
        return info

    def head(self, pathname: str) -> BlobInfo:
        """Return stored metadata.

        Raises:
            StorageError: If no such blob exists
        """
        meta_path = self._meta_path(pathname)
        if not meta_path.exists() or not self._data_path(pathname).exists():
            raise StorageError(f"Blob not found: {pathname}")
        return BlobInfo.model_validate(read_json(meta_path))

    def get(self, pathname: str) -> tuple[bytes, BlobInfo]:
        info = self.head(pathname)
        return self._data_path(pathname).read_bytes(), info

    def resolve(self, url: str) -> str | None:
        """Map one of this store's URLs back to its pathname, else None."""
        parsed = urlparse(url)
        base = urlparse(self.base_url)
        if parsed.netloc != base.netloc or not parsed.path.startswith(BLOB_ROUTE):
            return None
        pathname = unquote(parsed.path[len(BLOB_ROUTE) :])
        return pathname or None


def fetch_blob(
    url: str,
    store: BlobStore | None = None,
    session: requests.Session | None = None,
    timeout: float = 300.0,
) -> tuple[bytes, str]:
    """Download audio bytes and their content type from a locator.

    Locators pointing at ``store`` are read from disk; anything else is
    fetched over HTTP.

    Raises:
        StorageError: If the download fails
    """
    if store is not None:
        pathname = store.resolve(url)
        if pathname is not None:
            data, info = store.get(pathname)
            return data, info.content_type

    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise StorageError(f"Failed to download file from blob storage: {e}") from e

    if not response.ok:
        logger.error(
            "Blob download failed. Status: %s, Body: %s", response.status_code, response.text
        )
        raise StorageError(
            f"Failed to download file from blob storage. Status: {response.status_code}"
        )

    content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
    return response.content, content_type
