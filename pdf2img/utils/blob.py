"""In-memory blobs, named files and transient ``blob:`` URLs.

A ``Blob`` is an immutable chunk of bytes tagged with a MIME type. A
``NamedFile`` adds a file name and modification time. ``BlobUrlRegistry``
mints dereferenceable ``blob:<origin>/<uuid>`` locators for blobs; whoever
receives a locator owns it and must release it with ``revoke_object_url``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
import time
import uuid

from pdf2img.config import get_settings


BLOB_URL_SCHEME = "blob:"


@dataclass(frozen=True)
class Blob:
    data: bytes
    type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    async def read(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class NamedFile(Blob):
    name: str = ""
    last_modified: float = field(default_factory=time.time)

    @classmethod
    def from_blob(cls, blob: Blob, name: str, *, type: str | None = None) -> NamedFile:
        return cls(data=blob.data, type=type if type is not None else blob.type, name=name)


class BlobUrlRegistry:
    """Process-local table mapping minted ``blob:`` URLs to their blobs."""

    def __init__(self, origin: str | None = None) -> None:
        self._origin = origin or get_settings().blob_origin
        self._entries: dict[str, Blob] = {}
        self._lock = threading.Lock()

    @property
    def origin(self) -> str:
        return self._origin

    def create_object_url(self, blob: Blob) -> str:
        url = f"{BLOB_URL_SCHEME}{self._origin}/{uuid.uuid4()}"
        with self._lock:
            self._entries[url] = blob
        return url

    def resolve(self, url: str) -> Blob:
        """Return the blob behind ``url``.

        Raises:
            KeyError: If the URL was never minted here or has been revoked.
        """
        with self._lock:
            try:
                return self._entries[url]
            except KeyError:
                raise KeyError(f"Unknown or revoked blob URL: {url}") from None

    def revoke(self, url: str) -> None:
        # Revoking an unknown URL is a no-op.
        with self._lock:
            self._entries.pop(url, None)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_default_registry: BlobUrlRegistry | None = None


def get_default_registry() -> BlobUrlRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = BlobUrlRegistry()
    return _default_registry


def create_object_url(blob: Blob) -> str:
    return get_default_registry().create_object_url(blob)


def resolve_object_url(url: str) -> Blob:
    return get_default_registry().resolve(url)


def revoke_object_url(url: str) -> None:
    get_default_registry().revoke(url)


__all__ = [
    "BLOB_URL_SCHEME",
    "Blob",
    "BlobUrlRegistry",
    "NamedFile",
    "create_object_url",
    "get_default_registry",
    "resolve_object_url",
    "revoke_object_url",
]
