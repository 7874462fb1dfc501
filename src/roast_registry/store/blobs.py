# SPDX-License-Identifier: MIT
"""Immutable artifact storage keyed by package name and version."""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    """Raised when a blob cannot be written or read because of an I/O failure."""


class BlobNotFoundError(Exception):
    """Raised when no blob exists for a key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Blob '{key}' not found")


def blob_key(name: str, version: str) -> str:
    """Return the storage key for a package version."""
    return f"{name}/{version}"


class BlobStore(ABC):
    """Abstract put/get of immutable tarball bytes.

    A key is written at most once; ``put`` on an existing key raises
    BlobStoreError rather than overwriting.
    """

    @abstractmethod
    async def put(self, key: str, data: bytes, metadata: Optional[dict[str, str]] = None) -> None:
        """Store bytes under a key."""

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Return the bytes stored under a key.

        Raises:
            BlobNotFoundError: If nothing is stored under the key
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a blob. Missing keys are ignored."""

    async def metadata(self, key: str) -> dict[str, str]:
        return {}


class InMemoryBlobStore(BlobStore):
    """Blob store holding bytes in a dict."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._metadata: dict[str, dict[str, str]] = {}

    async def put(self, key: str, data: bytes, metadata: Optional[dict[str, str]] = None) -> None:
        if key in self._blobs:
            raise BlobStoreError(f"Blob '{key}' already exists")
        self._blobs[key] = bytes(data)
        self._metadata[key] = dict(metadata or {})

    async def get(self, key: str) -> bytes:
        try:
            return self._blobs[key]
        except KeyError:
            raise BlobNotFoundError(key) from None

    async def delete(self, key: str) -> None:
        self._blobs.pop(key, None)
        self._metadata.pop(key, None)

    async def metadata(self, key: str) -> dict[str, str]:
        if key not in self._metadata:
            raise BlobNotFoundError(key)
        return dict(self._metadata[key])

    def __contains__(self, key: str) -> bool:
        return key in self._blobs


class LocalBlobStore(BlobStore):
    """Blob store writing tarballs under a directory.

    Layout: ``{root}/{name}/{version}.tar.gz`` with a ``.json`` sidecar
    holding the metadata. File I/O runs in worker threads.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser().resolve()

    def _path(self, key: str) -> Path:
        name, _, version = key.partition("/")
        if not name or not version or ".." in key or "/" in version:
            raise BlobStoreError(f"Invalid blob key: {key!r}")
        return self.root / name / f"{version}.tar.gz"

    def _write(self, path: Path, data: bytes, metadata: dict[str, str]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # "xb" refuses to overwrite an existing artifact
        handle = open(path, "xb")
        try:
            with handle:
                handle.write(data)
            path.with_suffix(".json").write_text(json.dumps(metadata, sort_keys=True))
        except OSError:
            # drop a partial tarball so the key can be written again
            path.unlink(missing_ok=True)
            raise

    async def put(self, key: str, data: bytes, metadata: Optional[dict[str, str]] = None) -> None:
        path = self._path(key)
        try:
            await asyncio.to_thread(self._write, path, data, dict(metadata or {}))
        except FileExistsError as e:
            raise BlobStoreError(f"Blob '{key}' already exists") from e
        except OSError as e:
            logger.error("Failed to write blob %s: %s", key, e)
            raise BlobStoreError(f"Failed to write blob '{key}'") from e

    async def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            raise BlobNotFoundError(key) from None
        except OSError as e:
            raise BlobStoreError(f"Failed to read blob '{key}'") from e

    async def delete(self, key: str) -> None:
        path = self._path(key)

        def _remove() -> None:
            path.unlink(missing_ok=True)
            path.with_suffix(".json").unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_remove)
        except OSError as e:
            raise BlobStoreError(f"Failed to delete blob '{key}'") from e

    async def metadata(self, key: str) -> dict[str, str]:
        sidecar = self._path(key).with_suffix(".json")
        try:
            raw = await asyncio.to_thread(sidecar.read_text)
        except FileNotFoundError:
            raise BlobNotFoundError(key) from None
        return json.loads(raw)
