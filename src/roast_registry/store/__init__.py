# SPDX-License-Identifier: MIT
"""Package metadata and artifact storage."""

from .base import PackageStore
from .blobs import (
    BlobNotFoundError,
    BlobStore,
    BlobStoreError,
    InMemoryBlobStore,
    LocalBlobStore,
    blob_key,
)
from .memory import InMemoryPackageStore
from .sql import SqlPackageStore

__all__ = [
    "BlobNotFoundError",
    "BlobStore",
    "BlobStoreError",
    "InMemoryBlobStore",
    "InMemoryPackageStore",
    "LocalBlobStore",
    "PackageStore",
    "SqlPackageStore",
    "blob_key",
]
