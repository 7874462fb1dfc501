# SPDX-License-Identifier: MIT
"""SHA-256 digests recorded at publish time and checked on download."""

import hashlib


def compute_sha256(data: bytes) -> str:
    """Return the lowercase hex SHA-256 digest of a tarball (64 characters)."""
    return hashlib.sha256(data).hexdigest()


def verify_checksum(data: bytes, expected: str) -> bool:
    """Check tarball bytes against a recorded digest, ignoring its case."""
    return compute_sha256(data) == expected.lower()
