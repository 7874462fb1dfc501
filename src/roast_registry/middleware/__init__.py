# SPDX-License-Identifier: MIT
"""Middleware components."""

from .errors import (
    ArtifactMissingError,
    ErrorCode,
    ErrorDetail,
    ErrorKind,
    ForbiddenError,
    GoneError,
    IdentityExistsError,
    InvalidInputError,
    InvalidVersionError,
    PackageNotFoundError,
    RegistryError,
    StorageFailureError,
    UnauthenticatedError,
    VersionExistsError,
    VersionNotFoundError,
    add_error_handlers,
)

__all__ = [
    "ArtifactMissingError",
    "ErrorCode",
    "ErrorDetail",
    "ErrorKind",
    "ForbiddenError",
    "GoneError",
    "IdentityExistsError",
    "InvalidInputError",
    "InvalidVersionError",
    "PackageNotFoundError",
    "RegistryError",
    "StorageFailureError",
    "UnauthenticatedError",
    "VersionExistsError",
    "VersionNotFoundError",
    "add_error_handlers",
]
