# SPDX-License-Identifier: MIT
"""Error taxonomy, exception classes and FastAPI error handlers."""

import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode:
    """Machine-readable error codes."""

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_VERSION = "INVALID_VERSION"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    PACKAGE_NOT_FOUND = "PACKAGE_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    VERSION_EXISTS = "VERSION_EXISTS"
    IDENTITY_EXISTS = "IDENTITY_EXISTS"
    VERSION_YANKED = "VERSION_YANKED"
    STORAGE_FAILURE = "STORAGE_FAILURE"
    ARTIFACT_MISSING = "ARTIFACT_MISSING"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorKind:
    """Coarse error categories each code belongs to."""

    INVALID_INPUT = "InvalidInput"
    UNAUTHENTICATED = "Unauthenticated"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    GONE = "Gone"
    STORAGE_FAILURE = "StorageFailure"
    INTERNAL = "Internal"


ERROR_KINDS = {
    ErrorCode.INVALID_INPUT: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_VERSION: ErrorKind.INVALID_INPUT,
    ErrorCode.UNAUTHENTICATED: ErrorKind.UNAUTHENTICATED,
    ErrorCode.FORBIDDEN: ErrorKind.FORBIDDEN,
    ErrorCode.PACKAGE_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.VERSION_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.VERSION_EXISTS: ErrorKind.CONFLICT,
    ErrorCode.IDENTITY_EXISTS: ErrorKind.CONFLICT,
    ErrorCode.VERSION_YANKED: ErrorKind.GONE,
    ErrorCode.STORAGE_FAILURE: ErrorKind.STORAGE_FAILURE,
    ErrorCode.ARTIFACT_MISSING: ErrorKind.STORAGE_FAILURE,
    ErrorCode.INTERNAL_ERROR: ErrorKind.INTERNAL,
}

KIND_STATUS_CODES = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.GONE: 410,
    ErrorKind.STORAGE_FAILURE: 500,
    ErrorKind.INTERNAL: 500,
}


@dataclass
class ErrorDetail:
    """Detailed error information for a specific field or issue."""

    field: str
    error: str
    value: Any = None


@dataclass
class RegistryError(Exception):
    """Base registry exception with structured error response.

    Attributes:
        code: Error code from ErrorCode class
        message: Human-readable error message
        details: List of detailed error information
    """

    code: str
    message: str
    details: list[ErrorDetail] = field(default_factory=list)

    def __str__(self) -> str:
        return self.message

    @property
    def kind(self) -> str:
        """Get the error category for this error."""
        return ERROR_KINDS.get(self.code, ErrorKind.INTERNAL)

    @property
    def status_code(self) -> int:
        """Get HTTP status code for this error."""
        return KIND_STATUS_CODES[self.kind]

    def to_response(self) -> dict:
        """Convert to API response format."""
        response = {
            "error": {
                "code": self.code,
                "kind": self.kind,
                "message": self.message,
            }
        }
        if self.details:
            response["error"]["details"] = [
                {"field": d.field, "error": d.error} for d in self.details
            ]
        return response


class InvalidInputError(RegistryError):
    """Malformed name, version or body."""

    def __init__(self, message: str, details: list[ErrorDetail] | None = None):
        super().__init__(
            code=ErrorCode.INVALID_INPUT,
            message=message,
            details=details or [],
        )


class InvalidVersionError(RegistryError):
    """Version string does not follow the version grammar."""

    def __init__(self, version: str, message: str = "Invalid version format. Expected semver (e.g., 1.0.0)"):
        self.version = version
        super().__init__(
            code=ErrorCode.INVALID_VERSION,
            message=message,
            details=[ErrorDetail(field="version", error="Must match MAJOR.MINOR.PATCH[-pre]", value=version)],
        )


class UnauthenticatedError(RegistryError):
    """Missing or invalid credential."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(code=ErrorCode.UNAUTHENTICATED, message=message)


class ForbiddenError(RegistryError):
    """Authenticated but not authorized for this package."""

    def __init__(self, message: str = "Not authorized to modify this package"):
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class PackageNotFoundError(RegistryError):
    """Package does not exist."""

    def __init__(self, package_name: str):
        super().__init__(
            code=ErrorCode.PACKAGE_NOT_FOUND,
            message=f"Package '{package_name}' not found",
        )


class VersionNotFoundError(RegistryError):
    """Version does not exist."""

    def __init__(self, package_name: str, version: str):
        super().__init__(
            code=ErrorCode.VERSION_NOT_FOUND,
            message=f"Version '{version}' not found for '{package_name}'",
        )


class VersionExistsError(RegistryError):
    """Version already exists (immutability violation)."""

    def __init__(self, package_name: str, version: str):
        super().__init__(
            code=ErrorCode.VERSION_EXISTS,
            message=f"Version {version} of '{package_name}' already exists",
        )


class IdentityExistsError(RegistryError):
    """An identity with this email is already registered."""

    def __init__(self, email: str):
        super().__init__(
            code=ErrorCode.IDENTITY_EXISTS,
            message="Email already registered",
        )
        self.email = email


class GoneError(RegistryError):
    """The requested version has been yanked."""

    def __init__(self, package_name: str, version: str):
        super().__init__(
            code=ErrorCode.VERSION_YANKED,
            message=f"Version '{version}' of '{package_name}' has been yanked",
        )


class StorageFailureError(RegistryError):
    """Underlying blob or metadata I/O failed."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(code=ErrorCode.STORAGE_FAILURE, message=message)


class ArtifactMissingError(RegistryError):
    """Metadata says a version exists but its blob is absent."""

    def __init__(self, package_name: str, version: str):
        super().__init__(
            code=ErrorCode.ARTIFACT_MISSING,
            message=f"Package tarball for '{package_name}' {version} is unavailable",
        )


async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    """Handle RegistryError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as INVALID_INPUT."""
    details = [
        ErrorDetail(field=".".join(str(p) for p in err.get("loc", ())), error=err.get("msg", ""))
        for err in exc.errors()
    ]
    error = InvalidInputError("Request validation failed", details=details)
    return JSONResponse(status_code=error.status_code, content=error.to_response())


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking internals."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "kind": ErrorKind.INTERNAL,
                "message": "An unexpected error occurred",
            }
        },
    )


def add_error_handlers(app: FastAPI) -> None:
    """Register error handlers with the FastAPI application."""
    app.add_exception_handler(RegistryError, registry_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)
