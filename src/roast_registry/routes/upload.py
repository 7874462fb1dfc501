# SPDX-License-Identifier: MIT
"""Publish, yank and unyank endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request

from ..auth import Identity, get_current_identity
from ..models.responses import MessageResponse, PublishResponse
from ..publish import PublishRequest
from ..registry import Registry
from .packages import get_registry

router = APIRouter()


@router.post("/packages", response_model=PublishResponse, status_code=201)
async def publish_package(
    request: Request,
    identity: Annotated[Identity, Depends(get_current_identity)],
    registry: Annotated[Registry, Depends(get_registry)],
    package_name: Annotated[str, Header(alias="X-Package-Name")] = "",
    package_version: Annotated[str, Header(alias="X-Package-Version")] = "",
    package_description: Annotated[str, Header(alias="X-Package-Description")] = "",
    signature: Annotated[str | None, Header(alias="X-Package-Signature")] = None,
    fingerprint: Annotated[str | None, Header(alias="X-Publisher-Fingerprint")] = None,
) -> PublishResponse:
    """Publish a new package version.

    The request body is the tarball. Package name and version come from
    headers. The first publisher of a package becomes its owner.
    """
    body = await request.body()
    result = await registry.publish(
        identity,
        PublishRequest(
            name=package_name,
            version=package_version,
            body=body,
            description=package_description,
            signature=signature,
            fingerprint=fingerprint,
        ),
    )
    return PublishResponse(
        message=result.message,
        name=result.name,
        version=result.version,
        checksum=result.checksum,
        size=result.size,
        download_url=result.download_url,
    )


@router.post("/packages/{name}/{version}/yank", response_model=MessageResponse)
async def yank_version(
    name: str,
    version: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    registry: Annotated[Registry, Depends(get_registry)],
) -> MessageResponse:
    """Yank a version. It stays listed but can no longer be downloaded."""
    await registry.set_yanked(identity, name, version, True)
    return MessageResponse(message=f"Yanked {name}@{version}")


@router.post("/packages/{name}/{version}/unyank", response_model=MessageResponse)
async def unyank_version(
    name: str,
    version: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    registry: Annotated[Registry, Depends(get_registry)],
) -> MessageResponse:
    """Reverse a yank."""
    await registry.set_yanked(identity, name, version, False)
    return MessageResponse(message=f"Unyanked {name}@{version}")
