# SPDX-License-Identifier: MIT
"""Package listing, search, metadata and stats endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from ..auth import Identity, get_current_identity
from ..models.package import MetadataUpdateRequest, PackageListItem, PackageMetadata
from ..models.responses import PackageListResponse, SearchResponse, StatsResponse
from ..registry import Registry

router = APIRouter()


def get_registry(request: Request) -> Registry:
    """FastAPI dependency returning the application's registry."""
    return request.app.state.registry


@router.get("/packages", response_model=PackageListResponse)
async def list_packages(
    registry: Annotated[Registry, Depends(get_registry)],
) -> PackageListResponse:
    """List all packages, most recently updated first.

    ``latest`` is the newest non-yanked version, or "none".
    """
    packages = await registry.list_packages()
    return PackageListResponse(packages=[PackageListItem.from_record(p) for p in packages])


@router.get("/packages/{name}", response_model=PackageMetadata)
async def get_package(
    name: str,
    registry: Annotated[Registry, Depends(get_registry)],
) -> PackageMetadata:
    """Get full package metadata with a download URL for each version.

    Each read increments the package download counter in the background.
    """
    package = await registry.get_package(name)
    return PackageMetadata.from_record(package, registry.api_prefix)


@router.patch("/packages/{name}", response_model=PackageMetadata)
async def update_package(
    name: str,
    body: MetadataUpdateRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    registry: Annotated[Registry, Depends(get_registry)],
) -> PackageMetadata:
    """Update descriptive fields. Fields not sent keep their values."""
    package = await registry.update_metadata(identity, name, body.to_update())
    return PackageMetadata.from_record(package, registry.api_prefix)


@router.get("/search", response_model=SearchResponse)
async def search_packages(
    registry: Annotated[Registry, Depends(get_registry)],
    q: str = Query("", description="Search query"),
) -> SearchResponse:
    """Search packages by name, description, or keyword (case-insensitive substring)."""
    results = await registry.search(q)
    return SearchResponse(
        packages=[PackageMetadata.from_record(p, registry.api_prefix) for p in results]
    )


@router.get("/stats", response_model=StatsResponse)
async def registry_stats(
    registry: Annotated[Registry, Depends(get_registry)],
) -> StatsResponse:
    """Totals across the registry."""
    stats = await registry.stats()
    return StatsResponse(
        total_packages=stats.total_packages,
        total_downloads=stats.total_downloads,
        total_versions=stats.total_versions,
    )
