# SPDX-License-Identifier: MIT
"""Package download endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..registry import Registry
from .packages import get_registry

router = APIRouter()


@router.get("/packages/{name}/{version}/download")
async def download_package(
    name: str,
    version: str,
    registry: Annotated[Registry, Depends(get_registry)],
) -> Response:
    """Download a package tarball.

    Returns the stored bytes with the SHA256 checksum in the
    X-Checksum-SHA256 header. Yanked versions return 410.
    """
    artifact = await registry.download(name, version)
    return Response(
        content=artifact.data,
        media_type="application/gzip",
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.filename}"',
            "X-Checksum-SHA256": artifact.checksum,
        },
    )
