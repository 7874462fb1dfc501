# SPDX-License-Identifier: MIT
"""Identity registration endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from ..models.responses import RegisterRequest, RegisterResponse
from ..registry import Registry
from .packages import get_registry

router = APIRouter()


@router.post("/users/register", response_model=RegisterResponse, status_code=201)
async def register_user(
    body: RegisterRequest,
    registry: Annotated[Registry, Depends(get_registry)],
) -> RegisterResponse:
    """Register an identity and issue its API token.

    The token is only returned once; the registry stores a hash.
    """
    identity, token = await registry.register_identity(body.email, body.name)
    return RegisterResponse(
        message="User registered successfully",
        user_id=identity.owner_id,
        api_token=token,
    )
