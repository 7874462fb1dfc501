# SPDX-License-Identifier: MIT
"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import RegistryConfig
from .models.responses import RegistryInfo
from .registry import Registry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    registry: Registry = app.state.registry
    await registry.start()

    yield

    await registry.close()


def create_app(config: RegistryConfig | None = None, registry: Registry | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Registry configuration. If None, loads from environment.
        registry: Pre-built registry. If None, one is built from config.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = RegistryConfig.from_env()
    if registry is None:
        registry = Registry.from_config(config)

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        docs_url=config.docs_url,
        openapi_url=config.openapi_url,
        lifespan=lifespan,
        debug=config.debug,
    )

    app.state.config = config
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "X-Package-Name",
            "X-Package-Version",
            "X-Package-Description",
            "X-Package-Signature",
            "X-Publisher-Fingerprint",
        ],
        expose_headers=["X-Checksum-SHA256", "Content-Disposition"],
    )

    from .middleware.errors import add_error_handlers

    add_error_handlers(app)

    from .routes import download, packages, upload, users

    app.include_router(packages.router, prefix=config.api_prefix, tags=["packages"])
    app.include_router(download.router, prefix=config.api_prefix, tags=["download"])
    app.include_router(upload.router, prefix=config.api_prefix, tags=["publish"])
    app.include_router(users.router, prefix=config.api_prefix, tags=["users"])

    @app.get(config.api_prefix, response_model=RegistryInfo)
    async def registry_info() -> RegistryInfo:
        """Describe the registry and its main endpoints."""
        prefix = config.api_prefix
        return RegistryInfo(
            name=config.registry_name,
            version=config.version,
            api=prefix,
            endpoints={
                "packages": f"{prefix}/packages",
                "search": f"{prefix}/search?q=query",
                "publish": f"POST {prefix}/packages",
                "register": f"POST {prefix}/users/register",
                "stats": f"{prefix}/stats",
            },
        )

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": config.version}

    return app
