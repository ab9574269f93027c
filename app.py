"""Main FastAPI application for the panel service."""

import asyncio
import logging
from typing import Optional

from core import constants

# Configure logging BEFORE importing any modules that use logger
logging.basicConfig(
    level=getattr(logging, constants.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Import after logging is configured
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.dependencies import AppContext, build_context
from core.filesystem import provision_filesystem
from core.routers import applications_router, panel_router
from core.utils import time_taken


def startup(context: AppContext) -> None:
    """Provision the filesystem and load every installed application.

    Raises:
        DiscoveryError: If installed applications cannot be enumerated
    """
    with time_taken("filesystem_startup"):
        provision_filesystem(
            context.paths,
            context.resizer,
            default_icon=context.default_icon,
            logo_sizes=context.logo_sizes,
        )

    with time_taken("application_startup"):
        context.registry.load_all()

    logger.info("All applications have loaded!")


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Create the FastAPI app.

    Args:
        context: Pre-built context (tests); built from the environment when omitted
    """
    app = FastAPI(
        title="Panel Core",
        description="Application registry and panel icon service",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(panel_router)         # /core/panel/*, /panel/logo/*
    app.include_router(applications_router)  # /api/applications/*

    @app.on_event("startup")
    async def startup_event():
        """Application startup event."""
        logger.info("Starting panel service")
        ctx = context or build_context()
        await asyncio.to_thread(startup, ctx)
        app.state.context = ctx
        logger.info("Panel service startup complete")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Application shutdown event."""
        logger.info("Shutting down panel service")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=constants.PORT, reload=True)
