"""FastAPI handler exposing the bundle sync over HTTP."""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse

from .config import SyncConfig
from .logging_config import setup_logging
from .sync import BundleSync, NO_BUNDLES_MESSAGE, DONE_MESSAGE

logger = logging.getLogger(__name__)

SyncFactory = Callable[[], BundleSync]


def default_sync_factory() -> BundleSync:
    """Load configuration from the environment and build a fresh sync."""
    config = SyncConfig.from_env()
    setup_logging(config.log_level)
    return BundleSync(config)


def get_sync_router(sync_factory: SyncFactory = default_sync_factory) -> APIRouter:
    """
    Create a FastAPI router that runs the sync on request.

    Each request builds its own ``BundleSync``, so every invocation starts
    cold, the same as a serverless function.

    Args:
        sync_factory: Callable returning a configured ``BundleSync``

    Returns:
        APIRouter with ``GET``/``POST /api/sync``
    """
    router = APIRouter(prefix="/api", tags=["sync"])

    @router.api_route("/sync", methods=["GET", "POST"])
    async def sync_bundles():
        """Run one sync and report per-bundle outcomes."""
        try:
            result = await sync_factory().run()
        except Exception as e:
            logger.exception("Sync failed")
            return JSONResponse(status_code=500, content={"error": str(e) or type(e).__name__})

        if not result.matched:
            return {"status": NO_BUNDLES_MESSAGE, "details": []}
        return {"status": DONE_MESSAGE, "details": result.details}

    return router


def create_app(sync_factory: Optional[SyncFactory] = None) -> FastAPI:
    """
    Create the HTTP app.

    Args:
        sync_factory: Overrides how each request builds its sync

    Returns:
        FastAPI application

    Example:
        app = create_app()

        # Run with uvicorn:
        # uvicorn shopify_gmc_sync.handler:app --host 0.0.0.0 --port 8000
    """
    app = FastAPI(title="Shopify bundles to Google Merchant Center")
    app.include_router(get_sync_router(sync_factory or default_sync_factory))

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
