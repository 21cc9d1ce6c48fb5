"""FastAPI application bootstrap for the catalog view session."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_view.api.routers import catalog, exports, health
from catalog_view.clients.inventory_client import InventoryClient
from catalog_view.core.config import Settings, get_settings
from catalog_view.services.catalog_session import CatalogSession

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    inventory_client: InventoryClient | None = None,
) -> FastAPI:
    """Instantiate the FastAPI app and include top-level routers.

    The catalog session is built at startup and loads threshold, facets and
    products before the first request is served.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = inventory_client or InventoryClient.from_settings(settings)
        session = CatalogSession(client, settings=settings, user_id=settings.current_user_id)
        app.state.catalog_session = session
        if settings.current_user_id is None:
            logger.info("No user identity configured; favorite flags are disabled")
        await session.load()
        try:
            yield
        finally:
            session.notices.cancel_all()
            await client.aclose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

    cors_origins = settings.cors_origins
    logger.info(f"[CORS] Parsed allowed origins: {cors_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(health.router)
    app.include_router(catalog.router, prefix="/api/catalog", tags=["catalog"])
    app.include_router(exports.router, prefix="/api/exports", tags=["exports"])

    return app


app = create_app()
