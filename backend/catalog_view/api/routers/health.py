"""Simple health and readiness endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from catalog_view.api.dependencies.session import get_catalog_session
from catalog_view.clients.inventory_client import InventoryServiceError
from catalog_view.services.catalog_session import CatalogSession

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live", summary="Liveness probe")
async def live() -> dict[str, str]:
    """Indicates API process is running."""
    return {"status": "ok", "service": "catalog-view-api"}


@router.get("/ready", summary="Readiness probe")
async def ready(
    session: CatalogSession = Depends(get_catalog_session),
) -> dict[str, Any]:
    """Check that the inventory service answers and products are loaded.

    The view stays usable on stale data, so an unreachable service reports
    503 without touching the in-memory product set.
    """
    checks: dict[str, Any] = {
        "status": "ok",
        "service": "catalog-view-api",
        "checks": {},
    }
    all_healthy = True

    try:
        await session.client.fetch_categories()
        checks["checks"]["inventory_service"] = {
            "status": "healthy",
            "message": "Inventory service reachable",
        }
    except InventoryServiceError as e:
        logger.error(f"Inventory service health check failed: {e}")
        checks["checks"]["inventory_service"] = {
            "status": "unhealthy",
            "message": f"Inventory service unreachable: {str(e)}",
        }
        all_healthy = False

    checks["checks"]["products"] = {
        "status": "healthy" if session.coordinator.loaded else "degraded",
        "count": len(session.coordinator.products),
        "last_error": session.coordinator.last_error,
    }

    if not all_healthy:
        checks["status"] = "unhealthy"
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=checks,
        )

    return checks
