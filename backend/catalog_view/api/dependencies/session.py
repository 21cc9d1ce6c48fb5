"""Catalog session dependency."""

from fastapi import HTTPException, Request, status

from catalog_view.services.catalog_session import CatalogSession


def get_catalog_session(request: Request) -> CatalogSession:
    """FastAPI dependency returning the session created at startup."""
    session = getattr(request.app.state, "catalog_session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Catalog session is not initialised",
        )
    return session
