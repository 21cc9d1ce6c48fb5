"""Catalog view endpoints: rows, sort, filters, threshold and favorites."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from catalog_view.api.dependencies.session import get_catalog_session
from catalog_view.api.routers.catalog_helpers import (
    serialize_notice,
    serialize_row,
    serialize_state,
)
from catalog_view.api.schemas.catalog import (
    CatalogPage,
    FavoriteToggleRead,
    FilterUpdate,
    NoticeRead,
    SortUpdate,
    ThresholdRead,
    ThresholdUpdate,
    ViewState,
)
from catalog_view.services.catalog_session import CatalogSession
from catalog_view.services.favorite_toggle import ProductNotLoadedError
from catalog_view.services.sort_fetch import FetchOutcome

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_on_failed_fetch(outcome: FetchOutcome, session: CatalogSession) -> None:
    if outcome is FetchOutcome.FAILED:
        logger.warning(f"Product fetch failed: {session.coordinator.last_error}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": "Failed to fetch products; previous results are kept",
                "error": session.coordinator.last_error,
                "state": serialize_state(session).model_dump(mode="json"),
            },
        )


@router.get(
    "/rows",
    summary="Filtered, sorted and classified rows for display",
    response_model=CatalogPage,
)
async def list_rows(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int | None = Query(None, ge=1, le=500, description="Rows per page"),
    session: CatalogSession = Depends(get_catalog_session),
) -> CatalogPage:
    """Return one display page of the visible rows.

    Pagination is display-only: the full collection is already in memory.
    """
    page_size = page_size or session.settings.default_page_size
    rows, total = session.page(page, page_size)
    return CatalogPage(
        items=[serialize_row(row) for row in rows],
        total=total,
        page=page,
        page_size=page_size,
        pages=session.page_count(total, page_size),
        empty=total == 0,
    )


@router.get("/state", summary="Current view state", response_model=ViewState)
async def get_state(
    session: CatalogSession = Depends(get_catalog_session),
) -> ViewState:
    return serialize_state(session)


@router.put("/sort", summary="Change the sort key and re-fetch", response_model=ViewState)
async def set_sort(
    payload: SortUpdate,
    session: CatalogSession = Depends(get_catalog_session),
) -> ViewState:
    """Request the collection pre-sorted by the new key.

    A failed fetch answers 502 while the previous rows stay in place.
    """
    outcome = await session.set_sort_key(payload.sort_key)
    _raise_on_failed_fetch(outcome, session)
    return serialize_state(session)


@router.post("/refresh", summary="Re-fetch at the current sort key", response_model=ViewState)
async def refresh(
    session: CatalogSession = Depends(get_catalog_session),
) -> ViewState:
    outcome = await session.refresh()
    _raise_on_failed_fetch(outcome, session)
    return serialize_state(session)


@router.put("/filters", summary="Update facet selections", response_model=ViewState)
async def update_filters(
    payload: FilterUpdate,
    session: CatalogSession = Depends(get_catalog_session),
) -> ViewState:
    """Replace only the facets present in the payload; others are kept."""
    session.set_filters(
        status=payload.status,
        search=payload.search,
        category_ids=payload.category_ids,
        brand_ids=payload.brand_ids,
    )
    return serialize_state(session)


@router.delete("/filters", summary="Clear all facet selections", response_model=ViewState)
async def reset_filters(
    session: CatalogSession = Depends(get_catalog_session),
) -> ViewState:
    session.reset_filters()
    return serialize_state(session)


@router.put("/threshold", summary="Edit the critical stock threshold", response_model=ThresholdRead)
async def update_threshold(
    payload: ThresholdUpdate,
    session: CatalogSession = Depends(get_catalog_session),
) -> ThresholdRead:
    """Apply locally and propagate; a failed save keeps the local value."""
    saved = await session.update_threshold(payload.value)
    return ThresholdRead(value=session.threshold, saved=saved)


@router.post(
    "/favorites/{product_id}/toggle",
    summary="Toggle the viewing user's favorite flag",
    response_model=FavoriteToggleRead,
)
async def toggle_favorite(
    product_id: int,
    session: CatalogSession = Depends(get_catalog_session),
) -> FavoriteToggleRead:
    try:
        toggle = await session.toggle_favorite(product_id)
    except ProductNotLoadedError as e:
        logger.warning(f"Favorite toggle requested for unknown product {product_id}")
        raise HTTPException(status_code=404, detail="Product not found") from e

    product = session.coordinator.get(product_id)
    return FavoriteToggleRead(
        product_id=product_id,
        state=toggle.state,
        is_favorite=product.is_favorite if product is not None else None,
        error=toggle.error,
    )


@router.get("/notices", summary="Transient status notices", response_model=list[NoticeRead])
async def list_notices(
    session: CatalogSession = Depends(get_catalog_session),
) -> list[NoticeRead]:
    return [serialize_notice(notice) for notice in session.notices.all()]
