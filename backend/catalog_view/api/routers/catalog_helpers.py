"""Helpers for translating session state into API payloads."""

from catalog_view.api.schemas.catalog import (
    CatalogRow,
    FacetOption,
    FilterRead,
    NoticeRead,
    ViewState,
)
from catalog_view.services.catalog_session import CatalogRow as SessionRow
from catalog_view.services.catalog_session import CatalogSession
from catalog_view.services.notices import Notice


def serialize_row(row: SessionRow) -> CatalogRow:
    product = row.product
    return CatalogRow(
        **product.model_dump(),
        critical=row.status.critical,
        depleted=row.status.depleted,
    )


def serialize_state(session: CatalogSession) -> ViewState:
    filters = session.filters
    return ViewState(
        sort_key=session.sort_key,
        threshold=session.threshold,
        filters=FilterRead(
            status=filters.status,
            search=filters.search,
            category_ids=sorted(filters.category_ids),
            brand_ids=sorted(filters.brand_ids),
        ),
        user_id=session.user_id,
        loaded=session.coordinator.loaded,
        last_error=session.coordinator.last_error,
        total_products=len(session.coordinator.products),
        visible_products=len(session.visible_products()),
        categories=[FacetOption(id=c.category_id, name=c.name) for c in session.categories],
        brands=[FacetOption(id=b.brand_id, name=b.name) for b in session.brands],
    )


def serialize_notice(notice: Notice) -> NoticeRead:
    return NoticeRead(
        channel=notice.channel,
        success=notice.success,
        message=notice.message,
        visible=notice.visible,
    )
