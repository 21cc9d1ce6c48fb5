"""Pydantic models exposed to the UI layer."""

from datetime import datetime

from pydantic import BaseModel, Field

from catalog_view.services.facet_filter import StatusFilter
from catalog_view.services.favorite_toggle import ToggleState
from catalog_view.services.sort_fetch import SortKey


class CatalogRow(BaseModel):
    id: int
    serial_number: int
    name: str
    description: str | None = None
    quantity: int
    category_id: int | str | None = None
    category_name: str | None = None
    brand_id: int | str | None = None
    brand_name: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    is_favorite: bool
    critical: bool = Field(..., description="Quantity at or below the threshold")
    depleted: bool = Field(..., description="Quantity is zero")


class CatalogPage(BaseModel):
    items: list[CatalogRow]
    total: int
    page: int
    page_size: int
    pages: int
    empty: bool = Field(..., description="True when no row matches the active filters")


class FacetOption(BaseModel):
    id: int | str
    name: str


class FilterRead(BaseModel):
    status: StatusFilter
    search: str
    category_ids: list[str]
    brand_ids: list[str]


class FilterUpdate(BaseModel):
    status: StatusFilter | None = None
    search: str | None = None
    category_ids: list[int | str] | None = None
    brand_ids: list[int | str] | None = None


class SortUpdate(BaseModel):
    sort_key: SortKey


class ThresholdUpdate(BaseModel):
    value: int = Field(..., ge=0, description="Critical stock threshold")


class ThresholdRead(BaseModel):
    value: int
    saved: bool


class ViewState(BaseModel):
    sort_key: SortKey
    threshold: int
    filters: FilterRead
    user_id: str | None = None
    loaded: bool
    last_error: str | None = None
    total_products: int
    visible_products: int
    categories: list[FacetOption]
    brands: list[FacetOption]


class FavoriteToggleRead(BaseModel):
    product_id: int
    state: ToggleState
    is_favorite: bool | None = None
    error: str | None = None


class NoticeRead(BaseModel):
    channel: str
    success: bool | None = None
    message: str
    visible: bool
