"""Pydantic models describing inventory service payloads."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Facet identifiers arrive as numbers from some endpoints and strings from others.
FacetId = int | str


class InventoryModel(BaseModel):
    """Base for camelCase wire payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Category(InventoryModel):
    category_id: FacetId
    name: str


class Brand(InventoryModel):
    brand_id: FacetId
    name: str


class Product(InventoryModel):
    id: int
    serial_number: int = 0
    name: str
    description: str | None = None
    quantity: int = Field(0, ge=0)
    category_id: FacetId | None = None
    category_name: str | None = None
    brand_id: FacetId | None = None
    brand_name: str | None = None
    created_by: str | None = Field(None, description="Creator label")
    created_at: datetime | None = None
    # Resolved for the requesting user; omitted for anonymous sessions
    is_favorite: bool = False


class FavoriteToggleResult(InventoryModel):
    is_favorite: bool


class CriticalThreshold(InventoryModel):
    value: int
