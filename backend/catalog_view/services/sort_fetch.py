"""Sort-key driven re-fetching of the authoritative product set."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from catalog_view.clients.inventory_client import InventoryServiceError
from catalog_view.schemas.inventory import Product

logger = logging.getLogger(__name__)


class SortKey(str, Enum):
    SERIAL_NUMBER_ASC = "serialNumber_asc"
    SERIAL_NUMBER_DESC = "serialNumber_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    QUANTITY_ASC = "quantity_asc"
    QUANTITY_DESC = "quantity_desc"
    CATEGORY_ASC = "category_asc"
    CATEGORY_DESC = "category_desc"
    BRAND_ASC = "brand_asc"
    BRAND_DESC = "brand_desc"
    CREATED_AT_ASC = "createdAt_asc"
    CREATED_AT_DESC = "createdAt_desc"

    @property
    def field(self) -> str:
        return self.value.rsplit("_", 1)[0]

    @property
    def direction(self) -> str:
        return self.value.rsplit("_", 1)[1]

    @property
    def descending(self) -> bool:
        return self.direction == "desc"

    @classmethod
    def default(cls) -> SortKey:
        return cls.SERIAL_NUMBER_ASC

    @classmethod
    def parse(cls, value: str | SortKey) -> SortKey:
        """Accept the wire form (``name_asc``) case-insensitively."""
        if isinstance(value, SortKey):
            return value
        wanted = str(value).strip().lower()
        for key in cls:
            if key.value.lower() == wanted:
                return key
        raise ValueError(f"Unknown sort key: {value!r}")


class FetchOutcome(str, Enum):
    APPLIED = "applied"
    SUPERSEDED = "superseded"
    FAILED = "failed"


class ProductSource(Protocol):
    async def fetch_sorted_products(
        self, order_by: str, direction: str, user_id: str | None = None
    ) -> list[Product]: ...


def _text_key(value: str | None) -> tuple[bool, str]:
    return (value is None or not value.strip(), (value or "").casefold())


_SORT_FIELDS: dict[str, Any] = {
    "serialNumber": lambda p: p.serial_number,
    "name": lambda p: p.name.casefold(),
    "quantity": lambda p: p.quantity,
    "category": lambda p: _text_key(p.category_name),
    "brand": lambda p: _text_key(p.brand_name),
    "createdAt": lambda p: (p.created_at is None, p.created_at or datetime.min),
}


def sort_products(products: Iterable[Product], key: SortKey) -> list[Product]:
    """Stable sort mirroring the service order for ``key``.

    Names compare case-insensitively; products without a brand or category
    name sort last ascending (first descending).
    """
    items = list(products)
    try:
        return sorted(items, key=_SORT_FIELDS[key.field], reverse=key.descending)
    except TypeError:
        # Mixed naive/aware timestamps cannot be compared; keep the service order.
        logger.warning(f"Could not order products locally by {key.value}")
        return items


class SortFetchCoordinator:
    """Owns the in-memory product set and the active sort key.

    Each fetch carries a monotonically increasing sequence number; a response
    is applied only if no newer fetch was issued after it, so a slow stale
    response never overwrites a fresher one. The product set is replaced as a
    whole tuple and never mutated in place.

    ``sort_key`` is the order of the products currently held; a requested key
    only takes its place once its fetch is applied.
    """

    def __init__(self, source: ProductSource, user_id: str | None = None):
        self._source = source
        self.user_id = user_id
        self.sort_key = SortKey.default()
        self.requested_sort_key = self.sort_key
        self._products: tuple[Product, ...] = ()
        self._issued = 0
        self._applied = 0
        self._pinned_favorites: dict[int, bool] = {}
        self.loaded = False
        self.last_error: str | None = None

    @property
    def products(self) -> tuple[Product, ...]:
        return self._products

    @property
    def pending(self) -> bool:
        """True while a fetch newer than the applied one is in flight."""
        return self._applied < self._issued

    def get(self, product_id: int) -> Product | None:
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    async def set_sort_key(self, key: SortKey | str) -> FetchOutcome:
        self.requested_sort_key = SortKey.parse(key)
        return await self.refresh()

    async def refresh(self) -> FetchOutcome:
        """Re-fetch the full collection at the current sort key."""
        self._issued += 1
        sequence = self._issued
        key = self.requested_sort_key
        logger.debug(f"Fetching products #{sequence} ordered by {key.value}")

        try:
            products = await self._source.fetch_sorted_products(
                key.field, key.direction, self.user_id
            )
        except InventoryServiceError as e:
            if sequence != self._issued:
                logger.info(f"Ignoring failure of superseded fetch #{sequence}: {e}")
                return FetchOutcome.SUPERSEDED
            self.last_error = str(e)
            self.requested_sort_key = self.sort_key
            logger.error(
                f"Failed to fetch products ordered by {key.value}, keeping previous set "
                f"ordered by {self.sort_key.value}: {e}",
                exc_info=True,
            )
            return FetchOutcome.FAILED

        if sequence != self._issued:
            logger.info(
                f"Discarding superseded fetch #{sequence} ({key.value}); "
                f"#{self._issued} is newer"
            )
            return FetchOutcome.SUPERSEDED

        self._replace(sort_products(products, key))
        self._applied = sequence
        self.sort_key = key
        self.loaded = True
        self.last_error = None
        logger.info(f"Loaded {len(self._products)} products ordered by {key.value}")
        return FetchOutcome.APPLIED

    def pin_favorite(self, product_id: int, value: bool) -> None:
        """Hold a favorite flag across re-fetches until its toggle settles."""
        self._pinned_favorites[product_id] = value
        self.set_favorite(product_id, value)

    def unpin_favorite(self, product_id: int) -> None:
        self._pinned_favorites.pop(product_id, None)

    def set_favorite(self, product_id: int, value: bool) -> bool:
        """Replace the set with ``product_id``'s flag set to ``value``."""
        found = False
        updated = []
        for product in self._products:
            if product.id == product_id:
                found = True
                if product.is_favorite != value:
                    product = product.model_copy(update={"is_favorite": value})
            updated.append(product)
        if found:
            self._products = tuple(updated)
        return found

    def _replace(self, products: list[Product]) -> None:
        if self._pinned_favorites:
            products = [
                product.model_copy(
                    update={"is_favorite": self._pinned_favorites[product.id]}
                )
                if product.id in self._pinned_favorites
                else product
                for product in products
            ]
        self._products = tuple(products)
