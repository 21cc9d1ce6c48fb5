"""Client-side filtering of the fetched product collection."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum

from catalog_view.schemas.inventory import Product
from catalog_view.services.stock_classifier import classify
from catalog_view.utils.ids import normalize_id, normalize_ids

Predicate = Callable[[Product], bool]


class StatusFilter(str, Enum):
    ALL = "all"
    CRITICAL = "critical"
    DEPLETED = "depleted"
    FAVORITES = "favorites"


@dataclass(frozen=True)
class FilterState:
    """Transient facet selections; empty selections mean no constraint."""

    status: StatusFilter = StatusFilter.ALL
    search: str = ""
    category_ids: frozenset[str] = field(default_factory=frozenset)
    brand_ids: frozenset[str] = field(default_factory=frozenset)

    def update(
        self,
        *,
        status: StatusFilter | str | None = None,
        search: str | None = None,
        category_ids: Iterable | None = None,
        brand_ids: Iterable | None = None,
    ) -> FilterState:
        """Return a copy with the given facets replaced and ids normalized."""
        changes: dict = {}
        if status is not None:
            changes["status"] = StatusFilter(status)
        if search is not None:
            changes["search"] = search
        if category_ids is not None:
            changes["category_ids"] = normalize_ids(category_ids)
        if brand_ids is not None:
            changes["brand_ids"] = normalize_ids(brand_ids)
        return replace(self, **changes)

    @property
    def is_empty(self) -> bool:
        return (
            self.status is StatusFilter.ALL
            and not self.search
            and not self.category_ids
            and not self.brand_ids
        )


def status_predicate(status: StatusFilter, threshold: int) -> Predicate:
    if status is StatusFilter.CRITICAL:
        return lambda product: classify(product.quantity, threshold).critical
    if status is StatusFilter.DEPLETED:
        return lambda product: classify(product.quantity, threshold).depleted
    if status is StatusFilter.FAVORITES:
        return lambda product: product.is_favorite
    return lambda product: True


def search_predicate(search: str) -> Predicate:
    # Name only; description, brand and category are not searched.
    needle = search.casefold()
    if not needle:
        return lambda product: True
    return lambda product: needle in product.name.casefold()


def category_predicate(category_ids: frozenset[str]) -> Predicate:
    if not category_ids:
        return lambda product: True
    return lambda product: normalize_id(product.category_id) in category_ids


def brand_predicate(brand_ids: frozenset[str]) -> Predicate:
    if not brand_ids:
        return lambda product: True
    return lambda product: normalize_id(product.brand_id) in brand_ids


def build_predicates(state: FilterState, threshold: int) -> list[Predicate]:
    """Return the four independent facet predicates for ``state``."""
    return [
        status_predicate(state.status, threshold),
        search_predicate(state.search),
        category_predicate(normalize_ids(state.category_ids)),
        brand_predicate(normalize_ids(state.brand_ids)),
    ]


def filter_products(
    products: Iterable[Product], state: FilterState, threshold: int
) -> list[Product]:
    """Keep the products every predicate accepts, preserving input order."""
    predicates = build_predicates(state, threshold)
    return [product for product in products if all(p(product) for p in predicates)]
