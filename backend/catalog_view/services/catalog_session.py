"""Session-scoped owner of all catalog view state."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from catalog_view.clients.inventory_client import InventoryClient, InventoryServiceError
from catalog_view.core.config import Settings, get_settings
from catalog_view.schemas.inventory import Brand, Category, Product
from catalog_view.services.export_projector import ExportPayload, to_pdf_table, to_spreadsheet
from catalog_view.services.facet_filter import FilterState, StatusFilter, filter_products
from catalog_view.services.favorite_toggle import FavoriteToggle, FavoriteToggleController
from catalog_view.services.notices import NoticeBoard
from catalog_view.services.sort_fetch import FetchOutcome, SortFetchCoordinator, SortKey
from catalog_view.services.stock_classifier import StockStatus, classify
from catalog_view.utils.ids import normalize_id

logger = logging.getLogger(__name__)

THRESHOLD_CHANNEL = "threshold"


@dataclass(frozen=True)
class CatalogRow:
    product: Product
    status: StockStatus


class CatalogSession:
    """Single writer for sort key, threshold, filters, facets and products.

    Components receive this session's collaborators by reference; nothing
    else mutates the product set, the threshold or the filter state.
    """

    def __init__(
        self,
        client: InventoryClient,
        settings: Settings | None = None,
        user_id: str | None = None,
        notices: NoticeBoard | None = None,
    ):
        self.settings = settings or get_settings()
        self.client = client
        self.user_id = user_id
        self.threshold = 0
        self.filters = FilterState()
        self.categories: list[Category] = []
        self.brands: list[Brand] = []
        self.notices = notices or NoticeBoard(
            self.settings.notice_visible_seconds, self.settings.notice_clear_seconds
        )
        self.coordinator = SortFetchCoordinator(client, user_id=user_id)
        self.favorites = FavoriteToggleController(
            client, self.coordinator, self.notices, user_id=user_id
        )

    async def load(self) -> None:
        """Fetch threshold, facets and products concurrently.

        Every read is independent; a failed read keeps its previous value.
        """
        await asyncio.gather(
            self.load_threshold(),
            self.load_categories(),
            self.load_brands(),
            self.coordinator.refresh(),
        )

    async def load_threshold(self) -> None:
        try:
            self.threshold = await self.client.fetch_critical_threshold()
        except InventoryServiceError as e:
            logger.error(f"Failed to load critical threshold, keeping {self.threshold}: {e}")

    async def load_categories(self) -> None:
        try:
            self.categories = await self.client.fetch_categories()
        except InventoryServiceError as e:
            logger.error(f"Failed to load categories, keeping previous list: {e}")

    async def load_brands(self) -> None:
        try:
            self.brands = await self.client.fetch_brands()
        except InventoryServiceError as e:
            logger.error(f"Failed to load brands, keeping previous list: {e}")

    @property
    def sort_key(self) -> SortKey:
        return self.coordinator.sort_key

    async def set_sort_key(self, key: SortKey | str) -> FetchOutcome:
        return await self.coordinator.set_sort_key(key)

    async def refresh(self) -> FetchOutcome:
        return await self.coordinator.refresh()

    def set_filters(
        self,
        *,
        status: StatusFilter | str | None = None,
        search: str | None = None,
        category_ids: Iterable | None = None,
        brand_ids: Iterable | None = None,
    ) -> FilterState:
        self.filters = self.filters.update(
            status=status, search=search, category_ids=category_ids, brand_ids=brand_ids
        )
        return self.filters

    def reset_filters(self) -> FilterState:
        self.filters = FilterState()
        return self.filters

    async def update_threshold(self, value: int) -> bool:
        """Apply the threshold locally at once, then propagate it (last writer wins)."""
        self.threshold = value
        try:
            await self.client.update_critical_threshold(value)
        except InventoryServiceError as e:
            logger.error(f"Failed to save critical threshold {value}: {e}")
            self.notices.show(THRESHOLD_CHANNEL, False, "Critical threshold could not be saved.")
            return False
        self.notices.show(THRESHOLD_CHANNEL, True, f"Critical threshold set to {value}.")
        return True

    async def toggle_favorite(self, product_id: int) -> FavoriteToggle:
        return await self.favorites.toggle(product_id)

    def resolve_names(self, product: Product) -> Product:
        """Fill missing category/brand names from the fetched facet lists."""
        updates = {}
        if not product.category_name and product.category_id is not None:
            name = self._facet_name(self.categories, "category_id", product.category_id)
            if name:
                updates["category_name"] = name
        if not product.brand_name and product.brand_id is not None:
            name = self._facet_name(self.brands, "brand_id", product.brand_id)
            if name:
                updates["brand_name"] = name
        return product.model_copy(update=updates) if updates else product

    @staticmethod
    def _facet_name(facets: list, attribute: str, facet_id) -> str | None:
        key = normalize_id(facet_id)
        for facet in facets:
            if normalize_id(getattr(facet, attribute)) == key:
                return facet.name
        return None

    def visible_products(self) -> list[Product]:
        """Filtered products in the coordinator's order."""
        products = filter_products(self.coordinator.products, self.filters, self.threshold)
        return [self.resolve_names(product) for product in products]

    def visible_rows(self) -> list[CatalogRow]:
        return [
            CatalogRow(product=product, status=classify(product.quantity, self.threshold))
            for product in self.visible_products()
        ]

    def page(self, page: int = 1, page_size: int | None = None) -> tuple[list[CatalogRow], int]:
        """Slice the visible rows for display; returns (rows, total)."""
        page_size = page_size or self.settings.default_page_size
        rows = self.visible_rows()
        offset = (page - 1) * page_size
        return rows[offset : offset + page_size], len(rows)

    def page_count(self, total: int, page_size: int | None = None) -> int:
        page_size = page_size or self.settings.default_page_size
        return max(1, math.ceil(total / page_size))

    def export_spreadsheet(self) -> ExportPayload:
        return to_spreadsheet(
            self.visible_products(), date_format=self.settings.export_date_format
        )

    def export_pdf(self) -> ExportPayload:
        return to_pdf_table(
            self.visible_products(),
            title=self.settings.export_title,
            font_path=self.settings.export_font_path,
            date_format=self.settings.export_date_format,
        )
