"""Shared fixtures: an in-memory inventory service and product factories."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime

import httpx
import pytest

from catalog_view.clients.inventory_client import InventoryServiceError
from catalog_view.core.config import Settings
from catalog_view.schemas.inventory import Brand, Category, FavoriteToggleResult, Product
from catalog_view.services.sort_fetch import SortKey, sort_products


def make_product(product_id: int, **overrides) -> Product:
    data = {
        "id": product_id,
        "serial_number": product_id,
        "name": f"Product {product_id}",
        "quantity": 10,
        "category_id": 1,
        "category_name": "Kırtasiye",
        "brand_id": 1,
        "brand_name": "Faber",
        "created_at": datetime(2024, 3, product_id % 28 + 1, 9, 30),
    }
    data.update(overrides)
    return Product(**data)


class FakeInventoryService:
    """In-memory stand-in for the remote inventory service.

    Usable directly as a client (async methods) or behind ``httpx.MockTransport``
    through ``handler``. Operations listed in ``failing`` raise; fetches whose
    order key has a gate in ``gates`` wait until the gate is set.
    """

    def __init__(self, products: list[Product] | None = None, threshold: int = 5):
        self.products = list(products or [])
        self.categories = [
            Category(category_id=1, name="Kırtasiye"),
            Category(category_id=2, name="Temizlik"),
        ]
        self.brands = [Brand(brand_id=1, name="Faber"), Brand(brand_id="2", name="Şok")]
        self.threshold = threshold
        self.favorites: dict[str, set[int]] = {}
        self.failing: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.toggle_gates: list[asyncio.Event] = []
        self.calls: list[tuple] = []
        self.forced_favorite: bool | None = None

    def _check(self, operation: str) -> None:
        if operation in self.failing:
            raise InventoryServiceError(operation, "simulated failure")

    async def fetch_sorted_products(self, order_by, direction, user_id=None):
        self.calls.append(("fetch_sorted_products", order_by, direction, user_id))
        key = SortKey.parse(f"{order_by}_{direction}")
        gate = self.gates.get(key.value)
        if gate is not None:
            await gate.wait()
        self._check("fetch_sorted_products")
        favorites = self.favorites.get(user_id, set()) if user_id else set()
        return [
            p.model_copy(update={"is_favorite": p.id in favorites})
            for p in sort_products(self.products, key)
        ]

    async def fetch_categories(self):
        self.calls.append(("fetch_categories",))
        self._check("fetch_categories")
        return list(self.categories)

    async def fetch_brands(self):
        self.calls.append(("fetch_brands",))
        self._check("fetch_brands")
        return list(self.brands)

    async def fetch_critical_threshold(self):
        self.calls.append(("fetch_critical_threshold",))
        self._check("fetch_critical_threshold")
        return self.threshold

    async def update_critical_threshold(self, value):
        self.calls.append(("update_critical_threshold", value))
        self._check("update_critical_threshold")
        self.threshold = value

    async def toggle_favorite(self, product_id, user_id):
        self.calls.append(("toggle_favorite", product_id, user_id))
        if self.toggle_gates:
            await self.toggle_gates.pop(0).wait()
        self._check("toggle_favorite")
        favorites = self.favorites.setdefault(user_id, set())
        if product_id in favorites:
            favorites.discard(product_id)
        else:
            favorites.add(product_id)
        if self.forced_favorite is not None:
            if self.forced_favorite:
                favorites.add(product_id)
            else:
                favorites.discard(product_id)
        return FavoriteToggleResult(is_favorite=product_id in favorites)

    async def aclose(self):
        pass

    def handler(self, request: httpx.Request) -> httpx.Response:
        """Serve the inventory HTTP API from the in-memory state."""
        path = request.url.path
        params = request.url.params

        def failing(operation: str) -> bool:
            return operation in self.failing

        if path == "/api/Product/sorted" and request.method == "GET":
            if failing("fetch_sorted_products"):
                return httpx.Response(500, text="boom")
            key = SortKey.parse(f"{params['orderBy']}_{params['direction']}")
            user_id = params.get("userId")
            favorites = self.favorites.get(user_id, set()) if user_id else set()
            body = [
                {**p.model_dump(mode="json", by_alias=True), "isFavorite": p.id in favorites}
                for p in sort_products(self.products, key)
            ]
            return httpx.Response(200, json=body)
        if path == "/api/Category":
            if failing("fetch_categories"):
                return httpx.Response(503)
            return httpx.Response(
                200, json=[c.model_dump(mode="json", by_alias=True) for c in self.categories]
            )
        if path == "/api/Brand":
            if failing("fetch_brands"):
                return httpx.Response(503)
            return httpx.Response(
                200, json=[b.model_dump(mode="json", by_alias=True) for b in self.brands]
            )
        if path == "/api/Settings/critical-threshold":
            if request.method == "GET":
                if failing("fetch_critical_threshold"):
                    return httpx.Response(503)
                return httpx.Response(200, json=self.threshold)
            if failing("update_critical_threshold"):
                return httpx.Response(500)
            self.threshold = json.loads(request.content)["value"]
            return httpx.Response(204)
        if path == "/api/Favorite/toggle" and request.method == "POST":
            if failing("toggle_favorite"):
                return httpx.Response(500)
            body = json.loads(request.content)
            favorites = self.favorites.setdefault(body["userId"], set())
            product_id = body["productId"]
            if product_id in favorites:
                favorites.discard(product_id)
            else:
                favorites.add(product_id)
            return httpx.Response(200, json={"isFavorite": product_id in favorites})
        return httpx.Response(404)


@pytest.fixture
def sample_products() -> list[Product]:
    return [
        make_product(1, serial_number=3, name="Zebra", quantity=3),
        make_product(2, serial_number=1, name="apple", quantity=0, brand_id="2", brand_name="Şok"),
        make_product(
            3, serial_number=2, name="Mango", quantity=50, category_id=2, category_name="Temizlik"
        ),
    ]


@pytest.fixture
def inventory(sample_products) -> FakeInventoryService:
    return FakeInventoryService(sample_products, threshold=5)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        current_user_id="u1",
        notice_visible_seconds=0.05,
        notice_clear_seconds=0.1,
        cors_origins_raw=None,
    )


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def inventory_factory():
    return FakeInventoryService
