"""Async HTTP client for the remote inventory service."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from catalog_view.core.config import Settings
from catalog_view.schemas.inventory import (
    Brand,
    Category,
    CriticalThreshold,
    FavoriteToggleResult,
    Product,
)

logger = logging.getLogger(__name__)

USER_AGENT = "Catalog-View/1.0"

PRODUCTS_SORTED_PATH = "/api/Product/sorted"
CATEGORIES_PATH = "/api/Category"
BRANDS_PATH = "/api/Brand"
THRESHOLD_PATH = "/api/Settings/critical-threshold"
FAVORITE_TOGGLE_PATH = "/api/Favorite/toggle"

_products_adapter = TypeAdapter(list[Product])
_categories_adapter = TypeAdapter(list[Category])
_brands_adapter = TypeAdapter(list[Brand])


class InventoryServiceError(Exception):
    """Any transport, status or payload failure talking to the inventory service."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class InventoryClient:
    """Thin async wrapper over the inventory service endpoints.

    Every failure mode (timeout, connection error, non-2xx status, malformed
    body) is reported as a single ``InventoryServiceError``; retries and auth
    belong to the transport.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> InventoryClient:
        return cls(
            settings.inventory_base_url,
            timeout=settings.inventory_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> InventoryClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"Inventory {operation} timed out: {e}")
            raise InventoryServiceError(operation, "request timed out") from e
        except httpx.RequestError as e:
            logger.warning(f"Inventory {operation} request error: {e}")
            raise InventoryServiceError(operation, f"request failed: {e}") from e

        if not response.is_success:
            raise InventoryServiceError(
                operation, f"HTTP {response.status_code}: {response.text[:200]}"
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise InventoryServiceError(operation, "response body is not JSON") from e

    async def fetch_sorted_products(
        self, order_by: str, direction: str, user_id: str | None = None
    ) -> list[Product]:
        """Return the full collection ordered service-side and favorite-annotated."""
        params = {"orderBy": order_by, "direction": direction}
        if user_id is not None:
            params["userId"] = user_id
        payload = await self._request(
            "fetch_sorted_products", "GET", PRODUCTS_SORTED_PATH, params=params
        )
        try:
            return _products_adapter.validate_python(payload or [])
        except ValidationError as e:
            raise InventoryServiceError("fetch_sorted_products", f"invalid payload: {e}") from e

    async def fetch_categories(self) -> list[Category]:
        payload = await self._request("fetch_categories", "GET", CATEGORIES_PATH)
        try:
            return _categories_adapter.validate_python(payload or [])
        except ValidationError as e:
            raise InventoryServiceError("fetch_categories", f"invalid payload: {e}") from e

    async def fetch_brands(self) -> list[Brand]:
        payload = await self._request("fetch_brands", "GET", BRANDS_PATH)
        try:
            return _brands_adapter.validate_python(payload or [])
        except ValidationError as e:
            raise InventoryServiceError("fetch_brands", f"invalid payload: {e}") from e

    async def fetch_critical_threshold(self) -> int:
        """Read the shared threshold; the service answers ``5`` or ``{"value": 5}``."""
        payload = await self._request("fetch_critical_threshold", "GET", THRESHOLD_PATH)
        if isinstance(payload, bool):
            raise InventoryServiceError("fetch_critical_threshold", "invalid payload")
        if isinstance(payload, int):
            return payload
        try:
            return CriticalThreshold.model_validate(payload).value
        except ValidationError as e:
            raise InventoryServiceError(
                "fetch_critical_threshold", f"invalid payload: {e}"
            ) from e

    async def update_critical_threshold(self, value: int) -> None:
        await self._request(
            "update_critical_threshold",
            "PUT",
            THRESHOLD_PATH,
            json={"value": value},
        )

    async def toggle_favorite(self, product_id: int, user_id: str) -> FavoriteToggleResult:
        payload = await self._request(
            "toggle_favorite",
            "POST",
            FAVORITE_TOGGLE_PATH,
            json={"productId": product_id, "userId": user_id},
        )
        try:
            return FavoriteToggleResult.model_validate(payload)
        except ValidationError as e:
            raise InventoryServiceError("toggle_favorite", f"invalid payload: {e}") from e
