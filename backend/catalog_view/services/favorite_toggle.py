"""Optimistic favorite toggling reconciled against the inventory service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from catalog_view.clients.inventory_client import InventoryServiceError
from catalog_view.schemas.inventory import FavoriteToggleResult
from catalog_view.services.notices import NoticeBoard
from catalog_view.services.sort_fetch import SortFetchCoordinator

logger = logging.getLogger(__name__)

NOTICE_CHANNEL = "favorite"


class ToggleState(str, Enum):
    UNKNOWN = "unknown"
    OPTIMISTIC_ON = "optimistic_on"
    OPTIMISTIC_OFF = "optimistic_off"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


class FavoriteService(Protocol):
    async def toggle_favorite(self, product_id: int, user_id: str) -> FavoriteToggleResult: ...


class ProductNotLoadedError(LookupError):
    """The product id is not part of the current in-memory set."""


@dataclass
class FavoriteToggle:
    """Two-phase toggle state for one (product, user) pair."""

    product_id: int
    user_id: str | None
    state: ToggleState = ToggleState.UNKNOWN
    sequence: int = 0
    previous_value: bool | None = None
    baseline_value: bool | None = None
    pending: int = 0
    optimistic_value: bool | None = None
    confirmed_value: bool | None = None
    error: str | None = None

    @property
    def in_flight(self) -> bool:
        return self.state in (ToggleState.OPTIMISTIC_ON, ToggleState.OPTIMISTIC_OFF)


class FavoriteToggleController:
    """Flips the favorite flag locally first, then confirms or rolls back.

    Only the latest toggle per product settles the flag: an earlier request
    resolving after a newer one was issued is ignored, and while any toggle
    is in flight its optimistic value is pinned so an intervening re-fetch
    cannot overwrite it.
    """

    def __init__(
        self,
        service: FavoriteService,
        coordinator: SortFetchCoordinator,
        notices: NoticeBoard,
        user_id: str | None = None,
    ):
        self._service = service
        self._coordinator = coordinator
        self._notices = notices
        self.user_id = user_id
        self._toggles: dict[tuple[int, str | None], FavoriteToggle] = {}

    def state_of(self, product_id: int) -> FavoriteToggle:
        key = (product_id, self.user_id)
        if key not in self._toggles:
            self._toggles[key] = FavoriteToggle(product_id=product_id, user_id=self.user_id)
        return self._toggles[key]

    async def toggle(self, product_id: int) -> FavoriteToggle:
        product = self._coordinator.get(product_id)
        if product is None:
            raise ProductNotLoadedError(f"Product {product_id} is not loaded")

        toggle = self.state_of(product_id)
        if self.user_id is None:
            toggle.error = "no user identity"
            self._notices.show(NOTICE_CHANNEL, False, "Sign in to manage favorites.")
            return toggle

        toggle.sequence += 1
        sequence = toggle.sequence
        previous = product.is_favorite
        optimistic = not previous
        if toggle.pending == 0:
            # Last value not produced by an unconfirmed guess.
            toggle.baseline_value = previous
        toggle.pending += 1
        toggle.previous_value = previous
        toggle.optimistic_value = optimistic
        toggle.confirmed_value = None
        toggle.error = None
        toggle.state = ToggleState.OPTIMISTIC_ON if optimistic else ToggleState.OPTIMISTIC_OFF
        self._coordinator.pin_favorite(product_id, optimistic)

        try:
            result = await self._service.toggle_favorite(product_id, self.user_id)
        except InventoryServiceError as e:
            toggle.pending -= 1
            if sequence != toggle.sequence:
                logger.info(f"Superseded favorite toggle for product {product_id} failed: {e}")
                return toggle
            baseline = toggle.baseline_value
            self._coordinator.unpin_favorite(product_id)
            self._coordinator.set_favorite(product_id, baseline)
            toggle.state = ToggleState.ROLLED_BACK
            toggle.error = str(e)
            logger.error(
                f"Favorite toggle failed for product {product_id}, reverted to {baseline}: {e}",
                exc_info=True,
            )
            self._notices.show(NOTICE_CHANNEL, False, "Favorite could not be updated.")
            return toggle

        toggle.pending -= 1
        if sequence != toggle.sequence:
            logger.info(
                f"Favorite toggle #{sequence} for product {product_id} superseded by "
                f"#{toggle.sequence}"
            )
            toggle.baseline_value = result.is_favorite
            if toggle.state is ToggleState.ROLLED_BACK:
                # The newer toggle already failed; the server holds this answer.
                self._coordinator.set_favorite(product_id, result.is_favorite)
            return toggle

        confirmed = result.is_favorite
        if confirmed != optimistic:
            logger.warning(
                f"Server reports favorite={confirmed} for product {product_id}, "
                f"correcting optimistic {optimistic}"
            )
        self._coordinator.unpin_favorite(product_id)
        self._coordinator.set_favorite(product_id, confirmed)
        toggle.confirmed_value = confirmed
        toggle.state = ToggleState.CONFIRMED
        self._notices.show(
            NOTICE_CHANNEL,
            True,
            "Added to favorites." if confirmed else "Removed from favorites.",
        )

        # Derived fields are server-computed; reconcile the whole set.
        await self._coordinator.refresh()
        return toggle
