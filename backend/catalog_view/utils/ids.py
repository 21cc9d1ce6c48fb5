"""Identifier helpers for facet lookups."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


def normalize_id(value: Any) -> str | None:
    """Return a comparable key so ``7``, ``7.0`` and ``"7"`` are the same id."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    key = str(value).strip()
    return key or None


def normalize_ids(values: Iterable[Any] | None) -> frozenset[str]:
    """Normalize a facet selection, dropping blanks."""
    if not values:
        return frozenset()
    keys = (normalize_id(value) for value in values)
    return frozenset(key for key in keys if key is not None)


def same_id(left: Any, right: Any) -> bool:
    key = normalize_id(left)
    return key is not None and key == normalize_id(right)
