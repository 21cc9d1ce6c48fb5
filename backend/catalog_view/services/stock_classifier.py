"""Stock status rule shared by filtering and row highlighting."""

from typing import NamedTuple


class StockStatus(NamedTuple):
    critical: bool
    depleted: bool


def classify(quantity: int, threshold: int) -> StockStatus:
    """Classify a quantity against the critical threshold.

    ``depleted`` means nothing is left; ``critical`` means the quantity is at or
    below the threshold, so a depleted product is also critical whenever the
    threshold is non-negative. A negative threshold is accepted as-is and only
    ever marks depleted stock.
    """
    return StockStatus(critical=quantity <= threshold, depleted=quantity == 0)
