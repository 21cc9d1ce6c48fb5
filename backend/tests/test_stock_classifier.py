import pytest

from catalog_view.services.stock_classifier import classify


@pytest.mark.parametrize("threshold", [0, 1, 5, 100])
@pytest.mark.parametrize("quantity", [0, 1, 4, 5, 6, 250])
def test_classification_matches_threshold_rule(quantity, threshold):
    status = classify(quantity, threshold)

    assert status.depleted == (quantity == 0)
    assert status.critical == (quantity <= threshold)
    if status.depleted:
        assert status.critical


def test_quantity_equal_to_threshold_is_critical():
    assert classify(5, 5).critical is True
    assert classify(6, 5).critical is False


def test_negative_threshold_never_marks_critical():
    status = classify(0, -1)

    assert status.depleted is True
    assert status.critical is False
    assert classify(3, -1) == (False, False)
