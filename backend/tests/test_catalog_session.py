import asyncio
import io

import pandas as pd
import pytest

from catalog_view.services.catalog_session import CatalogSession
from catalog_view.services.facet_filter import StatusFilter
from catalog_view.services.sort_fetch import FetchOutcome, SortKey


async def loaded_session(inventory, settings, user_id="u1") -> CatalogSession:
    session = CatalogSession(inventory, settings=settings, user_id=user_id)
    await session.load()
    return session


@pytest.mark.asyncio
async def test_load_fetches_everything(inventory, settings):
    session = await loaded_session(inventory, settings)

    assert session.threshold == 5
    assert [c.name for c in session.categories] == ["Kırtasiye", "Temizlik"]
    assert len(session.brands) == 2
    assert session.sort_key is SortKey.SERIAL_NUMBER_ASC
    assert [p.id for p in session.coordinator.products] == [2, 3, 1]


@pytest.mark.asyncio
async def test_failed_background_reads_keep_previous_values(inventory, settings):
    session = await loaded_session(inventory, settings)
    inventory.failing.update({"fetch_categories", "fetch_brands", "fetch_critical_threshold"})
    inventory.threshold = 40

    await session.load()

    assert session.threshold == 5
    assert len(session.categories) == 2
    assert len(session.brands) == 2


@pytest.mark.asyncio
async def test_failed_initial_product_load_is_not_fatal(inventory, settings):
    inventory.failing.add("fetch_sorted_products")

    session = await loaded_session(inventory, settings)

    assert session.coordinator.products == ()
    assert session.coordinator.loaded is False
    assert session.visible_rows() == []
    assert session.threshold == 5


@pytest.mark.asyncio
async def test_status_filter_with_threshold(inventory, settings):
    session = await loaded_session(inventory, settings)

    session.set_filters(status=StatusFilter.CRITICAL)
    assert sorted(p.id for p in session.visible_products()) == [1, 2]

    session.set_filters(status="depleted")
    assert [p.id for p in session.visible_products()] == [2]

    session.reset_filters()
    assert len(session.visible_products()) == 3


@pytest.mark.asyncio
async def test_visible_rows_carry_classification_in_sorted_order(inventory, settings):
    session = await loaded_session(inventory, settings)
    await session.set_sort_key("name_asc")

    rows = session.visible_rows()

    assert [r.product.name for r in rows] == ["apple", "Mango", "Zebra"]
    assert [(r.status.critical, r.status.depleted) for r in rows] == [
        (True, True),
        (False, False),
        (True, False),
    ]


@pytest.mark.asyncio
async def test_threshold_edit_reclassifies_and_propagates(inventory, settings):
    session = await loaded_session(inventory, settings)

    saved = await session.update_threshold(60)

    assert saved is True
    assert inventory.threshold == 60
    assert all(row.status.critical for row in session.visible_rows())
    assert session.notices.get("threshold").success is True


@pytest.mark.asyncio
async def test_threshold_save_failure_keeps_local_value(inventory, settings):
    session = await loaded_session(inventory, settings)
    inventory.failing.add("update_critical_threshold")

    saved = await session.update_threshold(1)

    assert saved is False
    assert session.threshold == 1
    assert inventory.threshold == 5
    notice = session.notices.get("threshold")
    assert notice.visible is True
    assert notice.success is False


@pytest.mark.asyncio
async def test_missing_names_resolved_from_facets(inventory, settings, product_factory):
    inventory.products = [
        product_factory(9, brand_id=2, brand_name=None, category_id="2", category_name=None)
    ]
    session = await loaded_session(inventory, settings)

    product = session.visible_products()[0]

    assert product.brand_name == "Şok"
    assert product.category_name == "Temizlik"


@pytest.mark.asyncio
async def test_page_slices_visible_rows(inventory, settings, product_factory):
    inventory.products = [product_factory(i) for i in range(1, 8)]
    session = await loaded_session(inventory, settings)

    rows, total = session.page(2, 3)

    assert total == 7
    assert [r.product.id for r in rows] == [4, 5, 6]
    assert session.page_count(total, 3) == 3


@pytest.mark.asyncio
async def test_export_uses_filtered_rows(inventory, settings):
    session = await loaded_session(inventory, settings)
    session.set_filters(search="mango")

    payload = session.export_spreadsheet()

    assert payload.filename.endswith(".xlsx")
    df = pd.read_excel(io.BytesIO(payload.content), engine="openpyxl")
    assert df["ID"].tolist() == [3]


@pytest.mark.asyncio
async def test_superseded_sort_leaves_latest_results(inventory, settings):
    session = await loaded_session(inventory, settings)
    gate = asyncio.Event()
    inventory.gates["name_asc"] = gate

    stale = asyncio.create_task(session.set_sort_key("name_asc"))
    await asyncio.sleep(0)
    outcome = await session.set_sort_key("quantity_asc")
    gate.set()

    assert await stale is FetchOutcome.SUPERSEDED
    assert outcome is FetchOutcome.APPLIED
    assert [p.quantity for p in session.visible_products()] == [0, 3, 50]
