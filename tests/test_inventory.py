import pandas as pd
import pytest

from almacen_dashboard.inventory import (
    flag_low_stock,
    format_currency,
    summarise_inventory,
    value_by_currency,
)


@pytest.fixture
def sample_items():
    return [
        {"stock": 10, "min_stock": 5, "avg_cost": 2, "currency": "PEN"},
        {"stock": 1, "min_stock": 5, "avg_cost": 3, "currency": "USD"},
    ]


def test_reference_summary(sample_items):
    summary = summarise_inventory(sample_items)
    assert summary == {
        "total_items": 2,
        "low_stock": 1,
        "value_by_currency": {"PEN": 20.0, "USD": 3.0},
    }


def test_order_does_not_matter(sample_items):
    assert summarise_inventory(sample_items) == summarise_inventory(list(reversed(sample_items)))


def test_missing_currency_goes_to_primary_bucket():
    items = [
        {"stock": 4, "min_stock": 1, "avg_cost": 2.5},
        {"stock": 2, "min_stock": 1, "avg_cost": 10, "currency": None},
    ]
    assert value_by_currency(items) == {"PEN": 30.0, "USD": 0.0}


def test_unrecognised_currency_goes_to_primary_bucket():
    items = [{"stock": 3, "min_stock": 0, "avg_cost": 2, "currency": "EUR"}]
    assert value_by_currency(items) == {"PEN": 6.0, "USD": 0.0}


def test_stock_equal_to_minimum_is_low():
    df = flag_low_stock([
        {"stock": 5, "min_stock": 5},
        {"stock": 6, "min_stock": 5},
        {"stock": 4, "min_stock": 5},
    ])
    assert df["low_stock"].tolist() == [True, False, True]
    assert df["stock_status"].tolist() == ["low", "normal", "low"]


def test_missing_fields_default_to_zero():
    # no stock and no minimum: 0 <= 0 counts as low, contributes no value
    summary = summarise_inventory([{"name": "Sin datos"}])
    assert summary["total_items"] == 1
    assert summary["low_stock"] == 1
    assert summary["value_by_currency"] == {"PEN": 0.0, "USD": 0.0}


def test_non_numeric_values_count_as_zero():
    summary = summarise_inventory([{"stock": "n/a", "min_stock": 2, "avg_cost": "x", "currency": "USD"}])
    assert summary["low_stock"] == 1
    assert summary["value_by_currency"]["USD"] == 0.0


def test_currencies_are_never_summed():
    items = [
        {"stock": 1, "min_stock": 0, "avg_cost": 100, "currency": "PEN"},
        {"stock": 1, "min_stock": 0, "avg_cost": 100, "currency": "USD"},
    ]
    summary = summarise_inventory(items)
    assert summary["value_by_currency"] == {"PEN": 100.0, "USD": 100.0}
    assert set(summary) == {"total_items", "low_stock", "value_by_currency"}


def test_dataframe_input_is_not_modified(sample_items):
    df = pd.DataFrame(sample_items)
    before = df.copy()
    summarise_inventory(df)
    pd.testing.assert_frame_equal(df, before)


def test_empty_inventory():
    assert summarise_inventory([]) == {
        "total_items": 0,
        "low_stock": 0,
        "value_by_currency": {"PEN": 0.0, "USD": 0.0},
    }


def test_recomputed_from_each_snapshot(sample_items):
    first = summarise_inventory(sample_items)
    sample_items[1]["stock"] = 50
    second = summarise_inventory(sample_items)
    assert first["low_stock"] == 1
    assert second["low_stock"] == 0
    assert second["value_by_currency"]["USD"] == 150.0


def test_format_currency():
    assert format_currency(1234.5, "PEN") == "S/ 1,234.50"
    assert format_currency(3, "USD") == "$ 3.00"
    assert format_currency(7, "EUR") == "S/ 7.00"
