from datetime import datetime, timezone

import pandas as pd
import pytest

from almacen_dashboard.config import INVENTORY_COLLECTION
from almacen_dashboard.loaders import inventory_frame_from_documents, load_inventory_items
from almacen_dashboard.loaders.utils import normalise_timestamp, safe_float
from almacen_dashboard.store import StoreError


def test_normalise_timestamp_variants():
    expected = pd.Timestamp("2024-05-01 08:00", tz="UTC")

    assert normalise_timestamp(datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)) == expected
    assert normalise_timestamp(datetime(2024, 5, 1, 8, 0)) == expected
    assert normalise_timestamp({"seconds": int(expected.timestamp()), "nanoseconds": 0}) == expected
    assert normalise_timestamp(expected.timestamp()) == expected
    assert normalise_timestamp("2024-05-01T08:00:00Z") == expected


@pytest.mark.parametrize("value", [None, "not a date", {"nanoseconds": 5}, True])
def test_normalise_timestamp_unusable(value):
    assert normalise_timestamp(value) is None


@pytest.mark.parametrize("value, expected", [
    (5, 5.0),
    ("12", 12.0),
    (" 1,250.5 ", 1250.5),
    ("", None),
    ("abc", None),
    (None, None),
    (float("nan"), None),
])
def test_safe_float(value, expected):
    assert safe_float(value) == expected


def test_inventory_frame_maps_fields_and_sorts():
    docs = [
        {"id": "2", "nombre": "Xantato", "stockActual": "20", "stockMinimo": 5, "moneda": "PEN"},
        {"id": "3", "stockActual": 1},
        {"id": "1", "nombre": "Bolas de acero", "stockActual": 3, "costoPromedio": 4200, "moneda": "USD"},
    ]
    df = inventory_frame_from_documents(docs)

    assert df["id"].tolist() == ["1", "2", "3"]
    assert df.loc[1, "stock"] == 20.0
    assert df.loc[0, "avg_cost"] == 4200.0
    assert pd.isna(df.loc[2, "name"])
    assert {"code", "category", "unit", "location", "item_type"} <= set(df.columns)


def test_inventory_frame_empty():
    df = inventory_frame_from_documents([])
    assert df.empty
    assert "stock" in df.columns


def test_load_inventory_items_filters_by_type(store):
    store.add(INVENTORY_COLLECTION, {"nombre": "Bolas", "tipo": "MATERIAL"})
    store.add(INVENTORY_COLLECTION, {"nombre": "Mineral cancha 1", "tipo": "MINERAL"})

    assert len(load_inventory_items(store)) == 2
    assert load_inventory_items(store, item_type="MINERAL")["name"].tolist() == ["Mineral cancha 1"]


def test_load_inventory_items_reraises_store_errors(store, monkeypatch):
    def fail(*args, **kwargs):
        raise StoreError("permission denied")

    monkeypatch.setattr(store, "list", fail)
    with pytest.raises(StoreError):
        load_inventory_items(store)
