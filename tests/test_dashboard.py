import pandas as pd
import pytest

from almacen_dashboard.dashboard import (
    get_available_categories,
    get_inventory_overview,
    get_inventory_table,
    get_low_stock_items,
    get_notification_panel,
)
from almacen_dashboard.models import Notification
from almacen_dashboard.notifications import NotificationFeed
from almacen_dashboard.simulator import seed_store
from almacen_dashboard.loaders import load_inventory_items


@pytest.fixture
def items_df():
    return pd.DataFrame([
        {"id": "1", "code": "MAT-001", "name": "Bolas de acero", "category": "Molienda",
         "stock": 2, "min_stock": 5, "avg_cost": 4200, "currency": "USD"},
        {"id": "2", "code": "MAT-004", "name": "Xantato Z-11", "category": "Reactivos",
         "stock": 120, "min_stock": 40, "avg_cost": 9.8, "currency": "PEN"},
        {"id": "3", "code": "MAT-007", "name": "Cal viva", "category": "Reactivos",
         "stock": 0, "min_stock": 3, "avg_cost": 520, "currency": None},
    ])


def test_overview_labels(items_df):
    overview = get_inventory_overview(items_df)
    assert overview["total_items"] == 3
    assert overview["low_stock"] == 2
    assert overview["value_labels"] == {"PEN": "S/ 1,176.00", "USD": "$ 8,400.00"}


def test_overview_of_empty_inventory():
    overview = get_inventory_overview(pd.DataFrame())
    assert overview["total_items"] == 0
    assert overview["value_labels"]["PEN"] == "S/ 0.00"


def test_table_status_badges(items_df):
    table = get_inventory_table(items_df)
    assert table["status_label"].tolist() == ["Stock Bajo", "Normal", "Stock Bajo"]
    assert table.loc[0, "status_color"] == "#e74c3c"


def test_table_search_and_category(items_df):
    assert get_inventory_table(items_df, search="xant")["id"].tolist() == ["2"]
    assert get_inventory_table(items_df, search="mat-007")["id"].tolist() == ["3"]
    assert get_inventory_table(items_df, category="Reactivos")["id"].tolist() == ["2", "3"]
    assert get_inventory_table(items_df, search="bolas", category="Reactivos").empty


def test_low_stock_items_emptiest_first(items_df):
    assert get_low_stock_items(items_df)["id"].tolist() == ["3", "1"]


def test_available_categories(items_df):
    assert get_available_categories(items_df) == ["Molienda", "Reactivos"]
    assert get_available_categories(pd.DataFrame()) == []


def test_notification_panel_styles():
    panel = get_notification_panel([
        Notification(id="a", user_id="u1", title="Rechazada", message="m", kind="error"),
        Notification(id="b", user_id="u1", title="Aviso", message="m", read=True),
    ])
    assert panel["id"].tolist() == ["a", "b"]
    assert panel["color"].tolist() == ["#e74c3c", "#3498db"]
    assert panel["read"].tolist() == [False, True]


def test_simulated_store_feeds_dashboard(store):
    counts = seed_store(store, "demo")
    items = load_inventory_items(store)

    assert len(items) == counts["almacen_items"]
    assert get_inventory_overview(items)["total_items"] == len(items)

    with NotificationFeed(store, "demo") as feed:
        assert len(feed.notifications) == counts["notificaciones"]
        assert feed.unread_count == 4
