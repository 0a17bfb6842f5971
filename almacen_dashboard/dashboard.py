"""
Dashboard-ready output functions.

These are the entry points for the Streamlit front end. Each function
returns plain dicts or DataFrames suitable for rendering cards, charts,
and tables.
"""

import logging

import pandas as pd

from .config import CURRENCIES, STOCK_STATUS_COLORS, STOCK_STATUS_LABELS
from .inventory import flag_low_stock, format_currency, summarise_inventory
from .models import Notification

logger = logging.getLogger(__name__)

_TABLE_COLUMNS = [
    "id", "code", "name", "item_type", "category", "unit",
    "stock", "min_stock", "avg_cost", "currency", "location",
    "stock_status", "status_label", "status_color",
]

_NOTIFICATION_COLUMNS = [
    "id", "title", "message", "kind", "read", "created_at", "link", "color", "icon",
]


def get_inventory_overview(items_df: pd.DataFrame) -> dict:
    """Summary plus card-ready labels.

    Returns
    -------
    {
        "total_items": 24,
        "low_stock": 5,
        "value_by_currency": {"PEN": 18250.0, "USD": 3120.5},
        "value_labels": {"PEN": "S/ 18,250.00", "USD": "$ 3,120.50"},
    }
    """
    overview = summarise_inventory(items_df)
    overview["value_labels"] = {
        currency: format_currency(overview["value_by_currency"][currency], currency)
        for currency in CURRENCIES
    }
    return overview


def get_inventory_table(
    items_df: pd.DataFrame,
    search: str | None = None,
    category: str | None = None,
) -> pd.DataFrame:
    """Item table with stock status badges.

    Parameters
    ----------
    items_df : From load_inventory_items().
    search : Case-insensitive substring matched against name and code.
    category : Exact category filter.
    """
    if items_df.empty:
        return pd.DataFrame(columns=_TABLE_COLUMNS)

    df = flag_low_stock(items_df)

    if search:
        needle = search.strip().lower()
        mask = pd.Series(False, index=df.index)
        for col in ("name", "code"):
            if col in df.columns:
                mask |= df[col].fillna("").astype(str).str.lower().str.contains(needle, regex=False)
        df = df[mask]

    if category and "category" in df.columns:
        df = df[df["category"] == category]

    df = df.copy()
    df["status_label"] = df["stock_status"].map(STOCK_STATUS_LABELS)
    df["status_color"] = df["stock_status"].map(STOCK_STATUS_COLORS)

    available = [c for c in _TABLE_COLUMNS if c in df.columns]
    return df[available].reset_index(drop=True)


def get_low_stock_items(items_df: pd.DataFrame) -> pd.DataFrame:
    """Items at or below their minimum, emptiest first."""
    if items_df.empty:
        return pd.DataFrame(columns=_TABLE_COLUMNS)
    table = get_inventory_table(items_df)
    low = table[table["stock_status"] == "low"]
    return low.sort_values("stock", kind="stable").reset_index(drop=True)


def get_available_categories(items_df: pd.DataFrame) -> list[str]:
    """Return sorted list of item categories for UI dropdowns."""
    if items_df.empty or "category" not in items_df.columns:
        return []
    return sorted(items_df["category"].dropna().unique().tolist())


def get_notification_panel(notifications: list[Notification]) -> pd.DataFrame:
    """Notification rows in display order with badge colour and icon."""
    rows = []
    for n in notifications:
        style = n.style
        rows.append({
            "id": n.id,
            "title": n.title,
            "message": n.message,
            "kind": n.kind,
            "read": n.read,
            "created_at": n.created_at,
            "link": n.link,
            "color": style["color"],
            "icon": style["icon"],
        })
    return pd.DataFrame(rows, columns=_NOTIFICATION_COLUMNS)
