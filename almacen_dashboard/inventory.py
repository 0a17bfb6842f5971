"""
Inventory aggregation — pure functions with no side effects.

Provides low-stock flagging, per-currency valuation and the summary
statistics behind the warehouse KPI cards. Every call recomputes from
the full snapshot it is given; nothing is carried between calls.
"""

import logging
from typing import Iterable

import pandas as pd

from .config import (
    CURRENCIES,
    CURRENCY_SYMBOLS,
    INVENTORY_NUMERIC_COLUMNS,
    PRIMARY_CURRENCY,
)

logger = logging.getLogger(__name__)


def build_inventory_frame(items: pd.DataFrame | Iterable[dict]) -> pd.DataFrame:
    """Normalise items for aggregation.

    Accepts the loader's DataFrame or any iterable of item mappings using
    the canonical column names. Missing or non-numeric stock, min_stock
    and avg_cost become 0; missing or unrecognised currencies become the
    primary currency.
    """
    if isinstance(items, pd.DataFrame):
        df = items.copy()
    else:
        df = pd.DataFrame(list(items))

    for col in INVENTORY_NUMERIC_COLUMNS:
        if col not in df.columns:
            df[col] = 0.0
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0).astype(float)

    if "currency" not in df.columns:
        df["currency"] = PRIMARY_CURRENCY
    df["currency"] = df["currency"].where(df["currency"].isin(CURRENCIES), PRIMARY_CURRENCY)

    return df


def flag_low_stock(items: pd.DataFrame | Iterable[dict]) -> pd.DataFrame:
    """Return the items with ``low_stock`` (bool) and ``stock_status`` columns added.

    Low stock is ``stock <= min_stock``; an item sitting exactly on its
    minimum already counts.
    """
    df = build_inventory_frame(items)
    df["low_stock"] = df["stock"] <= df["min_stock"]
    df["stock_status"] = df["low_stock"].map({True: "low", False: "normal"})
    return df


def value_by_currency(items: pd.DataFrame | Iterable[dict]) -> dict[str, float]:
    """Total stock value (stock × avg_cost) per currency bucket.

    Buckets are never converted or summed into one another.
    """
    df = build_inventory_frame(items)
    values = df["stock"] * df["avg_cost"]
    totals = values.groupby(df["currency"]).sum()
    return {currency: float(totals.get(currency, 0.0)) for currency in CURRENCIES}


def summarise_inventory(items: pd.DataFrame | Iterable[dict]) -> dict:
    """Return a dict suitable for the warehouse KPI cards.

    Returns
    -------
    {
        "total_items": 2,
        "low_stock": 1,
        "value_by_currency": {"PEN": 20.0, "USD": 3.0},
    }
    """
    df = flag_low_stock(items)
    summary = {
        "total_items": int(len(df)),
        "low_stock": int(df["low_stock"].sum()),
        "value_by_currency": value_by_currency(df),
    }
    logger.info(
        "Inventory summary: %d items, %d low stock",
        summary["total_items"], summary["low_stock"],
    )
    return summary


def format_currency(amount: float, currency: str = PRIMARY_CURRENCY) -> str:
    """Format an amount for a KPI card, e.g. ``S/ 1,234.50`` or ``$ 3.00``."""
    symbol = CURRENCY_SYMBOLS.get(currency, CURRENCY_SYMBOLS[PRIMARY_CURRENCY])
    return f"{symbol} {amount:,.2f}"
