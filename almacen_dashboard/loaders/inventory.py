"""
Loader for warehouse items (``almacen_items``).

Each document carries the front end's Spanish field names; the loader
renames them via INVENTORY_FIELDS and coerces the stock/cost fields to
floats. Missing fields come through as None, never as errors.
"""

import logging
from typing import Iterable

import pandas as pd

from ..config import INVENTORY_COLLECTION, INVENTORY_FIELDS, INVENTORY_NUMERIC_COLUMNS
from ..store import StoreError
from .utils import safe_float

logger = logging.getLogger(__name__)

_COLUMNS = ["id", *INVENTORY_FIELDS.values()]


def inventory_frame_from_documents(docs: Iterable[dict]) -> pd.DataFrame:
    """Build the item DataFrame from raw documents.

    Returns
    -------
    DataFrame with columns:
        id, code, name, item_type, category, unit, stock, min_stock,
        avg_cost, currency, location
    sorted by name (unnamed items last).
    """
    records = []
    for doc in docs:
        record = {"id": doc.get("id")}
        for field, column in INVENTORY_FIELDS.items():
            record[column] = doc.get(field)
        for column in INVENTORY_NUMERIC_COLUMNS:
            record[column] = safe_float(record[column])
        records.append(record)

    df = pd.DataFrame(records, columns=_COLUMNS)
    if not df.empty:
        df = df.sort_values("name", na_position="last", kind="stable").reset_index(drop=True)
    return df


def load_inventory_items(store, item_type: str | None = None) -> pd.DataFrame:
    """Read the full item collection, optionally restricted to one ``tipo``.

    Store failures are logged and re-raised; callers decide whether to
    show an empty state.
    """
    filters = [("tipo", "==", item_type)] if item_type else []
    try:
        docs = store.list(INVENTORY_COLLECTION, filters=filters)
    except StoreError:
        logger.exception("Failed to load inventory items (tipo=%s)", item_type)
        raise

    df = inventory_frame_from_documents(docs)
    logger.info("Loaded %d inventory items", len(df))
    return df
