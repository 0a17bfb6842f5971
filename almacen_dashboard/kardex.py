"""
Stock movements (kardex).

A movement changes an item's ``stockActual`` and appends a row to
``almacen_movimientos`` inside one store transaction, so the item's
balance and its kardex never disagree.
"""

import logging

import pandas as pd

from .config import (
    DEFAULT_MOVEMENT_USER,
    INVENTORY_COLLECTION,
    MOVEMENT_FIELDS,
    MOVEMENT_KINDS,
    MOVEMENT_SUBKINDS,
    MOVEMENTS_COLLECTION,
)
from .loaders.utils import normalise_timestamp, rename_fields, safe_float
from .store import StoreError

logger = logging.getLogger(__name__)


class MovementError(ValueError):
    """A movement was rejected before anything was written."""


def check_quantity(kind: str, quantity: float) -> None:
    """ENTRADA and SALIDA take a positive quantity; AJUSTE any non-zero delta."""
    if kind == "AJUSTE":
        if quantity == 0:
            raise MovementError("Adjustment quantity must not be zero")
    elif quantity <= 0:
        raise MovementError(f"{kind} quantity must be positive, got {quantity:g}")


def apply_movement(current_stock: float, kind: str, quantity: float) -> float:
    """Return the stock balance after a movement.

    - ENTRADA: adds ``quantity``
    - SALIDA:  subtracts ``quantity``; more than the current stock is rejected
    - AJUSTE:  ``quantity`` is a signed delta
    """
    if kind not in MOVEMENT_KINDS:
        raise MovementError(f"Unknown movement kind: {kind!r}")
    check_quantity(kind, quantity)
    if kind == "ENTRADA":
        return current_stock + quantity
    if kind == "SALIDA":
        if current_stock < quantity:
            raise MovementError(
                f"Insufficient stock. Current: {current_stock:g}, requested: {quantity:g}"
            )
        return current_stock - quantity
    return current_stock + quantity


def register_movement(
    store,
    item_id: str,
    kind: str,
    subkind: str,
    quantity: float,
    reference: str = "",
    user: str = DEFAULT_MOVEMENT_USER,
    remarks: str = "",
    unit_price: float = 0.0,
    supplier: str = "",
    area: str = "",
    responsible: str = "",
) -> dict:
    """Apply a movement to an item and record it in the kardex.

    Returns
    -------
    {"movement_id": ..., "balance_before": ..., "balance_after": ...}

    Raises MovementError for invalid input, a missing item or
    insufficient stock; StoreError when the store call itself fails.
    """
    if not item_id:
        raise MovementError("Item id is required")
    if kind not in MOVEMENT_KINDS:
        raise MovementError(f"Unknown movement kind: {kind!r}")
    if subkind not in MOVEMENT_SUBKINDS:
        raise MovementError(f"Unknown movement subkind: {subkind!r}")
    check_quantity(kind, quantity)

    def _apply(transaction):
        item = transaction.get(INVENTORY_COLLECTION, item_id)
        if item is None:
            raise MovementError(f"Item {item_id} does not exist")

        balance_before = safe_float(item.get("stockActual")) or 0.0
        balance_after = apply_movement(balance_before, kind, quantity)
        timestamp = store.server_timestamp()

        transaction.update(INVENTORY_COLLECTION, item_id, {
            "stockActual": balance_after,
            "updatedAt": timestamp,
        })
        movement_id = transaction.add(MOVEMENTS_COLLECTION, {
            "itemId": item_id,
            "tipo": kind,
            "subtipo": subkind,
            "cantidad": abs(quantity),
            "saldoAnterior": balance_before,
            "saldoNuevo": balance_after,
            "fecha": timestamp,
            "referencia": reference,
            "usuario": user,
            "observacion": remarks,
            "precioUnitario": unit_price,
            "proveedor": supplier,
            "area": area,
            "responsable": responsible,
        })
        return {
            "movement_id": movement_id,
            "balance_before": balance_before,
            "balance_after": balance_after,
        }

    try:
        result = store.run_transaction(_apply)
    except StoreError:
        logger.exception("Error registering %s movement on item %s", kind, item_id)
        raise

    logger.info(
        "%s/%s on %s: %g -> %g",
        kind, subkind, item_id, result["balance_before"], result["balance_after"],
    )
    return result


def load_movements(store, item_id: str) -> pd.DataFrame:
    """Kardex for one item, newest first.

    Returns
    -------
    DataFrame with columns:
        id, item_id, kind, subkind, quantity, balance_before, balance_after,
        created_at, reference, user, remarks, unit_price, supplier, area,
        responsible
    """
    columns = ["id", *MOVEMENT_FIELDS.values()]
    try:
        docs = store.list(
            MOVEMENTS_COLLECTION,
            filters=[("itemId", "==", item_id)],
            order_by="fecha",
            descending=True,
        )
    except StoreError:
        logger.exception("Failed to load movements for item %s", item_id)
        raise
    if not docs:
        return pd.DataFrame(columns=columns)

    records = [rename_fields(doc, MOVEMENT_FIELDS) for doc in docs]
    df = pd.DataFrame(records).reindex(columns=columns)
    df["created_at"] = df["created_at"].map(normalise_timestamp)
    logger.info("Loaded %d movements for item %s", len(df), item_id)
    return df
