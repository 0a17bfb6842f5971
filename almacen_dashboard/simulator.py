"""
Simulated data generator for the warehouse dashboard.

Seeds a document store with synthetic items, notifications and kardex
movements so the dashboard runs without Firestore credentials.
All values are synthetic.
"""

import numpy as np
import pandas as pd

from .config import INVENTORY_COLLECTION, MOVEMENTS_COLLECTION, NOTIFICATIONS_COLLECTION
from .kardex import register_movement

# Seed for reproducibility
_RNG = np.random.default_rng(42)

# ---------------------------------------------------------------------------
# Item catalogue: (code, name, tipo, categoria, unidad, typical cost, moneda)
# ---------------------------------------------------------------------------
_ITEMS = [
    ("MAT-001", "Bolas de acero 3\"", "MATERIAL", "Molienda", "t", 4200.0, "USD"),
    ("MAT-002", "Bolas de acero 2\"", "MATERIAL", "Molienda", "t", 4350.0, "USD"),
    ("MAT-003", "Chaquetas de molino", "MATERIAL", "Molienda", "und", 1850.0, "USD"),
    ("MAT-004", "Xantato Z-11", "MATERIAL", "Reactivos", "kg", 9.8, "PEN"),
    ("MAT-005", "Espumante MIBC", "MATERIAL", "Reactivos", "kg", 12.4, "PEN"),
    ("MAT-006", "Sulfato de cobre", "MATERIAL", "Reactivos", "kg", 7.6, "PEN"),
    ("MAT-007", "Cal viva", "MATERIAL", "Reactivos", "t", 520.0, "PEN"),
    ("MAT-008", "Cianuro de sodio", "MATERIAL", "Reactivos", "kg", 3.1, "USD"),
    ("MAT-009", "Petróleo D2", "MATERIAL", "Combustibles", "gal", 15.9, "PEN"),
    ("MAT-010", "Aceite hidráulico ISO 68", "MATERIAL", "Lubricantes", "gal", 38.0, "PEN"),
    ("MAT-011", "Grasa multipropósito", "MATERIAL", "Lubricantes", "kg", 21.5, None),
    ("MAT-012", "Fajas transportadoras 36\"", "MATERIAL", "Repuestos", "m", 410.0, "USD"),
    ("MAT-013", "Polines de carga", "MATERIAL", "Repuestos", "und", 185.0, "PEN"),
    ("MAT-014", "Mallas zaranda 1/2\"", "MATERIAL", "Repuestos", "und", 960.0, "PEN"),
    ("MAT-015", "Guantes de nitrilo", "MATERIAL", "EPP", "par", 6.5, "PEN"),
    ("MAT-016", "Respiradores 3M", "MATERIAL", "EPP", "und", 48.0, None),
    ("MIN-001", "Mineral aurífero cancha 1", "MINERAL", "Mineral", "t", 310.0, "USD"),
    ("MIN-002", "Mineral aurífero cancha 2", "MINERAL", "Mineral", "t", 285.0, "USD"),
    ("MIN-003", "Relave de reproceso", "MINERAL", "Mineral", "t", 42.0, "PEN"),
    ("MIN-004", "Concentrado de cobre", "MINERAL", "Concentrado", "t", 1650.0, "USD"),
]

_NOTIFICATIONS = [
    ("Solicitud Creada", "Se ha creado una solicitud por S/ 450.00", "info", "/finanzas/caja-chica", True),
    ("Solicitud Aprobada", "Tu solicitud por S/ 450.00 ha sido aprobada.", "success", "/finanzas/caja-chica", True),
    ("Stock bajo", "Bolas de acero 3\" por debajo del mínimo", "warning", "/almacen/materiales", False),
    ("Orden de compra emitida", "OC-2024-118 enviada al proveedor", "info", "/compras/ordenes", False),
    ("Solicitud Rechazada", "Tu solicitud por S/ 1,200.00 ha sido rechazada.", "error", "/finanzas/caja-chica", False),
    ("Ticket de balanza", "Ingreso de 32.5 t registrado en garita", "success", "/balanza", False),
]


def generate_inventory_items() -> list[dict]:
    """Item documents with stock scattered around each item's minimum."""
    docs = []
    for code, name, tipo, categoria, unidad, cost, moneda in _ITEMS:
        min_stock = float(_RNG.integers(5, 60))
        stock = float(max(0, round(min_stock * _RNG.uniform(0.4, 2.5))))
        doc = {
            "codigo": code,
            "nombre": name,
            "tipo": tipo,
            "categoria": categoria,
            "unidad": unidad,
            "stockActual": stock,
            "stockMinimo": min_stock,
            "costoPromedio": round(cost * _RNG.uniform(0.9, 1.1), 2),
            "ubicacion": f"Almacén {_RNG.integers(1, 4)}",
        }
        if moneda:
            doc["moneda"] = moneda
        docs.append(doc)
    return docs


def generate_notifications(user_id: str, now: pd.Timestamp | None = None) -> list[dict]:
    """Notification documents for ``user_id`` spread over the last few days."""
    if now is None:
        now = pd.Timestamp.now(tz="UTC")
    docs = []
    for i, (titulo, mensaje, tipo, link, leido) in enumerate(_NOTIFICATIONS):
        created = now - pd.Timedelta(hours=int(_RNG.integers(1, 12)) + 12 * (len(_NOTIFICATIONS) - i))
        docs.append({
            "userId": user_id,
            "titulo": titulo,
            "mensaje": mensaje,
            "tipo": tipo,
            "link": link,
            "leido": leido,
            "fecha": created.to_pydatetime(),
        })
    return docs


def seed_store(store, user_id: str, n_movements: int = 12) -> dict:
    """Populate ``store`` and return the number of documents written per collection."""
    item_ids = [store.add(INVENTORY_COLLECTION, doc) for doc in generate_inventory_items()]
    for doc in generate_notifications(user_id):
        store.add(NOTIFICATIONS_COLLECTION, doc)

    for _ in range(n_movements):
        item_id = item_ids[int(_RNG.integers(0, len(item_ids)))]
        register_movement(
            store,
            item_id,
            "ENTRADA",
            "COMPRA",
            float(_RNG.integers(1, 20)),
            reference=f"GR-{int(_RNG.integers(1000, 9999))}",
            supplier="Proveedor simulado",
        )

    return {
        INVENTORY_COLLECTION: len(item_ids),
        NOTIFICATIONS_COLLECTION: len(_NOTIFICATIONS),
        MOVEMENTS_COLLECTION: n_movements,
    }
