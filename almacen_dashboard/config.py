"""
Configuration: collection names, field maps, currencies, display styles.

Document fields in Firestore keep the Spanish names the web front end
writes; FIELD maps translate them to the canonical snake_case columns
used throughout the package.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------
PROJECT_DIR = Path(__file__).resolve().parent.parent

FIREBASE_CREDENTIALS = (
    os.getenv("FIREBASE_CREDENTIALS")
    or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    or str(PROJECT_DIR / "serviceAccountKey.json")
)
FIRESTORE_EMULATOR_HOST = os.getenv("FIRESTORE_EMULATOR_HOST")

# Forces the in-memory store even when credentials are present
DEMO_MODE = os.getenv("ERP_DASHBOARD_DEMO", "").lower() in {"1", "true", "yes"}
DEFAULT_USER_ID = os.getenv("ERP_DASHBOARD_USER_ID", "demo-user")
LOG_LEVEL = os.getenv("ERP_DASHBOARD_LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------
NOTIFICATIONS_COLLECTION = "notificaciones"
INVENTORY_COLLECTION = "almacen_items"
MOVEMENTS_COLLECTION = "almacen_movimientos"

# ---------------------------------------------------------------------------
# Field maps: document field -> canonical name
# ---------------------------------------------------------------------------
NOTIFICATION_FIELDS: dict[str, str] = {
    "userId": "user_id",
    "titulo": "title",
    "mensaje": "message",
    "leido": "read",
    "fecha": "created_at",
    "tipo": "kind",
    "link": "link",
}

INVENTORY_FIELDS: dict[str, str] = {
    "codigo": "code",
    "nombre": "name",
    "tipo": "item_type",
    "categoria": "category",
    "unidad": "unit",
    "stockActual": "stock",
    "stockMinimo": "min_stock",
    "costoPromedio": "avg_cost",
    "moneda": "currency",
    "ubicacion": "location",
}

MOVEMENT_FIELDS: dict[str, str] = {
    "itemId": "item_id",
    "tipo": "kind",
    "subtipo": "subkind",
    "cantidad": "quantity",
    "saldoAnterior": "balance_before",
    "saldoNuevo": "balance_after",
    "fecha": "created_at",
    "referencia": "reference",
    "usuario": "user",
    "observacion": "remarks",
    "precioUnitario": "unit_price",
    "proveedor": "supplier",
    "area": "area",
    "responsable": "responsible",
}

INVENTORY_NUMERIC_COLUMNS = ["stock", "min_stock", "avg_cost"]

# ---------------------------------------------------------------------------
# Currencies
# ---------------------------------------------------------------------------
# Values are never converted between currencies; each has its own total.
PRIMARY_CURRENCY = "PEN"
CURRENCIES = ("PEN", "USD")
CURRENCY_SYMBOLS = {
    "PEN": "S/",
    "USD": "$",
}

# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
NOTIFICATION_KINDS = ("info", "success", "warning", "error")
DEFAULT_NOTIFICATION_KIND = "info"

NOTIFICATION_STYLES: dict[str, dict] = {
    "info": {"color": "#3498db", "icon": "ℹ️"},
    "success": {"color": "#2ecc71", "icon": "✅"},
    "warning": {"color": "#f39c12", "icon": "⚠️"},
    "error": {"color": "#e74c3c", "icon": "❌"},
}

# ---------------------------------------------------------------------------
# Stock movements (kardex)
# ---------------------------------------------------------------------------
MOVEMENT_KINDS = ("ENTRADA", "SALIDA", "AJUSTE")
MOVEMENT_SUBKINDS = (
    "COMPRA",
    "INICIAL",
    "DEVOLUCION",
    "CONSUMO",
    "MERMA",
    "VENCIMIENTO",
    "CORRECCION",
    "TRANSFERENCIA",
    "PRODUCCION",
)
DEFAULT_MOVEMENT_USER = "Sistema"

# ---------------------------------------------------------------------------
# Stock status badges
# ---------------------------------------------------------------------------
STOCK_STATUS_LABELS = {
    "low": "Stock Bajo",
    "normal": "Normal",
}
STOCK_STATUS_COLORS = {
    "low": "#e74c3c",
    "normal": "#2ecc71",
}

OPERATION_NAME = "Almacén Central"
