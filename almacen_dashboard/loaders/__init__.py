"""Document loaders for the Firestore collections the dashboard reads."""

from .inventory import inventory_frame_from_documents, load_inventory_items
from .notifications import notification_from_document

__all__ = [
    "inventory_frame_from_documents",
    "load_inventory_items",
    "notification_from_document",
]
