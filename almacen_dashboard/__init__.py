"""
Almacén — warehouse and notification back end for the operations dashboard.

View-model layer over the Firestore collections the web front end writes:
warehouse items, kardex movements and per-user notifications.

To connect to Streamlit:
    Call dashboard.get_inventory_overview(items_df) for the KPI cards and
    hold a notifications.NotificationFeed in session state for the
    notification panel.

To run without Firestore:
    Set ERP_DASHBOARD_DEMO=1. The front end then opens a store.MemoryStore
    seeded by simulator.seed_store().

To add a collection:
    Add its name and a document-field -> column map to config, then a
    loader in almacen_dashboard.loaders that renames and coerces fields.
"""
