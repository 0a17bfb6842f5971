"""
Almacén — Interactive Dashboard

Run with:  streamlit run app.py
"""

import logging

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from almacen_dashboard.config import (
    CURRENCIES,
    DEFAULT_USER_ID,
    DEMO_MODE,
    LOG_FORMAT,
    LOG_LEVEL,
    MOVEMENT_KINDS,
    MOVEMENT_SUBKINDS,
    OPERATION_NAME,
    STOCK_STATUS_COLORS,
)
from almacen_dashboard.dashboard import (
    get_available_categories,
    get_inventory_overview,
    get_inventory_table,
    get_low_stock_items,
    get_notification_panel,
)
from almacen_dashboard.kardex import MovementError, load_movements, register_movement
from almacen_dashboard.loaders import load_inventory_items
from almacen_dashboard.notifications import NotificationFeed, rebind_feed
from almacen_dashboard.simulator import seed_store
from almacen_dashboard.store import MemoryStore, StoreError, open_store

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, datefmt="%H:%M:%S")
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Almacén Dashboard",
    page_icon="⛏️",
    layout="wide",
    initial_sidebar_state="expanded",
)

GENERIC_FAILURE = "No se pudo completar la acción. Inténtalo de nuevo."


# ---------------------------------------------------------------------------
# Store and data loading
# ---------------------------------------------------------------------------
@st.cache_resource
def get_store():
    if not DEMO_MODE:
        try:
            return open_store()
        except StoreError as e:
            logger.warning("Firestore unavailable, using demo data: %s", e)
    store = MemoryStore()
    seed_store(store, DEFAULT_USER_ID)
    return store


@st.cache_data(ttl=60)
def load_items(_store) -> pd.DataFrame:
    return load_inventory_items(_store)


def get_feed(store, user_id: str | None) -> NotificationFeed:
    """One live feed per browser session, re-pointed when the user changes.

    The listener stays open for the life of the browser session. Streamlit
    has no session-end hook, so it is released by "Cerrar sesión", by a
    user switch, or when the cached store is replaced.
    """
    feed = rebind_feed(st.session_state.get("notification_feed"), store, user_id)
    st.session_state["notification_feed"] = feed
    return feed


def sign_out():
    feed = st.session_state.pop("notification_feed", None)
    if feed is not None:
        feed.stop()
    st.session_state["user_id"] = ""


store = get_store()

try:
    items = load_items(store)
    items_error = False
except StoreError:
    items = pd.DataFrame()
    items_error = True

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title(OPERATION_NAME)
st.sidebar.markdown("Almacén y notificaciones")
st.sidebar.divider()

st.session_state.setdefault("user_id", DEFAULT_USER_ID)
user_id = st.sidebar.text_input("Usuario", key="user_id")
feed = get_feed(store, user_id or None)

page = st.sidebar.radio(
    "Navigate",
    ["Almacén", "Kardex", "Notificaciones"],
)
st.sidebar.metric("Notificaciones sin leer", feed.unread_count)

if st.sidebar.button("Actualizar datos"):
    load_items.clear()
    st.rerun()

st.sidebar.button("Cerrar sesión", on_click=sign_out, disabled=not user_id)

st.sidebar.divider()
st.sidebar.caption("Demo data" if isinstance(store, MemoryStore) else "Firestore")


# ---------------------------------------------------------------------------
# Helper: KPI card
# ---------------------------------------------------------------------------
def kpi_card(label: str, value: str, color: str = "#3498db"):
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {color}22, {color}11);
                    border-left: 4px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600; text-transform: uppercase;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">{value}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


# ===========================================================================
# PAGE: Almacén
# ===========================================================================
if page == "Almacén":
    st.title("Almacén")

    if items_error:
        st.warning("No se pudieron cargar los items del almacén.")

    overview = get_inventory_overview(items)

    cols = st.columns(2 + len(CURRENCIES))
    with cols[0]:
        kpi_card("Total Items", f"{overview['total_items']:,}")
    with cols[1]:
        kpi_card("Alertas de Stock", f"{overview['low_stock']:,}", STOCK_STATUS_COLORS["low"])
    for i, currency in enumerate(CURRENCIES):
        with cols[2 + i]:
            kpi_card(f"Valor {currency}", overview["value_labels"][currency], "#2ecc71")

    st.divider()

    # Stock vs minimum for items needing attention
    low = get_low_stock_items(items)
    if not low.empty:
        st.subheader("Stock vs Mínimo — Items en alerta")
        fig = go.Figure()
        fig.add_trace(go.Bar(
            x=low["name"],
            y=low["stock"],
            name="Stock Actual",
            marker_color=STOCK_STATUS_COLORS["low"],
        ))
        fig.add_trace(go.Scatter(
            x=low["name"],
            y=low["min_stock"],
            name="Stock Mínimo",
            mode="markers",
            marker=dict(size=12, symbol="line-ew-open", color="#333", line=dict(width=3)),
        ))
        fig.update_layout(
            height=380,
            yaxis_title="Cantidad",
            plot_bgcolor="rgba(0,0,0,0)",
            margin=dict(l=10, r=10, t=10, b=40),
        )
        st.plotly_chart(fig, use_container_width=True)

    st.subheader("Inventario")
    col1, col2 = st.columns([2, 1])
    with col1:
        search = st.text_input("Buscar por nombre o código")
    with col2:
        categories = get_available_categories(items)
        category = st.selectbox("Categoría", ["Todas", *categories])

    table = get_inventory_table(items, search=search, category=None if category == "Todas" else category)
    if table.empty:
        st.info("No hay items registrados")
    else:
        def color_status(val):
            color = STOCK_STATUS_COLORS.get("low" if val == "Stock Bajo" else "normal")
            return f"background-color: {color}22; color: {color}"

        display_cols = ["code", "name", "category", "unit", "stock", "min_stock", "avg_cost", "currency", "status_label"]
        available_cols = [c for c in display_cols if c in table.columns]
        styled = table[available_cols].style.map(color_status, subset=["status_label"])
        st.dataframe(styled, use_container_width=True, hide_index=True)


# ===========================================================================
# PAGE: Kardex
# ===========================================================================
elif page == "Kardex":
    st.title("Kardex")

    if items.empty:
        st.info("No hay items registrados")
    else:
        labels = {row["id"]: f"{row['code'] or ''} — {row['name'] or row['id']}" for _, row in items.iterrows()}
        item_id = st.selectbox("Item", list(labels), format_func=labels.get)

        st.markdown("**Registrar movimiento**")
        # Outside the form so the quantity bound follows the selected kind
        kind = st.selectbox("Tipo", MOVEMENT_KINDS)
        with st.form("movement"):
            c1, c2 = st.columns(2)
            with c1:
                subkind = st.selectbox("Subtipo", MOVEMENT_SUBKINDS)
            with c2:
                if kind == "AJUSTE":
                    quantity = st.number_input(
                        "Cantidad", value=1.0, step=1.0,
                        help="Positivo suma stock, negativo lo descuenta",
                    )
                else:
                    quantity = st.number_input("Cantidad", min_value=0.01, value=1.0, step=1.0)
            reference = st.text_input("Referencia (guía, orden, vale)")
            remarks = st.text_input("Observación")
            submitted = st.form_submit_button("Registrar")

        if submitted:
            try:
                result = register_movement(
                    store, item_id, kind, subkind, quantity,
                    reference=reference, user=user_id or "Sistema", remarks=remarks,
                )
            except MovementError as e:
                st.error(str(e))
            except StoreError:
                st.error(GENERIC_FAILURE)
            else:
                st.success(f"Stock: {result['balance_before']:g} → {result['balance_after']:g}")
                load_items.clear()

        try:
            kardex = load_movements(store, item_id)
        except StoreError:
            kardex = pd.DataFrame()
        if kardex.empty:
            st.info("Sin movimientos registrados")
        else:
            display_cols = ["created_at", "kind", "subkind", "quantity", "balance_before",
                            "balance_after", "reference", "user", "remarks"]
            st.dataframe(kardex[display_cols], use_container_width=True, hide_index=True)


# ===========================================================================
# PAGE: Notificaciones
# ===========================================================================
else:
    st.title("Notificaciones")

    panel = get_notification_panel(feed.notifications)

    col1, col2 = st.columns([3, 1])
    with col1:
        st.caption(f"{feed.unread_count} sin leer")
    with col2:
        if feed.unread_count and st.button("Marcar todo como leído"):
            if feed.mark_all_read():
                st.rerun()
            else:
                st.error(GENERIC_FAILURE)

    if panel.empty:
        st.info("No tienes notificaciones")

    for _, row in panel.iterrows():
        weight = 700 if not row["read"] else 400
        background = f"{row['color']}15" if not row["read"] else "transparent"
        when = row["created_at"].strftime("%d %b %Y %H:%M") if pd.notna(row["created_at"]) else ""

        c1, c2, c3 = st.columns([8, 2, 1])
        with c1:
            st.markdown(
                f"<div style='border-left: 3px solid {row['color']}; background: {background}; "
                f"padding: 6px 10px; margin: 4px 0; border-radius: 4px;'>"
                f"{row['icon']} <span style='font-weight:{weight};'>{row['title']}</span><br>"
                f"<span style='font-size: 13px; color: #555;'>{row['message']}</span><br>"
                f"<span style='font-size: 11px; color: #999;'>{when}</span></div>",
                unsafe_allow_html=True,
            )
        with c2:
            if not row["read"] and st.button("Marcar leído", key=f"read-{row['id']}"):
                if feed.mark_read(row["id"]):
                    st.rerun()
                else:
                    st.error(GENERIC_FAILURE)
        with c3:
            # Separate control: deleting never marks as read
            if st.button("🗑️", key=f"delete-{row['id']}"):
                if feed.delete(row["id"]):
                    st.rerun()
                else:
                    st.error(GENERIC_FAILURE)
