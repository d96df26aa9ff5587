import streamlit as st

from domain.payment_policy import FULL, is_cleared
from element_component import (
    confirmation_dialog_delete_all,
    flash,
    get_controller,
    require_login,
    show_flash,
)
from services.order_collection_service import FILTER_MODES
from utils.formatting import format_amount, format_timestamp
from utils.order_table import line_items_frame, order_summary, orders_display_frame

st.set_page_config(
    page_title="Client Orders",
    page_icon="🧾"
)

st.sidebar.header("🧾 Client Orders")

require_login()

controller = get_controller()

if "orders_loaded" not in st.session_state:
    st.session_state["orders_loaded"] = controller.refresh()[0]

st.title("🧾 Client Orders")
show_flash()

col_refresh, col_new, col_delete_all = st.columns(3)

with col_refresh:
    if st.button("Refresh" if st.session_state["orders_loaded"] else "Try Again"):
        status, msg = controller.refresh()
        st.session_state["orders_loaded"] = status
        flash(msg, status)
        st.rerun()
with col_new:
    if st.button("➕ New Order"):
        st.switch_page("pages/1_New_Order.py")
with col_delete_all:
    if st.button("Delete All", disabled=not controller.orders):
        confirmation_dialog_delete_all(controller)

if controller.error_message:
    st.error(controller.error_message)
    controller.clear_error()

# -----------------------------------------------------------------------------
# Totals over the whole collection (ignores the filter below)
# -----------------------------------------------------------------------------
stats = controller.stats()
col_count, col_total, col_received, col_pending = st.columns(4)
col_count.metric("Orders", stats.count)
col_total.metric("Total Amount", format_amount(stats.total_grand_amount))
col_received.metric("Received", format_amount(stats.total_received))
col_pending.metric("Pending", format_amount(stats.total_pending))

st.divider()

mode = st.radio(
    "Show",
    FILTER_MODES,
    format_func=str.title,
    horizontal=True,
    key="status_filter",
)
orders = controller.filtered(mode)

if not orders:
    st.info("No saved orders found. Create your first order!")
    st.stop()

st.dataframe(orders_display_frame(orders), width='stretch', hide_index=True)

csv = orders_display_frame(controller.orders).to_csv(index=False).encode("utf-8")
st.download_button(
    "Download as CSV",
    data=csv,
    file_name="client_orders.csv",
    mime="text/csv",
)

st.divider()

# -----------------------------------------------------------------------------
# One expander per order
# -----------------------------------------------------------------------------
for order in orders:
    status_label = "✓ Cleared" if is_cleared(order.payment_status) else "⏳ Pending"
    title = f"{order.display_name} | {format_timestamp(order.timestamp)} | {status_label}"

    with st.expander(title):
        st.dataframe(line_items_frame(order), width='stretch', hide_index=True)

        for label, value in order_summary(order).items():
            st.caption(f"{label}: **{value}**")

        col_edit, col_clear, col_delete = st.columns(3)

        with col_edit:
            if st.button("Edit", key=f"edit_{order.id}"):
                st.session_state["edit_order_id"] = order.id
                st.switch_page("pages/2_Edit_Order.py")
        with col_clear:
            can_clear = order.bill_mode == FULL and not is_cleared(order.payment_status)
            if st.button("Clear Payment", key=f"clear_{order.id}", disabled=not can_clear):
                status, msg = controller.clear_payment(order.id)
                flash(msg, status)
                st.rerun()
        with col_delete:
            if st.button("Delete", key=f"delete_{order.id}"):
                status, msg = controller.delete_one(order.id)
                flash(msg, status)
                st.rerun()
