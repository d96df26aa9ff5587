import streamlit as st

from element_component import flash, get_controller, order_editor, require_login, show_flash

st.set_page_config(page_title="Edit Order", page_icon="✏️")
st.sidebar.header("✏️ Edit Order")

require_login()

controller = get_controller()

order_id = st.session_state.get("edit_order_id")
if not order_id:
    st.info("Pick an order to edit from the client list.")
    if st.button("Back to List"):
        st.switch_page("Order_Directory.py")
    st.stop()

# -----------------------------------------------------------------------------
# Fresh copy from the store each time a different order is opened
# -----------------------------------------------------------------------------
loaded = st.session_state.get("editing_order")
if loaded is None or loaded.id != order_id:
    status, msg, loaded = controller.load_order(order_id)
    if not status:
        st.error("Error loading order. Please try again.")
        st.caption(msg)
        controller.clear_error()
        col_back, col_retry = st.columns(2)
        with col_back:
            if st.button("Back to List"):
                st.switch_page("Order_Directory.py")
        with col_retry:
            if st.button("Try Again"):
                st.rerun()
        st.stop()
    st.session_state["editing_order"] = loaded

order = st.session_state["editing_order"]

st.title(f"✏️ {order.display_name}")
show_flash()

order_editor(order, key=f"edit_{order.id}")

st.divider()

col_save, col_back = st.columns(2)

with col_save:
    if st.button("Update Order", type="primary"):
        status, msg, saved = controller.update_order(order)
        flash(msg, status)
        if status:
            del st.session_state["editing_order"]
            del st.session_state["edit_order_id"]
            st.switch_page("Order_Directory.py")
        st.rerun()
with col_back:
    if st.button("Back to List"):
        st.switch_page("Order_Directory.py")
