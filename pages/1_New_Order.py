import streamlit as st

from domain.models import OrderAggregate
from element_component import flash, get_controller, order_editor, require_login, show_flash

st.set_page_config(page_title="New Order", page_icon="➕")
st.sidebar.header("➕ New Order")

require_login()

controller = get_controller()

# -----------------------------------------------------------------------------
# Draft lives in the session until it is saved
# -----------------------------------------------------------------------------
if "draft_order" not in st.session_state:
    st.session_state["draft_order"] = OrderAggregate()
    st.session_state["draft_version"] = st.session_state.get("draft_version", 0) + 1

draft: OrderAggregate = st.session_state["draft_order"]

st.title("➕ New Order")
show_flash()

order_editor(draft, key=f"draft_{st.session_state['draft_version']}")

st.divider()

if st.button("Save Order", type="primary", disabled=not draft.has_billable_items):
    status, msg, created = controller.create_order(draft)
    flash(msg, status)
    if status:
        # start a fresh draft; widget keys change with the version
        del st.session_state["draft_order"]
        st.switch_page("Order_Directory.py")
    st.rerun()

if st.button("View Clients"):
    st.switch_page("Order_Directory.py")
