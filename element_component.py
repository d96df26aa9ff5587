import streamlit as st
import pandas as pd

from domain.models import OrderAggregate
from domain.payment_policy import FULL, HALF, is_cleared
from domain.session import ANONYMOUS, is_allowed, login, logout
from services.order_collection_service import OrderCollectionController
from store_client import StoreSettings, configure_logging, get_order_collection
from utils.formatting import format_amount, format_balance


def get_settings() -> StoreSettings:
    if "settings" not in st.session_state:
        settings = StoreSettings.from_env()
        configure_logging(settings)
        st.session_state["settings"] = settings
    return st.session_state["settings"]


def get_controller() -> OrderCollectionController:
    if "order_collection" not in st.session_state:
        st.session_state["order_collection"] = get_order_collection(get_settings())
    return st.session_state["order_collection"]


def flash(message: str, ok: bool = True) -> None:
    st.session_state["flash"] = (ok, message)


def show_flash() -> None:
    # messages are shown once, then dropped
    ok, message = st.session_state.pop("flash", (True, ""))
    if not message:
        return
    if ok:
        st.success(message)
    else:
        st.error(message)


def require_login() -> None:
    """
    Gate for every screen: renders the login form and stops the page
    unless the current session is authenticated.
    """
    session = st.session_state.get("session", ANONYMOUS)
    if is_allowed(session):
        with st.sidebar:
            st.caption(f"Logged in as **{session.username}**")
            if st.button("Logout"):
                st.session_state["session"] = logout()
                st.rerun()
        return

    settings = get_settings()
    with st.form("login_form"):
        st.subheader("Login")
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")

        if st.form_submit_button("Login"):
            session = login(
                username,
                password,
                expected_username=settings.username,
                expected_password=settings.password,
            )
            if is_allowed(session):
                st.session_state["session"] = session
                st.rerun()
            else:
                st.error("Invalid username or password")
    st.stop()


def _as_float(value):
    return None if value is None else float(value)


@st.dialog("Confirm")
def confirmation_dialog_delete_all(controller: OrderCollectionController):
    df = pd.DataFrame(
        [(order.display_name, format_amount(order.grand_total)) for order in controller.orders],
        columns=["Client", "Grand Total"],
    )
    st.write(f"Delete all **{len(df)}** orders?")
    st.dataframe(df, hide_index=True)

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Yes", type="primary", key="confirm_yes"):
            status, msg = controller.delete_all()
            flash(msg, status)
            st.rerun()
    with col_no:
        if st.button("No"):
            st.rerun()


def order_editor(order: OrderAggregate, key: str) -> None:
    """
    Form controls for one order. Every change goes through the order's own
    methods, so totals and payment status are always recomputed.
    """
    order.client_name = st.text_input("Client Name", value=order.client_name, key=f"{key}_client")

    bill_mode = st.radio(
        "Bill",
        (FULL, HALF),
        index=0 if order.bill_mode == FULL else 1,
        format_func=lambda mode: "Full Bill" if mode == FULL else "Half Bill",
        horizontal=True,
        key=f"{key}_bill_mode",
    )
    order.set_bill_mode(bill_mode)

    st.subheader("Product Details")
    for item in order.products:
        col_name, col_count, col_price, col_total, col_remove = st.columns([3, 1.5, 1.5, 1.5, 1])

        with col_name:
            name = st.text_input("Product Name", value=item.name, key=f"{key}_name_{item.id}")
            order.update_line_item(item.id, "name", name)
        with col_count:
            count = st.number_input(
                "Quantity", min_value=0.0, value=_as_float(item.count), key=f"{key}_count_{item.id}"
            )
            order.update_line_item(item.id, "count", count)
        with col_price:
            price = st.number_input(
                "Price", min_value=0.0, step=0.01, value=_as_float(item.price), key=f"{key}_price_{item.id}"
            )
            order.update_line_item(item.id, "price", price)
        with col_total:
            st.metric("Total", format_amount(item.total))
        with col_remove:
            if st.button("Remove", key=f"{key}_remove_{item.id}", disabled=len(order.products) == 1):
                order.remove_line_item(item.id)
                st.rerun()

    if st.button("➕ Add Product", key=f"{key}_add"):
        order.add_line_item()
        st.rerun()

    st.divider()

    if order.bill_mode == FULL:
        # must run before the amount widget exists so its state can be set
        if not is_cleared(order.payment_status) and st.button("Mark as fully paid", key=f"{key}_clear"):
            order.clear_payment()
            st.session_state[f"{key}_amount_paid"] = float(order.amount_paid)

        amount = st.number_input(
            "Amount Paid",
            min_value=0.0,
            step=0.01,
            value=float(order.amount_paid),
            key=f"{key}_amount_paid",
        )
        if amount != order.amount_paid:
            order.set_amount_paid(amount)

    col_total, col_paid, col_balance = st.columns(3)
    col_total.metric("Grand Total", format_amount(order.grand_total))
    if order.bill_mode == FULL:
        col_paid.metric("Amount Paid", format_amount(order.amount_paid))
        col_balance.metric("Balance", format_balance(order.balance_due))
        if is_cleared(order.payment_status):
            st.success("✓ Payment Cleared")
        else:
            st.warning("⏳ Payment Pending")
