"""
Streamlit Frontend for ISP Bookkeeping

This is the interface the office uses every day: recording payments and
expenses, keeping the subscriber list, and printing the monthly report
that the partners sign off.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages next to the form that caused them
3. Visual feedback for all operations
4. No hidden actions; every change is saved immediately

All state lives in one AppState per browser session. Page functions
receive it explicitly and never touch storage themselves.
"""

import asyncio
from datetime import date

import plotly.express as px
import streamlit as st

from bookkeeping.auth import (
    AuthError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    SelfDeletionError,
)
from bookkeeping.config import validate_all_settings
from bookkeeping.models import (
    ExpenseCategory,
    PaymentMethod,
    SubscriptionCategory,
    TransactionType,
    UserRole,
)
from bookkeeping.navigation import ADMIN_VIEWS, View, ViewRouter
from bookkeeping.orchestrator import create_app_state, create_store
from bookkeeping.reports import (
    MONTH_NAMES,
    filter_by_date_range,
    format_date,
    format_rupiah,
    month_label,
    report_filename,
    sort_by_date,
)
from bookkeeping.services.storage import StorageError
from bookkeeping.state import AppState


# Page configuration
st.set_page_config(
    page_title="ISP Bookkeeping",
    page_icon="📡",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_store():
    """Key-value store shared by all browser sessions (cached)."""
    return create_store()


def get_state() -> AppState:
    """
    This browser session's AppState, created and initialized once.

    The store is shared by every browser, so no session_id is passed: the
    login lives in st.session_state and a new browser starts logged out.
    """
    if "app_state" not in st.session_state:
        state = create_app_state(store=get_store())
        state.init()
        st.session_state.app_state = state
    return st.session_state.app_state


def main():
    """Main application entry point."""
    try:
        state = get_state()
    except StorageError as e:
        st.error(f"Could not open the books: {e}")
        st.stop()

    if not state.is_authenticated:
        render_login_page(state)
        return

    if state.must_change_password:
        render_password_change_page(state)
        return

    router = ViewRouter({
        View.DASHBOARD: render_dashboard_page,
        View.TRANSACTIONS: render_transactions_page,
        View.CUSTOMERS: render_customers_page,
        View.SETTINGS: render_settings_page,
    })

    # Sidebar navigation
    session = state.session
    st.sidebar.title("📡 ISP Bookkeeping")
    st.sidebar.caption(f"Logged in as **{session.username}** ({session.role.value})")
    st.sidebar.markdown("---")

    views = [
        view for view in router.views
        if view not in ADMIN_VIEWS or session.is_admin
    ]
    current = state.current_view if state.current_view in views else View.DASHBOARD
    selected = st.sidebar.radio(
        "Navigate to:",
        views,
        index=views.index(current),
        format_func=lambda view: router.resolve(view).title,
    )
    state.navigate(selected)

    st.sidebar.markdown("---")
    if st.sidebar.button("Log out"):
        state.logout()
        st.rerun()

    # Route to appropriate page
    route = router.resolve(state.current_view)
    st.title(route.title)
    route.target(state)


# =============================================================================
# LOGIN
# =============================================================================

def render_login_page(state: AppState):
    """Render the login form."""
    st.title("📡 ISP Bookkeeping")
    st.markdown("Please log in to continue.")

    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        try:
            state.login(username, password)
            st.rerun()
        except InvalidCredentialsError as e:
            st.error(str(e))


def render_password_change_page(state: AppState):
    """Force a new password before anything else can be opened."""
    st.title("🔑 Change Your Password")
    st.warning(
        "This account still uses its initial password. "
        "Please choose a new one to continue."
    )

    with st.form("password_change_form"):
        current = st.text_input("Current password", type="password")
        new = st.text_input("New password", type="password")
        confirm = st.text_input("Repeat new password", type="password")
        submitted = st.form_submit_button("Change password", type="primary")

    if submitted:
        if new != confirm:
            st.error("The new passwords do not match.")
            return
        try:
            state.change_password(current, new)
            st.success("Password changed.")
            st.rerun()
        except (InvalidCredentialsError, ValueError) as e:
            st.error(str(e))

    if st.button("Log out"):
        state.logout()
        st.rerun()


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard_page(state: AppState):
    """Totals, entry forms, the expense chart and the AI summary."""
    totals = state.dashboard_totals()

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Income", format_rupiah(totals.total_income))
    col2.metric("Total Expense", format_rupiah(totals.total_expense))
    col3.metric("Balance", format_rupiah(totals.balance))

    st.markdown("---")

    left, right = st.columns([3, 2])
    with left:
        tab_tx, tab_customer = st.tabs(["Add Transaction", "Add Customer"])
        with tab_tx:
            render_add_transaction_form(state)
        with tab_customer:
            render_add_customer_form(state)

    with right:
        render_expense_chart(state)

    st.markdown("---")
    render_financial_summary(state)


def render_add_transaction_form(state: AppState):
    with st.form("add_transaction_form", clear_on_submit=True):
        tx_type = st.radio(
            "Type",
            list(TransactionType),
            format_func=lambda t: t.value.capitalize(),
            horizontal=True,
        )
        description = st.text_input("Description", placeholder="e.g. Internet bill")
        amount = st.number_input("Amount (Rp)", min_value=0.0, step=1000.0, value=0.0, format="%.2f")
        tx_date = st.date_input("Date", value=date.today())
        method = st.selectbox(
            "Payment method",
            list(PaymentMethod),
            format_func=lambda m: m.label,
        )
        category = st.selectbox(
            "Category (expenses only)",
            list(ExpenseCategory),
            index=list(ExpenseCategory).index(ExpenseCategory.ISP_DUES),
            format_func=lambda c: c.label,
        )
        submitted = st.form_submit_button("Add Transaction", type="primary")

    if submitted:
        record, result = state.validator.validate_transaction(
            description=description,
            amount=amount,
            type=tx_type,
            transaction_date=tx_date,
            payment_method=method,
            category=category,
        )
        if record is None:
            st.error(result.message)
            return
        state.transactions.add(record)
        st.rerun()


def render_add_customer_form(state: AppState):
    with st.form("add_customer_form", clear_on_submit=True):
        name = st.text_input("Name")
        phone = st.text_input("Phone")
        address = st.text_area("Address")
        plan = st.selectbox(
            "Subscription",
            list(SubscriptionCategory),
            format_func=lambda s: s.label,
        )
        amount = st.number_input("Monthly due (Rp)", min_value=0.0, step=1000.0, value=0.0, format="%.2f")
        submitted = st.form_submit_button("Add Customer", type="primary")

    if submitted:
        record, result = state.validator.validate_customer(
            name=name,
            phone=phone,
            amount=amount,
            address=address,
            subscription_category=plan,
        )
        if record is None:
            st.error(result.message)
            return
        state.customers.add(record)
        st.success("Customer added.")


def render_expense_chart(state: AppState):
    st.markdown("### Expenses by Category")
    breakdown = state.expense_breakdown()
    if not breakdown:
        st.info("No expenses recorded yet.")
        return

    fig = px.pie(
        names=[item.category.label for item in breakdown],
        values=[float(item.total) for item in breakdown],
        hole=0.4,
    )
    st.plotly_chart(fig, use_container_width=True)


def render_financial_summary(state: AppState):
    st.markdown("### AI Financial Summary")
    if st.button("Analyse my finances", type="primary"):
        with st.spinner("Analysing your transactions..."):
            st.session_state.ai_summary = run_async(state.summarize())

    if st.session_state.get("ai_summary"):
        st.markdown(st.session_state.ai_summary)


# =============================================================================
# TRANSACTIONS
# =============================================================================

def render_transactions_page(state: AppState):
    """Filterable history with edit/delete, and the monthly report."""
    col1, col2 = st.columns(2)
    start = col1.date_input("From", value=None)
    end = col2.date_input("To", value=None)

    rows = sort_by_date(
        filter_by_date_range(state.transactions.records, start, end),
        descending=True,
    )

    if not rows:
        st.info("No transactions found.")
    for tx in rows:
        sign = "+" if tx.is_income else "-"
        kind = "Income" if tx.is_income else tx.category.label
        header = (
            f"{format_date(tx.transaction_date)} · {tx.description} · "
            f"{sign}{format_rupiah(tx.amount)} · {kind} · {tx.payment_method.label}"
        )
        with st.expander(header):
            render_edit_transaction_form(state, tx)
            if st.button("Delete", key=f"delete_tx_{tx.id}"):
                state.transactions.delete(tx.id)
                st.rerun()

    st.markdown("---")
    render_monthly_report(state)


def render_edit_transaction_form(state: AppState, tx):
    categories = list(ExpenseCategory)
    current_category = ExpenseCategory.ISP_DUES if tx.is_income else tx.category

    with st.form(f"edit_tx_{tx.id}"):
        tx_type = st.radio(
            "Type",
            list(TransactionType),
            index=0 if tx.is_income else 1,
            format_func=lambda t: t.value.capitalize(),
            horizontal=True,
        )
        description = st.text_input("Description", value=tx.description)
        amount = st.number_input("Amount (Rp)", min_value=0.0, step=1000.0, value=float(tx.amount), format="%.2f")
        tx_date = st.date_input("Date", value=tx.transaction_date)
        method = st.selectbox(
            "Payment method",
            list(PaymentMethod),
            index=list(PaymentMethod).index(tx.payment_method),
            format_func=lambda m: m.label,
        )
        category = st.selectbox(
            "Category (expenses only)",
            categories,
            index=categories.index(current_category),
            format_func=lambda c: c.label,
        )
        submitted = st.form_submit_button("Save changes")

    if submitted:
        record, result = state.validator.validate_transaction(
            description=description,
            amount=amount,
            type=tx_type,
            transaction_date=tx_date,
            payment_method=method,
            category=category,
            record_id=tx.id,
        )
        if record is None:
            st.error(result.message)
            return
        state.transactions.update(record)
        st.rerun()


def render_monthly_report(state: AppState):
    st.markdown("### Monthly Financial Report")

    today = date.today()
    col1, col2 = st.columns(2)
    month = col1.selectbox(
        "Month",
        list(range(1, 13)),
        index=today.month - 1,
        format_func=lambda m: MONTH_NAMES[m - 1],
    )
    year = col2.number_input("Year", min_value=2000, max_value=2100, value=today.year, step=1)

    report = state.monthly_report(int(year), month)
    label = month_label(report.year, report.month)

    if report.is_empty:
        st.info(f"No transactions for {label}.")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", format_rupiah(report.total_income))
    col2.metric("Expense", format_rupiah(report.total_expense))
    col3.metric("Balance", format_rupiah(report.balance))
    col1, col2 = st.columns(2)
    col1.metric("Via Transfer", format_rupiah(report.total_transfer))
    col2.metric("Via Cash", format_rupiah(report.total_cash))

    if report.has_profit_sharing:
        st.markdown("#### Profit Sharing")
        st.table([
            {"Name": share.partner, "Amount Received": format_rupiah(share.amount, 2)}
            for share in report.profit_shares
        ])

    if st.button("Prepare PDF"):
        with st.spinner("Rendering report..."):
            st.session_state.report_pdf = state.export_monthly_report(report.year, report.month)

    prepared = st.session_state.get("report_pdf")
    if prepared and prepared[0] == report_filename(report):
        filename, pdf = prepared
        st.download_button(
            "Download PDF",
            data=pdf,
            file_name=filename,
            mime="application/pdf",
        )


# =============================================================================
# CUSTOMERS
# =============================================================================

def render_customers_page(state: AppState):
    customers = state.customers.records
    if not customers:
        st.info("No customers yet. Add one from the dashboard.")
        return

    header = st.columns([3, 2, 4, 2, 2, 1])
    for col, title in zip(header, ["Name", "Phone", "Address", "Subscription", "Due", ""]):
        col.markdown(f"**{title}**")

    for customer in customers:
        cols = st.columns([3, 2, 4, 2, 2, 1])
        cols[0].write(customer.name)
        cols[1].write(customer.phone)
        cols[2].write(customer.address or "-")
        cols[3].write(customer.subscription_category.label)
        cols[4].write(format_rupiah(customer.amount))
        if cols[5].button("🗑️", key=f"delete_customer_{customer.id}"):
            state.customers.delete(customer.id)
            st.rerun()


# =============================================================================
# SETTINGS (admin only)
# =============================================================================

def render_settings_page(state: AppState):
    """User management and connection status."""
    try:
        accounts = state.list_accounts()
    except AuthError as e:
        st.error(str(e))
        return

    st.markdown("### User Management")
    with st.form("add_account_form", clear_on_submit=True):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        role = st.selectbox("Role", list(UserRole), index=1, format_func=lambda r: r.value)
        submitted = st.form_submit_button("Add User", type="primary")

    if submitted:
        result = state.validator.validate_account(
            username, password, [a.username for a in accounts]
        )
        if not result.is_valid:
            st.error(result.message)
        else:
            try:
                state.add_account(username, password, role)
                st.rerun()
            except (DuplicateUsernameError, ValueError) as e:
                st.error(str(e))

    session = state.session
    for account in accounts:
        cols = st.columns([4, 2, 1])
        cols[0].write(account.username)
        cols[1].write(account.role.value)
        if account.id != session.id:
            if cols[2].button("Delete", key=f"delete_account_{account.id}"):
                try:
                    state.delete_account(account.id)
                    st.rerun()
                except SelfDeletionError as e:
                    st.error(str(e))

    st.markdown("---")
    st.markdown("### Connection Status")

    status = validate_all_settings()
    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Gemini (AI Summary)", "gemini"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")

    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
