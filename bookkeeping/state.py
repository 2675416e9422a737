"""
Application State

DESIGN DECISION: One explicit object owns everything the UI works with:
the persisted session, the logged-in account's collections, the current
view, and the services behind them. The Streamlit app keeps one AppState
per browser session and passes it to every page function; nothing is
read from ambient globals.

Every operation that touches an account's data goes through
require_session(), and account management through require_admin(), so
the rules hold no matter which page calls in.
"""

from datetime import date
from typing import Iterable, Optional

import structlog

from bookkeeping.agents import FinancialSummaryAgent
from bookkeeping.audit import AuditLogger
from bookkeeping.auth import (
    AccountStore,
    NotAuthenticatedError,
    PermissionDeniedError,
)
from bookkeeping.config import Settings, get_settings
from bookkeeping.models import (
    Account,
    AuditEventBuilder,
    CategoryTotal,
    FinancialTotals,
    MonthlyReport,
    SessionUser,
    Transaction,
    UserRole,
)
from bookkeeping.navigation import ADMIN_VIEWS, DEFAULT_VIEW, View, resolve_view
from bookkeeping.records import CustomerCollection, TransactionCollection
from bookkeeping.reports import (
    build_monthly_report,
    build_report_document,
    compute_totals,
    expense_breakdown,
    render_report_pdf,
    report_filename,
)
from bookkeeping.services.storage import KeyValueStore
from bookkeeping.validation import FormValidator


logger = structlog.get_logger(__name__)


class AppState:
    """
    Process-wide application state.

    Usage:
        state = create_app_state()
        state.init()
        state.login("amin", "password")
        state.transactions.add(tx)
        totals = state.dashboard_totals()
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: Optional[Settings] = None,
        audit_logger: Optional[AuditLogger] = None,
        summary_agent: Optional[FinancialSummaryAgent] = None,
        validator: Optional[FormValidator] = None,
        session_id: Optional[str] = None,
    ):
        """
        session_id identifies one browser. A login is persisted under it and
        restored by init(); without it the session lives only in this object.
        """
        settings = settings or get_settings()
        self._settings = settings
        self._app_settings = settings.app
        self._organization = settings.organization
        self._policy = settings.profit_sharing.policy
        self._bootstrap_admin = settings.bootstrap_admin

        self._store = store
        self._audit = audit_logger or AuditLogger(
            store, max_events=self._app_settings.audit_log_max_events
        )
        self._accounts = AccountStore(
            store,
            self._audit,
            hash_iterations=self._app_settings.password_hash_iterations,
            session_id=session_id,
        )
        self._summary_agent = summary_agent
        self.validator = validator or FormValidator()

        self._session: Optional[SessionUser] = None
        self._transactions: Optional[TransactionCollection] = None
        self._customers: Optional[CustomerCollection] = None
        self._view: View = DEFAULT_VIEW

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def init(self) -> Optional[SessionUser]:
        """
        Seed the first admin if needed and restore this browser's session.

        Returns the restored session, if any.
        """
        self._accounts.bootstrap(
            self._bootstrap_admin.username,
            self._bootstrap_admin.password,
        )
        session = self._accounts.restore_session()
        if session is not None:
            self._open(session)
            logger.info("session_restored", username=session.username)
        return session

    def login(self, username: str, password: str) -> SessionUser:
        """
        Log in and load the account's collections.

        Raises:
            InvalidCredentialsError: Unknown username or wrong password
        """
        session = self._accounts.login(username, password)
        self._open(session)
        self._view = DEFAULT_VIEW
        return session

    def logout(self) -> None:
        """Forget the session and drop the in-memory collections."""
        username = self._session.username if self._session else None
        self._accounts.logout(username)
        self._session = None
        self._transactions = None
        self._customers = None
        self._view = DEFAULT_VIEW

    def _open(self, session: SessionUser) -> None:
        self._session = session
        self._transactions = TransactionCollection(self._store, session.username, self._audit)
        self._customers = CustomerCollection(self._store, session.username, self._audit)
        self._transactions.load()
        self._customers.load()

    # =========================================================================
    # SESSION AND NAVIGATION
    # =========================================================================

    @property
    def session(self) -> Optional[SessionUser]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def must_change_password(self) -> bool:
        return self._session is not None and self._session.must_change_password

    @property
    def current_view(self) -> View:
        return self._view

    def navigate(self, identifier) -> View:
        """
        Switch pages. Unknown views, and admin pages for non-admins,
        land on the dashboard.
        """
        view = resolve_view(identifier)
        if view in ADMIN_VIEWS and not (self._session and self._session.is_admin):
            view = DEFAULT_VIEW
        self._view = view
        return view

    def require_session(self) -> SessionUser:
        if self._session is None:
            raise NotAuthenticatedError()
        return self._session

    def require_admin(self) -> SessionUser:
        session = self.require_session()
        if not session.is_admin:
            raise PermissionDeniedError("Only administrators can manage accounts.")
        return session

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    def change_password(self, current_password: str, new_password: str) -> SessionUser:
        """Change the logged-in account's password and refresh the session."""
        session = self.require_session()
        account = self._accounts.change_password(session.id, current_password, new_password)
        self._session = account.to_session()
        return self._session

    def list_accounts(self) -> list[Account]:
        self.require_admin()
        return self._accounts.accounts

    def add_account(
        self,
        username: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> Account:
        """
        Raises:
            PermissionDeniedError: Caller is not an admin
            ValueError: Empty username or password
            DuplicateUsernameError: Username already exists
        """
        session = self.require_admin()
        return self._accounts.add_account(username, password, role, actor=session.username)

    def delete_account(self, account_id: str) -> bool:
        """
        Raises:
            PermissionDeniedError: Caller is not an admin
            SelfDeletionError: Caller tried to delete their own account
        """
        session = self.require_admin()
        return self._accounts.delete_account(
            account_id,
            acting_account_id=session.id,
            actor=session.username,
        )

    # =========================================================================
    # COLLECTIONS
    # =========================================================================

    @property
    def transactions(self) -> TransactionCollection:
        self.require_session()
        return self._transactions

    @property
    def customers(self) -> CustomerCollection:
        self.require_session()
        return self._customers

    # =========================================================================
    # REPORTING
    # =========================================================================

    def dashboard_totals(self) -> FinancialTotals:
        return compute_totals(self.transactions.records)

    def expense_breakdown(self) -> list[CategoryTotal]:
        return expense_breakdown(self.transactions.records)

    def monthly_report(self, year: int, month: int) -> MonthlyReport:
        return build_monthly_report(self.transactions.records, year, month, self._policy)

    def export_monthly_report(
        self,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> tuple[str, bytes]:
        """Render the month's report. Returns (filename, PDF bytes)."""
        session = self.require_session()
        report = self.monthly_report(year, month)
        document = build_report_document(report, self._organization, today)
        pdf = render_report_pdf(document)
        self._audit.log(AuditEventBuilder.report_exported(
            year, month, len(report.transactions), actor=session.username
        ))
        return report_filename(report), pdf

    # =========================================================================
    # AI SUMMARY
    # =========================================================================

    @property
    def summary_agent(self) -> FinancialSummaryAgent:
        if self._summary_agent is None:
            self._summary_agent = FinancialSummaryAgent(
                self._settings.gemini, audit_logger=self._audit
            )
        return self._summary_agent

    async def summarize(self, transactions: Optional[Iterable[Transaction]] = None) -> str:
        """AI summary of the given transactions (default: all of the account's)."""
        if transactions is None:
            transactions = self.transactions.records
        return await self.summary_agent.summarize(transactions)

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit
