"""
Account Store

Owns the "users" key and one browser's "sessionUser_{session_id}" key:
bootstrapping the first admin, login and logout, and account management.

DESIGN DECISION: The store is shared by every browser, so a session is
only ever persisted under that browser's own session id. Without a
session id nothing is persisted and nothing can be restored; a fresh
browser always starts at the login form.

Every operation re-reads "users" first, so accounts created or deleted
in another browser are seen immediately and concurrent admins do not
overwrite each other's changes.

DESIGN DECISION: Login failures carry one generic message. Whether the
username or the password was wrong is only visible in the audit log,
never to the person at the login form.

Older data kept plaintext passwords under "password". Those records are
re-written with a salted hash the first time the store loads them.
"""

import json
from typing import Optional

import structlog
from pydantic import ValidationError

from bookkeeping.audit import AuditLogger
from bookkeeping.auth.errors import (
    DuplicateUsernameError,
    InvalidCredentialsError,
    SelfDeletionError,
)
from bookkeeping.auth.passwords import (
    DEFAULT_ITERATIONS,
    hash_password,
    verify_password,
)
from bookkeeping.models import (
    Account,
    AccountListAdapter,
    AuditEventBuilder,
    SessionUser,
    UserRole,
)
from bookkeeping.services.storage import (
    KeyValueStore,
    NotFoundError,
    load_json_list,
    save_json_list,
    user_key,
)


logger = structlog.get_logger(__name__)

USERS_KEY = "users"
SESSION_KEY = "sessionUser"


class AccountStore:
    """
    Accounts and the persisted session.

    Usage:
        accounts = AccountStore(store, audit_logger, session_id=browser_id)
        accounts.bootstrap("amin", "password")
        session = accounts.login("amin", "password")
    """

    def __init__(
        self,
        store: KeyValueStore,
        audit_logger: Optional[AuditLogger] = None,
        hash_iterations: int = DEFAULT_ITERATIONS,
        session_id: Optional[str] = None,
    ):
        """
        Args:
            store: Key-value store holding "users" and the session
            audit_logger: Receives account and login events
            hash_iterations: PBKDF2 iterations for new hashes
            session_id: Per-browser id the session is persisted under;
                        None keeps the session in memory only
        """
        self._store = store
        self._session_key = user_key(SESSION_KEY, session_id) if session_id else None
        self._audit = audit_logger or AuditLogger()
        self._iterations = hash_iterations
        self._accounts: list[Account] = []
        self._dummy_hash: Optional[str] = None

    # =========================================================================
    # LOADING
    # =========================================================================

    def load(self) -> list[Account]:
        """Read accounts from the store, migrating plaintext passwords."""
        raw = self._store.get(USERS_KEY)
        if raw:
            migrated = self._migrate_plaintext_passwords(raw)
            if migrated is not None:
                self._store.set(USERS_KEY, migrated)

        self._accounts = load_json_list(
            self._store, USERS_KEY, AccountListAdapter, self._audit
        )
        return self.accounts

    def _migrate_plaintext_passwords(self, raw: str) -> Optional[str]:
        """Returns the re-encoded list if any record was migrated, else None."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            # Left for load_json_list to report
            return None
        if not isinstance(data, list):
            return None

        migrated = 0
        for item in data:
            if not isinstance(item, dict) or item.get("passwordHash"):
                continue
            plaintext = item.pop("password", None)
            if isinstance(plaintext, str) and plaintext:
                item["passwordHash"] = hash_password(plaintext, self._iterations)
                migrated += 1

        if not migrated:
            return None
        logger.warning("legacy_passwords_migrated", count=migrated)
        return json.dumps(data, ensure_ascii=False)

    def _save(self) -> None:
        save_json_list(self._store, USERS_KEY, AccountListAdapter, self._accounts)

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def accounts(self) -> list[Account]:
        return list(self._accounts)

    def get(self, account_id: str) -> Optional[Account]:
        for account in self._accounts:
            if account.id == account_id:
                return account
        return None

    def find_by_username(self, username: str) -> Optional[Account]:
        """Exact, case-sensitive lookup."""
        for account in self._accounts:
            if account.username == username:
                return account
        return None

    # =========================================================================
    # BOOTSTRAP AND SESSION
    # =========================================================================

    def bootstrap(self, username: str, password: str) -> Optional[Account]:
        """
        Create the first administrator if there are no accounts at all.

        Returns the created account, or None if accounts already existed.
        """
        self.load()
        if self._accounts:
            return None

        account = Account(
            username=username,
            password_hash=hash_password(password, self._iterations),
            role=UserRole.ADMIN,
            must_change_password=True,
        )
        self._accounts = [account]
        self._save()
        self._audit.log(AuditEventBuilder.account_bootstrapped(account.id, account.username))
        return account

    def login(self, username: str, password: str) -> SessionUser:
        """
        Authenticate and persist the session.

        Raises:
            InvalidCredentialsError: Unknown username or wrong password
        """
        self.load()
        account = self.find_by_username(username)
        if account is None:
            # Same hashing cost as a real check
            verify_password(password, self._get_dummy_hash())
            self._audit.log(AuditEventBuilder.login_failed(username))
            raise InvalidCredentialsError()

        if not verify_password(password, account.password_hash):
            self._audit.log(AuditEventBuilder.login_failed(username))
            raise InvalidCredentialsError()

        session = account.to_session()
        self._write_session(session)
        self._audit.log(AuditEventBuilder.login_succeeded(account.username))
        return session

    @property
    def session_key(self) -> Optional[str]:
        """Store key of this browser's session, or None if sessions are not persisted."""
        return self._session_key

    def restore_session(self) -> Optional[SessionUser]:
        """
        Session persisted by a previous login in this browser, if it still
        belongs to an account.

        The projection is rebuilt from the current account record, so a
        stale role or password flag is never trusted.
        """
        if self._session_key is None:
            return None
        raw = self._store.get(self._session_key)
        if raw is None:
            return None

        try:
            stored = SessionUser.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("session_decode_failed", error=str(e))
            self._store.remove(self._session_key)
            return None

        self.load()
        account = self.get(stored.id)
        if account is None or account.username != stored.username:
            logger.info("session_discarded", username=stored.username)
            self._store.remove(self._session_key)
            return None

        session = account.to_session()
        if session != stored:
            self._write_session(session)
        return session

    def logout(self, username: Optional[str] = None) -> None:
        """Forget the persisted session."""
        if self._session_key is not None:
            self._store.remove(self._session_key)
        if username:
            self._audit.log(AuditEventBuilder.logout(username))

    def _write_session(self, session: SessionUser) -> None:
        if self._session_key is not None:
            self._store.set(self._session_key, session.model_dump_json(by_alias=True))

    def _stored_session_id(self) -> Optional[str]:
        if self._session_key is None:
            return None
        raw = self._store.get(self._session_key)
        if raw is None:
            return None
        try:
            return SessionUser.model_validate_json(raw).id
        except ValidationError:
            return None

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("unused-password", self._iterations)
        return self._dummy_hash

    # =========================================================================
    # ACCOUNT MANAGEMENT
    # =========================================================================

    def add_account(
        self,
        username: str,
        password: str,
        role: UserRole = UserRole.USER,
        actor: Optional[str] = None,
    ) -> Account:
        """
        Create an account.

        Raises:
            ValueError: Empty username or password
            DuplicateUsernameError: Username already taken (case-sensitive)
        """
        self.load()
        username = (username or "").strip()
        if not username or not password:
            raise ValueError("Username and password cannot be empty.")
        if self.find_by_username(username) is not None:
            raise DuplicateUsernameError(username)

        account = Account(
            username=username,
            password_hash=hash_password(password, self._iterations),
            role=UserRole(role),
        )
        self._accounts = [*self._accounts, account]
        self._save()
        self._audit.log(AuditEventBuilder.account_created(
            account.id, account.username, account.role.value, actor=actor
        ))
        return account

    def delete_account(
        self,
        account_id: str,
        acting_account_id: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> bool:
        """
        Delete an account by id.

        Returns False if no account has that id.

        Raises:
            SelfDeletionError: account_id is the acting account
        """
        if acting_account_id is not None and account_id == acting_account_id:
            raise SelfDeletionError()

        self.load()

        account = self.get(account_id)
        if account is None:
            return False

        self._accounts = [a for a in self._accounts if a.id != account_id]
        self._save()
        self._audit.log(AuditEventBuilder.account_deleted(
            account.id, account.username, actor=actor
        ))
        return True

    def change_password(
        self,
        account_id: str,
        current_password: str,
        new_password: str,
    ) -> Account:
        """
        Replace an account's password and clear the forced-change flag.

        Raises:
            NotFoundError: Unknown account id
            InvalidCredentialsError: current_password is wrong
            ValueError: new_password is empty or unchanged
        """
        self.load()
        account = self.get(account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {account_id}")
        if not verify_password(current_password, account.password_hash):
            raise InvalidCredentialsError("Current password is incorrect.")
        if not new_password:
            raise ValueError("New password must not be empty.")
        if new_password == current_password:
            raise ValueError("New password must differ from the current one.")

        updated = account.model_copy(update={
            "password_hash": hash_password(new_password, self._iterations),
            "must_change_password": False,
        })
        self._accounts = [updated if a.id == account_id else a for a in self._accounts]
        self._save()

        if self._stored_session_id() == account_id:
            self._write_session(updated.to_session())

        self._audit.log(AuditEventBuilder.password_changed(updated.id, updated.username))
        return updated
