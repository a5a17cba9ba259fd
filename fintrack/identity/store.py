"""
Identity Store

Owns the account collection and the current-session pointer, both held
in the local key-value store:

- `accounts`        list of StoredAccount records
- `currentSession`  the logged-in Account (never carries credentials)

DESIGN DECISION: Passwords are hashed with bcrypt before they touch
storage. Records written by the original mobile app still carry a
plaintext `password`; they authenticate once against that value and are
rewritten with a hash on the spot.

Every mutation is persisted before the call returns.
"""

import time
import uuid
from typing import Optional

import bcrypt

from fintrack.audit import AuditLogger
from fintrack.config import AuthSettings, get_settings
from fintrack.models.account import Account, StoredAccount, normalize_email
from fintrack.services.storage import (
    KeyValueStoreInterface,
    load_record,
    load_record_list,
    save_record,
    save_record_list,
)

ACCOUNTS_KEY = "accounts"
SESSION_KEY = "currentSession"

PASSWORD_RESET_MESSAGE = (
    "Se existe uma conta com este e-mail, você receberá as instruções "
    "para redefinir sua senha."
)

# bcrypt only looks at the first 72 bytes; newer releases refuse longer input
_BCRYPT_MAX_BYTES = 72


class IdentityError(Exception):
    """Base exception for signup and login failures."""
    pass


class DuplicateEmailError(IdentityError):
    """An account with this e-mail already exists."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("E-mail já cadastrado")


class InvalidCredentialsError(IdentityError):
    """Unknown e-mail or wrong password. Deliberately indistinguishable."""

    def __init__(self):
        super().__init__("E-mail ou senha inválidos")


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class IdentityStore:
    """
    Registration, authentication and the single device session.

    The session is restored from storage when the store is created.
    """

    def __init__(
        self,
        store: KeyValueStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AuthSettings] = None,
    ):
        """
        Args:
            store: Backing key-value store
            audit_logger: Receives identity events
            settings: Auth settings (delays, bcrypt cost)
        """
        self._store = store
        self._audit = audit_logger
        self._settings = settings or get_settings().auth
        self._session: Optional[Account] = load_record(
            store, SESSION_KEY, Account, audit_logger
        )

    # -- helpers --------------------------------------------------------------

    def _load_accounts(self) -> list[StoredAccount]:
        return load_record_list(self._store, ACCOUNTS_KEY, StoredAccount, self._audit)

    def _save_accounts(self, accounts: list[StoredAccount]) -> None:
        save_record_list(self._store, ACCOUNTS_KEY, accounts)

    def _find(self, accounts: list[StoredAccount], email: str) -> Optional[StoredAccount]:
        key = normalize_email(email)
        for account in accounts:
            if account.email_key == key:
                return account
        return None

    def _hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._settings.bcrypt_rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def _verify(self, account: StoredAccount, password: str) -> bool:
        if account.is_legacy:
            return account.password == password
        try:
            return bcrypt.checkpw(
                _password_bytes(password),
                account.password_hash.encode("utf-8"),
            )
        except ValueError:
            # Stored hash is not a valid bcrypt string
            return False

    def _start_session(self, account: Account) -> None:
        save_record(self._store, SESSION_KEY, account)
        self._session = account

    @staticmethod
    def _pause(seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)

    # -- operations -----------------------------------------------------------

    def register(self, email: str, password: str, name: Optional[str] = None) -> Account:
        """
        Create an account and log it in.

        Raises:
            DuplicateEmailError: If the e-mail is taken (case-insensitive).
                The account collection is left untouched.
            pydantic.ValidationError: If the e-mail or name is malformed.
        """
        self._pause(self._settings.signup_delay_seconds)

        accounts = self._load_accounts()
        if self._find(accounts, email) is not None:
            if self._audit:
                self._audit.log_registration_rejected("duplicate_email")
            raise DuplicateEmailError(email)

        stored = StoredAccount(
            id=uuid.uuid4().hex,
            email=email,
            name=name or None,
            password_hash=self._hash(password),
        )
        accounts.append(stored)
        self._save_accounts(accounts)

        account = stored.to_account()
        self._start_session(account)

        if self._audit:
            self._audit.log_account_registered(account.id)

        return account

    def authenticate(self, email: str, password: str) -> Account:
        """
        Log in with e-mail and password.

        Raises:
            InvalidCredentialsError: If no account matches or the
                password is wrong.
        """
        self._pause(self._settings.login_delay_seconds)

        accounts = self._load_accounts()
        stored = self._find(accounts, email)

        if stored is None:
            if self._audit:
                self._audit.log_login_failed("unknown_email")
            raise InvalidCredentialsError()

        if not self._verify(stored, password):
            if self._audit:
                self._audit.log_login_failed("wrong_password")
            raise InvalidCredentialsError()

        if stored.is_legacy:
            upgraded = stored.model_copy(update={
                "password_hash": self._hash(password),
                "password": None,
            })
            accounts = [upgraded if a.id == stored.id else a for a in accounts]
            self._save_accounts(accounts)
            if self._audit:
                self._audit.log_credentials_upgraded(stored.id)

        account = stored.to_account()
        self._start_session(account)

        if self._audit:
            self._audit.log_login_succeeded(account.id)

        return account

    def end_session(self) -> None:
        """Clear the session. Safe to call when nobody is logged in."""
        self._pause(self._settings.logout_delay_seconds)

        previous = self._session
        self._store.remove(SESSION_KEY)
        self._session = None

        if self._audit and previous is not None:
            self._audit.log_session_ended(previous.id)

    def current_session(self) -> Optional[Account]:
        return self._session

    def request_password_reset(self, email: str) -> str:
        """
        Record a password reset request.

        No message is sent. The reply is identical whether or not the
        e-mail is registered, so it cannot be used to find out which accounts exist.
        """
        found = self._find(self._load_accounts(), email) is not None
        if self._audit:
            self._audit.log_password_reset_requested(found)
        return PASSWORD_RESET_MESSAGE
