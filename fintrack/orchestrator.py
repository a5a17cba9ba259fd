"""
Main Orchestrator for fintrack

This module ties the stores together and defines the flows the pages
drive:
1. Session (sign up / log in / log out → ledger follows the session)
2. Ledger (add / edit / delete transactions, add categories)
3. Reports (dashboard and planning figures)

DESIGN DECISION: FinanceTracker is the single application state
object. The identity store decides who is logged in; the tracker makes
sure the ledger always shows that account's data and nobody else's.
"""

from datetime import date
from typing import Optional

from fintrack.analytics import build_dashboard, build_planning, search_transactions
from fintrack.audit import AuditLogger, configure_logging
from fintrack.config import Settings, get_settings
from fintrack.identity import IdentityStore
from fintrack.ledger import LedgerStore
from fintrack.models.account import Account
from fintrack.models.audit import AuditEvent
from fintrack.models.ledger import (
    Category,
    CategoryDraft,
    Transaction,
    TransactionDraft,
    TransactionType,
    TransactionUpdate,
)
from fintrack.models.reports import DashboardSummary, Period, PlanningSummary
from fintrack.models.validation import ValidationResult
from fintrack.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
)
from fintrack.validation import TransactionValidator


class FinanceTracker:
    """
    Application state for one device.

    Lifecycle:
    1. Construction binds the ledger to the session restored from storage
    2. sign_up / log_in load the new account's ledger
    3. log_out clears the ledger back to defaults
    """

    def __init__(
        self,
        identity: IdentityStore,
        ledger: LedgerStore,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[TransactionValidator] = None,
        settings: Optional[Settings] = None,
    ):
        self._identity = identity
        self._ledger = ledger
        self._audit_logger = audit_logger
        self._validator = validator or TransactionValidator()
        self._settings = (settings or get_settings()).app

        self._ledger.load(self._identity.current_session())

    @property
    def audit_logger(self) -> Optional[AuditLogger]:
        return self._audit_logger

    # -- session --------------------------------------------------------------

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> Account:
        account = self._identity.register(email, password, name)
        self._ledger.load(account)
        return account

    def log_in(self, email: str, password: str) -> Account:
        account = self._identity.authenticate(email, password)
        self._ledger.load(account)
        return account

    def log_out(self) -> None:
        self._identity.end_session()
        self._ledger.load(None)

    def current_account(self) -> Optional[Account]:
        return self._identity.current_session()

    def request_password_reset(self, email: str) -> str:
        return self._identity.request_password_reset(email)

    # -- ledger ---------------------------------------------------------------

    def list_transactions(self) -> list[Transaction]:
        return self._ledger.list_transactions()

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._ledger.get_transaction(transaction_id)

    def search_transactions(
        self,
        term: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
        category_id: Optional[str] = None,
    ) -> list[Transaction]:
        return search_transactions(
            self._ledger.list_transactions(), term, transaction_type, category_id
        )

    def preview_transaction(self, draft: TransactionDraft) -> ValidationResult:
        """Validate a draft without saving it (form feedback)."""
        return self._validator.validate(draft, self._ledger.list_categories())

    def describe_validation(self, result: ValidationResult) -> str:
        return self._validator.get_user_friendly_summary(result)

    def add_transaction(self, draft: TransactionDraft) -> Optional[Transaction]:
        return self._ledger.add_transaction(draft)

    def update_transaction(
        self,
        transaction_id: str,
        update: TransactionUpdate,
    ) -> Optional[Transaction]:
        return self._ledger.update_transaction(transaction_id, update)

    def delete_transaction(self, transaction_id: str) -> bool:
        return self._ledger.delete_transaction(transaction_id)

    def list_categories(self) -> list[Category]:
        return self._ledger.list_categories()

    def categories_for(self, transaction_type: TransactionType) -> list[Category]:
        return self._ledger.categories_for(transaction_type)

    def add_category(self, draft: CategoryDraft) -> Optional[Category]:
        return self._ledger.add_category(draft)

    # -- reports --------------------------------------------------------------

    def dashboard(
        self,
        period: Period = Period.THIS_MONTH,
        today: Optional[date] = None,
    ) -> DashboardSummary:
        return build_dashboard(
            self._ledger.list_transactions(),
            period,
            today,
            week_starts_on=self._settings.week_starts_on,
        )

    def planning(self, today: Optional[date] = None) -> PlanningSummary:
        return build_planning(
            self._ledger.list_transactions(),
            today,
            savings_goal=self._settings.savings_goal_percent,
        )

    def recent_activity(self, limit: int = 20) -> list[AuditEvent]:
        """
        Latest audit events, newest first (account page).

        While someone is logged in only their own events are returned.
        """
        if self._audit_logger is None:
            return []
        account = self.current_account()
        return self._audit_logger.recent_events(
            limit, account_id=account.id if account else None
        )


def create_app_components(
    settings: Optional[Settings] = None,
    in_memory: bool = False,
) -> FinanceTracker:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from. Defaults to the cached settings.
        in_memory: Use an ephemeral store regardless of configuration.
                   Set to True for testing without touching disk.

    Returns:
        A FinanceTracker bound to the restored session, if any
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    audit_logger = AuditLogger()

    store: KeyValueStoreInterface
    if in_memory or settings.storage.backend == "memory":
        store = InMemoryKeyValueStore()
    else:
        store = JsonFileKeyValueStore(settings.storage.path, audit_logger)

    validator = TransactionValidator(settings.app)
    identity = IdentityStore(store, audit_logger, settings.auth)
    ledger = LedgerStore(store, audit_logger, validator)

    return FinanceTracker(
        identity=identity,
        ledger=ledger,
        audit_logger=audit_logger,
        validator=validator,
        settings=settings,
    )
