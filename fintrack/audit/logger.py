"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of every change to a ledger
2. Debugging capability when stored data is found corrupt
3. A history of login attempts

The audit logger:
- Is synchronous, like every other store operation
- Gracefully handles failures (doesn't crash the app if logging fails)
- Keeps the most recent events in memory for the account page and tests
"""

import logging
from collections import deque
from decimal import Decimal
from typing import Optional

import structlog

from fintrack.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class AuditLogger:
    """
    Central audit logging service.

    Logs events to:
    1. Structured local log (JSON lines via structlog)
    2. A bounded in-memory history (newest last)
    """

    def __init__(self, history_size: int = 200):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
        """
        self._logger = structlog.get_logger("fintrack.audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the local log write failed; never raises.
        """
        self._history.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # A broken log handler must not take a ledger write down with it
            return False

        return True

    def recent_events(
        self,
        limit: int = 50,
        account_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        """Most recent events, newest first, optionally for one account."""
        events = [
            event for event in reversed(self._history)
            if account_id is None or event.account_id == account_id
        ]
        return events[:limit]

    # -- identity -------------------------------------------------------------

    def log_account_registered(self, account_id: str) -> None:
        self.log(AuditEventBuilder.account_registered(account_id))

    def log_registration_rejected(self, reason: str) -> None:
        self.log(AuditEventBuilder.registration_rejected(reason))

    def log_login_succeeded(self, account_id: str) -> None:
        self.log(AuditEventBuilder.login_succeeded(account_id))

    def log_login_failed(self, reason: str) -> None:
        self.log(AuditEventBuilder.login_failed(reason))

    def log_session_ended(self, account_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.session_ended(account_id))

    def log_credentials_upgraded(self, account_id: str) -> None:
        self.log(AuditEventBuilder.credentials_upgraded(account_id))

    def log_password_reset_requested(self, account_found: bool) -> None:
        self.log(AuditEventBuilder.password_reset_requested(account_found))

    # -- ledger ---------------------------------------------------------------

    def log_ledger_loaded(
        self,
        account_id: Optional[str],
        transaction_count: int,
        category_count: int,
    ) -> None:
        self.log(AuditEventBuilder.ledger_loaded(
            account_id=account_id,
            transaction_count=transaction_count,
            category_count=category_count,
        ))

    def log_categories_seeded(self, account_id: str, category_count: int) -> None:
        self.log(AuditEventBuilder.categories_seeded(account_id, category_count))

    def log_transaction_added(
        self,
        account_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            account_id=account_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
        ))

    def log_transaction_updated(
        self,
        account_id: str,
        transaction_id: str,
        changed_fields: list[str],
    ) -> None:
        self.log(AuditEventBuilder.transaction_updated(
            account_id=account_id,
            transaction_id=transaction_id,
            changed_fields=changed_fields,
        ))

    def log_transaction_deleted(self, account_id: str, transaction_id: str) -> None:
        self.log(AuditEventBuilder.transaction_deleted(account_id, transaction_id))

    def log_category_added(
        self,
        account_id: str,
        category_id: str,
        name: str,
        category_type: str,
    ) -> None:
        self.log(AuditEventBuilder.category_added(
            account_id=account_id,
            category_id=category_id,
            name=name,
            category_type=category_type,
        ))

    def log_validation_failed(
        self,
        account_id: Optional[str],
        entity_type: str,
        issues: list[dict],
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            account_id=account_id,
            entity_type=entity_type,
            issues=issues,
        ))

    # -- storage / system -----------------------------------------------------

    def log_stored_data_recovered(
        self,
        key: str,
        reason: str,
        dropped_records: int = 0,
    ) -> None:
        self.log(AuditEventBuilder.stored_data_recovered(
            key=key,
            reason=reason,
            dropped_records=dropped_records,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
