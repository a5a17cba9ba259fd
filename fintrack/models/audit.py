"""
Audit Models for fintrack

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every change to a ledger
2. Debugging information when stored data turns out to be corrupt
3. A record of authentication attempts

DESIGN DECISION: Audit events never carry passwords or password hashes.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    ACCOUNT_REGISTERED = "account_registered"
    REGISTRATION_REJECTED = "registration_rejected"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    SESSION_ENDED = "session_ended"
    CREDENTIALS_UPGRADED = "credentials_upgraded"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"

    # Ledger
    LEDGER_LOADED = "ledger_loaded"
    CATEGORIES_SEEDED = "categories_seeded"
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    CATEGORY_ADDED = "category_added"
    VALIDATION_FAILED = "validation_failed"

    # Storage
    STORED_DATA_RECOVERED = "stored_data_recovered"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'transaction', 'category')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    account_id: Optional[str] = Field(
        default=None,
        description="Account whose session triggered the event"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "account_id": self.account_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_registered(account_id)
        event = AuditEventBuilder.transaction_added(account_id, tx_id, "expense", "50.00")
    """

    @staticmethod
    def account_registered(account_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_REGISTERED,
            entity_type="account",
            entity_id=account_id,
            account_id=account_id,
            description="New account registered",
            is_user_action=True,
        )

    @staticmethod
    def registration_rejected(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            description=f"Registration rejected: {reason}",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(account_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="account",
            entity_id=account_id,
            account_id=account_id,
            description="Session started",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            description="Login attempt failed",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def session_ended(account_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_ENDED,
            entity_type="account",
            entity_id=account_id,
            account_id=account_id,
            description="Session ended" if account_id else "Logout with no active session",
            is_user_action=True,
        )

    @staticmethod
    def credentials_upgraded(account_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CREDENTIALS_UPGRADED,
            entity_type="account",
            entity_id=account_id,
            account_id=account_id,
            description="Legacy plaintext password replaced with a bcrypt hash",
        )

    @staticmethod
    def password_reset_requested(account_found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PASSWORD_RESET_REQUESTED,
            entity_type="account",
            description="Password reset requested",
            details={"account_found": account_found},
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(
        account_id: Optional[str],
        transaction_count: int,
        category_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            entity_id=account_id,
            account_id=account_id,
            description="Ledger loaded" if account_id else "Ledger reset (no session)",
            details={
                "transaction_count": transaction_count,
                "category_count": category_count,
            },
        )

    @staticmethod
    def categories_seeded(account_id: str, category_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORIES_SEEDED,
            entity_type="ledger",
            entity_id=account_id,
            account_id=account_id,
            description=f"Seeded {category_count} default categories",
            details={"category_count": category_count},
        )

    @staticmethod
    def transaction_added(
        account_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            account_id=account_id,
            description=f"Transaction added: {transaction_type} {amount}",
            details={
                "type": transaction_type,
                "amount": str(amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_updated(
        account_id: str,
        transaction_id: str,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            account_id=account_id,
            description=f"Transaction updated: {', '.join(changed_fields) or 'no changes'}",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(account_id: str, transaction_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            account_id=account_id,
            description="Transaction deleted",
            is_user_action=True,
        )

    @staticmethod
    def category_added(
        account_id: str,
        category_id: str,
        name: str,
        category_type: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_ADDED,
            entity_type="category",
            entity_id=category_id,
            account_id=account_id,
            description=f"Category added: {name}",
            details={"name": name, "type": category_type},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        account_id: Optional[str],
        entity_type: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            account_id=account_id,
            description=f"Validation failed with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def stored_data_recovered(
        key: str,
        reason: str,
        dropped_records: int = 0,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORED_DATA_RECOVERED,
            severity=AuditSeverity.WARNING,
            entity_type="storage",
            entity_id=key,
            description=f"Malformed data under '{key}' replaced with defaults",
            details={
                "key": key,
                "dropped_records": dropped_records,
            },
            error_message=reason,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
