"""
Data Models Package

This package contains all Pydantic models used in fintrack.
Everything read from or written to storage conforms to these schemas.
"""

from fintrack.models.account import Account, StoredAccount, normalize_email
from fintrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from fintrack.models.ledger import (
    DEFAULT_CATEGORIES,
    Category,
    CategoryDraft,
    CategoryIcon,
    Transaction,
    TransactionDraft,
    TransactionType,
    TransactionUpdate,
    default_categories,
)
from fintrack.models.reports import (
    CategoryShare,
    DailyTotals,
    DashboardSummary,
    Period,
    PlanningSummary,
)
from fintrack.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Account models
    "Account",
    "StoredAccount",
    "normalize_email",
    # Ledger models
    "DEFAULT_CATEGORIES",
    "Category",
    "CategoryDraft",
    "CategoryIcon",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "TransactionUpdate",
    "default_categories",
    # Report models
    "CategoryShare",
    "DailyTotals",
    "DashboardSummary",
    "Period",
    "PlanningSummary",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
