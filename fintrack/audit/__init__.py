"""Audit logging package."""

from fintrack.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
