"""Accounts and the device session."""

from fintrack.identity.store import (
    ACCOUNTS_KEY,
    PASSWORD_RESET_MESSAGE,
    SESSION_KEY,
    DuplicateEmailError,
    IdentityError,
    IdentityStore,
    InvalidCredentialsError,
)

__all__ = [
    "ACCOUNTS_KEY",
    "PASSWORD_RESET_MESSAGE",
    "SESSION_KEY",
    "DuplicateEmailError",
    "IdentityError",
    "IdentityStore",
    "InvalidCredentialsError",
]
