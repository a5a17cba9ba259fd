"""
Account Models

An Account is what the rest of the application sees: never a password.
StoredAccount is the record persisted in the account collection.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Account(BaseModel):
    """A registered user identity, safe to hand to the UI."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique account id"
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=254,
        description="Login e-mail, unique case-insensitively"
    )
    name: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Display name"
    )

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Only a minimal shape check; delivery is never attempted."""
        local, _, domain = v.partition("@")
        if not local or not domain:
            raise ValueError(f"Invalid e-mail address: {v}")
        return v

    @property
    def email_key(self) -> str:
        """Normalized e-mail used for uniqueness and lookups."""
        return normalize_email(self.email)


class StoredAccount(Account):
    """
    An account as persisted under the `accounts` key.

    Records written by the original app carry a plaintext `password`.
    They still load; the identity store replaces the plaintext with a
    bcrypt hash the first time the owner logs in.
    """

    password_hash: Optional[str] = Field(
        default=None,
        description="bcrypt hash of the password"
    )
    password: Optional[str] = Field(
        default=None,
        description="Legacy plaintext password"
    )

    @model_validator(mode='after')
    def validate_credentials(self) -> 'StoredAccount':
        if not self.password_hash and self.password is None:
            raise ValueError("Stored account has no credentials")
        return self

    @property
    def is_legacy(self) -> bool:
        return not self.password_hash

    def to_account(self) -> Account:
        """Strip credentials."""
        return Account(id=self.id, email=self.email, name=self.name)


def normalize_email(email: str) -> str:
    return email.strip().casefold()
