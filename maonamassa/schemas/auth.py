# maonamassa/schemas/auth.py
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from sqlmodel import SQLModel

Role = Literal["client", "professional"]


class Credentials(BaseModel):
    """
    Email + password pair.

    Accepts the json-server-auth names (email/password) as well as
    identity/secret. Both default to "" so that an incomplete payload
    reaches the service and fails with InvalidCredentialFormat instead
    of a generic 422.
    """

    model_config = ConfigDict(extra="allow")

    email: str = Field(
        default="",
        validation_alias=AliasChoices("email", "identity"),
    )
    password: str = Field(
        default="",
        validation_alias=AliasChoices("password", "secret"),
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RegisterRequest(Credentials):
    """
    Payload for POST /register.

    Extra profile fields (name, phone, ...) are kept on the user record.
    """

    role: str = "client"
    phone: str | None = None

    def profile(self) -> dict[str, Any]:
        """Extra fields to store on the user record, credentials excluded."""
        fields = dict(self.model_extra or {})
        for key in (
            "id", "email", "identity", "password", "secret",
            "passwordHash", "createdAt", "updatedAt",
        ):
            fields.pop(key, None)
        if self.phone is not None:
            fields["phone"] = self.phone
        fields["role"] = self.role
        return fields


class LoginRequest(Credentials):
    """Payload for POST /login."""


class AuthResponse(SQLModel):
    """Token + public user view returned by register/login."""

    token: str
    user: dict[str, Any]
