# maonamassa/services/auth_service.py
import logging
from typing import Any, get_args

from email_validator import EmailNotValidError, validate_email

from maonamassa.core.config import Settings
from maonamassa.core.errors import (
    DuplicateIdentity,
    InvalidCredentialFormat,
    InvalidCredentials,
)
from maonamassa.core.permissions import Collection
from maonamassa.core.security import (
    create_access_token,
    hash_password,
    verify_and_update,
)
from maonamassa.core.timestamps import apply_timestamps
from maonamassa.repositories.record_store import Record, RecordStore
from maonamassa.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, Role

logger = logging.getLogger(__name__)

USERS = Collection.USERS.value

# Never leaves the service layer. `password` holds a legacy hash on
# users imported from json-server-auth before seeding moves it.
PRIVATE_USER_FIELDS = ("passwordHash", "password")


def public_user(record: Record) -> Record:
    """User record as returned to clients (no password hash)."""
    return {k: v for k, v in record.items() if k not in PRIVATE_USER_FIELDS}


class AuthService:
    """
    Registration, login and credential policy.

    Responsibilities:
      - validate email / password format and uniqueness
      - store passwords as salted hashes only
      - mint bearer tokens bound to the user id
      - make "unknown email" and "wrong password" indistinguishable
    """

    # ----- Credential policy -----

    def check_email(self, email: str) -> str:
        """
        Validate email syntax (no DNS lookup).

        Raises:
            InvalidCredentialFormat: empty or malformed email.
        """
        if not email:
            raise InvalidCredentialFormat("Email is required")
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            raise InvalidCredentialFormat("Email format is invalid")
        return email

    def check_password(self, password: str, settings: Settings) -> str:
        """
        Raises:
            InvalidCredentialFormat: empty or shorter than PASSWORD_MIN_LENGTH.
        """
        if not password:
            raise InvalidCredentialFormat("Password is required")
        if len(password) < settings.PASSWORD_MIN_LENGTH:
            raise InvalidCredentialFormat(
                f"Password is too short (minimum {settings.PASSWORD_MIN_LENGTH} characters)"
            )
        return password

    def check_role(self, role) -> str:
        """
        Raises:
            InvalidCredentialFormat: role is not client or professional.
        """
        roles = get_args(Role)
        if role not in roles:
            raise InvalidCredentialFormat(f"Role must be one of: {', '.join(roles)}")
        return role

    def ensure_email_available(
        self,
        store: RecordStore,
        email: str,
        exclude_id: int | None = None,
    ) -> None:
        """
        Raises:
            DuplicateIdentity: another user already has this email.
        """
        for user in store.list(USERS, {"email": email}):
            if user["id"] != exclude_id:
                raise DuplicateIdentity()

    def hash_new_password(self, password: str, settings: Settings) -> str:
        """Apply the password policy, then hash."""
        return hash_password(self.check_password(password, settings))

    # ----- Operations -----

    def register(
        self,
        store: RecordStore,
        settings: Settings,
        payload: RegisterRequest,
    ) -> AuthResponse:
        """
        Create a user and log it in.

        Steps:
          1. Validate email, password and role.
          2. Reject an email that is already registered.
          3. Store the user with a password hash (+ timestamps).
          4. Return a token bound to the new id.
        """
        email = self.check_email(payload.email)
        password_hash = self.hash_new_password(payload.password, settings)

        self.check_role(payload.role)

        self.ensure_email_available(store, email)

        record = apply_timestamps(
            "POST",
            {**payload.profile(), "email": email, "passwordHash": password_hash},
        )
        user = store.create(USERS, record)
        logger.info(f"Registered user {user['id']} ({user['role']})")

        return self._issue(user, settings)

    def login(
        self,
        store: RecordStore,
        settings: Settings,
        payload: LoginRequest,
    ) -> AuthResponse:
        """
        Check credentials and return a fresh token.

        Raises:
            InvalidCredentials: unknown email OR wrong password, same error
            for both.
        """
        users = store.list(USERS, {"email": payload.email}) if payload.email else []
        user = users[0] if users else None

        # Always run one hash verification, even for unknown emails.
        stored_hash = (user.get("passwordHash") or user.get("password")) if user else None
        valid, new_hash = verify_and_update(payload.password, stored_hash)
        if not valid or user is None:
            logger.warning("Failed login attempt")
            raise InvalidCredentials()

        if new_hash:
            upgraded = {k: v for k, v in user.items() if k != "password"}
            user = store.update(USERS, user["id"], {**upgraded, "passwordHash": new_hash})
            logger.info(f"Upgraded password hash of user {user['id']}")

        return self._issue(user, settings)

    # ----- Helpers -----

    def _issue(self, user: dict[str, Any], settings: Settings) -> AuthResponse:
        return AuthResponse(
            token=create_access_token(user["id"], settings),
            user=public_user(user),
        )
