# maonamassa/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt, JWTError
from passlib.context import CryptContext

from maonamassa.core.config import Settings
from maonamassa.core.errors import Unauthenticated

# Salted one-way hashes; verify() compares in constant time.
# bcrypt only verifies hashes imported from json-server-auth; they are
# deprecated and replaced by pbkdf2 on the next successful login.
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

# Verified against when the email is unknown, so a failed login costs the
# same whether or not the account exists.
_DUMMY_HASH = pwd_context.hash("not-a-real-password")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_and_update(password: str, hashed: str | None) -> tuple[bool, str | None]:
    """
    Check `password` against `hashed` and return (ok, new_hash).

    new_hash is a replacement when `hashed` uses a deprecated scheme
    (legacy bcrypt), None otherwise.
    """
    if not hashed:
        pwd_context.verify(password, _DUMMY_HASH)
        return False, None
    try:
        return pwd_context.verify_and_update(password, hashed)
    except ValueError:
        # Unrecognized / corrupted hash in the store
        return False, None


def verify_password(password: str, hashed: str | None) -> bool:
    return verify_and_update(password, hashed)[0]


def create_access_token(user_id: int, settings: Settings) -> str:
    """
    Mint a signed bearer token for `user_id`.

    Claims:
      - sub: user id (string, per JWT convention)
      - iat: issue time
      - exp: iat + ACCESS_TOKEN_EXPIRE_MINUTES
    """
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """
    Decode and verify a bearer token (signature + exp).

    Raises:
        Unauthenticated: if token is malformed, expired or tampered with.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        raise Unauthenticated("Invalid or expired token")


def verify_token(token: str | None, settings: Settings) -> int:
    """
    Resolve the user id a token is bound to.

    Raises:
        Unauthenticated: missing token, bad token, or bad `sub` claim.
    """
    if not token:
        raise Unauthenticated()

    payload = decode_access_token(token, settings)
    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid sub in token")
