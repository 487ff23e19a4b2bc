# maonamassa/core/auth.py
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from maonamassa.core.config import Settings, get_settings
from maonamassa.core.errors import Unauthenticated
from maonamassa.core.security import verify_token

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support anonymous callers on public-read collections.
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> int | None:
    """
    Resolve the caller from the bearer token.

    Flow:
      1. No Authorization header => anonymous => return None.
      2. Otherwise verify signature/expiry and return the `sub` user id.

    Tokens are stateless: no store lookup happens here.

    Raises:
        Unauthenticated (401): header present but token invalid/expired.
    """
    if credentials is None:
        return None  # anonymous

    return verify_token(credentials.credentials, settings)


def require_auth(user_id: int | None = Depends(get_current_user_id)) -> int:
    """
    Enforce authentication.

    Returns:
        The authenticated user id.

    Raises:
        Unauthenticated (401): if the caller is anonymous.
    """
    if user_id is None:
        raise Unauthenticated()
    return user_id
