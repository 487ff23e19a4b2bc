# maonamassa/routers/auth.py
from fastapi import APIRouter, Depends, status

from maonamassa.core.config import Settings, get_settings
from maonamassa.database import get_store
from maonamassa.repositories.record_store import RecordStore
from maonamassa.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from maonamassa.services.auth_service import AuthService

router = APIRouter(tags=["Auth"])

service = AuthService()


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
@router.post(
    "/users",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
def register(
    payload: RegisterRequest,
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Create an account and return a bearer token.

    Body: {email, password, role?, phone?, ...profile} (identity/secret
    are accepted as aliases of email/password).

    Errors:
      - 400 InvalidCredentialFormat
      - 409 DuplicateIdentity
    """
    return service.register(store, settings, payload)


@router.post("/login", response_model=AuthResponse)
@router.post("/signin", response_model=AuthResponse, include_in_schema=False)
def login(
    payload: LoginRequest,
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Exchange email + password for a bearer token.

    Errors:
      - 401 InvalidCredentials (same response for unknown email and
        wrong password)
    """
    return service.login(store, settings, payload)
