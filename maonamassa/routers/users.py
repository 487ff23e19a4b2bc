# maonamassa/routers/users.py
from typing import Any

from fastapi import APIRouter, Depends

from maonamassa.core.auth import require_auth
from maonamassa.core.permissions import Collection
from maonamassa.database import get_store
from maonamassa.repositories.record_store import RecordStore
from maonamassa.routers.records import service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me")
def read_me(
    store: RecordStore = Depends(get_store),
    user_id: int = Depends(require_auth),
) -> dict[str, Any]:
    """
    Return the authenticated user's record (without password hash).

    Auth:
      - Requires a valid bearer token.
    """
    return service.get_record(store, Collection.USERS, user_id, user_id)
