# maonamassa/routers/records.py
from typing import Any

from fastapi import APIRouter, Depends, Request

from maonamassa.core.auth import get_current_user_id, require_auth
from maonamassa.core.config import Settings, get_settings
from maonamassa.core.permissions import Collection
from maonamassa.core.timestamps import stamped_payload
from maonamassa.database import get_store
from maonamassa.repositories.record_store import RecordStore
from maonamassa.services.auth_service import AuthService
from maonamassa.services.contract_service import ContractService
from maonamassa.services.record_service import RecordService

service = RecordService(AuthService(), ContractService())


def build_router(collection: Collection) -> APIRouter:
    """
    json-server style CRUD routes for one collection.

      GET    /{collection}         list (?field=value filters)
      GET    /{collection}/{id}    detail
      POST   /{collection}         create (not for users: see /register)
      PUT    /{collection}/{id}    replace
      PATCH  /{collection}/{id}    merge
      DELETE /{collection}/{id}    remove (not for users)

    Every route is gated by the collection's ownership rule.
    """
    router = APIRouter(
        prefix=f"/{collection.value}",
        tags=[collection.value.capitalize()],
    )

    @router.get("")
    def list_records(
        request: Request,
        store: RecordStore = Depends(get_store),
        user_id: int | None = Depends(get_current_user_id),
    ) -> list[dict[str, Any]]:
        # json-server meta params (_sort, _page, ...) are not field filters
        filters = {
            k: v for k, v in request.query_params.items() if not k.startswith("_")
        }
        return service.list_records(store, collection, user_id, filters)

    @router.get("/{record_id}")
    def get_record(
        record_id: int,
        store: RecordStore = Depends(get_store),
        user_id: int | None = Depends(get_current_user_id),
    ) -> dict[str, Any]:
        return service.get_record(store, collection, user_id, record_id)

    if collection is not Collection.USERS:

        @router.post("", status_code=201)
        def create_record(
            payload: dict[str, Any] = Depends(stamped_payload),
            store: RecordStore = Depends(get_store),
            settings: Settings = Depends(get_settings),
            user_id: int = Depends(require_auth),
        ) -> dict[str, Any]:
            return service.create_record(store, settings, collection, user_id, payload)

    @router.put("/{record_id}")
    def replace_record(
        record_id: int,
        payload: dict[str, Any] = Depends(stamped_payload),
        store: RecordStore = Depends(get_store),
        settings: Settings = Depends(get_settings),
        user_id: int | None = Depends(get_current_user_id),
    ) -> dict[str, Any]:
        return service.update_record(
            store, settings, collection, user_id, record_id, payload
        )

    @router.patch("/{record_id}")
    def patch_record(
        record_id: int,
        payload: dict[str, Any] = Depends(stamped_payload),
        store: RecordStore = Depends(get_store),
        settings: Settings = Depends(get_settings),
        user_id: int | None = Depends(get_current_user_id),
    ) -> dict[str, Any]:
        return service.update_record(
            store, settings, collection, user_id, record_id, payload, partial=True
        )

    # Users are never hard-deleted
    if collection is not Collection.USERS:

        @router.delete("/{record_id}")
        def delete_record(
            record_id: int,
            store: RecordStore = Depends(get_store),
            user_id: int | None = Depends(get_current_user_id),
        ) -> dict[str, Any]:
            service.delete_record(store, collection, user_id, record_id)
            return {}

    return router


routers = [build_router(collection) for collection in Collection]
