# maonamassa/routers/contracts.py
from fastapi import APIRouter, Depends

from maonamassa.core.auth import get_current_user_id
from maonamassa.core.config import Settings, get_settings
from maonamassa.database import get_store
from maonamassa.repositories.record_store import RecordStore
from maonamassa.schemas.contract import (
    RatingRecorded,
    RatingSubmit,
    StatusChanged,
    StatusUpdate,
)
from maonamassa.services.contract_service import ContractService

router = APIRouter(prefix="/contracts", tags=["Contracts"])

service = ContractService()


@router.put("/{contract_id}/status", response_model=StatusChanged)
def update_contract_status(
    contract_id: int,
    payload: StatusUpdate,
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    user_id: int | None = Depends(get_current_user_id),
):
    """
    Move a contract through its lifecycle.

      criado -> aceito -> em_andamento -> concluido
      (cancelado from any non-terminal state)

    Auth:
      - client or professional of the contract.

    Adjacency is only enforced with STRICT_STATUS_TRANSITIONS.
    """
    return service.change_status(
        store,
        contract_id,
        user_id,
        payload,
        strict=settings.STRICT_STATUS_TRANSITIONS,
    )


@router.put("/{contract_id}/avaliar", response_model=RatingRecorded)
def rate_contract(
    contract_id: int,
    payload: RatingSubmit,
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    user_id: int | None = Depends(get_current_user_id),
):
    """
    Rate a contract (1..5) with an optional comment.

    Auth:
      - client or professional of the contract.
    """
    return service.rate(
        store,
        contract_id,
        user_id,
        payload,
        strict=settings.STRICT_RATING,
    )
