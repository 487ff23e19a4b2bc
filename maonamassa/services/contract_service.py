# maonamassa/services/contract_service.py
import logging
from numbers import Real

from maonamassa.core.errors import (
    AlreadyRated,
    InvalidRating,
    InvalidStatus,
    InvalidTransition,
    NotFound,
)
from maonamassa.core.permissions import (
    Collection,
    authorize,
    require_public_or_auth,
)
from maonamassa.core.timestamps import utcnow_iso
from maonamassa.repositories.record_store import Record, RecordStore
from maonamassa.schemas.contract import (
    VALID_STATUS,
    RatingRecorded,
    RatingSubmit,
    StatusChanged,
    StatusUpdate,
)

logger = logging.getLogger(__name__)

CONTRACTS = Collection.CONTRACTS

INITIAL_STATUS = "criado"

# Adjacency of the contract lifecycle (enforced only in strict mode)
TRANSITIONS: dict[str, set[str]] = {
    "criado": {"aceito", "cancelado"},
    "aceito": {"em_andamento", "cancelado"},
    "em_andamento": {"concluido", "cancelado"},
    "concluido": set(),
    "cancelado": set(),
}

# Extra timestamp recorded when a contract enters these states
STATUS_TIMESTAMPS = {
    "aceito": "acceptedAt",
    "concluido": "completedAt",
}

MIN_RATING = 1
MAX_RATING = 5


class ContractService:
    """
    Lifecycle of service requests (contracts).

    Responsibilities:
      - default status of new contracts
      - validate and persist status changes
      - validate and persist ratings

    Strict mode (settings) turns on the transition table and the
    "rate once, only when concluido" guard; by default any known status
    is accepted from any state and ratings are unrestricted.
    """

    # ----- Creation hook -----

    def initialize(self, record: Record, strict: bool = False) -> Record:
        """
        Set the initial status unless a valid one was supplied.

        In strict mode every contract starts as criado, whatever the
        client sends.
        """
        if strict or record.get("status") not in VALID_STATUS:
            record["status"] = INITIAL_STATUS
        return record

    # ----- Status -----

    def validate_status(self, status) -> str:
        """
        Raises:
            InvalidStatus (400): value outside the enumeration; the
            response lists the valid values.
        """
        if not isinstance(status, str) or status not in VALID_STATUS:
            raise InvalidStatus(
                f"Invalid status. Must be one of: {', '.join(VALID_STATUS)}",
                validStatus=VALID_STATUS,
            )
        return status

    def check_transition(self, current: str | None, new: str) -> None:
        """
        Strict-mode adjacency check.

          criado       -> aceito, cancelado
          aceito       -> em_andamento, cancelado
          em_andamento -> concluido, cancelado
          concluido    -> (no change)
          cancelado    -> (no change)

        Staying in the same state is always allowed.
        """
        current = current or INITIAL_STATUS
        if current == new:
            return

        allowed = TRANSITIONS.get(current, set())
        if new not in allowed:
            raise InvalidTransition(
                f"Invalid status transition: {current} -> {new}",
                **{"from": current, "to": new, "allowed": sorted(allowed)},
            )

    def check_record_update(
        self,
        current: Record,
        updated: Record,
        strict: bool = False,
    ) -> Record:
        """
        Status edits through the plain PUT/PATCH routes follow the same
        rules as /status. A replacement without status keeps the old one.
        """
        updated.setdefault("status", current.get("status"))
        if updated["status"] != current.get("status"):
            self.validate_status(updated["status"])
            if strict:
                self.check_transition(current.get("status"), updated["status"])
        return updated

    def change_status(
        self,
        store: RecordStore,
        contract_id: int,
        user_id: int | None,
        payload: StatusUpdate,
        strict: bool = False,
    ) -> StatusChanged:
        """
        Move a contract to a new status (either owner may do it).

        Order of checks:
          1. status is a known value (400)
          2. caller may write the contract (401/404/403)
          3. strict mode: transition is adjacent (400)
        """
        status = self.validate_status(payload.status)
        contract = self._load_for_write(store, contract_id, user_id)

        if strict:
            self.check_transition(contract.get("status"), status)

        now = utcnow_iso()
        changes = {"status": status, "updatedAt": now}
        if status in STATUS_TIMESTAMPS:
            changes[STATUS_TIMESTAMPS[status]] = now

        store.update(CONTRACTS.value, contract_id, {**contract, **changes})
        logger.info(
            f"Contract {contract_id}: {contract.get('status')} -> {status} by user {user_id}"
        )

        return StatusChanged(
            message=f"Status updated to: {status}",
            status=status,
            timestamp=now,
        )

    # ----- Rating -----

    def validate_rating(self, rating) -> None:
        """
        Raises:
            InvalidRating (400): missing, non-numeric or outside 1..5.
        """
        is_number = isinstance(rating, Real) and not isinstance(rating, bool)
        if not is_number or not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidRating(
                f"Rating must be between {MIN_RATING} and {MAX_RATING}"
            )

    def rate(
        self,
        store: RecordStore,
        contract_id: int,
        user_id: int | None,
        payload: RatingSubmit,
        strict: bool = False,
    ) -> RatingRecorded:
        """
        Record a rating + comment on a contract.

        Strict mode also requires:
          - status == concluido (InvalidRating otherwise)
          - no previous rating (AlreadyRated)
        """
        self.validate_rating(payload.rating)
        contract = self._load_for_write(store, contract_id, user_id)

        if strict:
            if contract.get("status") != "concluido":
                raise InvalidRating("Only concluded contracts can be rated")
            if contract.get("rating") is not None:
                raise AlreadyRated()

        now = utcnow_iso()
        changes = {
            "rating": payload.rating,
            "comment": payload.comment,
            "ratedAt": now,
            "updatedAt": now,
        }
        store.update(CONTRACTS.value, contract_id, {**contract, **changes})
        logger.info(f"Contract {contract_id} rated {payload.rating} by user {user_id}")

        return RatingRecorded(
            message="Rating recorded",
            rating=payload.rating,
            comment=payload.comment,
            timestamp=now,
        )

    # ----- Helpers -----

    def _load_for_write(
        self,
        store: RecordStore,
        contract_id: int,
        user_id: int | None,
    ) -> Record:
        require_public_or_auth(CONTRACTS, "write", user_id)

        contract = store.get(CONTRACTS.value, contract_id)
        if contract is None:
            raise NotFound("Contract not found")

        authorize(CONTRACTS, "write", user_id, contract)
        return contract
