# maonamassa/services/record_service.py
import logging
from typing import Any

from maonamassa.core.config import Settings
from maonamassa.core.errors import Forbidden, NotFound, Unauthenticated
from maonamassa.core.permissions import (
    Collection,
    authorize,
    get_rule,
    readable,
    require_public_or_auth,
)
from maonamassa.repositories.record_store import Record, RecordStore
from maonamassa.services.auth_service import AuthService, public_user
from maonamassa.services.contract_service import ContractService

logger = logging.getLogger(__name__)


class RecordService:
    """
    Ownership-gated CRUD over the record store.

    Responsibilities:
      - apply the collection's ownership rule to every operation
      - stamp the owner field on create (never trust the client)
      - keep id, owner fields and createdAt immutable on update
      - hide password hashes and hash new passwords on `users`
    """

    def __init__(self, auth: AuthService, contracts: ContractService):
        self.auth = auth
        self.contracts = contracts

    # ----- Reads -----

    def list_records(
        self,
        store: RecordStore,
        collection: Collection,
        user_id: int | None,
        filters: dict[str, Any] | None = None,
    ) -> list[Record]:
        """
        List records the caller may read.

        - Public-read collections: everything (anonymous allowed).
        - Otherwise: only owned/related records; anonymous => 401.
        """
        require_public_or_auth(collection, "read", user_id)
        records = readable(collection, user_id, store.list(collection.value, filters))
        return [self._present(collection, r) for r in records]

    def get_record(
        self,
        store: RecordStore,
        collection: Collection,
        user_id: int | None,
        record_id: int,
    ) -> Record:
        require_public_or_auth(collection, "read", user_id)
        record = self._get_or_404(store, collection, record_id)
        authorize(collection, "read", user_id, record)
        return self._present(collection, record)

    # ----- Writes -----

    def create_record(
        self,
        store: RecordStore,
        settings: Settings,
        collection: Collection,
        user_id: int | None,
        payload: Record,
    ) -> Record:
        """
        Insert a record owned by the caller.

        The creator field (e.g. userId, clientId) is overwritten with the
        caller id; a client-supplied `id` is ignored.
        """
        if user_id is None:
            raise Unauthenticated()

        rule = get_rule(collection)
        if not rule.owner.write:
            raise Forbidden()

        record = {k: v for k, v in payload.items() if k != "id"}
        record[rule.creator_field] = user_id

        if collection is Collection.CONTRACTS:
            record = self.contracts.initialize(
                record,
                strict=settings.STRICT_STATUS_TRANSITIONS or settings.STRICT_RATING,
            )

        created = store.create(collection.value, record)
        logger.info(f"Created {collection.value}/{created['id']} for user {user_id}")
        return self._present(collection, created)

    def update_record(
        self,
        store: RecordStore,
        settings: Settings,
        collection: Collection,
        user_id: int | None,
        record_id: int,
        payload: Record,
        partial: bool = False,
    ) -> Record:
        """
        Replace (PUT) or merge (PATCH) a record.

        Whatever the payload says, these are carried over from the stored
        record: id, owner fields that are already set, createdAt.
        """
        require_public_or_auth(collection, "write", user_id)
        current = self._get_or_404(store, collection, record_id)
        authorize(collection, "write", user_id, current)

        updated = {**current, **payload} if partial else dict(payload)

        for field in get_rule(collection).owner_fields:
            if current.get(field) is not None:
                updated[field] = current[field]
        if "createdAt" in current:
            updated["createdAt"] = current["createdAt"]
        updated["id"] = record_id

        if collection is Collection.USERS:
            updated = self._prepare_user(store, settings, current, updated)
        elif collection is Collection.CONTRACTS:
            updated = self.contracts.check_record_update(
                current, updated, strict=settings.STRICT_STATUS_TRANSITIONS
            )

        saved = store.update(collection.value, record_id, updated)
        if saved is None:
            raise NotFound()
        return self._present(collection, saved)

    def delete_record(
        self,
        store: RecordStore,
        collection: Collection,
        user_id: int | None,
        record_id: int,
    ) -> None:
        require_public_or_auth(collection, "write", user_id)
        current = self._get_or_404(store, collection, record_id)
        authorize(collection, "write", user_id, current)

        if not store.delete(collection.value, record_id):
            raise NotFound()
        logger.info(f"Deleted {collection.value}/{record_id} by user {user_id}")

    # ----- Helpers -----

    def _get_or_404(
        self,
        store: RecordStore,
        collection: Collection,
        record_id: int,
    ) -> Record:
        record = store.get(collection.value, record_id)
        if record is None:
            raise NotFound()
        return record

    def _prepare_user(
        self,
        store: RecordStore,
        settings: Settings,
        current: Record,
        updated: Record,
    ) -> Record:
        """
        User-specific write rules:
          - `password` is hashed into passwordHash (same policy as register)
          - passwordHash itself cannot be written
          - a new email must be valid and unused
          - role stays client or professional (a PUT without it keeps the
            stored one)
        """
        updated["passwordHash"] = current.get("passwordHash")

        # A PATCH merge brings back a stored legacy `password` hash; only a
        # value the caller actually changed is a new password.
        password = updated.pop("password", None)
        if password is not None and password != current.get("password"):
            updated["passwordHash"] = self.auth.hash_new_password(str(password), settings)
        elif current.get("password") and not updated["passwordHash"]:
            updated["passwordHash"] = current["password"]

        role = updated.setdefault("role", current.get("role", "client"))
        self.auth.check_role(role)

        email = updated.setdefault("email", current.get("email"))
        if email != current.get("email"):
            email = self.auth.check_email(str(email or "").strip().lower())
            self.auth.ensure_email_available(store, email, exclude_id=current["id"])
            updated["email"] = email

        return updated

    def _present(self, collection: Collection, record: Record) -> Record:
        if collection is Collection.USERS:
            return public_user(record)
        return record
