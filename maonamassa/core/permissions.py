# maonamassa/core/permissions.py
"""
Ownership rules per collection and their evaluation.

Each collection has an OwnershipRule with three audiences:

  owner   - caller id equals one of the record's owner fields
  related - caller id equals one of the record's related fields
  public  - everybody else, including anonymous callers

and two verbs per audience (read, write). `OwnershipRule.mode` renders
the rule as a Unix-like three digit string (read=4, write=2), e.g.
"604" = owner read+write, nothing for related, public read.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from maonamassa.core.errors import Forbidden, Unauthenticated

logger = logging.getLogger(__name__)

Verb = Literal["read", "write"]

READ_BIT = 4
WRITE_BIT = 2


class Collection(str, Enum):
    USERS = "users"
    CLIENTS = "clients"
    PROFESSIONALS = "professionals"
    PORTFOLIOS = "portfolios"
    CONTRACTS = "contracts"
    SERVICES = "services"
    NOTIFICATIONS = "notifications"
    FAVORITES = "favorites"


@dataclass(frozen=True)
class Access:
    read: bool = False
    write: bool = False

    def allows(self, verb: Verb) -> bool:
        return self.read if verb == "read" else self.write

    @property
    def digit(self) -> int:
        return (READ_BIT if self.read else 0) + (WRITE_BIT if self.write else 0)

    @classmethod
    def from_digit(cls, digit: int) -> "Access":
        if not 0 <= digit <= 7:
            raise ValueError(f"Invalid permission digit: {digit}")
        return cls(read=bool(digit & READ_BIT), write=bool(digit & WRITE_BIT))


NONE = Access()
READ_WRITE = Access(read=True, write=True)


@dataclass(frozen=True)
class OwnershipRule:
    """
    Who may read/write the records of one collection.

    `owner_fields` are the record fields holding owner user ids; the first
    one is stamped with the caller id on create. `related_fields` hold ids
    of related parties.
    """

    owner_fields: tuple[str, ...]
    owner: Access = READ_WRITE
    related_fields: tuple[str, ...] = ()
    related: Access = NONE
    public: Access = NONE

    @property
    def mode(self) -> str:
        return f"{self.owner.digit}{self.related.digit}{self.public.digit}"

    @property
    def creator_field(self) -> str:
        return self.owner_fields[0]

    @classmethod
    def from_mode(
        cls,
        mode: str,
        owner_fields: tuple[str, ...],
        related_fields: tuple[str, ...] = (),
    ) -> "OwnershipRule":
        if len(mode) != 3 or not mode.isdigit():
            raise ValueError(f"Invalid rule mode: {mode!r}")
        owner, related, public = (Access.from_digit(int(d)) for d in mode)
        return cls(
            owner_fields=owner_fields,
            owner=owner,
            related_fields=related_fields,
            related=related,
            public=public,
        )

    def owners_of(self, record: dict[str, Any]) -> set[str]:
        return _ids(record, self.owner_fields)

    def related_of(self, record: dict[str, Any]) -> set[str]:
        return _ids(record, self.related_fields)

    def access_for(self, user_id: int | None, record: dict[str, Any]) -> Access:
        """Access granted to `user_id` (None = anonymous) on `record`."""
        if user_id is not None:
            caller = str(user_id)
            if caller in self.owners_of(record):
                return self.owner
            if caller in self.related_of(record):
                return self.related
        return self.public

    def can(self, verb: Verb, user_id: int | None, record: dict[str, Any]) -> bool:
        return self.access_for(user_id, record).allows(verb)


def _ids(record: dict[str, Any], fields: tuple[str, ...]) -> set[str]:
    # Ids are compared as strings: json payloads mix "3" and 3.
    return {str(record[f]) for f in fields if record.get(f) is not None}


# Contracts: client and professional are both owners, since the
# professional has to accept/advance the request the client created.
RULES: dict[Collection, OwnershipRule] = {
    Collection.USERS: OwnershipRule.from_mode("600", ("id",)),
    Collection.CLIENTS: OwnershipRule.from_mode("604", ("userId",)),
    Collection.PROFESSIONALS: OwnershipRule.from_mode("604", ("userId",)),
    Collection.PORTFOLIOS: OwnershipRule.from_mode("604", ("userId",)),
    Collection.SERVICES: OwnershipRule.from_mode("640", ("clientId",), ("professionalId",)),
    Collection.CONTRACTS: OwnershipRule.from_mode("600", ("clientId", "professionalId")),
    Collection.NOTIFICATIONS: OwnershipRule.from_mode("600", ("userId",)),
    Collection.FAVORITES: OwnershipRule.from_mode("600", ("userId",)),
}


def validate_rules(rules: dict[Collection, OwnershipRule] = RULES) -> None:
    """
    Check that every known collection has exactly one rule.

    Called once on startup.

    Raises:
        RuntimeError: on a missing or unknown collection, or a rule with
        no owner field.
    """
    known = set(Collection)
    declared = set(rules)

    missing = known - declared
    if missing:
        names = ", ".join(sorted(c.value for c in missing))
        raise RuntimeError(f"Missing ownership rule for: {names}")

    unknown = declared - known
    if unknown:
        raise RuntimeError(f"Ownership rule for unknown collection: {unknown}")

    for collection, rule in rules.items():
        if not rule.owner_fields:
            raise RuntimeError(f"Rule for {collection.value} has no owner field")


def get_rule(collection: Collection) -> OwnershipRule:
    return RULES[collection]


def require_public_or_auth(
    collection: Collection,
    verb: Verb,
    user_id: int | None,
) -> None:
    """
    Reject anonymous callers early when the public audience lacks `verb`.

    Runs before any record lookup so anonymous callers cannot probe ids.
    """
    if user_id is None and not get_rule(collection).public.allows(verb):
        raise Unauthenticated()


def authorize(
    collection: Collection,
    verb: Verb,
    user_id: int | None,
    record: dict[str, Any],
) -> None:
    """
    Ensure `user_id` may `verb` the given record.

    Raises:
        Unauthenticated: anonymous caller without public access.
        Forbidden: authenticated caller without access.
    """
    rule = get_rule(collection)
    if rule.can(verb, user_id, record):
        return

    if user_id is None:
        raise Unauthenticated()

    logger.warning(
        f"Denied {verb} on {collection.value}/{record.get('id')} for user {user_id}"
    )
    raise Forbidden()


def readable(
    collection: Collection,
    user_id: int | None,
    records: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Keep only the records `user_id` may read (list operations)."""
    rule = get_rule(collection)
    if rule.public.read:
        return records
    if user_id is None:
        raise Unauthenticated()
    return [r for r in records if rule.can("read", user_id, r)]
