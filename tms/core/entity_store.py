"""
GENERIC IN-MEMORY ENTITY STORE

One store class serves all eight document/master-data collections.
Each instance is configured with an EntityDefinition (required fields,
search fields, defaults, derived-field builder) and enforces the
status lifecycle and role authority on every mutation.

Rules:
- Records are plain dicts keyed by opaque id
- Callers only ever receive copies
- Status only changes through change_status (lifecycle-checked)
- No deletion
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from tms.config import DOCUMENT_YEAR
from tms.core.id_generator import generate_entity_id, next_document_number
from tms.core.lifecycle import DERIVED, InvalidTransition, apply_transition, get_policy
from tms.core.role_guard import AuthorizationError, can_perform, validate_role_authority
from tms.security.roles import CHANGE_STATUS, CREATE, VIEW
from tms.security.session import SessionContext

logger = logging.getLogger(__name__)

STATUS_FILTER_ALL = "all"

# Fields a caller may never write directly
PROTECTED_FIELDS = ("id", "created_at", "status")


class ValidationMissing(Exception):
    """Raised when a record is created without its required fields."""

    def __init__(self, entity_type: str, missing: List[str]):
        self.entity_type = entity_type
        self.missing = missing
        super().__init__(
            f"Cannot create {entity_type}: missing {', '.join(missing)}"
        )


class EntityNotFound(Exception):
    """Raised when an id is not present in the store."""
    pass


@dataclass(frozen=True)
class EntityDefinition:
    entity_type: str
    resource: str
    required_fields: Tuple[str, ...]
    search_fields: Tuple[str, ...]
    defaults: Callable[[datetime], Dict[str, Any]] = lambda now: {}
    derive: Optional[Callable[[Dict[str, Any], datetime], Dict[str, Any]]] = None
    number_field: Optional[str] = None
    number_prefix: Optional[str] = None
    numeric_fields: Dict[str, type] = field(default_factory=dict)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _coerce_number(value: Any, kind: type) -> Any:
    """Parse form input the way the console always has: junk becomes 0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return kind(value)
    try:
        return kind(float(str(value).strip()))
    except (TypeError, ValueError):
        return kind(0)


class EntityStore:
    """
    In-memory collection for one entity type.

    A SessionContext, when given, supplies the acting role for every
    mutation and an explicit ``role`` must match it. Without one,
    callers may pass ``role`` explicitly; with neither, role checks are
    skipped (seeding and internal jobs).
    """

    def __init__(
        self,
        definition: EntityDefinition,
        session: Optional[SessionContext] = None,
        clock: Optional[Callable[[], datetime]] = None,
        document_year: int = DOCUMENT_YEAR,
    ):
        self.definition = definition
        self.session = session
        self.document_year = document_year
        self._clock = clock or datetime.now
        self._records: Dict[str, Dict[str, Any]] = {}
        self._order: List[str] = []  # most recent first

    # --------------------------------------------------
    # Internals
    # --------------------------------------------------
    @property
    def entity_type(self) -> str:
        return self.definition.entity_type

    def _now(self) -> datetime:
        return self._clock()

    def _acting_role(self, role: Optional[str]) -> Optional[str]:
        """
        Role the mutation runs as.

        A bound session always wins; an explicit ``role`` that differs
        from it is refused rather than trusted.
        """
        if self.session is None:
            return role
        if role is not None and role != self.session.role:
            raise AuthorizationError(
                f"Role '{role}' does not match the session role '{self.session.role}'"
            )
        return self.session.role

    def _authorize(self, role: Optional[str], action: str) -> None:
        try:
            acting = self._acting_role(role)
            if acting is None:
                return
            validate_role_authority(acting, self.definition.resource, action)
        except AuthorizationError:
            logger.warning(
                f"Denied {action} on {self.definition.resource} for role '{role or self.session.role}'"
            )
            raise

    def _derive(self, record: Dict[str, Any], now: datetime) -> Dict[str, Any]:
        derived = dict(record)
        if self.definition.derive is not None:
            derived = self.definition.derive(derived, now)
        if get_policy(self.entity_type)["kind"] == DERIVED:
            derived = apply_transition(self.entity_type, derived, None)
        return derived

    def _require(self, entity_id: str) -> Dict[str, Any]:
        if entity_id not in self._records:
            raise EntityNotFound(f"{self.entity_type} '{entity_id}' not found")
        return self._records[entity_id]

    def _coerce(self, record: Dict[str, Any]) -> None:
        for name, kind in self.definition.numeric_fields.items():
            if name in record and record[name] is not None:
                record[name] = _coerce_number(record[name], kind)

    # --------------------------------------------------
    # Mutations
    # --------------------------------------------------
    def create(self, fields: Dict[str, Any], role: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a record from form fields.

        Raises ValidationMissing when a required field is absent or
        blank, AuthorizationError when the acting role may not create,
        and InvalidTransition when a caller-supplied status differs from
        the lifecycle's starting status.
        """
        self._authorize(role, CREATE)

        missing = [name for name in self.definition.required_fields if is_blank(fields.get(name))]
        if missing:
            logger.warning(f"Rejected {self.entity_type} creation, missing: {missing}")
            raise ValidationMissing(self.entity_type, missing)

        now = self._now()
        policy = get_policy(self.entity_type)

        record: Dict[str, Any] = dict(self.definition.defaults(now))
        record.update({
            name: value for name, value in fields.items()
            if name not in PROTECTED_FIELDS and not is_blank(value)
        })
        self._coerce(record)

        record["id"] = generate_entity_id()
        record["created_at"] = now.isoformat(timespec="seconds")

        number_field = self.definition.number_field
        if number_field and is_blank(record.get(number_field)):
            record[number_field] = next_document_number(
                self.definition.number_prefix,
                self.document_year,
                (r.get(number_field) for r in self._records.values()),
            )

        if policy["kind"] != DERIVED:
            record["status"] = policy["initial"]

        record = self._derive(record, now)

        requested = fields.get("status")
        if requested is not None and requested != record["status"]:
            raise InvalidTransition(
                self.entity_type, None, requested,
                f"new records start as {record['status']}",
            )

        self._records[record["id"]] = record
        self._order.insert(0, record["id"])

        logger.info(
            f"Created {self.entity_type} {record.get(number_field) if number_field else record['id']}"
        )
        return dict(record)

    def change_status(
        self,
        entity_id: str,
        target_status: Optional[str],
        role: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Move a record to ``target_status``.

        Raises EntityNotFound, AuthorizationError or InvalidTransition;
        the stored record is untouched when any of them is raised.
        """
        self._authorize(role, CHANGE_STATUS)
        return self._transition(entity_id, target_status)

    def _transition(self, entity_id: str, target_status: Optional[str]) -> Dict[str, Any]:
        """Lifecycle-checked status change without a role check (system jobs)."""
        current = self._require(entity_id)

        now = self._now()
        try:
            updated = apply_transition(self.entity_type, current, target_status, now=now)
        except InvalidTransition as e:
            logger.warning(f"Rejected {self.entity_type} {entity_id}: {e}")
            raise

        updated = self._derive(updated, now)
        self._records[entity_id] = updated

        logger.info(
            f"{self.entity_type} {entity_id}: {current.get('status')} → {updated['status']}"
        )
        return dict(updated)

    def update_fields(
        self,
        entity_id: str,
        fields: Dict[str, Any],
        role: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Replace non-status fields and re-run derivations."""
        self._authorize(role, CHANGE_STATUS)

        protected = [name for name in fields if name in PROTECTED_FIELDS]
        if protected:
            raise ValueError(f"Fields cannot be written directly: {protected}")

        current = self._require(entity_id)
        updated = {**current, **fields}
        self._coerce(updated)
        updated = self._derive(updated, self._now())
        self._records[entity_id] = updated
        return dict(updated)

    def seed(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        Load pre-built records (mock data) behind any existing ones.

        Seeded records keep their ids and statuses; missing ids are
        generated and derived fields are computed.
        """
        now = self._now()
        count = 0
        for raw in records:
            record = dict(self.definition.defaults(now))
            record.update(raw)
            self._coerce(record)
            record.setdefault("id", generate_entity_id())
            record.setdefault("created_at", now.isoformat(timespec="seconds"))
            record = self._derive(record, now)

            if record["id"] not in self._records:
                self._order.append(record["id"])
            self._records[record["id"]] = record
            count += 1
        return count

    # --------------------------------------------------
    # Queries
    # --------------------------------------------------
    def get(self, entity_id: str) -> Dict[str, Any]:
        return self._derive(self._require(entity_id), self._now())

    def snapshot(self) -> List[Dict[str, Any]]:
        """All records, most recent first, with fresh derived fields."""
        now = self._now()
        return [self._derive(self._records[i], now) for i in self._order]

    def list(self, search_term: str = "", status_filter: str = STATUS_FILTER_ALL) -> List[Dict[str, Any]]:
        """
        Filter by a case-insensitive substring over the search fields and
        by exact status (``"all"`` disables the status filter).
        """
        term = (search_term or "").strip().lower()
        results = []

        for record in self.snapshot():
            if term and not any(
                term in str(record.get(name) or "").lower()
                for name in self.definition.search_fields
            ):
                continue
            if status_filter not in (None, STATUS_FILTER_ALL) and record.get("status") != status_filter:
                continue
            results.append(record)

        return results

    def where(self, **equals: Any) -> List[Dict[str, Any]]:
        """Records whose fields equal all the given values."""
        return [
            record for record in self.snapshot()
            if all(record.get(name) == value for name, value in equals.items())
        ]

    def can_view(self, role: Optional[str] = None) -> bool:
        try:
            acting = self._acting_role(role)
        except AuthorizationError:
            return False
        if acting is None:
            return True
        return can_perform(acting, self.definition.resource, VIEW)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._records
