# tms/core/lifecycle.py

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from tms.core.metrics import payment_state


class InvalidTransition(Exception):
    """Raised when a status change violates the entity's lifecycle."""

    def __init__(self, entity_type: str, current: Optional[str], target: Optional[str], reason: str):
        self.entity_type = entity_type
        self.current = current
        self.target = target
        self.reason = reason
        super().__init__(
            f"Invalid {entity_type} transition: {current} → {target} ({reason})"
        )


# Transition kinds
ORDERED = "ORDERED"   # forward-only along a progression
FREE = "FREE"         # any member of the status enum
DERIVED = "DERIVED"   # computed from amounts, never caller-supplied


# Single source of truth for entity status lifecycles
STATUS_POLICIES: Dict[str, Dict] = {
    "lr": {
        "kind": ORDERED,
        "progression": ("created", "in_transit", "delivered"),
        # "pending" sits outside the progression; it can move forward but
        # nothing moves back into it
        "statuses": ("created", "in_transit", "delivered", "pending"),
        "initial": "created",
    },
    "challan": {
        "kind": ORDERED,
        "progression": ("pending", "in_transit", "delivered"),
        "statuses": ("pending", "in_transit", "delivered"),
        "initial": "pending",
    },
    "invoice": {
        "kind": ORDERED,
        "progression": ("draft", "issued", "overdue", "paid"),
        "statuses": ("draft", "issued", "overdue", "paid"),
        "initial": "draft",
    },
    "payment": {
        "kind": DERIVED,
        "progression": (),
        "statuses": ("unpaid", "partial", "paid"),
        "initial": None,
    },
    "vehicle": {
        "kind": FREE,
        "progression": (),
        "statuses": ("active", "maintenance", "inactive"),
        "initial": "active",
    },
    "driver": {
        "kind": FREE,
        "progression": (),
        "statuses": ("active", "inactive", "suspended"),
        "initial": "active",
    },
    "route": {
        "kind": FREE,
        "progression": (),
        "statuses": ("active", "inactive"),
        "initial": "active",
    },
    "customer": {
        "kind": FREE,
        "progression": (),
        "statuses": ("active", "inactive", "suspended"),
        "initial": "active",
    },
}

# Field stamped with wall-clock time when the entity reaches "delivered"
DELIVERY_STAMPS = {
    "lr": "delivered_at",
    "challan": "actual_arrival",
}


def get_policy(entity_type: str) -> Dict:
    if entity_type not in STATUS_POLICIES:
        raise ValueError(f"Unknown entity type: {entity_type}")
    return STATUS_POLICIES[entity_type]


def can_transition(
    current: Optional[str],
    target: str,
    progression: Optional[Sequence[str]] = None,
    statuses: Optional[Iterable[str]] = None,
) -> bool:
    """
    Decide whether ``current → target`` is allowed.

    With a progression, the target must sit strictly later in the
    sequence than the current status. A current status outside the
    progression counts as index -1, so it can move to any member but
    nothing can move back to it.

    Without a progression every member of ``statuses`` is accepted
    (every value when ``statuses`` is omitted).
    """
    if not progression:
        return statuses is None or target in tuple(statuses)

    if target not in progression:
        return False

    current_index = progression.index(current) if current in progression else -1
    return progression.index(target) > current_index


def validate_transition(entity_type: str, current: Optional[str], target: str) -> None:
    """
    Validate a status change for an entity type.

    Raises InvalidTransition if invalid.
    """
    policy = get_policy(entity_type)
    statuses = policy["statuses"]

    if target not in statuses:
        raise InvalidTransition(entity_type, current, target, "unknown target status")

    if policy["kind"] == FREE:
        return

    if policy["kind"] == DERIVED:
        # Checked against the amounts in apply_transition
        return

    if current not in statuses:
        raise InvalidTransition(entity_type, current, target, "unknown current status")

    if not can_transition(current, target, policy["progression"]):
        if current == target:
            reason = "already in this status"
        else:
            reason = "backward or out-of-sequence move"
        raise InvalidTransition(entity_type, current, target, reason)


def derived_status(entity_type: str, entity: Dict) -> str:
    """Status of a DERIVED entity, computed from its amounts."""
    if get_policy(entity_type)["kind"] != DERIVED:
        raise ValueError(f"{entity_type} status is not derived")
    return payment_state(entity.get("invoice_amount") or 0, entity.get("paid_amount") or 0)["status"]


def apply_transition(
    entity_type: str,
    entity: Dict,
    target: Optional[str],
    now: Optional[datetime] = None,
) -> Dict:
    """
    Return a new record with the transition applied.

    The input record is never mutated. Transitions into "delivered"
    stamp the delivery field for LR and Challan. For derived entities
    the status is recomputed from amounts; a caller target that
    disagrees with that status is rejected.
    """
    policy = get_policy(entity_type)
    current = entity.get("status")

    if policy["kind"] == DERIVED:
        status = derived_status(entity_type, entity)
        if target is not None and target != status:
            raise InvalidTransition(
                entity_type, current, target, f"status is derived from amounts ({status})"
            )
        return {**entity, "status": status}

    if target is None:
        raise InvalidTransition(entity_type, current, target, "target status required")

    validate_transition(entity_type, current, target)

    updated = {**entity, "status": target}

    stamp_field = DELIVERY_STAMPS.get(entity_type)
    if stamp_field and target == "delivered":
        updated[stamp_field] = (now or datetime.now()).strftime("%Y-%m-%dT%H:%M")

    return updated


def next_statuses(entity_type: str, current: Optional[str]) -> List[str]:
    """
    Statuses an entity may move to from ``current``.

    Used by views to decide which status buttons are enabled.
    """
    policy = get_policy(entity_type)

    if policy["kind"] == DERIVED:
        return []

    if policy["kind"] == FREE:
        return [s for s in policy["statuses"] if s != current]

    return [
        s for s in policy["progression"]
        if can_transition(current, s, policy["progression"])
    ]
