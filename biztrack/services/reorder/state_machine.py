"""
Reorder state machine
All status changes on a reorder are checked here
"""
from typing import Dict, FrozenSet, Union

from biztrack.core.exceptions import ConflictError
from biztrack.schemas.reorder import ReorderStatus

TRANSITIONS: Dict[ReorderStatus, FrozenSet[ReorderStatus]] = {
    # pending -> received is only taken by the quick reorder path
    ReorderStatus.PENDING: frozenset({
        ReorderStatus.APPROVED, ReorderStatus.ORDERED, ReorderStatus.CANCELLED, ReorderStatus.RECEIVED,
    }),
    ReorderStatus.APPROVED: frozenset({
        ReorderStatus.ORDERED, ReorderStatus.CANCELLED, ReorderStatus.RECEIVED,
    }),
    ReorderStatus.ORDERED: frozenset({ReorderStatus.RECEIVED, ReorderStatus.CANCELLED}),
    ReorderStatus.RECEIVED: frozenset(),
    ReorderStatus.CANCELLED: frozenset(),
}

OPEN_STATUSES = frozenset({ReorderStatus.PENDING, ReorderStatus.APPROVED, ReorderStatus.ORDERED})


def can_transition(current: Union[ReorderStatus, str], target: Union[ReorderStatus, str]) -> bool:
    return ReorderStatus(target) in TRANSITIONS[ReorderStatus(current)]


def is_terminal(status: Union[ReorderStatus, str]) -> bool:
    return not TRANSITIONS[ReorderStatus(status)]


def ensure_transition(current: Union[ReorderStatus, str], target: Union[ReorderStatus, str]) -> ReorderStatus:
    """Return the target status, or raise ConflictError if the move is illegal"""
    current, target = ReorderStatus(current), ReorderStatus(target)
    if target not in TRANSITIONS[current]:
        raise ConflictError(
            f"Cannot change reorder from {current.value} to {target.value}",
            code="INVALID_TRANSITION",
            details={"current": current.value, "target": target.value},
        )
    return target
