"""
Asset and transfer transition tables.

Every lifecycle operation looks up its move here instead of checking
statuses inline, so the complete set of legal moves lives in one place.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Tuple

from apps.core.exceptions import InvalidStateException
from .models import Asset, AssetTransfer


class TransferEvent:
    APPROVE = 'approve'
    REJECT = 'reject'
    CANCEL = 'cancel'
    ACCEPT = 'accept'
    COMPLETE = 'complete'

    ALL = (APPROVE, REJECT, CANCEL, ACCEPT, COMPLETE)


class AssetEffect:
    """What a transfer transition does to the asset it references."""

    NONE = 'none'
    RESTORE = 'restore'
    APPLY_OUTCOME = 'apply_outcome'


@dataclass(frozen=True)
class Transition:
    source: str
    event: str
    target: str
    asset_effect: str = AssetEffect.NONE


_TRANSFER_TRANSITIONS: Tuple[Transition, ...] = (
    Transition(AssetTransfer.PENDING, TransferEvent.APPROVE, AssetTransfer.APPROVED),
    Transition(AssetTransfer.PENDING, TransferEvent.REJECT, AssetTransfer.REJECTED, AssetEffect.RESTORE),
    Transition(AssetTransfer.PENDING, TransferEvent.CANCEL, AssetTransfer.CANCELLED, AssetEffect.RESTORE),
    Transition(AssetTransfer.APPROVED, TransferEvent.CANCEL, AssetTransfer.CANCELLED, AssetEffect.RESTORE),
    Transition(AssetTransfer.ACCEPTED, TransferEvent.CANCEL, AssetTransfer.CANCELLED, AssetEffect.RESTORE),
    Transition(AssetTransfer.APPROVED, TransferEvent.ACCEPT, AssetTransfer.ACCEPTED),
    Transition(AssetTransfer.APPROVED, TransferEvent.COMPLETE, AssetTransfer.COMPLETED, AssetEffect.APPLY_OUTCOME),
    Transition(AssetTransfer.ACCEPTED, TransferEvent.COMPLETE, AssetTransfer.COMPLETED, AssetEffect.APPLY_OUTCOME),
)

TRANSFER_TRANSITIONS: Dict[Tuple[str, str], Transition] = {
    (transition.source, transition.event): transition for transition in _TRANSFER_TRANSITIONS
}

# Asset status and assignee after a completed transfer, by transfer type.
# ``True`` keeps the transfer recipient as assignee, ``False`` clears it.
COMPLETION_OUTCOMES: Dict[str, Tuple[str, bool]] = {
    AssetTransfer.SALE: (Asset.SOLD, True),
    AssetTransfer.GIFT: (Asset.SOLD, True),
    AssetTransfer.RETURN: (Asset.IN_STOCK, False),
    AssetTransfer.REASSIGNMENT: (Asset.ASSIGNED, True),
}

# Operational status changes an administrator may make directly
ASSET_STATUS_CHANGES: Dict[str, FrozenSet[str]] = {
    Asset.IN_STOCK: frozenset({Asset.MAINTENANCE, Asset.LOST, Asset.DISPOSED}),
    Asset.MAINTENANCE: frozenset({Asset.IN_STOCK, Asset.LOST, Asset.DISPOSED}),
    Asset.LOST: frozenset({Asset.IN_STOCK}),
}

# Only these statuses may be decommissioned; TRANSFER_PENDING is excluded
# so an in-flight transfer always reaches its own terminal state first.
# Decommissioning clears the assignee, SOLD included; the buyer of a sold
# asset stays on the completed transfer's ``employee_id``.
DECOMMISSIONABLE_STATUSES: FrozenSet[str] = frozenset(
    status for status, _ in Asset.STATUS_CHOICES
    if status not in (Asset.TRANSFER_PENDING, Asset.DECOMMISSIONED)
)


def resolve_transfer(current_status: str, event: str) -> Transition:
    """Return the transition for ``event`` or raise ``InvalidStateException``."""
    transition = TRANSFER_TRANSITIONS.get((current_status, event))
    if transition is None:
        raise InvalidStateException(
            f"Cannot {event} a transfer that is {current_status}.",
            current_status=current_status,
            event=event,
        )
    return transition


def allowed_transfer_events(current_status: str) -> List[str]:
    return [event for event in TransferEvent.ALL if (current_status, event) in TRANSFER_TRANSITIONS]


def check_status_change(current_status: str, new_status: str) -> None:
    if new_status not in ASSET_STATUS_CHANGES.get(current_status, frozenset()):
        raise InvalidStateException(
            f"Cannot change asset status from {current_status} to {new_status}.",
            current_status=current_status,
            event='change_status',
        )
