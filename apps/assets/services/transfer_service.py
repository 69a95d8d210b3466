"""
Transfer Workflow - request, decide, accept and complete asset transfers
"""

import logging
from typing import Callable, List, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.authentication.guard import (
    approver_roles, is_employee, manager_roles, principal_has_role, require_role,
)
from apps.core.exceptions import (
    ConcurrencyConflictException, InvalidStateException, PermissionDeniedException, ValidationException,
)
from apps.assets.models import Asset, AssetTransfer, IdentifierSequence
from apps.assets.state_machine import AssetEffect, TransferEvent, allowed_transfer_events, resolve_transfer
from apps.assets.stores import AssetStore, TransferStore
from .identifier_service import IdentifierService
from .registry_service import AssetRegistry, coerce_amount, coerce_employee_id

logger = logging.getLogger(__name__)


class TransferWorkflow:
    """
    Drives ``AssetTransfer`` through its state machine.

    Every transition runs in one transaction that locks the transfer row
    and then the asset row, applies the move from ``state_machine`` and the
    matching asset side effect. Authorization is checked before the state
    guard.
    """

    @classmethod
    def request_transfer(
        cls,
        asset_id,
        employee_id,
        transfer_type: str,
        *,
        actor,
        sale_price=None,
        reason: str = '',
        notes: str = '',
    ) -> AssetTransfer:
        require_role(actor, manager_roles(), 'request asset transfers')
        employee_id = coerce_employee_id(employee_id)
        if transfer_type not in dict(AssetTransfer.TYPE_CHOICES):
            raise ValidationException(f"Unknown transfer type: {transfer_type}", field='transfer_type')
        sale_price = coerce_amount(sale_price, 'sale_price')
        if sale_price is not None and transfer_type != AssetTransfer.SALE:
            raise ValidationException("Sale price applies to SALE transfers only.", field='sale_price')

        with transaction.atomic():
            asset = AssetStore.get_for_update(asset_id)
            if asset.status != Asset.ASSIGNED:
                raise InvalidStateException(
                    f"Only ASSIGNED assets can be transferred; asset is {asset.status}.",
                    current_status=asset.status,
                    event='request_transfer',
                )
            if TransferStore.has_active(asset.id):
                raise InvalidStateException(
                    "Asset already has a transfer in progress.",
                    current_status=asset.status,
                    event='request_transfer',
                )
            if transfer_type == AssetTransfer.REASSIGNMENT and asset.assigned_to_employee_id == employee_id:
                raise ValidationException(
                    "Asset is already assigned to this employee.",
                    field='employee_id',
                )

            try:
                transfer = IdentifierService.create_with_identifier(
                    IdentifierSequence.TRANSFER_NUMBER,
                    lambda number: TransferStore.create(
                        transfer_number=number,
                        asset=asset,
                        employee_id=employee_id,
                        transfer_type=transfer_type,
                        status=AssetTransfer.PENDING,
                        original_value=asset.purchase_price,
                        depreciated_value=asset.current_value,
                        sale_price=sale_price,
                        reason=reason or '',
                        notes=notes or '',
                        requested_by=actor,
                        requested_at=timezone.now(),
                        created_by=actor,
                        updated_by=actor,
                    ),
                )
            except IntegrityError:
                # Lost the race on the one-active-transfer-per-asset constraint
                raise ConcurrencyConflictException(
                    "Another transfer was requested for this asset at the same time. Please retry."
                )
            AssetRegistry.mark_transfer_pending(asset)

        logger.info(
            "transfer_requested transfer_id=%s number=%s asset_id=%s type=%s employee_id=%s actor=%s",
            transfer.id, transfer.transfer_number, asset.id, transfer_type, employee_id, actor.id,
        )
        return transfer

    @classmethod
    def approve(cls, transfer_id, *, actor) -> AssetTransfer:
        def authorize(transfer):
            require_role(actor, approver_roles(), 'approve transfers')

        def record(transfer, now):
            transfer.approved_by = actor
            transfer.approved_at = now
            return ['approved_by', 'approved_at']

        return cls._transition(transfer_id, TransferEvent.APPROVE, actor, authorize, record)

    @classmethod
    def reject(cls, transfer_id, reason: str, *, actor) -> AssetTransfer:
        reason = (reason or '').strip()
        if not reason:
            raise ValidationException("A reason is required when rejecting a transfer.", field='reason')

        def authorize(transfer):
            require_role(actor, approver_roles(), 'reject transfers')

        def record(transfer, now):
            transfer.rejected_by = actor
            transfer.rejected_at = now
            transfer.rejection_reason = reason
            return ['rejected_by', 'rejected_at', 'rejection_reason']

        return cls._transition(transfer_id, TransferEvent.REJECT, actor, authorize, record)

    @classmethod
    def cancel(cls, transfer_id, *, actor) -> AssetTransfer:
        def authorize(transfer):
            if transfer.requested_by_id is not None and transfer.requested_by_id == getattr(actor, 'id', None):
                return
            require_role(actor, approver_roles(), 'cancel transfers')

        return cls._transition(transfer_id, TransferEvent.CANCEL, actor, authorize)

    @classmethod
    def accept(cls, transfer_id, signature: str, *, actor) -> AssetTransfer:
        """Recipient acknowledgement; only the employee named on the transfer may accept."""
        signature = (signature or '').strip()
        if not signature:
            raise ValidationException("A signature is required to accept a transfer.", field='signature')

        def authorize(transfer):
            if not is_employee(actor, transfer.employee_id):
                logger.info(
                    "transfer_accept_denied transfer_id=%s user_id=%s",
                    transfer.id, getattr(actor, 'id', None),
                )
                raise PermissionDeniedException("Only the receiving employee can accept this transfer.")

        def record(transfer, now):
            transfer.employee_accepted = True
            transfer.employee_accepted_at = now
            transfer.employee_signature = signature
            return ['employee_accepted', 'employee_accepted_at', 'employee_signature']

        return cls._transition(transfer_id, TransferEvent.ACCEPT, actor, authorize, record)

    @classmethod
    def complete(cls, transfer_id, *, actor) -> AssetTransfer:
        def authorize(transfer):
            require_role(actor, approver_roles(), 'complete transfers')

        def record(transfer, now):
            transfer.completed_at = now
            return ['completed_at']

        return cls._transition(transfer_id, TransferEvent.COMPLETE, actor, authorize, record)

    @classmethod
    def get(cls, transfer_id) -> AssetTransfer:
        return TransferStore.get(transfer_id)

    @classmethod
    def list_transfers(cls, status: Optional[str] = None, transfer_type: Optional[str] = None,
                       asset_id=None, employee_id=None):
        return TransferStore.filter(
            status=status, transfer_type=transfer_type, asset_id=asset_id, employee_id=employee_id,
        )

    @classmethod
    def can_act(cls, transfer: AssetTransfer, actor) -> List[str]:
        """Events the given principal could fire on ``transfer`` right now."""
        events = []
        for event in allowed_transfer_events(transfer.status):
            if event == TransferEvent.ACCEPT:
                permitted = is_employee(actor, transfer.employee_id)
            elif event == TransferEvent.CANCEL:
                permitted = (
                    transfer.requested_by_id == getattr(actor, 'id', None)
                    or principal_has_role(actor, approver_roles())
                )
            else:
                permitted = principal_has_role(actor, approver_roles())
            if permitted:
                events.append(event)
        return events

    # ------------------------------------------------------------------ internals
    @classmethod
    def _transition(
        cls,
        transfer_id,
        event: str,
        actor,
        authorize: Callable[[AssetTransfer], None],
        record: Optional[Callable] = None,
    ) -> AssetTransfer:
        with transaction.atomic():
            transfer = TransferStore.get_for_update(transfer_id)
            authorize(transfer)
            transition = resolve_transfer(transfer.status, event)
            asset = AssetStore.get_for_update(transfer.asset_id)

            now = timezone.now()
            changed = record(transfer, now) if record else []
            transfer.status = transition.target
            transfer.updated_by = actor
            TransferStore.save(transfer, ['status', 'updated_by'] + changed)

            if transition.asset_effect == AssetEffect.RESTORE:
                AssetRegistry.restore_after_transfer(asset)
            elif transition.asset_effect == AssetEffect.APPLY_OUTCOME:
                AssetRegistry.apply_transfer_outcome(asset, transfer.transfer_type, transfer.employee_id)
            transfer.asset = asset

        logger.info(
            "transfer_%s transfer_id=%s number=%s from=%s to=%s asset_status=%s actor=%s",
            event, transfer.id, transfer.transfer_number, transition.source, transition.target,
            asset.status, getattr(actor, 'id', None),
        )
        return transfer
