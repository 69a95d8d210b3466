"""
Asset Registry - registration, assignment and operational status of assets
"""

import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from apps.authentication.guard import approver_roles, manager_roles, require_role
from apps.core.exceptions import InvalidStateException, ValidationException
from apps.assets.models import Asset, IdentifierSequence
from apps.assets.state_machine import COMPLETION_OUTCOMES, DECOMMISSIONABLE_STATUSES, check_status_change
from apps.assets.stores import AssetStore
from .identifier_service import IdentifierService

logger = logging.getLogger(__name__)


def coerce_employee_id(value, field='employee_id') -> uuid.UUID:
    """Parse an employee reference or raise ``ValidationException``."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationException("A valid employee ID is required.", field=field)


def coerce_amount(value, field: str, allow_zero: bool = True) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationException("Must be a valid amount.", field=field)
    if not amount.is_finite():
        raise ValidationException("Must be a valid amount.", field=field)
    if amount < 0 or (amount == 0 and not allow_zero):
        bound = "zero or greater" if allow_zero else "greater than zero"
        raise ValidationException(f"Must be {bound}.", field=field)
    return amount


class AssetRegistry:
    """
    Owns the Asset lifecycle outside of transfers.

    Transfer side effects (``mark_transfer_pending``, ``restore_after_transfer``,
    ``apply_transfer_outcome``) are called by ``TransferWorkflow`` only, on an
    asset row it has already locked.
    """

    EDITABLE_FIELDS = (
        'name', 'description', 'category', 'manufacturer', 'model_name',
        'serial_number', 'condition', 'purchase_date', 'purchase_price',
        'current_value', 'warranty_expires', 'notes',
    )

    @classmethod
    def register(cls, attrs: Dict[str, Any], *, actor) -> Asset:
        require_role(actor, manager_roles(), 'register assets')
        fields = cls._clean_attributes(attrs, creating=True)
        if fields.get('current_value') is None:
            fields['current_value'] = fields.get('purchase_price')

        with transaction.atomic():
            asset = IdentifierService.create_with_identifier(
                IdentifierSequence.ASSET_TAG,
                lambda tag: AssetStore.create(
                    asset_tag=tag,
                    status=Asset.IN_STOCK,
                    created_by=actor,
                    updated_by=actor,
                    **fields
                ),
            )

        logger.info("asset_registered asset_id=%s tag=%s actor=%s", asset.id, asset.asset_tag, actor.id)
        return asset

    @classmethod
    def update(cls, asset_id, attrs: Dict[str, Any], *, actor) -> Asset:
        """Edit descriptive attributes. Lifecycle fields are never touched here."""
        require_role(actor, manager_roles(), 'edit assets')
        fields = cls._clean_attributes(attrs, creating=False)

        with transaction.atomic():
            asset = AssetStore.get_for_update(asset_id)
            if asset.is_decommissioned:
                raise InvalidStateException(
                    "Decommissioned assets cannot be edited.",
                    current_status=asset.status,
                    event='update',
                )
            for name, value in fields.items():
                setattr(asset, name, value)
            asset.updated_by = actor
            AssetStore.save(asset, list(fields) + ['updated_by'])

        logger.info("asset_updated asset_id=%s fields=%s actor=%s", asset.id, ','.join(sorted(fields)), actor.id)
        return asset

    @classmethod
    def assign(cls, asset_id, employee_id, *, actor) -> Asset:
        require_role(actor, manager_roles(), 'assign assets')
        employee_id = coerce_employee_id(employee_id)

        with transaction.atomic():
            asset = AssetStore.get_for_update(asset_id)
            if asset.status != Asset.IN_STOCK:
                raise InvalidStateException(
                    f"Only IN_STOCK assets can be assigned; asset is {asset.status}.",
                    current_status=asset.status,
                    event='assign',
                )
            asset.status = Asset.ASSIGNED
            asset.assigned_to_employee_id = employee_id
            asset.assigned_at = timezone.now()
            asset.updated_by = actor
            AssetStore.save(asset, ['status', 'assigned_to_employee_id', 'assigned_at', 'updated_by'])

        logger.info("asset_assigned asset_id=%s employee_id=%s actor=%s", asset.id, employee_id, actor.id)
        return asset

    @classmethod
    def unassign(cls, asset_id, *, actor) -> Asset:
        require_role(actor, manager_roles(), 'unassign assets')

        with transaction.atomic():
            asset = AssetStore.get_for_update(asset_id)
            if asset.status != Asset.ASSIGNED:
                raise InvalidStateException(
                    f"Only ASSIGNED assets can be unassigned; asset is {asset.status}.",
                    current_status=asset.status,
                    event='unassign',
                )
            previous = asset.assigned_to_employee_id
            cls._clear_assignment(asset)
            asset.status = Asset.IN_STOCK
            asset.updated_by = actor
            AssetStore.save(asset, ['status', 'assigned_to_employee_id', 'assigned_at', 'updated_by'])

        logger.info("asset_unassigned asset_id=%s employee_id=%s actor=%s", asset.id, previous, actor.id)
        return asset

    @classmethod
    def change_status(cls, asset_id, new_status: str, *, actor) -> Asset:
        """Move between the operational statuses (stock, maintenance, lost, disposed)."""
        require_role(actor, manager_roles(), 'change asset status')
        if new_status not in dict(Asset.STATUS_CHOICES):
            raise ValidationException(f"Unknown asset status: {new_status}", field='status')

        with transaction.atomic():
            asset = AssetStore.get_for_update(asset_id)
            previous = asset.status
            check_status_change(previous, new_status)
            asset.status = new_status
            asset.updated_by = actor
            AssetStore.save(asset, ['status', 'updated_by'])

        logger.info("asset_status_changed asset_id=%s from=%s to=%s actor=%s", asset.id, previous, new_status, actor.id)
        return asset

    @classmethod
    def decommission(cls, asset_id, *, actor) -> Asset:
        require_role(actor, approver_roles(), 'decommission assets')

        with transaction.atomic():
            asset = AssetStore.get_for_update(asset_id)
            if asset.status not in DECOMMISSIONABLE_STATUSES:
                if asset.status == Asset.TRANSFER_PENDING:
                    message = "Asset has a transfer in progress; resolve it before decommissioning."
                else:
                    message = "Asset is already decommissioned."
                raise InvalidStateException(message, current_status=asset.status, event='decommission')
            previous = asset.status
            cls._clear_assignment(asset)
            asset.status = Asset.DECOMMISSIONED
            asset.decommissioned_at = timezone.now()
            asset.updated_by = actor
            AssetStore.save(asset, [
                'status', 'assigned_to_employee_id', 'assigned_at', 'decommissioned_at', 'updated_by',
            ])

        logger.info("asset_decommissioned asset_id=%s from=%s actor=%s", asset.id, previous, actor.id)
        return asset

    @classmethod
    def list_assets(cls, status: Optional[str] = None, category: Optional[str] = None,
                    condition: Optional[str] = None):
        return AssetStore.filter(status=status, category=category, condition=condition)

    @classmethod
    def stats(cls) -> Dict[str, Any]:
        queryset = Asset.objects.all()
        by_status = {status: 0 for status, _ in Asset.STATUS_CHOICES}
        for row in queryset.values('status').annotate(total=Count('id')):
            by_status[row['status']] = row['total']
        by_category = {
            row['category']: row['total']
            for row in queryset.values('category').annotate(total=Count('id')).order_by('category')
        }
        return {
            'total': sum(by_status.values()),
            'by_status': by_status,
            'by_category': by_category,
        }

    # ------------------------------------------------------------------ transfer side effects
    @classmethod
    def mark_transfer_pending(cls, asset: Asset) -> Asset:
        if asset.status != Asset.ASSIGNED:
            raise InvalidStateException(
                f"Only ASSIGNED assets can be transferred; asset is {asset.status}.",
                current_status=asset.status,
                event='request_transfer',
            )
        asset.status = Asset.TRANSFER_PENDING
        return AssetStore.save(asset, ['status'])

    @classmethod
    def restore_after_transfer(cls, asset: Asset) -> Asset:
        """Back to ASSIGNED with the same holder after a reject or cancel."""
        if asset.status != Asset.TRANSFER_PENDING:
            raise InvalidStateException(
                f"Asset is {asset.status}, expected TRANSFER_PENDING.",
                current_status=asset.status,
                event='restore',
            )
        asset.status = Asset.ASSIGNED
        return AssetStore.save(asset, ['status'])

    @classmethod
    def apply_transfer_outcome(cls, asset: Asset, transfer_type: str, recipient_employee_id) -> Asset:
        if asset.status != Asset.TRANSFER_PENDING:
            raise InvalidStateException(
                f"Asset is {asset.status}, expected TRANSFER_PENDING.",
                current_status=asset.status,
                event='complete',
            )
        status, keeps_recipient = COMPLETION_OUTCOMES[transfer_type]
        asset.status = status
        if not keeps_recipient:
            cls._clear_assignment(asset)
        elif asset.assigned_to_employee_id != recipient_employee_id:
            # assigned_at only moves when custody changes hands
            asset.assigned_to_employee_id = recipient_employee_id
            asset.assigned_at = timezone.now()
        AssetStore.save(asset, ['status', 'assigned_to_employee_id', 'assigned_at'])
        logger.info(
            "asset_transfer_outcome asset_id=%s type=%s status=%s employee_id=%s",
            asset.id, transfer_type, asset.status, asset.assigned_to_employee_id,
        )
        return asset

    # ------------------------------------------------------------------ internals
    @staticmethod
    def _clear_assignment(asset: Asset) -> None:
        asset.assigned_to_employee_id = None
        asset.assigned_at = None

    @classmethod
    def _clean_attributes(cls, attrs: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        unknown = set(attrs) - set(cls.EDITABLE_FIELDS)
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationException(f"Field '{field}' cannot be set here.", field=field)

        fields = dict(attrs)
        if creating or 'name' in fields:
            name = (fields.get('name') or '').strip()
            if not name:
                raise ValidationException("Name is required.", field='name')
            if len(name) > 200:
                raise ValidationException("Name must be at most 200 characters.", field='name')
            fields['name'] = name

        if 'category' in fields and fields['category'] not in dict(Asset.CATEGORY_CHOICES):
            raise ValidationException(f"Unknown category: {fields['category']}", field='category')
        if 'condition' in fields and fields['condition'] not in dict(Asset.CONDITION_CHOICES):
            raise ValidationException(f"Unknown condition: {fields['condition']}", field='condition')

        if 'purchase_price' in fields:
            fields['purchase_price'] = coerce_amount(fields['purchase_price'], 'purchase_price', allow_zero=False)
        if 'current_value' in fields:
            fields['current_value'] = coerce_amount(fields['current_value'], 'current_value')
        return fields
