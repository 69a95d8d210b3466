"""
Typed data access for assets and transfers.

Services go through these stores rather than touching the ORM managers
directly; locking reads are explicit (``get_for_update``) and must be
called inside ``transaction.atomic()``.
"""

from typing import Iterable, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet

from apps.core.exceptions import ResourceNotFoundException
from .models import Asset, AssetTransfer


class AssetStore:

    @staticmethod
    def _lookup(queryset: QuerySet, asset_id) -> Asset:
        try:
            return queryset.get(pk=asset_id)
        except (Asset.DoesNotExist, DjangoValidationError, ValueError):
            raise ResourceNotFoundException('Asset', asset_id)

    @classmethod
    def get(cls, asset_id) -> Asset:
        return cls._lookup(Asset.objects.all(), asset_id)

    @classmethod
    def get_for_update(cls, asset_id) -> Asset:
        return cls._lookup(Asset.objects.select_for_update(), asset_id)

    @staticmethod
    def filter(status: Optional[str] = None, category: Optional[str] = None,
               condition: Optional[str] = None) -> QuerySet:
        queryset = Asset.objects.all()
        if status:
            queryset = queryset.filter(status=status)
        if category:
            queryset = queryset.filter(category=category)
        if condition:
            queryset = queryset.filter(condition=condition)
        return queryset

    @staticmethod
    def create(**fields) -> Asset:
        return Asset.objects.create(**fields)

    @staticmethod
    def save(asset: Asset, fields: Iterable[str]) -> Asset:
        asset.save(update_fields=list(fields) + ['updated_at'])
        return asset


class TransferStore:

    @staticmethod
    def _lookup(queryset: QuerySet, transfer_id) -> AssetTransfer:
        try:
            return queryset.get(pk=transfer_id)
        except (AssetTransfer.DoesNotExist, DjangoValidationError, ValueError):
            raise ResourceNotFoundException('Transfer', transfer_id)

    @classmethod
    def get(cls, transfer_id) -> AssetTransfer:
        return cls._lookup(AssetTransfer.objects.select_related('asset'), transfer_id)

    @classmethod
    def get_for_update(cls, transfer_id) -> AssetTransfer:
        # Lock only the transfer row; the asset is locked separately
        return cls._lookup(AssetTransfer.objects.select_for_update(), transfer_id)

    @staticmethod
    def has_active(asset_id) -> bool:
        return AssetTransfer.objects.filter(
            asset_id=asset_id,
            status__in=AssetTransfer.ACTIVE_STATUSES,
        ).exists()

    @staticmethod
    def filter(status: Optional[str] = None, transfer_type: Optional[str] = None,
               asset_id=None, employee_id=None) -> QuerySet:
        queryset = AssetTransfer.objects.select_related('asset')
        if status:
            queryset = queryset.filter(status=status)
        if transfer_type:
            queryset = queryset.filter(transfer_type=transfer_type)
        if asset_id:
            queryset = queryset.filter(asset_id=asset_id)
        if employee_id:
            queryset = queryset.filter(employee_id=employee_id)
        return queryset

    @staticmethod
    def create(**fields) -> AssetTransfer:
        return AssetTransfer.objects.create(**fields)

    @staticmethod
    def save(transfer: AssetTransfer, fields: Iterable[str]) -> AssetTransfer:
        transfer.save(update_fields=list(fields) + ['updated_at'])
        return transfer
