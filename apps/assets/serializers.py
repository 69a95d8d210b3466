"""
Asset Management Serializers
"""

from decimal import Decimal

from rest_framework import serializers
from drf_spectacular.utils import extend_schema_field
from drf_spectacular.types import OpenApiTypes

from .models import Asset, AssetTransfer
from .services import TransferWorkflow


class AssetListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for asset lists"""
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    condition_display = serializers.CharField(source='get_condition_display', read_only=True)

    class Meta:
        model = Asset
        fields = [
            'id', 'asset_tag', 'name', 'category', 'category_display',
            'serial_number', 'condition', 'condition_display',
            'status', 'status_display', 'assigned_to_employee_id', 'assigned_at',
            'current_value', 'warranty_expires',
        ]
        read_only_fields = fields


class AssetDetailSerializer(serializers.ModelSerializer):
    """Detailed asset serializer with full info"""
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    condition_display = serializers.CharField(source='get_condition_display', read_only=True)
    transfer_count = serializers.SerializerMethodField()
    active_transfer = serializers.SerializerMethodField()

    class Meta:
        model = Asset
        fields = [
            'id', 'asset_tag', 'name', 'description',
            'category', 'category_display', 'manufacturer', 'model_name', 'serial_number',
            'condition', 'condition_display',
            'purchase_date', 'purchase_price', 'current_value', 'warranty_expires',
            'status', 'status_display', 'assigned_to_employee_id', 'assigned_at',
            'decommissioned_at', 'notes', 'transfer_count', 'active_transfer',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.INT)
    def get_transfer_count(self, obj):
        annotated = getattr(obj, 'transfer_count', None)
        if annotated is not None:
            return annotated
        return obj.transfers.count()

    @extend_schema_field({'type': 'string', 'nullable': True})
    def get_active_transfer(self, obj):
        if obj.status != Asset.TRANSFER_PENDING:
            return None
        transfer = obj.transfers.filter(status__in=AssetTransfer.ACTIVE_STATUSES).only('id').first()
        return str(transfer.id) if transfer else None


class AssetWriteSerializer(serializers.ModelSerializer):
    """Descriptive attributes accepted on create and update"""

    name = serializers.CharField(max_length=200, trim_whitespace=True)
    purchase_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=Decimal('0.01')
    )
    current_value = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=Decimal('0')
    )

    class Meta:
        model = Asset
        fields = [
            'name', 'description', 'category', 'manufacturer', 'model_name',
            'serial_number', 'condition', 'purchase_date', 'purchase_price',
            'current_value', 'warranty_expires', 'notes',
        ]

    def validate(self, attrs):
        purchase_date = attrs.get('purchase_date')
        warranty_expires = attrs.get('warranty_expires')
        if purchase_date and warranty_expires and warranty_expires < purchase_date:
            raise serializers.ValidationError({'warranty_expires': 'Warranty cannot end before the purchase date.'})
        return attrs


class AssignAssetSerializer(serializers.Serializer):
    """Serializer for assigning an asset to an employee"""
    employee_id = serializers.UUIDField()


class AssetStatusSerializer(serializers.Serializer):
    """Serializer for operational status changes"""
    status = serializers.ChoiceField(choices=[
        (Asset.IN_STOCK, 'In Stock'),
        (Asset.MAINTENANCE, 'In Maintenance'),
        (Asset.LOST, 'Lost'),
        (Asset.DISPOSED, 'Disposed'),
    ])


class AssetStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
    by_category = serializers.DictField(child=serializers.IntegerField())


class AssetTransferSerializer(serializers.ModelSerializer):
    """Read serializer for transfers"""
    asset_tag = serializers.CharField(source='asset.asset_tag', read_only=True)
    asset_name = serializers.CharField(source='asset.name', read_only=True)
    type_display = serializers.CharField(source='get_transfer_type_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    requested_by_email = serializers.CharField(source='requested_by.email', read_only=True, allow_null=True)
    approved_by_email = serializers.CharField(source='approved_by.email', read_only=True, allow_null=True)
    rejected_by_email = serializers.CharField(source='rejected_by.email', read_only=True, allow_null=True)
    available_actions = serializers.SerializerMethodField()

    class Meta:
        model = AssetTransfer
        fields = [
            'id', 'transfer_number', 'asset', 'asset_tag', 'asset_name',
            'employee_id', 'transfer_type', 'type_display', 'status', 'status_display',
            'original_value', 'depreciated_value', 'sale_price', 'reason', 'notes',
            'requested_by', 'requested_by_email', 'requested_at',
            'approved_by', 'approved_by_email', 'approved_at',
            'rejected_by', 'rejected_by_email', 'rejected_at', 'rejection_reason',
            'employee_accepted', 'employee_accepted_at', 'employee_signature',
            'completed_at', 'available_actions', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    @extend_schema_field({'type': 'array', 'items': {'type': 'string'}})
    def get_available_actions(self, obj):
        request = self.context.get('request')
        if request is None or not getattr(request.user, 'is_authenticated', False):
            return []
        return TransferWorkflow.can_act(obj, request.user)


class TransferRequestSerializer(serializers.Serializer):
    """Serializer for requesting a transfer"""
    asset = serializers.UUIDField()
    employee_id = serializers.UUIDField()
    transfer_type = serializers.ChoiceField(choices=AssetTransfer.TYPE_CHOICES)
    sale_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=Decimal('0')
    )
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs.get('sale_price') is not None and attrs['transfer_type'] != AssetTransfer.SALE:
            raise serializers.ValidationError({'sale_price': 'Sale price applies to SALE transfers only.'})
        return attrs


class TransferRejectSerializer(serializers.Serializer):
    reason = serializers.CharField()


class TransferAcceptSerializer(serializers.Serializer):
    signature = serializers.CharField()
