"""
Asset Management Admin
"""

from django.contrib import admin
from .models import Asset, AssetTransfer, IdentifierSequence


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    list_display = ['asset_tag', 'name', 'category', 'condition', 'status', 'assigned_to_employee_id', 'purchase_date']
    list_filter = ['status', 'category', 'condition']
    search_fields = ['asset_tag', 'name', 'serial_number']
    # Lifecycle changes go through the registry and transfer workflow
    readonly_fields = [
        'asset_tag', 'status', 'assigned_to_employee_id', 'assigned_at', 'decommissioned_at',
        'created_at', 'updated_at', 'created_by', 'updated_by',
    ]
    ordering = ['name']

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AssetTransfer)
class AssetTransferAdmin(admin.ModelAdmin):
    list_display = ['transfer_number', 'asset', 'transfer_type', 'status', 'employee_id', 'requested_at', 'completed_at']
    list_filter = ['status', 'transfer_type']
    search_fields = ['transfer_number', 'asset__asset_tag', 'asset__name']
    raw_id_fields = ['asset', 'requested_by', 'approved_by', 'rejected_by']
    date_hierarchy = 'requested_at'
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(IdentifierSequence)
class IdentifierSequenceAdmin(admin.ModelAdmin):
    list_display = ['kind', 'year', 'last_value', 'updated_at']
    list_filter = ['kind', 'year']
    readonly_fields = ['kind', 'year', 'last_value', 'updated_at']
