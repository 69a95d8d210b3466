"""Assets app filters."""
import django_filters
from .models import Asset, AssetTransfer


class AssetFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Asset.STATUS_CHOICES)
    category = django_filters.ChoiceFilter(choices=Asset.CATEGORY_CHOICES)
    condition = django_filters.ChoiceFilter(choices=Asset.CONDITION_CHOICES)
    assigned_to_employee_id = django_filters.UUIDFilter()
    purchase_date_from = django_filters.DateFilter(field_name='purchase_date', lookup_expr='gte')
    purchase_date_to = django_filters.DateFilter(field_name='purchase_date', lookup_expr='lte')

    class Meta:
        model = Asset
        fields = ['status', 'category', 'condition', 'assigned_to_employee_id']


class AssetTransferFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=AssetTransfer.STATUS_CHOICES)
    transfer_type = django_filters.ChoiceFilter(choices=AssetTransfer.TYPE_CHOICES)
    type = django_filters.ChoiceFilter(field_name='transfer_type', choices=AssetTransfer.TYPE_CHOICES)
    asset = django_filters.UUIDFilter()
    employee_id = django_filters.UUIDFilter()
    active = django_filters.BooleanFilter(method='filter_active')
    requested_from = django_filters.DateFilter(field_name='requested_at', lookup_expr='date__gte')
    requested_to = django_filters.DateFilter(field_name='requested_at', lookup_expr='date__lte')

    class Meta:
        model = AssetTransfer
        fields = ['status', 'transfer_type', 'asset', 'employee_id']

    def filter_active(self, queryset, name, value):
        if value:
            return queryset.filter(status__in=AssetTransfer.ACTIVE_STATUSES)
        return queryset.exclude(status__in=AssetTransfer.ACTIVE_STATUSES)
