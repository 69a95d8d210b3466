"""
Asset Management Views
"""

from django.db.models import Count, Q
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated

from apps.authentication.guard import current_principal, manager_roles, principal_has_role
from apps.core.response import created_response, success_response

from .filters import AssetFilter, AssetTransferFilter
from .models import Asset, AssetTransfer
from .permissions import CanManageAssets, CanViewTransfers
from .serializers import (
    AssetDetailSerializer,
    AssetListSerializer,
    AssetStatsSerializer,
    AssetStatusSerializer,
    AssetTransferSerializer,
    AssetWriteSerializer,
    AssignAssetSerializer,
    TransferAcceptSerializer,
    TransferRejectSerializer,
    TransferRequestSerializer,
)
from .services import AssetRegistry, TransferWorkflow


class AssetViewSet(viewsets.ModelViewSet):
    """ViewSet for managing assets"""

    queryset = Asset.objects.none()
    permission_classes = [IsAuthenticated, CanManageAssets]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = AssetFilter
    search_fields = ['name', 'asset_tag', 'serial_number', 'manufacturer', 'model_name']
    ordering_fields = ['name', 'asset_tag', 'purchase_date', 'current_value', 'created_at']

    def get_queryset(self):
        queryset = AssetRegistry.list_assets()
        if self.action == 'retrieve':
            queryset = queryset.annotate(transfer_count=Count('transfers'))
        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return AssetListSerializer
        if self.action in ('create', 'partial_update'):
            return AssetWriteSerializer
        return AssetDetailSerializer

    def _detail(self, asset):
        return AssetDetailSerializer(asset, context=self.get_serializer_context()).data

    @extend_schema(request=AssetWriteSerializer, responses={201: AssetDetailSerializer})
    def create(self, request, *args, **kwargs):
        serializer = AssetWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        asset = AssetRegistry.register(serializer.validated_data, actor=current_principal(request))
        return created_response(self._detail(asset), message=f'Asset {asset.asset_tag} registered')

    @extend_schema(request=AssetWriteSerializer, responses=AssetDetailSerializer)
    def partial_update(self, request, *args, **kwargs):
        serializer = AssetWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        asset = AssetRegistry.update(kwargs['pk'], serializer.validated_data, actor=current_principal(request))
        return success_response(self._detail(asset), message='Asset updated')

    @extend_schema(request=None, responses=AssetDetailSerializer)
    def destroy(self, request, *args, **kwargs):
        """Soft delete: assets are decommissioned, never removed"""
        asset = AssetRegistry.decommission(kwargs['pk'], actor=current_principal(request))
        return success_response(self._detail(asset), message=f'Asset {asset.asset_tag} decommissioned')

    @extend_schema(request=AssignAssetSerializer, responses=AssetDetailSerializer)
    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        """Assign an in-stock asset to an employee"""
        serializer = AssignAssetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        asset = AssetRegistry.assign(pk, serializer.validated_data['employee_id'], actor=current_principal(request))
        return success_response(self._detail(asset), message=f'Asset {asset.asset_tag} assigned')

    @extend_schema(request=None, responses=AssetDetailSerializer)
    @action(detail=True, methods=['post'])
    def unassign(self, request, pk=None):
        """Return asset from current assignee to stock"""
        asset = AssetRegistry.unassign(pk, actor=current_principal(request))
        return success_response(self._detail(asset), message=f'Asset {asset.asset_tag} returned to stock')

    @extend_schema(request=AssetStatusSerializer, responses=AssetDetailSerializer)
    @action(detail=True, methods=['post'], url_path='status')
    def change_status(self, request, pk=None):
        serializer = AssetStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        asset = AssetRegistry.change_status(pk, serializer.validated_data['status'], actor=current_principal(request))
        return success_response(self._detail(asset), message=f'Asset status changed to {asset.get_status_display()}')

    @extend_schema(request=None, responses=AssetDetailSerializer)
    @action(detail=True, methods=['post'])
    def decommission(self, request, pk=None):
        asset = AssetRegistry.decommission(pk, actor=current_principal(request))
        return success_response(self._detail(asset), message=f'Asset {asset.asset_tag} decommissioned')

    @extend_schema(responses=AssetStatsSerializer)
    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Get asset statistics"""
        return success_response(AssetRegistry.stats())


class AssetTransferViewSet(mixins.ListModelMixin,
                           mixins.RetrieveModelMixin,
                           viewsets.GenericViewSet):
    """
    Transfer requests and their approval workflow.

    Every state change goes through ``TransferWorkflow``; this viewset only
    parses input and renders the resulting transfer.
    """

    queryset = AssetTransfer.objects.none()
    serializer_class = AssetTransferSerializer
    permission_classes = [IsAuthenticated, CanViewTransfers]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = AssetTransferFilter
    search_fields = ['transfer_number', 'asset__asset_tag', 'asset__name']
    ordering_fields = ['requested_at', 'completed_at', 'created_at']

    def get_queryset(self):
        queryset = TransferWorkflow.list_transfers().select_related('requested_by', 'approved_by', 'rejected_by')
        user = self.request.user
        if principal_has_role(user, manager_roles()):
            return queryset
        visible = Q(requested_by_id=user.id)
        if getattr(user, 'employee_id', None):
            visible |= Q(employee_id=user.employee_id)
        return queryset.filter(visible)

    def _render(self, transfer):
        return AssetTransferSerializer(transfer, context=self.get_serializer_context()).data

    @extend_schema(request=TransferRequestSerializer, responses={201: AssetTransferSerializer})
    def create(self, request, *args, **kwargs):
        serializer = TransferRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        transfer = TransferWorkflow.request_transfer(
            data['asset'],
            data['employee_id'],
            data['transfer_type'],
            actor=current_principal(request),
            sale_price=data.get('sale_price'),
            reason=data.get('reason', ''),
            notes=data.get('notes', ''),
        )
        return created_response(self._render(transfer), message=f'Transfer {transfer.transfer_number} requested')

    @extend_schema(request=None, responses=AssetTransferSerializer)
    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        transfer = TransferWorkflow.approve(pk, actor=current_principal(request))
        return success_response(self._render(transfer), message='Transfer approved')

    @extend_schema(request=TransferRejectSerializer, responses=AssetTransferSerializer)
    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        serializer = TransferRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        transfer = TransferWorkflow.reject(pk, serializer.validated_data['reason'], actor=current_principal(request))
        return success_response(self._render(transfer), message='Transfer rejected')

    @extend_schema(request=TransferAcceptSerializer, responses=AssetTransferSerializer)
    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        """Recipient employee signs for the asset"""
        serializer = TransferAcceptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        transfer = TransferWorkflow.accept(pk, serializer.validated_data['signature'], actor=current_principal(request))
        return success_response(self._render(transfer), message='Transfer accepted')

    @extend_schema(request=None, responses=AssetTransferSerializer)
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        transfer = TransferWorkflow.complete(pk, actor=current_principal(request))
        return success_response(self._render(transfer), message='Transfer completed')

    @extend_schema(request=None, responses=AssetTransferSerializer)
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        transfer = TransferWorkflow.cancel(pk, actor=current_principal(request))
        return success_response(self._render(transfer), message='Transfer cancelled')
