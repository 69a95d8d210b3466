"""
Asset Management URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import AssetViewSet, AssetTransferViewSet

router = DefaultRouter()
router.register(r'assets', AssetViewSet, basename='assets')
router.register(r'transfers', AssetTransferViewSet, basename='asset-transfers')

urlpatterns = [
    path('', include(router.urls)),
]
