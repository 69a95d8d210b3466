import uuid
from decimal import Decimal

import factory
from django.utils import timezone
from apps.authentication.models import User
from apps.assets.models import Asset, AssetTransfer


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
    email = factory.Sequence(lambda n: f'user{n}@example.com')
    password = factory.django.Password('testpass123')
    role = User.EMPLOYEE
    employee_id = factory.LazyFunction(uuid.uuid4)


class AdminFactory(UserFactory):
    email = factory.Sequence(lambda n: f'admin{n}@example.com')
    role = User.ADMIN


class HRFactory(UserFactory):
    email = factory.Sequence(lambda n: f'hr{n}@example.com')
    role = User.HR


class AssetFactory(factory.django.DjangoModelFactory):
    """Asset rows written directly, bypassing the registry (fixture data)"""
    class Meta:
        model = Asset
    # Year 2000 keeps fixture tags clear of the ones the registry issues
    asset_tag = factory.Sequence(lambda n: f'HW-2000-{n + 1:04d}')
    name = factory.Sequence(lambda n: f'Laptop {n}')
    category = 'LAPTOP'
    condition = 'GOOD'
    purchase_price = Decimal('1200.00')
    current_value = Decimal('900.00')
    status = Asset.IN_STOCK


class AssignedAssetFactory(AssetFactory):
    status = Asset.ASSIGNED
    assigned_to_employee_id = factory.LazyFunction(uuid.uuid4)
    assigned_at = factory.LazyFunction(timezone.now)


class TransferFactory(factory.django.DjangoModelFactory):
    """An in-flight transfer; pass an ``asset`` explicitly for terminal statuses"""
    class Meta:
        model = AssetTransfer
    transfer_number = factory.Sequence(lambda n: f'TRF-2000-{n + 1:04d}')
    asset = factory.SubFactory(AssignedAssetFactory, status=Asset.TRANSFER_PENDING)
    employee_id = factory.LazyFunction(uuid.uuid4)
    transfer_type = AssetTransfer.SALE
    status = AssetTransfer.PENDING
    original_value = factory.SelfAttribute('asset.purchase_price')
    depreciated_value = factory.SelfAttribute('asset.current_value')
