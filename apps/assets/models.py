"""
Asset Management Models
"""

from django.db import models
from django.db.models import Q
from django.conf import settings
from django.utils import timezone

from apps.core.models import EnterpriseModel


class Asset(EnterpriseModel):
    """Individual company-owned physical asset"""

    # Status choices
    IN_STOCK = 'IN_STOCK'
    ASSIGNED = 'ASSIGNED'
    MAINTENANCE = 'MAINTENANCE'
    TRANSFER_PENDING = 'TRANSFER_PENDING'
    SOLD = 'SOLD'
    DISPOSED = 'DISPOSED'
    LOST = 'LOST'
    DECOMMISSIONED = 'DECOMMISSIONED'

    STATUS_CHOICES = [
        (IN_STOCK, 'In Stock'),
        (ASSIGNED, 'Assigned'),
        (MAINTENANCE, 'In Maintenance'),
        (TRANSFER_PENDING, 'Transfer Pending'),
        (SOLD, 'Sold'),
        (DISPOSED, 'Disposed'),
        (LOST, 'Lost'),
        (DECOMMISSIONED, 'Decommissioned'),
    ]

    # Statuses that must never carry an assignee
    UNASSIGNED_STATUSES = (IN_STOCK, MAINTENANCE, DISPOSED, LOST, DECOMMISSIONED)
    # Statuses that always carry one: the holder, the holder awaiting a
    # transfer decision, or the recipient retained after a sale/gift
    HELD_STATUSES = (ASSIGNED, TRANSFER_PENDING, SOLD)

    CATEGORY_CHOICES = [
        ('LAPTOP', 'Laptop'),
        ('DESKTOP', 'Desktop PC'),
        ('MONITOR', 'Monitor'),
        ('PHONE', 'Smartphone'),
        ('TABLET', 'Tablet'),
        ('KEYBOARD', 'Keyboard'),
        ('MOUSE', 'Mouse'),
        ('HEADSET', 'Headset'),
        ('DOCKING_STATION', 'Docking Station'),
        ('PRINTER', 'Printer'),
        ('CAMERA', 'Camera'),
        ('PROJECTOR', 'Projector'),
        ('FURNITURE', 'Furniture'),
        ('VEHICLE', 'Vehicle'),
        ('OTHER', 'Other'),
    ]

    CONDITION_CHOICES = [
        ('NEW', 'New'),
        ('EXCELLENT', 'Excellent'),
        ('GOOD', 'Good'),
        ('FAIR', 'Fair'),
        ('POOR', 'Poor'),
    ]

    # Identity
    asset_tag = models.CharField(
        max_length=50,
        unique=True,
        editable=False,
        help_text="Generated once at registration, e.g. HW-2025-0007"
    )

    # Basic info
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES, default='OTHER', db_index=True)
    manufacturer = models.CharField(max_length=100, blank=True)
    model_name = models.CharField(max_length=100, blank=True)
    serial_number = models.CharField(max_length=100, blank=True)
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, default='GOOD')

    # Purchase info
    purchase_date = models.DateField(null=True, blank=True)
    purchase_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    current_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    warranty_expires = models.DateField(null=True, blank=True)

    # Lifecycle
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=IN_STOCK, db_index=True)
    assigned_to_employee_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Employee currently holding the asset (HR system reference)"
    )
    assigned_at = models.DateTimeField(null=True, blank=True)
    decommissioned_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.asset_tag} - {self.name}"

    @property
    def is_decommissioned(self):
        return self.status == self.DECOMMISSIONED

    def invariant_violations(self):
        """
        Return a list of human-readable invariant breaches for this asset.

        Checks the assignment invariant and that TRANSFER_PENDING is backed
        by exactly one active transfer.
        """
        problems = []
        if self.status in self.UNASSIGNED_STATUSES and self.assigned_to_employee_id is not None:
            problems.append(f"{self.asset_tag}: status {self.status} must not have an assignee")
        if self.status in self.HELD_STATUSES and self.assigned_to_employee_id is None:
            problems.append(f"{self.asset_tag}: status {self.status} requires an assignee")

        active = self.transfers.filter(status__in=AssetTransfer.ACTIVE_STATUSES).count()
        if self.status == self.TRANSFER_PENDING and active != 1:
            problems.append(f"{self.asset_tag}: TRANSFER_PENDING with {active} active transfers")
        if self.status != self.TRANSFER_PENDING and active:
            problems.append(f"{self.asset_tag}: {active} active transfers while status is {self.status}")
        return problems


class AssetTransfer(EnterpriseModel):
    """Request to move ownership or custody of one asset to one employee"""

    # Transfer types
    SALE = 'SALE'
    GIFT = 'GIFT'
    RETURN = 'RETURN'
    REASSIGNMENT = 'REASSIGNMENT'

    TYPE_CHOICES = [
        (SALE, 'Sale'),
        (GIFT, 'Gift'),
        (RETURN, 'Return'),
        (REASSIGNMENT, 'Reassignment'),
    ]

    # Status choices
    PENDING = 'PENDING'
    APPROVED = 'APPROVED'
    ACCEPTED = 'ACCEPTED'
    REJECTED = 'REJECTED'
    CANCELLED = 'CANCELLED'
    COMPLETED = 'COMPLETED'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (ACCEPTED, 'Accepted'),
        (REJECTED, 'Rejected'),
        (CANCELLED, 'Cancelled'),
        (COMPLETED, 'Completed'),
    ]

    ACTIVE_STATUSES = (PENDING, APPROVED, ACCEPTED)
    TERMINAL_STATUSES = (REJECTED, CANCELLED, COMPLETED)

    transfer_number = models.CharField(
        max_length=50,
        unique=True,
        editable=False,
        help_text="Generated once at request time, e.g. TRF-2025-0001"
    )

    asset = models.ForeignKey(
        Asset,
        on_delete=models.PROTECT,
        related_name='transfers'
    )
    employee_id = models.UUIDField(db_index=True, help_text="Recipient employee (HR system reference)")
    transfer_type = models.CharField(max_length=20, choices=TYPE_CHOICES, editable=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING, db_index=True)

    # Valuation snapshot taken from the asset at request time
    original_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, editable=False)
    depreciated_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, editable=False)
    sale_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    reason = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    # Request
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='asset_transfers_requested'
    )
    requested_at = models.DateTimeField(default=timezone.now)

    # Decision
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='asset_transfers_approved'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='asset_transfers_rejected'
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)

    # Employee acceptance
    employee_accepted = models.BooleanField(default=False)
    employee_accepted_at = models.DateTimeField(null=True, blank=True)
    employee_signature = models.TextField(blank=True)

    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['asset'],
                condition=Q(status__in=['PENDING', 'APPROVED', 'ACCEPTED']),
                name='unique_active_transfer_per_asset',
            ),
        ]

    def __str__(self):
        return f"{self.transfer_number} - {self.get_transfer_type_display()} of {self.asset.asset_tag}"

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES


class IdentifierSequence(models.Model):
    """
    Per-(kind, year) counter backing asset tags and transfer numbers.

    The row is locked with SELECT ... FOR UPDATE while the next value is
    taken, so two callers can never read the same ``last_value``.
    """

    ASSET_TAG = 'asset_tag'
    TRANSFER_NUMBER = 'transfer_number'

    KIND_CHOICES = [
        (ASSET_TAG, 'Asset Tag'),
        (TRANSFER_NUMBER, 'Transfer Number'),
    ]

    kind = models.CharField(max_length=30, choices=KIND_CHOICES)
    year = models.PositiveIntegerField()
    last_value = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['kind', 'year'], name='unique_identifier_sequence'),
        ]

    def __str__(self):
        return f"{self.kind}/{self.year} @ {self.last_value}"
