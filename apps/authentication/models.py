"""
Authentication Models - Custom User Model with a single business role
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    """Custom user manager"""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.ADMIN)

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model - the calling principal for every asset operation.

    ``role`` is the only authorization input the asset core consumes.
    ``employee_id`` links the login to an employee record held by the HR
    system; it is a weak reference and is used to verify that the person
    accepting a transfer is its recipient.
    """

    ADMIN = 'ADMIN'
    HR = 'HR'
    EMPLOYEE = 'EMPLOYEE'

    ROLE_CHOICES = [
        (ADMIN, 'Administrator'),
        (HR, 'HR'),
        (EMPLOYEE, 'Employee'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Basic Info
    email = models.EmailField(unique=True, db_index=True)
    first_name = models.CharField(max_length=50, blank=True)
    last_name = models.CharField(max_length=50, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=EMPLOYEE, db_index=True)
    employee_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Employee record this login belongs to (HR system reference)"
    )

    # Status flags
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ['email']

    def __str__(self):
        if self.full_name:
            return f"{self.full_name} ({self.email})"
        return self.email

    @property
    def full_name(self):
        return ' '.join(part for part in [self.first_name, self.last_name] if part)
