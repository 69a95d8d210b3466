"""
Identifier Service - year-scoped sequential asset tags and transfer numbers
"""

import logging
import re
from typing import Callable, Optional, TypeVar

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.exceptions import ConcurrencyConflictException, ValidationException
from apps.assets.models import Asset, AssetTransfer, IdentifierSequence

logger = logging.getLogger(__name__)

T = TypeVar('T')

SEQUENCE_PATTERN = re.compile(r'-(\d+)$')


class IdentifierService:
    """
    Issue identifiers of the shape ``<PREFIX>-<year>-<NNNN>``.

    Numbering is serialized through a locked ``IdentifierSequence`` row per
    (kind, year). The unique constraint on the generated column is the
    backstop: a collision (e.g. a row imported with a hand-picked tag) is
    retried with a resynchronized counter a bounded number of times.
    """

    KIND_TARGETS = {
        IdentifierSequence.ASSET_TAG: (Asset, 'asset_tag'),
        IdentifierSequence.TRANSFER_NUMBER: (AssetTransfer, 'transfer_number'),
    }

    @classmethod
    def prefix_for(cls, kind: str) -> str:
        if kind == IdentifierSequence.ASSET_TAG:
            return getattr(settings, 'ASSET_TAG_PREFIX', 'HW')
        if kind == IdentifierSequence.TRANSFER_NUMBER:
            return getattr(settings, 'TRANSFER_NUMBER_PREFIX', 'TRF')
        raise ValidationException(f"Unknown identifier kind: {kind}", field='kind')

    @classmethod
    def format(cls, kind: str, year: int, sequence: int) -> str:
        return f"{cls.prefix_for(kind)}-{year}-{sequence:04d}"

    @staticmethod
    def parse_sequence(identifier: str) -> Optional[int]:
        match = SEQUENCE_PATTERN.search(identifier or '')
        return int(match.group(1)) if match else None

    @classmethod
    def next(cls, kind: str, year: Optional[int] = None) -> str:
        """Reserve and return the next identifier for ``(kind, year)``."""
        year = year or timezone.localdate().year
        cls.prefix_for(kind)

        with transaction.atomic():
            counter = cls._locked_counter(kind, year)
            counter.last_value += 1
            counter.save(update_fields=['last_value', 'updated_at'])
            return cls.format(kind, year, counter.last_value)

    @classmethod
    def create_with_identifier(cls, kind: str, create: Callable[[str], T], year: Optional[int] = None) -> T:
        """
        Call ``create(identifier)`` with a freshly issued identifier.

        Each attempt runs in its own savepoint. Only a collision on the
        identifier column is retried; any other integrity error propagates.
        """
        year = year or timezone.localdate().year
        max_attempts = getattr(settings, 'IDENTIFIER_MAX_ATTEMPTS', 3)

        for attempt in range(1, max_attempts + 1):
            identifier = cls.next(kind, year)
            try:
                with transaction.atomic():
                    return create(identifier)
            except IntegrityError:
                if not cls._identifier_taken(kind, identifier):
                    raise
                logger.warning(
                    "identifier_collision kind=%s identifier=%s attempt=%s",
                    kind, identifier, attempt,
                )
                cls._resync(kind, year)

        logger.error("identifier_exhausted kind=%s year=%s attempts=%s", kind, year, max_attempts)
        raise ConcurrencyConflictException(
            "Could not allocate a unique identifier. Please retry."
        )

    @classmethod
    def highest_issued(cls, kind: str, year: int) -> int:
        """Highest sequence already present in the identifier column for ``(kind, year)``."""
        model, field = cls.KIND_TARGETS[kind]
        prefix = f"{cls.prefix_for(kind)}-{year}-"
        values = model.objects.filter(**{f'{field}__startswith': prefix}).values_list(field, flat=True)
        return max((cls.parse_sequence(value) or 0 for value in values), default=0)

    # ------------------------------------------------------------------ internals
    @classmethod
    def _locked_counter(cls, kind: str, year: int) -> IdentifierSequence:
        try:
            return IdentifierSequence.objects.select_for_update().get(kind=kind, year=year)
        except IdentifierSequence.DoesNotExist:
            pass

        seed = cls.highest_issued(kind, year)
        try:
            with transaction.atomic():
                IdentifierSequence.objects.create(kind=kind, year=year, last_value=seed)
        except IntegrityError:
            # Another caller created the row first; fall through and lock it
            pass
        return IdentifierSequence.objects.select_for_update().get(kind=kind, year=year)

    @classmethod
    def _identifier_taken(cls, kind: str, identifier: str) -> bool:
        model, field = cls.KIND_TARGETS[kind]
        return model.objects.filter(**{field: identifier}).exists()

    @classmethod
    def _resync(cls, kind: str, year: int) -> None:
        counter = cls._locked_counter(kind, year)
        highest = cls.highest_issued(kind, year)
        if highest > counter.last_value:
            counter.last_value = highest
            counter.save(update_fields=['last_value', 'updated_at'])
