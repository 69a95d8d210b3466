"""
Asset Invariant Audit Management Command
Verifies assignment and transfer invariants across every asset
"""

import sys
from django.core.management.base import BaseCommand

from apps.assets.models import Asset, AssetTransfer, IdentifierSequence
from apps.assets.services import IdentifierService


class Command(BaseCommand):
    help = 'Audit assets and transfers against the lifecycle invariants'

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=50,
            help='Maximum number of violations to print (default: 50)',
        )

    def handle(self, *args, **options):
        self.stdout.write("=" * 70)
        self.stdout.write(self.style.SUCCESS("ASSET INVARIANT AUDIT"))
        self.stdout.write("=" * 70)

        problems = []
        problems.extend(self._check_assets())
        problems.extend(self._check_transfers())
        problems.extend(self._check_sequences())

        limit = options['limit']
        for problem in problems[:limit]:
            self.stdout.write(self.style.ERROR(f"  [FAIL] {problem}"))
        if len(problems) > limit:
            self.stdout.write(f"  ... {len(problems) - limit} more")

        self.stdout.write("=" * 70)
        if problems:
            self.stdout.write(self.style.ERROR(f"[FAIL] {len(problems)} invariant violations found"))
            sys.exit(1)
        self.stdout.write(self.style.SUCCESS("[OK] All asset invariants hold"))

    def _check_assets(self):
        self.stdout.write("> Checking assets...")
        problems = []
        for asset in Asset.objects.order_by('asset_tag').iterator():
            problems.extend(asset.invariant_violations())
        return problems

    def _check_transfers(self):
        """Acceptance and decision fields only appear on the matching statuses"""
        self.stdout.write("> Checking transfers...")
        problems = []
        queryset = AssetTransfer.objects.order_by('transfer_number')
        for transfer in queryset.iterator():
            label = transfer.transfer_number
            if transfer.employee_accepted and transfer.status not in (
                AssetTransfer.ACCEPTED, AssetTransfer.COMPLETED, AssetTransfer.CANCELLED,
            ):
                problems.append(f"{label}: accepted flag set while {transfer.status}")
            if transfer.status == AssetTransfer.REJECTED and transfer.rejected_at is None:
                problems.append(f"{label}: REJECTED without rejected_at")
            if transfer.status == AssetTransfer.COMPLETED and transfer.completed_at is None:
                problems.append(f"{label}: COMPLETED without completed_at")
            if transfer.sale_price is not None and transfer.transfer_type != AssetTransfer.SALE:
                problems.append(f"{label}: sale price on a {transfer.transfer_type} transfer")
        return problems

    def _check_sequences(self):
        """Counters must never lag behind identifiers already issued"""
        self.stdout.write("> Checking identifier sequences...")
        problems = []
        for counter in IdentifierSequence.objects.order_by('kind', 'year'):
            highest = IdentifierService.highest_issued(counter.kind, counter.year)
            if highest > counter.last_value:
                problems.append(
                    f"sequence {counter.kind}/{counter.year}: last_value {counter.last_value} "
                    f"behind issued {highest}"
                )
        return problems
