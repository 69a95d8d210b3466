import uuid
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from apps.assets.models import Asset, AssetTransfer, IdentifierSequence
from apps.assets.services import TransferWorkflow
from tests.factories import AdminFactory, AssetFactory, AssignedAssetFactory, TransferFactory


class CheckAssetInvariantsCommandTests(TestCase):

    def _run(self):
        out = StringIO()
        call_command('check_asset_invariants', stdout=out)
        return out.getvalue()

    def test_consistent_data_passes(self):
        AssetFactory()
        asset = AssignedAssetFactory()
        TransferWorkflow.request_transfer(asset.id, uuid.uuid4(), AssetTransfer.GIFT, actor=AdminFactory())

        self.assertIn('[OK] All asset invariants hold', self._run())

    def test_assignee_on_unassigned_status_fails(self):
        AssetFactory(status=Asset.IN_STOCK, assigned_to_employee_id=uuid.uuid4())

        with self.assertRaises(SystemExit) as ctx:
            self._run()
        self.assertEqual(ctx.exception.code, 1)

    def test_pending_asset_without_transfer_fails(self):
        AssignedAssetFactory(status=Asset.TRANSFER_PENDING)

        with self.assertRaises(SystemExit):
            self._run()

    def test_completed_transfer_without_timestamp_fails(self):
        TransferFactory(status=AssetTransfer.COMPLETED, asset=AssignedAssetFactory(status=Asset.SOLD))

        with self.assertRaises(SystemExit):
            self._run()

    def test_lagging_sequence_fails(self):
        AssetFactory(asset_tag='HW-2024-0007')
        IdentifierSequence.objects.create(kind=IdentifierSequence.ASSET_TAG, year=2024, last_value=3)

        with self.assertRaises(SystemExit):
            self._run()
