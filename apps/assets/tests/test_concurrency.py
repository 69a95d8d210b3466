"""
Concurrency tests. These need real row locks and only run against PostgreSQL:

    TEST_DATABASE_URL=postgres://... pytest apps/assets/tests/test_concurrency.py
"""

import threading
import unittest
import uuid

from django.db import connection, connections
from django.test import TransactionTestCase

from apps.assets.models import Asset, AssetTransfer
from apps.assets.services import AssetRegistry, TransferWorkflow
from apps.core.exceptions import APIException
from tests.factories import AdminFactory, AssignedAssetFactory


def _run_concurrently(worker, count):
    barrier = threading.Barrier(count)
    results, errors = [], []
    lock = threading.Lock()

    def target(index):
        try:
            barrier.wait()
            value = worker(index)
            with lock:
                results.append(value)
        except APIException as exc:
            with lock:
                errors.append(exc)
        finally:
            connections.close_all()

    threads = [threading.Thread(target=target, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results, errors


@unittest.skipUnless(connection.vendor == 'postgresql', 'requires PostgreSQL row locking')
class ConcurrentRegistrationTests(TransactionTestCase):

    def test_parallel_registrations_get_distinct_gapless_tags(self):
        admin = AdminFactory()

        results, errors = _run_concurrently(
            lambda i: AssetRegistry.register({'name': f'Laptop {i}'}, actor=admin).asset_tag, 8,
        )

        self.assertEqual(errors, [])
        self.assertEqual(len(set(results)), 8)
        sequences = sorted(int(tag.rsplit('-', 1)[1]) for tag in results)
        self.assertEqual(sequences, list(range(1, 9)))


@unittest.skipUnless(connection.vendor == 'postgresql', 'requires PostgreSQL row locking')
class ConcurrentTransferTests(TransactionTestCase):

    def setUp(self):
        self.admin = AdminFactory()
        self.asset = AssignedAssetFactory()

    def test_only_one_of_parallel_requests_wins(self):
        results, errors = _run_concurrently(
            lambda i: TransferWorkflow.request_transfer(
                self.asset.id, uuid.uuid4(), AssetTransfer.GIFT, actor=self.admin,
            ), 5,
        )

        self.assertEqual(len(results), 1)
        self.assertEqual(len(errors), 4)
        self.assertEqual(AssetTransfer.objects.filter(asset=self.asset).count(), 1)
        self.asset.refresh_from_db()
        self.assertEqual(self.asset.status, Asset.TRANSFER_PENDING)

    def test_approve_and_cancel_race_serializes(self):
        transfer = TransferWorkflow.request_transfer(
            self.asset.id, uuid.uuid4(), AssetTransfer.GIFT, actor=self.admin,
        )
        operations = [
            lambda: TransferWorkflow.approve(transfer.id, actor=self.admin),
            lambda: TransferWorkflow.cancel(transfer.id, actor=self.admin),
        ]

        results, errors = _run_concurrently(lambda i: operations[i]().status, 2)

        # Cancel is legal from PENDING and APPROVED, so it always lands;
        # approve either ran first or was refused
        self.assertEqual(len(results) + len(errors), 2)
        self.assertIn(AssetTransfer.CANCELLED, results)
        transfer.refresh_from_db()
        self.asset.refresh_from_db()
        self.assertEqual(transfer.status, AssetTransfer.CANCELLED)
        self.assertEqual(self.asset.status, Asset.ASSIGNED)
        self.assertEqual(self.asset.invariant_violations(), [])
