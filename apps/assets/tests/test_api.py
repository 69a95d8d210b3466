"""
Asset & Transfer API Tests
==========================
Validates:
  1. Response envelope and status codes (201/400/401/403/404/405/409)
  2. Asset registration, assignment, status and decommission endpoints
  3. Transfer workflow endpoints end to end
  4. Transfer visibility for non-managers
"""

import uuid

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from apps.assets.models import Asset, AssetTransfer
from tests.factories import (
    AdminFactory, AssetFactory, AssignedAssetFactory, HRFactory, TransferFactory, UserFactory,
)

ASSETS_URL = '/api/v1/assets/assets/'
TRANSFERS_URL = '/api/v1/assets/transfers/'


def _client(user=None):
    client = APIClient()
    if user is not None:
        client.force_authenticate(user=user)
    return client


class AssetApiTests(APITestCase):

    def setUp(self):
        self.admin = AdminFactory()
        self.hr = HRFactory()
        self.employee = UserFactory()

    def test_unauthenticated_request_is_rejected(self):
        response = _client().get(ASSETS_URL)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.json()['success'])

    def test_register_asset(self):
        response = _client(self.hr).post(
            ASSETS_URL,
            {'name': 'MacBook Pro', 'category': 'LAPTOP', 'purchase_price': '2400.00'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['status'], Asset.IN_STOCK)
        self.assertEqual(body['data']['current_value'], '2400.00')
        self.assertRegex(body['data']['asset_tag'], r'^HW-\d{4}-0001$')
        self.assertIn(body['data']['asset_tag'], body['message'])

    def test_register_ignores_lifecycle_fields(self):
        response = _client(self.admin).post(
            ASSETS_URL,
            {'name': 'Phone', 'status': Asset.SOLD, 'asset_tag': 'HW-1999-9999'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['data']['status'], Asset.IN_STOCK)
        self.assertNotEqual(response.json()['data']['asset_tag'], 'HW-1999-9999')

    def test_register_validation_error(self):
        response = _client(self.admin).post(ASSETS_URL, {'purchase_price': '-1'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        error = response.json()['error']
        self.assertEqual(error['reason'], 'validation_error')
        self.assertIn('name', error['details'])
        self.assertIn('purchase_price', error['details'])

    def test_employee_cannot_register(self):
        response = _client(self.employee).post(ASSETS_URL, {'name': 'Phone'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()['error']['reason'], 'permission_denied')
        self.assertFalse(Asset.objects.exists())

    def test_employee_can_list_and_filter(self):
        AssetFactory()
        AssignedAssetFactory()

        response = _client(self.employee).get(ASSETS_URL, {'status': Asset.ASSIGNED})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['pagination']['count'], 1)
        self.assertEqual(body['data'][0]['status'], Asset.ASSIGNED)

    def test_retrieve_missing_asset(self):
        response = _client(self.admin).get(f'{ASSETS_URL}{uuid.uuid4()}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.json()['success'])

    def test_put_is_not_allowed(self):
        asset = AssetFactory()
        response = _client(self.admin).put(f'{ASSETS_URL}{asset.id}/', {'name': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_partial_update(self):
        asset = AssetFactory()
        response = _client(self.hr).patch(
            f'{ASSETS_URL}{asset.id}/', {'name': 'Renamed', 'condition': 'FAIR'}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        asset.refresh_from_db()
        self.assertEqual(asset.name, 'Renamed')
        self.assertEqual(asset.condition, 'FAIR')

    def test_assign_and_unassign(self):
        asset = AssetFactory()
        employee_id = str(uuid.uuid4())
        client = _client(self.hr)

        response = client.post(f'{ASSETS_URL}{asset.id}/assign/', {'employee_id': employee_id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['assigned_to_employee_id'], employee_id)

        response = client.post(f'{ASSETS_URL}{asset.id}/assign/', {'employee_id': employee_id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()['error']['reason'], 'invalid_state')
        self.assertEqual(response.json()['error']['details']['current_status'], Asset.ASSIGNED)

        response = client.post(f'{ASSETS_URL}{asset.id}/unassign/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['status'], Asset.IN_STOCK)

    def test_assign_missing_asset(self):
        response = _client(self.hr).post(
            f'{ASSETS_URL}{uuid.uuid4()}/assign/', {'employee_id': str(uuid.uuid4())}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()['error']['reason'], 'not_found')

    def test_change_status(self):
        asset = AssetFactory()
        response = _client(self.hr).post(
            f'{ASSETS_URL}{asset.id}/status/', {'status': Asset.MAINTENANCE}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['status'], Asset.MAINTENANCE)

    def test_change_status_rejects_lifecycle_status(self):
        asset = AssetFactory()
        response = _client(self.hr).post(
            f'{ASSETS_URL}{asset.id}/status/', {'status': Asset.SOLD}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_decommissions(self):
        asset = AssignedAssetFactory()

        response = _client(self.admin).delete(f'{ASSETS_URL}{asset.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        asset.refresh_from_db()
        self.assertEqual(asset.status, Asset.DECOMMISSIONED)
        self.assertIsNone(asset.assigned_to_employee_id)

    def test_hr_cannot_decommission(self):
        asset = AssetFactory()
        response = _client(self.hr).post(f'{ASSETS_URL}{asset.id}/decommission/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_stats(self):
        AssetFactory()
        AssignedAssetFactory()

        response = _client(self.employee).get(f'{ASSETS_URL}stats/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['total'], 2)
        self.assertEqual(data['by_status'][Asset.ASSIGNED], 1)

    def test_correlation_id_is_echoed(self):
        response = _client(self.admin).get(ASSETS_URL, HTTP_X_CORRELATION_ID='trace-123')
        self.assertEqual(response['X-Correlation-ID'], 'trace-123')


class TransferApiTests(APITestCase):

    def setUp(self):
        self.admin = AdminFactory()
        self.hr = HRFactory()
        self.recipient = UserFactory()
        self.asset = AssignedAssetFactory(assigned_to_employee_id=self.recipient.employee_id)

    def _request(self, **overrides):
        payload = {
            'asset': str(self.asset.id),
            'employee_id': str(self.recipient.employee_id),
            'transfer_type': AssetTransfer.SALE,
            'sale_price': '350.00',
            'reason': 'End of lease',
        }
        payload.update(overrides)
        return _client(self.hr).post(TRANSFERS_URL, payload, format='json')

    def test_full_workflow(self):
        response = self._request()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.json()['data']
        transfer_url = f"{TRANSFERS_URL}{data['id']}/"
        self.assertEqual(data['status'], AssetTransfer.PENDING)
        self.assertEqual(data['original_value'], '1200.00')
        self.assertEqual(data['depreciated_value'], '900.00')
        self.assertEqual(data['asset_tag'], self.asset.asset_tag)

        response = _client(self.admin).post(f'{transfer_url}approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['status'], AssetTransfer.APPROVED)

        response = _client(self.recipient).post(f'{transfer_url}accept/', {'signature': 'A. Person'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['status'], AssetTransfer.ACCEPTED)

        response = _client(self.admin).post(f'{transfer_url}complete/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['status'], AssetTransfer.COMPLETED)

        self.asset.refresh_from_db()
        self.assertEqual(self.asset.status, Asset.SOLD)

    def test_sale_price_on_gift_is_rejected(self):
        response = self._request(transfer_type=AssetTransfer.GIFT)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sale_price', response.json()['error']['details'])

    def test_request_for_unassigned_asset(self):
        asset = AssetFactory()
        response = self._request(asset=str(asset.id), sale_price=None)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()['error']['reason'], 'invalid_state')

    def test_employee_cannot_request(self):
        response = _client(self.recipient).post(TRANSFERS_URL, {
            'asset': str(self.asset.id),
            'employee_id': str(uuid.uuid4()),
            'transfer_type': AssetTransfer.RETURN,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reject_requires_reason(self):
        transfer_id = self._request().json()['data']['id']
        response = _client(self.admin).post(f'{TRANSFERS_URL}{transfer_id}/reject/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_hr_cannot_approve(self):
        transfer_id = self._request().json()['data']['id']
        response = _client(self.hr).post(f'{TRANSFERS_URL}{transfer_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(AssetTransfer.objects.get(pk=transfer_id).status, AssetTransfer.PENDING)

    def test_accept_by_someone_else(self):
        transfer_id = self._request().json()['data']['id']
        _client(self.admin).post(f'{TRANSFERS_URL}{transfer_id}/approve/')

        response = _client(UserFactory()).post(
            f'{TRANSFERS_URL}{transfer_id}/accept/', {'signature': 'x'}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_illegal_transition_is_conflict(self):
        transfer_id = self._request().json()['data']['id']
        response = _client(self.admin).post(f'{TRANSFERS_URL}{transfer_id}/complete/')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        error = response.json()['error']
        self.assertEqual(error['reason'], 'invalid_state')
        self.assertEqual(error['details'], {'current_status': AssetTransfer.PENDING, 'event': 'complete'})

    def test_action_on_missing_transfer(self):
        response = _client(self.admin).post(f'{TRANSFERS_URL}{uuid.uuid4()}/approve/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_requester_can_cancel(self):
        transfer_id = self._request().json()['data']['id']
        response = _client(self.hr).post(f'{TRANSFERS_URL}{transfer_id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.asset.refresh_from_db()
        self.assertEqual(self.asset.status, Asset.ASSIGNED)

    def test_available_actions(self):
        transfer_id = self._request().json()['data']['id']
        response = _client(self.admin).get(f'{TRANSFERS_URL}{transfer_id}/')
        self.assertEqual(response.json()['data']['available_actions'], ['approve', 'reject', 'cancel'])

    def test_employee_sees_only_own_transfers(self):
        own = TransferFactory(employee_id=self.recipient.employee_id)
        TransferFactory()

        response = _client(self.recipient).get(TRANSFERS_URL)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [row['id'] for row in response.json()['data']]
        self.assertEqual(ids, [str(own.id)])

    def test_manager_filters_active_transfers(self):
        TransferFactory()
        TransferFactory(status=AssetTransfer.COMPLETED, asset=AssignedAssetFactory(status=Asset.SOLD))

        response = _client(self.hr).get(TRANSFERS_URL, {'active': 'true'})

        self.assertEqual(response.json()['pagination']['count'], 1)
