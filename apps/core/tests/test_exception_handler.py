from django.http import Http404
from django.test import RequestFactory, SimpleTestCase
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated
from rest_framework.exceptions import ValidationError as DRFValidationError

from apps.core.exceptions import (
    ConcurrencyConflictException,
    InvalidStateException,
    PermissionDeniedException,
    ResourceNotFoundException,
    ValidationException,
    custom_exception_handler,
)


class CustomExceptionHandlerTests(SimpleTestCase):

    def setUp(self):
        request = RequestFactory().post('/api/v1/assets/transfers/')
        self.context = {'request': request}

    def _handle(self, exc):
        return custom_exception_handler(exc, self.context)

    def test_invalid_state(self):
        response = self._handle(InvalidStateException(
            "Cannot approve a transfer that is COMPLETED.", current_status='COMPLETED', event='approve',
        ))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {
            'success': False,
            'error': {
                'code': 409,
                'reason': 'invalid_state',
                'message': "Cannot approve a transfer that is COMPLETED.",
                'details': {'current_status': 'COMPLETED', 'event': 'approve'},
            },
        })

    def test_validation_exception_names_field(self):
        response = self._handle(ValidationException("Name is required.", field='name'))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['details'], {'name': ["Name is required."]})

    def test_permission_denied(self):
        response = self._handle(PermissionDeniedException("You do not have permission to approve transfers."))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['reason'], 'permission_denied')

    def test_not_found(self):
        response = self._handle(ResourceNotFoundException('Asset', 'abc'))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['message'], 'Asset with ID abc not found')

    def test_concurrency_conflict(self):
        response = self._handle(ConcurrencyConflictException())
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['reason'], 'concurrency_conflict')

    def test_drf_validation_error_is_wrapped(self):
        response = self._handle(DRFValidationError({'reason': ['This field is required.']}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['reason'], 'validation_error')
        self.assertEqual(response.data['error']['message'], 'reason: This field is required.')

    def test_not_authenticated(self):
        response = self._handle(NotAuthenticated())
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['reason'], 'not_authenticated')

    def test_django_404(self):
        response = self._handle(Http404('missing'))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unexpected_error_is_hidden(self):
        response = self._handle(RuntimeError('database password is hunter2'))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertNotIn('hunter2', str(response.data))
