import logging

from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase

from apps.core.logging import CorrelationIdFilter, get_correlation_id
from apps.core.middleware import CorrelationIdMiddleware


class CorrelationIdMiddlewareTests(SimpleTestCase):

    def setUp(self):
        self.factory = RequestFactory()
        self.seen = []

        def view(request):
            self.seen.append(get_correlation_id())
            return HttpResponse('ok')

        self.middleware = CorrelationIdMiddleware(view)

    def test_inbound_header_is_honoured(self):
        response = self.middleware(self.factory.get('/', HTTP_X_CORRELATION_ID='abc-123'))

        self.assertEqual(self.seen, ['abc-123'])
        self.assertEqual(response['X-Correlation-ID'], 'abc-123')

    def test_id_is_generated_when_missing(self):
        response = self.middleware(self.factory.get('/'))

        self.assertEqual(len(self.seen[0]), 32)
        self.assertEqual(response['X-Correlation-ID'], self.seen[0])

    def test_oversized_header_is_truncated(self):
        response = self.middleware(self.factory.get('/', HTTP_X_CORRELATION_ID='x' * 500))
        self.assertEqual(len(response['X-Correlation-ID']), 64)

    def test_context_is_cleared_after_request(self):
        self.middleware(self.factory.get('/', HTTP_X_CORRELATION_ID='abc-123'))
        self.assertIsNone(get_correlation_id())

    def test_filter_stamps_records(self):
        record = logging.LogRecord('apps', logging.INFO, __file__, 1, 'msg', None, None)
        self.assertTrue(CorrelationIdFilter().filter(record))
        self.assertEqual(record.correlation_id, 'unknown')
