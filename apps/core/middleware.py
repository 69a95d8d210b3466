"""
Request-scoped middleware
"""

from .logging import (
    CORRELATION_ID_HEADER,
    CORRELATION_ID_RESPONSE_HEADER,
    new_correlation_id,
    set_correlation_id,
)


class CorrelationIdMiddleware:
    """
    Binds a correlation id to the request so every log line emitted while
    handling it can be traced back. Honours an inbound ``X-Correlation-ID``
    and echoes the value on the response.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        correlation_id = request.META.get(CORRELATION_ID_HEADER) or new_correlation_id()
        # Bound the header so a client cannot flood the logs
        correlation_id = correlation_id[:64]
        request.correlation_id = correlation_id
        set_correlation_id(correlation_id)
        try:
            response = self.get_response(request)
        finally:
            set_correlation_id(None)
        response[CORRELATION_ID_RESPONSE_HEADER] = correlation_id
        return response
