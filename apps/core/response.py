"""
Standardized JSON response helpers.

All API responses follow the envelope:

    Success:  {"success": true,  "data": ..., "message": "..."}
    Error:    {"success": false, "error": {"code": 400, "reason": "...", "message": "...", "details": {...}}}

Errors are normally produced by raising from ``apps.core.exceptions`` and
letting ``custom_exception_handler`` render them.
"""

from rest_framework.response import Response
from rest_framework import status


def success_response(data=None, message='OK', http_status=status.HTTP_200_OK, **extra):
    """Return a successful JSON envelope."""
    payload = {'success': True, 'data': data, 'message': message}
    payload.update(extra)
    return Response(payload, status=http_status)


def created_response(data=None, message='Created successfully.'):
    return success_response(data=data, message=message, http_status=status.HTTP_201_CREATED)


def empty_response(message='OK'):
    """Envelope for operations that succeed without returning an entity."""
    return success_response(data=None, message=message)
