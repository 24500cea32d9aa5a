"""
Shipment error taxonomy and its mapping to API responses.

- ValidationFailure: malformed/missing input, raised before any store call
- StorageFailure: the store request failed
- NotFound: a lookup legitimately matched zero rows
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ShipmentError(Exception):
    """Base class for shipment-domain errors."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailure(ShipmentError):
    """Input rejected before reaching the store. `errors` maps field -> messages."""

    default_message = "Please correct the highlighted fields."

    def __init__(self, errors=None, message=None):
        self.errors = errors or {}
        super().__init__(message)


class StorageFailure(ShipmentError):
    """The backing store returned an error or could not be reached."""

    def __init__(self, operation, message=None):
        self.operation = operation
        super().__init__(message)


class NotFound(ShipmentError):
    """No row matched the lookup. Not an error condition of the store."""

    default_message = "Not found."


_STATUS_CODES = {
    ValidationFailure: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def api_exception_handler(exc, context):
    """
    DRF exception handler.

    Shipment errors become `{"success": false, "message": ..., "errors": ...}`
    payloads; everything else goes through DRF's default handler.
    """
    if isinstance(exc, ShipmentError):
        code = next(
            (code for klass, code in _STATUS_CODES.items() if isinstance(exc, klass)),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        payload = {'success': False, 'message': exc.message}
        if isinstance(exc, ValidationFailure):
            payload['errors'] = exc.errors
        return Response(payload, status=code)

    return exception_handler(exc, context)
