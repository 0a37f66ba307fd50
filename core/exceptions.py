"""
API-wide exception handler.

Every error body leaves the service as ``{"message": ...}``. Validation
errors additionally carry the machine-readable ``code`` of the first failure
and the full DRF ``errors`` tree.
"""
import logging

from rest_framework.exceptions import ErrorDetail, ValidationError
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def first_error(detail):
    """Return the first ErrorDetail found in a (possibly nested) DRF error tree."""
    if isinstance(detail, ErrorDetail):
        return detail
    if isinstance(detail, dict):
        for value in detail.values():
            found = first_error(value)
            if found is not None:
                return found
    if isinstance(detail, (list, tuple)):
        for value in detail:
            found = first_error(value)
            if found is not None:
                return found
    return None


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        error = first_error(exc.detail)
        message = str(error) if error is not None else 'Invalid request'
        response.data = {
            'message': message,
            'code': getattr(error, 'code', 'invalid'),
            'errors': exc.detail,
        }
        logger.info(f"Rejected request to {context['request'].path}: {message}")
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'message': str(response.data['detail'])}

    return response
