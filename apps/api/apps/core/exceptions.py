"""
API error handling.

Every error response carries {'error': <message>, 'error_type': <kind>}:

- validation: input rejected before anything was written (400)
- not_authenticated: no active session (401)
- permission_denied: wrong role, or not the owner of the row (403)
- not_found (404)
- data_store: the database failed the read or write (503)

Domain rules raise subclasses of DomainValidationError with a more specific
error_type (e.g. negative_inventory). Nothing is retried.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

_ERROR_TYPES_BY_STATUS = {
    status.HTTP_401_UNAUTHORIZED: 'not_authenticated',
    status.HTTP_403_FORBIDDEN: 'permission_denied',
    status.HTTP_404_NOT_FOUND: 'not_found',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'method_not_allowed',
    status.HTTP_429_TOO_MANY_REQUESTS: 'throttled',
    status.HTTP_503_SERVICE_UNAVAILABLE: 'data_store',
}


class DomainValidationError(DjangoValidationError):
    """Business rule violation raised by a service function."""
    error_type = 'validation'


class DataStoreError(exceptions.APIException):
    """A database read or write failed; the message is passed through."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The data store is unavailable.'
    default_code = 'data_store'


def _to_drf_validation_error(exc):
    if hasattr(exc, 'error_dict'):
        detail = exc.message_dict
    else:
        detail = exc.messages
    drf_exc = exceptions.ValidationError(detail=detail)
    drf_exc.error_type = getattr(exc, 'error_type', 'validation')
    return drf_exc


def _first_message(data):
    if isinstance(data, dict):
        for value in data.values():
            return _first_message(value)
        return ''
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ''
    return str(data)


def api_exception_handler(exc, context):
    """DRF exception handler producing {'error', 'error_type'} bodies."""
    if isinstance(exc, DjangoValidationError):
        exc = _to_drf_validation_error(exc)
    elif isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.error(
            'Data store operation failed',
            exc_info=True,
            extra={
                'event': 'data_store_error',
                'view': view.__class__.__name__ if view else None,
                'exception_type': exc.__class__.__name__,
            }
        )
        exc = DataStoreError(detail=str(exc))

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        fields = response.data if isinstance(response.data, dict) else {
            'non_field_errors': response.data
        }
        response.data = {
            'error': _first_message(response.data),
            'error_type': getattr(exc, 'error_type', 'validation'),
            'fields': fields,
        }
        return response

    if isinstance(exc, exceptions.NotAuthenticated):
        message = 'Not authenticated'
    elif isinstance(response.data, dict) and 'detail' in response.data:
        message = str(response.data['detail'])
    else:
        message = _first_message(response.data)

    response.data = {
        'detail': message,
        'error': message,
        'error_type': _ERROR_TYPES_BY_STATUS.get(response.status_code, 'error'),
    }
    return response


def domain_error_response(exc, status_code=status.HTTP_400_BAD_REQUEST):
    """Response for a DomainValidationError caught in a view."""
    return Response(
        {
            'error': ' '.join(exc.messages),
            'error_type': getattr(exc, 'error_type', 'validation'),
        },
        status=status_code,
    )
