"""
API errors and the project-wide exception handler.

Every error leaves the API in the same envelope the admin console expects::

    {"status": "fail" | "error", "message": "...", "errors": {...}}

``fail`` is used for client errors (4xx), ``error`` for server errors (5xx).
Stack traces are attached only when DEBUG is on.
"""

from __future__ import annotations

import logging
import traceback

from django.conf import settings  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.exceptions import APIException  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

logger = logging.getLogger(__name__)


class AppError(APIException):
    """Base class for operational errors with an explicit status code."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'app_error'


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Please provide all required booking details.'
    default_code = 'validation_failed'


class NotAuthorized(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'not_authorized'


class ResourceNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'not_found'


class InvalidBookingState(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Booking is not in a state that allows this operation.'
    default_code = 'invalid_state'


def _status_label(status_code: int) -> str:
    return 'fail' if 400 <= status_code < 500 else 'error'


def _message_from(data) -> str:
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        if 'non_field_errors' in data and data['non_field_errors']:
            return str(data['non_field_errors'][0])
        return 'Validation failed.'
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def envelope_exception_handler(exc, context):
    """Wrap DRF errors into the status envelope; turn unknown errors into 500."""

    response = exception_handler(exc, context)

    if response is not None:
        payload = {
            'status': _status_label(response.status_code),
            'message': _message_from(response.data),
        }
        if isinstance(response.data, dict) and 'detail' not in response.data:
            payload['errors'] = response.data
        response.data = payload
        return response

    view = context.get('view')
    logger.error(
        f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}",
        exc_info=exc,
    )
    payload = {'status': 'error', 'message': 'Something went wrong'}
    if settings.DEBUG:
        payload['message'] = str(exc)
        payload['stack'] = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
