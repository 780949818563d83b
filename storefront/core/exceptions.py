"""
DRF exception handling for the `{success, message}` response envelope
"""
import logging

from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    exceptions.NotAuthenticated: 'Not authorized, no token',
    exceptions.AuthenticationFailed: 'Not authorized, token failed',
    exceptions.PermissionDenied: 'Not authorized as an admin',
    exceptions.NotFound: 'Resource not found',
    exceptions.MethodNotAllowed: 'Method not allowed',
    exceptions.Throttled: 'Too many requests from this IP, please try again later.',
}


def _first_message(detail):
    """Dig the first human readable message out of a DRF error structure"""
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, (list, tuple)):
        for value in detail:
            return _first_message(value)
    return str(detail) if detail is not None else None


def _message_for(exc):
    if isinstance(exc, Http404):
        return DEFAULT_MESSAGES[exceptions.NotFound]
    for exc_class, message in DEFAULT_MESSAGES.items():
        if isinstance(exc, exc_class):
            # Explicit details raised by views win over the generic wording
            if isinstance(exc.detail, str) and exc.detail != str(exc_class.default_detail):
                return str(exc.detail)
            if isinstance(exc.detail, dict) and 'detail' in exc.detail and exc_class is not exceptions.AuthenticationFailed:
                return _first_message(exc.detail['detail'])
            return message
    return _first_message(getattr(exc, 'detail', None)) or 'Server error'


def envelope_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        message = 'Validation error'
        if isinstance(exc.detail, dict) and 'message' in exc.detail:
            message = _first_message(exc.detail['message'])
        elif isinstance(exc.detail, (list, tuple)) and exc.detail:
            message = _first_message(exc.detail)
        response.data = {
            'success': False,
            'message': message,
            'errors': exc.detail,
        }
        return response

    message = _message_for(exc)
    if response.status_code >= 500:
        logger.error(f"API error: {message}", exc_info=exc)

    response.data = {
        'success': False,
        'message': message,
    }
    return response
