"""
DRF exception handler for the directory API.

Converts DRF exceptions (serializer validation errors, malformed JSON,
unknown objects, wrong methods) into the same error envelope the views
return themselves:
{
    "success": false,
    "message": "Error description",
    "errors": { ... }  // Optional, for field-level validation errors
}
"""

import logging

from rest_framework.views import exception_handler
from rest_framework.exceptions import ValidationError, ParseError, NotFound, MethodNotAllowed
from django.http import Http404

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that formats all errors consistently.
    """
    response = exception_handler(exc, context)

    if response is None:
        # Unhandled exceptions fall through to Django's 500 handling
        view = context.get('view')
        logger.error(f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}")
        return None

    custom_response_data = {
        "success": False,
        "message": _get_error_message(exc),
    }

    if isinstance(exc, ValidationError) and isinstance(response.data, dict):
        if 'detail' not in response.data or len(response.data) > 1:
            custom_response_data["errors"] = _normalize_errors(response.data)

    response.data = custom_response_data
    return response


def _get_error_message(exc):
    """
    Extract a human-readable error message from the exception.
    """
    if isinstance(exc, (Http404, NotFound)):
        return "Not found."

    if isinstance(exc, ParseError):
        return "Malformed request body."

    if isinstance(exc, MethodNotAllowed):
        return str(exc.detail)

    if isinstance(exc, ValidationError):
        return _extract_first_validation_error(exc.detail)

    detail = getattr(exc, 'detail', None)
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        return str(detail[0]) if detail else "An error occurred"
    if isinstance(detail, dict):
        if 'detail' in detail:
            return str(detail['detail'])
        return _extract_first_validation_error(detail)

    return "An error occurred"


def _extract_first_validation_error(errors):
    """
    Pick the first validation message out of a nested error structure,
    prefixed with its field name when it belongs to one.
    """
    if isinstance(errors, str):
        return errors

    if isinstance(errors, list):
        for item in errors:
            result = _extract_first_validation_error(item)
            if result:
                return result

    if isinstance(errors, dict):
        for key, value in errors.items():
            message = _extract_first_validation_error(value)
            if not message:
                continue
            if key == 'non_field_errors':
                return message
            return f"{key}: {message}"

    return "Validation error"


def _normalize_errors(errors):
    """
    Converts all error values to lists of strings.
    """
    if not isinstance(errors, dict):
        return errors

    normalized = {}
    for key, value in errors.items():
        if isinstance(value, list):
            normalized[key] = [str(v) for v in value]
        elif isinstance(value, dict):
            normalized[key] = _normalize_errors(value)
        else:
            normalized[key] = [str(value)]

    return normalized
