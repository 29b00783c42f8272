"""
Standardized API Response Helpers

Integration endpoints wrap their payloads in a {success, message, data}
envelope. The kiosk endpoints (lookup, check-in, check-out) keep the flat
shapes the check-in wizard reads and only use the error helpers here.

Usage:
    from vms.utils.responses import success_response, error_response, conflict_response

    return success_response(data=serializer.data)
    return error_response("Visit is already checked out")
    return conflict_response("Visitor already has an active visit", extra={"visit": ...})
"""

from rest_framework.response import Response
from rest_framework import status as http_status


def success_response(data=None, message=None, status=http_status.HTTP_200_OK):
    """
    Return standardized success response.

    Format: {"success": true, "message"?: string, "data"?: any}
    """
    response_data = {"success": True}
    if message:
        response_data["message"] = message
    if data is not None:
        response_data["data"] = data
    return Response(response_data, status=status)


def error_response(message, errors=None, extra=None, status=http_status.HTTP_400_BAD_REQUEST):
    """
    Return standardized error response.

    Format: {"success": false, "message": string, "errors"?: object, ...extra}
    """
    response_data = {
        "success": False,
        "message": message
    }
    if errors:
        response_data["errors"] = errors
    if extra:
        response_data.update(extra)
    return Response(response_data, status=status)


def not_found_response(message="Not found", extra=None):
    """
    Return standardized 404 response.
    """
    return error_response(message=message, extra=extra, status=http_status.HTTP_404_NOT_FOUND)


def conflict_response(message, extra=None):
    """
    Return standardized 409 response, used when a visit would duplicate an active one.
    """
    return error_response(message=message, extra=extra, status=http_status.HTTP_409_CONFLICT)


def server_error_response(message="An unexpected error occurred", extra=None):
    """
    Return standardized 500 response.
    """
    return error_response(message=message, extra=extra, status=http_status.HTTP_500_INTERNAL_SERVER_ERROR)


def paginated_response(data, message="Fetched successfully", status=http_status.HTTP_200_OK):
    """
    Return standardized paginated response.

    Output format:
    {
        "success": True,
        "message": "Fetched successfully",
        "data": {"count": 100, "next": "url", "previous": "url", "results": [...]}
    }
    """
    return success_response(data=data, message=message, status=status)
