"""
Custom Response Formatter for Standardized API Responses

Ensures all API responses follow the format:
{
    "status": "success" | "error",
    "message": "string message or empty",
    "data": {...} | [] | null
}

Errors raised as APIException also carry their "code" so clients can
tell rejections apart (e.g. NO_SECTION_ACCESS vs NO_ACCEPTED_FIELDS).
"""
from rest_framework.exceptions import APIException
from rest_framework.renderers import JSONRenderer
from rest_framework.views import exception_handler


def custom_exception_handler(exc, context):
    """
    Format DRF errors as {"status": "error", "message", "code", "data"}.
    """
    response = exception_handler(exc, context)

    if response is not None:
        body = format_error_response(response.data)
        if isinstance(exc, APIException):
            codes = exc.get_codes()
            body['code'] = codes if isinstance(codes, str) else exc.default_code
        if hasattr(exc, 'error_data'):
            body['data'] = exc.error_data()
        response.data = body

    return response


def format_error_response(errors):
    """
    Handles various error formats:
    - {"field": ["error1", "error2"]} -> "field: error1, error2"
    - {"detail": "message"} -> "message"
    - ["error1", "error2"] -> "error1, error2"
    """
    if isinstance(errors, dict):
        messages = []
        for field, field_errors in errors.items():
            if field == 'detail':
                messages.insert(0, str(field_errors))
            elif isinstance(field_errors, list):
                messages.append(f"{field}: {', '.join(str(e) for e in field_errors)}")
            else:
                messages.append(f"{field}: {field_errors}")
        message = "; ".join(messages)
    elif isinstance(errors, list):
        message = ", ".join(str(e) for e in errors)
    else:
        message = str(errors)

    return {
        "status": "error",
        "message": message,
        "data": None
    }


class StandardizedJSONRenderer(JSONRenderer):
    """
    Wraps responses that are not already in the standard format.
    """

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = renderer_context.get('response') if renderer_context else None
        if response is not None and not self.is_already_formatted(data):
            if response.status_code >= 400:
                data = format_error_response(data)
            else:
                data = {
                    "status": "success",
                    "message": "",
                    "data": data
                }
        return super().render(data, accepted_media_type, renderer_context)

    def is_already_formatted(self, data):
        return isinstance(data, dict) and {'status', 'message', 'data'} <= set(data)
