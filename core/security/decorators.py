"""
Role decorators for function-based views.
"""
from functools import wraps

from rest_framework import status
from rest_framework.response import Response

from .roles import normalize_roles


def request_roles(request):
    """Canonical roles of the authenticated caller (empty for anonymous users)."""
    return normalize_roles(getattr(request.user, 'roles', None) or [])


def require_roles(*roles, methods=None):
    """
    Decorator restricting a function view to callers holding any of `roles`.

    Args:
        roles: role labels, normalized before comparison
        methods: HTTP methods to guard; None guards every method

    Usage:
        @api_view(['GET', 'POST'])
        @require_roles('admin', 'superadmin', methods=['POST'])
        def column_rules(request):
            ...

    Place it below @api_view so request.user is the authenticated token user.
    """
    allowed = normalize_roles(roles)
    guarded = {m.upper() for m in methods} if methods else None

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if guarded is not None and request.method.upper() not in guarded:
                return view_func(request, *args, **kwargs)

            if not request.user or not request.user.is_authenticated:
                return Response(
                    {
                        'status': 'error',
                        'message': 'Authentication required',
                        'code': 'NOT_AUTHENTICATED',
                        'data': None,
                    },
                    status=status.HTTP_401_UNAUTHORIZED
                )

            if not request_roles(request) & allowed:
                return Response(
                    {
                        'status': 'error',
                        'message': 'Permission denied',
                        'code': 'ROLE_REQUIRED',
                        'data': {'required_roles': sorted(allowed)},
                    },
                    status=status.HTTP_403_FORBIDDEN
                )

            return view_func(request, *args, **kwargs)

        wrapper.required_roles = allowed
        return wrapper
    return decorator
