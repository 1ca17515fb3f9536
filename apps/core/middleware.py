"""
Authentication Middleware for the Payroll Backend

Every payroll route needs a Supabase bearer token that resolves to a team
member; the member (and with it the tenant) is attached as request.user.
"""
import logging
import re
from collections.abc import Callable

from django.http import JsonResponse

from .authentication import SupabaseJWTAuthentication

logger = logging.getLogger(__name__)


def _unauthorized(message: str) -> JsonResponse:
    return JsonResponse({'error': 'Unauthorized', 'message': message}, status=401)


class SupabaseAuthMiddleware:
    """
    Rejects unauthenticated requests before they reach a view.

    Only the health check is reachable without a token. Tenant scoping is
    taken from the resolved member, never from headers or the body.
    """

    PUBLIC_ROUTES: list[str] = [
        r'^/api/health$',
    ]

    def __init__(self, get_response: Callable):
        self.get_response = get_response
        self.authenticator = SupabaseJWTAuthentication()
        self._public_patterns = [re.compile(pattern) for pattern in self.PUBLIC_ROUTES]

    def __call__(self, request):
        if any(pattern.match(request.path) for pattern in self._public_patterns):
            request.user = None
            return self.get_response(request)

        try:
            auth_result = self.authenticator.authenticate(request)
        except Exception as e:
            logger.warning(f'Rejected token on {request.path}: {e}')
            return _unauthorized(str(e))

        if auth_result is None:
            return _unauthorized('Authentication required')

        request.user, request.auth_token = auth_result
        logger.debug(f'{request.method} {request.path} by member {request.user.id} (tenant {request.user.tenant_id})')
        return self.get_response(request)
