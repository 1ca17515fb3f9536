"""
Supabase JWT Authentication for Django REST Framework

Validates JWTs issued by Supabase Auth and attaches team member context to requests.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

import jwt
from django.conf import settings
from django.db import connection
from rest_framework import authentication, exceptions

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedUser:
    """
    Represents an authenticated team member from Supabase.

    This is NOT a Django User model - it's a lightweight container
    for caller context derived from the JWT and team_members table.
    """
    id: UUID                      # team_members.id
    auth_user_id: UUID            # auth.users.id (Supabase auth user ID)
    email: str
    tenant_id: UUID
    role: str                     # 'owner', 'admin', 'manager', 'chatter', ...
    is_active: bool = True
    full_name: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_administrator(self) -> bool:
        """Check if the member may view and edit payroll."""
        return self.role in getattr(settings, 'PAYROLL_ADMIN_ROLES', ['admin', 'owner'])


class SupabaseJWTAuthentication(authentication.BaseAuthentication):
    """
    Authenticates requests using Supabase JWTs.

    Flow:
    1. Extract Bearer token from Authorization header
    2. Decode and validate JWT using Supabase JWT secret
    3. Look up the team member by auth_user_id (sub claim)
    4. Return AuthenticatedUser with tenant context
    """

    def authenticate(self, request):
        """
        Authenticate the request and return (user, token) or None.

        Raises:
            AuthenticationFailed: If credentials are invalid
        """
        auth_header = request.META.get('HTTP_AUTHORIZATION', '')

        if not auth_header or not auth_header.startswith('Bearer '):
            return None

        token = auth_header[7:]  # Remove 'Bearer ' prefix

        if not token:
            return None

        payload = self._decode_jwt(token)
        if not payload:
            raise exceptions.AuthenticationFailed('Invalid or expired token')

        user = self._get_user_from_payload(payload)
        if not user:
            raise exceptions.AuthenticationFailed('Team member not found')

        return (user, token)

    def authenticate_header(self, request):
        """
        Return the WWW-Authenticate header value for 401 responses.
        """
        return 'Bearer realm="api"'

    def _decode_jwt(self, token: str) -> dict | None:
        """
        Decode and validate a Supabase JWT.

        Returns:
            dict: The decoded payload if valid
            None: If token is invalid or expired
        """
        jwt_secret = getattr(settings, 'SUPABASE_JWT_SECRET', None)

        if not jwt_secret:
            logger.error('SUPABASE_JWT_SECRET not configured')
            return None

        supabase_url = getattr(settings, 'SUPABASE_URL', '')
        expected_issuer = f'{supabase_url}/auth/v1' if supabase_url else None

        decode_kwargs = {
            'jwt': token,
            'key': jwt_secret,
            'algorithms': ['HS256'],
            'audience': 'authenticated',
            'options': {
                'verify_exp': True,
                'verify_aud': True,
                'verify_iss': bool(expected_issuer),
            },
        }
        if expected_issuer:
            decode_kwargs['issuer'] = expected_issuer

        try:
            return jwt.decode(**decode_kwargs)
        except jwt.ExpiredSignatureError:
            logger.debug('JWT has expired')
            return None
        except jwt.InvalidAudienceError:
            logger.debug('JWT has invalid audience')
            return None
        except jwt.InvalidTokenError as e:
            logger.debug(f'JWT validation failed: {e}')
            return None

    def _get_user_from_payload(self, payload: dict) -> AuthenticatedUser | None:
        """
        Look up the team member by auth_user_id from the JWT sub claim.
        """
        auth_user_id = payload.get('sub')
        if not auth_user_id:
            logger.warning('JWT missing sub claim')
            return None

        try:
            with connection.cursor() as cursor:
                cursor.execute("""
                    SELECT
                        id,
                        auth_user_id,
                        email,
                        tenant_id,
                        role,
                        is_active,
                        full_name
                    FROM public.team_members
                    WHERE auth_user_id = %s
                    LIMIT 1
                """, [auth_user_id])

                row = cursor.fetchone()
        except Exception as e:
            logger.error(f'Database error looking up team member: {e}')
            return None

        if not row:
            logger.warning(f'No team member found for auth_user_id: {auth_user_id}')
            return None

        return AuthenticatedUser(
            id=row[0],
            auth_user_id=row[1],
            email=row[2] or '',
            tenant_id=row[3],
            role=row[4] or 'chatter',
            is_active=True if row[5] is None else row[5],
            full_name=row[6],
        )


def get_user_context(request) -> AuthenticatedUser | None:
    """
    Utility function to get the authenticated team member from request.

    Returns:
        AuthenticatedUser if authenticated, None otherwise
    """
    user = getattr(request, 'user', None)
    if isinstance(user, AuthenticatedUser):
        return user
    return None
