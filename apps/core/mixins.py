"""
Core View Mixins

Provides standardized authentication, error handling, and response patterns
for all API views in the application.
"""
from functools import wraps
from uuid import UUID

from rest_framework.response import Response

from .authentication import AuthenticatedUser, get_user_context
from .exceptions import ERROR_STATUS_CODES, ValidationError
from .exceptions import APIException as APIError


class AuthenticatedAPIView:
    """
    Mixin providing standardized authentication and error handling.

    Usage:
        class MyView(AuthenticatedAPIView, APIView):
            def get(self, request):
                user = self.get_user(request)  # Raises if not authenticated
                # ... view logic
    """

    def get_user(self, request) -> AuthenticatedUser:
        """
        Get authenticated team member or raise 401.
        """
        user = get_user_context(request)
        if not user:
            raise APIError("Authentication required", status_code=401)
        return user

    def parse_uuid(self, value: str, field_name: str = "id") -> UUID:
        """
        Parse string to UUID or raise validation error.

        Raises:
            ValidationError if missing or invalid format
        """
        if not value:
            raise ValidationError(f"{field_name} is required")
        try:
            return UUID(str(value))
        except ValueError as err:
            raise ValidationError(f"Invalid {field_name} format") from err

    def result_response(self, result: dict, data=None, status_code: int = 200) -> Response:
        """
        Build a response from a service result dictionary.

        Failures keep the service's message as "error" and map the error
        type to a status code; successes carry "error": null.
        """
        if result.get("error"):
            error_type = result.get("error_type")
            return Response(
                {"error": result["error"], "error_type": error_type},
                status=ERROR_STATUS_CODES.get(error_type, 500),
            )
        body = {"error": None}
        body.update(data or {})
        return Response(body, status=status_code)


def handle_api_errors(func):
    """
    Decorator to handle APIError exceptions in view methods.

    Usage:
        @handle_api_errors
        def get(self, request):
            user = self.get_user(request)
            # ...
    """
    @wraps(func)
    def wrapper(self, request, *args, **kwargs):
        try:
            return func(self, request, *args, **kwargs)
        except APIError as e:
            return Response(
                {"error": e.message, "details": e.details} if e.details else {"error": e.message},
                status=e.status_code
            )
    return wrapper
