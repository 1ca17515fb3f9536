"""
Pytest Configuration for the Payroll Backend Tests

Key Features:
- Provides authenticated team members and API clients
- Authentication is mocked at SupabaseJWTAuthentication.authenticate, which
  both the middleware and DRF call
"""
import uuid

import pytest
from rest_framework.test import APIClient

from apps.core.authentication import AuthenticatedUser


def create_test_user(
    user_id=None,
    tenant_id=None,
    role='admin',
    email='admin@example.com',
    full_name='Test Admin',
):
    """Create an authenticated team member for testing."""
    return AuthenticatedUser(
        id=user_id or uuid.uuid4(),
        auth_user_id=uuid.uuid4(),
        email=email,
        tenant_id=tenant_id or uuid.uuid4(),
        role=role,
        is_active=True,
        full_name=full_name,
    )


# =============================================================================
# AuthenticatedUser Fixtures
# =============================================================================

@pytest.fixture
def tenant_id():
    """Generate a consistent tenant ID for tests."""
    return uuid.uuid4()


@pytest.fixture
def admin_user(tenant_id):
    """An admin allowed to manage payroll."""
    return create_test_user(tenant_id=tenant_id, role='admin')


@pytest.fixture
def owner_user(tenant_id):
    """An owner, also allowed to manage payroll."""
    return create_test_user(tenant_id=tenant_id, role='owner', full_name='Test Owner')


@pytest.fixture
def chatter_user(tenant_id):
    """A chatter, who may not see payroll."""
    return create_test_user(tenant_id=tenant_id, role='chatter', full_name='Test Chatter')


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Basic API client without authentication."""
    return APIClient()


def _authenticate_as(mocker, user):
    mocker.patch(
        'apps.core.authentication.SupabaseJWTAuthentication.authenticate',
        return_value=(user, None),
    )


@pytest.fixture
def admin_client(api_client, admin_user, mocker):
    """API client authenticated as an admin."""
    _authenticate_as(mocker, admin_user)
    return api_client, admin_user


@pytest.fixture
def owner_client(api_client, owner_user, mocker):
    """API client authenticated as an owner."""
    _authenticate_as(mocker, owner_user)
    return api_client, owner_user


@pytest.fixture
def chatter_client(api_client, chatter_user, mocker):
    """API client authenticated as a chatter."""
    _authenticate_as(mocker, chatter_user)
    return api_client, chatter_user

