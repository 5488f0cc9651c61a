"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from rest_framework.test import APIClient

from tenant.managers import set_current_tenant


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_tenant_context():
    """
    Reset tenant context after each test.

    If tenant context leaks, tests may pass when they should fail.
    """
    yield
    set_current_tenant(None)


# ============================================================================
# TENANT FIXTURES
# ============================================================================

@pytest.fixture
def tenant_a(db):
    """Create tenant A for isolation testing."""
    from tenant.models import Tenant
    return Tenant.objects.create(
        slug='warung-a',
        name='Warung A',
        is_active=True
    )


@pytest.fixture
def tenant_b(db):
    """Create tenant B for isolation testing."""
    from tenant.models import Tenant
    return Tenant.objects.create(
        slug='warung-b',
        name='Warung B',
        is_active=True
    )


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def owner_a(tenant_a):
    from users.models import User
    return User.objects.create_user(
        username='owner-a',
        email='owner@warung-a.test',
        password='s3cret-pass',
        tenant=tenant_a,
        role=User.Role.OWNER,
    )


@pytest.fixture
def staff_a(tenant_a):
    from users.models import User
    return User.objects.create_user(
        username='staff-a',
        email='staff@warung-a.test',
        password='s3cret-pass',
        tenant=tenant_a,
        role=User.Role.STAFF,
    )


@pytest.fixture
def owner_b(tenant_b):
    from users.models import User
    return User.objects.create_user(
        username='owner-b',
        email='owner@warung-b.test',
        password='s3cret-pass',
        tenant=tenant_b,
        role=User.Role.OWNER,
    )


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def owner_client(owner_a):
    """API client logged in as the owner of tenant A."""
    client = APIClient()
    client.force_login(owner_a)
    return client


@pytest.fixture
def staff_client(staff_a):
    """API client logged in as a staff member of tenant A."""
    client = APIClient()
    client.force_login(staff_a)
    return client


@pytest.fixture
def owner_b_client(owner_b):
    client = APIClient()
    client.force_login(owner_b)
    return client
