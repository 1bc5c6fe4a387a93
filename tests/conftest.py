"""Pytest configuration and fixtures for energyos-rbac tests."""

from unittest.mock import AsyncMock

import pytest

from energyos_rbac.features.permissions.entities import (
    AuthenticatedIdentity,
    OverrideStore,
    Permission,
    Role,
    UserOverride,
)
from energyos_rbac.features.permissions.repositories import InMemoryOverrideStore
from energyos_rbac.features.permissions.services import (
    AccessDecisionService,
    OverrideMutationService,
)


@pytest.fixture
def override_store():
    """Empty in-memory override store."""
    return InMemoryOverrideStore()


@pytest.fixture
def access_service(override_store):
    """Access decision service over the in-memory store."""
    return AccessDecisionService(override_store, store_timeout_seconds=1.0)


@pytest.fixture
def mutation_service(override_store):
    """Override mutation service over the in-memory store."""
    return OverrideMutationService(override_store)


@pytest.fixture
def failing_store():
    """Override store whose reads and writes always raise."""
    store = AsyncMock(spec=OverrideStore)
    store.get_override.side_effect = ConnectionError("connection refused")
    store.save_override.side_effect = ConnectionError("connection refused")
    return store


@pytest.fixture
def customer_override():
    """CUSTOMER override with designer access revoked."""
    return UserOverride(
        user_id="customer-1",
        role=Role.CUSTOMER,
        company_id="company-a",
        revoked_permissions=frozenset({Permission.DESIGNER_USE}),
    )


@pytest.fixture
def support_override():
    """SUPPORT override with an extra users:delete grant."""
    return UserOverride(
        user_id="support-1",
        role=Role.SUPPORT,
        custom_permissions=frozenset({Permission.USERS_DELETE}),
    )


@pytest.fixture
def admin_identity():
    """Authenticated platform administrator."""
    return AuthenticatedIdentity(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def company_identity():
    """Authenticated company user."""
    return AuthenticatedIdentity(user_id="company-user-1", role=Role.COMPANY, company_id="company-a")
