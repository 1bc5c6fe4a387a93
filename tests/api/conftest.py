"""Fixtures for the FastAPI integration tests."""

from typing import Optional

import pytest
from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.testclient import TestClient

from energyos_rbac.api import (
    AccessControlDependencies,
    create_access_control_router,
    register_exception_handlers,
)
from energyos_rbac.features.permissions.entities import AuthenticatedIdentity


async def header_identity(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    x_company_id: Optional[str] = Header(None),
) -> AuthenticatedIdentity:
    """Stand-in authentication: trust identity headers."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Authentication required")
    return AuthenticatedIdentity(user_id=x_user_id, role=x_user_role, company_id=x_company_id)


def identity_headers(user_id: str, role: str, company_id: Optional[str] = None) -> dict:
    headers = {"X-User-Id": user_id, "X-User-Role": role}
    if company_id:
        headers["X-Company-Id"] = company_id
    return headers


@pytest.fixture
def identity_dependency():
    """Authentication dependency resolving identity headers."""
    return header_identity


@pytest.fixture
def headers_for():
    """Build identity headers for a user."""
    return identity_headers


@pytest.fixture
def admin_headers():
    return identity_headers("admin-1", "ADMIN")


@pytest.fixture
def app(access_service, mutation_service):
    """Application with the admin router and a few guarded demo routes."""
    application = FastAPI()
    register_exception_handlers(application)
    application.include_router(
        create_access_control_router(access_service, mutation_service, header_identity, prefix="/rbac")
    )

    guards = AccessControlDependencies(access_service, header_identity, mutation_service)

    @application.get("/finance/payments")
    async def list_payments(
        identity: AuthenticatedIdentity = Depends(guards.require_permission("finance:payments")),
    ):
        return {"user_id": identity.user_id}

    @application.get("/reports")
    async def list_reports(
        identity: AuthenticatedIdentity = Depends(
            guards.require_any_permission(["reports:read", "analytics:read"])
        ),
    ):
        return {"user_id": identity.user_id}

    @application.get("/companies/{company_id}/quotes")
    async def company_quotes(
        company_id: str,
        identity: AuthenticatedIdentity = Depends(
            guards.require_permission("quotes:read", owner_company_param="company_id")
        ),
    ):
        return {"company_id": company_id}

    @application.get("/broken")
    async def broken_route(
        identity: AuthenticatedIdentity = Depends(guards.require_permission("reports:shred")),
    ):
        return {}

    return application


@pytest.fixture
def client(app):
    return TestClient(app)
