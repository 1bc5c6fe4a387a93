"""Tests for the FastAPI permission guards."""

from unittest.mock import AsyncMock

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from energyos_rbac.api import AccessControlDependencies, register_exception_handlers, require_permissions
from energyos_rbac.features.permissions.entities import AuthenticatedIdentity, OverrideStore
from energyos_rbac.features.permissions.services import AccessDecisionService, OverrideMutationService


class TestRequirePermission:
    """Test the single-permission guard."""

    def test_allowed_returns_identity(self, client, headers_for):
        response = client.get("/finance/payments", headers=headers_for("c1", "COMPANY"))
        assert response.status_code == 200
        assert response.json() == {"user_id": "c1"}

    def test_missing_permission_forbidden(self, client, headers_for):
        response = client.get("/finance/payments", headers=headers_for("cust-1", "CUSTOMER"))
        assert response.status_code == 403
        assert response.json()["detail"] == {
            "allowed": False,
            "reason": "MissingPermission",
            "detail": "finance:payments",
        }

    def test_unauthenticated(self, client):
        assert client.get("/finance/payments").status_code == 401

    def test_unknown_role_header_rejected(self, client, headers_for):
        response = client.get("/finance/payments", headers=headers_for("x", "ROOT"))
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_permission_forbidden(self, client, admin_headers):
        response = client.get("/broken", headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["detail"]["reason"] == "InvalidPermission"


class TestRequireAnyPermission:
    """Test the any-of guard."""

    def test_one_of_is_enough(self, client, headers_for):
        response = client.get("/reports", headers=headers_for("bank-1", "BANK"))
        assert response.status_code == 200

    def test_none_of_forbidden(self, client, headers_for):
        response = client.get("/reports", headers=headers_for("farmer-1", "FARMER"))
        assert response.status_code == 403
        assert response.json()["detail"]["detail"] == "reports:read,analytics:read"


class TestTenantGuard:
    """Test resource ownership read from the path."""

    def test_own_company(self, client, admin_headers, headers_for):
        granted = client.post(
            "/rbac/overrides/c1/company",
            json={"companyId": "company-a", "expectedVersion": 0, "role": "COMPANY"},
            headers=admin_headers,
        )
        assert granted.status_code == 200

        response = client.get("/companies/company-a/quotes", headers=headers_for("c1", "COMPANY"))
        assert response.status_code == 200

    def test_other_company_forbidden(self, client, admin_headers, headers_for):
        client.post(
            "/rbac/overrides/c1/company",
            json={"companyId": "company-a", "expectedVersion": 0, "role": "COMPANY"},
            headers=admin_headers,
        )

        response = client.get("/companies/company-b/quotes", headers=headers_for("c1", "COMPANY"))

        assert response.status_code == 403
        assert response.json()["detail"] == {
            "allowed": False,
            "reason": "CrossTenantAccess",
            "detail": "company-b",
        }

    def test_admin_crosses_tenants(self, client, admin_headers):
        response = client.get("/companies/company-b/quotes", headers=admin_headers)
        assert response.status_code == 200

    def test_identity_company_scopes_first_override(self, client, admin_headers, headers_for):
        response = client.get("/companies/company-a/quotes", headers=headers_for("c9", "COMPANY", "company-a"))

        assert response.status_code == 200
        stored = client.get("/rbac/overrides/c9", headers=admin_headers).json()
        assert stored["company_id"] == "company-a"
        assert stored["role"] == "COMPANY"
        assert stored["version"] == 1

    def test_identity_company_cannot_reach_other_tenant(self, client, headers_for):
        response = client.get("/companies/company-b/quotes", headers=headers_for("c9", "COMPANY", "company-a"))

        assert response.status_code == 403
        assert response.json()["detail"]["reason"] == "CrossTenantAccess"

    def test_stored_scope_wins_over_identity_company(self, client, admin_headers, headers_for):
        client.post(
            "/rbac/overrides/c1/company",
            json={"companyId": "company-a", "expectedVersion": 0, "role": "COMPANY"},
            headers=admin_headers,
        )

        response = client.get("/companies/company-b/quotes", headers=headers_for("c1", "COMPANY", "company-b"))

        assert response.status_code == 403
        assert response.json()["detail"]["reason"] == "CrossTenantAccess"
        stored = client.get("/rbac/overrides/c1", headers=admin_headers).json()
        assert stored["company_id"] == "company-a"
        assert stored["version"] == 1

    def test_untenanted_route_does_not_provision(self, client, admin_headers, headers_for):
        response = client.get("/finance/payments", headers=headers_for("c9", "COMPANY", "company-a"))

        assert response.status_code == 200
        assert client.get("/rbac/overrides/c9", headers=admin_headers).status_code == 404


class TestStoreUnavailable:
    """Test the guard when the override store is down."""

    def test_unavailable_is_503(self, identity_dependency, headers_for):
        store = AsyncMock(spec=OverrideStore)
        store.get_override.side_effect = ConnectionError("refused")
        service = AccessDecisionService(store)

        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/projects")
        async def list_projects(
            identity: AuthenticatedIdentity = Depends(
                require_permissions(service, identity_dependency, ["projects:read"])
            ),
        ):
            return {}

        response = TestClient(app).get("/projects", headers=headers_for("u1", "ADMIN"))

        assert response.status_code == 503
        assert response.json()["detail"]["reason"] == "Unavailable"

    def test_provisioning_unavailable_is_503(self, identity_dependency, headers_for, failing_store):
        guards = AccessControlDependencies(
            AccessDecisionService(failing_store), identity_dependency, OverrideMutationService(failing_store)
        )

        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/companies/{company_id}/quotes")
        async def company_quotes(
            company_id: str,
            identity: AuthenticatedIdentity = Depends(
                guards.require_permission("quotes:read", owner_company_param="company_id")
            ),
        ):
            return {}

        response = TestClient(app).get(
            "/companies/company-a/quotes", headers=headers_for("c9", "COMPANY", "company-a")
        )

        assert response.status_code == 503
        assert response.json()["detail"]["reason"] == "Unavailable"
