"""HTTP tests for the platform admin surface."""

from agencycrm.auth.types import UserType
from conftest import add_user, bearer, login, register


class TestListTenants:
    def test_saas_admin_sees_every_tenant_with_counts(self, client):
        acme = register(client)
        register(client, email="other@example.com", company="Other Co")
        services = client.app.state.services
        add_user(services, acme["user"]["tenantId"], UserType.TEAM_MEMBER, "bob@example.com")
        root = add_user(services, acme["user"]["tenantId"], UserType.SAAS_ADMIN, "root@example.com")

        response = client.get(
            "/api/admin/tenants", headers=bearer(login(client, root.email)["accessToken"])
        )

        assert response.status_code == 200
        counts = {t["name"]: t["userCount"] for t in response.json()}
        assert counts == {"Acme": 3, "Other Co": 1}

    def test_agency_admin_forbidden(self, client):
        tokens = register(client)
        response = client.get("/api/admin/tenants", headers=bearer(tokens["accessToken"]))
        assert response.status_code == 403
        assert response.json() == {"message": "SaaS admin access required"}

    def test_requires_auth(self, client):
        assert client.get("/api/admin/tenants").status_code == 401
