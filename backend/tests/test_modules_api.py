"""HTTP tests for tenant feature modules."""

import pytest

from agencycrm.auth.types import UserType
from conftest import add_user, bearer, login, register


@pytest.fixture
def admin(client):
    return register(client)


def list_modules(client, token):
    response = client.get("/api/tenant/modules", headers=bearer(token))
    assert response.status_code == 200
    return response.json()


class TestListModules:
    def test_new_tenant_has_every_module_enabled(self, client, admin):
        modules = list_modules(client, admin["accessToken"])

        assert {m["module"]["name"] for m in modules} == {"contacts", "deals", "tasks"}
        assert all(m["isEnabled"] for m in modules)
        assert all(m["module"]["displayName"] for m in modules)

    def test_customers_can_list(self, client, admin):
        services = client.app.state.services
        add_user(services, admin["user"]["tenantId"], UserType.CUSTOMER, "cust@example.com")
        token = login(client, "cust@example.com")["accessToken"]

        assert len(list_modules(client, token)) == 3

    def test_requires_auth(self, client):
        assert client.get("/api/tenant/modules").status_code == 401


class TestToggleModule:
    def test_disable_module(self, client, admin):
        deals = next(
            m for m in list_modules(client, admin["accessToken"]) if m["module"]["name"] == "deals"
        )

        response = client.patch(
            f"/api/tenant/modules/{deals['id']}",
            json={"isEnabled": False},
            headers=bearer(admin["accessToken"]),
        )

        assert response.status_code == 200
        after = {m["module"]["name"]: m["isEnabled"] for m in list_modules(client, admin["accessToken"])}
        assert after == {"contacts": True, "deals": False, "tasks": True}

    @pytest.mark.parametrize("value", ["false", 0, None])
    def test_non_boolean_rejected(self, client, admin, value):
        module = list_modules(client, admin["accessToken"])[0]
        response = client.patch(
            f"/api/tenant/modules/{module['id']}",
            json={"isEnabled": value},
            headers=bearer(admin["accessToken"]),
        )
        assert response.status_code == 400
        assert response.json() == {"message": "isEnabled must be a boolean"}

    def test_other_tenant_module_is_404(self, client, admin):
        other = register(client, email="other@example.com", company="Other Co")
        foreign = list_modules(client, other["accessToken"])[0]

        response = client.patch(
            f"/api/tenant/modules/{foreign['id']}",
            json={"isEnabled": False},
            headers=bearer(admin["accessToken"]),
        )
        assert response.status_code == 404

    def test_team_member_forbidden(self, client, admin):
        services = client.app.state.services
        add_user(services, admin["user"]["tenantId"], UserType.TEAM_MEMBER, "bob@example.com")
        token = login(client, "bob@example.com")["accessToken"]
        module = list_modules(client, token)[0]

        response = client.patch(
            f"/api/tenant/modules/{module['id']}",
            json={"isEnabled": False},
            headers=bearer(token),
        )
        assert response.status_code == 403
