"""Shared fixtures: a per-test SQLite database and a wired application."""

import pytest
from fastapi.testclient import TestClient

from agencycrm.api.app import create_app
from agencycrm.api.container import Services
from agencycrm.auth.types import UserType
from agencycrm.config import Settings
from agencycrm.persistence import DatabaseConfig

TEST_SECRET = "test-secret-key-with-enough-length-for-hs256"
DEFAULT_PASSWORD = "Secret123!"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        secret_key=TEST_SECRET,
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'test.db'}"),
        bcrypt_rounds=4,
    )


@pytest.fixture
def services(settings):
    """Services wired against a fresh database, tables created and seeded."""
    svc = Services.build(settings)
    svc.initialize()
    yield svc
    svc.close()


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as client:
        yield client


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(
    client,
    email: str = "alice@example.com",
    password: str = DEFAULT_PASSWORD,
    company: str = "Acme",
) -> dict:
    """Register a tenant through the API and return the response body."""
    response = client.post(
        "/api/auth/register",
        json={
            "email": email,
            "password": password,
            "firstName": "Alice",
            "lastName": "Smith",
            "companyName": company,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def add_user(
    services: Services,
    tenant_id: str,
    user_type: UserType,
    email: str,
    password: str = DEFAULT_PASSWORD,
):
    """Insert an identity directly, bypassing the staff rules."""
    return services.identities.create(
        tenant_id=tenant_id,
        email=email,
        password_hash=services.password_service.hash(password),
        first_name=user_type.value.title(),
        last_name="User",
        user_type=user_type,
        is_admin=user_type in (UserType.SAAS_ADMIN, UserType.AGENCY_ADMIN),
    )


def login(client, email: str, password: str = DEFAULT_PASSWORD) -> dict:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()
