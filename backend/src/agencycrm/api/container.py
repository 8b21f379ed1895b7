"""Service wiring shared by the API and the CLI."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from agencycrm.accounts import IdentityStore, ModuleCatalog, RoleStore, TenantStore
from agencycrm.accounts.staff import StaffService
from agencycrm.auth import JWTService, PasswordService, TokenStore
from agencycrm.auth.service import AuthService
from agencycrm.config import Settings
from agencycrm.crm import ContactStore, DealStore, TaskStore
from agencycrm.persistence import Database


@dataclass
class Services:
    """Every long-lived object the application needs, built from ``Settings``."""

    settings: Settings
    db: Database
    jwt_service: JWTService
    password_service: PasswordService
    token_store: TokenStore
    identities: IdentityStore
    tenants: TenantStore
    roles: RoleStore
    modules: ModuleCatalog
    auth_service: AuthService
    staff_service: StaffService
    contacts: ContactStore
    deals: DealStore
    tasks: TaskStore

    @classmethod
    def build(cls, settings: Settings) -> Services:
        db = Database(settings.database)
        jwt_service = JWTService(settings.secret_key)
        password_service = PasswordService(rounds=settings.bcrypt_rounds)
        token_store = TokenStore(db)
        identities = IdentityStore(db)
        tenants = TenantStore(db)
        roles = RoleStore(db)
        modules = ModuleCatalog(db)

        return cls(
            settings=settings,
            db=db,
            jwt_service=jwt_service,
            password_service=password_service,
            token_store=token_store,
            identities=identities,
            tenants=tenants,
            roles=roles,
            modules=modules,
            auth_service=AuthService(
                db=db,
                jwt_service=jwt_service,
                password_service=password_service,
                token_store=token_store,
                identities=identities,
                tenants=tenants,
                roles=roles,
                modules=modules,
            ),
            staff_service=StaffService(identities, roles, password_service),
            contacts=ContactStore(db),
            deals=DealStore(db),
            tasks=TaskStore(db),
        )

    def initialize(self) -> None:
        """Create missing tables, seed the module catalogue and the admin role."""
        self.db.create_all()
        self.modules.seed_defaults()
        self.roles.admin_role()

    def close(self) -> None:
        self.db.close()


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the container attached by the lifespan."""
    return request.app.state.services
