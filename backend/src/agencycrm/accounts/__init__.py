"""Tenants, identities, roles and feature modules."""

from agencycrm.accounts.identities import (
    Identity,
    IdentityStore,
    is_valid_email,
    normalize_email,
)
from agencycrm.accounts.modules import DEFAULT_MODULES, ModuleCatalog
from agencycrm.accounts.tenants import ADMIN_ROLE, Role, RoleStore, Tenant, TenantStore

__all__ = [
    "ADMIN_ROLE",
    "DEFAULT_MODULES",
    "Identity",
    "IdentityStore",
    "ModuleCatalog",
    "Role",
    "RoleStore",
    "Tenant",
    "TenantStore",
    "is_valid_email",
    "normalize_email",
]
