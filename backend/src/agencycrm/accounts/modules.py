"""Feature module catalogue and per-tenant enablement."""

import logging
from dataclasses import dataclass
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Connection

from agencycrm.persistence.database import Database, as_utc, new_id, utcnow
from agencycrm.persistence.schema import modules, tenant_modules

logger = logging.getLogger(__name__)


DEFAULT_MODULES: list[dict[str, Any]] = [
    {
        "name": "contacts",
        "display_name": "Contacts",
        "description": "Manage your contacts and leads",
        "icon": "users",
        "is_core": True,
    },
    {
        "name": "deals",
        "display_name": "Deals",
        "description": "Track sales opportunities",
        "icon": "briefcase",
        "is_core": True,
    },
    {
        "name": "tasks",
        "display_name": "Tasks",
        "description": "Manage tasks and activities",
        "icon": "check-square",
        "is_core": True,
    },
]


@dataclass
class Module:
    id: str
    name: str
    display_name: str
    description: str | None = None
    icon: str | None = None
    is_core: bool = False


class ModuleCatalog:
    """Master module list plus the tenant_modules join table."""

    def __init__(self, db: Database):
        self._db = db

    def seed_defaults(self) -> int:
        """Insert any missing default modules. Idempotent by name.

        Returns:
            Number of modules created
        """
        created = 0
        with self._db.begin() as conn:
            existing = set(conn.execute(sa.select(modules.c.name)).scalars())
            for entry in DEFAULT_MODULES:
                if entry["name"] in existing:
                    continue
                conn.execute(modules.insert().values(id=new_id(), **entry))
                created += 1
        if created:
            logger.info("Seeded %d default module(s)", created)
        return created

    def list_all(self, conn: Connection | None = None) -> list[Module]:
        stmt = sa.select(modules).order_by(modules.c.name)
        if conn is not None:
            rows = conn.execute(stmt).mappings().all()
        else:
            with self._db.connect() as own:
                rows = own.execute(stmt).mappings().all()
        return [
            Module(
                id=r["id"],
                name=r["name"],
                display_name=r["display_name"],
                description=r["description"],
                icon=r["icon"],
                is_core=bool(r["is_core"]),
            )
            for r in rows
        ]

    def enable_all_for_tenant(self, tenant_id: str, conn: Connection | None = None) -> int:
        """Enable every catalogued module for a tenant."""
        now = utcnow()
        with self._db.transaction(conn) as c:
            catalogue = self.list_all(conn=c)
            for module in catalogue:
                c.execute(
                    tenant_modules.insert().values(
                        id=new_id(),
                        tenant_id=tenant_id,
                        module_id=module.id,
                        is_enabled=True,
                        enabled_at=now,
                    )
                )
        return len(catalogue)

    def list_for_tenant(self, tenant_id: str) -> list[dict[str, Any]]:
        """Tenant module rows joined with their catalogue entries."""
        stmt = (
            sa.select(
                tenant_modules.c.id,
                tenant_modules.c.module_id,
                tenant_modules.c.is_enabled,
                tenant_modules.c.enabled_at,
                modules.c.name,
                modules.c.display_name,
                modules.c.description,
                modules.c.icon,
                modules.c.is_core,
            )
            .select_from(tenant_modules.join(modules, modules.c.id == tenant_modules.c.module_id))
            .where(tenant_modules.c.tenant_id == tenant_id)
            .order_by(modules.c.name)
        )
        with self._db.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [
            {
                "id": r["id"],
                "moduleId": r["module_id"],
                "isEnabled": bool(r["is_enabled"]),
                "enabledAt": as_utc(r["enabled_at"]).isoformat(),
                "module": {
                    "name": r["name"],
                    "displayName": r["display_name"],
                    "description": r["description"],
                    "icon": r["icon"],
                    "isCore": bool(r["is_core"]),
                },
            }
            for r in rows
        ]

    def set_enabled(self, tenant_module_id: str, tenant_id: str, enabled: bool) -> bool:
        """Toggle a tenant module. Returns False if the row is not the tenant's."""
        with self._db.begin() as conn:
            result = conn.execute(
                tenant_modules.update()
                .where(
                    tenant_modules.c.id == tenant_module_id,
                    tenant_modules.c.tenant_id == tenant_id,
                )
                .values(is_enabled=enabled, enabled_at=utcnow())
            )
        return bool(result.rowcount)
