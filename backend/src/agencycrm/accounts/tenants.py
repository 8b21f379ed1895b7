"""Tenants and roles."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Connection

from agencycrm.persistence.database import Database, as_utc, new_id, utcnow
from agencycrm.persistence.schema import roles, tenants, users

WILDCARD = "*"
ADMIN_ROLE = "admin"


@dataclass
class Tenant:
    id: str
    name: str
    created_at: datetime | None = None


@dataclass
class Role:
    """A named permission set. ``"*"`` grants everything."""

    id: str
    name: str
    permissions: list[str] = field(default_factory=list)


class TenantStore:
    def __init__(self, db: Database):
        self._db = db

    def create(self, name: str, conn: Connection | None = None) -> Tenant:
        tenant = Tenant(id=new_id(), name=name, created_at=utcnow())
        with self._db.transaction(conn) as c:
            c.execute(
                tenants.insert().values(
                    id=tenant.id, name=tenant.name, created_at=tenant.created_at
                )
            )
        return tenant

    def get(self, tenant_id: str) -> Tenant | None:
        with self._db.connect() as conn:
            row = conn.execute(
                sa.select(tenants).where(tenants.c.id == tenant_id)
            ).mappings().first()
        if not row:
            return None
        return Tenant(id=row["id"], name=row["name"], created_at=as_utc(row["created_at"]))

    def list_with_user_counts(self) -> list[dict[str, Any]]:
        """Every tenant with the number of identities it owns."""
        user_count = sa.func.count(users.c.id).label("user_count")
        stmt = (
            sa.select(tenants.c.id, tenants.c.name, tenants.c.created_at, user_count)
            .select_from(tenants.outerjoin(users, users.c.tenant_id == tenants.c.id))
            .group_by(tenants.c.id, tenants.c.name, tenants.c.created_at)
            .order_by(tenants.c.created_at)
        )
        with self._db.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [
            {
                "id": r["id"],
                "name": r["name"],
                "createdAt": as_utc(r["created_at"]).isoformat(),
                "userCount": r["user_count"],
            }
            for r in rows
        ]


class RoleStore:
    def __init__(self, db: Database):
        self._db = db

    def _row_to_role(self, row: Any) -> Role:
        return Role(id=row["id"], name=row["name"], permissions=list(row["permissions"] or []))

    def get(self, role_id: str) -> Role | None:
        with self._db.connect() as conn:
            row = conn.execute(sa.select(roles).where(roles.c.id == role_id)).mappings().first()
        return self._row_to_role(row) if row else None

    def get_or_create(
        self,
        name: str,
        permissions: list[str],
        conn: Connection | None = None,
    ) -> Role:
        """Return the role called ``name``, creating it if missing."""
        with self._db.transaction(conn) as c:
            row = c.execute(sa.select(roles).where(roles.c.name == name)).mappings().first()
            if row:
                return self._row_to_role(row)
            role = Role(id=new_id(), name=name, permissions=list(permissions))
            c.execute(
                roles.insert().values(id=role.id, name=role.name, permissions=role.permissions)
            )
            return role

    def admin_role(self, conn: Connection | None = None) -> Role:
        """The shared tenant-admin role, granting ``"*"``."""
        return self.get_or_create(ADMIN_ROLE, [WILDCARD], conn=conn)
