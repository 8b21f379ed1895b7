"""Identity (user account) persistence."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Connection

from agencycrm.auth.types import UserType
from agencycrm.persistence.database import Database, as_utc, new_id, utcnow
from agencycrm.persistence.schema import users


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def all_filled(*values: str | None) -> bool:
    """True when every value has non-whitespace text."""
    return all(v and v.strip() for v in values)


def is_valid_email(email: str) -> bool:
    """Loose shape check on an already normalized address: one @, text on both sides."""
    local, sep, domain = email.partition("@")
    return bool(sep and local and domain) and "@" not in domain and not any(
        ch.isspace() for ch in email
    )


@dataclass
class Identity:
    """An authenticated principal, scoped to exactly one tenant."""

    id: str
    tenant_id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    user_type: UserType
    is_admin: bool = False
    is_active: bool = True
    role_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_public(self) -> dict[str, Any]:
        """Sanitized projection. Never includes the password hash."""
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "tenantId": self.tenant_id,
            "userType": self.user_type.value,
            "isAdmin": self.is_admin,
            "isActive": self.is_active,
        }


# Columns an update may touch. tenant_id and email are fixed at creation.
UPDATABLE_FIELDS = {
    "first_name",
    "last_name",
    "password_hash",
    "user_type",
    "is_admin",
    "is_active",
    "role_id",
}


class IdentityStore:
    """CRUD over the users table."""

    def __init__(self, db: Database):
        self._db = db

    def _row_to_identity(self, row: Any) -> Identity:
        return Identity(
            id=row["id"],
            tenant_id=row["tenant_id"],
            email=row["email"],
            password_hash=row["password_hash"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            user_type=UserType(row["user_type"]),
            is_admin=bool(row["is_admin"]),
            is_active=bool(row["is_active"]),
            role_id=row["role_id"],
            created_at=as_utc(row["created_at"]),
            updated_at=as_utc(row["updated_at"]),
        )

    def _fetch_one(self, stmt: Any, conn: Connection | None) -> Identity | None:
        if conn is not None:
            row = conn.execute(stmt).mappings().first()
        else:
            with self._db.connect() as own:
                row = own.execute(stmt).mappings().first()
        return self._row_to_identity(row) if row else None

    def get(self, user_id: str, conn: Connection | None = None) -> Identity | None:
        return self._fetch_one(sa.select(users).where(users.c.id == user_id), conn)

    def get_by_email(self, email: str, conn: Connection | None = None) -> Identity | None:
        """Case-insensitive lookup."""
        stmt = sa.select(users).where(sa.func.lower(users.c.email) == normalize_email(email))
        return self._fetch_one(stmt, conn)

    def get_in_tenant(self, user_id: str, tenant_id: str) -> Identity | None:
        stmt = sa.select(users).where(users.c.id == user_id, users.c.tenant_id == tenant_id)
        return self._fetch_one(stmt, None)

    def list_by_tenant(self, tenant_id: str) -> list[Identity]:
        with self._db.connect() as conn:
            rows = (
                conn.execute(
                    sa.select(users)
                    .where(users.c.tenant_id == tenant_id)
                    .order_by(users.c.created_at)
                )
                .mappings()
                .all()
            )
        return [self._row_to_identity(r) for r in rows]

    def create(
        self,
        *,
        tenant_id: str,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        user_type: UserType,
        is_admin: bool = False,
        role_id: str | None = None,
        conn: Connection | None = None,
    ) -> Identity:
        now = utcnow()
        identity = Identity(
            id=new_id(),
            tenant_id=tenant_id,
            email=normalize_email(email),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            user_type=user_type,
            is_admin=is_admin,
            is_active=True,
            role_id=role_id,
            created_at=now,
            updated_at=now,
        )
        with self._db.transaction(conn) as c:
            c.execute(
                users.insert().values(
                    id=identity.id,
                    tenant_id=identity.tenant_id,
                    email=identity.email,
                    password_hash=identity.password_hash,
                    first_name=identity.first_name,
                    last_name=identity.last_name,
                    role_id=identity.role_id,
                    user_type=identity.user_type.value,
                    is_admin=identity.is_admin,
                    is_active=identity.is_active,
                    created_at=now,
                    updated_at=now,
                )
            )
        return identity

    def update(self, user_id: str, changes: dict[str, Any]) -> Identity | None:
        """Apply ``changes`` (column name -> value).

        Raises:
            ValueError: If a change targets a column outside UPDATABLE_FIELDS
        """
        illegal = set(changes) - UPDATABLE_FIELDS
        if illegal:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(illegal))}")

        values = dict(changes)
        if isinstance(values.get("user_type"), UserType):
            values["user_type"] = values["user_type"].value
        values["updated_at"] = utcnow()

        with self._db.begin() as conn:
            conn.execute(users.update().where(users.c.id == user_id).values(**values))
            return self.get(user_id, conn=conn)

    def delete(self, user_id: str) -> None:
        with self._db.begin() as conn:
            conn.execute(users.delete().where(users.c.id == user_id))
