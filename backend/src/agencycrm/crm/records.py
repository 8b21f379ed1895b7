"""CRUD shared by every tenant-owned CRM record.

Every statement filters on the tenant id taken from the caller's token,
so a record of another tenant looks exactly like a missing one.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

import sqlalchemy as sa

from agencycrm.persistence.database import Database, as_utc, new_id, utcnow


def _to_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def _to_column(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value)
    return value


class TenantRecordStore:
    """Base store for tables carrying ``id``, ``tenant_id`` and timestamps.

    Subclasses set ``table`` and ``fields`` (camelCase API name -> column).
    Fields in ``create_only`` are written on insert and ignored on update.
    """

    table: sa.Table
    fields: dict[str, str] = {}
    create_only: frozenset[str] = frozenset()

    def __init__(self, db: Database):
        self._db = db

    def _row_to_dict(self, row: Any) -> dict[str, Any]:
        record = {"id": row["id"], "tenantId": row["tenant_id"]}
        for name, column in self.fields.items():
            record[name] = _to_json(row[column])
        record["createdAt"] = _to_json(row["created_at"])
        record["updatedAt"] = _to_json(row["updated_at"])
        return record

    def _scoped(self, record_id: str, tenant_id: str) -> sa.ColumnElement[bool]:
        return sa.and_(self.table.c.id == record_id, self.table.c.tenant_id == tenant_id)

    def list(self, tenant_id: str) -> list[dict[str, Any]]:
        """Newest first."""
        with self._db.connect() as conn:
            rows = (
                conn.execute(
                    sa.select(self.table)
                    .where(self.table.c.tenant_id == tenant_id)
                    .order_by(self.table.c.created_at.desc())
                )
                .mappings()
                .all()
            )
        return [self._row_to_dict(r) for r in rows]

    def get(self, record_id: str, tenant_id: str) -> dict[str, Any] | None:
        with self._db.connect() as conn:
            row = (
                conn.execute(sa.select(self.table).where(self._scoped(record_id, tenant_id)))
                .mappings()
                .first()
            )
        return self._row_to_dict(row) if row else None

    def create(self, tenant_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a record. Keys missing from ``data`` fall back to column defaults."""
        now = utcnow()
        record_id = new_id()
        values = {
            column: _to_column(data[name])
            for name, column in self.fields.items()
            if name in data
        }
        with self._db.begin() as conn:
            conn.execute(
                self.table.insert().values(
                    id=record_id,
                    tenant_id=tenant_id,
                    created_at=now,
                    updated_at=now,
                    **values,
                )
            )
        return self.get(record_id, tenant_id)  # type: ignore[return-value]

    def update(
        self, record_id: str, tenant_id: str, data: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Apply the given fields. Returns None if the record is not in the tenant."""
        values = {
            column: _to_column(data[name])
            for name, column in self.fields.items()
            if name in data and name not in self.create_only
        }
        if values:
            values["updated_at"] = utcnow()
            with self._db.begin() as conn:
                conn.execute(
                    self.table.update()
                    .where(self._scoped(record_id, tenant_id))
                    .values(**values)
                )
        return self.get(record_id, tenant_id)

    def delete(self, record_id: str, tenant_id: str) -> bool:
        with self._db.begin() as conn:
            result = conn.execute(
                self.table.delete().where(self._scoped(record_id, tenant_id))
            )
        return bool(result.rowcount)
