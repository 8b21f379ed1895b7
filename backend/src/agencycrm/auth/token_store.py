"""Persistence for refresh token records.

One row per issued refresh token. A row's presence is what keeps the
token exchangeable; deleting it revokes the token even though its
signature stays valid until ``exp``.
"""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Connection

from agencycrm.auth.types import TokenRecord
from agencycrm.persistence.database import Database, as_utc, new_id, utcnow
from agencycrm.persistence.schema import auth_tokens


class TokenStore:
    """Refresh token ledger. Dialect-neutral via SQLAlchemy Core."""

    def __init__(self, db: Database):
        self._db = db

    def _row_to_record(self, row: Any) -> TokenRecord:
        return TokenRecord(
            id=row["id"],
            user_id=row["user_id"],
            refresh_token=row["refresh_token"],
            expires_at=as_utc(row["expires_at"]),
            created_at=as_utc(row["created_at"]),
        )

    def put(
        self,
        user_id: str,
        refresh_token: str,
        expires_at: datetime,
        conn: Connection | None = None,
    ) -> TokenRecord:
        """Insert a record. Several live records per identity are allowed."""
        record = TokenRecord(
            id=new_id(),
            user_id=user_id,
            refresh_token=refresh_token,
            expires_at=as_utc(expires_at),
            created_at=utcnow(),
        )
        with self._db.transaction(conn) as c:
            c.execute(
                auth_tokens.insert().values(
                    id=record.id,
                    user_id=record.user_id,
                    refresh_token=record.refresh_token,
                    expires_at=record.expires_at,
                    created_at=record.created_at,
                )
            )
        return record

    def find(self, refresh_token: str) -> TokenRecord | None:
        """Exact-match lookup by token string."""
        with self._db.connect() as conn:
            row = (
                conn.execute(
                    sa.select(auth_tokens)
                    .where(auth_tokens.c.refresh_token == refresh_token)
                    .limit(1)
                )
                .mappings()
                .first()
            )
        return self._row_to_record(row) if row else None

    def delete(self, record_id: str) -> None:
        """Delete a record. Deleting a missing id is not an error."""
        with self._db.begin() as conn:
            conn.execute(auth_tokens.delete().where(auth_tokens.c.id == record_id))

    def list_for_user(self, user_id: str) -> list[TokenRecord]:
        with self._db.connect() as conn:
            rows = (
                conn.execute(
                    sa.select(auth_tokens)
                    .where(auth_tokens.c.user_id == user_id)
                    .order_by(auth_tokens.c.created_at)
                )
                .mappings()
                .all()
            )
        return [self._row_to_record(r) for r in rows]

    def purge_expired(self, now: datetime | None = None) -> int:
        """Delete records whose stored expiry has passed.

        Returns:
            Number of records removed
        """
        cutoff = as_utc(now) if now else utcnow()
        with self._db.begin() as conn:
            result = conn.execute(
                auth_tokens.delete().where(auth_tokens.c.expires_at <= cutoff)
            )
        return result.rowcount or 0
