"""Table definitions (SQLAlchemy Core).

Ids are uuid4 hex strings generated in Python so the same schema works
on SQLite and PostgreSQL.
"""

import sqlalchemy as sa

metadata = sa.MetaData()

tenants = sa.Table(
    "tenants",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
)

roles = sa.Table(
    "roles",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column("name", sa.Text(), nullable=False, unique=True),
    sa.Column("permissions", sa.JSON(), nullable=False),
)

users = sa.Table(
    "users",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column(
        "tenant_id",
        sa.String(36),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column("email", sa.Text(), nullable=False, unique=True),
    sa.Column("password_hash", sa.Text(), nullable=False),
    sa.Column("first_name", sa.Text(), nullable=False),
    sa.Column("last_name", sa.Text(), nullable=False),
    sa.Column("role_id", sa.String(36), sa.ForeignKey("roles.id"), nullable=True),
    sa.Column("user_type", sa.String(32), nullable=False),
    sa.Column("is_admin", sa.Boolean(), nullable=False, default=False),
    sa.Column("is_active", sa.Boolean(), nullable=False, default=True),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
)

auth_tokens = sa.Table(
    "auth_tokens",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column(
        "user_id",
        sa.String(36),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column("refresh_token", sa.Text(), nullable=False),
    sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Index("idx_auth_tokens_refresh_token", "refresh_token"),
    sa.Index("idx_auth_tokens_user_id", "user_id"),
)

modules = sa.Table(
    "modules",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column("name", sa.Text(), nullable=False, unique=True),
    sa.Column("display_name", sa.Text(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("icon", sa.Text(), nullable=True),
    sa.Column("is_core", sa.Boolean(), nullable=False, default=False),
)

tenant_modules = sa.Table(
    "tenant_modules",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column(
        "tenant_id",
        sa.String(36),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column(
        "module_id",
        sa.String(36),
        sa.ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column("is_enabled", sa.Boolean(), nullable=False, default=True),
    sa.Column("enabled_at", sa.DateTime(timezone=True), nullable=False),
    sa.Index("idx_tenant_modules_tenant", "tenant_id"),
)

contacts = sa.Table(
    "contacts",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column(
        "tenant_id",
        sa.String(36),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column(
        "owner_id",
        sa.String(36),
        sa.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    ),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("email", sa.Text(), nullable=False),
    sa.Column("phone", sa.Text(), nullable=True),
    sa.Column("company", sa.Text(), nullable=True),
    sa.Column("role", sa.Text(), nullable=True),
    sa.Column("notes", sa.Text(), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    sa.Index("idx_contacts_tenant", "tenant_id"),
)

deals = sa.Table(
    "deals",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column(
        "tenant_id",
        sa.String(36),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column(
        "contact_id",
        sa.String(36),
        sa.ForeignKey("contacts.id", ondelete="CASCADE"),
        nullable=True,
    ),
    sa.Column(
        "owner_id",
        sa.String(36),
        sa.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    ),
    sa.Column("title", sa.Text(), nullable=False),
    sa.Column("value", sa.Numeric(12, 2), nullable=False),
    sa.Column("stage", sa.Text(), nullable=False),
    sa.Column("expected_close_date", sa.DateTime(timezone=True), nullable=True),
    sa.Column("notes", sa.Text(), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    sa.Index("idx_deals_tenant", "tenant_id"),
)

tasks = sa.Table(
    "tasks",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True),
    sa.Column(
        "tenant_id",
        sa.String(36),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column(
        "assigned_to",
        sa.String(36),
        sa.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    ),
    sa.Column("title", sa.Text(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("status", sa.Text(), nullable=False),
    sa.Column("priority", sa.Text(), nullable=False),
    sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    sa.Index("idx_tasks_tenant", "tenant_id"),
)
