"""initial schema"""

revision = "0001"
down_revision = None

from alembic import op
import sqlalchemy as sa


def upgrade():
    op.create_table(
        'tenants',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'roles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        sa.Column('permissions', sa.JSON(), nullable=False),
    )
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'tenant_id',
            sa.String(36),
            sa.ForeignKey('tenants.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('email', sa.Text(), nullable=False, unique=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text(), nullable=False),
        sa.Column('role_id', sa.String(36), sa.ForeignKey('roles.id'), nullable=True),
        sa.Column('user_type', sa.String(32), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'auth_tokens',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'user_id',
            sa.String(36),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('refresh_token', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_auth_tokens_refresh_token', 'auth_tokens', ['refresh_token'])
    op.create_index('idx_auth_tokens_user_id', 'auth_tokens', ['user_id'])
    op.create_table(
        'modules',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        sa.Column('display_name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.Text(), nullable=True),
        sa.Column('is_core', sa.Boolean(), nullable=False),
    )
    op.create_table(
        'tenant_modules',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'tenant_id',
            sa.String(36),
            sa.ForeignKey('tenants.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'module_id',
            sa.String(36),
            sa.ForeignKey('modules.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('is_enabled', sa.Boolean(), nullable=False),
        sa.Column('enabled_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_tenant_modules_tenant', 'tenant_modules', ['tenant_id'])
    op.create_table(
        'contacts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'tenant_id',
            sa.String(36),
            sa.ForeignKey('tenants.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'owner_id',
            sa.String(36),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('company', sa.Text(), nullable=True),
        sa.Column('role', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_contacts_tenant', 'contacts', ['tenant_id'])


def downgrade():
    op.drop_index('idx_contacts_tenant', table_name='contacts')
    op.drop_table('contacts')
    op.drop_index('idx_tenant_modules_tenant', table_name='tenant_modules')
    op.drop_table('tenant_modules')
    op.drop_table('modules')
    op.drop_index('idx_auth_tokens_user_id', table_name='auth_tokens')
    op.drop_index('idx_auth_tokens_refresh_token', table_name='auth_tokens')
    op.drop_table('auth_tokens')
    op.drop_table('users')
    op.drop_table('roles')
    op.drop_table('tenants')
