"""Operator commands: token housekeeping and platform admin provisioning."""

import click
from sqlalchemy.exc import IntegrityError

from agencycrm.api.container import Services
from agencycrm.auth.types import UserType
from agencycrm.config import Settings

DEFAULT_PLATFORM_TENANT = "Platform"


@click.group()
def tokens():
    """Refresh token records."""
    pass


@tokens.command()
@click.pass_obj
def purge(settings: Settings):
    """Delete refresh token records past their stored expiry."""
    services = Services.build(settings)
    try:
        removed = services.token_store.purge_expired()
    finally:
        services.close()
    click.echo(f"Purged {removed} expired token record(s).")


@click.command("create-saas-admin")
@click.option("--email", required=True)
@click.option("--password", required=True, prompt=True, hide_input=True)
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--tenant-name", default=DEFAULT_PLATFORM_TENANT, show_default=True)
@click.pass_obj
def create_saas_admin(
    settings: Settings,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    tenant_name: str,
):
    """Provision a platform super-admin.

    Registration only ever creates agency admins, so the first saas_admin
    is created here, in a tenant of its own.
    """
    services = Services.build(settings)
    try:
        services.initialize()
        if services.identities.get_by_email(email):
            click.echo(f"Error: a user with email {email} already exists.", err=True)
            raise SystemExit(1)

        password_hash = services.password_service.hash(password)
        try:
            with services.db.begin() as conn:
                tenant = services.tenants.create(tenant_name, conn=conn)
                role = services.roles.admin_role(conn=conn)
                identity = services.identities.create(
                    tenant_id=tenant.id,
                    email=email,
                    password_hash=password_hash,
                    first_name=first_name,
                    last_name=last_name,
                    user_type=UserType.SAAS_ADMIN,
                    is_admin=True,
                    role_id=role.id,
                    conn=conn,
                )
                services.modules.enable_all_for_tenant(tenant.id, conn=conn)
        except IntegrityError:
            click.echo(f"Error: a user with email {email} already exists.", err=True)
            raise SystemExit(1)
    finally:
        services.close()

    click.echo(f"Created saas_admin {identity.email} (id {identity.id}) in tenant '{tenant.name}'.")
