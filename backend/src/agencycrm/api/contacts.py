"""Contact CRUD endpoints, scoped to the caller's tenant."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from agencycrm.api.container import Services, get_services
from agencycrm.auth.dependencies import (
    deny_customer_access,
    require_team_member,
    validate_tenant,
)
from agencycrm.auth.errors import NotFound, ValidationFailed
from agencycrm.auth.types import TokenClaims


class ContactBody(BaseModel):
    """Create and update payload. Unset fields are left untouched on update."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    role: str | None = None
    notes: str | None = None


def create_contacts_router() -> APIRouter:
    router = APIRouter(prefix="/api/contacts", tags=["contacts"])

    read_guards = [Depends(require_team_member), Depends(validate_tenant)]
    write_guards = [Depends(require_team_member), Depends(deny_customer_access)]

    @router.get("", dependencies=read_guards)
    async def list_contacts(
        claims: TokenClaims = Depends(validate_tenant),
        services: Services = Depends(get_services),
    ) -> list[dict[str, Any]]:
        return services.contacts.list(claims.tenant_id)

    @router.get("/{contact_id}", dependencies=read_guards)
    async def get_contact(
        contact_id: str,
        claims: TokenClaims = Depends(validate_tenant),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        contact = services.contacts.get(contact_id, claims.tenant_id)
        if contact is None:
            raise NotFound("Contact not found")
        return contact

    @router.post("", status_code=201, dependencies=write_guards)
    async def create_contact(
        body: ContactBody,
        claims: TokenClaims = Depends(require_team_member),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        if not body.name or not body.email:
            raise ValidationFailed("Invalid data")
        return services.contacts.create(
            claims.tenant_id, {**body.model_dump(), "ownerId": claims.user_id}
        )

    @router.patch("/{contact_id}", dependencies=write_guards)
    async def update_contact(
        contact_id: str,
        body: ContactBody,
        claims: TokenClaims = Depends(require_team_member),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        changes = body.model_dump(exclude_unset=True)
        if "name" in changes and not changes["name"]:
            raise ValidationFailed("Invalid data")
        if "email" in changes and not changes["email"]:
            raise ValidationFailed("Invalid data")

        contact = services.contacts.update(contact_id, claims.tenant_id, changes)
        if contact is None:
            raise NotFound("Contact not found")
        return contact

    @router.delete("/{contact_id}", dependencies=write_guards)
    async def delete_contact(
        contact_id: str,
        claims: TokenClaims = Depends(require_team_member),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        if not services.contacts.delete(contact_id, claims.tenant_id):
            raise NotFound("Contact not found")
        return {"message": "Contact deleted successfully"}

    return router
