"""Deal CRUD endpoints, scoped to the caller's tenant."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends

from agencycrm.api.auth import CamelModel
from agencycrm.api.container import Services, get_services
from agencycrm.auth.dependencies import (
    deny_customer_access,
    require_team_member,
    validate_tenant,
)
from agencycrm.auth.errors import NotFound, ValidationFailed
from agencycrm.auth.types import TokenClaims
from agencycrm.crm.deals import DEFAULT_STAGE

# NUMERIC(12, 2)
MAX_VALUE = Decimal("9999999999.99")


class DealBody(CamelModel):
    """Create and update payload. Unset fields are left untouched on update."""

    title: str | None = None
    value: Decimal | None = None
    stage: str | None = None
    contact_id: str | None = None
    expected_close_date: datetime | None = None
    notes: str | None = None


def _check_value(value: Decimal | None) -> None:
    if value is None or not 0 <= value <= MAX_VALUE:
        raise ValidationFailed("Invalid data")
    if value != value.quantize(Decimal("0.01")):
        raise ValidationFailed("Invalid data")


def _check_contact(services: Services, contact_id: str | None, tenant_id: str) -> None:
    if contact_id is not None and services.contacts.get(contact_id, tenant_id) is None:
        raise ValidationFailed("Unknown contact")


def create_deals_router() -> APIRouter:
    router = APIRouter(prefix="/api/deals", tags=["deals"])

    read_guards = [Depends(require_team_member), Depends(validate_tenant)]
    write_guards = [Depends(require_team_member), Depends(deny_customer_access)]

    @router.get("", dependencies=read_guards)
    async def list_deals(
        claims: TokenClaims = Depends(validate_tenant),
        services: Services = Depends(get_services),
    ) -> list[dict[str, Any]]:
        return services.deals.list(claims.tenant_id)

    @router.get("/{deal_id}", dependencies=read_guards)
    async def get_deal(
        deal_id: str,
        claims: TokenClaims = Depends(validate_tenant),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        deal = services.deals.get(deal_id, claims.tenant_id)
        if deal is None:
            raise NotFound("Deal not found")
        return deal

    @router.post("", status_code=201, dependencies=write_guards)
    async def create_deal(
        body: DealBody,
        claims: TokenClaims = Depends(require_team_member),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        if not (body.title or "").strip() or (body.stage is not None and not body.stage.strip()):
            raise ValidationFailed("Invalid data")
        _check_value(body.value)
        _check_contact(services, body.contact_id, claims.tenant_id)

        data = body.model_dump(by_alias=True, exclude_none=True)
        data.setdefault("stage", DEFAULT_STAGE)
        data["ownerId"] = claims.user_id
        return services.deals.create(claims.tenant_id, data)

    @router.patch("/{deal_id}", dependencies=write_guards)
    async def update_deal(
        deal_id: str,
        body: DealBody,
        claims: TokenClaims = Depends(require_team_member),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        changes = body.model_dump(by_alias=True, exclude_unset=True)
        for required in ("title", "stage"):
            if required in changes and not (changes[required] or "").strip():
                raise ValidationFailed("Invalid data")
        if "value" in changes:
            _check_value(changes["value"])
        if changes.get("contactId") is not None:
            _check_contact(services, changes["contactId"], claims.tenant_id)

        deal = services.deals.update(deal_id, claims.tenant_id, changes)
        if deal is None:
            raise NotFound("Deal not found")
        return deal

    @router.delete("/{deal_id}", dependencies=write_guards)
    async def delete_deal(
        deal_id: str,
        claims: TokenClaims = Depends(require_team_member),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        if not services.deals.delete(deal_id, claims.tenant_id):
            raise NotFound("Deal not found")
        return {"message": "Deal deleted successfully"}

    return router
