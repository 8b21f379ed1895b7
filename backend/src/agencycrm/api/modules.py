"""Tenant feature module endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from agencycrm.api.container import Services, get_services
from agencycrm.auth.dependencies import require_agency_admin, require_auth, validate_tenant
from agencycrm.auth.errors import NotFound, ValidationFailed
from agencycrm.auth.types import TokenClaims


def create_modules_router() -> APIRouter:
    router = APIRouter(prefix="/api/tenant/modules", tags=["modules"])

    @router.get("", dependencies=[Depends(require_auth), Depends(validate_tenant)])
    async def list_modules(
        claims: TokenClaims = Depends(validate_tenant),
        services: Services = Depends(get_services),
    ) -> list[dict[str, Any]]:
        """Modules granted to the caller's tenant, with catalogue metadata."""
        return services.modules.list_for_tenant(claims.tenant_id)

    @router.patch("/{tenant_module_id}")
    async def toggle_module(
        tenant_module_id: str,
        payload: dict[str, Any] = Body(...),
        claims: TokenClaims = Depends(require_agency_admin),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        enabled = payload.get("isEnabled")
        if not isinstance(enabled, bool):
            raise ValidationFailed("isEnabled must be a boolean")

        if not services.modules.set_enabled(tenant_module_id, claims.tenant_id, enabled):
            raise NotFound("Module not found")
        return {"id": tenant_module_id, "isEnabled": enabled}

    return router
