"""Platform administration endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from agencycrm.api.container import Services, get_services
from agencycrm.auth.dependencies import require_saas_admin


def create_admin_router() -> APIRouter:
    router = APIRouter(
        prefix="/api/admin",
        tags=["admin"],
        dependencies=[Depends(require_saas_admin)],
    )

    @router.get("/tenants")
    async def list_tenants(services: Services = Depends(get_services)) -> list[dict[str, Any]]:
        """Every tenant with its user count."""
        return services.tenants.list_with_user_counts()

    return router
