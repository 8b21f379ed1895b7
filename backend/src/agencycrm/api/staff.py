"""Staff management endpoints for agency admins."""

from typing import Any

from fastapi import APIRouter, Depends

from agencycrm.api.auth import CamelModel
from agencycrm.api.container import Services, get_services
from agencycrm.auth.dependencies import require_agency_admin
from agencycrm.auth.types import TokenClaims


class CreateStaffRequest(CamelModel):
    email: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""
    user_type: str | None = None


class UpdateStaffRequest(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    user_type: str | None = None
    is_active: bool | None = None


def create_staff_router() -> APIRouter:
    router = APIRouter(prefix="/api/staff", tags=["staff"])

    @router.get("")
    async def list_staff(
        claims: TokenClaims = Depends(require_agency_admin),
        services: Services = Depends(get_services),
    ) -> list[dict[str, Any]]:
        return services.staff_service.list(claims)

    @router.post("", status_code=201)
    async def create_staff(
        body: CreateStaffRequest,
        claims: TokenClaims = Depends(require_agency_admin),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        return await services.staff_service.create(
            claims,
            email=body.email,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
            user_type=body.user_type,
        )

    @router.patch("/{user_id}")
    async def update_staff(
        user_id: str,
        body: UpdateStaffRequest,
        claims: TokenClaims = Depends(require_agency_admin),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        return services.staff_service.update(claims, user_id, body.model_dump())

    @router.delete("/{user_id}")
    async def delete_staff(
        user_id: str,
        claims: TokenClaims = Depends(require_agency_admin),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        services.staff_service.delete(claims, user_id)
        return {"message": "User deleted successfully"}

    return router
