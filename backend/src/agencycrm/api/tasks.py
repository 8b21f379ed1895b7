"""Task CRUD endpoints, scoped to the caller's tenant."""

from datetime import datetime
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
from agencycrm.crm.tasks import DEFAULT_PRIORITY, DEFAULT_STATUS


class TaskBody(CamelModel):
    """Create and update payload. Unset fields are left untouched on update."""

    title: str | None = None
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    assigned_to: str | None = None
    due_date: datetime | None = None


def _check_assignee(services: Services, user_id: str, tenant_id: str) -> None:
    if services.identities.get_in_tenant(user_id, tenant_id) is None:
        raise ValidationFailed("Unknown assignee")


def create_tasks_router() -> APIRouter:
    router = APIRouter(prefix="/api/tasks", tags=["tasks"])

    read_guards = [Depends(require_team_member), Depends(validate_tenant)]
    write_guards = [Depends(require_team_member), Depends(deny_customer_access)]

    @router.get("", dependencies=read_guards)
    async def list_tasks(
        claims: TokenClaims = Depends(validate_tenant),
        services: Services = Depends(get_services),
    ) -> list[dict[str, Any]]:
        return services.tasks.list(claims.tenant_id)

    @router.get("/{task_id}", dependencies=read_guards)
    async def get_task(
        task_id: str,
        claims: TokenClaims = Depends(validate_tenant),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        task = services.tasks.get(task_id, claims.tenant_id)
        if task is None:
            raise NotFound("Task not found")
        return task

    @router.post("", status_code=201, dependencies=write_guards)
    async def create_task(
        body: TaskBody,
        claims: TokenClaims = Depends(require_team_member),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        data = body.model_dump(by_alias=True, exclude_none=True)
        if not data.get("title", "").strip():
            raise ValidationFailed("Invalid data")
        for name in ("status", "priority"):
            if name in data and not data[name].strip():
                raise ValidationFailed("Invalid data")

        # Unassigned tasks go to their creator.
        data.setdefault("assignedTo", claims.user_id)
        _check_assignee(services, data["assignedTo"], claims.tenant_id)
        data.setdefault("status", DEFAULT_STATUS)
        data.setdefault("priority", DEFAULT_PRIORITY)
        return services.tasks.create(claims.tenant_id, data)

    @router.patch("/{task_id}", dependencies=write_guards)
    async def update_task(
        task_id: str,
        body: TaskBody,
        claims: TokenClaims = Depends(require_team_member),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        changes = body.model_dump(by_alias=True, exclude_unset=True)
        for required in ("title", "status", "priority", "assignedTo"):
            if required in changes and not (changes[required] or "").strip():
                raise ValidationFailed("Invalid data")
        if "assignedTo" in changes:
            _check_assignee(services, changes["assignedTo"], claims.tenant_id)

        task = services.tasks.update(task_id, claims.tenant_id, changes)
        if task is None:
            raise NotFound("Task not found")
        return task

    @router.delete("/{task_id}", dependencies=write_guards)
    async def delete_task(
        task_id: str,
        claims: TokenClaims = Depends(require_team_member),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        if not services.tasks.delete(task_id, claims.tenant_id):
            raise NotFound("Task not found")
        return {"message": "Task deleted successfully"}

    return router
