"""Staff provisioning by tenant administrators."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from starlette.concurrency import run_in_threadpool

from agencycrm.accounts.identities import (
    Identity,
    IdentityStore,
    all_filled,
    is_valid_email,
    normalize_email,
)
from agencycrm.accounts.tenants import RoleStore
from agencycrm.auth.errors import Conflict, Forbidden, NotFound, ValidationFailed
from agencycrm.auth.password import PasswordService
from agencycrm.auth.types import TokenClaims, UserType

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

# saas_admin is provisioned from the CLI only.
CREATABLE_TYPES = frozenset({UserType.TEAM_MEMBER, UserType.CUSTOMER})
ASSIGNABLE_TYPES = CREATABLE_TYPES | {UserType.AGENCY_ADMIN}


class StaffService:
    """Create, list, update and delete identities inside the caller's tenant."""

    def __init__(
        self,
        identities: IdentityStore,
        roles: RoleStore,
        password_service: PasswordService,
    ):
        self._identities = identities
        self._roles = roles
        self._passwords = password_service

    def list(self, caller: TokenClaims) -> list[dict[str, Any]]:
        return [i.to_public() for i in self._identities.list_by_tenant(caller.tenant_id)]

    async def create(
        self,
        caller: TokenClaims,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        user_type: str | None = None,
    ) -> dict[str, Any]:
        """Provision a new identity in the caller's tenant.

        Raises:
            ValidationFailed: Blank fields, malformed email, short password
                or bad user type
            Conflict: If the email is already registered
        """
        email = normalize_email(email)
        if not email or not password or not all_filled(first_name, last_name):
            raise ValidationFailed("Email, password, first name and last name are required")
        if not is_valid_email(email):
            raise ValidationFailed("Invalid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        kind = self._parse_type(user_type or UserType.TEAM_MEMBER.value, CREATABLE_TYPES)

        if self._identities.get_by_email(email):
            raise Conflict("User already exists")

        password_hash = await run_in_threadpool(self._passwords.hash, password)
        try:
            identity = self._identities.create(
                tenant_id=caller.tenant_id,
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                user_type=kind,
                is_admin=kind is UserType.AGENCY_ADMIN,
            )
        except IntegrityError:
            raise Conflict("User already exists")

        logger.info(
            "User %s provisioned %s %s in tenant %s",
            caller.user_id,
            kind.value,
            identity.id,
            caller.tenant_id,
        )
        return identity.to_public()

    def update(self, caller: TokenClaims, user_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Update name, user type or active flag of a tenant member.

        Promoting to agency_admin attaches the shared admin role; any other
        type drops it.

        Raises:
            NotFound: If the user is not in the caller's tenant
            Forbidden: If the user outranks the caller
            ValidationFailed: For a blank name, a bad user type or an empty
                change set
        """
        target = self._get_member(caller, user_id)

        values: dict[str, Any] = {}
        for field in ("first_name", "last_name"):
            if changes.get(field) is not None:
                if not all_filled(changes[field]):
                    raise ValidationFailed("Name fields cannot be blank")
                values[field] = changes[field]
        if changes.get("user_type") is not None:
            kind = self._parse_type(changes["user_type"], ASSIGNABLE_TYPES)
            values["user_type"] = kind
            values["is_admin"] = kind is UserType.AGENCY_ADMIN
            values["role_id"] = (
                self._roles.admin_role().id if kind is UserType.AGENCY_ADMIN else None
            )
        if changes.get("is_active") is not None:
            if target.id == caller.user_id and not changes["is_active"]:
                raise ValidationFailed("You cannot deactivate your own account")
            values["is_active"] = bool(changes["is_active"])

        if not values:
            raise ValidationFailed("No changes supplied")

        updated = self._identities.update(target.id, values)
        if updated is None:
            raise NotFound("User not found")
        return updated.to_public()

    def delete(self, caller: TokenClaims, user_id: str) -> None:
        """Hard-delete a tenant member. Their token records go with them.

        Raises:
            ValidationFailed: When deleting yourself
            NotFound: If the user is not in the caller's tenant
            Forbidden: If the user outranks the caller
        """
        if user_id == caller.user_id:
            raise ValidationFailed("You cannot delete your own account")
        target = self._get_member(caller, user_id)
        self._identities.delete(target.id)
        logger.info("User %s deleted user %s", caller.user_id, target.id)

    def _get_member(self, caller: TokenClaims, user_id: str) -> Identity:
        target = self._identities.get_in_tenant(user_id, caller.tenant_id)
        if target is None:
            raise NotFound("User not found")
        # Platform admins are out of reach for everyone below them.
        if target.user_type is UserType.SAAS_ADMIN and caller.role is not UserType.SAAS_ADMIN:
            raise Forbidden("Insufficient permissions")
        return target

    @staticmethod
    def _parse_type(value: str, allowed: frozenset[UserType]) -> UserType:
        kind = UserType.parse(value)
        if kind is None or kind not in allowed:
            raise ValidationFailed(f"Invalid user type: {value}")
        return kind
