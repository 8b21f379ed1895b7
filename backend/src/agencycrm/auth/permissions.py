"""Role tiers and the allow-sets behind the route guards."""

from enum import Enum

from agencycrm.auth.types import UserType


class AccessTier(Enum):
    """Route-level access tiers. Each tier's allow-set contains the previous one."""

    SAAS_ADMIN = "saas_admin"
    AGENCY_ADMIN = "agency_admin"
    TEAM_MEMBER = "team_member"


TIER_MEMBERS: dict[AccessTier, frozenset[UserType]] = {
    AccessTier.SAAS_ADMIN: frozenset({UserType.SAAS_ADMIN}),
    AccessTier.AGENCY_ADMIN: frozenset({UserType.SAAS_ADMIN, UserType.AGENCY_ADMIN}),
    AccessTier.TEAM_MEMBER: frozenset(
        {UserType.SAAS_ADMIN, UserType.AGENCY_ADMIN, UserType.TEAM_MEMBER}
    ),
}

TIER_LABELS: dict[AccessTier, str] = {
    AccessTier.SAAS_ADMIN: "SaaS admin",
    AccessTier.AGENCY_ADMIN: "Agency admin",
    AccessTier.TEAM_MEMBER: "Team member",
}


def tier_allows(tier: AccessTier, role: UserType | str | None) -> bool:
    """Check whether ``role`` belongs to ``tier``'s allow-set.

    Unknown role strings match no tier.

    Raises:
        KeyError: If ``tier`` has no allow-set defined
    """
    members = TIER_MEMBERS[tier]
    parsed = UserType.parse(role)
    if parsed is None:
        return False
    return parsed in members


def is_customer(role: UserType | str | None) -> bool:
    return UserType.parse(role) is UserType.CUSTOMER


def forbidden_message(tier: AccessTier) -> str:
    return f"{TIER_LABELS[tier]} access required"
