from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

ALWAYS = "ALWAYS"


class PermissionKey(str, Enum):
    HR_VIEW = "hr_view"
    HR_MANAGE = "hr_manage"
    HR_CREATE = "hr_create"
    HR_EDIT = "hr_edit"
    HR_DELETE = "hr_delete"

    OPS_VIEW = "ops_view"
    OPS_MANAGE = "ops_manage"
    OPS_CREATE = "ops_create"
    OPS_EDIT = "ops_edit"
    OPS_DELETE = "ops_delete"
    OPS_APPROVE = "ops_approve"

    FINANCE_VIEW = "finance_view"
    FINANCE_MANAGE = "finance_manage"
    FINANCE_CREATE = "finance_create"
    FINANCE_EDIT = "finance_edit"
    FINANCE_DELETE = "finance_delete"
    FINANCE_APPROVE = "finance_approve"

    INVENTORY_VIEW = "inventory_view"
    INVENTORY_MANAGE = "inventory_manage"
    INVENTORY_CREATE = "inventory_create"
    INVENTORY_EDIT = "inventory_edit"
    INVENTORY_DELETE = "inventory_delete"

    SUPER_ADMIN = "super_admin"

    MEMBER_VIEW_MY_CALENDAR = "member_view_my_calendar"
    MEMBER_VIEW_TEAM_CALENDAR = "member_view_team_calendar"
    MEMBER_VIEW_ALL_FILES = "member_view_all_files"
    MEMBER_VIEW_CHECKLIST = "member_view_checklist"
    MEMBER_VIEW_WELFARE = "member_view_welfare"
    MEMBER_VIEW_SANCTIONS = "member_view_sanctions"
    MEMBER_VIEW_PROFILE = "member_view_profile"


ALL_PERMISSION_KEYS: tuple[str, ...] = tuple(key.value for key in PermissionKey)

# Member portal keys that read as granted when absent from a stored set.
DEFAULT_TRUE_KEYS: frozenset[str] = frozenset(
    {
        PermissionKey.MEMBER_VIEW_PROFILE.value,
        PermissionKey.MEMBER_VIEW_MY_CALENDAR.value,
        PermissionKey.MEMBER_VIEW_CHECKLIST.value,
        PermissionKey.MEMBER_VIEW_WELFARE.value,
    }
)

# camelCase keys from the role administration payloads and the older
# list-of-capabilities format ("canViewX").
LEGACY_KEY_ALIASES: dict[str, str] = {
    "viewHr": "hr_view",
    "manageHr": "hr_manage",
    "createHr": "hr_create",
    "editHr": "hr_edit",
    "deleteHr": "hr_delete",
    "viewOps": "ops_view",
    "manageOps": "ops_manage",
    "createOps": "ops_create",
    "editOps": "ops_edit",
    "deleteOps": "ops_delete",
    "approveOps": "ops_approve",
    "viewFinance": "finance_view",
    "manageFinance": "finance_manage",
    "createFinance": "finance_create",
    "editFinance": "finance_edit",
    "deleteFinance": "finance_delete",
    "approveFinance": "finance_approve",
    "viewInventory": "inventory_view",
    "manageInventory": "inventory_manage",
    "createInventory": "inventory_create",
    "editInventory": "inventory_edit",
    "deleteInventory": "inventory_delete",
    "superAdmin": "super_admin",
    "memberViewMyCalendar": "member_view_my_calendar",
    "memberViewTeamCalendar": "member_view_team_calendar",
    "memberViewAllFiles": "member_view_all_files",
    "memberViewChecklist": "member_view_checklist",
    "memberViewWelfare": "member_view_welfare",
    "memberViewSanctions": "member_view_sanctions",
    "memberViewProfile": "member_view_profile",
    "canViewInventory": "inventory_view",
    "canViewCash": "finance_view",
    "canViewFinancials": "finance_view",
    "canViewFinance": "finance_view",
    "canViewChecklist": "member_view_checklist",
    "canViewCalendar": "member_view_my_calendar",
    "canViewTeamCalendar": "member_view_team_calendar",
    "canViewOvertime": "member_view_team_calendar",
    "canViewProfile": "member_view_profile",
    "canViewOtherFiles": "member_view_all_files",
    "canViewFiles": "member_view_all_files",
    "canViewForum": "member_view_welfare",
    "canViewSanctions": "member_view_sanctions",
    "canViewHR": "hr_view",
}


def canonical_key(key: str) -> str | None:
    normalized = key.strip()
    if normalized in ALL_PERMISSION_KEYS:
        return normalized
    return LEGACY_KEY_ALIASES.get(normalized)


def has_access(permission_set: Mapping[str, bool] | None, required_permission: str) -> bool:
    if required_permission == ALWAYS:
        return True
    if permission_set is None:
        return False
    if permission_set.get(PermissionKey.SUPER_ADMIN.value):
        return True
    if required_permission not in permission_set:
        return required_permission in DEFAULT_TRUE_KEYS
    return bool(permission_set[required_permission])


@dataclass(frozen=True)
class AccessRule:
    """OR-combined conditions that grant a destination.

    ``permissions`` are checked with :func:`has_access`; ``roles`` are legacy
    grants by role name that predate granular permissions.
    """

    permissions: tuple[str, ...]
    roles: tuple[str, ...] = ()

    def allows(self, permission_set: Mapping[str, bool] | None, role: str | None = None) -> bool:
        if any(has_access(permission_set, key) for key in self.permissions):
            return True
        if permission_set is None:
            return False
        return bool(role) and role.upper() in self.roles


def default_permission_set() -> dict[str, bool]:
    return {key: key in DEFAULT_TRUE_KEYS for key in ALL_PERMISSION_KEYS}


def normalize_permission_set(raw: Mapping[str, object] | Iterable[str] | None) -> dict[str, bool]:
    """Return a complete permission set from stored or legacy input.

    Mappings may use canonical or camelCase keys. A plain list of capability
    names (``["canViewCalendar", ...]``) grants exactly the listed keys.
    Unknown keys are dropped.
    """
    if raw is None:
        return default_permission_set()

    if isinstance(raw, Mapping):
        decisions = default_permission_set()
        for key, value in raw.items():
            canonical = canonical_key(str(key))
            if canonical is None:
                continue
            decisions[canonical] = bool(value)
        return decisions

    decisions = {key: False for key in ALL_PERMISSION_KEYS}
    for key in raw:
        canonical = canonical_key(str(key))
        if canonical is not None:
            decisions[canonical] = True
    return decisions
