import pytest

from app.backoffice_nav.services.permissions import (
    ALL_PERMISSION_KEYS,
    ALWAYS,
    DEFAULT_TRUE_KEYS,
    AccessRule,
    PermissionKey,
    default_permission_set,
    has_access,
    normalize_permission_set,
)


def test_always_is_granted_even_without_permission_set() -> None:
    assert has_access(None, ALWAYS) is True
    assert has_access({}, ALWAYS) is True


def test_unknown_role_denies_every_gated_key() -> None:
    assert has_access(None, "inventory_view") is False
    assert has_access(None, "member_view_profile") is False


def test_super_admin_short_circuits_all_checks() -> None:
    permissions = {key: False for key in ALL_PERMISSION_KEYS}
    permissions["super_admin"] = True

    assert all(has_access(permissions, key) for key in ALL_PERMISSION_KEYS)


def test_stored_value_wins_over_default() -> None:
    permissions = {"inventory_view": True, "member_view_checklist": False}

    assert has_access(permissions, "inventory_view") is True
    assert has_access(permissions, "member_view_checklist") is False


@pytest.mark.parametrize("key", sorted(DEFAULT_TRUE_KEYS))
def test_member_basics_default_to_granted_when_absent(key) -> None:
    assert has_access({"inventory_view": False}, key) is True


def test_other_absent_keys_default_to_denied() -> None:
    assert has_access({}, "finance_view") is False
    assert has_access({}, "member_view_team_calendar") is False


def test_access_rule_combines_conditions_with_or() -> None:
    rule = AccessRule(permissions=("ops_view", "member_view_sanctions"), roles=("COORDINADOR",))

    assert rule.allows({"ops_view": False, "member_view_sanctions": True}) is True
    assert rule.allows({"ops_view": True, "member_view_sanctions": False}) is True
    assert rule.allows({"ops_view": False, "member_view_sanctions": False}, role="coordinador") is True
    assert rule.allows({"ops_view": False, "member_view_sanctions": False}, role="COCINA") is False


def test_access_rule_role_grant_needs_a_permission_set() -> None:
    rule = AccessRule(permissions=("ops_view",), roles=("COORDINADOR",))

    assert rule.allows(None, role="COORDINADOR") is False


def test_default_permission_set_contains_every_key() -> None:
    permissions = default_permission_set()

    assert set(permissions) == set(ALL_PERMISSION_KEYS)
    assert permissions["super_admin"] is False
    assert permissions["member_view_welfare"] is True


def test_normalize_accepts_camel_case_mapping() -> None:
    permissions = normalize_permission_set({"viewInventory": True, "superAdmin": 1, "bogus": True})

    assert permissions[PermissionKey.INVENTORY_VIEW.value] is True
    assert permissions[PermissionKey.SUPER_ADMIN.value] is True
    assert "bogus" not in permissions
    assert set(permissions) == set(ALL_PERMISSION_KEYS)


def test_normalize_accepts_legacy_capability_list() -> None:
    permissions = normalize_permission_set(["canViewCalendar", "canViewCash", "canViewCommunication"])

    assert permissions["member_view_my_calendar"] is True
    assert permissions["finance_view"] is True
    assert permissions["member_view_checklist"] is False
    assert permissions["super_admin"] is False
