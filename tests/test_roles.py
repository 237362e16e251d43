import json

import pytest

from app.backoffice_nav.core.error_catalog import AppError
from app.backoffice_nav.repos.kv_store import InMemoryKeyValueStore
from app.backoffice_nav.services.roles import (
    CUSTOM_ROLES_SETTING,
    ROLE_PERMISSIONS_SETTING,
    SYSTEM_ROLES,
    RoleRegistry,
    normalize_role_name,
    role_label,
)


def test_seeded_roles_are_complete_permission_sets(roles) -> None:
    cocina = roles.permissions_for("COCINA")

    assert cocina["member_view_my_calendar"] is True
    assert cocina["member_view_profile"] is True
    assert cocina["inventory_view"] is False
    assert roles.permissions_for("ADMIN")["super_admin"] is True


def test_unknown_role_has_no_permission_set(roles) -> None:
    assert roles.permissions_for("NO_SUCH_ROLE") is None
    assert roles.permissions_for(None) is None


def test_role_names_are_normalized() -> None:
    assert normalize_role_name("  jefe de   turno ") == "JEFE_DE_TURNO"
    assert role_label("JEFE_COCINA") == "Jefe de Cocina"
    assert role_label("JEFE_DE_TURNO") == "JEFE DE TURNO"


def test_create_role_seeds_member_basics(roles, kv_store) -> None:
    role = roles.create_role("Ayudante cocina")

    assert role == "AYUDANTE_COCINA"
    assert role in roles.roles()
    permissions = roles.permissions_for(role)
    assert permissions["member_view_checklist"] is True
    assert permissions["member_view_sanctions"] is False
    assert json.loads(kv_store.get(CUSTOM_ROLES_SETTING)) == ["AYUDANTE_COCINA"]


def test_create_role_rejects_duplicates_and_blank_names(roles) -> None:
    with pytest.raises(AppError) as exc_info:
        roles.create_role("cocina")
    assert exc_info.value.error.code == "ROLE_ALREADY_EXISTS"

    with pytest.raises(AppError) as exc_info:
        roles.create_role("   ")
    assert exc_info.value.error.code == "ROLE_NAME_REQUIRED"


def test_system_roles_cannot_be_deleted(roles) -> None:
    with pytest.raises(AppError) as exc_info:
        roles.delete_role(SYSTEM_ROLES[0])

    assert exc_info.value.error.code == "SYSTEM_ROLE_PROTECTED"


def test_delete_custom_role(roles) -> None:
    roles.create_role("PASANTE")

    roles.delete_role("pasante")

    assert "PASANTE" not in roles.roles()
    assert roles.permissions_for("PASANTE") is None


def test_toggle_permission_notifies_subscribers(roles) -> None:
    calls = []
    roles.subscribe(lambda role, permissions: calls.append((role, permissions["inventory_view"])))

    roles.toggle_permission("cocina", "inventory_view")
    roles.toggle_permission("COCINA", "viewInventory")

    assert calls == [("COCINA", True), ("COCINA", False)]


def test_toggle_rejects_unknown_key_and_role(roles) -> None:
    with pytest.raises(AppError) as exc_info:
        roles.toggle_permission("COCINA", "launch_rockets")
    assert exc_info.value.error.code == "UNKNOWN_PERMISSION_KEY"

    with pytest.raises(AppError) as exc_info:
        roles.toggle_permission("NO_SUCH_ROLE", "inventory_view")
    assert exc_info.value.error.code == "ROLE_NOT_FOUND"


def test_unsubscribe_stops_notifications(roles) -> None:
    calls = []
    unsubscribe = roles.subscribe(lambda role, permissions: calls.append(role))
    unsubscribe()

    roles.set_permissions("COCINA", {"inventory_view": True})

    assert calls == []


def test_failing_listener_does_not_block_others(roles) -> None:
    calls = []

    def broken(role, permissions):
        raise RuntimeError("boom")

    roles.subscribe(broken)
    roles.subscribe(lambda role, permissions: calls.append(role))

    roles.set_permissions("COCINA", ["canViewInventory"])

    assert calls == ["COCINA"]


def test_registry_reloads_persisted_state() -> None:
    store = InMemoryKeyValueStore()
    first = RoleRegistry(store)
    first.create_role("PASANTE")
    first.set_permissions("COCINA", {"inventory_view": True})

    second = RoleRegistry(store)

    assert "PASANTE" in second.custom_roles
    assert second.permissions_for("COCINA")["inventory_view"] is True


def test_registry_ignores_malformed_settings() -> None:
    store = InMemoryKeyValueStore({ROLE_PERMISSIONS_SETTING: "{oops", CUSTOM_ROLES_SETTING: "[]"})

    registry = RoleRegistry(store)

    assert registry.permissions_for("COCINA") is not None
    assert registry.custom_roles == []


def test_registry_ignores_deeply_nested_settings() -> None:
    store = InMemoryKeyValueStore({ROLE_PERMISSIONS_SETTING: "[" * 200000})

    registry = RoleRegistry(store)

    assert registry.permissions_for("COCINA")["member_view_profile"] is True


def test_all_permissions_returns_independent_copies(roles) -> None:
    snapshot = roles.all_permissions()

    assert set(SYSTEM_ROLES) <= set(snapshot)
    assert snapshot["ADMIN"]["super_admin"] is True
    snapshot["COCINA"]["inventory_view"] = True
    assert roles.permissions_for("COCINA")["inventory_view"] is False
