from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Iterable, Mapping

from app.backoffice_nav.core.error_catalog import AppError, ErrorCatalog
from app.backoffice_nav.repos.kv_store import KeyValueStore
from app.backoffice_nav.services.permissions import (
    ALL_PERMISSION_KEYS,
    PermissionKey,
    canonical_key,
    default_permission_set,
    normalize_permission_set,
)

logger = logging.getLogger(__name__)

ROLE_PERMISSIONS_SETTING = "role_permissions"
CUSTOM_ROLES_SETTING = "custom_roles"

SYSTEM_ROLES: tuple[str, ...] = (
    "ADMIN",
    "EMPRESA",
    "GERENTE",
    "COORDINADOR",
    "JEFE_COCINA",
    "ADMINISTRATIVO",
    "MOSTRADOR",
    "COCINA",
    "REPARTIDOR",
)

ROLE_LABELS: dict[str, str] = {
    "ADMIN": "Administrador del Sistema",
    "EMPRESA": "Dueño / Empresa",
    "GERENTE": "Gerente",
    "COORDINADOR": "Coordinador",
    "JEFE_COCINA": "Jefe de Cocina",
    "ADMINISTRATIVO": "Administrativo",
    "MOSTRADOR": "Mostrador",
    "COCINA": "Cocina",
    "REPARTIDOR": "Delivery / Repartidor",
}

# Seed grants, in the capability-list form older deployments stored.
DEFAULT_ROLE_PERMISSIONS: dict[str, object] = {
    "ADMIN": {"superAdmin": True},
    "COCINA": ["canViewCalendar", "canViewProfile"],
    "BARRA": ["canViewCalendar", "canViewChecklist", "canViewInventory", "canViewProfile"],
    "SALON": ["canViewCalendar", "canViewChecklist", "canViewProfile"],
    "CAJA": ["canViewCash", "canViewCalendar", "canViewChecklist", "canViewProfile"],
    "ENCARGADO": [
        "canViewInventory",
        "canViewCash",
        "canViewChecklist",
        "canViewCalendar",
        "canViewProfile",
        "canViewForum",
    ],
    "REPARTIDOR": ["canViewCalendar", "canViewProfile"],
    "DELIVERY": ["canViewCalendar", "canViewProfile", "canViewChecklist"],
    "EMPRESA": [
        "canViewInventory",
        "canViewCash",
        "canViewChecklist",
        "canViewCalendar",
        "canViewProfile",
        "canViewForum",
    ],
    "GERENTE": [
        "canViewInventory",
        "canViewCash",
        "canViewChecklist",
        "canViewCalendar",
        "canViewProfile",
        "canViewForum",
    ],
    "COORDINADOR": [
        "canViewInventory",
        "canViewCash",
        "canViewChecklist",
        "canViewCalendar",
        "canViewProfile",
        "canViewForum",
    ],
    "JEFE_COCINA": ["canViewInventory", "canViewChecklist", "canViewCalendar", "canViewProfile", "canViewForum"],
    "ADMINISTRATIVO": ["canViewCash", "canViewCalendar", "canViewProfile"],
    "MOSTRADOR": ["canViewChecklist", "canViewCalendar", "canViewProfile", "canViewCash"],
}

PermissionListener = Callable[[str, dict[str, bool] | None], None]


def normalize_role_name(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip()).upper()


def role_label(role: str) -> str:
    return ROLE_LABELS.get(role) or role.replace("_", " ")


def new_role_permissions() -> dict[str, bool]:
    """Grants for a freshly created role: everything off but the member basics."""
    return default_permission_set()


class RoleRegistry:
    """Per-role permission sets plus the list of custom roles.

    Changes are written through to the key-value store (when one is given)
    and announced to subscribers so menus can be re-synced.
    """

    def __init__(self, store: KeyValueStore | None = None, defaults: Mapping[str, object] | None = None) -> None:
        self.store = store
        seed = DEFAULT_ROLE_PERMISSIONS if defaults is None else defaults
        self._permissions: dict[str, dict[str, bool]] = {
            normalize_role_name(role): normalize_permission_set(raw) for role, raw in seed.items()
        }
        self._custom_roles: list[str] = []
        self._listeners: list[PermissionListener] = []
        self._load()

    def _load(self) -> None:
        if self.store is None:
            return
        raw_permissions = self._read_setting(ROLE_PERMISSIONS_SETTING)
        if isinstance(raw_permissions, dict):
            for role, raw in raw_permissions.items():
                if isinstance(raw, (dict, list)):
                    self._permissions[normalize_role_name(str(role))] = normalize_permission_set(raw)
        raw_roles = self._read_setting(CUSTOM_ROLES_SETTING)
        if isinstance(raw_roles, list):
            self._custom_roles = [normalize_role_name(str(role)) for role in raw_roles if str(role).strip()]

    def _read_setting(self, key: str) -> object:
        try:
            raw = self.store.get(key)
        except Exception:
            logger.exception("role_settings_read_failed", extra={"setting": key})
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (ValueError, RecursionError):
            logger.warning("role_settings_malformed", extra={"setting": key})
            return None

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.set(ROLE_PERMISSIONS_SETTING, json.dumps(self._permissions, sort_keys=True))
            self.store.set(CUSTOM_ROLES_SETTING, json.dumps(self._custom_roles))
        except Exception as exc:
            logger.exception(
                "role_settings_save_failed",
                extra={"exception_type": type(exc).__name__, "exception_message": str(exc)},
            )

    def _notify(self, role: str) -> None:
        permissions = self.permissions_for(role)
        logger.info("role_permissions_updated", extra={"role": role, "listeners": len(self._listeners)})
        for listener in list(self._listeners):
            try:
                listener(role, permissions)
            except Exception:
                logger.exception("role_permissions_listener_failed", extra={"role": role})

    def subscribe(self, listener: PermissionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def custom_roles(self) -> list[str]:
        return list(self._custom_roles)

    def roles(self) -> list[str]:
        listed = [*SYSTEM_ROLES, *self._custom_roles]
        seeded = sorted(role for role in self._permissions if role not in listed)
        return [*listed, *seeded]

    def is_known(self, role: str) -> bool:
        return normalize_role_name(role) in self.roles()

    def permissions_for(self, role: str | None) -> dict[str, bool] | None:
        if not role:
            return None
        permissions = self._permissions.get(normalize_role_name(role))
        return dict(permissions) if permissions is not None else None

    def all_permissions(self) -> dict[str, dict[str, bool]]:
        return {role: dict(permissions) for role, permissions in self._permissions.items()}

    def create_role(self, name: str) -> str:
        if not name or not name.strip():
            raise AppError(ErrorCatalog.ROLE_NAME_REQUIRED)
        role = normalize_role_name(name)
        if self.is_known(role):
            raise AppError(ErrorCatalog.ROLE_ALREADY_EXISTS, details={"role": role})
        self._custom_roles.append(role)
        self._permissions[role] = new_role_permissions()
        self._persist()
        self._notify(role)
        return role

    def delete_role(self, role: str) -> None:
        normalized = normalize_role_name(role)
        if normalized in SYSTEM_ROLES:
            raise AppError(ErrorCatalog.SYSTEM_ROLE_PROTECTED, details={"role": normalized})
        if normalized not in self._custom_roles:
            raise AppError(ErrorCatalog.ROLE_NOT_FOUND, details={"role": normalized})
        self._custom_roles.remove(normalized)
        self._permissions.pop(normalized, None)
        self._persist()
        self._notify(normalized)

    def toggle_permission(self, role: str, key: str | PermissionKey) -> dict[str, bool]:
        normalized = self._require_role(role)
        canonical = self._require_key(key)
        current = self._permissions.get(normalized) or new_role_permissions()
        updated = {**current, canonical: not current.get(canonical, False)}
        self._permissions[normalized] = updated
        self._persist()
        self._notify(normalized)
        return dict(updated)

    def set_permissions(self, role: str, permissions: Mapping[str, object] | Iterable[str]) -> dict[str, bool]:
        normalized = self._require_role(role)
        self._permissions[normalized] = normalize_permission_set(permissions)
        self._persist()
        self._notify(normalized)
        return dict(self._permissions[normalized])

    def _require_role(self, role: str) -> str:
        if not role or not self.is_known(role):
            raise AppError(ErrorCatalog.ROLE_NOT_FOUND, details={"role": role})
        return normalize_role_name(role)

    @staticmethod
    def _require_key(key: str | PermissionKey) -> str:
        raw = key.value if isinstance(key, PermissionKey) else str(key)
        canonical = canonical_key(raw)
        if canonical is None or canonical not in ALL_PERMISSION_KEYS:
            raise AppError(ErrorCatalog.UNKNOWN_PERMISSION_KEY, details={"key": raw})
        return canonical
