from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from app.backoffice_nav.core.config import settings
from app.backoffice_nav.schemas.menu import MenuEntry, MenuMode, RenderItem
from app.backoffice_nav.services.catalog import Catalog
from app.backoffice_nav.services.menu_projection import project_menu
from app.backoffice_nav.services.menu_store import MenuConfigStore, sort_entries
from app.backoffice_nav.services.menu_sync import MenuSyncResolver, SyncResult
from app.backoffice_nav.services.roles import RoleRegistry, normalize_role_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MenuView:
    user_id: str
    mode: MenuMode
    role: str | None
    entries: list[MenuEntry]
    items: list[RenderItem]
    sync: SyncResult


@dataclass
class _OpenMenu:
    role: str | None
    entries: list[MenuEntry]


class NavigationService:
    """Runs load, sync and projection for each trigger.

    Triggers are the initial load, a permission change for the role, and an
    explicit save from the customizer. Menus opened through this service are
    kept in memory and stay authoritative when a write to storage fails; an
    entry stays cached until ``close_menu`` (sign-out) or ``close``.
    """

    def __init__(
        self,
        config_store: MenuConfigStore,
        roles: RoleRegistry,
        catalog: Catalog | None = None,
        resolver: MenuSyncResolver | None = None,
        default_member_role: str | None = None,
    ) -> None:
        self.config_store = config_store
        self.roles = roles
        self.catalog = catalog or config_store.catalog
        self.resolver = resolver or MenuSyncResolver(config_store, self.catalog)
        self.default_member_role = default_member_role or settings.DEFAULT_MEMBER_ROLE
        self._open: dict[tuple[str, MenuMode], _OpenMenu] = {}
        self._unsubscribe = roles.subscribe(self._on_permissions_changed)

    def close(self) -> None:
        self._unsubscribe()
        self._open.clear()

    def close_menu(self, user_id: str, mode: MenuMode) -> None:
        self._open.pop((user_id, MenuMode(mode)), None)

    def open_menus(self) -> list[tuple[str, MenuMode]]:
        return list(self._open)

    def _effective_role(self, mode: MenuMode, role: str | None) -> str | None:
        if role:
            return normalize_role_name(role)
        if mode == MenuMode.MEMBER:
            return normalize_role_name(self.default_member_role)
        return None

    def _resolve(self, user_id: str, mode: MenuMode, role: str | None, entries: Sequence[MenuEntry]) -> MenuView:
        permission_set = self.roles.permissions_for(role)
        result = self.resolver.sync(user_id, mode, entries, role=role, permission_set=permission_set)
        self._open[(user_id, mode)] = _OpenMenu(role=role, entries=result.entries)
        items = project_menu(mode, result.entries, permission_set, role=role, catalog=self.catalog)
        return MenuView(user_id=user_id, mode=mode, role=role, entries=result.entries, items=items, sync=result)

    def open_menu(self, user_id: str, mode: MenuMode, role: str | None = None) -> MenuView:
        mode = MenuMode(mode)
        effective_role = self._effective_role(mode, role)
        entries = self.config_store.load(user_id, mode)
        return self._resolve(user_id, mode, effective_role, entries)

    def refresh(self, user_id: str, mode: MenuMode, role: str | None = None) -> MenuView:
        mode = MenuMode(mode)
        current = self._open.get((user_id, mode))
        if current is None:
            return self.open_menu(user_id, mode, role)
        effective_role = self._effective_role(mode, role) if role else current.role
        return self._resolve(user_id, mode, effective_role, current.entries)

    def save_customization(
        self,
        user_id: str,
        mode: MenuMode,
        entries: Sequence[MenuEntry],
        role: str | None = None,
    ) -> MenuView:
        mode = MenuMode(mode)
        current = self._open.get((user_id, mode))
        effective_role = self._effective_role(mode, role or (current.role if current else None))
        ordered = sort_entries(entries)
        self.config_store.save(user_id, mode, ordered)
        return self._resolve(user_id, mode, effective_role, ordered)

    def reset(self, user_id: str, mode: MenuMode, role: str | None = None) -> MenuView:
        mode = MenuMode(mode)
        current = self._open.get((user_id, mode))
        effective_role = self._effective_role(mode, role or (current.role if current else None))
        entries = self.config_store.reset(user_id, mode)
        return self._resolve(user_id, mode, effective_role, entries)

    def _on_permissions_changed(self, role: str, permissions: dict[str, bool] | None) -> None:
        affected = [key for key, menu in self._open.items() if menu.role == role]
        for user_id, mode in affected:
            self.refresh(user_id, mode)
        if affected:
            logger.info("menu_permissions_resynced", extra={"role": role, "menus": len(affected)})
