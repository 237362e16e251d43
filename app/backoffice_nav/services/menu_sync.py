from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from app.backoffice_nav.core.config import settings
from app.backoffice_nav.core.logging import log_json
from app.backoffice_nav.schemas.menu import MenuEntry, MenuMode
from app.backoffice_nav.services.catalog import Catalog
from app.backoffice_nav.services.menu_store import MenuConfigStore, sort_entries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    entries: list[MenuEntry]
    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    persisted: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


class MenuSyncResolver:
    """Reconciles a loaded menu with the catalog and the role's permissions.

    Both passes are idempotent: a second run over their own output finds
    nothing to add or remove and does not write.
    """

    def __init__(
        self,
        config_store: MenuConfigStore,
        catalog: Catalog | None = None,
        injected_order_base: int | None = None,
    ) -> None:
        self.config_store = config_store
        self.catalog = catalog or config_store.catalog
        self.injected_order_base = (
            settings.INJECTED_ORDER_BASE if injected_order_base is None else injected_order_base
        )

    def sync(
        self,
        user_id: str,
        mode: MenuMode,
        entries: Sequence[MenuEntry],
        *,
        role: str | None = None,
        permission_set: Mapping[str, bool] | None = None,
    ) -> SyncResult:
        if MenuMode(mode) == MenuMode.ADMIN:
            return self.sync_admin(user_id, entries)
        return self.sync_member(user_id, role, permission_set, entries)

    def sync_admin(self, user_id: str, entries: Sequence[MenuEntry]) -> SyncResult:
        present = {entry.id for entry in entries}
        missing = [entry for entry in self.catalog.default_entries(MenuMode.ADMIN) if entry.id not in present]
        if not missing:
            return SyncResult(entries=list(entries))

        next_order = max((entry.order for entry in entries), default=-1) + 1
        synced = list(entries)
        for position, entry in enumerate(missing):
            synced.append(entry.model_copy(update={"order": next_order + position}))

        persisted = self.config_store.save(user_id, MenuMode.ADMIN, synced)
        added = tuple(entry.id for entry in missing)
        log_json(
            logger,
            {
                "event": "menu_sync_applied",
                "user_id": user_id,
                "mode": MenuMode.ADMIN.value,
                "added": added,
                "persisted": persisted,
            },
        )
        return SyncResult(entries=synced, added=added, persisted=persisted)

    def sync_member(
        self,
        user_id: str,
        role: str | None,
        permission_set: Mapping[str, bool] | None,
        entries: Sequence[MenuEntry],
    ) -> SyncResult:
        # Without a permission set nothing is injected or removed; the
        # projection hides gated entries until permissions arrive.
        if permission_set is None:
            return SyncResult(entries=list(entries))

        native_ids = self.catalog.native_ids(MenuMode.MEMBER)
        synced = list(entries)
        added: list[str] = []
        removed: list[str] = []

        for rule in self.catalog.injection_rules:
            allowed = rule.allows(permission_set, role)
            present = any(entry.id == rule.id for entry in synced)
            if allowed and not present:
                synced.append(
                    MenuEntry(
                        id=rule.id,
                        label=rule.label,
                        visible=True,
                        order=self.injected_order_base + len(synced),
                    )
                )
                added.append(rule.id)
            elif not allowed and present and rule.id not in native_ids:
                synced = [entry for entry in synced if entry.id != rule.id]
                removed.append(rule.id)

        if not added and not removed:
            return SyncResult(entries=list(entries))

        synced = sort_entries(synced)
        persisted = self.config_store.save(user_id, MenuMode.MEMBER, synced)
        log_json(
            logger,
            {
                "event": "menu_sync_applied",
                "user_id": user_id,
                "mode": MenuMode.MEMBER.value,
                "role": role,
                "added": tuple(added),
                "removed": tuple(removed),
                "persisted": persisted,
            },
        )
        return SyncResult(entries=synced, added=tuple(added), removed=tuple(removed), persisted=persisted)
