from __future__ import annotations

from collections.abc import Mapping, Sequence

from app.backoffice_nav.schemas.menu import MenuEntry, MenuMode, RenderItem
from app.backoffice_nav.services.catalog import DEFAULT_CATALOG, Catalog
from app.backoffice_nav.services.menu_store import sort_entries


def project_menu(
    mode: MenuMode,
    entries: Sequence[MenuEntry],
    permission_set: Mapping[str, bool] | None,
    role: str | None = None,
    catalog: Catalog = DEFAULT_CATALOG,
) -> list[RenderItem]:
    """Build the ordered list of items the sidebar draws.

    Hidden entries, ids unknown to the catalog and destinations the role
    cannot open are dropped. A header is emitted only when at least one item
    of its run (up to the next header) survives.
    """
    mode = MenuMode(mode)
    rendered: list[RenderItem] = []
    pending_header: RenderItem | None = None

    for entry in sort_entries(entries):
        if entry.is_header:
            pending_header = None
            if not entry.visible:
                continue
            group = catalog.group(entry.id) if mode == MenuMode.ADMIN else None
            if group is not None:
                pending_header = RenderItem(destination_id=group.id, label=group.title, is_header=True)
            continue

        if not entry.visible:
            continue
        destination = catalog.find(mode, entry.id)
        if destination is None:
            continue
        if not destination.allows(permission_set, role):
            continue

        if pending_header is not None:
            rendered.append(pending_header)
            pending_header = None
        rendered.append(RenderItem(destination_id=destination.id, label=destination.label, icon=destination.icon))

    return rendered
