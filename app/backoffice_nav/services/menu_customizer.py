from __future__ import annotations

from collections.abc import Sequence

from app.backoffice_nav.core.error_catalog import AppError, ErrorCatalog
from app.backoffice_nav.schemas.menu import MenuEntry
from app.backoffice_nav.services.menu_store import sort_entries


def renumber(entries: Sequence[MenuEntry]) -> list[MenuEntry]:
    return [entry.model_copy(update={"order": index}) for index, entry in enumerate(entries)]


def _index_of(entries: Sequence[MenuEntry], entry_id: str) -> int:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    raise AppError(ErrorCatalog.MENU_ENTRY_NOT_FOUND, details={"id": entry_id})


def toggle_visibility(entries: Sequence[MenuEntry], entry_id: str) -> list[MenuEntry]:
    ordered = sort_entries(entries)
    index = _index_of(ordered, entry_id)
    target = ordered[index]
    ordered[index] = target.model_copy(update={"visible": not target.visible})
    return ordered


def move(entries: Sequence[MenuEntry], index: int, direction: str) -> list[MenuEntry]:
    """Swap the entry at ``index`` with its neighbour; edges are a no-op."""
    ordered = sort_entries(entries)
    if direction not in {"up", "down"}:
        raise AppError(ErrorCatalog.INVALID_MENU_MOVE, details={"direction": direction})
    if not 0 <= index < len(ordered):
        raise AppError(ErrorCatalog.INVALID_MENU_MOVE, details={"index": index})
    if direction == "up" and index == 0:
        return ordered
    if direction == "down" and index == len(ordered) - 1:
        return ordered

    swap_index = index - 1 if direction == "up" else index + 1
    ordered[index], ordered[swap_index] = ordered[swap_index], ordered[index]
    return renumber(ordered)


def move_to(entries: Sequence[MenuEntry], entry_id: str, target_index: int) -> list[MenuEntry]:
    """Drag-and-drop: pull ``entry_id`` out and reinsert it at ``target_index``."""
    ordered = sort_entries(entries)
    dragged = ordered.pop(_index_of(ordered, entry_id))
    target_index = max(0, min(target_index, len(ordered)))
    ordered.insert(target_index, dragged)
    return renumber(ordered)
