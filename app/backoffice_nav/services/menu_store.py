from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from pydantic import TypeAdapter, ValidationError

from app.backoffice_nav.core.config import settings
from app.backoffice_nav.repos.kv_store import KeyValueStore
from app.backoffice_nav.schemas.menu import MenuConfigDocument, MenuEntry, MenuMode
from app.backoffice_nav.services.catalog import DEFAULT_CATALOG, Catalog

logger = logging.getLogger(__name__)

_BARE_ENTRY_LIST = TypeAdapter(list[MenuEntry])


def storage_key(mode: MenuMode, user_id: str, prefix: str | None = None) -> str:
    return f"{prefix or settings.MENU_KEY_PREFIX}_{MenuMode(mode).value}_{user_id}"


def sort_entries(entries: Iterable[MenuEntry]) -> list[MenuEntry]:
    # sorted() is stable, so equal orders keep their insertion position.
    return sorted(entries, key=lambda entry: entry.order)


def serialize_entries(entries: Iterable[MenuEntry]) -> str:
    return MenuConfigDocument(entries=list(entries)).model_dump_json(by_alias=True)


def parse_entries(raw: str) -> list[MenuEntry]:
    """Parse a stored menu document.

    Accepts the versioned ``{"schema_version": ..., "entries": [...]}`` form
    and the bare list written before documents carried a version.
    """
    payload = json.loads(raw)
    if isinstance(payload, list):
        entries = _BARE_ENTRY_LIST.validate_python(payload)
    else:
        entries = MenuConfigDocument.model_validate(payload).entries

    unique: list[MenuEntry] = []
    seen: set[str] = set()
    for entry in entries:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        unique.append(entry)
    return unique


class MenuConfigStore:
    def __init__(self, store: KeyValueStore, catalog: Catalog = DEFAULT_CATALOG, key_prefix: str | None = None) -> None:
        self.store = store
        self.catalog = catalog
        self.key_prefix = key_prefix

    def key(self, user_id: str, mode: MenuMode) -> str:
        return storage_key(mode, user_id, self.key_prefix)

    def defaults(self, mode: MenuMode) -> list[MenuEntry]:
        return self.catalog.default_entries(mode)

    def load(self, user_id: str, mode: MenuMode) -> list[MenuEntry]:
        key = self.key(user_id, mode)
        try:
            raw = self.store.get(key)
        except Exception:
            logger.exception("menu_config_read_failed", extra={"key": key})
            return self.defaults(mode)

        if raw is None:
            return self.defaults(mode)

        try:
            entries = parse_entries(raw)
        except (ValueError, TypeError, RecursionError, ValidationError) as exc:
            logger.warning(
                "menu_config_malformed",
                extra={"key": key, "exception_type": type(exc).__name__},
            )
            return self.defaults(mode)
        return sort_entries(entries)

    def save(self, user_id: str, mode: MenuMode, entries: Iterable[MenuEntry]) -> bool:
        key = self.key(user_id, mode)
        try:
            self.store.set(key, serialize_entries(entries))
        except Exception as exc:
            logger.exception(
                "menu_config_save_failed",
                extra={"key": key, "exception_type": type(exc).__name__, "exception_message": str(exc)},
            )
            return False
        return True

    def reset(self, user_id: str, mode: MenuMode) -> list[MenuEntry]:
        key = self.key(user_id, mode)
        try:
            self.store.delete(key)
        except Exception:
            logger.exception("menu_config_reset_failed", extra={"key": key})
        return self.defaults(mode)
