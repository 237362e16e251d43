from __future__ import annotations

from app.backoffice_nav.core.config import Settings, settings as default_settings
from app.backoffice_nav.core.error_catalog import AppError, ErrorCatalog
from app.backoffice_nav.repos.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore


def build_key_value_store(config: Settings | None = None) -> KeyValueStore:
    config = config or default_settings
    backend = config.MENU_STORAGE_BACKEND.strip().lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "json":
        return JsonFileKeyValueStore(config.MENU_STORAGE_PATH)
    if backend == "sql":
        from app.backoffice_nav.db.session import build_engine, build_session_factory, init_db
        from app.backoffice_nav.repos.app_settings import AppSettingsStore

        engine = build_engine(config.DATABASE_URL)
        init_db(engine)
        return AppSettingsStore(build_session_factory(engine))
    raise AppError(ErrorCatalog.STORAGE_BACKEND_INVALID, details={"backend": backend})
