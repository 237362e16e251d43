from __future__ import annotations

from app.backoffice_nav.core.config import Settings, settings as default_settings
from app.backoffice_nav.core.logging import configure_logging
from app.backoffice_nav.repos.factory import build_key_value_store
from app.backoffice_nav.services.menu_store import MenuConfigStore
from app.backoffice_nav.services.menu_sync import MenuSyncResolver
from app.backoffice_nav.services.navigation import NavigationService
from app.backoffice_nav.services.roles import RoleRegistry


def create_navigation_service(config: Settings | None = None) -> NavigationService:
    config = config or default_settings
    configure_logging(config.LOG_LEVEL)
    store = build_key_value_store(config)
    menu_store = MenuConfigStore(store, key_prefix=config.MENU_KEY_PREFIX)
    resolver = MenuSyncResolver(menu_store, injected_order_base=config.INJECTED_ORDER_BASE)
    return NavigationService(
        menu_store,
        RoleRegistry(store),
        resolver=resolver,
        default_member_role=config.DEFAULT_MEMBER_ROLE,
    )
