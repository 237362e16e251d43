import json
import logging

from app.backoffice_nav.core.config import Settings
from app.backoffice_nav.core.logging import log_json
from app.backoffice_nav.main import create_navigation_service
from app.backoffice_nav.schemas.menu import MenuMode
from app.backoffice_nav.services.catalog import View


def test_settings_defaults() -> None:
    config = Settings(_env_file=None)

    assert config.MENU_KEY_PREFIX == "sushiblack_sidebar"
    assert config.INJECTED_ORDER_BASE == 90
    assert config.DEFAULT_MEMBER_ROLE == "COCINA"
    assert config.MENU_STORAGE_BACKEND == "memory"


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("INJECTED_ORDER_BASE", "500")
    monkeypatch.setenv("MENU_STORAGE_BACKEND", "json")

    config = Settings(_env_file=None)

    assert config.INJECTED_ORDER_BASE == 500
    assert config.MENU_STORAGE_BACKEND == "json"


def test_log_json_emits_single_json_line(caplog) -> None:
    logger = logging.getLogger("backoffice_nav.test")

    with caplog.at_level(logging.INFO, logger="backoffice_nav.test"):
        log_json(logger, {"event": "menu_sync_applied", "added": ("REPORTS",)})

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload == {"event": "menu_sync_applied", "added": ["REPORTS"]}


def test_create_navigation_service_wires_configured_backend(tmp_path) -> None:
    config = Settings(
        _env_file=None,
        MENU_STORAGE_BACKEND="json",
        MENU_STORAGE_PATH=str(tmp_path / "menus.json"),
        MENU_KEY_PREFIX="branch_sidebar",
        INJECTED_ORDER_BASE=200,
    )
    navigation = create_navigation_service(config)
    navigation.roles.set_permissions("COCINA", {"inventory_view": True})

    view = navigation.open_menu("cook-1", MenuMode.MEMBER)
    navigation.close()

    injected = view.entries[-1]
    assert injected.id == View.INVENTORY.value
    assert injected.order >= 200
    stored = json.loads((tmp_path / "menus.json").read_text(encoding="utf-8"))
    assert "branch_sidebar_member_cook-1" in stored
    assert "role_permissions" in stored
