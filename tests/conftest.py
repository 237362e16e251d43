import pytest

from app.backoffice_nav.repos.kv_store import InMemoryKeyValueStore
from app.backoffice_nav.services.menu_store import MenuConfigStore
from app.backoffice_nav.services.menu_sync import MenuSyncResolver
from app.backoffice_nav.services.navigation import NavigationService
from app.backoffice_nav.services.roles import RoleRegistry


@pytest.fixture()
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture()
def menu_store(kv_store):
    return MenuConfigStore(kv_store, key_prefix="test_sidebar")


@pytest.fixture()
def resolver(menu_store):
    return MenuSyncResolver(menu_store, injected_order_base=90)


@pytest.fixture()
def roles(kv_store):
    return RoleRegistry(kv_store)


@pytest.fixture()
def navigation(menu_store, roles):
    service = NavigationService(menu_store, roles, default_member_role="COCINA")
    yield service
    service.close()


class FailingStore:
    """Key-value store whose writes always fail."""

    def __init__(self, values=None):
        self.values = dict(values or {})
        self.set_calls = 0

    def get(self, key):
        return self.values.get(key)

    def set(self, key, value):
        self.set_calls += 1
        raise OSError("disk full")

    def delete(self, key):
        raise OSError("disk full")


@pytest.fixture()
def failing_store():
    return FailingStore()
