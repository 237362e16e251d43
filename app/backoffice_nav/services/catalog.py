from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from app.backoffice_nav.schemas.menu import MenuEntry, MenuMode
from app.backoffice_nav.services.permissions import ALWAYS, AccessRule, PermissionKey


class View(str, Enum):
    DASHBOARD = "DASHBOARD"
    EMPLOYEES = "EMPLOYEES"
    OVERTIME = "OVERTIME"
    SANCTIONS = "SANCTIONS"
    FILES = "FILES"
    CASH_REGISTER = "CASH_REGISTER"
    OFFICE = "OFFICE"
    PAYROLL = "PAYROLL"
    USERS = "USERS"
    PRODUCTS = "PRODUCTS"
    SETTINGS = "SETTINGS"
    FINANCE = "FINANCE"
    WALLET = "WALLET"
    ROYALTIES = "ROYALTIES"
    STATISTICS = "STATISTICS"
    AI_REPORT = "AI_REPORT"
    FORUM = "FORUM"
    INVENTORY = "INVENTORY"
    SUPPLIERS = "SUPPLIERS"
    MEMBER_HOME = "MEMBER_HOME"
    MEMBER_CALENDAR = "MEMBER_CALENDAR"
    MEMBER_TASKS = "MEMBER_TASKS"
    MEMBER_FILE = "MEMBER_FILE"
    MEMBER_FORUM = "MEMBER_FORUM"


@dataclass(frozen=True)
class NavDestination:
    id: str
    label: str
    icon: str
    required_permission: str = ALWAYS
    group_id: str | None = None
    alternate_permissions: tuple[str, ...] = ()
    legacy_roles: tuple[str, ...] = ()
    injected: bool = False

    @property
    def access_rule(self) -> AccessRule:
        return AccessRule(
            permissions=(self.required_permission, *self.alternate_permissions),
            roles=self.legacy_roles,
        )

    def allows(self, permission_set: Mapping[str, bool] | None, role: str | None = None) -> bool:
        return self.access_rule.allows(permission_set, role)


@dataclass(frozen=True)
class NavGroup:
    id: str
    title: str
    members: tuple[NavDestination, ...]


def _admin(view: View, label: str, icon: str, group_id: str, permission: str | PermissionKey = ALWAYS) -> NavDestination:
    required = permission.value if isinstance(permission, PermissionKey) else permission
    return NavDestination(view.value, label, icon, required_permission=required, group_id=group_id)


MEMBER_CATALOG: tuple[NavDestination, ...] = (
    NavDestination(View.MEMBER_HOME.value, "Mi Panel", "layout-dashboard"),
    NavDestination(View.MEMBER_FORUM.value, "Muro Social", "message-square", PermissionKey.MEMBER_VIEW_WELFARE.value),
    NavDestination(View.MEMBER_TASKS.value, "Mi Check-List", "clipboard-check", PermissionKey.MEMBER_VIEW_CHECKLIST.value),
    NavDestination(View.MEMBER_CALENDAR.value, "Mi Calendario", "calendar-range", PermissionKey.MEMBER_VIEW_MY_CALENDAR.value),
    NavDestination(View.MEMBER_FILE.value, "Mi Expediente", "user", PermissionKey.MEMBER_VIEW_PROFILE.value),
    NavDestination(View.CASH_REGISTER.value, "Caja / Movimientos", "wallet", PermissionKey.FINANCE_VIEW.value),
)

ADMIN_GROUPS: tuple[NavGroup, ...] = (
    NavGroup(
        "header-main",
        "Principal",
        (_admin(View.DASHBOARD, "Panel General", "layout-dashboard", "header-main"),),
    ),
    NavGroup(
        "header-ops",
        "Gestión Operativa",
        (
            _admin(View.EMPLOYEES, "Empleados", "users", "header-ops", PermissionKey.HR_VIEW),
            _admin(View.FILES, "Expedientes", "folder-open", "header-ops", PermissionKey.HR_VIEW),
            _admin(View.OVERTIME, "Calendario", "calendar", "header-ops", PermissionKey.OPS_VIEW),
            _admin(View.SANCTIONS, "Gestión disciplinaria", "alert-triangle", "header-ops", PermissionKey.OPS_VIEW),
            _admin(View.CASH_REGISTER, "Caja / Movimientos", "tag", "header-ops"),
        ),
    ),
    NavGroup(
        "header-finance",
        "Finanzas",
        (
            _admin(View.WALLET, "Billetera Global", "wallet", "header-finance", PermissionKey.FINANCE_VIEW),
            _admin(View.ROYALTIES, "Regalías Socios", "crown", "header-finance", PermissionKey.FINANCE_VIEW),
            _admin(View.PAYROLL, "Pagos y Nómina", "banknote", "header-finance", PermissionKey.FINANCE_VIEW),
            _admin(View.FINANCE, "Calculadora Costos", "line-chart", "header-finance", PermissionKey.FINANCE_VIEW),
            _admin(View.STATISTICS, "Estadísticas", "bar-chart-3", "header-finance", PermissionKey.FINANCE_VIEW),
        ),
    ),
    NavGroup(
        "header-admin",
        "Administración",
        (
            _admin(View.OFFICE, "Oficina Admin", "folder-open", "header-admin", PermissionKey.OPS_VIEW),
            _admin(View.INVENTORY, "Inventario", "box", "header-admin", PermissionKey.INVENTORY_VIEW),
            _admin(View.SUPPLIERS, "Insumos", "truck", "header-admin", PermissionKey.INVENTORY_VIEW),
            _admin(View.USERS, "Usuarios", "user-cog", "header-admin", PermissionKey.SUPER_ADMIN),
            _admin(View.PRODUCTS, "Productos", "box", "header-admin", PermissionKey.FINANCE_VIEW),
            _admin(View.SETTINGS, "Configuración", "settings", "header-admin", PermissionKey.SUPER_ADMIN),
        ),
    ),
    NavGroup(
        "header-strategic",
        "Estratégico",
        (
            _admin(View.FORUM, "Foro Social", "message-square", "header-strategic"),
            _admin(View.AI_REPORT, "Consultor IA", "brain-circuit", "header-strategic"),
        ),
    ),
)

# Admin screens a member role can receive through a granular permission.
INJECTION_RULES: tuple[NavDestination, ...] = (
    NavDestination(
        View.OVERTIME.value,
        "Calendario Equipo",
        "calendar",
        PermissionKey.MEMBER_VIEW_TEAM_CALENDAR.value,
        injected=True,
    ),
    NavDestination(
        View.FILES.value,
        "Expedientes",
        "folder-open",
        PermissionKey.MEMBER_VIEW_ALL_FILES.value,
        injected=True,
    ),
    NavDestination(
        View.SANCTIONS.value,
        "Novedades",
        "alert-triangle",
        PermissionKey.OPS_VIEW.value,
        alternate_permissions=(PermissionKey.MEMBER_VIEW_SANCTIONS.value,),
        legacy_roles=("COORDINADOR",),
        injected=True,
    ),
    NavDestination(
        View.INVENTORY.value,
        "Inventario Cocina",
        "box",
        PermissionKey.INVENTORY_VIEW.value,
        injected=True,
    ),
)


@dataclass(frozen=True)
class Catalog:
    member: tuple[NavDestination, ...] = MEMBER_CATALOG
    admin_groups: tuple[NavGroup, ...] = ADMIN_GROUPS
    injection_rules: tuple[NavDestination, ...] = INJECTION_RULES

    def destinations(self, mode: MenuMode) -> tuple[NavDestination, ...]:
        if mode == MenuMode.MEMBER:
            return self.member + self.injection_rules
        return tuple(item for group in self.admin_groups for item in group.members)

    def find(self, mode: MenuMode, destination_id: str) -> NavDestination | None:
        # Native definitions win over injection rules sharing the same id.
        return next((item for item in self.destinations(mode) if item.id == destination_id), None)

    def group(self, group_id: str) -> NavGroup | None:
        return next((group for group in self.admin_groups if group.id == group_id), None)

    def native_ids(self, mode: MenuMode) -> frozenset[str]:
        if mode == MenuMode.MEMBER:
            return frozenset(item.id for item in self.member)
        return frozenset(item.id for item in self.destinations(mode))

    def default_entries(self, mode: MenuMode) -> list[MenuEntry]:
        """Materialize the catalog as a fresh menu, in declaration order."""
        entries: list[MenuEntry] = []
        if mode == MenuMode.MEMBER:
            for item in self.member:
                entries.append(MenuEntry(id=item.id, label=item.label, visible=True, order=len(entries)))
            return entries

        for group in self.admin_groups:
            entries.append(MenuEntry(id=group.id, label=group.title, visible=True, order=len(entries), is_header=True))
            for item in group.members:
                entries.append(MenuEntry(id=item.id, label=item.label, visible=True, order=len(entries)))
        return entries


DEFAULT_CATALOG = Catalog()
