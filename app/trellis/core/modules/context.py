from typing import Any, Dict, List

from trellis.core.builders.crud import CrudBuilder
from trellis.core.builders.grid import GridBuilder
from trellis.core.builders.settings import SettingsSection
from trellis.core.logger import get_logger
from .models import ModuleConfig, NavbarEntry, NavigationBundle, RouteConfig


class ModuleContext:
    """
    Die Fassade für JEDES Modul: Builder-Fabrik plus Registrierung von
    Routen, Navigation, Übersetzungen und Settings-Sektionen.
    Gesammelt wird lokal; der ModuleManager übernimmt alles nach dem init.
    """

    def __init__(self, config: ModuleConfig, interceptor):
        self.config = config
        self.interceptor = interceptor
        self.log = get_logger(f"Module:{config.module_name}")

        self.routes: List[RouteConfig] = []
        self.navbar_entries: List[NavbarEntry] = []
        self.localization_data: List[Dict[str, Dict[str, Any]]] = []
        self.settings_sections: List[SettingsSection] = []
        # Explizite Navigations-Referenzen pro CRUD, landen im ModuleDescriptor
        self.navigation: Dict[str, NavigationBundle] = {}

    @property
    def module_name(self) -> str:
        return self.config.module_name

    @property
    def router_prefix(self) -> str:
        return self.config.router_prefix

    def get_module_route_name(self) -> str:
        return self.config.module_name

    # --- BUILDER FABRIK ---

    def create_crud(self, title_key: str, route_base_name: str, service, options=None) -> CrudBuilder:
        crud = CrudBuilder(self, title_key, route_base_name, service, options)
        self.navigation[route_base_name] = crud.navigation
        self.log.debug(f"CRUD '{route_base_name}' angelegt: {crud.navigation.view}")
        return crud

    def create_grid(self, title_key: str, route_base_name: str, service, options=None) -> GridBuilder:
        grid = GridBuilder(self, title_key, route_base_name, service, options)
        self.log.debug(f"Grid '{route_base_name}' angelegt: {grid.get_grid_route_name()}")
        return grid

    # --- REGISTRIERUNG ---

    def add_route(self, routes) -> "ModuleContext":
        if isinstance(routes, (list, tuple)):
            for route in routes:
                self.add_route(route)
            return self
        if isinstance(routes, dict):
            routes = RouteConfig(**routes)
        self.routes.append(routes)
        return self

    def add_navbar_entry(self, entry) -> "ModuleContext":
        if isinstance(entry, dict):
            entry = NavbarEntry(**entry)
        self.navbar_entries.append(entry)
        return self

    def add_localization_data(self, data: Dict[str, Dict[str, Any]]) -> "ModuleContext":
        self.localization_data.append(data)
        return self

    def add_settings_section(self, section) -> "ModuleContext":
        if isinstance(section, dict):
            section = SettingsSection(**section)
        self.settings_sections.append(section)
        self.add_route(section.to_route(self.router_prefix))
        return self

    # --- EVENT BUS PROXY ---

    def subscribe(self, module_name: str, callback=None):
        self.log.debug(f"Abonniert Modul: {module_name}")
        return self.interceptor.subscribe(module_name, callback)
