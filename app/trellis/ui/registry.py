# /app/trellis/ui/registry.py
from typing import Any, Dict, List, Optional

from trellis.core.errors import RegistryFrozenError
from trellis.core.i18n import LocalizationStore
from trellis.core.logger import get_logger

log = get_logger("UIRegistry")


class UIRegistry:
    """
    Prozessweiter Kompositions-Kontext. Während des Bootstraps append-only,
    danach eingefroren und nur noch lesbar (Router, Layout, Seiten).
    """

    def __init__(self, i18n: Optional[LocalizationStore] = None):
        # 1. Routen-Tabelle: flach, in Ladereihenfolge der Module
        self.routes: List[Any] = []
        self._routes_by_name: Dict[str, Any] = {}

        # 2. Navigation: Einträge der Module für die Sidebar
        self.nav_items: List[Any] = []

        # 3. Übersetzungen aller Module
        self.i18n = i18n or LocalizationStore()

        # 4. Settings-Sektionen (werden erst beim Betreten per access_check gefiltert)
        self.settings_sections: List[Any] = []

        self.frozen = False

    def _check_open(self):
        if self.frozen:
            raise RegistryFrozenError("UIRegistry")

    def add_routes(self, routes, source: str = "?"):
        self._check_open()
        for route in routes:
            if route.name in self._routes_by_name:
                log.warning(f"⚠️ [{source}] Route '{route.name}' existiert bereits und wird überschrieben")
                self.routes = [r for r in self.routes if r.name != route.name]
            self.routes.append(route)
            self._routes_by_name[route.name] = route

    def add_nav_items(self, entries):
        self._check_open()
        self.nav_items.extend(entries)

    def add_settings_sections(self, sections):
        self._check_open()
        self.settings_sections.extend(sections)

    def merge_module(self, ctx):
        """Übernimmt alles, was ein Modul in seinem Kontext gesammelt hat."""
        self.add_routes(ctx.routes, source=ctx.module_name)
        self.add_nav_items(ctx.navbar_entries)
        self.add_settings_sections(ctx.settings_sections)
        for data in ctx.localization_data:
            self.i18n.merge(data, source=ctx.module_name)

    def freeze(self):
        self.frozen = True
        self.i18n.freeze()
        self.routes = tuple(self.routes)
        self.nav_items = tuple(self.nav_items)
        self.settings_sections = tuple(self.settings_sections)
        log.info(f"🧊 Registry eingefroren: {len(self.routes)} Routen, {len(self.nav_items)} Navigationseinträge")

    def get_route(self, name: str):
        return self._routes_by_name.get(name)

    def route_table(self) -> List[Dict[str, Any]]:
        """Flache Liste {name, path, component, meta} für den Router."""
        return [route.to_router_entry() for route in self.routes]
