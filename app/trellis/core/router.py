from typing import Any, Callable, Dict, Optional

from nicegui import ui

from trellis.core.errors import UnknownRouteError
from trellis.core.logger import get_logger

log = get_logger("Router")


class Router:
    """
    Geteilter Router-Handle, den jedes Modul beim init bekommt.
    Löst Routen-NAMEN über die App-Registry in Pfade auf und navigiert dann via NiceGUI.
    """

    def __init__(self, registry, navigate: Optional[Callable[[str], Any]] = None):
        self.registry = registry
        self._navigate = navigate or ui.navigate.to

    def resolve(self, name: str, params: Optional[Dict[str, Any]] = None) -> str:
        route = self.registry.get_route(name)
        if route is None:
            raise UnknownRouteError(name)
        path = route.path
        for key, value in (params or {}).items():
            path = path.replace("{" + key + "}", str(value))
        return path

    def push(self, name: str, params: Optional[Dict[str, Any]] = None, query: Optional[str] = None):
        path = self.resolve(name, params)
        if query:
            path = f"{path}?{query}"
        log.debug(f"➡️ Navigiere zu {name} ({path})")
        return self._navigate(path)

    def can_enter(self, name: str, state) -> bool:
        """Einfacher Guard: meta.permissions muss in irgendeinem Projekt erlaubt sein."""
        route = self.registry.get_route(name)
        if route is None:
            return False
        permission = route.meta.get("permissions")
        if not permission:
            return True
        return bool(state is not None and state.can_in_any_project(permission))
