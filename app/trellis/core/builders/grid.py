from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import parse_qs, urlencode

from trellis.core.builders.base import ResourceBuilder, evaluate_predicate, grid_route_name, maybe_await
from trellis.core.builders.renderers import RenderContext, render_value
from trellis.core.errors import UnknownRouteError
from trellis.core.logger import get_logger
from trellis.core.modules.models import (
    ActionDescriptor,
    ColumnDescriptor,
    FilterDescriptor,
    FilterFieldDescriptor,
    NavigationBundle,
    RouteConfig,
    coerce_list,
)


class GridBuilder(ResourceBuilder):
    """Baut die Listen-Route: Spalten, Filter, Aktionen, Page-Controls."""

    builder_type = "GridBuilder"

    def __init__(self, context, title_key: str, route_base_name: str, service, options=None):
        super().__init__(context, title_key, route_base_name, service, options)
        self.grid_data = {
            "title": title_key,
            "columns": [],
            "filters": [],
            "filter_fields": [],
            "actions": [],
            "page_controls": [],
        }
        self.route_config = RouteConfig(
            name=grid_route_name(self.prefix, route_base_name),
            path=self.route_path,
            component="grid",
            meta={
                "auth": True,
                "service": service,
                "grid_data": self.grid_data,
                "static_filters": dict(self.static_filters),
                "relations": dict(self.relations),
            },
        )

    def add_column(self, columns) -> "GridBuilder":
        self.grid_data["columns"].extend(coerce_list(ColumnDescriptor, columns))
        return self

    def add_filter(self, filters) -> "GridBuilder":
        self.grid_data["filters"].extend(coerce_list(FilterDescriptor, filters))
        return self

    def add_filter_field(self, fields) -> "GridBuilder":
        self.grid_data["filter_fields"].extend(coerce_list(FilterFieldDescriptor, fields))
        return self

    def add_action(self, actions) -> "GridBuilder":
        self.grid_data["actions"].extend(coerce_list(ActionDescriptor, actions))
        return self

    def add_page_controls(self, controls) -> "GridBuilder":
        self.grid_data["page_controls"].extend(coerce_list(ActionDescriptor, controls))
        return self

    def add_to_meta_properties(self, key: str, value: Any, route_config: Optional[RouteConfig] = None) -> "GridBuilder":
        (route_config or self.route_config).add_meta(key, value)
        return self

    def get_router_config(self) -> RouteConfig:
        return self.route_config

    def get_grid_route_name(self) -> str:
        return self.route_config.name


def _is_empty(value) -> bool:
    return value is None or value == "" or value == [] or value == {}


def resolve_path(row: Mapping[str, Any], path: Optional[str]):
    """'project.name' -> row['project']['name'], fehlende Glieder -> None."""
    if not path:
        return None
    current: Any = row
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def extract_rows(result) -> List[Dict[str, Any]]:
    if result is None:
        return []
    if isinstance(result, Mapping):
        return list(result.get("data") or [])
    return list(result)


class GridActionContext:
    """Builder-Kontext, den on_click bekommt: Standard-Handler für Ansehen/Bearbeiten/Löschen."""

    def __init__(self, controller: "GridController", router):
        self.controller = controller
        self.router = router

    def on_view(self, item):
        self.router.push(self.controller.navigation.view, {"id": item["id"]})

    def on_edit(self, item):
        self.router.push(self.controller.navigation.edit, {"id": item["id"]})

    async def on_delete(self, item):
        await maybe_await(self.controller.service.delete_item(item["id"]))
        # Liste neu laden, damit die gelöschte Zeile verschwindet
        await self.controller.load(self.controller.page)


class GridController:
    """
    Laufzeit-Zustand einer Grid-Seite (pro Aufruf neu): aktive Filter, Suche, Seite, Zeilen.
    Prädikate werden bei jedem Render-Durchlauf neu ausgewertet, nie gecacht.
    """

    def __init__(self, route_config: RouteConfig, query: Optional[Mapping[str, Any]] = None):
        meta = route_config.meta
        self.route_config = route_config
        self.service = meta["service"]
        self.grid_data = meta["grid_data"]
        self.static_filters = dict(meta.get("static_filters", {}))
        self.relations = dict(meta.get("relations", {}))
        self.log = get_logger(f"Grid:{route_config.name}")

        self.search_query = ""
        self.filter_values: Dict[str, Any] = {}
        self.page = 1
        self.items: List[Dict[str, Any]] = []
        self.total: Optional[int] = None

        if query:
            self._restore_from_query(query)

    # --- Filter ---

    @property
    def filter_fields(self) -> List[FilterFieldDescriptor]:
        return self.grid_data["filter_fields"]

    def _field(self, key: str) -> Optional[FilterFieldDescriptor]:
        return next((f for f in self.filter_fields if f.key == key), None)

    @staticmethod
    def _query_value(field: FilterFieldDescriptor, value):
        # Alles, was in die URL wandert, wird als String gehalten, damit der Rückweg identisch ist
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return str(value)

    def set_filter(self, key: str, value) -> None:
        field = self._field(key)
        if field is None:
            self.log.warning(f"⚠️ Unbekanntes Filterfeld '{key}' wird ignoriert")
            return
        if _is_empty(value):
            self.filter_values.pop(key, None)
        else:
            self.filter_values[key] = self._query_value(field, value) if field.save_to_query else value
        self.page = 1

    def set_search(self, text: Optional[str]) -> None:
        self.search_query = (text or "").strip()
        self.page = 1

    def compose_filters(self, page: Optional[int] = None) -> Dict[str, Any]:
        """Statische Optionen ∪ aktive UI-Filter ∪ aus der URL wiederhergestellte Filter, in EINEM Objekt."""
        filters: Dict[str, Any] = dict(self.static_filters)
        filters.update(self.relations)
        for key, value in self.filter_values.items():
            if not _is_empty(value):
                filters[key] = value

        reference_keys = [f.reference_key for f in self.grid_data["filters"]]
        if self.search_query and reference_keys:
            filters["search"] = {"query": self.search_query, "fields": reference_keys}

        if page is not None:
            filters["page"] = page
        return filters

    # --- URL Query ---

    def to_query(self) -> Dict[str, Any]:
        return {
            f.key: self.filter_values[f.key]
            for f in self.filter_fields
            if f.save_to_query and not _is_empty(self.filter_values.get(f.key))
        }

    def query_string(self) -> str:
        return urlencode(self.to_query(), doseq=True)

    def _restore_from_query(self, query: Mapping[str, Any]) -> None:
        for field in self.filter_fields:
            if not field.save_to_query or field.key not in query:
                continue
            value = query[field.key]
            if isinstance(value, (list, tuple)) and len(value) == 1 and not field.field_options.get("multiple"):
                value = value[0]
            self.set_filter(field.key, value)

    @classmethod
    def from_query_string(cls, route_config: RouteConfig, query_string: str) -> "GridController":
        return cls(route_config, parse_qs(query_string.lstrip("?")))

    # --- Laden ---

    async def load(self, page: int = 1):
        """Genau ein get_all pro Aufruf. Kein Cache, kein Retry: Fehler gehen an den Aufrufer."""
        self.page = page
        result = await maybe_await(self.service.get_all(self.compose_filters(page)))
        self.items = extract_rows(result)
        if isinstance(result, Mapping):
            self.total = result.get("total", len(self.items))
        else:
            self.total = len(self.items)
        return self.items

    # --- Aktionen ---

    @property
    def navigation(self) -> NavigationBundle:
        navigation = self.route_config.meta.get("navigation")
        if navigation is None:
            raise UnknownRouteError(f"{self.route_config.name} (navigation)")
        return navigation

    def visible_actions(self, state, row: Mapping[str, Any]) -> List[ActionDescriptor]:
        return [
            a for a in self.grid_data["actions"]
            if evaluate_predicate(a.render_condition, state, row, log=self.log, what=f"render_condition({a.title})")
        ]

    def visible_page_controls(self, state) -> List[ActionDescriptor]:
        return [
            c for c in self.grid_data["page_controls"]
            if evaluate_predicate(c.render_condition, state, log=self.log, what=f"render_condition({c.title})")
        ]

    async def trigger(self, action: ActionDescriptor, router, row: Optional[Mapping[str, Any]] = None):
        """Ein Klick = genau ein on_click."""
        if action.on_click is None:
            return None
        return await maybe_await(action.on_click(router, {"item": row}, GridActionContext(self, router)))

    # --- Rendering ---

    def render_cell(self, column: ColumnDescriptor, row: Mapping[str, Any], ctx: RenderContext):
        if column.render is not None:
            return column.render.render(row, ctx)
        return render_value(None, resolve_path(row, column.key), ctx)
