from typing import Any, Dict, List, Optional

from trellis.core.modules.models import FieldDescriptor, RouteConfig, coerce_list
from trellis.core.builders.base import (
    ResourceBuilder,
    crud_route_name,
    evaluate_predicate,
    maybe_await,
    navigation_for,
)
from trellis.core.builders.renderers import RenderContext, render_value


class CrudPage:
    """Einer der drei Teil-Builder (view/new/edit). Teilt Service und Navigation mit den Geschwistern."""

    kind = ""
    path_suffix = ""

    def __init__(self, crud: "CrudBuilder"):
        self.crud = crud
        self.route_name = crud_route_name(crud.prefix, crud.route_base_name, self.kind)
        self.route_config = RouteConfig(
            name=self.route_name,
            path=f"{crud.route_path}/{self.path_suffix}",
            component=f"crud.{self.kind}",
            meta={
                "auth": True,
                "title": crud.title_key,
                "crud_type": self.kind,
                "service": crud.service,
                "fields": [],
                "page": self,
                **crud.relations,
            },
        )

    @property
    def fields(self) -> List[FieldDescriptor]:
        return self.route_config.meta["fields"]

    def add_field(self, fields) -> "CrudPage":
        self.fields.extend(coerce_list(FieldDescriptor, fields))
        return self

    def add_to_meta_properties(self, key: str, value: Any, route_config: Optional[RouteConfig] = None) -> "CrudPage":
        (route_config or self.route_config).add_meta(key, value)
        return self

    def get_router_config(self) -> RouteConfig:
        return self.route_config

    def visible_fields(self, state) -> List[FieldDescriptor]:
        """displayable wird bei jedem Aufruf neu gegen den aktuellen State geprüft."""
        return [
            f for f in self.fields
            if evaluate_predicate(f.displayable, state, log=self.crud.log, what=f"displayable({f.key})")
        ]

    def render_field(self, field: FieldDescriptor, ctx: RenderContext):
        return render_value(field.render, ctx.values.get(field.key), ctx)

    async def load_item(self, item_id):
        if self.crud.relations:
            return await maybe_await(self.crud.service.get_item(item_id, dict(self.crud.relations)))
        return await maybe_await(self.crud.service.get_item(item_id))


class CrudViewPage(CrudPage):
    kind = "view"
    path_suffix = "view/{id}"

    def get_view_route_name(self) -> str:
        return self.route_name

    def page_title(self, values: Dict[str, Any], ctx: RenderContext) -> str:
        # titleCallback kennt erst das geladene Item, vorher gibt es nur den generischen Titel
        callback = self.route_config.meta.get("title_callback")
        if callback and values:
            try:
                return str(callback(values))
            except Exception as e:
                self.crud.log.warning(f"⚠️ title_callback fehlgeschlagen: {e}")
        return ctx.t(self.crud.title_key)


class CrudFormPage(CrudPage):
    async def save(self, values: Dict[str, Any]):
        return await maybe_await(self.crud.service.save(values))


class CrudNewPage(CrudFormPage):
    kind = "new"
    path_suffix = "new"

    def get_new_route_name(self) -> str:
        return self.route_name

    def initial_values(self, state) -> Dict[str, Any]:
        """Startwerte für das Formular: default (ggf. aus dem State) vor initial_value."""
        values = {}
        for f in self.fields:
            value = f.default
            if callable(value):
                try:
                    value = value(state)
                except Exception as e:
                    self.crud.log.warning(f"⚠️ default für '{f.key}' fehlgeschlagen: {e}")
                    value = None
            if value is None:
                value = f.initial_value
            if value is not None:
                values[f.key] = value
        return values


class CrudEditPage(CrudFormPage):
    kind = "edit"
    path_suffix = "edit/{id}"

    def get_edit_route_name(self) -> str:
        return self.route_name


class CrudBuilder(ResourceBuilder):
    """
    Baut das Routen-Trio view/new/edit für einen Ressourcen-Typ.
    Die Namen stehen schon im Konstruktor fest, damit sie in Meta-Daten und Grids
    eingefädelt werden können, bevor die Routen versiegelt sind.
    """

    builder_type = "CrudBuilder"

    def __init__(self, context, title_key: str, route_base_name: str, service, options=None):
        super().__init__(context, title_key, route_base_name, service, options)
        self.navigation = navigation_for(self.prefix, route_base_name)
        self.view = CrudViewPage(self)
        self.new = CrudNewPage(self)
        self.edit = CrudEditPage(self)

    def get_router_config(self) -> List[RouteConfig]:
        return [self.view.get_router_config(), self.new.get_router_config(), self.edit.get_router_config()]
