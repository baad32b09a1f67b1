from types import MappingProxyType
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from trellis.core.builders.renderers import FieldRenderer, as_renderer
from trellis.core.errors import RouteSealedError


class ModuleConfig(BaseModel):
    module_name: str = Field(..., description="Eindeutiger Name, z.B. 'Projects' oder 'Tasks'")
    router_prefix: str = Field(..., description="Präfix für Routen-Namen und Pfade")
    load_order: int = Field(default=100, description="Kleiner = früher geladen")
    version: str = Field(default="1.0.0")
    description: str = Field(default="Keine Beschreibung")
    icon: str = Field(default="extension")


class RouteConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    path: str
    component: str = Field(..., description="Schlüssel der Page-Komponente, z.B. 'grid' oder 'crud.view'")
    meta: Dict[str, Any] = Field(default_factory=dict)

    _sealed: bool = PrivateAttr(default=False)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def add_meta(self, key: str, value: Any) -> "RouteConfig":
        if self._sealed:
            raise RouteSealedError(self.name)
        self.meta[key] = value
        return self

    def seal(self) -> None:
        # Ab hier darf niemand mehr die Meta-Daten anfassen (auch keine fremden Module)
        if self._sealed:
            return
        self.meta = MappingProxyType(dict(self.meta))
        self._sealed = True

    def to_router_entry(self) -> Dict[str, Any]:
        return {"name": self.name, "path": self.path, "component": self.component, "meta": self.meta}


class NavigationBundle(BaseModel):
    """Die drei Routen-Namen eines CRUD-Builders. Wird an Grids und Link-Renderer durchgereicht."""
    model_config = ConfigDict(frozen=True)

    view: str
    edit: str
    new: str


class ModuleDescriptor(BaseModel):
    """Veröffentlichte, unveränderliche Zusammenfassung eines Moduls."""
    model_config = ConfigDict(frozen=True)

    name: str
    route_prefix: str
    load_order: int
    routes: Tuple[RouteConfig, ...] = ()
    # Explizite Referenzen statt Substring-Suche auf Routen-Namen: { "projects": NavigationBundle }
    navigation: Dict[str, NavigationBundle] = Field(default_factory=dict)

    def route_names(self) -> List[str]:
        return [route.name for route in self.routes]

    def get_route(self, name: str) -> Optional[RouteConfig]:
        return next((route for route in self.routes if route.name == name), None)


class NavbarEntry(BaseModel):
    label: str
    to: Dict[str, Any]
    icon: str = Field(default="chevron_right")

    @field_validator("to", mode="before")
    @classmethod
    def _route_name_shortcut(cls, value):
        if isinstance(value, str):
            return {"name": value}
        return value


class FieldDescriptor(BaseModel):
    # Module dürfen eigene Keys mitgeben (max_value, tooltip, ...), die reichen wir durch
    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    key: str
    label: Optional[str] = None
    type: Optional[str] = None
    required: bool = False
    default: Any = None
    initial_value: Any = None
    placeholder: Optional[str] = None
    tooltip_value: Optional[str] = None
    options: Optional[List[Dict[str, Any]]] = None
    field_options: Dict[str, Any] = Field(default_factory=dict)
    service: Any = None
    displayable: Union[bool, Callable[..., bool]] = True
    render: Optional[FieldRenderer] = None

    @field_validator("render", mode="before")
    @classmethod
    def _wrap_render(cls, value):
        return as_renderer(value)


class ColumnDescriptor(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str
    key: Optional[str] = None
    render: Optional[FieldRenderer] = None

    @field_validator("render", mode="before")
    @classmethod
    def _wrap_render(cls, value):
        return as_renderer(value)


def _always(*_args, **_kwargs) -> bool:
    return True


class ActionDescriptor(BaseModel):
    """Zeilen-Aktion oder Page-Control. Page-Controls dürfen 'label' statt 'title' nutzen."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str = Field(..., validation_alias=AliasChoices("title", "label"))
    icon: Optional[str] = None
    on_click: Optional[Callable[..., Any]] = None
    render_condition: Callable[..., bool] = _always
    action_type: Optional[str] = None
    type: Optional[str] = None


class FilterDescriptor(BaseModel):
    """Freitext-Suche. reference_key darf ein Pfad in eine Relation sein ('project.name')."""
    reference_key: str
    filter_name: str


class FilterFieldDescriptor(BaseModel):
    key: str
    label: str
    field_options: Dict[str, Any] = Field(default_factory=dict)
    placeholder: Optional[str] = None
    save_to_query: bool = False


def coerce_list(model_cls, items) -> list:
    """Builder akzeptieren Modelle, Dicts oder Listen davon."""
    if isinstance(items, (list, tuple)):
        return [coerce_list(model_cls, item)[0] for item in items]
    if isinstance(items, model_cls):
        return [items]
    if isinstance(items, dict):
        return [model_cls(**items)]
    raise TypeError(f"{model_cls.__name__} erwartet, bekommen: {type(items).__name__}")
