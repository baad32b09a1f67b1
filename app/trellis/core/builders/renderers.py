"""
Renderer-Strategien für Felder und Spalten.

Ein Renderer bekommt den aktuellen Wert und einen read-only RenderContext und liefert
einen RenderNode (oder einfach einen String). Er verändert NIE den Zustand.
Die UI-Schicht (trellis.ui.render) übersetzt RenderNodes in NiceGUI-Elemente.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from trellis.core.formatting import format_date, format_datetime, format_duration


@dataclass(frozen=True)
class RenderNode:
    tag: str
    text: Optional[str] = None
    props: Dict[str, Any] = field(default_factory=dict)
    children: List["RenderNode"] = field(default_factory=list)


@dataclass(frozen=True)
class RenderContext:
    state: Any = None          # UserState Snapshot
    i18n: Any = None           # LocalizationStore
    values: Dict[str, Any] = field(default_factory=dict)  # Geschwister-Felder bzw. die ganze Zeile

    def t(self, key: str, **params) -> str:
        if self.i18n is None:
            return key
        locale = getattr(self.state, "locale", None)
        return self.i18n.t(key, locale=locale, **params)

    def tc(self, key: str, count: int, **params) -> str:
        if self.i18n is None:
            return key
        return self.i18n.tc(key, count, locale=getattr(self.state, "locale", None), **params)

    @property
    def company_data(self) -> Dict[str, Any]:
        return getattr(self.state, "company_data", {}) or {}


Rendered = Union[RenderNode, str, None]


class FieldRenderer:
    """Standard: Wert als Klartext."""

    def render(self, value, ctx: RenderContext) -> Rendered:
        if value is None:
            return ""
        return str(value)


class CallableRenderer(FieldRenderer):
    """Adapter für einfache Funktionen (value, ctx) -> Node."""

    def __init__(self, fn: Callable[[Any, RenderContext], Rendered]):
        self.fn = fn

    def render(self, value, ctx):
        return self.fn(value, ctx)


class BooleanRenderer(FieldRenderer):
    def __init__(self, yes_key: str = "control.yes", no_key: str = "control.no"):
        self.yes_key = yes_key
        self.no_key = no_key

    def render(self, value, ctx):
        return RenderNode("span", ctx.t(self.yes_key if value else self.no_key))


class DateTimeRenderer(FieldRenderer):
    """Zeitstempel in der Zeitzone der Firma (company_data.timezone)."""

    def render(self, value, ctx):
        return RenderNode("span", format_datetime(value, ctx.company_data.get("timezone")))


class DateRenderer(FieldRenderer):
    def render(self, value, ctx):
        return RenderNode("span", format_date(value))


class DurationRenderer(FieldRenderer):
    def render(self, value, ctx):
        return RenderNode("span", format_duration(value, ctx.t("time.h"), ctx.t("time.m")))


class TranslatedRenderer(FieldRenderer):
    """z.B. priority {'name': 'High'} -> t('tasks.priority.high')."""

    def __init__(self, prefix: str, attribute: str = "name"):
        self.prefix = prefix
        self.attribute = attribute

    def render(self, value, ctx):
        if not value:
            return None
        raw = value.get(self.attribute) if isinstance(value, dict) else value
        return RenderNode("span", ctx.t(f"{self.prefix}.{str(raw).lower()}"))


class RouteLinkRenderer(FieldRenderer):
    """
    Link auf eine (ggf. fremde) Route.

    route: Routenname oder Callable, das ihn liefert. Das Callable wird erst beim
    Rendern ausgewertet, damit Namen aus späteren Modul-Abos ankommen können.
    """

    def __init__(
        self,
        route: Union[str, Callable[[], Optional[str]]],
        label_key: str = "name",
        id_key: str = "id",
        admin_only: bool = False,
    ):
        self.route = route
        self.label_key = label_key
        self.id_key = id_key
        self.admin_only = admin_only

    def route_name(self) -> Optional[str]:
        return self.route() if callable(self.route) else self.route

    def render(self, value, ctx):
        if not value:
            return None
        label = value.get(self.label_key, "") if isinstance(value, dict) else str(value)
        target = self.route_name()

        if target is None or (self.admin_only and not getattr(ctx.state, "is_admin", False)):
            return RenderNode("span", label)

        item_id = value.get(self.id_key) if isinstance(value, dict) else value
        return RenderNode("link", label, {"to": {"name": target, "params": {"id": item_id}}})


class UrlRenderer(FieldRenderer):
    """Externe URL als Link, sonst ein Platzhalter-Text."""

    def __init__(self, fallback_key: str):
        self.fallback_key = fallback_key

    def render(self, value, ctx):
        if value and str(value).lower() != "url":
            return RenderNode("a", str(value), {"href": str(value), "target": "_blank"})
        return RenderNode("span", ctx.t(self.fallback_key))


class HtmlRenderer(FieldRenderer):
    def render(self, value, ctx):
        return RenderNode("html", value or "")


def as_renderer(render) -> Optional[FieldRenderer]:
    if render is None or isinstance(render, FieldRenderer):
        return render
    if callable(render):
        return CallableRenderer(render)
    raise TypeError(f"render muss ein FieldRenderer oder Callable sein, nicht {type(render).__name__}")


def render_value(renderer: Optional[FieldRenderer], value, ctx: RenderContext) -> Rendered:
    return (renderer or FieldRenderer()).render(value, ctx)
