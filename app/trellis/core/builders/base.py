import inspect
from typing import Any, Dict, Optional, Tuple

from trellis.core.modules.models import NavigationBundle
from trellis.core.services.resource import validate_resource_service

# Optionen, die an den Resource-Service durchgereicht werden (Eager-Loading / Aggregates)
RELATION_OPTIONS = {"with": "with", "with_count": "with_count", "withCount": "with_count"}


def crud_route_name(prefix: str, base_name: str, kind: str) -> str:
    return f"{prefix}.crud.{base_name}.{kind}"


def grid_route_name(prefix: str, base_name: str) -> str:
    return f"{prefix}.crud.{base_name}"


def navigation_for(prefix: str, base_name: str) -> NavigationBundle:
    """Deterministisch: andere Module können die Namen berechnen, bevor der Builder fertig ist."""
    return NavigationBundle(
        view=crud_route_name(prefix, base_name, "view"),
        edit=crud_route_name(prefix, base_name, "edit"),
        new=crud_route_name(prefix, base_name, "new"),
    )


def split_options(options: Optional[Dict[str, Any]]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Trennt {with, with_count} von freien statischen Filtern."""
    relations, static = {}, {}
    for key, value in (options or {}).items():
        if key in RELATION_OPTIONS:
            relations[RELATION_OPTIONS[key]] = value
        else:
            static[key] = value
    return relations, static


def evaluate_predicate(predicate, *args, log=None, what: str = "Prädikat") -> bool:
    """
    Render-Zeit-Prädikate (renderCondition, displayable). Ein Fehler zählt als False,
    damit eine kaputte Aktion nicht die ganze Zeile/Seite mitreißt. Nie gecacht.
    """
    if predicate is None:
        return True
    if isinstance(predicate, bool):
        return predicate
    try:
        result = predicate(*args)
        if inspect.isawaitable(result):
            # Async-Prädikate gehören in access_check, nicht in den Render-Pfad
            close = getattr(result, "close", None)
            if close:
                close()
            if log:
                log.warning(f"⚠️ {what} ist async und wird beim Rendern als False gewertet")
            return False
        return bool(result)
    except Exception as e:
        if log:
            log.warning(f"⚠️ {what} fehlgeschlagen, gilt als False: {e}")
        return False


async def maybe_await(value):
    if inspect.isawaitable(value):
        return await value
    return value


class ResourceBuilder:
    """Gemeinsame Basis für Crud- und Grid-Builder: Kontext, Service, Optionen."""

    builder_type = "Builder"

    def __init__(self, context, title_key: str, route_base_name: str, service, options=None):
        validate_resource_service(service, context.module_name, self.builder_type)
        self.context = context
        self.log = context.log
        self.title_key = title_key
        self.route_base_name = route_base_name
        self.service = service
        self.relations, self.static_filters = split_options(options)

    @property
    def prefix(self) -> str:
        return self.context.router_prefix

    @property
    def route_path(self) -> str:
        return f"/{self.prefix}/{self.route_base_name}"
