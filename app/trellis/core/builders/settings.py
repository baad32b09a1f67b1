from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trellis.core.builders.base import evaluate_predicate, maybe_await
from trellis.core.logger import get_logger
from trellis.core.modules.models import FieldDescriptor, RouteConfig, coerce_list

log = get_logger("Settings")


class SettingsSection(BaseModel):
    """
    Eine Sektion der Einstellungs-Seite (z.B. 'Allgemein' der Firma).

    access_check ist OPTIONAL (Standard: erlaubt). Er darf async sein und wird erst
    beim Betreten der Route ausgewertet, nie beim Bootstrap.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="Routen-Name, z.B. 'Settings.company.general'")
    path: str = Field(..., description="z.B. '/company/general'")
    label: str
    scope: str = "company"
    order: int = 0
    service: Any = None
    fields: List[FieldDescriptor] = Field(default_factory=list)
    access_check: Optional[Callable[..., Any]] = None

    @field_validator("fields", mode="before")
    @classmethod
    def _coerce_fields(cls, value):
        return coerce_list(FieldDescriptor, value or [])

    async def is_accessible(self, state) -> bool:
        if self.access_check is None:
            return True
        try:
            return bool(await maybe_await(self.access_check(state)))
        except Exception as e:
            log.warning(f"⚠️ access_check für '{self.name}' fehlgeschlagen, Sektion bleibt gesperrt: {e}")
            return False

    def visible_fields(self, state) -> List[FieldDescriptor]:
        return [
            f for f in self.fields
            if evaluate_predicate(f.displayable, state, log=log, what=f"displayable({f.key})")
        ]

    def to_route(self, prefix: str) -> RouteConfig:
        return RouteConfig(
            name=self.name,
            path=f"/{prefix}{self.path}",
            component="settings.section",
            meta={"auth": True, "label": self.label, "service": self.service, "section": self},
        )


async def accessible_sections(sections: List[SettingsSection], state, scope: Optional[str] = None) -> List[SettingsSection]:
    """Lazy ausgewertete Sektionen, sortiert nach order."""
    result = []
    for section in sorted(sections, key=lambda s: s.order):
        if scope and section.scope != scope:
            continue
        if await section.is_accessible(state):
            result.append(section)
    return result


async def grouped_sections(sections: List[SettingsSection], state, scope: Optional[str] = None) -> Dict[str, List[SettingsSection]]:
    """Für die Übersichtsseite: erreichbare Sektionen nach scope gruppiert ('company', 'user', ...)."""
    groups: Dict[str, List[SettingsSection]] = {}
    for section in await accessible_sections(sections, state, scope):
        groups.setdefault(section.scope, []).append(section)
    return groups
