import os
from contextvars import ContextVar
from typing import Any, Dict, Optional

import yaml

from trellis.core.config import DEFAULT_LOCALE, FALLBACK_LOCALE
from trellis.core.errors import RegistryFrozenError
from trellis.core.logger import get_logger

log = get_logger("I18n")


def _flatten(table: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat = {}
    for key, value in table.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(_flatten(value, full_key))
        else:
            flat[full_key] = value
    return flat


def load_locale_dir(directory: str) -> Dict[str, Dict[str, Any]]:
    """Liest alle <locale>.yaml Dateien eines Modulordners ein."""
    tables = {}
    if not os.path.isdir(directory):
        log.warning(f"⚠️ Locale-Verzeichnis nicht gefunden: {directory}")
        return tables

    for file_name in sorted(os.listdir(directory)):
        locale, ext = os.path.splitext(file_name)
        if ext not in (".yaml", ".yml"):
            continue
        with open(os.path.join(directory, file_name), "r", encoding="utf-8") as f:
            tables[locale] = yaml.safe_load(f) or {}
    return tables


# Sprache des aktuellen Page-Requests, gesetzt vom Layout aus der Session
_active_locale: ContextVar[Optional[str]] = ContextVar("trellis_locale", default=None)


def use_locale(locale: Optional[str]) -> None:
    _active_locale.set(locale)


class LocalizationStore:
    """
    Globale Übersetzungstabellen, geschlüsselt nach Locale.
    Module mergen ihre Tabellen beim Bootstrap hinein, danach ist der Store read-only.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE, fallback_locale: str = FALLBACK_LOCALE):
        self.locale = locale
        self.fallback_locale = fallback_locale
        self._tables: Dict[str, Dict[str, Any]] = {}
        self._frozen = False

    def merge(self, data: Dict[str, Dict[str, Any]], source: str = "?") -> int:
        """Merged {locale: table}. Kollisionen sind nur Warnungen, der letzte Schreiber gewinnt."""
        if self._frozen:
            raise RegistryFrozenError("LocalizationStore")

        collisions = 0
        for locale, table in data.items():
            target = self._tables.setdefault(locale, {})
            for key, value in _flatten(table or {}).items():
                if key in target and target[key] != value:
                    collisions += 1
                    log.warning(f"⚠️ [{source}] Übersetzung '{locale}:{key}' wird überschrieben")
                target[key] = value
        return collisions

    def freeze(self):
        self._frozen = True

    def _lookup(self, key: str, locale: Optional[str]):
        for loc in (locale or _active_locale.get() or self.locale, self.fallback_locale):
            table = self._tables.get(loc, {})
            if key in table:
                return table[key]
        return None

    def t(self, key: str, locale: Optional[str] = None, **params) -> str:
        value = self._lookup(key, locale)
        if value is None:
            # Unbekannte Keys zeigen wir roh an, wie vue-i18n
            return key
        text = str(value)
        for name, param in params.items():
            text = text.replace("{" + name + "}", str(param))
        return text

    def tc(self, key: str, count: int, locale: Optional[str] = None, **params) -> str:
        """Pluralisierung: 'eine Aufgabe | {count} Aufgaben' bzw. 'keine | eine | {count}'."""
        value = self._lookup(key, locale)
        if value is None:
            return key
        forms = [form.strip() for form in str(value).split("|")]
        if len(forms) == 3:
            text = forms[min(count, 2)]
        elif len(forms) == 2:
            text = forms[0] if count == 1 else forms[1]
        else:
            text = forms[0]
        params.setdefault("count", count)
        for name, param in params.items():
            text = text.replace("{" + name + "}", str(param))
        return text
