from typing import Iterable, Optional


class TrellisError(Exception):
    """Basisklasse für alle Fehler der Modul-Schicht."""


class DuplicatePublishError(TrellisError):
    def __init__(self, module_name: str):
        self.module_name = module_name
        super().__init__(f"Modul '{module_name}' wurde bereits veröffentlicht.")


class UnresolvedSubscriptionError(TrellisError):
    """
    Nur Diagnose: ein Abo auf ein Modul, das nie geladen wurde.
    Wird geloggt, nie geworfen (manche Module sind optional).
    """
    def __init__(self, module_name: str, waiting: int):
        self.module_name = module_name
        self.waiting = waiting
        super().__init__(
            f"{waiting} Abo(s) auf Modul '{module_name}' wurden nie bedient (Modul nicht geladen)."
        )


class InvalidResourceServiceError(TrellisError):
    def __init__(self, module_name: str, builder: str, missing: Iterable[str]):
        self.module_name = module_name
        self.builder = builder
        self.missing = tuple(missing)
        super().__init__(
            f"[{module_name}] {builder}: Resource-Service unvollständig, es fehlt: {', '.join(self.missing)}"
        )


class DuplicateModuleError(TrellisError):
    def __init__(self, module_name: str):
        self.module_name = module_name
        super().__init__(f"ID-Konflikt: Modul '{module_name}' ist bereits registriert!")


class ModuleInitError(TrellisError):
    def __init__(self, module_name: str, cause: Optional[BaseException] = None):
        self.module_name = module_name
        self.cause = cause
        super().__init__(f"Initialisierung von Modul '{module_name}' fehlgeschlagen: {cause}")


class RouteSealedError(TrellisError):
    def __init__(self, route_name: str):
        self.route_name = route_name
        super().__init__(f"Route '{route_name}' ist versiegelt und kann nicht mehr geändert werden.")


class RegistryFrozenError(TrellisError):
    def __init__(self, what: str = "Registry"):
        super().__init__(f"{what} ist eingefroren, Bootstrap ist bereits abgeschlossen.")


class UnknownRouteError(TrellisError):
    def __init__(self, route_name: str):
        self.route_name = route_name
        super().__init__(f"Unbekannte Route: '{route_name}'")
