import importlib
import pkgutil
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from trellis.core.bus import ModuleInterceptor
from trellis.core.errors import DuplicateModuleError, DuplicatePublishError, ModuleInitError, RegistryFrozenError
from trellis.core.logger import get_logger
from trellis.core.router import Router
from trellis.ui.registry import UIRegistry
from .context import ModuleContext
from .models import ModuleConfig, ModuleDescriptor

log = get_logger("ModuleManager")


class _PendingModule:
    __slots__ = ("config", "initializer", "seq")

    def __init__(self, config: ModuleConfig, initializer: Callable, seq: int):
        self.config = config
        self.initializer = initializer
        self.seq = seq


class ModuleManager:
    def __init__(
        self,
        interceptor: Optional[ModuleInterceptor] = None,
        registry: Optional[UIRegistry] = None,
        router: Optional[Router] = None,
    ):
        self.interceptor = interceptor or ModuleInterceptor()
        self.registry = registry or UIRegistry()
        self.router = router or Router(self.registry)
        self._pending: List[_PendingModule] = []
        # Erfolgreich geladene Module: { "Projects": ModuleDescriptor }
        self.descriptors: Dict[str, ModuleDescriptor] = {}
        self._ran = False

    def register(self, config, initializer: Callable) -> ModuleConfig:
        if self._ran:
            raise RegistryFrozenError("ModuleManager")
        if isinstance(config, dict):
            config = ModuleConfig(**config)

        if any(p.config.module_name == config.module_name for p in self._pending):
            log.error(f"💥 ID-Konflikt: Modul '{config.module_name}' ist bereits registriert!")
            raise DuplicateModuleError(config.module_name)

        self._pending.append(_PendingModule(config, initializer, len(self._pending)))
        log.debug(f"📥 Modul vorgemerkt: {config.module_name} (load_order={config.load_order})")
        return config

    def discover(self, package_name: str) -> int:
        """Scant ein Paket und registriert jedes Untermodul mit `manifest` und `setup`."""
        package = importlib.import_module(package_name)
        log.debug(f"📂 Scanne Paket: {package_name}")

        found = 0
        for _, name, _ in pkgutil.iter_modules(package.__path__):
            full_module_name = f"{package_name}.{name}"
            module = importlib.import_module(full_module_name)

            if not hasattr(module, "manifest") or not hasattr(module, "setup"):
                log.debug(f"Überspringe {full_module_name} (Kein Manifest oder Setup gefunden)")
                continue

            try:
                raw_manifest = module.manifest
                if isinstance(raw_manifest, dict):
                    manifest = ModuleConfig(**raw_manifest)
                elif isinstance(raw_manifest, ModuleConfig):
                    manifest = raw_manifest
                else:
                    raise ValueError("Manifest muss ein Dictionary oder ModuleConfig-Objekt sein.")
            except (ValidationError, ValueError) as e:
                log.error(f"❌ Manifest-Fehler in {full_module_name}: {e}")
                continue

            self.register(manifest, module.setup)
            found += 1
        return found

    def _ordered(self) -> List[_PendingModule]:
        # Aufsteigend nach load_order, bei Gleichstand gilt die Registrierungs-Reihenfolge
        return sorted(self._pending, key=lambda p: (p.config.load_order, p.seq))

    def run(self, context_factory: Optional[Callable[..., ModuleContext]] = None) -> UIRegistry:
        """Lädt alle Module streng sequentiell. Ein Fehler bricht den Bootstrap ab."""
        if self._ran:
            raise RegistryFrozenError("ModuleManager")
        self._ran = True
        factory = context_factory or ModuleContext

        log.info("🚀 Starte Module Loader...")
        for pending in self._ordered():
            config = pending.config
            ctx = factory(config, self.interceptor)

            try:
                pending.initializer(ctx, self.router)
            except Exception as e:
                # Kein Teil-Betrieb: bereits geladene Module bleiben, der Rest wird nicht mehr geladen
                log.error(f"💥 Fataler Fehler beim Laden von {config.module_name}: {e}", exc_info=True)
                raise ModuleInitError(config.module_name, e) from e

            for route in ctx.routes:
                route.seal()

            descriptor = ModuleDescriptor(
                name=config.module_name,
                route_prefix=config.router_prefix,
                load_order=config.load_order,
                routes=tuple(ctx.routes),
                navigation=dict(ctx.navigation),
            )
            self.descriptors[config.module_name] = descriptor

            try:
                self.interceptor.publish(config.module_name, descriptor)
            except DuplicatePublishError:
                raise
            except Exception as e:
                log.error(f"💥 Subscriber von {config.module_name} ist fehlgeschlagen: {e}", exc_info=True)
                raise ModuleInitError(config.module_name, e) from e

            self.registry.merge_module(ctx)
            log.info(f"🧩 Modul geladen: {config.module_name} ({len(ctx.routes)} Routen)")

        self.interceptor.report_unresolved()
        self.registry.freeze()
        log.info(f"✅ Boot-Sequenz abgeschlossen: {len(self.descriptors)} Module geladen.")
        return self.registry

    def get_descriptors(self) -> List[ModuleDescriptor]:
        return [self.descriptors[p.config.module_name] for p in self._ordered() if p.config.module_name in self.descriptors]
