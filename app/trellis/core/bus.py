from typing import Any, Callable, Dict, List, Optional

from trellis.core.errors import DuplicatePublishError, UnresolvedSubscriptionError
from trellis.core.logger import get_logger

Callback = Callable[[Any], None]


class Subscription:
    __slots__ = ("module_name", "callback", "fired")

    def __init__(self, module_name: str, callback: Callback):
        self.module_name = module_name
        self.callback = callback
        self.fired = False

    def fire(self, descriptor):
        if self.fired:
            return
        self.fired = True
        self.callback(descriptor)


class _Slot:
    """Ein Eintrag pro Modulname: Deskriptor (oder noch nichts) plus wartende Abos."""
    __slots__ = ("descriptor", "published", "subscribers")

    def __init__(self):
        self.descriptor = None
        self.published = False
        self.subscribers: List[Subscription] = []


class ModuleInterceptor:
    """
    Publish-once / Multi-Subscriber Registry, geschlüsselt nach Modulnamen.

    Abos VOR der Veröffentlichung feuern genau einmal beim publish().
    Abos NACH der Veröffentlichung feuern sofort mit dem gecachten Deskriptor (Replay).
    """

    def __init__(self):
        self._slots: Dict[str, _Slot] = {}
        self.log = get_logger("TrellisBus")

    def _slot(self, module_name: str) -> _Slot:
        if module_name not in self._slots:
            self._slots[module_name] = _Slot()
        return self._slots[module_name]

    def subscribe(self, module_name: str, callback: Optional[Callback] = None):
        """Direkt aufrufbar oder als @interceptor.subscribe('Projects') Decorator."""
        def decorator(cb):
            slot = self._slot(module_name)
            sub = Subscription(module_name, cb)
            slot.subscribers.append(sub)
            if slot.published:
                self.log.debug(f"🔁 Replay für '{module_name}' an {getattr(cb, '__name__', cb)}")
                sub.fire(slot.descriptor)
            else:
                self.log.debug(f"👂 Neuer Subscriber wartet auf: {module_name} ({getattr(cb, '__name__', cb)})")
            return cb

        if callback is not None:
            return decorator(callback)
        return decorator

    # Kurzform wie im Frontend-Loader
    on = subscribe

    def publish(self, module_name: str, descriptor) -> None:
        slot = self._slot(module_name)
        if slot.published:
            self.log.error(f"💥 Modul '{module_name}' wurde doppelt veröffentlicht!")
            raise DuplicatePublishError(module_name)

        # Erst cachen, dann feuern: ein Callback, der selbst abonniert, bekommt so direkt den Replay
        slot.descriptor = descriptor
        slot.published = True

        waiting = [s for s in slot.subscribers if not s.fired]
        self.log.info(f"📡 [PUBLISH] {module_name} | {len(waiting)} wartende Subscriber")
        for sub in waiting:
            sub.fire(descriptor)

    def is_published(self, module_name: str) -> bool:
        slot = self._slots.get(module_name)
        return bool(slot and slot.published)

    def get(self, module_name: str):
        slot = self._slots.get(module_name)
        if slot is None or not slot.published:
            return None
        return slot.descriptor

    def unresolved(self) -> Dict[str, int]:
        """Modulnamen mit wartenden Abos, die nie veröffentlicht wurden."""
        return {
            name: len(slot.subscribers)
            for name, slot in self._slots.items()
            if not slot.published and slot.subscribers
        }

    def report_unresolved(self) -> List[UnresolvedSubscriptionError]:
        diagnostics = []
        for name, waiting in self.unresolved().items():
            diag = UnresolvedSubscriptionError(name, waiting)
            self.log.warning(f"⚠️ {diag}")
            diagnostics.append(diag)
        return diagnostics
