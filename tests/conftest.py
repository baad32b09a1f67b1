import pytest

from trellis.core.bus import ModuleInterceptor
from trellis.core.modules.context import ModuleContext
from trellis.core.modules.models import ModuleConfig
from trellis.core.state import UserState


class FakeService:
    """Resource-Service ohne HTTP: merkt sich jeden Aufruf."""

    def __init__(self, rows=None, item=None):
        self.rows = list(rows or [])
        self.item = item or {}
        self.list_calls = []
        self.item_calls = []
        self.saved = []
        self.deleted = []

    async def get_all(self, filters=None):
        self.list_calls.append(filters)
        return {"data": list(self.rows), "total": len(self.rows)}

    async def get_item(self, item_id, filters=None):
        self.item_calls.append((item_id, filters))
        return dict(self.item, id=item_id)

    async def save(self, data):
        self.saved.append(dict(data))
        return {"data": dict(data, id=data.get("id") or 99)}

    async def delete_item(self, item_id):
        self.deleted.append(item_id)
        self.rows = [r for r in self.rows if r.get("id") != item_id]


@pytest.fixture()
def service():
    return FakeService(rows=[{"id": 1, "name": "Alpha"}, {"id": 2, "name": "Beta"}])


@pytest.fixture()
def interceptor():
    return ModuleInterceptor()


@pytest.fixture()
def make_context(interceptor):
    def _make(module_name="Projects", prefix="projects", load_order=20):
        config = ModuleConfig(module_name=module_name, router_prefix=prefix, load_order=load_order)
        return ModuleContext(config, interceptor)
    return _make


@pytest.fixture()
def admin():
    return UserState(user={"id": 1, "full_name": "Ada Admin", "is_admin": True})


@pytest.fixture()
def member():
    return UserState(
        user={"id": 7, "full_name": "Max Member"},
        permissions={"projects/edit": [1], "tasks/create": [1]},
    )
