"""Tests for the shared router handle and the composition registry."""
import pytest

from trellis.core.errors import UnknownRouteError
from trellis.core.modules.models import RouteConfig
from trellis.core.router import Router
from trellis.core.state import UserState
from trellis.ui.registry import UIRegistry


@pytest.fixture()
def registry():
    registry = UIRegistry()
    registry.add_routes([
        RouteConfig(name="tasks.crud.tasks", path="/tasks/tasks", component="grid"),
        RouteConfig(name="tasks.crud.tasks.view", path="/tasks/tasks/view/{id}", component="crud.view"),
        RouteConfig(name="tasks.crud.tasks.new", path="/tasks/tasks/new", component="crud.new",
                    meta={"permissions": "tasks/create"}),
    ], source="Tasks")
    return registry


def test_resolve_and_push(registry):
    pushed = []
    router = Router(registry, navigate=pushed.append)

    assert router.resolve("tasks.crud.tasks.view", {"id": 3}) == "/tasks/tasks/view/3"
    router.push("tasks.crud.tasks", query="active=1")
    assert pushed == ["/tasks/tasks?active=1"]


def test_unknown_route_name_raises(registry):
    with pytest.raises(UnknownRouteError):
        Router(registry, navigate=lambda p: p).resolve("tasks.crud.missing")


def test_permission_guard(registry, admin, member):
    router = Router(registry, navigate=lambda p: p)
    nobody = UserState(user={"id": 3})

    assert router.can_enter("tasks.crud.tasks", nobody)
    assert router.can_enter("tasks.crud.tasks.new", member)
    assert router.can_enter("tasks.crud.tasks.new", admin)
    assert not router.can_enter("tasks.crud.tasks.new", nobody)
    assert not router.can_enter("tasks.crud.unknown", admin)


def test_duplicate_route_names_are_replaced(registry):
    registry.add_routes([RouteConfig(name="tasks.crud.tasks", path="/tasks/all", component="grid")], source="Other")
    assert [r["path"] for r in registry.route_table()].count("/tasks/all") == 1
    assert len(registry.route_table()) == 3


def test_route_table_is_flat(registry):
    registry.freeze()
    entry = registry.route_table()[0]
    assert set(entry) == {"name", "path", "component", "meta"}
