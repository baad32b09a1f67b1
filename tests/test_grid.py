"""Tests for the grid builder and its runtime controller."""
import asyncio

import pytest

from trellis.core.builders.grid import GridController, extract_rows, resolve_path
from trellis.core.builders.renderers import RenderContext, RenderNode
from trellis.core.errors import UnknownRouteError
from trellis.core.router import Router
from trellis.ui.registry import UIRegistry


@pytest.fixture()
def grid(make_context, service):
    ctx = make_context("Tasks", "tasks")
    grid = ctx.create_grid("tasks.grid-title", "tasks", service, {"with": "project", "is_active": True})
    grid.add_filter([
        {"reference_key": "task_name", "filter_name": "filter.fields.task_name"},
        {"reference_key": "project.name", "filter_name": "filter.fields.project_name"},
    ])
    grid.add_filter_field([
        {"key": "project_id", "label": "tasks.projects"},
        {
            "key": "active",
            "label": "tasks.status",
            "save_to_query": True,
            "field_options": {"type": "select", "options": [{"value": "1", "label": "open"}]},
        },
        {"key": "tags", "label": "tags", "save_to_query": True, "field_options": {"multiple": True}},
    ])
    return grid


def test_grid_route_config(grid, service):
    route = grid.get_router_config()
    assert grid.get_grid_route_name() == "tasks.crud.tasks"
    assert route.path == "/tasks/tasks"
    assert route.component == "grid"
    assert route.meta["service"] is service
    assert route.meta["grid_data"]["title"] == "tasks.grid-title"
    assert route.meta["static_filters"] == {"is_active": True}
    assert route.meta["relations"] == {"with": "project"}


def test_single_filter_object_for_each_load(grid, service):
    controller = GridController(grid.get_router_config(), {"active": ["1"]})
    controller.set_filter("project_id", 4)
    controller.set_search("  login ")

    asyncio.run(controller.load(2))

    assert len(service.list_calls) == 1
    assert service.list_calls[0] == {
        "is_active": True,
        "with": "project",
        "project_id": 4,
        "active": "1",
        "search": {"query": "login", "fields": ["task_name", "project.name"]},
        "page": 2,
    }
    assert [row["id"] for row in controller.items] == [1, 2]
    assert controller.total == 2


def test_empty_filter_values_are_dropped(grid):
    controller = GridController(grid.get_router_config())
    controller.set_filter("project_id", 4)
    controller.set_filter("project_id", "")
    controller.set_filter("unknown", 1)

    assert controller.compose_filters() == {"is_active": True, "with": "project"}


def test_setting_a_filter_resets_the_page(grid):
    controller = GridController(grid.get_router_config())
    controller.page = 3
    controller.set_filter("project_id", 4)
    assert controller.page == 1


def test_saved_query_filters_survive_a_round_trip(grid):
    controller = GridController(grid.get_router_config())
    controller.set_filter("active", 1)
    controller.set_filter("tags", ["a", "b"])
    controller.set_filter("project_id", 9)

    query = controller.query_string()
    restored = GridController.from_query_string(grid.get_router_config(), "?" + query)

    assert controller.to_query() == {"active": "1", "tags": ["a", "b"]}
    assert restored.to_query() == controller.to_query()
    assert restored.compose_filters(1) == {
        "is_active": True, "with": "project", "active": "1", "tags": ["a", "b"], "page": 1,
    }


def test_render_conditions_are_evaluated_per_row(grid, admin, member):
    grid.add_action([
        {"title": "control.view"},
        {"title": "control.edit", "render_condition": lambda state, item: state.can("projects/edit", item["id"])},
        {"title": "control.broken", "render_condition": lambda state, item: item["missing"]},
    ])
    controller = GridController(grid.get_router_config())

    assert [a.title for a in controller.visible_actions(member, {"id": 1})] == ["control.view", "control.edit"]
    assert [a.title for a in controller.visible_actions(member, {"id": 2})] == ["control.view"]
    assert [a.title for a in controller.visible_actions(admin, {"id": 2})] == ["control.view", "control.edit"]


def test_render_conditions_are_not_cached(grid):
    allowed = {"value": True}
    grid.add_action({"title": "control.edit", "render_condition": lambda state, item: allowed["value"]})
    controller = GridController(grid.get_router_config())

    assert len(controller.visible_actions(None, {"id": 1})) == 1
    allowed["value"] = False
    assert controller.visible_actions(None, {"id": 1}) == []


def test_async_render_condition_counts_as_hidden(grid):
    async def check(state, item):
        return True

    grid.add_action({"title": "control.edit", "render_condition": check})
    controller = GridController(grid.get_router_config())
    assert controller.visible_actions(None, {"id": 1}) == []


def test_page_controls_see_only_the_state(grid, member):
    grid.add_page_controls([
        {"label": "control.create", "render_condition": lambda state: state.can_in_any_project("tasks/create")},
        {"label": "control.import", "render_condition": lambda state: state.is_admin},
    ])
    controller = GridController(grid.get_router_config())
    assert [c.title for c in controller.visible_page_controls(member)] == ["control.create"]


def _wired_controller(grid, service):
    crud = grid.context.create_crud("tasks.crud-title", "tasks", service)
    grid.add_to_meta_properties("navigation", crud.navigation)
    registry = UIRegistry()
    registry.add_routes(crud.get_router_config() + [grid.get_router_config()])
    pushed = []
    return GridController(grid.get_router_config()), Router(registry, navigate=pushed.append), pushed


def test_delete_calls_service_once_per_click(grid, service):
    grid.add_action({"title": "control.delete", "on_click": lambda r, row, builder: builder.on_delete(row["item"])})
    controller, router, _ = _wired_controller(grid, service)
    asyncio.run(controller.load())
    delete = grid.grid_data["actions"][0]

    asyncio.run(controller.trigger(delete, router, {"id": 1}))

    assert service.deleted == [1]
    assert [row["id"] for row in controller.items] == [2]
    # Laden vor dem Klick + Neuladen nach dem Löschen
    assert len(service.list_calls) == 2


def test_view_and_edit_navigate_by_route_name(grid, service):
    grid.add_action([
        {"title": "control.view", "on_click": lambda r, row, builder: builder.on_view(row["item"])},
        {"title": "control.edit", "on_click": lambda r, row, builder: builder.on_edit(row["item"])},
    ])
    controller, router, pushed = _wired_controller(grid, service)
    view, edit = grid.grid_data["actions"]

    asyncio.run(controller.trigger(view, router, {"id": 5}))
    asyncio.run(controller.trigger(edit, router, {"id": 5}))
    assert pushed == ["/tasks/tasks/view/5", "/tasks/tasks/edit/5"]


def test_navigation_is_required_for_default_handlers(grid):
    controller = GridController(grid.get_router_config())
    with pytest.raises(UnknownRouteError):
        controller.navigation


def test_service_errors_reach_the_caller(grid):
    class FailingService:
        async def get_all(self, filters=None):
            raise ConnectionError("offline")

    route = grid.get_router_config()
    route.meta["service"] = FailingService()
    controller = GridController(route)
    with pytest.raises(ConnectionError):
        asyncio.run(controller.load())


def test_render_cell_with_path_and_custom_renderer(grid):
    grid.add_column([
        {"title": "field.project", "key": "project.name"},
        {"title": "field.task", "key": "task_name", "render": lambda row, ctx: RenderNode("span", row["task_name"].upper())},
    ])
    controller = GridController(grid.get_router_config())
    project, task = grid.grid_data["columns"]
    row = {"task_name": "login", "project": {"name": "Website"}}

    assert controller.render_cell(project, row, RenderContext()) == "Website"
    assert controller.render_cell(task, row, RenderContext()).text == "LOGIN"


def test_row_helpers():
    assert resolve_path({"project": None}, "project.name") is None
    assert extract_rows({"data": [{"id": 1}]}) == [{"id": 1}]
    assert extract_rows([{"id": 2}]) == [{"id": 2}]
    assert extract_rows(None) == []
