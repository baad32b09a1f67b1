"""Tests for the CRUD builder."""
import asyncio

import pytest

from trellis.core.builders.renderers import BooleanRenderer, RenderContext
from trellis.core.errors import RouteSealedError


def test_route_names_are_predictable_and_distinct(make_context, service):
    crud = make_context().create_crud("projects.crud-title", "projects", service)

    assert crud.view.get_view_route_name() == "projects.crud.projects.view"
    assert crud.new.get_new_route_name() == "projects.crud.projects.new"
    assert crud.edit.get_edit_route_name() == "projects.crud.projects.edit"
    assert len({crud.view.route_name, crud.new.route_name, crud.edit.route_name}) == 3


def test_route_names_are_stable_across_builds(make_context, service):
    first = make_context().create_crud("t", "projects", service)
    second = make_context().create_crud("t", "projects", service)
    assert first.navigation == second.navigation


def test_router_config_paths_and_meta(make_context, service):
    crud = make_context().create_crud("projects.crud-title", "projects", service, {"with": "users"})
    view, new, edit = crud.get_router_config()

    assert view.path == "/projects/projects/view/{id}"
    assert new.path == "/projects/projects/new"
    assert edit.path == "/projects/projects/edit/{id}"
    assert [r.component for r in (view, new, edit)] == ["crud.view", "crud.new", "crud.edit"]
    assert view.meta["auth"] is True
    assert view.meta["service"] is service
    assert new.meta["crud_type"] == "new"
    assert edit.meta["with"] == "users"


def test_meta_properties_are_attached_per_route(make_context, service):
    crud = make_context().create_crud("t", "projects", service)
    crud.new.add_to_meta_properties("permissions", "projects/create")
    crud.view.add_to_meta_properties("navigation", crud.navigation, crud.view.get_router_config())

    assert crud.new.get_router_config().meta["permissions"] == "projects/create"
    assert "permissions" not in crud.edit.get_router_config().meta
    assert crud.view.get_router_config().meta["navigation"].new == "projects.crud.projects.new"


def test_sealed_route_rejects_meta_changes(make_context, service):
    crud = make_context().create_crud("t", "projects", service)
    route = crud.edit.get_router_config()
    route.seal()

    with pytest.raises(RouteSealedError):
        crud.edit.add_to_meta_properties("permissions", "projects/edit")
    with pytest.raises(TypeError):
        route.meta["permissions"] = "x"


def test_fields_accept_dicts_and_lists(make_context, service):
    crud = make_context().create_crud("t", "projects", service)
    crud.view.add_field({"key": "name", "label": "field.name"})
    crud.view.add_field([{"key": "active", "render": BooleanRenderer()}, {"key": "id", "displayable": False}])

    assert [f.key for f in crud.view.fields] == ["name", "active", "id"]
    assert crud.new.fields == []


def test_visible_fields_reevaluate_predicates(make_context, service, admin, member):
    crud = make_context().create_crud("t", "projects", service)
    crud.edit.add_field([
        {"key": "id", "displayable": False},
        {"key": "name"},
        {"key": "budget", "displayable": lambda state: state.is_admin},
        {"key": "broken", "displayable": lambda state: state.missing_attribute},
    ])

    assert [f.key for f in crud.edit.visible_fields(admin)] == ["name", "budget"]
    assert [f.key for f in crud.edit.visible_fields(member)] == ["name"]


def test_initial_values_prefer_defaults_from_state(make_context, service, member):
    crud = make_context().create_crud("t", "tasks", service)
    crud.new.add_field([
        {"key": "user_id", "default": lambda state: state.user.get("id")},
        {"key": "priority_id", "default": 2, "initial_value": 1},
        {"key": "active", "initial_value": True},
        {"key": "name"},
    ])

    assert crud.new.initial_values(member) == {"user_id": 7, "priority_id": 2, "active": True}


def test_view_title_uses_title_callback(make_context, service):
    crud = make_context().create_crud("projects.crud-title", "projects", service)
    crud.view.add_to_meta_properties("title_callback", lambda values: values["name"])
    ctx = RenderContext()

    assert crud.view.page_title({"name": "Website"}, ctx) == "Website"
    assert crud.view.page_title({}, ctx) == "projects.crud-title"


def test_render_field_defaults_to_plain_text(make_context, service, admin):
    crud = make_context().create_crud("t", "projects", service)
    crud.view.add_field([{"key": "name"}, {"key": "active", "render": BooleanRenderer()}])
    name, active = crud.view.fields
    ctx = RenderContext(state=admin, values={"name": "Website", "active": True})

    assert crud.view.render_field(name, ctx) == "Website"
    assert crud.view.render_field(active, ctx).text == "control.yes"


def test_load_item_passes_relations_only_when_configured(make_context, service):
    plain = make_context().create_crud("t", "projects", service)
    related = make_context("Tasks", "tasks").create_crud("t", "tasks", service, {"with": "project"})

    asyncio.run(plain.view.load_item(5))
    asyncio.run(related.view.load_item(6))
    assert service.item_calls == [(5, None), (6, {"with": "project"})]


def test_save_goes_through_service(make_context, service):
    crud = make_context().create_crud("t", "projects", service)
    result = asyncio.run(crud.new.save({"name": "New"}))

    assert service.saved == [{"name": "New"}]
    assert result["data"]["id"] == 99
