import os

from trellis.core.builders.renderers import DateTimeRenderer, DurationRenderer, RenderNode
from trellis.core.i18n import load_locale_dir
from trellis.core.modules.models import ModuleConfig
from .renderers import InitialsRenderer, WorkersRenderer
from .services import ProjectsService

manifest = ModuleConfig(
    module_name="Projects",
    router_prefix="projects",
    load_order=20,
    description="Projekte, Team und Zeitübersicht.",
    icon="folder",
)


def setup(ctx, router):
    # Werden von Users/Tasks befüllt, sobald die Module veröffentlicht sind (oder sofort per Replay)
    links = {}

    @ctx.subscribe("Users")
    def on_users(descriptor):
        links["users_view"] = descriptor.navigation["users"].view

    @ctx.subscribe("Tasks")
    def on_tasks(descriptor):
        links["tasks_view"] = descriptor.navigation["tasks"].view

    service = ProjectsService()
    crud = ctx.create_crud("projects.crud-title", "projects", service)
    navigation = crud.navigation

    crud.view.add_to_meta_properties("title_callback", lambda values: values.get("name"))
    crud.view.add_to_meta_properties("navigation", navigation)
    crud.new.add_to_meta_properties("permissions", "projects/create")
    crud.new.add_to_meta_properties("navigation", navigation)
    crud.edit.add_to_meta_properties("permissions", "projects/edit")
    crud.edit.add_to_meta_properties("navigation", navigation)

    grid = ctx.create_grid("projects.grid-title", "projects", service, {
        "with": ["users"],
        "with_count": ["tasks"],
    })
    grid.add_to_meta_properties("navigation", navigation)

    crud.view.add_field([
        {"key": "name", "label": "field.name"},
        {"key": "created_at", "label": "field.created_at", "render": DateTimeRenderer()},
        {"key": "updated_at", "label": "field.updated_at", "render": DateTimeRenderer()},
        {"key": "description", "label": "field.description"},
        {"key": "total_spent_time", "label": "field.total_spent", "render": DurationRenderer()},
        {
            "key": "workers",
            "label": "field.users",
            "render": WorkersRenderer(lambda: links.get("users_view"), lambda: links.get("tasks_view")),
        },
    ])

    fields_to_fill = [
        {"key": "id", "displayable": False},
        {"key": "name", "label": "field.name", "type": "input", "placeholder": "field.name", "required": True},
        {"key": "description", "label": "field.description", "type": "textarea",
         "placeholder": "field.description", "required": True},
        {"key": "important", "label": "field.important", "type": "checkbox",
         "tooltip_value": "tooltip.task_important", "default": False},
    ]
    crud.new.add_field(fields_to_fill)
    crud.edit.add_field(fields_to_fill)

    grid.add_column([
        {"title": "field.project", "key": "name"},
        {"title": "field.team", "key": "users", "render": InitialsRenderer()},
        {
            "title": "field.amount_of_tasks",
            "key": "tasks",
            "render": lambda row, c: RenderNode("span", c.tc("projects.amount_of_tasks", row.get("tasks_count") or 0)),
        },
    ])

    grid.add_filter([
        {"reference_key": "name", "filter_name": "filter.fields.project_name"},
    ])

    grid.add_action([
        {
            # Zugewiesene Projekte darf jeder sehen
            "title": "control.view",
            "icon": "visibility",
            "on_click": lambda r, row, builder: builder.on_view(row["item"]),
        },
        {
            "title": "control.edit",
            "icon": "edit",
            "on_click": lambda r, row, builder: builder.on_edit(row["item"]),
            "render_condition": lambda state, item: state.can("projects/edit", item.get("id")),
        },
        {
            "title": "control.delete",
            "icon": "delete",
            "action_type": "error",
            "on_click": lambda r, row, builder: builder.on_delete(row["item"]),
            "render_condition": lambda state, item: state.can("projects/remove", item.get("id")),
        },
    ])

    grid.add_page_controls([
        {
            "label": "control.create",
            "icon": "add",
            "type": "primary",
            "on_click": lambda r, row, builder: r.push(navigation.new),
            "render_condition": lambda state: state.can("projects/create"),
        },
    ])

    ctx.add_route(crud.get_router_config())
    ctx.add_route(grid.get_router_config())

    ctx.add_navbar_entry({"label": "navigation.projects", "to": grid.get_grid_route_name(), "icon": "folder"})
    ctx.add_localization_data(load_locale_dir(os.path.join(os.path.dirname(__file__), "locales")))
    return ctx
