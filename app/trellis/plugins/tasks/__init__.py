import os

from trellis.core.builders.renderers import (
    BooleanRenderer,
    DateRenderer,
    DurationRenderer,
    HtmlRenderer,
    RenderNode,
    RouteLinkRenderer,
    TranslatedRenderer,
    UrlRenderer,
)
from trellis.core.i18n import load_locale_dir
from trellis.core.modules.models import ModuleConfig
from trellis.plugins.projects.renderers import WorkersRenderer
from trellis.plugins.projects.services import ProjectsService
from trellis.plugins.users.services import UsersService
from .services import TasksService

manifest = ModuleConfig(
    module_name="Tasks",
    router_prefix="tasks",
    load_order=20,
    description="Aufgaben inklusive Filter nach Projekt, User und Status.",
    icon="task_alt",
)

RELATIONS = "priority, project, user"

PRIORITIES = [
    {"value": 1, "label": "tasks.priority.low"},
    {"value": 2, "label": "tasks.priority.normal"},
    {"value": 3, "label": "tasks.priority.high"},
]


def _from_integration(item) -> bool:
    # Tasks aus Integrationen (Jira, GitLab, ...) werden dort gepflegt
    return "integration" in item


def _task_cell(row, ctx):
    classes = "tasks-grid__task" if row.get("active") else "tasks-grid__task trellis-grid__inactive"
    return RenderNode("span", row.get("task_name"), {"class": classes, "title": row.get("task_name")})


def _project_cell(row, ctx):
    name = (row.get("project") or {}).get("name", "")
    return RenderNode("span", name, {"class": "tasks-grid__project", "title": name})


def _user_cell(row, ctx):
    user = row.get("user")
    if not user:
        return None
    return RenderNode("span", user.get("full_name"), {"title": user.get("full_name")})


def setup(ctx, router):
    links = {}

    @ctx.subscribe("Users")
    def on_users(descriptor):
        links["users_view"] = descriptor.navigation["users"].view

    @ctx.subscribe("Projects")
    def on_projects(descriptor):
        links["projects_view"] = descriptor.navigation["projects"].view

    service = TasksService()
    crud = ctx.create_crud("tasks.crud-title", "tasks", service, {"with": RELATIONS})
    navigation = crud.navigation

    crud.view.add_to_meta_properties("title_callback", lambda values: values.get("task_name"))
    crud.view.add_to_meta_properties("navigation", navigation)
    crud.new.add_to_meta_properties("permissions", "tasks/create")
    crud.new.add_to_meta_properties("navigation", navigation)
    crud.edit.add_to_meta_properties("permissions", "tasks/edit")
    crud.edit.add_to_meta_properties("navigation", navigation)

    grid = ctx.create_grid("tasks.grid-title", "tasks", service, {"with": RELATIONS, "is_active": True})
    grid.add_to_meta_properties("navigation", navigation)

    crud.view.add_field([
        {"key": "active", "label": "field.active", "render": BooleanRenderer()},
        {"key": "project", "label": "field.project", "render": RouteLinkRenderer(lambda: links.get("projects_view"))},
        {"key": "priority", "label": "field.priority", "render": TranslatedRenderer("tasks.priority")},
        {
            "key": "user",
            "label": "field.user",
            "render": RouteLinkRenderer(lambda: links.get("users_view"), label_key="full_name", admin_only=True),
        },
        {"key": "description", "label": "field.description", "render": HtmlRenderer()},
        {"key": "url", "label": "field.source", "render": UrlRenderer("tasks.source.internal")},
        {"key": "created_at", "label": "field.created_at", "render": DateRenderer()},
        {"key": "total_spent_time", "label": "field.total_spent", "render": DurationRenderer()},
        {
            "key": "workers",
            "label": "field.users",
            "render": WorkersRenderer(lambda: links.get("users_view"), admin_only=True),
        },
    ])

    fields_to_fill = [
        {"key": "id", "displayable": False},
        {"key": "project_id", "label": "field.project", "type": "resource-select",
         "service": ProjectsService(), "required": True},
        {"key": "task_name", "label": "field.task_name", "type": "input", "placeholder": "field.name", "required": True},
        {"key": "description", "label": "field.description", "type": "textarea", "placeholder": "field.description"},
        {"key": "important", "label": "field.important", "type": "checkbox",
         "tooltip_value": "tooltip.task_important", "initial_value": False},
        {"key": "user_id", "label": "field.user", "type": "resource-select", "service": UsersService(),
         "required": True, "default": lambda state: state.user.get("id")},
        {"key": "priority_id", "label": "field.priority", "type": "select", "options": PRIORITIES,
         "initial_value": 2, "default": 2, "required": True},
        {"key": "active", "label": "field.active", "type": "checkbox", "initial_value": True, "default": True},
    ]
    crud.new.add_field(fields_to_fill)
    crud.edit.add_field(fields_to_fill)

    grid.add_column([
        {"title": "field.task", "key": "task_name", "render": _task_cell},
        {"title": "field.project", "key": "project", "render": _project_cell},
        {"title": "field.user", "key": "user", "render": _user_cell},
    ])

    grid.add_filter([
        {"reference_key": "task_name", "filter_name": "filter.fields.task_name"},
        {"reference_key": "project.name", "filter_name": "filter.fields.project_name"},
    ])

    grid.add_filter_field([
        {
            "key": "project_id",
            "label": "tasks.projects",
            "field_options": {"type": "resource-select", "service": ProjectsService()},
        },
        {
            "key": "user_id",
            "label": "tasks.users",
            "field_options": {"type": "resource-select", "service": UsersService()},
        },
        {
            "key": "active",
            "label": "tasks.status",
            "placeholder": "tasks.statuses.any",
            "save_to_query": True,
            "field_options": {
                "type": "select",
                "options": [
                    {"value": "", "label": "tasks.statuses.any"},
                    {"value": "1", "label": "tasks.statuses.open"},
                    {"value": "0", "label": "tasks.statuses.closed"},
                ],
            },
        },
    ])

    grid.add_action([
        {
            # Zugewiesene Tasks darf jeder sehen
            "title": "control.view",
            "icon": "visibility",
            "on_click": lambda r, row, builder: builder.on_view(row["item"]),
        },
        {
            "title": "control.edit",
            "icon": "edit",
            "on_click": lambda r, row, builder: builder.on_edit(row["item"]),
            "render_condition": lambda state, item: (
                state.can("tasks/edit", item.get("project_id")) and not _from_integration(item)
            ),
        },
        {
            "title": "control.delete",
            "icon": "delete",
            "action_type": "error",
            "on_click": lambda r, row, builder: builder.on_delete(row["item"]),
            "render_condition": lambda state, item: (
                state.can("tasks/remove", item.get("project_id")) and not _from_integration(item)
            ),
        },
    ])

    grid.add_page_controls([
        {
            "label": "control.create",
            "icon": "add",
            "type": "primary",
            "on_click": lambda r, row, builder: r.push(navigation.new),
            "render_condition": lambda state: state.can_in_any_project("tasks/create"),
        },
    ])

    ctx.add_navbar_entry({"label": "navigation.tasks", "to": grid.get_grid_route_name(), "icon": "task_alt"})
    ctx.add_localization_data(load_locale_dir(os.path.join(os.path.dirname(__file__), "locales")))

    ctx.add_route(crud.get_router_config())
    ctx.add_route(grid.get_router_config())
    return ctx
