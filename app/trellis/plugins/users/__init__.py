import os

from trellis.core.builders.renderers import BooleanRenderer, RenderNode
from trellis.core.i18n import load_locale_dir
from trellis.core.modules.models import ModuleConfig
from trellis.ui.layout import current_state, remember_account
from .services import AccountService, UsersService

manifest = ModuleConfig(
    module_name="Users",
    router_prefix="users",
    load_order=10,
    description="Benutzerverwaltung und eigenes Konto.",
    icon="group",
)

LANGUAGES = [
    {"value": "en", "label": "users.languages.en"},
    {"value": "ru", "label": "users.languages.ru"},
]


def setup(ctx, router):
    service = UsersService()

    crud = ctx.create_crud("users.crud-title", "users", service)
    navigation = crud.navigation

    crud.view.add_to_meta_properties("title_callback", lambda values: values.get("full_name"))
    crud.view.add_to_meta_properties("navigation", navigation)
    crud.new.add_to_meta_properties("permissions", "users/create")
    crud.new.add_to_meta_properties("navigation", navigation)
    crud.edit.add_to_meta_properties("permissions", "users/edit")
    crud.edit.add_to_meta_properties("navigation", navigation)

    grid = ctx.create_grid("users.grid-title", "users", service)
    grid.add_to_meta_properties("navigation", navigation)

    crud.view.add_field([
        {"key": "full_name", "label": "field.full_name"},
        {"key": "email", "label": "field.email"},
        {"key": "active", "label": "field.active", "render": BooleanRenderer()},
    ])

    fields_to_fill = [
        {"key": "id", "displayable": False},
        {"key": "full_name", "label": "field.full_name", "type": "input", "required": True},
        {"key": "email", "label": "field.email", "type": "input", "required": True},
        {"key": "user_language", "label": "users.language", "type": "select", "options": LANGUAGES, "default": "en"},
        {"key": "active", "label": "field.active", "type": "checkbox", "initial_value": True},
    ]
    crud.new.add_field(fields_to_fill)
    crud.edit.add_field(fields_to_fill)

    grid.add_column([
        {"title": "field.full_name", "key": "full_name"},
        {"title": "field.email", "key": "email"},
        {
            "title": "field.active",
            "key": "active",
            "render": lambda row, c: RenderNode("span", c.t("control.yes" if row.get("active") else "control.no")),
        },
    ])

    grid.add_filter([
        {"reference_key": "full_name", "filter_name": "filter.fields.full_name"},
        {"reference_key": "email", "filter_name": "filter.fields.email"},
    ])

    # Nur Admins verwalten Benutzer
    grid.add_action([
        {
            "title": "control.view",
            "icon": "visibility",
            "on_click": lambda r, row, builder: builder.on_view(row["item"]),
        },
        {
            "title": "control.edit",
            "icon": "edit",
            "on_click": lambda r, row, builder: builder.on_edit(row["item"]),
            "render_condition": lambda state, item: state.is_admin,
        },
        {
            "title": "control.delete",
            "icon": "delete",
            "action_type": "error",
            "on_click": lambda r, row, builder: builder.on_delete(row["item"]),
            "render_condition": lambda state, item: state.is_admin and item.get("id") != state.user.get("id"),
        },
    ])

    grid.add_page_controls([
        {
            "label": "control.create",
            "icon": "add",
            "type": "primary",
            "on_click": lambda r, row, builder: r.push(navigation.new),
            "render_condition": lambda state: state.is_admin,
        },
    ])

    ctx.add_settings_section({
        "name": "users.settings.account",
        "path": "/settings/account",
        "label": "users.account",
        "scope": "user",
        "order": 0,
        "service": AccountService(state_provider=current_state, on_saved=remember_account),
        "fields": [
            {"key": "full_name", "label": "field.full_name", "type": "input", "required": True},
            {"key": "email", "label": "field.email", "type": "input", "required": True},
            {"key": "user_language", "label": "users.language", "type": "select", "options": LANGUAGES},
        ],
    })

    ctx.add_navbar_entry({"label": "navigation.users", "to": {"name": grid.get_grid_route_name()}, "icon": "group"})
    ctx.add_localization_data(load_locale_dir(os.path.join(os.path.dirname(__file__), "locales")))

    ctx.add_route(crud.get_router_config())
    ctx.add_route(grid.get_router_config())
    return ctx
