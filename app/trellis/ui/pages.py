from functools import partial

from fastapi import Request
from nicegui import ui

from trellis.core.builders.base import maybe_await
from trellis.core.builders.crud import CrudEditPage, CrudViewPage
from trellis.core.builders.grid import GridController, extract_rows
from trellis.core.builders.renderers import RenderContext
from trellis.core.builders.settings import grouped_sections
from trellis.core.logger import get_logger
from trellis.ui.layout import current_state, main_layout
from trellis.ui.render import render_node
from trellis.ui.theme import UIStyles

log = get_logger("Pages")


def _forbidden(registry):
    ui.label(registry.i18n.t('control.forbidden')).classes(UIStyles.TEXT_MUTED)


async def _notify_failure(registry, action: str, e: Exception):
    # Service-Fehler landen hier beim Aufrufer, die Builder fangen nichts ab
    log.error(f"❌ {action} fehlgeschlagen: {e}")
    ui.notify(f"{registry.i18n.t('control.error')}: {e}", type='negative')


# ==========================================
# GRID
# ==========================================
def grid_controller_for(route, request) -> GridController:
    """Mehrfach-Parameter (?tags=a&tags=b) bleiben Listen, deshalb parse_qs statt query_params."""
    return GridController.from_query_string(route, str(request.url.query))


def history_script(controller) -> str:
    query = controller.query_string()
    suffix = f" + '?{query}'" if query else ""
    return f"history.replaceState(null, '', location.pathname{suffix})"


async def render_grid_page(route, registry, router, request: Request, item_id=None):
    state = current_state()
    if not router.can_enter(route.name, state):
        return _forbidden(registry)

    t = registry.i18n.t
    controller = grid_controller_for(route, request)
    grid_data = controller.grid_data

    ui.label(t(grid_data["title"])).classes(UIStyles.TITLE_H1)

    @ui.refreshable
    def table():
        columns = grid_data["columns"]
        with ui.row().classes(UIStyles.GRID_HEADER):
            for column in columns:
                ui.label(t(column.title)).classes(UIStyles.GRID_CELL)
            ui.label('').classes('w-32')

        for row in controller.items:
            ctx = RenderContext(state=state, i18n=registry.i18n, values=row)
            with ui.row().classes(UIStyles.GRID_ROW):
                for column in columns:
                    with ui.element('div').classes(UIStyles.GRID_CELL):
                        render_node(controller.render_cell(column, row, ctx), router)
                # renderCondition wird pro Zeile und pro Durchlauf neu ausgewertet
                with ui.row().classes('w-32 justify-end gap-1'):
                    for action in controller.visible_actions(state, row):
                        color = 'negative' if action.action_type == 'error' else 'primary'
                        ui.button(icon=action.icon, color=color,
                                  on_click=partial(_run_action, controller, action, router, row, registry, table)
                                  ).props('flat round size=sm').tooltip(t(action.title))

        with ui.row().classes('w-full justify-between mt-4'):
            ui.button(icon='chevron_left', on_click=lambda: _load(controller, table, controller.page - 1, registry)) \
                .props('flat round').set_enabled(controller.page > 1)
            ui.label(f"{controller.page}").classes(UIStyles.TEXT_MUTED)
            ui.button(icon='chevron_right', on_click=lambda: _load(controller, table, controller.page + 1, registry)) \
                .props('flat round')

    # Page-Controls (z.B. "Erstellen")
    with ui.row().classes('w-full justify-end gap-2'):
        for control in controller.visible_page_controls(state):
            ui.button(t(control.title), icon=control.icon,
                      on_click=partial(_run_action, controller, control, router, None, registry)).props('unelevated')

    # Filter
    with ui.row().classes('w-full items-end gap-4 mb-4'):
        if grid_data["filters"]:
            names = ', '.join(t(f.filter_name) for f in grid_data["filters"])
            ui.input(t('filter.search'), placeholder=names,
                     on_change=lambda e: _apply(controller, table, lambda: controller.set_search(e.value))
                     ).props('outlined dense clearable debounce=400')
        for field in controller.filter_fields:
            await _filter_input(field, controller, table, t)

    table()
    await _load(controller, table, controller.page, registry)


async def _filter_input(field, controller, table, t):
    options = field.field_options
    current = controller.filter_values.get(field.key)
    handler = lambda e, key=field.key: _apply(controller, table, lambda: controller.set_filter(key, e.value))

    if options.get("type") == "select":
        choices = {o["value"]: t(o["label"]) for o in options.get("options", [])}
        ui.select(choices, label=t(field.label), value=current if current in choices else None,
                  on_change=handler).props('outlined dense').classes('w-48')
    elif options.get("type") == "resource-select" and options.get("service") is not None:
        rows = extract_rows(await maybe_await(options["service"].get_all({})))
        choices = {str(r["id"]): r.get("full_name") or r.get("name") or str(r["id"]) for r in rows}
        ui.select(choices, label=t(field.label), value=current if current in choices else None, with_input=True,
                  on_change=handler).props('outlined dense clearable').classes('w-48')
    else:
        ui.input(t(field.label), value=current or '', on_change=handler).props('outlined dense').classes('w-48')


async def _apply(controller, table, change):
    change()
    # URL immer mitziehen, auch wenn der letzte saveToQuery-Filter gerade geleert wurde
    ui.run_javascript(history_script(controller))
    await controller.load(1)
    table.refresh()


async def _load(controller, table, page, registry):
    try:
        await controller.load(max(page, 1))
    except Exception as e:
        return await _notify_failure(registry, 'Liste laden', e)
    table.refresh()


async def _run_action(controller, action, router, row, registry, table=None):
    try:
        await controller.trigger(action, router, row)
    except Exception as e:
        return await _notify_failure(registry, action.title, e)
    if table is not None:
        table.refresh()


# ==========================================
# CRUD
# ==========================================
def _crud_page(route):
    """Der Teil-Builder (view/new/edit) hängt in der Route, er kennt Felder und Service."""
    return route.meta["page"]


async def render_view_page(route, registry, router, request: Request, item_id=None):
    state = current_state()
    page: CrudViewPage = _crud_page(route)
    try:
        values = await page.load_item(item_id)
    except Exception as e:
        return await _notify_failure(registry, 'Laden', e)

    values = values.get("data", values) if isinstance(values, dict) else values
    ctx = RenderContext(state=state, i18n=registry.i18n, values=values or {})
    ui.label(page.page_title(values, ctx)).classes(UIStyles.TITLE_H1)

    with ui.card().classes(UIStyles.CARD_BASE + ' w-full'):
        for field in page.visible_fields(state):
            with ui.row().classes('w-full gap-4 py-1'):
                ui.label(registry.i18n.t(field.label or field.key)).classes(UIStyles.FIELD_LABEL + ' w-48')
                render_node(page.render_field(field, ctx), router)

    navigation = route.meta.get("navigation")
    if navigation and router.can_enter(navigation.edit, state):
        ui.button(registry.i18n.t('control.edit'), icon='edit',
                  on_click=lambda: router.push(navigation.edit, {"id": item_id})).props('unelevated')


async def render_form_page(route, registry, router, request: Request, item_id=None):
    state = current_state()
    if not router.can_enter(route.name, state):
        return _forbidden(registry)

    page = _crud_page(route)
    if isinstance(page, CrudEditPage):
        try:
            loaded = await page.load_item(item_id)
        except Exception as e:
            return await _notify_failure(registry, 'Laden', e)
        values = dict(loaded.get("data", loaded) if isinstance(loaded, dict) else {})
    else:
        values = page.initial_values(state)

    ui.label(registry.i18n.t(route.meta["title"])).classes(UIStyles.TITLE_H1)
    await render_form_fields(page.visible_fields(state), values, state, registry, router)

    async def submit():
        try:
            saved = await page.save(values)
        except Exception as e:
            return await _notify_failure(registry, 'Speichern', e)
        ui.notify(registry.i18n.t('control.saved'), type='positive')
        saved = saved.get("data", saved) if isinstance(saved, dict) else {}
        navigation = route.meta.get("navigation")
        target_id = (saved or {}).get("id") or values.get("id")
        if navigation and target_id:
            router.push(navigation.view, {"id": target_id})

    ui.button(registry.i18n.t('control.save'), icon='save', on_click=submit).props('unelevated')


async def render_form_fields(fields, values, state, registry, router):
    t = registry.i18n.t
    with ui.column().classes('w-full gap-4'):
        for field in fields:
            label = t(field.label or field.key) + (' *' if field.required else '')
            placeholder = t(field.placeholder) if field.placeholder else ''

            if field.render is not None:
                ui.label(label).classes(UIStyles.FIELD_LABEL)
                ctx = RenderContext(state=state, i18n=registry.i18n, values=values)
                render_node(field.render.render(values.get(field.key), ctx), router)
            elif field.type == 'checkbox':
                ui.checkbox(label).bind_value(values, field.key)
            elif field.type == 'textarea':
                ui.textarea(label, placeholder=placeholder).bind_value(values, field.key).classes(UIStyles.FORM_FIELD)
            elif field.type == 'number' or field.field_options.get('type') == 'number':
                ui.number(label, min=getattr(field, 'min_value', None), max=getattr(field, 'max_value', None)) \
                    .bind_value(values, field.key).classes(UIStyles.FORM_FIELD)
            elif field.type == 'select':
                choices = {o['value']: t(o['label']) for o in field.options or []}
                ui.select(choices, label=label).bind_value(values, field.key).classes(UIStyles.FORM_FIELD)
            elif field.type == 'resource-select' and field.service is not None:
                rows = extract_rows(await maybe_await(field.service.get_all({})))
                choices = {r['id']: r.get('full_name') or r.get('name') or str(r['id']) for r in rows}
                ui.select(choices, label=label, with_input=True).bind_value(values, field.key).classes(UIStyles.FORM_FIELD)
            else:
                ui.input(label, placeholder=placeholder).bind_value(values, field.key).classes(UIStyles.FORM_FIELD)


# ==========================================
# SETTINGS
# ==========================================
async def render_settings_page(route, registry, router, request: Request, item_id=None):
    state = current_state()
    section = route.meta["section"]
    # access_check erst jetzt, beim Betreten der Route
    if not await section.is_accessible(state):
        return _forbidden(registry)

    ui.label(registry.i18n.t(section.label)).classes(UIStyles.TITLE_H1)
    try:
        loaded = await maybe_await(section.service.get_all())
    except Exception as e:
        return await _notify_failure(registry, 'Laden', e)
    values = dict(loaded.get("data", loaded) if isinstance(loaded, dict) else {})

    await render_form_fields(section.visible_fields(state), values, state, registry, router)

    async def submit():
        try:
            await maybe_await(section.service.save(values))
        except Exception as e:
            return await _notify_failure(registry, 'Speichern', e)
        ui.notify(registry.i18n.t('control.saved'), type='positive')

    ui.button(registry.i18n.t('control.save'), icon='save', on_click=submit).props('unelevated')


async def render_settings_index(route, registry, router, request: Request, item_id=None):
    state = current_state()
    t = registry.i18n.t
    ui.label(t('navigation.settings')).classes(UIStyles.TITLE_H1)

    groups = await grouped_sections(registry.settings_sections, state, route.meta.get("scope"))
    if not groups:
        ui.label(t('settings.empty')).classes(UIStyles.TEXT_MUTED)
        return

    for scope, sections in groups.items():
        with ui.card().classes(UIStyles.CARD_BASE + ' w-full'):
            ui.label(t(f'settings.scopes.{scope}')).classes(UIStyles.LABEL_MINI)
            for section in sections:
                ui.link(t(section.label), router.resolve(section.name))


COMPONENTS = {
    "grid": render_grid_page,
    "crud.view": render_view_page,
    "crud.new": render_form_page,
    "crud.edit": render_form_page,
    "settings.section": render_settings_page,
    "settings.index": render_settings_index,
}


def mount_routes(registry, router) -> int:
    """Registriert für jede Route der (eingefrorenen) Registry eine NiceGUI-Seite."""
    mounted = 0
    for route in registry.routes:
        renderer = COMPONENTS.get(route.component)
        if renderer is None:
            log.warning(f"⚠️ Keine Komponente '{route.component}' für Route {route.name}")
            continue
        _mount(route, renderer, registry, router)
        mounted += 1
    log.info(f"🗺️ {mounted} Seiten gemountet")
    return mounted


def _mount(route, renderer, registry, router):
    layout = main_layout(registry, router, route.meta.get("title") or route.meta.get("label") or route.name)

    if "{id}" in route.path:
        @ui.page(route.path)
        @layout
        async def page_with_id(id: str, request: Request):
            await renderer(route, registry, router, request, id)
    else:
        @ui.page(route.path)
        @layout
        async def page(request: Request):
            await renderer(route, registry, router, request)
