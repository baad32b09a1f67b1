from functools import wraps

from nicegui import app, ui

from trellis.core.errors import UnknownRouteError
from trellis.core.i18n import use_locale
from trellis.core.logger import get_logger
from trellis.core.state import ANONYMOUS, UserState
from trellis.ui.theme import UIStyles, apply_theme

log = get_logger("Layout")


def current_state() -> UserState:
    """Snapshot des angemeldeten Users aus dem NiceGUI User-Storage (Login ist nicht Teil von Trellis)."""
    session = app.storage.user.get("session")
    if not session:
        return ANONYMOUS
    return UserState(**session)


def remember_account(account: dict):
    """Nach 'Mein Konto' speichern: Session-User und Sprache nachziehen."""
    session = dict(app.storage.user.get("session") or {})
    session["user"] = {**session.get("user", {}), **account}
    language = account.get("user_language")
    changed = bool(language) and language != session.get("locale")
    if language:
        session["locale"] = language
    app.storage.user["session"] = session

    if changed:
        log.info(f"🌍 Sprache gewechselt: {language}")
        use_locale(language)
        ui.navigate.reload()


def logout():
    app.storage.user.clear()
    ui.navigate.to('/')


def get_nav_items(registry, router):
    """Navigationseinträge der Module, aufgelöst auf echte Pfade."""
    items = []
    for entry in registry.nav_items:
        try:
            target = router.resolve(entry.to["name"], entry.to.get("params"))
        except UnknownRouteError:
            log.warning(f"⚠️ Navbar-Eintrag '{entry.label}' zeigt auf unbekannte Route {entry.to['name']}")
            continue
        items.append({'label': registry.i18n.t(entry.label), 'icon': entry.icon, 'target': target})
    return items


def main_layout(registry, router, page_title: str):
    def decorator(fn):
        @wraps(fn)
        async def wrapper(*args, **kwargs):
            use_locale(current_state().locale)
            apply_theme()
            dark = ui.dark_mode()

            # Darkmode Präferenz
            theme_pref = app.storage.user.get('theme_pref', 'auto')
            if theme_pref == 'dark': dark.enable()
            elif theme_pref == 'light': dark.disable()
            else: dark.auto()

            # --- HEADER ---
            with ui.header(elevated=False).classes(UIStyles.HEADER):
                with ui.row().classes('items-center gap-3 w-full'):
                    ui.button(icon='menu').props('flat round text-color=current').on('click', lambda: left_drawer.toggle())
                    ui.label('TRELLIS').classes('text-lg font-black tracking-tighter text-primary')
                    ui.space()
                    ui.label(registry.i18n.t(page_title)).classes(UIStyles.LABEL_MINI)
                    ui.button(icon='logout', on_click=logout).props('flat round text-color=current')

            # --- SIDEBAR / DYNAMISCHE NAVIGATION ---
            with ui.left_drawer(value=True).classes(UIStyles.SIDEBAR) as left_drawer:
                ui.label(registry.i18n.t('navigation.title')).classes(UIStyles.NAV_CATEGORY)
                request = kwargs.get('request')
                active_path = request.url.path if request is not None else None
                with ui.column().classes('w-full gap-1'):
                    for item in get_nav_items(registry, router):
                        is_active = active_path == item['target']
                        style = UIStyles.NAV_LINK_ACTIVE if is_active else UIStyles.NAV_LINK_INACTIVE
                        with ui.link(target=item['target']).classes(f'{UIStyles.NAV_LINK_BASE} {style}'):
                            ui.icon(item['icon'], size='20px')
                            ui.label(item['label']).classes('text-sm ml-3 font-medium')

            # --- CONTENT BEREICH ---
            with ui.column().classes('p-6 md:p-12 w-full max-w-7xl mx-auto flex-grow'):
                return await fn(*args, **kwargs)

        return wrapper
    return decorator
