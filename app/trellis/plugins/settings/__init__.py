import os
from zoneinfo import available_timezones

from trellis.core.i18n import load_locale_dir
from trellis.core.modules.models import ModuleConfig
from .renderers import ColorIntervalsRenderer
from .services import CompanyService

manifest = ModuleConfig(
    module_name="Settings",
    router_prefix="settings",
    load_order=30,
    description="Firmenweite Einstellungen.",
    icon="settings",
)


async def is_admin(state) -> bool:
    return state.is_admin


def has_work_time(state) -> bool:
    company_data = state.company_data
    return bool(company_data.get("work_time"))


def timezone_options():
    return [{"value": name, "label": name} for name in sorted(available_timezones())]


def setup(ctx, router):
    ctx.add_settings_section({
        "name": "settings.company.general",
        "path": "/company/general",
        "label": "settings.general",
        "scope": "company",
        "order": 0,
        # Sektion ist nur für Admins erreichbar, geprüft wird erst beim Betreten
        "access_check": is_admin,
        "service": CompanyService(),
        "fields": [
            {"key": "timezone", "label": "settings.company_timezone", "type": "select", "options": timezone_options()},
            {
                "key": "work_time",
                "label": "field.work_time",
                "type": "number",
                "min_value": 0,
                "max_value": 24,
                "placeholder": "field.work_time",
                "tooltip_value": "tooltip.work_time",
            },
            {
                "key": "color",
                "label": "settings.color_interval.label",
                "tooltip_value": "tooltip.color_intervals",
                "displayable": has_work_time,
                "render": ColorIntervalsRenderer(),
            },
        ],
    })

    # Übersicht aller Sektionen (auch der anderer Module, z.B. "Mein Konto")
    ctx.add_route({
        "name": "settings.index",
        "path": "/settings",
        "component": "settings.index",
        "meta": {"auth": True, "title": "navigation.settings"},
    })
    ctx.add_navbar_entry({"label": "navigation.settings", "to": "settings.index", "icon": "settings"})
    ctx.add_localization_data(load_locale_dir(os.path.join(os.path.dirname(__file__), "locales")))
    return ctx
