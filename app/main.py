import os

from fastapi import FastAPI
from nicegui import ui

import trellis
from trellis.core.config import IS_DEBUG, PLUGIN_PACKAGE, PORT, STORAGE_SECRET
from trellis.core.i18n import load_locale_dir
from trellis.core.logger import get_logger, setup_logging
from trellis.core.modules.manager import ModuleManager
from trellis.ui.layout import get_nav_items, main_layout
from trellis.ui.pages import mount_routes
from trellis.ui.theme import UIStyles

setup_logging()
log = get_logger("Main")

app = FastAPI()

# 1. Module laden (streng sequentiell), danach ist die Registry eingefroren
manager = ModuleManager()
manager.registry.i18n.merge(
    load_locale_dir(os.path.join(os.path.dirname(trellis.__file__), "locales")), source="Core"
)
manager.discover(PLUGIN_PACKAGE)
registry = manager.run()
router = manager.router

# 2. Seiten für alle Routen der Registry
mount_routes(registry, router)


@ui.page('/')
@main_layout(registry, router, 'navigation.title')
async def index_page():
    items = get_nav_items(registry, router)
    if items:
        ui.navigate.to(items[0]['target'])
    else:
        ui.label(registry.i18n.t('navigation.title')).classes(UIStyles.TEXT_MUTED)


# 3. NiceGUI Startup
ui.run_with(app, mount_path="/", storage_secret=STORAGE_SECRET)

if __name__ == "__main__":
    import uvicorn
    log.info(f"🌐 Starte Trellis auf Port {PORT}")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=PORT,
        reload=IS_DEBUG,
        reload_dirs=["app/trellis"],
        reload_includes=["*.py", "*.yaml"]
    )
