from nicegui import ui

class UIStyles:
    # ----------------------------------------------------
    # 1. KARTEN & CONTAINER
    # ----------------------------------------------------
    CARD_BASE = 'p-6 rounded-3xl shadow-lg border border-slate-200 dark:border-zinc-800 trellis-card'

    # ----------------------------------------------------
    # 2. STRUKTUR & LAYOUT
    # ----------------------------------------------------
    HEADER = '!bg-white/80 dark:!bg-zinc-950/80 backdrop-blur-md border-b border-slate-200 dark:border-zinc-800 text-slate-800 dark:text-white'
    SIDEBAR = '!bg-slate-50 dark:!bg-zinc-950 border-r border-slate-200 dark:border-zinc-800'
    NAV_CATEGORY = 'text-[9px] px-4 opacity-50 mt-4 text-slate-500 dark:text-zinc-400 font-bold tracking-widest uppercase'
    NAV_LINK_BASE = 'flex items-center px-4 py-2 no-underline w-full rounded-lg transition-colors'
    NAV_LINK_ACTIVE = 'bg-primary/10 text-primary font-bold'
    NAV_LINK_INACTIVE = 'text-slate-700 dark:text-zinc-300 hover:bg-slate-200 dark:hover:bg-zinc-800'

    # ----------------------------------------------------
    # 3. TYPOGRAFIE
    # ----------------------------------------------------
    TITLE_H1 = 'text-3xl font-bold tracking-tight text-slate-900 dark:text-white'
    TEXT_MUTED = 'text-sm text-slate-500 dark:text-zinc-400'
    LABEL_MINI = 'text-[10px] font-bold uppercase tracking-widest text-slate-400 dark:text-zinc-500'

    # ----------------------------------------------------
    # 4. GRID & FORMULARE
    # ----------------------------------------------------
    GRID_ROW = 'w-full items-center gap-4 py-2 border-b border-slate-100 dark:border-zinc-800'
    GRID_CELL = 'flex-1 min-w-0 truncate'
    GRID_HEADER = 'w-full gap-4 pb-2 ' + LABEL_MINI
    FORM_FIELD = 'w-full'
    FIELD_LABEL = 'text-xs font-bold text-slate-500 dark:text-zinc-400'

def apply_theme():
    """Wendet die globalen Systemfarben und das CSS an."""
    ui.colors(
        primary='#6366f1', secondary='#0ea5e9', accent='#8b5cf6',
        positive='#22c55e', negative='#ef4444', info='#3b82f6', warning='#f59e0b'
    )

    ui.add_head_html('''
        <style>
            body { font-family: 'Inter', system-ui, sans-serif; }

            .trellis-card { background-color: white !important; }
            .body--dark .trellis-card { background-color: #18181b !important; }

            .trellis-avatar { display: inline-flex; width: 28px; height: 28px; border-radius: 9999px; align-items: center; justify-content: center; font-size: 11px; font-weight: 700; background-color: rgba(99, 102, 241, 0.15); color: #6366f1; }
            .trellis-grid__inactive { opacity: 0.5; text-decoration: line-through; }
        </style>
    ''')
