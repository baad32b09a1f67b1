from trellis.core.builders.renderers import FieldRenderer, RenderNode, RouteLinkRenderer
from trellis.core.formatting import format_duration


class WorkersRenderer(FieldRenderer):
    """
    Tabelle 'Wer hat wie lange woran gearbeitet'.
    Die Links auf User und Tasks kommen aus fremden Modulen und werden erst beim Rendern aufgelöst.
    """

    def __init__(self, user_route, task_route=None, admin_only=False):
        self.user_link = RouteLinkRenderer(user_route, label_key="full_name", id_key="user_id", admin_only=admin_only)
        self.task_link = RouteLinkRenderer(task_route, label_key="task_name", id_key="task_id") if task_route else None

    def render(self, value, ctx):
        workers = list(value.values()) if isinstance(value, dict) else list(value or [])
        rows = []
        for worker in workers:
            cells = [self.user_link.render(worker, ctx)]
            if self.task_link is not None:
                cells.append(self.task_link.render(worker, ctx))
            time = format_duration(worker.get("duration"), ctx.t("time.h"), ctx.t("time.m"))
            cells.append(RenderNode("span", time, {"class": "whitespace-nowrap"}))
            rows.append(RenderNode("row", children=[c for c in cells if c is not None], props={"class": "gap-4"}))
        return RenderNode("div", children=rows)


class InitialsRenderer(FieldRenderer):
    """Team-Spalte: Initialen der User, voller Name als Tooltip."""

    def __init__(self, key="users"):
        self.key = key

    def render(self, row, ctx):
        avatars = []
        for user in row.get(self.key) or []:
            name = user.get("full_name") or ""
            initials = "".join(part[0] for part in name.split()[:2]).upper()
            avatars.append(RenderNode("span", initials, {"title": name, "class": "trellis-avatar"}))
        return RenderNode("row", children=avatars, props={"class": "gap-1"})
