from nicegui import ui

from trellis.core.builders.renderers import RenderNode
from trellis.core.errors import UnknownRouteError
from trellis.core.logger import get_logger

log = get_logger("Render")


def render_node(node, router):
    """Übersetzt RenderNodes der Renderer in NiceGUI-Elemente."""
    if node is None:
        return None
    if not isinstance(node, RenderNode):
        return ui.label(str(node))

    if node.tag == "link":
        to = node.props.get("to", {})
        try:
            target = router.resolve(to.get("name"), to.get("params"))
        except UnknownRouteError:
            log.warning(f"⚠️ Link auf unbekannte Route {to.get('name')}, zeige Text")
            return ui.label(node.text or "")
        return ui.link(node.text or "", target)

    if node.tag == "a":
        return ui.link(node.text or "", node.props.get("href", "#"), new_tab=node.props.get("target") == "_blank")

    if node.tag == "html":
        return ui.html(node.text or "")

    if node.tag in ("div", "row"):
        container = ui.row() if node.tag == "row" else ui.element("div")
        if node.props.get("class"):
            container.classes(node.props["class"])
        with container:
            if node.text:
                ui.label(node.text)
            for child in node.children:
                render_node(child, router)
        return container

    label = ui.label(node.text or "")
    if node.props.get("class"):
        label.classes(node.props["class"])
    if node.props.get("title"):
        label.tooltip(node.props["title"])
    return label
