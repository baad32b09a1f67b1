from trellis.core.builders.renderers import FieldRenderer, RenderNode

# Farbverlauf für den Tagesfortschritt: Anteil der Arbeitszeit -> Farbe
DEFAULT_COLOR_INTERVALS = (
    {"start": 0, "end": 0.75, "color": "#ffb6c2"},
    {"start": 0.76, "end": 1, "color": "#93ecda"},
    {"start": 1, "end": 0, "color": "#3cd7b6", "is_over_time": True},
)


def color_intervals(value, company_data):
    """Gesetzte Intervalle, sonst die der Firma, sonst die Standard-Konfiguration."""
    if isinstance(value, list):
        intervals = value
    elif isinstance(company_data.get("color"), list):
        intervals = company_data["color"]
    else:
        intervals = [dict(i) for i in DEFAULT_COLOR_INTERVALS]
    return sorted(intervals, key=lambda i: i.get("start", 0))


class ColorIntervalsRenderer(FieldRenderer):
    def render(self, value, ctx):
        rows = []
        for interval in color_intervals(value, ctx.company_data):
            if interval.get("is_over_time"):
                text = f"> {interval['start']:.0%}"
            else:
                text = f"{interval['start']:.0%} - {interval['end']:.0%}"
            rows.append(RenderNode("span", text, {"class": "px-2 rounded", "title": interval["color"]}))
        return RenderNode("row", children=rows, props={"class": "gap-2"})
