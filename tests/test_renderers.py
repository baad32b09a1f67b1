"""Tests for field renderers and value formatting."""
from trellis.core.builders.renderers import (
    BooleanRenderer,
    DateTimeRenderer,
    DurationRenderer,
    FieldRenderer,
    RenderContext,
    RouteLinkRenderer,
    TranslatedRenderer,
    UrlRenderer,
    as_renderer,
    render_value,
)
from trellis.core.formatting import format_date, format_datetime, format_duration
from trellis.core.i18n import LocalizationStore
from trellis.core.state import UserState


def _ctx(state=None, company_data=None):
    i18n = LocalizationStore()
    i18n.merge({"en": {"time": {"h": "h", "m": "m"}, "tasks": {"priority": {"high": "High"}, "source": {"internal": "Internal"}}}})
    return RenderContext(state=state or UserState(company_data=company_data), i18n=i18n)


def test_plain_text_is_the_default():
    assert render_value(None, 42, _ctx()) == "42"
    assert FieldRenderer().render(None, _ctx()) == ""


def test_callables_are_wrapped():
    renderer = as_renderer(lambda value, ctx: f"<{value}>")
    assert renderer.render("x", _ctx()) == "<x>"
    assert as_renderer(None) is None


def test_translated_priority():
    node = TranslatedRenderer("tasks.priority").render({"name": "High"}, _ctx())
    assert node.text == "High"
    assert TranslatedRenderer("tasks.priority").render(None, _ctx()) is None


def test_route_link_resolves_route_name_lazily():
    routes = {}
    renderer = RouteLinkRenderer(lambda: routes.get("projects_view"))
    assert renderer.render({"id": 1, "name": "Website"}, _ctx()).tag == "span"

    routes["projects_view"] = "projects.crud.projects.view"
    node = renderer.render({"id": 1, "name": "Website"}, _ctx())
    assert node.tag == "link"
    assert node.props["to"] == {"name": "projects.crud.projects.view", "params": {"id": 1}}


def test_url_renderer_falls_back_for_internal_tasks():
    assert UrlRenderer("tasks.source.internal").render("https://example.org/1", _ctx()).tag == "a"
    assert UrlRenderer("tasks.source.internal").render("URL", _ctx()).text == "Internal"


def test_boolean_and_duration():
    assert BooleanRenderer().render(0, _ctx()).text == "control.no"
    assert DurationRenderer().render(3725, _ctx()).text == "1h 2m"


def test_datetime_uses_company_timezone():
    node = DateTimeRenderer().render("2024-03-05T13:03:00Z", _ctx(company_data={"timezone": "Europe/Berlin"}))
    assert node.text == "March 5, 2024, 14:03:00 (GMT+01:00)"


def test_format_helpers():
    assert format_duration(None) == "0h 0m"
    assert format_duration("5400") == "1h 30m"
    assert format_duration(3599) == "1h 0m"
    assert format_datetime("2024-03-05T13:03:00Z") == "March 5, 2024, 13:03:00 (GMT+00:00)"
    assert format_datetime("not a date") == "not a date"
    assert format_date("2024-03-05T13:03:00Z") == "2024-03-05"
