"""Tests for settings sections and their lazy access checks."""
import asyncio

from trellis.core.builders.settings import SettingsSection, accessible_sections, grouped_sections
from trellis.core.state import UserState


async def admin_only(state):
    return state.is_admin


def _section(name, order=0, scope="company", access_check=None):
    return SettingsSection(name=name, path=f"/{name}", label=name, order=order, scope=scope, access_check=access_check)


def test_access_check_is_optional(member):
    assert asyncio.run(_section("general").is_accessible(member))


def test_async_access_check_is_awaited(admin, member):
    section = _section("general", access_check=admin_only)
    assert asyncio.run(section.is_accessible(admin))
    assert not asyncio.run(section.is_accessible(member))


def test_access_check_is_not_run_at_build_time():
    calls = []
    _section("general", access_check=lambda state: calls.append(state) or True)
    assert calls == []


def test_failing_access_check_locks_the_section(admin):
    section = _section("general", access_check=lambda state: state.nope())
    assert not asyncio.run(section.is_accessible(admin))


def test_sections_sorted_and_filtered_by_scope(admin, member):
    sections = [
        _section("b", order=2),
        _section("a", order=1, access_check=admin_only),
        _section("me", order=0, scope="user"),
    ]

    def names(state, scope=None):
        return [s.name for s in asyncio.run(accessible_sections(sections, state, scope))]

    assert names(admin) == ["me", "a", "b"]
    assert names(member) == ["me", "b"]
    assert names(admin, "company") == ["a", "b"]


def test_displayable_fields_follow_company_data():
    section = SettingsSection(
        name="general", path="/general", label="general",
        fields=[{"key": "work_time"}, {"key": "color", "displayable": lambda state: bool(state.company_data.get("work_time"))}],
    )
    assert [f.key for f in section.visible_fields(UserState())] == ["work_time"]
    assert [f.key for f in section.visible_fields(UserState(company_data={"work_time": 8}))] == ["work_time", "color"]


def test_sections_grouped_by_scope_for_the_overview(admin, member):
    sections = [
        _section("general", order=1, access_check=admin_only),
        _section("billing", order=2),
        _section("account", order=0, scope="user"),
    ]

    admin_groups = asyncio.run(grouped_sections(sections, admin))
    assert list(admin_groups) == ["user", "company"]
    assert [s.name for s in admin_groups["company"]] == ["general", "billing"]

    member_groups = asyncio.run(grouped_sections(sections, member))
    assert {scope: [s.name for s in group] for scope, group in member_groups.items()} == {
        "user": ["account"],
        "company": ["billing"],
    }
    assert asyncio.run(grouped_sections([], admin)) == {}
