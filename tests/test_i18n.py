"""Tests for the localization store."""
import contextvars

import pytest

from trellis.core.errors import RegistryFrozenError
from trellis.core.i18n import LocalizationStore, load_locale_dir, use_locale


@pytest.fixture()
def store():
    store = LocalizationStore(locale="en", fallback_locale="en")
    store.merge({
        "en": {"control": {"save": "Save"}, "greeting": "Hello {name}", "tasks": {"amount": "no tasks | one task | {count} tasks"}},
        "ru": {"control": {"save": "Сохранить"}},
    }, source="Core")
    return store


def test_dotted_keys_and_locale_switch(store):
    assert store.t("control.save") == "Save"
    assert store.t("control.save", locale="ru") == "Сохранить"


def test_fallback_locale_and_missing_keys(store):
    assert store.t("greeting", locale="ru", name="Ada") == "Hello Ada"
    assert store.t("does.not.exist") == "does.not.exist"


def test_pluralization(store):
    assert store.tc("tasks.amount", 0) == "no tasks"
    assert store.tc("tasks.amount", 1) == "one task"
    assert store.tc("tasks.amount", 5) == "5 tasks"


def test_colliding_keys_warn_and_last_writer_wins(store, caplog):
    collisions = store.merge({"en": {"control": {"save": "Store"}}}, source="Projects")
    assert collisions == 1
    assert store.t("control.save") == "Store"
    assert "control.save" in caplog.text


def test_identical_values_are_no_collision(store):
    assert store.merge({"en": {"control": {"save": "Save"}}}) == 0


def test_frozen_store_rejects_merges(store):
    store.freeze()
    with pytest.raises(RegistryFrozenError):
        store.merge({"en": {"x": "y"}})


def test_load_locale_dir_reads_yaml_tables(tmp_path):
    (tmp_path / "en.yaml").write_text("navigation:\n  projects: Projects\n", encoding="utf-8")
    (tmp_path / "ru.yml").write_text("navigation:\n  projects: Проекты\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    tables = load_locale_dir(str(tmp_path))
    assert tables == {"en": {"navigation": {"projects": "Projects"}}, "ru": {"navigation": {"projects": "Проекты"}}}


def test_missing_locale_dir_yields_nothing(tmp_path):
    assert load_locale_dir(str(tmp_path / "missing")) == {}


def test_request_locale_applies_only_inside_its_context(store):
    def page():
        use_locale("ru")
        return store.t("control.save"), store.t("control.save", locale="en")

    assert contextvars.copy_context().run(page) == ("Сохранить", "Save")
    assert store.t("control.save") == "Save"
