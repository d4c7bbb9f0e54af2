"""Tests for the layout codec and storage backends."""

import json
from datetime import datetime, timezone

import pytest

from roomplan.exceptions import LayoutImportError, StorageError
from roomplan.persistence import STORAGE_KEYS, LayoutStore, iso_timestamp, parse_layout
from roomplan.storage import LocalStorage, MemoryStorage
from tests.utils_layout import make_instance, make_line, make_template

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "local"])
def storage(request, tmp_path):
    if request.param == "local":
        return LocalStorage(tmp_path / "layout")
    return MemoryStorage()


@pytest.fixture()
def store(storage):
    return LayoutStore(storage)


def test_storage_get_set_delete(storage):
    assert storage.get("k") is None
    storage.set("k", "v")
    assert storage.get("k") == "v"
    storage.delete("k")
    assert storage.get("k") is None
    storage.delete("k")


def test_storage_clear(storage):
    storage.set("a", "1")
    storage.set("b", "2")
    storage.clear()
    assert storage.get("a") is None and storage.get("b") is None


def test_local_storage_rejects_unsafe_keys(tmp_path):
    storage = LocalStorage(tmp_path)
    with pytest.raises(StorageError):
        storage.set("../escape", "x")
    with pytest.raises(StorageError):
        storage.get("a/b")


def test_local_storage_files(tmp_path):
    storage = LocalStorage(tmp_path)
    storage.set(STORAGE_KEYS["LAYOUT_LINES"], "[]")
    assert (tmp_path / "roomPlanner_lines.json").read_text(encoding="utf-8") == "[]"
    assert not list(tmp_path.glob("*.tmp"))


def test_iso_timestamp_format():
    assert iso_timestamp(FIXED_NOW) == "2024-01-02T03:04:05.678Z"


def test_save_and_load_collections(store):
    lines = [make_line(0, 0, 100, 0, line_id="a"), make_line(0, 0, 0, 40, line_id="b", type="door")]
    furniture = [make_instance(1, 2, rotation=180)]
    templates = [make_template()]

    assert store.save_lines(lines)
    assert store.save_furniture(furniture)
    assert store.save_templates(templates)
    assert store.save_grid_scale(6)

    assert store.load_lines() == lines
    assert store.load_furniture() == furniture
    assert store.load_templates() == templates
    assert store.load_grid_scale() == 6


def test_load_missing_keys_returns_empty(store):
    assert store.load_lines() == []
    assert store.load_furniture() == []
    assert store.load_templates() == []
    assert store.load_grid_scale() is None


def test_load_malformed_json_returns_empty(storage):
    storage.set(STORAGE_KEYS["LAYOUT_LINES"], "{not json")
    storage.set(STORAGE_KEYS["GRID_SCALE"], "oops")
    store = LayoutStore(storage)
    assert store.load_lines() == []
    assert store.load_grid_scale() is None


def test_load_drops_invalid_entries(storage):
    valid = make_line(0, 0, 100, 0).model_dump(mode="json")
    storage.set(STORAGE_KEYS["LAYOUT_LINES"], json.dumps([valid, {"id": "broken"}, 42]))
    storage.set(STORAGE_KEYS["LAYOUT_FURNITURE"], json.dumps({"not": "a list"}))
    store = LayoutStore(storage)

    assert [line.id for line in store.load_lines()] == ["l"]
    assert store.load_furniture() == []


@pytest.mark.parametrize("raw", ["0", "-3", "true", '"12"', "NaN", "Infinity", "5000", "0.01"])
def test_invalid_stored_scale_is_ignored(storage, raw):
    storage.set(STORAGE_KEYS["GRID_SCALE"], raw)
    assert LayoutStore(storage).load_grid_scale() is None


def test_templates_without_category_omit_the_key(storage):
    store = LayoutStore(storage)
    store.save_templates([make_template()])
    stored = json.loads(storage.get(STORAGE_KEYS["FURNITURE_TEMPLATES"]))
    assert "category" not in stored[0]


def test_export_layout_shape(store):
    store.save_lines([make_line(0, 0, 100, 0)])
    store.save_furniture([make_instance(1, 2)])
    store.save_templates([make_template()])

    text = store.export_layout(FIXED_NOW)
    data = json.loads(text)

    assert set(data) == {"lines", "furniture", "templates", "gridScale", "version", "exportedAt"}
    assert data["version"] == "1.0"
    assert data["exportedAt"] == "2024-01-02T03:04:05.678Z"
    assert data["gridScale"] is None
    assert data["lines"][0] == {
        "id": "l",
        "start": {"x": 0.0, "y": 0.0},
        "end": {"x": 100.0, "y": 0.0},
        "type": "wall",
        "thickness": 4.0,
        "color": "#000000",
    }
    assert data["furniture"][0]["templateId"] == "t"
    assert "category" not in data["templates"][0]
    assert text.startswith('{\n  "lines"')


def test_export_then_import_restores_layout(store):
    store.save_lines([make_line(0, 0, 100, 0)])
    store.save_furniture([make_instance(1, 2, rotation=90)])
    store.save_templates([make_template()])
    store.save_grid_scale(24)
    exported = store.export_layout(FIXED_NOW)

    target = LayoutStore(MemoryStorage())
    assert target.import_layout(exported)
    assert target.load_lines() == store.load_lines()
    assert target.load_furniture() == store.load_furniture()
    assert target.load_templates() == store.load_templates()
    assert target.load_grid_scale() == 24


def test_import_invalid_json_fails_without_changes(store):
    store.save_lines([make_line(0, 0, 100, 0)])
    assert not store.import_layout("not json at all")
    assert len(store.load_lines()) == 1


def test_import_merges_only_present_keys(store):
    store.save_lines([make_line(0, 0, 100, 0)])
    store.save_templates([make_template()])

    new_line = make_line(5, 5, 50, 5, line_id="new").model_dump(mode="json")
    assert store.import_layout(json.dumps({"lines": [new_line], "templates": None}))

    assert [line.id for line in store.load_lines()] == ["new"]
    assert store.load_templates() == [make_template()]


def test_import_empty_lists_replace(store):
    store.save_lines([make_line(0, 0, 100, 0)])
    assert store.import_layout(json.dumps({"lines": []}))
    assert store.load_lines() == []


@pytest.mark.parametrize("payload", ["[]", "42", '"text"', "null"])
def test_import_non_object_is_a_no_op(store, payload):
    store.save_lines([make_line(0, 0, 100, 0)])
    assert store.import_layout(payload)
    assert len(store.load_lines()) == 1


@pytest.mark.parametrize("scale", ["-4", "0", "NaN", "Infinity", "-Infinity", "5000", "0.01", "true"])
def test_import_ignores_invalid_scale(store, scale):
    store.save_grid_scale(12)
    assert store.import_layout('{"gridScale": ' + scale + "}")
    assert store.load_grid_scale() == 12


def test_import_accepts_scale_at_limits(store):
    assert store.import_layout('{"gridScale": 1}')
    assert store.load_grid_scale() == 1
    assert store.import_layout('{"gridScale": 120}')
    assert store.load_grid_scale() == 120


def test_parse_layout_errors():
    with pytest.raises(LayoutImportError):
        parse_layout("{")
    assert parse_layout("[1, 2]") == {}
    assert parse_layout('{"lines": []}') == {"lines": []}


def test_clear_removes_all_keys(storage):
    store = LayoutStore(storage)
    store.save_lines([make_line(0, 0, 100, 0)])
    store.save_grid_scale(6)
    store.clear()
    assert all(storage.get(key) is None for key in STORAGE_KEYS.values())
