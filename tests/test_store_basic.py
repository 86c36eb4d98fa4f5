from __future__ import annotations

import json
from pathlib import Path

import pytest

from settings_store import ContractViolation, Store


def _read_raw(store: Store):
    return json.loads(store.path.read_text(encoding="utf-8"))


def test_default_path_uses_user_data_dir(main_host, user_data: Path):
    store = Store()
    assert store.path == user_data / "config.json"
    assert store.path.exists()


def test_cwd_absolute_replaces_and_relative_joins(main_host, user_data: Path, tmp_path: Path):
    absolute = Store(cwd=tmp_path / "abs", name="prefs")
    relative = Store(cwd="sub/dir")

    assert absolute.path == tmp_path / "abs" / "prefs.json"
    assert relative.path == user_data / "sub" / "dir" / "config.json"


def test_file_extension_option(store_dir: Path):
    store = Store(cwd=store_dir, name="state", file_extension="settings")
    assert store.path.name == "state.settings"


def test_set_nested_then_get_and_raw_file(store_dir: Path):
    store = Store(cwd=store_dir)

    store.set("x.y", 1)

    assert store.get("x") == {"y": 1}
    assert _read_raw(store) == {"x": {"y": 1}}


@pytest.mark.parametrize(
    "value",
    ["bar", 0, 3.5, True, None, [1, "two", {"three": 3}], {"deep": {"er": []}}],
)
def test_set_then_get_returns_equal_value(store_dir: Path, value):
    store = Store(cwd=store_dir)
    store.set("some.key", value)
    assert store.get("some.key") == value
    assert store.has("some.key")


def test_get_default_and_missing(store_dir: Path):
    store = Store(cwd=store_dir)

    assert store.get("nope") is None
    assert store.get("nope", "fallback") == "fallback"
    store.set("nil", None)
    assert store.get("nil", "fallback") is None


def test_get_returns_copies(store_dir: Path):
    store = Store(cwd=store_dir)
    store.set("list", [1, 2])

    got = store.get("list")
    got.append(3)

    assert store.get("list") == [1, 2]


def test_set_mapping_sets_each_key_path(store_dir: Path):
    store = Store(cwd=store_dir)
    store.set("keep", 1)

    store.set({"a": 1, "b.c": 2})

    assert store.store == {"keep": 1, "a": 1, "b": {"c": 2}}


def test_set_argument_errors(store_dir: Path):
    store = Store(cwd=store_dir)

    with pytest.raises(ContractViolation):
        store.set("only-key")
    with pytest.raises(ContractViolation):
        store.set(42, "x")  # type: ignore[arg-type]
    with pytest.raises(ContractViolation):
        store.set({"a": 1}, "extra")
    with pytest.raises(TypeError):
        store.set("when", object())
    # nothing was written by the failed calls
    assert store.store == {}


def test_non_string_keys_fail_fast(store_dir: Path):
    store = Store(cwd=store_dir)
    with pytest.raises(TypeError):
        store.get(1)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        store.has(None)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        store.delete(["a"])  # type: ignore[arg-type]


def test_nested_delete(store_dir: Path):
    store = Store(cwd=store_dir)
    store.set("a", {"b": "c"})

    assert store.delete("a.b") is True

    assert store.has("a.b") is False
    assert store.has("a") is True
    assert store.get("a") == {}
    assert store.delete("a.b") is False
    assert store.delete("missing.path") is False


def test_clear_is_immediate_and_idempotent(store_dir: Path):
    store = Store(cwd=store_dir)
    store.set({"a": 1, "b": 2})

    store.clear()
    assert store.store == {}
    assert _read_raw(store) == {}

    store.clear()
    assert store.store == {}
    assert len(store) == 0


def test_store_property_replaces_whole_document(store_dir: Path):
    store = Store(cwd=store_dir)
    store.set("old", True)

    store.store = {"new": {"v": 1}}

    assert store.store == {"new": {"v": 1}}
    assert _read_raw(store) == {"new": {"v": 1}}
    with pytest.raises(ContractViolation):
        store.store = ["not", "a", "mapping"]  # type: ignore[assignment]


def test_iteration_yields_top_level_pairs(store_dir: Path):
    store = Store(cwd=store_dir)
    store.set("a", 1)
    store.set("b", 2)
    store.set("c", 3)

    assert dict(store) == {"a": 1, "b": 2, "c": 3}
    assert len(list(store)) == 3
    # restartable
    assert list(store) == list(store)

    store.clear()
    store.set("user", {"name": "Test", "age": 30})
    store.set("settings", {"theme": "dark"})
    assert sorted(k for k, _ in store) == ["settings", "user"]
    assert store.size == 2
    assert "user.name" in store


def test_reset_restores_defaults(store_dir: Path):
    store = Store(cwd=store_dir, defaults={"theme": "light", "ui": {"zoom": 1}})
    store.set({"theme": "dark", "ui.zoom": 2, "extra": True})

    store.reset("theme", "ui.zoom", "extra")

    assert store.store == {"theme": "light", "ui": {"zoom": 1}}


def test_literal_dot_keys_with_dot_notation_off(store_dir: Path):
    store = Store(cwd=store_dir, dot_notation=False)
    store.set("a.b", 1)

    assert store.store == {"a.b": 1}
    assert store.get("a.b") == 1
    assert store.delete("a.b") is True


def test_invalid_options_are_contract_violations(store_dir: Path):
    with pytest.raises(ContractViolation):
        Store(cwd=store_dir, consistency="sometimes")
    with pytest.raises(ContractViolation):
        Store(cwd=store_dir, name="   ")
    with pytest.raises(ContractViolation):
        Store(cwd=store_dir, defaults={"bad": object()})
