"""
Dot-notation access to nested JSON documents.

All functions are pure: the input document is never mutated, and the documents
they return share no containers with it.

Key names containing a literal ``.`` cannot be addressed with dot notation
(``"a.b"`` always means ``{"a": {"b": ...}}``). Pass ``dot_notation=False`` to
treat the whole path as a single top-level key instead.
"""

from __future__ import annotations

from typing import Any, Mapping

from .errors import ContractViolation

JsonDocument = dict[str, Any]

_PRIMITIVES = (str, int, float, bool, type(None))


def _segments(path: Any, dot_notation: bool) -> list[str]:
    if not isinstance(path, str):
        raise ContractViolation(f"Expected key path to be a string, got {type(path).__name__}")
    return path.split(".") if dot_notation else [path]


def clone_document(value: Any) -> Any:
    """
    Structural copy of a JSON-compatible value.

    Mappings become plain dicts and tuples become lists, i.e. the clone has the
    shape the value will have after a trip through the JSON file.
    """
    if isinstance(value, _PRIMITIVES):
        return value
    if isinstance(value, Mapping):
        out: JsonDocument = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise ContractViolation(f"Document keys must be strings, got {type(k).__name__}")
            out[k] = clone_document(v)
        return out
    if isinstance(value, (list, tuple)):
        return [clone_document(v) for v in value]
    raise ContractViolation(f"Value of type {type(value).__name__} is not JSON serializable")


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality; primitives must match by value and kind (True != 1)."""
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[k], b[k]) for k in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, (Mapping, list)) or isinstance(b, (Mapping, list)):
        return False
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def get_property(doc: Mapping[str, Any], path: str, default: Any = None, *, dot_notation: bool = True) -> Any:
    current: Any = doc
    for part in _segments(path, dot_notation):
        if current is None or not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current


def set_property(doc: Mapping[str, Any], path: str, value: Any, *, dot_notation: bool = True) -> JsonDocument:
    parts = _segments(path, dot_notation)
    result: JsonDocument = clone_document(doc)
    current = result
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = clone_document(value)
    return result


def has_property(doc: Mapping[str, Any], path: str, *, dot_notation: bool = True) -> bool:
    current: Any = doc
    for part in _segments(path, dot_notation):
        if not isinstance(current, Mapping) or part not in current:
            return False
        current = current[part]
    return True


def delete_property(doc: Mapping[str, Any], path: str, *, dot_notation: bool = True) -> tuple[JsonDocument, bool]:
    parts = _segments(path, dot_notation)
    result: JsonDocument = clone_document(doc)
    current: Any = result
    for part in parts[:-1]:
        current = current.get(part)
        if not isinstance(current, dict):
            return result, False
    if parts[-1] not in current:
        return result, False
    del current[parts[-1]]
    return result, True
