"""Runtime narrowing for GitHub payloads and manifest files.

`json.loads` and `tomllib.loads` return untyped values. The accessors below
check the shape once at the boundary and hand back a typed value or None,
so callers never index into an unchecked payload.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    if not isinstance(obj, dict):
        return False
    return all(isinstance(key, str) for key in cast(dict[object, object], obj))


def as_str_dict(obj: object) -> StrDict | None:
    return obj if is_str_dict(obj) else None


def as_obj_list(obj: object) -> ObjList | None:
    return cast(ObjList, obj) if isinstance(obj, list) else None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """String at `key`, stripped. Blank strings count as missing."""
    value = table.get(key)
    if not isinstance(value, str):
        return None
    return value.strip() or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    # bool is an int subclass; `"number": true` is not PR #1.
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    value = table.get(key)
    return value if isinstance(value, bool) else None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def get_list(table: Mapping[str, object], key: str) -> ObjList | None:
    return as_obj_list(table.get(key))


def get_nested(table: Mapping[str, object], *keys: str) -> StrDict | None:
    """Walk nested tables, e.g. `get_nested(pyproject, "tool", "poetry")`."""
    current = as_str_dict(dict(table))
    for key in keys:
        if current is None:
            return None
        current = get_table(current, key)
    return current
