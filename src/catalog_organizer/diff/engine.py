"""Structural diff of two JSON-like values.

Used to show what an edit to an operation object changes before it is
written back to the catalog.
"""

import json
from typing import Any

from catalog_organizer.catalog.base import DiffChange

# Cross-link annotation added by the catalog on export; never a real change.
IGNORED_KEYS = frozenset({"x-run-in-apidog"})

_MISSING = object()


def _normalize(value: Any) -> Any:
    """Integral floats become ints so `1.0` and `1` serialize alike."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize(item) for key, item in value.items()}
    return value


def _canonical(value: Any) -> str:
    return json.dumps(_normalize(value), separators=(",", ":"), default=str)


def deep_diff(old: dict | None, new: dict | None, base_path: str = "") -> list[DiffChange]:
    """Compare two mappings key by key, recursing into nested mappings.

    Lists are compared whole: any difference yields one `changed` entry.
    """
    old = old or {}
    new = new or {}
    changes: list[DiffChange] = []

    keys = list(old)
    keys.extend(k for k in new if k not in old)

    for key in keys:
        if key in IGNORED_KEYS:
            continue

        field_path = f"{base_path}.{key}" if base_path else str(key)
        old_val = old.get(key, _MISSING)
        new_val = new.get(key, _MISSING)

        if old_val is _MISSING:
            changes.append(DiffChange(kind="added", path=field_path, value=new_val))
        elif new_val is _MISSING:
            changes.append(DiffChange(kind="removed", path=field_path, value=old_val))
        elif isinstance(old_val, list) and isinstance(new_val, list):
            if _canonical(old_val) != _canonical(new_val):
                changes.append(DiffChange(kind="changed", path=field_path, old_value=old_val, new_value=new_val))
        elif isinstance(old_val, dict) and isinstance(new_val, dict):
            changes.extend(deep_diff(old_val, new_val, field_path))
        elif isinstance(old_val, bool) != isinstance(new_val, bool) or old_val != new_val:
            changes.append(DiffChange(kind="changed", path=field_path, old_value=old_val, new_value=new_val))

    return changes
