"""Render a diff as grouped, human-readable text."""

import json
from typing import Any

from catalog_organizer.catalog.base import DiffChange

NO_CHANGES = "No changes detected."
MAX_VALUE_LENGTH = 150


def truncate(text: str, max_length: int = MAX_VALUE_LENGTH) -> str:
    return text[:max_length] + "..." if len(text) > max_length else text


def _render(value: Any) -> str:
    return truncate(json.dumps(value, ensure_ascii=False, default=str))


def format_diff(changes: list[DiffChange]) -> str:
    """Group changes by top-level field, in order of first appearance."""
    if not changes:
        return NO_CHANGES

    groups: dict[str, list[DiffChange]] = {}
    for change in changes:
        section = change.path.split(".")[0]
        groups.setdefault(section, []).append(change)

    lines = [f"{len(changes)} change(s) detected:\n"]

    for section, section_changes in groups.items():
        lines.append(f"{section}:")
        for change in section_changes:
            field = change.path.removeprefix(f"{section}.")
            if change.kind == "added":
                lines.append(f"  + {field}: {_render(change.value)}")
            elif change.kind == "removed":
                lines.append(f"  - {field}: {_render(change.value)}")
            else:
                lines.append(f"  ~ {field}:")
                lines.append(f"      old: {_render(change.old_value)}")
                lines.append(f"      new: {_render(change.new_value)}")

    return "\n".join(lines)
