"""Copy-then-modify edits of a catalog document.

Every function returns a new document; the caller's document is left
untouched so a rejected edit cannot leak into it.
"""

import copy
from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel

from catalog_organizer.catalog.base import DiffChange
from catalog_organizer.diff.engine import deep_diff
from catalog_organizer.errors import EndpointNotFoundError


class UpsertResult(BaseModel):
    document: dict
    action: Literal["CREATE", "UPDATE"]
    changes: list[DiffChange] = []


class OperationEntry(BaseModel):
    """One item of a batch upsert."""
    method: str
    path: str
    operation: dict


class BatchUpsertResult(BaseModel):
    document: dict
    endpoints: list[dict]


def _ensure_tags(document: dict, tag_names: list[str]) -> None:
    tags = document.setdefault("tags", [])
    existing = {t.get("name") for t in tags if isinstance(t, dict)}
    for name in tag_names:
        if name not in existing:
            tags.append({"name": name})
            existing.add(name)


def _path_item(document: dict, path: str) -> dict:
    """The path item for `path` in `document`, created when missing or null."""
    if not isinstance(document.get("paths"), dict):
        document["paths"] = {}
    paths = document["paths"]
    if not isinstance(paths.get(path), dict):
        paths[path] = {}
    return paths[path]


def upsert_operation(document: dict, method: str, path: str, operation: dict) -> UpsertResult:
    """Create or replace the operation for `method path`.

    For an update, `changes` lists what differs from the existing operation.
    """
    method = method.lower()
    updated = copy.deepcopy(document)
    path_item = _path_item(updated, path)

    existing = path_item.get(method)
    changes = deep_diff(existing, operation) if existing is not None else []

    path_item[method] = copy.deepcopy(operation)
    _ensure_tags(updated, operation.get("tags") or [])

    return UpsertResult(
        document=updated,
        action="UPDATE" if existing is not None else "CREATE",
        changes=changes,
    )


def upsert_operations(document: dict, entries: Iterable[OperationEntry | dict]) -> BatchUpsertResult:
    """Create or replace several operations in one pass.

    Entries are applied in order, so a later entry for the same endpoint
    replaces an earlier one and reports UPDATE.
    """
    updated = copy.deepcopy(document)
    endpoints = []

    for entry in entries:
        if not isinstance(entry, OperationEntry):
            entry = OperationEntry.model_validate(entry)
        result = upsert_operation(updated, entry.method, entry.path, entry.operation)
        updated = result.document
        endpoints.append({
            "endpoint": f"{entry.method.upper()} {entry.path}",
            "action": result.action,
        })

    return BatchUpsertResult(document=updated, endpoints=endpoints)


def delete_operation(document: dict, method: str, path: str) -> dict:
    """Remove `method path`, dropping the path item once it has no operations left."""
    method = method.lower()
    paths = document.get("paths") or {}
    if path not in paths:
        raise EndpointNotFoundError(method, path, available=sorted(paths))
    path_item = paths[path]
    if not isinstance(path_item, dict) or method not in path_item:
        available = list(path_item) if isinstance(path_item, dict) else []
        raise EndpointNotFoundError(method, path, available=available)

    updated = copy.deepcopy(document)
    del updated["paths"][path][method]
    if not updated["paths"][path]:
        del updated["paths"][path]
    return updated


def upsert_schema(document: dict, name: str, schema: dict) -> dict:
    """Create or replace `components.schemas[name]`."""
    return merge_documents(document, {"components": {"schemas": {name: schema}}})


def merge_documents(base: dict, partial: dict) -> dict:
    """Merge a partial document into a copy of `base`.

    Operations are merged per path and method, component schemas are
    replaced by name, and tags are appended when their name is new.
    """
    merged = copy.deepcopy(base)
    partial = copy.deepcopy(partial)

    for path, methods in (partial.get("paths") or {}).items():
        if isinstance(methods, dict):
            _path_item(merged, path).update(methods)

    schemas = (partial.get("components") or {}).get("schemas")
    if schemas:
        components = merged.setdefault("components", {})
        components.setdefault("schemas", {}).update(schemas)

    if partial.get("tags"):
        merged.setdefault("tags", [])
        existing = {t.get("name") for t in merged["tags"]}
        for tag in partial["tags"]:
            if tag.get("name") not in existing:
                merged["tags"].append(tag)
                existing.add(tag.get("name"))

    return merged
