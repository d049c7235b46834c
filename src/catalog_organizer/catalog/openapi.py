"""OpenAPI catalog queries.

Flattens an exported OpenAPI document (with x-apidog-* extensions) into
Endpoint models, and looks up, filters and searches them.
"""

import copy
import json
import re

from catalog_organizer.catalog.base import (
    FOLDER_EXTENSION,
    MAINTAINER_EXTENSION,
    STATUS_EXTENSION,
    Endpoint,
)
from catalog_organizer.errors import EndpointNotFoundError

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options")

SCHEMA_REF = re.compile(r'"#/components/schemas/([^"]+)"')
QUERY_WORD_SPLIT = re.compile(r"[\s\-_/]+")


def parse_endpoints(document: dict) -> list[Endpoint]:
    """Flatten `paths` into a list of Endpoint, skipping non-operation keys."""
    endpoints = []
    paths = document.get("paths") or {}

    for path, methods in paths.items():
        if not isinstance(methods, dict):
            continue
        for method, operation in methods.items():
            if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                continue

            endpoints.append(
                Endpoint(
                    method=method.upper(),
                    path=path,
                    summary=operation.get("summary") or "",
                    description=operation.get("description") or "",
                    tags=operation.get("tags") or [],
                    deprecated=operation.get("deprecated") or False,
                    folder=operation.get(FOLDER_EXTENSION) or None,
                    status=operation.get(STATUS_EXTENSION) or None,
                    maintainer=operation.get(MAINTAINER_EXTENSION) or None,
                    operation=operation,
                )
            )

    return endpoints


def filter_endpoints(
    endpoints: list[Endpoint],
    *,
    tag: str | None = None,
    path: str | None = None,
    folder: str | None = None,
    status: str | None = None,
) -> list[Endpoint]:
    """Keep endpoints matching every given filter.

    `tag` and `status` match exactly; `path` and `folder` by substring.
    """
    result = endpoints
    if tag:
        result = [e for e in result if tag in e.tags]
    if path:
        result = [e for e in result if path in e.path]
    if folder:
        result = [e for e in result if folder in (e.folder or "")]
    if status:
        result = [e for e in result if e.status == status]
    return result


def _score(endpoint: Endpoint, query: str, words: list[str]) -> int:
    fields = [endpoint.path, endpoint.summary, endpoint.description, *endpoint.tags, endpoint.folder or ""]
    score = 0
    for field in (f.lower() for f in fields):
        if query in field:
            score += 10
        score += sum(3 for word in words if word in field)
    return score


def search_endpoints(
    endpoints: list[Endpoint],
    query: str,
    *,
    method: str | None = None,
    limit: int = 15,
) -> list[tuple[Endpoint, int]]:
    """Rank endpoints by keyword relevance across path, summary, description, tags and folder.

    Returns (endpoint, score) pairs with a positive score, best first.
    """
    query = query.lower()
    words = [w for w in QUERY_WORD_SPLIT.split(query) if w]

    scored = [(ep, _score(ep, query, words)) for ep in endpoints]
    scored = [(ep, score) for ep, score in scored if score > 0]
    if method:
        scored = [(ep, score) for ep, score in scored if ep.method.lower() == method.lower()]

    scored.sort(key=lambda item: item[1], reverse=True)
    return scored[:limit]


def find_operation(document: dict, method: str, path: str) -> dict | None:
    """The operation object stored for `method path`, or None.

    Path items that are not objects (``/x: null`` in a hand-edited export)
    hold no operations.
    """
    path_item = (document.get("paths") or {}).get(path)
    if not isinstance(path_item, dict):
        return None
    operation = path_item.get(method.lower())
    return operation if isinstance(operation, dict) else None


def get_operation(document: dict, method: str, path: str) -> dict:
    """Return a copy of the operation for `method path`."""
    paths = document.get("paths") or {}
    if path not in paths:
        raise EndpointNotFoundError(method, path, available=sorted(paths))
    operation = find_operation(document, method, path)
    if operation is None:
        path_item = paths[path]
        available = list(path_item) if isinstance(path_item, dict) else []
        raise EndpointNotFoundError(method, path, available=available)
    return copy.deepcopy(operation)


def referenced_schemas(document: dict, operation: dict) -> dict:
    """Component schemas referenced anywhere inside `operation`, by name."""
    schemas = (document.get("components") or {}).get("schemas") or {}
    names = SCHEMA_REF.findall(json.dumps(operation))
    return {name: copy.deepcopy(schemas[name]) for name in names if name in schemas}
