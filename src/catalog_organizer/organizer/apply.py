"""Apply an approved folder reorganization to a catalog document."""

import copy
import logging
from collections.abc import Iterable

from catalog_organizer.catalog.base import FOLDER_EXTENSION, FolderChange
from catalog_organizer.catalog.openapi import find_operation

logger = logging.getLogger(__name__)


def _as_change(change: FolderChange | dict) -> FolderChange:
    if isinstance(change, FolderChange):
        return change
    return FolderChange.model_validate(change)


def apply_reorganization(document: dict, changes: Iterable[FolderChange | dict]) -> dict:
    """Return a copy of `document` with each change's folder extension updated.

    Changes whose endpoint no longer exists are skipped. The input document
    is never modified.
    """
    updated = copy.deepcopy(document)

    for change in map(_as_change, changes):
        operation = find_operation(updated, change.method, change.path)
        if operation is None:
            logger.debug("Skipping %s %s: endpoint not in document", change.method, change.path)
            continue
        operation[FOLDER_EXTENSION] = change.new_folder

    return updated


def count_applicable(document: dict, changes: Iterable[FolderChange | dict]) -> int:
    """How many of `changes` resolve to an endpoint in `document`."""
    return sum(
        1 for change in map(_as_change, changes)
        if find_operation(document, change.method, change.path) is not None
    )
