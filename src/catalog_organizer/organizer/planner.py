"""Folder reorganization planner.

Produces a dry-run plan (current folder -> proposed folder for every
endpoint). Nothing is applied here; the operator approves the plan and
hands its changes to `apply_reorganization`.

Strategies:
- path-based: infer folders from URL paths (/api/v1/admin/billing/... -> Admin/Billing)
- preserve-top-level: keep the existing top-level folder, re-infer sub-levels
- flat: a single level named after the main resource
"""

import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel

from catalog_organizer.catalog.base import (
    FALLBACK_FOLDER,
    NO_FOLDER,
    Endpoint,
    EndpointRef,
    FolderChange,
    ReorganizationPlan,
    UnchangedEndpoint,
)
from catalog_organizer.errors import UnknownStrategyError
from catalog_organizer.organizer.infer import infer_folder_from_path, is_version_segment

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    PATH_BASED = "path-based"
    PRESERVE_TOP_LEVEL = "preserve-top-level"
    FLAT = "flat"


class PlanOptions(BaseModel):
    strategy: str = Strategy.PATH_BASED.value
    group_by_version: bool = False
    strip_api_prefix: bool = True
    max_depth: int = 3
    custom_mappings: dict[str, str] = {}  # path prefix -> folder, first match wins
    strict: bool = False


def _path_based(ep: Endpoint, current: str | None, options: PlanOptions) -> str:
    return infer_folder_from_path(
        ep.path,
        strip_api_prefix=options.strip_api_prefix,
        strip_version=not options.group_by_version,
        max_depth=options.max_depth,
    )


def _preserve_top_level(ep: Endpoint, current: str | None, options: PlanOptions) -> str:
    if not current:
        return _path_based(ep, current, options)
    top_level = current.split("/")[0]
    sub_path = infer_folder_from_path(
        ep.path,
        strip_api_prefix=options.strip_api_prefix,
        strip_version=True,
        max_depth=options.max_depth - 1,
    )
    return f"{top_level}/{sub_path}"


def _flat(ep: Endpoint, current: str | None, options: PlanOptions) -> str:
    segments = [
        s for s in ep.path.split("/")
        if s and not s.startswith("{") and s.lower() != "api" and not is_version_segment(s)
    ]
    if not segments:
        return FALLBACK_FOLDER
    first = segments[0]
    return first[:1].upper() + first[1:]


STRATEGIES: dict[Strategy, Callable[[Endpoint, str | None, PlanOptions], str]] = {
    Strategy.PATH_BASED: _path_based,
    Strategy.PRESERVE_TOP_LEVEL: _preserve_top_level,
    Strategy.FLAT: _flat,
}


def resolve_strategy(name: str, strict: bool = False) -> Strategy:
    """Map a strategy name to a known strategy.

    Unknown names fall back to path-based unless `strict` is set.
    """
    try:
        return Strategy(name)
    except ValueError:
        if strict:
            known = ", ".join(s.value for s in Strategy)
            raise UnknownStrategyError(f"Unknown strategy {name!r} (expected one of: {known})") from None
        logger.warning("Unknown strategy %r, falling back to %s", name, Strategy.PATH_BASED.value)
        return Strategy.PATH_BASED


def _match_custom_mapping(path: str, custom_mappings: dict[str, str]) -> str | None:
    for prefix, folder in custom_mappings.items():
        if path.startswith(prefix):
            return folder
    return None


def propose_folder(ep: Endpoint, options: PlanOptions, strategy: Strategy | None = None) -> str:
    """The proposed folder for a single endpoint; never blank."""
    if strategy is None:
        strategy = resolve_strategy(options.strategy, options.strict)

    folder = _match_custom_mapping(ep.path, options.custom_mappings)
    if folder is None:
        folder = STRATEGIES[strategy](ep, ep.current_folder, options)

    if not folder or not folder.strip():
        return FALLBACK_FOLDER
    return folder


def propose_reorganization(endpoints: list[Endpoint], options: PlanOptions | None = None) -> ReorganizationPlan:
    """Propose a folder for every endpoint and classify it as moved or unchanged."""
    options = options or PlanOptions()
    strategy = resolve_strategy(options.strategy, options.strict)

    changes: list[FolderChange] = []
    unchanged: list[UnchangedEndpoint] = []
    current_folders: dict[str, list[EndpointRef]] = {}
    proposed_folders: dict[str, list[EndpointRef]] = {}

    for ep in endpoints:
        current = ep.current_folder
        new_folder = propose_folder(ep, options, strategy)
        ref = EndpointRef.of(ep)

        if current:
            current_folders.setdefault(current, []).append(ref)
        proposed_folders.setdefault(new_folder, []).append(ref)

        if current == new_folder:
            unchanged.append(UnchangedEndpoint(method=ep.method, path=ep.path, folder=current))
        else:
            changes.append(
                FolderChange(
                    method=ep.method,
                    path=ep.path,
                    summary=ep.summary,
                    old_folder=current or NO_FOLDER,
                    new_folder=new_folder,
                )
            )

    logger.debug(
        "Planned %d endpoints with %s: %d changes, %d unchanged",
        len(endpoints), strategy.value, len(changes), len(unchanged),
    )

    return ReorganizationPlan(
        strategy=options.strategy,
        total_endpoints=len(endpoints),
        changes_count=len(changes),
        unchanged_count=len(unchanged),
        current_folders=current_folders,
        proposed_folders=proposed_folders,
        changes=changes,
        unchanged=unchanged,
    )
