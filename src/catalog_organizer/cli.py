"""CLI entry point for catalog-organizer."""

import json
import logging
from pathlib import Path

import click
from pydantic import BaseModel, ValidationError

from catalog_organizer.catalog.base import Endpoint, FolderChange
from catalog_organizer.catalog.editor import (
    OperationEntry,
    delete_operation,
    merge_documents,
    upsert_operation,
    upsert_operations,
    upsert_schema,
)
from catalog_organizer.catalog.loader import dump_document, load_document, load_spec
from catalog_organizer.catalog.openapi import (
    filter_endpoints,
    find_operation,
    get_operation,
    parse_endpoints,
    referenced_schemas,
    search_endpoints,
)
from catalog_organizer.diff.engine import deep_diff
from catalog_organizer.diff.formatter import format_diff
from catalog_organizer.errors import CatalogError, EndpointNotFoundError, UnknownStrategyError
from catalog_organizer.organizer.analyze import analyze_folders, folder_sizes
from catalog_organizer.organizer.apply import apply_reorganization, count_applicable
from catalog_organizer.organizer.planner import PlanOptions, Strategy, propose_reorganization

DRY_RUN_NOTICE = (
    "THIS IS A DRY-RUN. No changes have been made. "
    "Review the plan and approve it before running `apply`."
)

METHOD_CHOICE = click.Choice(["get", "post", "put", "patch", "delete", "head", "options"], case_sensitive=False)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _read_document(file_path: Path):
    try:
        return load_document(file_path)
    except CatalogError as e:
        raise click.ClickException(str(e)) from e


def _read_operation(file_path: Path) -> dict:
    operation = _read_document(file_path)
    if not isinstance(operation, dict):
        raise click.ClickException(f"{file_path}: expected an operation object")
    return operation


def _load_spec(doc_path: Path) -> dict:
    try:
        return load_spec(doc_path)
    except CatalogError as e:
        raise click.ClickException(str(e)) from e


def _load_endpoints(doc_path: Path) -> list[Endpoint]:
    endpoints = parse_endpoints(_load_spec(doc_path))
    click.echo(f"Found {len(endpoints)} endpoints in {doc_path}.", err=True)
    return endpoints


def _summarize(endpoint: Endpoint) -> dict:
    return {
        "method": endpoint.method,
        "path": endpoint.path,
        "summary": endpoint.summary,
        "tags": endpoint.tags,
        "folder": endpoint.folder,
        "status": endpoint.status,
        "deprecated": endpoint.deprecated,
    }


def _parse_mapping_option(ctx, param, values: tuple[str, ...]) -> dict[str, str]:
    mappings = {}
    for value in values:
        prefix, sep, folder = value.partition("=")
        if not sep or not prefix:
            raise click.BadParameter(f"expected PREFIX=FOLDER, got {value!r}", ctx=ctx, param=param)
        mappings[prefix] = folder
    return mappings


def _load_mappings(mappings_file: Path | None, inline: dict[str, str]) -> dict[str, str]:
    """Custom mappings from a file first, then --map options, in declaration order."""
    mappings: dict[str, str] = {}
    if mappings_file is not None:
        data = _read_document(mappings_file)
        if not isinstance(data, dict):
            raise click.BadParameter("mappings file must contain a PREFIX: FOLDER mapping", param_hint="--mappings")
        data = data.get("customMappings", data)
        mappings.update({str(prefix): str(folder) for prefix, folder in data.items()})
    for prefix, folder in inline.items():
        mappings.setdefault(prefix, folder)
    return mappings


def _validate_entries(source: Path, entries: list, model: type[BaseModel], label: str) -> list:
    """Validate every item of `entries` as `model`, naming the first bad one (1-based)."""
    validated = []
    for number, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            raise click.ClickException(f"{source}: {label} #{number} is not an object")
        try:
            validated.append(model.model_validate(entry))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            where = f" ({str(entry.get('method', '')).upper()} {entry.get('path', '')})" if "path" in entry else ""
            raise click.ClickException(f"{source}: {label} #{number}{where} is invalid: {problems}") from e
    return validated


def _read_changes(plan_path: Path) -> list[FolderChange]:
    data = _read_document(plan_path)
    if isinstance(data, dict):
        data = data.get("changes")
    if not isinstance(data, list):
        raise click.ClickException(f"{plan_path}: expected a plan with a `changes` array")
    return _validate_entries(plan_path, data, FolderChange, "change")


def _read_operation_entries(entries_path: Path) -> list[OperationEntry]:
    data = _read_document(entries_path)
    if isinstance(data, dict):
        data = data.get("endpoints")
    if not isinstance(data, list):
        raise click.ClickException(f"{entries_path}: expected a list of {{method, path, operation}} entries")
    return _validate_entries(entries_path, data, OperationEntry, "endpoint")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging on stderr.")
def main(verbose: bool):
    """Catalog Organizer: reorganize API catalog folders and preview endpoint edits."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def analyze(doc_path: Path):
    """Show the current folder structure and unfoldered endpoints."""
    analysis = analyze_folders(_load_endpoints(doc_path))

    _echo_json({
        "totalEndpoints": analysis.total_endpoints,
        "totalFolders": analysis.total_folders,
        "unfolderedCount": analysis.unfoldered_count,
        "unfoldered": [ep.key for ep in analysis.unfoldered],
        "folderTree": {folder: [ep.key for ep in eps] for folder, eps in analysis.folders.items()},
        "folderSizes": folder_sizes(analysis),
    })


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--strategy", default=Strategy.PATH_BASED.value, envvar="CATALOG_ORGANIZER_STRATEGY", show_default=True, help="path-based, preserve-top-level or flat.")
@click.option("--group-by-version", is_flag=True, help="Keep version segments (v1, v2) as folders.")
@click.option("--keep-api-prefix", is_flag=True, help="Keep a leading /api segment as a folder.")
@click.option("--max-depth", default=3, type=click.IntRange(min=1), envvar="CATALOG_ORGANIZER_MAX_DEPTH", show_default=True, help="Maximum folder depth.")
@click.option("--mappings", "mappings_file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML/JSON file of PREFIX: FOLDER overrides.")
@click.option("--map", "inline_mappings", multiple=True, callback=_parse_mapping_option, help="PREFIX=FOLDER override; repeatable.")
@click.option("--strict", is_flag=True, help="Fail on an unknown strategy instead of falling back to path-based.")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write the plan here instead of stdout.")
def propose(
    doc_path: Path,
    strategy: str,
    group_by_version: bool,
    keep_api_prefix: bool,
    max_depth: int,
    mappings_file: Path | None,
    inline_mappings: dict[str, str],
    strict: bool,
    output: Path | None,
):
    """Propose a folder reorganization (dry run)."""
    endpoints = _load_endpoints(doc_path)
    options = PlanOptions(
        strategy=strategy,
        group_by_version=group_by_version,
        strip_api_prefix=not keep_api_prefix,
        max_depth=max_depth,
        custom_mappings=_load_mappings(mappings_file, inline_mappings),
        strict=strict,
    )

    try:
        plan = propose_reorganization(endpoints, options)
    except UnknownStrategyError as e:
        raise click.BadParameter(str(e), param_hint="--strategy") from e

    result = {"_notice": DRY_RUN_NOTICE, **plan.to_json_dict()}
    if output:
        dump_document(result, output)
        click.echo(f"Plan with {plan.changes_count} changes saved to {output}", err=True)
    else:
        _echo_json(result)


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("plan_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False, path_type=Path), help="Output path for the updated document.")
def apply(doc_path: Path, plan_path: Path, output: Path):
    """Apply an approved plan's changes to a document."""
    document = _load_spec(doc_path)
    changes = _read_changes(plan_path)

    updated = apply_reorganization(document, changes)
    dump_document(updated, output)

    _echo_json({
        "success": True,
        "action": "REORGANIZE_FOLDERS",
        "endpointsUpdated": count_applicable(document, changes),
        "totalChangesRequested": len(changes),
        "output": str(output),
    })


@main.command("list")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--tag", help="Filter by tag name.")
@click.option("--path", "path_filter", help="Filter by path substring.")
@click.option("--folder", help="Filter by folder substring.")
@click.option("--status", help="Filter by status (e.g. released, deprecated).")
def list_endpoints(doc_path: Path, tag: str | None, path_filter: str | None, folder: str | None, status: str | None):
    """List endpoints, optionally filtered."""
    endpoints = filter_endpoints(
        _load_endpoints(doc_path), tag=tag, path=path_filter, folder=folder, status=status
    )
    _echo_json({"total": len(endpoints), "endpoints": [_summarize(e) for e in endpoints]})


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("query")
@click.option("--method", type=METHOD_CHOICE, help="Only endpoints with this HTTP method.")
def search(doc_path: Path, query: str, method: str | None):
    """Search endpoints by keyword."""
    results = search_endpoints(_load_endpoints(doc_path), query, method=method)
    _echo_json({
        "query": query,
        "total": len(results),
        "results": [{**_summarize(ep), "score": score} for ep, score in results],
    })


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("method", type=METHOD_CHOICE)
@click.argument("path")
def show(doc_path: Path, method: str, path: str):
    """Show one operation with the component schemas it references."""
    document = _load_spec(doc_path)
    try:
        operation = get_operation(document, method, path)
    except EndpointNotFoundError as e:
        raise click.ClickException(f"{e}. Available: {', '.join(e.available)}") from e

    _echo_json({
        "path": path,
        "method": method.lower(),
        "operation": operation,
        "referencedSchemas": referenced_schemas(document, operation),
    })


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("method", type=METHOD_CHOICE)
@click.argument("path")
@click.argument("operation_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the raw change list as JSON.")
def diff(doc_path: Path, method: str, path: str, operation_path: Path, as_json: bool):
    """Preview what replacing an operation would change."""
    document = _load_spec(doc_path)
    existing = find_operation(document, method, path)
    changes = deep_diff(existing, _read_operation(operation_path))

    if as_json:
        _echo_json([c.to_json_dict() for c in changes])
    else:
        if existing is None:
            click.echo(f"{method.upper()} {path} does not exist yet; every field is new.", err=True)
        click.echo(format_diff(changes))


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("method", type=METHOD_CHOICE)
@click.argument("path")
@click.argument("operation_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False, path_type=Path), help="Output path for the updated document.")
def upsert(doc_path: Path, method: str, path: str, operation_path: Path, output: Path):
    """Create or update an operation and write the merged document."""
    operation = _read_operation(operation_path)

    result = upsert_operation(_load_spec(doc_path), method, path, operation)
    dump_document(result.document, output)

    click.echo(f"{result.action} {method.upper()} {path}")
    click.echo(format_diff(result.changes) if result.action == "UPDATE" else "(new endpoint)")
    click.echo(f"Saved to {output}", err=True)


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("method", type=METHOD_CHOICE)
@click.argument("path")
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False, path_type=Path), help="Output path for the updated document.")
def delete(doc_path: Path, method: str, path: str, output: Path):
    """Remove an operation, leaving all others untouched."""
    try:
        updated = delete_operation(_load_spec(doc_path), method, path)
    except CatalogError as e:
        raise click.ClickException(str(e)) from e

    dump_document(updated, output)
    click.echo(f"DELETE {method.upper()} {path}")
    click.echo(f"Saved to {output}", err=True)


@main.command("upsert-many")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("entries_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False, path_type=Path), help="Output path for the updated document.")
def upsert_many(doc_path: Path, entries_path: Path, output: Path):
    """Create or update several operations from a file of {method, path, operation} entries."""
    entries = _read_operation_entries(entries_path)

    result = upsert_operations(_load_spec(doc_path), entries)
    dump_document(result.document, output)

    _echo_json({"success": True, "endpoints": result.endpoints, "output": str(output)})


@main.command("upsert-schema")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("name")
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False, path_type=Path), help="Output path for the updated document.")
def upsert_schema_command(doc_path: Path, name: str, schema_path: Path, output: Path):
    """Create or replace a component schema."""
    schema = _read_document(schema_path)
    if not isinstance(schema, dict):
        raise click.ClickException(f"{schema_path}: expected a schema object")

    document = _load_spec(doc_path)
    existed = name in ((document.get("components") or {}).get("schemas") or {})
    dump_document(upsert_schema(document, name, schema), output)

    click.echo(f"{'UPDATE' if existed else 'CREATE'} schema {name}")
    click.echo(f"Saved to {output}", err=True)


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("partial_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False, path_type=Path), help="Output path for the merged document.")
def merge(doc_path: Path, partial_path: Path, output: Path):
    """Merge a partial OpenAPI document (paths, schemas, tags) into a document."""
    partial = _read_document(partial_path)
    if not isinstance(partial, dict):
        raise click.ClickException(f"{partial_path}: expected a partial OpenAPI document")

    merged = merge_documents(_load_spec(doc_path), partial)
    dump_document(merged, output)

    _echo_json({
        "success": True,
        "paths": len(merged.get("paths") or {}),
        "schemas": len((merged.get("components") or {}).get("schemas") or {}),
        "output": str(output),
    })
