"""Read and write exported catalog documents (OpenAPI JSON or YAML)."""

import json
from pathlib import Path

import yaml

from catalog_organizer.errors import CatalogError

YAML_SUFFIXES = (".yaml", ".yml")


def load_document(file_path: Path) -> dict:
    """Load a JSON or YAML document. JSON parses as YAML, so one loader covers both."""
    text = file_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CatalogError(f"{file_path}: not valid JSON or YAML ({e})") from e
    if data is None:
        return {}
    return data


def load_spec(file_path: Path) -> dict:
    """Load an OpenAPI document, rejecting anything that has no `paths`."""
    doc = load_document(file_path)
    if not isinstance(doc, dict) or not ("openapi" in doc or "swagger" in doc or "paths" in doc):
        raise CatalogError(f"{file_path}: not an OpenAPI document")
    return doc


def dump_document(document: dict | list, file_path: Path) -> None:
    """Write as YAML for .yaml/.yml targets, JSON otherwise."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if file_path.suffix.lower() in YAML_SUFFIXES:
        text = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    file_path.write_text(text, encoding="utf-8")
