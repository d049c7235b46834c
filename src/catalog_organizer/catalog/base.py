"""Unified data models for API catalog documents.

Endpoints are extracted from an exported OpenAPI document, and the
organizer and diff engines produce plans and change lists built from
these models. Serialized shapes use the camelCase field names the
export/import tooling expects.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

FOLDER_EXTENSION = "x-apidog-folder"
STATUS_EXTENSION = "x-apidog-status"
MAINTAINER_EXTENSION = "x-apidog-maintainer"

NO_FOLDER = "(none)"
FALLBACK_FOLDER = "Other"


class Endpoint(BaseModel):
    """A single catalog endpoint with its current taxonomy metadata."""

    method: str  # GET / POST / PUT / PATCH / DELETE / HEAD / OPTIONS
    path: str  # /api/v1/users/{id}
    summary: str = ""
    description: str = ""
    tags: list[str] = []
    deprecated: bool = False
    folder: str | None = None
    status: str | None = None
    maintainer: str | None = None
    operation: dict = {}  # passed through unexamined

    @property
    def current_folder(self) -> str | None:
        """The assigned folder, falling back to the extension on the raw operation."""
        return self.folder or self.operation.get(FOLDER_EXTENSION) or None

    @property
    def key(self) -> str:
        return f"{self.method} {self.path}"


class EndpointRef(BaseModel):
    method: str
    path: str
    summary: str = ""

    @classmethod
    def of(cls, endpoint: Endpoint) -> "EndpointRef":
        return cls(method=endpoint.method, path=endpoint.path, summary=endpoint.summary)


class UnchangedEndpoint(BaseModel):
    method: str
    path: str
    folder: str


class FolderChange(BaseModel):
    """One endpoint moving from its current folder to a proposed one."""

    model_config = ConfigDict(populate_by_name=True)

    method: str
    path: str
    summary: str = ""
    old_folder: str = Field(default=NO_FOLDER, alias="oldFolder")
    new_folder: str = Field(alias="newFolder")


class ReorganizationPlan(BaseModel):
    """A dry-run folder reorganization. Immutable once produced."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    strategy: str
    total_endpoints: int = Field(alias="totalEndpoints")
    changes_count: int = Field(alias="changesCount")
    unchanged_count: int = Field(alias="unchangedCount")
    current_folders: dict[str, list[EndpointRef]] = Field(default={}, alias="currentFolders")
    proposed_folders: dict[str, list[EndpointRef]] = Field(alias="proposedFolders")
    changes: list[FolderChange]
    unchanged: list[UnchangedEndpoint]

    def to_json_dict(self) -> dict:
        """The plan as handed to the operator for approval."""
        return self.model_dump(by_alias=True, exclude={"current_folders"})


class FolderAnalysis(BaseModel):
    total_endpoints: int
    total_folders: int
    unfoldered_count: int
    folders: dict[str, list[Endpoint]]
    unfoldered: list[Endpoint]


class DiffChange(BaseModel):
    """A field-level difference between two JSON-like values.

    `value` is set for added/removed entries, `old_value` and `new_value`
    for changed ones. Unset fields are left out of the serialized form, so
    an explicit JSON null still shows up.
    """

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["added", "removed", "changed"] = Field(alias="type")
    path: str
    value: Any = None
    old_value: Any = Field(default=None, alias="oldValue")
    new_value: Any = Field(default=None, alias="newValue")

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)
