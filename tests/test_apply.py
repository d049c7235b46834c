import copy

from catalog_organizer.catalog.base import FolderChange
from catalog_organizer.organizer.apply import apply_reorganization, count_applicable

DOCUMENT = {
    "openapi": "3.1.0",
    "paths": {
        "/api/v1/users": {
            "get": {"summary": "List users", "x-apidog-folder": "Old"},
            "post": {"summary": "Create user"},
        },
    },
}


class TestApplyReorganization:
    def test_updates_folder_extension(self):
        changes = [FolderChange(method="GET", path="/api/v1/users", old_folder="Old", new_folder="Users")]
        updated = apply_reorganization(DOCUMENT, changes)
        assert updated["paths"]["/api/v1/users"]["get"]["x-apidog-folder"] == "Users"
        assert "x-apidog-folder" not in updated["paths"]["/api/v1/users"]["post"]

    def test_accepts_plan_json_dicts(self):
        changes = [{"method": "POST", "path": "/api/v1/users", "newFolder": "Users"}]
        updated = apply_reorganization(DOCUMENT, changes)
        assert updated["paths"]["/api/v1/users"]["post"]["x-apidog-folder"] == "Users"

    def test_never_mutates_input(self):
        before = copy.deepcopy(DOCUMENT)
        updated = apply_reorganization(DOCUMENT, [{"method": "GET", "path": "/api/v1/users", "newFolder": "X"}])
        assert DOCUMENT == before
        updated["paths"]["/api/v1/users"]["post"]["summary"] = "changed"
        assert DOCUMENT == before

    def test_vanished_endpoints_are_skipped(self):
        changes = [
            {"method": "DELETE", "path": "/api/v1/users", "newFolder": "Users"},
            {"method": "GET", "path": "/api/v1/gone", "newFolder": "Gone"},
            {"method": "GET", "path": "/api/v1/users", "newFolder": "Users"},
        ]
        updated = apply_reorganization(DOCUMENT, changes)
        assert updated["paths"]["/api/v1/users"]["get"]["x-apidog-folder"] == "Users"
        assert set(updated["paths"]) == {"/api/v1/users"}
        assert count_applicable(DOCUMENT, changes) == 1

    def test_idempotent(self):
        changes = [{"method": "GET", "path": "/api/v1/users", "newFolder": "Users"}]
        once = apply_reorganization(DOCUMENT, changes)
        assert apply_reorganization(once, changes) == once

    def test_document_without_paths(self):
        assert apply_reorganization({}, [{"method": "GET", "path": "/x", "newFolder": "X"}]) == {}

    def test_null_path_item_is_skipped(self):
        document = {"paths": {"/x": None, "/y": {"get": {}}}}
        changes = [
            {"method": "GET", "path": "/x", "newFolder": "X"},
            {"method": "GET", "path": "/y", "newFolder": "Y"},
        ]
        updated = apply_reorganization(document, changes)
        assert updated == {"paths": {"/x": None, "/y": {"get": {"x-apidog-folder": "Y"}}}}
        assert count_applicable(document, changes) == 1
