import copy

import pytest
from pydantic import ValidationError

from catalog_organizer.catalog.editor import (
    OperationEntry,
    delete_operation,
    merge_documents,
    upsert_operation,
    upsert_operations,
    upsert_schema,
)
from catalog_organizer.errors import EndpointNotFoundError

DOCUMENT = {
    "openapi": "3.1.0",
    "tags": [{"name": "users"}],
    "paths": {
        "/users": {
            "get": {"summary": "List users", "tags": ["users"], "x-run-in-apidog": "https://a"},
        },
        "/users/{id}": {
            "delete": {"summary": "Delete user"},
        },
    },
    "components": {"schemas": {"User": {"type": "object"}}},
}


class TestUpsertOperation:
    def test_update_reports_diff(self):
        operation = {"summary": "List all users", "tags": ["users"]}
        result = upsert_operation(DOCUMENT, "GET", "/users", operation)
        assert result.action == "UPDATE"
        assert [(c.kind, c.path) for c in result.changes] == [("changed", "summary")]
        assert result.document["paths"]["/users"]["get"] == operation

    def test_create(self):
        result = upsert_operation(DOCUMENT, "post", "/orders", {"summary": "Create order", "tags": ["orders"]})
        assert result.action == "CREATE"
        assert result.changes == []
        assert result.document["paths"]["/orders"]["post"]["summary"] == "Create order"

    def test_registers_new_tags(self):
        result = upsert_operation(DOCUMENT, "post", "/orders", {"tags": ["orders", "users"]})
        assert result.document["tags"] == [{"name": "users"}, {"name": "orders"}]

    def test_input_untouched(self):
        before = copy.deepcopy(DOCUMENT)
        upsert_operation(DOCUMENT, "post", "/orders", {"tags": ["orders"]})
        assert DOCUMENT == before


class TestDeleteOperation:
    def test_removes_empty_path_item(self):
        updated = delete_operation(DOCUMENT, "DELETE", "/users/{id}")
        assert "/users/{id}" not in updated["paths"]
        assert "/users/{id}" in DOCUMENT["paths"]

    def test_missing_method(self):
        with pytest.raises(EndpointNotFoundError):
            delete_operation(DOCUMENT, "post", "/users")

    def test_missing_path(self):
        with pytest.raises(EndpointNotFoundError):
            delete_operation(DOCUMENT, "get", "/orders")


class TestMergeDocuments:
    def test_merges_paths_per_method(self):
        merged = merge_documents(DOCUMENT, {"paths": {"/users": {"post": {"summary": "Create"}}}})
        assert set(merged["paths"]["/users"]) == {"get", "post"}

    def test_schemas_replaced_by_name(self):
        merged = upsert_schema(DOCUMENT, "User", {"type": "object", "required": ["id"]})
        assert merged["components"]["schemas"]["User"]["required"] == ["id"]
        assert DOCUMENT["components"]["schemas"]["User"] == {"type": "object"}

    def test_tags_appended_when_new(self):
        merged = merge_documents(DOCUMENT, {"tags": [{"name": "users", "description": "dup"}, {"name": "pets"}]})
        assert merged["tags"] == [{"name": "users"}, {"name": "pets"}]

    def test_into_empty_document(self):
        merged = merge_documents({}, {"components": {"schemas": {"Pet": {}}}})
        assert merged == {"components": {"schemas": {"Pet": {}}}}

    def test_null_path_item_in_base(self):
        merged = merge_documents({"paths": {"/users": None}}, {"paths": {"/users": {"get": {}}, "/pets": None}})
        assert merged["paths"] == {"/users": {"get": {}}}


class TestNullPathItems:
    def test_upsert_replaces_null_path_item(self):
        result = upsert_operation({"paths": {"/x": None}}, "get", "/x", {"summary": "X"})
        assert result.action == "CREATE"
        assert result.document["paths"]["/x"] == {"get": {"summary": "X"}}

    def test_upsert_into_null_paths(self):
        result = upsert_operation({"paths": None}, "get", "/x", {})
        assert result.document["paths"] == {"/x": {"get": {}}}

    def test_delete_from_null_path_item(self):
        with pytest.raises(EndpointNotFoundError) as exc:
            delete_operation({"paths": {"/x": None}}, "get", "/x")
        assert exc.value.available == []


class TestUpsertOperations:
    def test_reports_action_per_endpoint(self):
        result = upsert_operations(DOCUMENT, [
            {"method": "get", "path": "/users", "operation": {"summary": "List all users"}},
            {"method": "post", "path": "/orders", "operation": {"summary": "Create order", "tags": ["orders"]}},
        ])
        assert result.endpoints == [
            {"endpoint": "GET /users", "action": "UPDATE"},
            {"endpoint": "POST /orders", "action": "CREATE"},
        ]
        assert result.document["paths"]["/users"]["get"] == {"summary": "List all users"}
        assert {"name": "orders"} in result.document["tags"]

    def test_later_entry_updates_earlier(self):
        result = upsert_operations({}, [
            OperationEntry(method="put", path="/a", operation={"summary": "one"}),
            OperationEntry(method="put", path="/a", operation={"summary": "two"}),
        ])
        assert [e["action"] for e in result.endpoints] == ["CREATE", "UPDATE"]
        assert result.document["paths"]["/a"]["put"]["summary"] == "two"

    def test_input_untouched(self):
        before = copy.deepcopy(DOCUMENT)
        upsert_operations(DOCUMENT, [{"method": "post", "path": "/orders", "operation": {}}])
        assert DOCUMENT == before

    def test_entry_without_operation_rejected(self):
        with pytest.raises(ValidationError):
            upsert_operations(DOCUMENT, [{"method": "get", "path": "/users"}])
