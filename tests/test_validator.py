from remoting_swagger.generator.validator import find_dangling_refs, find_duplicate_operation_ids, validate_document


def _document(definitions=None, paths=None):
    return {"swagger": "2.0", "definitions": definitions or {}, "paths": paths or {}}


class TestFindDanglingRefs:
    def test_resolved_refs(self):
        doc = _document(
            definitions={"Product": {"type": "object"}},
            paths={"/Products": {"get": {"responses": {"200": {"schema": {"$ref": "#/definitions/Product"}}}}}},
        )
        assert find_dangling_refs(doc) == {}

    def test_missing_definition(self):
        doc = _document(
            paths={"/Products": {"get": {"responses": {"200": {"schema": {"$ref": "#/definitions/Product"}}}}}},
        )
        assert find_dangling_refs(doc) == {
            "#/paths//Products/get/responses/200/schema": "#/definitions/Product"
        }

    def test_refs_inside_lists(self):
        doc = _document(
            definitions={"Order": {"type": "object", "properties": {"items": {"type": "array", "items": {"$ref": "#/definitions/Item"}}}}},
            paths={"/Orders": {"post": {"parameters": [{"name": "data", "in": "body", "schema": {"$ref": "#/definitions/Order"}}]}}},
        )
        assert list(find_dangling_refs(doc).values()) == ["#/definitions/Item"]

    def test_non_definition_ref(self):
        doc = _document(paths={"/x": {"get": {"responses": {"200": {"schema": {"$ref": "other.json#/Thing"}}}}}})
        assert list(find_dangling_refs(doc).values()) == ["other.json#/Thing"]


class TestFindDuplicateOperationIds:
    def test_unique(self):
        doc = _document(paths={"/a": {"get": {"operationId": "a"}, "post": {"operationId": "b"}}})
        assert find_duplicate_operation_ids(doc) == {}

    def test_duplicates(self):
        doc = _document(paths={"/a": {"get": {"operationId": "same"}}, "/b": {"get": {"operationId": "same"}}})
        assert find_duplicate_operation_ids(doc) == {"same": ["GET /a", "GET /b"]}

    def test_ignores_non_operations(self):
        doc = _document(paths={"/a": {"parameters": [], "get": {"operationId": "a"}}})
        assert find_duplicate_operation_ids(doc) == {}


class TestValidateDocument:
    def test_clean(self):
        assert validate_document(_document()) == {}

    def test_reports_both_kinds(self):
        doc = _document(
            paths={
                "/a": {"get": {"operationId": "same", "responses": {"200": {"schema": {"$ref": "#/definitions/Gone"}}}}},
                "/b": {"get": {"operationId": "same"}},
            }
        )
        errors = validate_document(doc)
        assert errors["#/paths//a/get/responses/200/schema"] == "dangling reference #/definitions/Gone"
        assert errors["operationId same"] == "shared by GET /a, GET /b"
