import logging

from remoting_swagger.generator.operation_ids import OperationIdAllocator, PathEntry, long_form, path_suffix


def _entry(verb, path):
    return PathEntry(path=path, verb=verb, operation={})


def _claim(allocator, candidate, verb, path):
    entry = _entry(verb, path)
    entry.operation["operationId"] = allocator.allocate(candidate, entry)
    return entry


class TestHelpers:
    def test_long_form(self):
        assert long_form("Product_exists", "head") == "Product_exists__head"

    def test_path_suffix(self):
        assert path_suffix("/Products/{id}") == "_Products_{id}"
        assert path_suffix("/a//b") == "_a_b"


class TestOperationIdAllocator:
    def test_first_claim_keeps_short_id(self):
        allocator = OperationIdAllocator()
        entry = _claim(allocator, "Product_find", "get", "/Products")
        assert entry.operation["operationId"] == "Product_find"
        assert allocator.owner("Product_find") is entry

    def test_second_claim_renames_both(self):
        allocator = OperationIdAllocator()
        first = _claim(allocator, "Product_exists", "get", "/Products/{id}/exists")
        second = _claim(allocator, "Product_exists", "head", "/Products/{id}")
        assert first.operation["operationId"] == "Product_exists__get"
        assert second.operation["operationId"] == "Product_exists__head"
        assert "Product_exists" in allocator
        assert allocator.owner("Product_exists") is None

    def test_retired_id_stays_retired(self):
        allocator = OperationIdAllocator()
        _claim(allocator, "Product_multipath", "get", "/a")
        _claim(allocator, "Product_multipath", "post", "/a")
        third = _claim(allocator, "Product_multipath", "delete", "/a")
        assert third.operation["operationId"] == "Product_multipath__delete"
        assert allocator.owner("Product_multipath") is None

    def test_same_verb_falls_back_to_path(self):
        allocator = OperationIdAllocator()
        first = _claim(allocator, "Product_lookup", "get", "/Products/lookup")
        second = _claim(allocator, "Product_lookup", "get", "/Products/search")
        assert first.operation["operationId"] == "Product_lookup__get"
        assert second.operation["operationId"] == "Product_lookup__get__Products_search"
        assert allocator.collisions == 0

    def test_unresolvable_collision_warns(self, caplog):
        allocator = OperationIdAllocator()
        with caplog.at_level(logging.WARNING, logger="remoting_swagger.generator.operation_ids"):
            _claim(allocator, "M_x", "get", "/a/b")
            _claim(allocator, "M_x", "get", "/a:b")
            third = _claim(allocator, "M_x", "get", "/a//b")
        assert allocator.collisions == 1
        assert third.operation["operationId"] == "M_x__get__a_b"
        assert "will NOT be unique" in caplog.text
