"""Tests for whole-value equality helpers."""

import copy

from kvfork.equality import MISSING, deep_copy, documents_equal, lookup, values_equal


class TestValuesEqual:
    def test_scalars(self):
        assert values_equal(1, 1)
        assert values_equal("a", "a")
        assert values_equal(None, None)
        assert not values_equal(1, 2)

    def test_int_float(self):
        assert values_equal(1, 1.0)

    def test_bool_is_not_int(self):
        assert not values_equal(True, 1)
        assert not values_equal(0, False)
        assert values_equal(True, True)

    def test_nested_structures(self):
        a = {"x": [1, {"y": 2}], "z": None}
        b = {"z": None, "x": [1, {"y": 2}]}
        assert values_equal(a, b)

    def test_nested_difference(self):
        assert not values_equal({"x": [1, 2]}, {"x": [1, 3]})
        assert not values_equal({"x": 1}, {"x": 1, "y": 2})

    def test_list_vs_dict(self):
        assert not values_equal([], {})
        assert not values_equal([1], 1)

    def test_list_and_tuple(self):
        assert values_equal([1, 2], (1, 2))

    def test_missing(self):
        assert values_equal(MISSING, MISSING)
        assert not values_equal(MISSING, None)
        assert not values_equal(MISSING, 0)


class TestMissing:
    def test_singleton(self):
        assert copy.deepcopy(MISSING) is MISSING
        assert copy.copy(MISSING) is MISSING

    def test_falsy_and_repr(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"

    def test_lookup(self):
        assert lookup({"a": None}, "a") is None
        assert lookup({}, "a") is MISSING


class TestDocuments:
    def test_documents_equal(self):
        assert documents_equal({"a": 1}, {"a": 1})
        assert not documents_equal({"a": 1}, {"a": 1, "b": 2})

    def test_deep_copy_is_independent(self):
        original = {"a": {"b": [1]}}
        copied = deep_copy(original)
        copied["a"]["b"].append(2)
        assert original == {"a": {"b": [1]}}
