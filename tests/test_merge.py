"""Tests for the three-way merge."""

import pytest

from kvfork import (
    MISSING,
    Conflict,
    MergeConflict,
    SnapshotStore,
    ValidationError,
    three_way_merge,
)


class TestMergeRules:
    def test_other_side_unchanged_takes_changed_side(self):
        base = {"a": 1, "b": 2, "c": 3}
        side_a = {"a": 10, "c": 3, "d": 4}
        result = three_way_merge(base, side_a, base)
        assert result.success
        assert result.merged_data == side_a

    def test_mirror_of_the_above(self):
        base = {"a": 1, "b": 2}
        side_b = {"a": 1, "b": 20, "e": 5}
        result = three_way_merge(base, base, side_b)
        assert result.success
        assert result.merged_data == side_b

    def test_neither_changed(self):
        base = {"a": 1}
        result = three_way_merge(base, {"a": 1}, {"a": 1})
        assert result.merged_data == {"a": 1}

    def test_independent_changes_combine(self):
        result = three_way_merge({"a": 0, "b": 0}, {"a": 1, "b": 0}, {"a": 0, "b": 2})
        assert result.success
        assert result.merged_data == {"a": 1, "b": 2}

    def test_deletion_honored(self):
        result = three_way_merge({"a": 1, "b": 2}, {"b": 2}, {"a": 1, "b": 2})
        assert result.merged_data == {"b": 2}

    def test_both_delete(self):
        result = three_way_merge({"a": 1}, {}, {})
        assert result.success
        assert result.merged_data == {}

    def test_both_add_same_value(self):
        result = three_way_merge({}, {"x": 1}, {"x": 1})
        assert result.success
        assert result.merged_data == {"x": 1}
        assert result.conflicts == ()

    def test_both_change_to_same_structure(self):
        result = three_way_merge({"x": [1]}, {"x": [1, 2]}, {"x": [1, 2]})
        assert result.merged_data == {"x": [1, 2]}


class TestConflicts:
    def test_both_modify_differently(self):
        result = three_way_merge({"x": 0}, {"x": 1}, {"x": 2})
        assert not result.success
        assert not result
        assert result.conflicts == (Conflict(key="x", base_value=0, value_a=1, value_b=2),)
        assert "x" not in result.merged_data

    def test_both_add_differently(self):
        result = three_way_merge({}, {"x": 1}, {"x": 2})
        (conflict,) = result.conflicts
        assert conflict.base_value is MISSING
        assert (conflict.value_a, conflict.value_b) == (1, 2)

    def test_modify_versus_delete(self):
        result = three_way_merge({"x": 0, "y": 1}, {"x": 5, "y": 1}, {"y": 1})
        (conflict,) = result.conflicts
        assert conflict.value_a == 5
        assert conflict.value_b is MISSING
        assert result.merged_data == {"y": 1}

    def test_null_is_not_absent(self):
        result = three_way_merge({"x": 0}, {"x": None}, {})
        (conflict,) = result.conflicts
        assert conflict.value_a is None
        assert conflict.value_b is MISSING

    def test_nested_change_is_one_conflict(self):
        base = {"cfg": {"a": 1, "b": 1}}
        result = three_way_merge(base, {"cfg": {"a": 2, "b": 1}}, {"cfg": {"a": 1, "b": 2}})
        assert result.conflicting_keys == {"cfg"}

    def test_other_keys_still_merge(self):
        result = three_way_merge({"x": 0, "y": 0}, {"x": 1, "y": 5}, {"x": 2, "y": 0})
        assert result.merged_data == {"y": 5}
        assert result.conflicting_keys == {"x"}

    def test_raise_for_conflicts(self):
        result = three_way_merge({"x": 0}, {"x": 1}, {"x": 2})
        with pytest.raises(MergeConflict) as exc_info:
            result.raise_for_conflicts()
        assert exc_info.value.conflicting_keys == {"x"}

    def test_raise_for_conflicts_noop_on_success(self):
        three_way_merge({}, {"a": 1}, {}).raise_for_conflicts()


class TestNoBase:
    def test_none_base_is_empty(self):
        result = three_way_merge(None, {"a": 1, "s": 1}, {"b": 2, "s": 1})
        assert result.success
        assert result.merged_data == {"a": 1, "b": 2, "s": 1}

    def test_none_base_conflict(self):
        result = three_way_merge(None, {"a": 1}, {"a": 2})
        assert result.conflicts[0].base_value is MISSING


class TestVersionsAsInput:
    def test_accepts_versions(self):
        s = SnapshotStore()
        base = s.create({"x": 0}, None, "base")
        a = s.create({"x": 1}, base.id, "a")
        b = s.create({"x": 0, "y": 1}, base.id, "b")
        result = three_way_merge(base, a, b)
        assert result.merged_data == {"x": 1, "y": 1}

    def test_inputs_not_aliased(self):
        side_a = {"x": [1]}
        result = three_way_merge({}, side_a, {})
        result.merged_data["x"].append(2)
        assert side_a == {"x": [1]}


class TestResolve:
    def test_resolve_overlays_choices(self):
        result = three_way_merge({"x": 0, "y": 0}, {"x": 1, "y": 3}, {"x": 2, "y": 0})
        merged = result.resolve({"x": 2})
        assert merged == {"x": 2, "y": 3}
        assert "x" not in result.merged_data

    def test_resolve_missing_drops_key(self):
        result = three_way_merge({"x": 0}, {"x": 1}, {"x": 2})
        assert result.resolve({"x": MISSING}) == {}

    def test_unresolved_key(self):
        result = three_way_merge({"x": 0, "z": 0}, {"x": 1, "z": 1}, {"x": 2, "z": 2})
        with pytest.raises(ValidationError, match="z"):
            result.resolve({"x": 1})

    def test_resolution_for_clean_key(self):
        result = three_way_merge({"x": 0}, {"x": 1}, {"x": 2})
        with pytest.raises(ValidationError, match="Not in conflict"):
            result.resolve({"x": 1, "other": 3})

    def test_resolve_clean_merge(self):
        result = three_way_merge({}, {"a": 1}, {})
        assert result.resolve() == {"a": 1}


class TestMergeFunctions:
    def test_per_key_fn_resolves(self):
        result = three_way_merge(
            {"n": 1}, {"n": 2}, {"n": 3}, merge_fns={"n": lambda base, a, b: max(a, b)}
        )
        assert result.success
        assert result.merged_data == {"n": 3}
        assert result.auto_merged_keys == ("n",)

    def test_default_fn(self):
        result = three_way_merge({"x": 0}, {"x": 1}, {"x": 2}, default_merge=lambda base, a, b: a)
        assert result.merged_data == {"x": 1}

    def test_fn_only_called_on_conflicts(self):
        calls = []

        def fn(base, a, b):
            calls.append((base, a, b))
            return a

        three_way_merge({"x": 0, "y": 0}, {"x": 1, "y": 0}, {"x": 0, "y": 0}, default_merge=fn)
        assert calls == []

    def test_failing_fn_leaves_conflict(self):
        def boom(base, a, b):
            raise ValueError("nope")

        result = three_way_merge({"x": 0}, {"x": 1}, {"x": 2}, merge_fns={"x": boom})
        assert result.conflicting_keys == {"x"}

    def test_fn_returning_missing_drops_key(self):
        result = three_way_merge(
            {"x": 0}, {"x": 1}, {"x": 2}, default_merge=lambda base, a, b: MISSING
        )
        assert result.success
        assert result.merged_data == {}
