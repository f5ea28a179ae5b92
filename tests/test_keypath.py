# tests/test_keypath.py
"""
Tests for key paths and tree insertion.

Covers:
    - KeyPath.parse() (strict), str() round trip
    - KeyPath.resolve()
    - insert_value(): auto-vivification, append/overwrite, structural errors
"""

import sys

import pytest

from toml_env.exceptions import (
    ArrayIndexCannotIndexError,
    ArrayOutOfBoundsError,
    InsertError,
    InvalidKeyPathError,
    TablePropertyCannotIndexError,
)
from toml_env.keypath import ArrayIndex, KeyPath, TableProperty, insert_value

# ---------------------------------------------------------------------------
# KeyPath.parse
# ---------------------------------------------------------------------------


class TestParse:

    @pytest.mark.parametrize("text", ["key", "key.key", "key.key.key", "list.0", "a.10.b", "servers.0.hosts.1"])
    def test_round_trip(self, text):
        assert str(KeyPath.parse(text)) == text

    def test_elements(self):
        path = KeyPath.parse("servers.0.host")
        assert list(path) == [TableProperty("servers"), ArrayIndex(0), TableProperty("host")]

    def test_leading_zeros_are_indices(self):
        path = KeyPath.parse("list.007")
        assert path[1] == ArrayIndex(7)
        assert str(path) == "list.7"

    def test_mixed_segment_is_property(self):
        assert KeyPath.parse("v1")[0] == TableProperty("v1")

    @pytest.mark.parametrize("text", ["", ".", ".key", "key.", "a..b"])
    def test_invalid(self, text):
        with pytest.raises(InvalidKeyPathError) as excinfo:
            KeyPath.parse(text)
        assert excinfo.value.path == text

    def test_invalid_is_value_error(self):
        with pytest.raises(ValueError):
            KeyPath.parse("a.")

    @pytest.mark.skipif(not getattr(sys, "get_int_max_str_digits", lambda: 0)(),
                        reason="no int string conversion limit")
    def test_index_too_long(self):
        text = "list." + "1" * (sys.get_int_max_str_digits() + 1)
        with pytest.raises(InvalidKeyPathError) as excinfo:
            KeyPath.parse(text)
        assert excinfo.value.path == text

    def test_empty_path_is_constructible(self):
        path = KeyPath()
        assert len(path) == 0
        assert str(path) == ""

    def test_equality_and_hash(self):
        assert KeyPath.parse("a.0") == KeyPath([TableProperty("a"), ArrayIndex(0)])
        assert len({KeyPath.parse("a.b"), KeyPath.parse("a.b")}) == 1
        assert KeyPath.parse("a.0") != KeyPath.parse("a.b")


# ---------------------------------------------------------------------------
# KeyPath.resolve
# ---------------------------------------------------------------------------


class TestResolve:

    TREE = {
        "key": "value1",
        "child": {"key": "value2"},
        "servers": [{"host": "alpha"}, {"host": "beta"}],
    }

    def test_top_level(self):
        assert KeyPath.parse("key").resolve(self.TREE) == "value1"

    def test_nested(self):
        assert KeyPath.parse("child.key").resolve(self.TREE) == "value2"

    def test_through_array(self):
        assert KeyPath.parse("servers.1.host").resolve(self.TREE) == "beta"

    def test_empty_path_returns_tree(self):
        assert KeyPath().resolve(self.TREE) is self.TREE

    def test_missing_key(self):
        assert KeyPath.parse("child.missing").resolve(self.TREE) is None

    def test_index_past_end(self):
        assert KeyPath.parse("servers.2").resolve(self.TREE) is None

    def test_property_on_array(self):
        assert KeyPath.parse("servers.host").resolve(self.TREE) is None

    def test_index_on_table(self):
        assert KeyPath.parse("child.0").resolve(self.TREE) is None

    def test_does_not_mutate(self):
        tree = {"a": {"b": 1}}
        KeyPath.parse("a.c.d").resolve(tree)
        assert tree == {"a": {"b": 1}}


# ---------------------------------------------------------------------------
# insert_value
# ---------------------------------------------------------------------------


class TestInsertTables:

    def test_empty_path_replaces_root(self):
        assert insert_value({"old": 1}, KeyPath(), "new") == "new"
        assert insert_value([1, 2], KeyPath(), {"a": 1}) == {"a": 1}

    def test_insert_then_resolve(self):
        tree = insert_value({}, KeyPath.parse("child"), "value")
        assert KeyPath.parse("child").resolve(tree) == "value"

    def test_creates_intermediate_table(self):
        tree = insert_value({}, KeyPath.parse("child.value"), 1)
        assert tree == {"child": {"value": 1}}

    def test_creates_intermediate_array(self):
        tree = insert_value({}, KeyPath.parse("list.0"), "x")
        assert tree == {"list": ["x"]}

    def test_returns_same_root(self):
        root = {}
        assert insert_value(root, KeyPath.parse("a.b"), 1) is root

    def test_overwrites_existing(self):
        tree = insert_value({"a": {"b": 1, "c": 2}}, KeyPath.parse("a.b"), 3)
        assert tree == {"a": {"b": 3, "c": 2}}

    def test_recurses_into_existing(self):
        tree = insert_value({"a": {"b": 1}}, KeyPath.parse("a.c.d"), True)
        assert tree == {"a": {"b": 1, "c": {"d": True}}}

    def test_property_on_scalar(self):
        with pytest.raises(TablePropertyCannotIndexError) as excinfo:
            insert_value({"a": 5}, KeyPath.parse("a.b"), 1)
        assert excinfo.value.property == "b"
        assert excinfo.value.value == 5
        assert excinfo.value.path == KeyPath.parse("a.b")

    def test_property_on_array(self):
        with pytest.raises(TablePropertyCannotIndexError):
            insert_value({"a": [1]}, KeyPath.parse("a.b"), 1)


class TestInsertArrays:

    def test_append_to_empty(self):
        assert insert_value([], KeyPath.parse("0"), "x") == ["x"]

    def test_append_at_length(self):
        tree = ["a", "b"]
        insert_value(tree, KeyPath.parse("2"), "c")
        assert tree == ["a", "b", "c"]

    def test_overwrite_within_bounds(self):
        assert insert_value(["a", "b"], KeyPath.parse("0"), "z") == ["z", "b"]

    def test_out_of_bounds(self):
        with pytest.raises(ArrayOutOfBoundsError) as excinfo:
            insert_value(["a"], KeyPath.parse("2"), "c")
        assert excinfo.value.index == 2
        assert excinfo.value.array == ["a"]

    def test_index_on_table(self):
        with pytest.raises(ArrayIndexCannotIndexError) as excinfo:
            insert_value({"a": {}}, KeyPath.parse("a.0"), 1)
        assert excinfo.value.index == 0
        assert excinfo.value.value == {}

    def test_index_on_root_table(self):
        with pytest.raises(ArrayIndexCannotIndexError):
            insert_value({}, KeyPath.parse("0"), 1)

    def test_property_on_root_array(self):
        with pytest.raises(TablePropertyCannotIndexError):
            insert_value([], KeyPath.parse("a"), 1)

    def test_table_inside_array(self):
        tree = insert_value({}, KeyPath.parse("servers.0.host"), "alpha")
        insert_value(tree, KeyPath.parse("servers.0.port"), 80)
        insert_value(tree, KeyPath.parse("servers.1.host"), "beta")
        assert tree == {"servers": [{"host": "alpha", "port": 80}, {"host": "beta"}]}

    def test_nested_arrays(self):
        tree = insert_value({}, KeyPath.parse("matrix.0.0"), 1)
        insert_value(tree, KeyPath.parse("matrix.0.1"), 2)
        insert_value(tree, KeyPath.parse("matrix.1.0"), 3)
        assert tree == {"matrix": [[1, 2], [3]]}

    def test_failed_insert_leaves_tree_untouched(self):
        tree = []
        with pytest.raises(ArrayOutOfBoundsError):
            insert_value(tree, KeyPath.parse("0.1"), "x")
        assert tree == []

    def test_errors_share_base(self):
        for root, path in (({"a": 1}, "a.b"), ({"a": 1}, "a.0"), ([], "3")):
            with pytest.raises(InsertError):
                insert_value(root, KeyPath.parse(path), None)
