from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_tree_config.application.merge import merge_preserve, merge_replace
from lib_tree_config.domain.errors import ChangesNotAllowed
from lib_tree_config.domain.node import ConfigNode


SCALAR = st.one_of(st.booleans(), st.integers(), st.text(min_size=1, max_size=5))
VALUE = st.recursive(
    SCALAR,
    lambda children: st.one_of(
        st.lists(children, max_size=3),
        st.dictionaries(st.text(min_size=1, max_size=5), children, max_size=3),
    ),
    max_leaves=10,
)
MAPPING = st.dictionaries(st.text(min_size=1, max_size=5), VALUE, max_size=4)


def test_replace_recurses_into_mappings() -> None:
    merged = merge_replace({"db": {"host": "a", "port": 1}}, {"db": {"host": "b"}})
    assert merged == {"db": {"host": "b", "port": 1}}


def test_replace_swaps_sequences_whole() -> None:
    assert merge_replace({"tags": [1, 2, 3]}, {"tags": [9]}) == {"tags": [9]}


def test_replace_mixed_kinds_take_incoming() -> None:
    assert merge_replace({"a": {"b": 1}}, {"a": "flat"}) == {"a": "flat"}
    assert merge_replace({"a": "flat"}, {"a": {"b": 1}}) == {"a": {"b": 1}}


def test_replace_keeps_key_order_and_appends_new_keys() -> None:
    merged = merge_replace({"a": 1, "b": 2}, {"c": 3, "a": 10})
    assert list(merged) == ["a", "b", "c"]


def test_merge_functions_do_not_mutate_inputs() -> None:
    base = {"db": {"host": "a"}, "tags": [1]}
    incoming = {"db": {"port": 2}, "tags": [2]}
    merge_replace(base, incoming)
    merge_preserve(base, incoming)
    assert base == {"db": {"host": "a"}, "tags": [1]}
    assert incoming == {"db": {"port": 2}, "tags": [2]}


@given(MAPPING, MAPPING)
def test_replace_is_idempotent(base, incoming) -> None:
    once = merge_replace(base, incoming)
    assert merge_replace(once, incoming) == once


@given(MAPPING, MAPPING)
def test_replace_incoming_scalars_win(base, incoming) -> None:
    merged = merge_replace(base, incoming)
    for key, value in incoming.items():
        if not isinstance(value, dict):
            assert merged[key] == value


@given(st.text(min_size=1, max_size=5), SCALAR, SCALAR)
def test_scalar_collision_policies(key, left, right) -> None:
    assert merge_preserve({key: left}, {key: right}) == {key: [left, right]}
    assert merge_replace({key: left}, {key: right}) == {key: right}


def test_preserve_concatenates_sequences() -> None:
    assert merge_preserve({"list": [1, 2]}, {"list": [3]}) == {"list": [1, 2, 3]}


def test_preserve_scalar_and_sequence_join() -> None:
    assert merge_preserve({"a": 1}, {"a": [2, 3]}) == {"a": [1, 2, 3]}
    assert merge_preserve({"a": [1, 2]}, {"a": 3}) == {"a": [1, 2, 3]}


def test_preserve_mapping_absorbs_scalar_as_positional_entry() -> None:
    assert merge_preserve({"a": {"x": 1}}, {"a": "y"}) == {"a": {"x": 1, 0: "y"}}
    assert merge_preserve({"a": "y"}, {"a": {"x": 1}}) == {"a": {0: "y", "x": 1}}


def test_preserve_appends_integer_keys() -> None:
    assert merge_preserve({0: "x", "name": "n"}, {0: "y", 5: "z"}) == {0: "x", "name": "n", 1: "y", 2: "z"}


def test_preserve_recurses_into_mappings() -> None:
    merged = merge_preserve({"db": {"host": "a"}}, {"db": {"host": "b", "port": 1}})
    assert merged == {"db": {"host": ["a", "b"], "port": 1}}


def test_node_merge_rewraps_and_returns_self() -> None:
    node = ConfigNode({"db": {"host": "a"}}, allow_changes=True)
    result = node.merge({"cache": {"ttl": 30}})
    assert result is node
    assert isinstance(node.cache, ConfigNode)
    assert node.cache.changes_allowed is True
    assert node.cache.ttl == 30


def test_node_merge_accepts_other_nodes_and_sequences() -> None:
    node = ConfigNode({"a": 1}, allow_changes=True)
    node.merge(ConfigNode({"b": {"c": 2}}))
    assert node.to_array() == {"a": 1, "b": {"c": 2}}
    listed = ConfigNode(["x"], allow_changes=True)
    listed.merge(["y"], preserve=True)
    assert listed.to_array() == {0: "x", 1: "y"}


def test_node_merge_is_idempotent_with_replace() -> None:
    node = ConfigNode({"db": {"host": "a", "ports": [1]}}, allow_changes=True)
    patch = {"db": {"host": "b", "ports": [2, 3]}}
    once = node.merge(patch).to_array()
    assert node.merge(patch).to_array() == once


def test_node_merge_rejected_before_any_change() -> None:
    node = ConfigNode({"a": 1})
    with pytest.raises(ChangesNotAllowed):
        node.merge({"a": 2})
    assert node.to_array() == {"a": 1}


def test_merged_values_are_not_aliased() -> None:
    incoming = {"db": {"host": "a"}}
    node = ConfigNode({}, allow_changes=True).merge(incoming)
    incoming["db"]["host"] = "b"
    assert node.db.host == "a"
