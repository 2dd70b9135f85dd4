from __future__ import annotations

"""
Unit tests for the Size Tree model.

Verifies:
1. Total size aggregation and its memoization.
2. Parent back-references and ancestry chains.
3. Serialization without parent links and re-stitching on decode.
4. Validation of malformed serialized nodes and of the size invariants.
5. Trees deeper than the interpreter recursion limit.
"""

import gc
import sys

import pytest

from skimap.domain.tree_models import FileNode, trees_equal


def _assert_sizes_consistent(node: FileNode) -> None:
    if node.children:
        assert node.total_size == sum(c.total_size for c in node.children)
    else:
        assert node.total_size == node.allocated_size
    for child in node.children:
        _assert_sizes_consistent(child)


def test_total_size_aggregates_children(sample_tree: FileNode) -> None:
    """Directory totals equal the sum of their children; leaves their allocation."""
    assert sample_tree.total_size == 300 + 100 + 1000 + 0 + 50
    _assert_sizes_consistent(sample_tree)


def test_total_size_is_memoized(sample_tree: FileNode) -> None:
    """Once computed, the total is not recomputed even if a leaf is altered."""
    first = sample_tree.total_size
    sample_tree.children[1].allocated_size = 999_999
    assert sample_tree.total_size == first


def test_directory_without_children_has_zero_total() -> None:
    node = FileNode("/locked", is_directory=True)
    assert node.total_size == 0
    assert node.children == []


def test_ids_are_unique() -> None:
    a = FileNode("/a")
    b = FileNode("/a")
    assert a.id != b.id


def test_name_defaults_to_last_component() -> None:
    assert FileNode("/var/log/syslog").name == "syslog"
    assert FileNode("/var/log/").name == "log"
    assert FileNode("/").name == "/"


def test_negative_allocated_size_rejected() -> None:
    with pytest.raises(ValueError):
        FileNode("/bad", allocated_size=-1)


def test_sorted_children_descending(sample_tree: FileNode) -> None:
    names = [c.name for c in sample_tree.sorted_children]
    assert names == ["video.mp4", "docs", "notes.txt", "zero"]


def test_file_extension() -> None:
    assert FileNode("/x/Movie.MP4").file_extension == "mp4"
    assert FileNode("/x/Makefile").file_extension == ""
    assert FileNode("/x/dir.d", is_directory=True).file_extension == ""


def test_parent_links_and_path_components(sample_tree: FileNode) -> None:
    """Children point back to their parent; ancestry runs root first."""
    docs = sample_tree.children[0]
    leaf = docs.children[0]

    assert sample_tree.parent is None
    assert docs.parent is sample_tree
    assert leaf.parent is docs
    assert [n.name for n in leaf.path_components()] == ["root", "docs", "a.txt"]


def test_parent_link_does_not_keep_parent_alive() -> None:
    """The back-reference is non-owning."""
    child = FileNode("/p/c", allocated_size=1)
    FileNode("/p", is_directory=True, children=[child])
    gc.collect()
    assert child.parent is None


def test_serialization_excludes_parent(sample_tree: FileNode) -> None:
    data = sample_tree.to_dict()
    assert set(data) == {"path", "name", "isDirectory", "allocatedSize", "children"}
    assert "parent" not in data["children"][0]


def test_from_dict_restores_structure_and_parents(sample_tree: FileNode) -> None:
    """Decoding yields an equal tree with parent links re-established."""
    restored = FileNode.from_dict(sample_tree.to_dict())

    assert trees_equal(restored, sample_tree)
    assert restored.total_size == sample_tree.total_size
    for node in restored.iter_nodes():
        for child in node.children:
            assert child.parent is node


def test_from_dict_rejects_malformed_payloads() -> None:
    with pytest.raises(KeyError):
        FileNode.from_dict({"path": "/x", "name": "x", "isDirectory": False, "children": []})
    with pytest.raises(TypeError):
        FileNode.from_dict({
            "path": "/x", "name": "x", "isDirectory": "no",
            "allocatedSize": 1, "children": [],
        })
    with pytest.raises(TypeError):
        FileNode.from_dict(["not", "a", "node"])  # type: ignore[arg-type]


def test_trees_equal_detects_differences(sample_tree: FileNode) -> None:
    other = FileNode.from_dict(sample_tree.to_dict())
    other.children[1].allocated_size = 1001
    assert not trees_equal(sample_tree, other)


def test_iter_nodes_and_count(sample_tree: FileNode) -> None:
    assert sample_tree.count_nodes() == 8
    assert next(sample_tree.iter_nodes()) is sample_tree


def test_from_dict_rejects_directory_with_own_size() -> None:
    with pytest.raises(ValueError):
        FileNode.from_dict({
            "path": "/d", "name": "d", "isDirectory": True,
            "allocatedSize": 4096, "children": [],
        })


def test_from_dict_rejects_file_with_children() -> None:
    child = {"path": "/f/c", "name": "c", "isDirectory": False, "allocatedSize": 10, "children": []}
    with pytest.raises(ValueError):
        FileNode.from_dict({
            "path": "/f", "name": "f", "isDirectory": False,
            "allocatedSize": 0, "children": [child],
        })


def test_from_dict_rejects_nested_violation() -> None:
    """A bad node deep inside an otherwise valid tree fails the whole decode."""
    bad = {"path": "/r/d", "name": "d", "isDirectory": True, "allocatedSize": 7, "children": []}
    with pytest.raises(ValueError):
        FileNode.from_dict({
            "path": "/r", "name": "r", "isDirectory": True,
            "allocatedSize": 0, "children": [bad],
        })


def _chain(depth: int) -> FileNode:
    node = FileNode("/deep/leaf.bin", allocated_size=5000)
    for level in range(depth):
        node = FileNode(f"/deep/{level}", is_directory=True, children=[node])
    return node


def test_deep_tree_operations_do_not_recurse() -> None:
    depth = sys.getrecursionlimit() + 500
    tree = _chain(depth)

    assert tree.total_size == 5000
    assert tree.count_nodes() == depth + 1

    restored = FileNode.from_dict(tree.to_dict())
    assert trees_equal(restored, tree)
    assert restored.total_size == 5000
    assert not trees_equal(restored, _chain(depth - 1))
