from __future__ import annotations

"""
Size Tree Data Models.

Provides the node type used to represent an analyzed directory subtree.
Parents own their children; the child-to-parent link is a weak reference
used only for ancestry queries and is never serialized. A node's total size
is computed on first access and memoized, which is valid because trees are
never mutated once a scan or a cache load has finished building them.
"""

import itertools
import os
import weakref
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

# Process-wide identifier source; unique for the lifetime of the interpreter
_ID_COUNTER = itertools.count(1)

# Sentinel meaning "total size not computed yet"
_NOT_COMPUTED = -1


class FileNode:
    """
    A file or directory in a size tree.

    Attributes:
        id: Stable per-instance identifier.
        path: Absolute filesystem path.
        name: Last path component.
        is_directory: Whether the node represents a directory (fixed at creation).
        allocated_size: On-disk allocated bytes (meaningful for leaves only).
        children: Child nodes in directory-listing order.
    """

    __slots__ = (
        "id", "path", "name", "is_directory", "allocated_size",
        "children", "_parent_ref", "_total_size", "__weakref__",
    )

    def __init__(
            self,
            path: str,
            name: Optional[str] = None,
            is_directory: bool = False,
            allocated_size: int = 0,
            children: Optional[Sequence[FileNode]] = None,
    ) -> None:
        if allocated_size < 0:
            raise ValueError(f"allocated_size must be non-negative, got {allocated_size}")

        self.id: int = next(_ID_COUNTER)
        self.path: str = path
        self.name: str = name if name is not None else _last_component(path)
        self.is_directory: bool = is_directory
        self.allocated_size: int = int(allocated_size)
        self.children: List[FileNode] = list(children) if children else []
        self._parent_ref: Optional[weakref.ReferenceType[FileNode]] = None
        self._total_size: int = _NOT_COMPUTED

        for child in self.children:
            child._set_parent(self)

    def __repr__(self) -> str:
        kind = "dir" if self.is_directory else "file"
        return f"FileNode({self.path!r}, {kind}, children={len(self.children)})"

    # -------------------------------------------------------------------------
    # AGGREGATION
    # -------------------------------------------------------------------------

    @property
    def total_size(self) -> int:
        """Recursive size: allocated_size for leaves, sum of children otherwise."""
        if self._total_size == _NOT_COMPUTED:
            self._fill_total_sizes()
        return self._total_size

    def _fill_total_sizes(self) -> None:
        """Memoize totals bottom-up over the not yet computed part of the subtree."""
        stack: List[Tuple[FileNode, bool]] = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if node._total_size != _NOT_COMPUTED:
                continue
            if not node.children:
                node._total_size = node.allocated_size
            elif expanded:
                node._total_size = sum(child._total_size for child in node.children)
            else:
                stack.append((node, True))
                stack.extend((child, False) for child in node.children)

    @property
    def sorted_children(self) -> List[FileNode]:
        """Children ordered by total size, largest first."""
        return sorted(self.children, key=lambda n: n.total_size, reverse=True)

    @property
    def file_extension(self) -> str:
        """Lower-cased extension without the dot; empty for directories."""
        if self.is_directory:
            return ""
        _, ext = os.path.splitext(self.name)
        return ext[1:].lower()

    def iter_nodes(self) -> Iterator[FileNode]:
        """Yield this node and all descendants in pre-order."""
        stack: List[FileNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def count_nodes(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    # -------------------------------------------------------------------------
    # ANCESTRY
    # -------------------------------------------------------------------------

    @property
    def parent(self) -> Optional[FileNode]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def _set_parent(self, parent: FileNode) -> None:
        self._parent_ref = weakref.ref(parent)

    def path_components(self) -> List[FileNode]:
        """Return the chain of nodes from the root down to this node."""
        chain: List[FileNode] = [self]
        current = self.parent
        while current is not None:
            chain.append(current)
            current = current.parent
        chain.reverse()
        return chain

    # -------------------------------------------------------------------------
    # SERIALIZATION
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the subtree into plain JSON-compatible dictionaries.

        The parent link is never encoded; it is re-derived on decode.
        """
        encoded: Dict[int, Dict[str, Any]] = {}
        # Reversed pre-order visits every child before its parent
        for node in reversed(list(self.iter_nodes())):
            encoded[node.id] = {
                "path": node.path,
                "name": node.name,
                "isDirectory": node.is_directory,
                "allocatedSize": node.allocated_size,
                "children": [encoded.pop(child.id) for child in node.children],
            }
        return encoded[self.id]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FileNode:
        """
        Rebuild a subtree from the output of to_dict.

        Children are decoded before their parent, and each parent re-stitches
        the back-references of its children when it is constructed.

        Raises:
            KeyError: If a mandatory field is missing.
            TypeError: If a field has an unexpected type.
            ValueError: If a size is negative, a directory carries its own
                        allocated size, or a file has children.
        """
        order: List[Tuple[Any, _DecodedFields]] = []
        stack: List[Any] = [data]
        while stack:
            raw = stack.pop()
            fields = _decode_fields(raw)
            order.append((raw, fields))
            stack.extend(reversed(fields.children))

        built: Dict[int, FileNode] = {}
        for raw, fields in reversed(order):
            built[id(raw)] = cls(
                path=fields.path,
                name=fields.name,
                is_directory=fields.is_directory,
                allocated_size=fields.allocated_size,
                children=[built[id(child)] for child in fields.children],
            )
        return built[id(data)]


class _DecodedFields(NamedTuple):
    path: str
    name: str
    is_directory: bool
    allocated_size: int
    children: List[Any]


def _decode_fields(data: Any) -> _DecodedFields:
    """Validate one serialized node, leaving its children encoded."""
    if not isinstance(data, dict):
        raise TypeError(f"Expected a node object, received {type(data).__name__}")

    raw_children = data["children"]
    if not isinstance(raw_children, list):
        raise TypeError("Field 'children' must be a list")

    path = data["path"]
    name = data["name"]
    is_directory = data["isDirectory"]
    allocated_size = data["allocatedSize"]

    if not isinstance(path, str) or not isinstance(name, str):
        raise TypeError("Fields 'path' and 'name' must be strings")
    if not isinstance(is_directory, bool):
        raise TypeError("Field 'isDirectory' must be a boolean")
    if isinstance(allocated_size, bool) or not isinstance(allocated_size, int):
        raise TypeError("Field 'allocatedSize' must be an integer")
    if allocated_size < 0:
        raise ValueError(f"Negative allocatedSize for {path!r}")
    if is_directory and allocated_size != 0:
        raise ValueError(f"Directory {path!r} must not carry its own allocatedSize")
    if not is_directory and raw_children:
        raise ValueError(f"File {path!r} must not have children")

    return _DecodedFields(path, name, is_directory, allocated_size, raw_children)


def trees_equal(a: FileNode, b: FileNode) -> bool:
    """
    Structural equality of two subtrees, ignoring identities and parent links.
    """
    stack: List[Tuple[FileNode, FileNode]] = [(a, b)]
    while stack:
        x, y = stack.pop()
        if (x.path, x.name, x.is_directory, x.allocated_size) != (
                y.path, y.name, y.is_directory, y.allocated_size):
            return False
        if len(x.children) != len(y.children):
            return False
        stack.extend(zip(x.children, y.children))
    return True


def _last_component(path: str) -> str:
    stripped = path.rstrip("/\\")
    name = os.path.basename(stripped)
    return name or path
