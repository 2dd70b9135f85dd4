from __future__ import annotations

"""
Treemap Layout Data Models.

Provides the rectangle and tile value types produced by the layout engine.
Both are immutable; tiles are recomputed wholesale on every layout call.
"""

from dataclasses import dataclass

from skimap.domain.tree_models import FileNode


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in the caller's coordinate space."""
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def is_degenerate(self, min_extent: float) -> bool:
        """True if either side is at or below ``min_extent``."""
        return self.width <= min_extent or self.height <= min_extent

    def contains(self, other: Rect, tolerance: float = 1e-6) -> bool:
        """True if ``other`` lies within this rectangle (inclusive, with tolerance)."""
        return (
            other.x >= self.x - tolerance
            and other.y >= self.y - tolerance
            and other.max_x <= self.max_x + tolerance
            and other.max_y <= self.max_y + tolerance
        )

    @classmethod
    def zero(cls) -> Rect:
        return cls(0.0, 0.0, 0.0, 0.0)

    @classmethod
    def of_size(cls, width: float, height: float) -> Rect:
        return cls(0.0, 0.0, width, height)


@dataclass(frozen=True)
class Tile:
    """
    A placed rectangle representing one node.

    Attributes:
        id: Identity of the represented node.
        node: The node this tile renders.
        rect: Placement in the coordinate space of the layout call.
        depth: Nesting level, 0 for the top level.
    """
    id: int
    node: FileNode
    rect: Rect
    depth: int

    @classmethod
    def for_node(cls, node: FileNode, rect: Rect, depth: int) -> Tile:
        return cls(id=node.id, node=node, rect=rect, depth=depth)
