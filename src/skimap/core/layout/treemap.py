from __future__ import annotations

"""
Squarified Treemap Layout Engine.

Turns a size tree and a target rectangle into a flat list of non-overlapping
tiles. Siblings are placed with the squarified algorithm (Bruls, Huizing and
van Wijk): items are taken largest first and greedily grouped into rows as
long as adding an item does not worsen the row's worst aspect ratio.
Directories are split into a thin header strip and a body that is laid out
recursively one level deeper, up to a maximum depth.

Everything here is pure: no I/O, no shared state.
"""

import math
from typing import List, Sequence, Tuple

from skimap.domain import constants as const
from skimap.domain.layout_models import Rect, Tile
from skimap.domain.tree_models import FileNode


# ==============================================================================
# PUBLIC API
# ==============================================================================

def layout(
        node: FileNode,
        rect: Rect,
        depth: int = 0,
        max_depth: int = const.DEFAULT_MAX_DEPTH,
) -> List[Tile]:
    """
    Compute the tiles representing ``node`` inside ``rect``.

    Args:
        node: Root of the subtree to display.
        rect: Target rectangle in the caller's units.
        depth: Nesting level assigned to the top-level tiles.
        max_depth: Deepest level at which directories are still subdivided.

    Returns:
        List[Tile]: Tiles in placement order; directory headers precede the
                    tiles of their bodies.
    """
    if rect.is_degenerate(const.MIN_TILE_EXTENT):
        return []

    children = [c for c in node.sorted_children if c.total_size > 0]
    if not children:
        return [Tile.for_node(node, rect, depth)]

    child_rects = squarify([float(c.total_size) for c in children], rect)

    tiles: List[Tile] = []
    for child, child_rect in zip(children, child_rects):
        if child_rect.is_degenerate(const.MIN_TILE_EXTENT):
            continue

        if not (child.is_directory and depth < max_depth):
            tiles.append(Tile.for_node(child, child_rect, depth))
            continue

        header, body = split_header(child_rect)
        tiles.append(Tile.for_node(child, header, depth))
        if not body.is_degenerate(const.MIN_BODY_EXTENT):
            tiles.extend(layout(child, body, depth + 1, max_depth))

    return tiles


def split_header(rect: Rect) -> Tuple[Rect, Rect]:
    """
    Split a directory rectangle into its label strip and its body.

    The header spans the full width; its height is the smaller of the fixed
    cap and a fraction of the rectangle's height.
    """
    header_height = min(const.HEADER_MAX_HEIGHT, rect.height * const.HEADER_HEIGHT_RATIO)
    header = Rect(rect.x, rect.y, rect.width, header_height)
    body = Rect(rect.x, rect.y + header_height, rect.width, rect.height - header_height)
    return header, body


def squarify(weights: Sequence[float], rect: Rect) -> List[Rect]:
    """
    Place one rectangle per weight inside ``rect`` with areas proportional to
    the weights.

    Items are processed in the given order, so callers should sort weights in
    descending order and drop non-positive ones beforehand.

    Args:
        weights: Item weights.
        rect: Rectangle to fill.

    Returns:
        List[Rect]: One rectangle per weight, in input order. All rectangles
                    are zero-sized when the total weight is not positive.
    """
    if not weights:
        return []

    total = math.fsum(weights)
    result = [Rect.zero() for _ in weights]
    if total <= 0:
        return result

    indexed = list(enumerate(float(w) for w in weights))
    _squarify_rows(indexed, rect, total, result)
    return result


def squarify_size(weights: Sequence[float], width: float, height: float) -> List[Rect]:
    """Convenience form of squarify for a rectangle anchored at the origin."""
    return squarify(weights, Rect.of_size(width, height))


def worst_aspect(
        row: Sequence[float],
        candidate: float,
        row_total: float,
        outer_total: float,
        layout_len: float,
        perp_len: float,
) -> float:
    """
    Worst aspect ratio of a row after appending ``candidate``.

    The row thickness is its share of ``outer_total`` along ``perp_len``;
    each item's length is its share of the row along ``layout_len``.
    Returns infinity when the geometry is empty.
    """
    test_total = row_total + candidate
    if test_total <= 0 or outer_total <= 0:
        return math.inf

    thickness = (test_total / outer_total) * perp_len
    if thickness <= 0:
        return math.inf

    worst = 0.0
    for value in list(row) + [candidate]:
        length = (value / test_total) * layout_len
        if length > 0:
            worst = max(worst, length / thickness, thickness / length)
    return worst


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _squarify_rows(
        items: List[Tuple[int, float]],
        rect: Rect,
        total: float,
        result: List[Rect],
) -> None:
    """
    Lay out rows until every item is placed.

    Each pass places one row, then shrinks the remaining rectangle and weight.
    """
    start = 0
    while start < len(items) and total > 0:
        horizontal = rect.width >= rect.height
        layout_len = rect.width if horizontal else rect.height
        perp_len = rect.height if horizontal else rect.width

        row: List[float] = []
        row_total = 0.0
        prev_worst = math.inf
        end = start

        while end < len(items):
            value = items[end][1]
            test_worst = worst_aspect(row, value, row_total, total, layout_len, perp_len)
            if row and test_worst > prev_worst:
                break
            row.append(value)
            row_total += value
            prev_worst = test_worst
            end += 1

        thickness = (row_total / total) * perp_len
        offset = 0.0
        for index, value in items[start:end]:
            length = (value / row_total) * layout_len if row_total > 0 else 0.0
            if horizontal:
                result[index] = Rect(rect.x + offset, rect.y, length, thickness)
            else:
                result[index] = Rect(rect.x, rect.y + offset, thickness, length)
            offset += length

        if horizontal:
            rect = Rect(rect.x, rect.y + thickness, rect.width, rect.height - thickness)
        else:
            rect = Rect(rect.x + thickness, rect.y, rect.width - thickness, rect.height)

        total -= row_total
        start = end
