"""Merge connected rectangles into outlines and serialize them as SVG path data."""

from __future__ import annotations

import logging

from shapely.errors import GEOSException
from shapely.geometry import Polygon, box
from shapely.geometry.polygon import orient

from qreate.geometry import EPSILON, Rect, find_connected_groups, format_coord, round_coord

logger = logging.getLogger(__name__)

Point = tuple[float, float]


class GeometryContext:
    """Scratch space for the geometry built during one render pass.

    Everything built while merging a group is registered here and dropped
    when the group is done. Entering the context clears it; leaving it
    clears it again whether or not an error was raised. The context must
    not be entered twice at the same time.
    """

    def __init__(self) -> None:
        self._items: list = []
        self._active = False

    def __enter__(self) -> "GeometryContext":
        if self._active:
            raise RuntimeError("GeometryContext is already in use")
        self._active = True
        self.clear()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear()
        self._active = False

    def __len__(self) -> int:
        return len(self._items)

    @property
    def active(self) -> bool:
        return self._active

    def add(self, geometry):
        self._items.append(geometry)
        return geometry

    def clear(self) -> None:
        self._items.clear()


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def rect_path_data(rect: Rect) -> str:
    """Unrounded closed path for a single rectangle."""
    return (
        f"M{format_coord(rect.x)},{format_coord(rect.y)}"
        f"h{format_coord(rect.width)}v{format_coord(rect.height)}h{format_coord(-rect.width)}Z"
    )


def _line_to(start: Point, end: Point) -> str:
    if abs(end[1] - start[1]) < EPSILON:
        return f"H{format_coord(end[0])}"
    if abs(end[0] - start[0]) < EPSILON:
        return f"V{format_coord(end[1])}"
    return f"L{format_coord(end[0])},{format_coord(end[1])}"


def _clean_ring(coords) -> list[Point]:
    """Drop the closing point, duplicate points and collinear vertices."""
    points = [(round_coord(x), round_coord(y)) for x, y in coords]
    if len(points) > 1 and points[0] == points[-1]:
        points.pop()

    changed = True
    while changed and len(points) >= 3:
        changed = False
        for i in range(len(points)):
            prev, curr, nxt = points[i - 1], points[i], points[(i + 1) % len(points)]
            cross = (curr[0] - prev[0]) * (nxt[1] - curr[1]) - (curr[1] - prev[1]) * (nxt[0] - curr[0])
            if curr == prev or abs(cross) < EPSILON:
                del points[i]
                changed = True
                break

    if not points:
        return points
    # Start at the top-left vertex so output does not depend on GEOS ring order
    start = min(range(len(points)), key=lambda i: (points[i][1], points[i][0]))
    return points[start:] + points[:start]


def _offset_towards(origin: Point, target: Point, distance: float) -> Point:
    dx, dy = target[0] - origin[0], target[1] - origin[1]
    length = (dx * dx + dy * dy) ** 0.5
    return origin[0] + dx / length * distance, origin[1] + dy / length * distance


def contour_path_data(points: list[Point], corner_radius: float = 0) -> str:
    """Serialize one closed contour, optionally replacing each vertex by an arc.

    With a positive radius every vertex becomes a circular arc of that radius
    tangent to both incident edges. The radius is not reduced on short edges.
    """
    if len(points) < 3:
        return ""

    if corner_radius <= 0:
        parts = [f"M{format_coord(points[0][0])},{format_coord(points[0][1])}"]
        for prev, curr in zip(points, points[1:]):
            parts.append(_line_to(prev, curr))
        parts.append("Z")
        return "".join(parts)

    n = len(points)
    r = format_coord(corner_radius)
    corners = []
    for i, vertex in enumerate(points):
        prev, nxt = points[i - 1], points[(i + 1) % n]
        entry = _offset_towards(vertex, prev, corner_radius)
        exit_ = _offset_towards(vertex, nxt, corner_radius)
        # y points down, so a positive cross product is a clockwise turn
        cross = (vertex[0] - prev[0]) * (nxt[1] - vertex[1]) - (vertex[1] - prev[1]) * (nxt[0] - vertex[0])
        corners.append((entry, exit_, 1 if cross > 0 else 0))

    _, start, _ = corners[0]
    parts = [f"M{format_coord(start[0])},{format_coord(start[1])}"]
    position = start
    for entry, exit_, sweep in corners[1:] + corners[:1]:
        parts.append(_line_to(position, entry))
        parts.append(f"A{r},{r} 0 0,{sweep} {format_coord(exit_[0])},{format_coord(exit_[1])}")
        position = exit_
    parts.append("Z")
    return "".join(parts)


# ---------------------------------------------------------------------------
# Union
# ---------------------------------------------------------------------------

def _contours(geometry) -> list[list[Point]]:
    contours = []
    for polygon in getattr(geometry, "geoms", [geometry]):
        if not isinstance(polygon, Polygon) or polygon.is_empty:
            continue
        polygon = orient(polygon, sign=1.0)
        for ring in [polygon.exterior, *polygon.interiors]:
            points = _clean_ring(ring.coords)
            if len(points) >= 3:
                contours.append(points)
    return contours


def unite_group(group: list[Rect], context: GeometryContext, corner_radius: float = 0) -> str:
    """Merge one connected group into a single (possibly compound) path.

    Falls back to plain rectangle paths for the group if the geometry engine
    fails.
    """
    if not group:
        return ""

    try:
        combined = None
        for rect in group:
            shape = context.add(box(rect.x, rect.y, rect.right, rect.bottom))
            combined = shape if combined is None else context.add(combined.union(shape))
        contours = _contours(combined)
    except GEOSException as e:
        logger.warning("Union failed for a group of %d rectangles: %s", len(group), e)
        return " ".join(rect_path_data(rect) for rect in group)
    finally:
        context.clear()

    return " ".join(contour_path_data(points, corner_radius) for points in contours)


def unite_rectangles(
    rects: list[Rect],
    corner_radius: float = 0,
    context: GeometryContext | None = None,
) -> str:
    """Turn rectangles into one path string with one outline per connected group.

    Args:
        rects: Rectangles from find_optimized_rectangles.
        corner_radius: Fillet radius applied to every outline vertex. 0 keeps
            sharp corners.
        context: Scratch context for the union. Without one, unrounded
            rectangle paths are emitted instead.

    Returns:
        Space-joined path data, empty for no rectangles.
    """
    if not rects:
        return ""

    if context is None:
        logger.warning("No geometry context available, emitting plain rectangles")
        return " ".join(rect_path_data(rect) for rect in rects)

    radius = corner_radius if corner_radius > 0 else 0
    groups = find_connected_groups(rects)
    logger.debug("Merging %d rectangles in %d groups", len(rects), len(groups))

    with context:
        return " ".join(
            path for path in (unite_group(group, context, radius) for group in groups) if path
        )
