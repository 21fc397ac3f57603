"""Rectangle decomposition of a module grid and connectivity grouping.

The module grid is covered by axis-aligned rectangles using a greedy,
scan-order heuristic: every dark cell ends up in exactly one rectangle and
the output only depends on the grid, so repeated runs give identical paths.
Rectangles that share an edge segment or overlap are then grouped so each
group can be merged into a single outline.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass

from qreate import COORD_PRECISION

# Tolerance absorbing the 3-decimal rounding of rectangle coordinates
EPSILON = 1e-4


def round_coord(value: float) -> float:
    """Round a coordinate half-up to the precision used throughout the SVG output."""
    scale = 10 ** COORD_PRECISION
    return math.floor(value * scale + 0.5) / scale


def format_coord(value: float) -> str:
    """Shortest text form of a rounded coordinate, e.g. 10 or 23.81."""
    text = f"{round_coord(value):.{COORD_PRECISION}f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


@dataclass(frozen=True)
class Rect:
    """A filled axis-aligned block in viewbox units."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return round_coord(self.x + self.width)

    @property
    def bottom(self) -> float:
        return round_coord(self.y + self.height)


# ---------------------------------------------------------------------------
# Rectangle extraction
# ---------------------------------------------------------------------------

def find_optimized_rectangles(grid: list[list[bool]], module_size: float) -> list[Rect]:
    """Cover the dark cells of a grid with non-overlapping rectangles.

    For each unvisited dark cell in row-major order the run is first extended
    to the right, then downward for as long as the full row slice below is
    dark and unvisited.

    Args:
        grid: Rows of booleans, True for filled cells.
        module_size: Size of one module in viewbox units.

    Returns:
        Rectangles in scan order, coordinates rounded to 3 decimals.
    """
    if not grid:
        return []

    row_count = len(grid)
    col_count = len(grid[0])
    visited = [[False] * col_count for _ in range(row_count)]
    rectangles: list[Rect] = []

    for row in range(row_count):
        for col in range(col_count):
            if not grid[row][col] or visited[row][col]:
                continue

            width = 1
            while (
                col + width < col_count
                and grid[row][col + width]
                and not visited[row][col + width]
            ):
                width += 1

            height = 1
            while row + height < row_count and all(
                grid[row + height][c] and not visited[row + height][c]
                for c in range(col, col + width)
            ):
                height += 1

            for r in range(row, row + height):
                for c in range(col, col + width):
                    visited[r][c] = True

            start_x = round_coord(col * module_size)
            start_y = round_coord(row * module_size)
            end_x = round_coord((col + width) * module_size)
            end_y = round_coord((row + height) * module_size)
            rectangles.append(
                Rect(
                    x=start_x,
                    y=start_y,
                    width=round_coord(end_x - start_x),
                    height=round_coord(end_y - start_y),
                )
            )

    return rectangles


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------

def _spans_overlap(a0: float, a1: float, b0: float, b1: float) -> bool:
    return a0 < b1 - EPSILON and a1 > b0 + EPSILON


def are_connected(a: Rect, b: Rect) -> bool:
    """Whether two rectangles share an edge segment or overlap.

    Touching only at a corner point does not count.
    """
    overlap_x = _spans_overlap(a.x, a.right, b.x, b.right)
    overlap_y = _spans_overlap(a.y, a.bottom, b.y, b.bottom)

    touch_x = abs(a.right - b.x) < EPSILON or abs(b.right - a.x) < EPSILON
    if touch_x and overlap_y:
        return True

    touch_y = abs(a.bottom - b.y) < EPSILON or abs(b.bottom - a.y) < EPSILON
    if touch_y and overlap_x:
        return True

    return overlap_x and overlap_y


def find_connected_groups(rectangles: list[Rect]) -> list[list[Rect]]:
    """Partition rectangles into connected groups by breadth-first search.

    Groups come out in the order their first rectangle appears in the input;
    members are listed in discovery order.
    """
    groups: list[list[Rect]] = []
    visited: set[int] = set()

    for i in range(len(rectangles)):
        if i in visited:
            continue

        visited.add(i)
        group = [rectangles[i]]
        queue: deque[int] = deque([i])
        while queue:
            current = rectangles[queue.popleft()]
            for j, other in enumerate(rectangles):
                if j in visited:
                    continue
                if are_connected(current, other):
                    visited.add(j)
                    group.append(other)
                    queue.append(j)

        groups.append(group)

    return groups
