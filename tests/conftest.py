"""Shared test fixtures."""

from __future__ import annotations

import random

import pytest

# A dark ring of 8 modules around one light module
RING_GRID = [
    [True, True, True],
    [True, False, True],
    [True, True, True],
]

# Two modules that only share a corner point
DIAGONAL_GRID = [
    [True, False],
    [False, True],
]

SINGLE_MODULE_GRID = [
    [False, False, False],
    [False, True, False],
    [False, False, False],
]


def random_grid(size: int, seed: int, density: float = 0.5) -> list[list[bool]]:
    rng = random.Random(seed)
    return [[rng.random() < density for _ in range(size)] for _ in range(size)]


def covered_cells(rects, module_size: float) -> list[tuple[int, int]]:
    """Grid cells covered by rectangles, one entry per covering."""
    cells = []
    for rect in rects:
        col0 = round(rect.x / module_size)
        row0 = round(rect.y / module_size)
        cols = round(rect.width / module_size)
        rows = round(rect.height / module_size)
        cells.extend(
            (r, c) for r in range(row0, row0 + rows) for c in range(col0, col0 + cols)
        )
    return cells


@pytest.fixture
def ring_grid() -> list[list[bool]]:
    return [row[:] for row in RING_GRID]


@pytest.fixture
def single_module_grid() -> list[list[bool]]:
    return [row[:] for row in SINGLE_MODULE_GRID]
