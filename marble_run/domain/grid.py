"""Toroidal grid geometry and the fixed isometric projection.

The board is a torus over ``[GRID_MIN, GRID_MAX]`` on both axes. Every
position produced by this module is already wrapped into that range.
"""

from __future__ import annotations

from collections.abc import Container
from dataclasses import dataclass
from typing import NamedTuple

from marble_run.config.constants import (
    BEHIND_DEPTH_BASE,
    GRID_MAX,
    GRID_MIN,
    GRID_SIZE,
    OCCLUSION_OFFSETS,
    SPRITE_SIZE,
)


class GridPosition(NamedTuple):
    """Integer grid cell."""

    x: int
    y: int


class ScreenPosition(NamedTuple):
    x: float
    y: float


def wrap_coordinate(c: int) -> int:
    """Map any integer coordinate into ``[GRID_MIN, GRID_MAX]``.

    Python's floor modulo keeps negative remainders non-negative, so a
    coordinate below ``GRID_MIN`` re-enters from ``GRID_MAX`` and vice versa.
    """
    return GRID_MIN + (c - GRID_MIN) % GRID_SIZE


def wrap_position(position: tuple[int, int]) -> GridPosition:
    """Wrap both axes of ``position`` onto the torus."""
    x, y = position
    return GridPosition(wrap_coordinate(x), wrap_coordinate(y))


def offset_position(position: tuple[int, int], dx: int, dy: int) -> GridPosition:
    """Return ``position + (dx, dy)`` wrapped onto the torus."""
    x, y = position
    return wrap_position((x + dx, y + dy))


def in_bounds(position: tuple[int, int]) -> bool:
    x, y = position
    return GRID_MIN <= x <= GRID_MAX and GRID_MIN <= y <= GRID_MAX


def is_occluded(position: tuple[int, int], tiles: Container[GridPosition]) -> bool:
    """Return True if a tile sits at any occlusion offset from ``position``.

    A tile exactly at ``position`` never counts; landing on a tile is legal.
    Offsets are not wrapped: near the low edges they point off the board, so
    tiles on the opposite edge never occlude.
    """
    x, y = position
    return any(GridPosition(x + dx, y + dy) in tiles for dx, dy in OCCLUSION_OFFSETS)


@dataclass(frozen=True)
class IsometricGridConfig:
    """Pixel geometry of the isometric projection."""

    sprite_size: int
    cell_width: float
    cell_height: float


def create_isometric_grid(sprite_size: int = SPRITE_SIZE) -> IsometricGridConfig:
    """Derive cell size from sprite size (cell = sprite/2 wide, sprite/4 tall)."""
    if sprite_size < 1:
        raise ValueError("sprite_size must be >= 1")
    return IsometricGridConfig(
        sprite_size=sprite_size,
        cell_width=sprite_size / 2,
        cell_height=sprite_size / 4,
    )


DEFAULT_GRID = create_isometric_grid()


def grid_to_screen(
    position: tuple[int, int], config: IsometricGridConfig = DEFAULT_GRID
) -> ScreenPosition:
    """Project a grid cell to screen space relative to the board origin."""
    x, y = position
    return ScreenPosition((x - y) * config.cell_width, (x + y) * config.cell_height)


def screen_to_grid(
    screen: tuple[float, float], config: IsometricGridConfig = DEFAULT_GRID
) -> GridPosition:
    """Inverse projection, rounded to the nearest cell. The result is not wrapped."""
    sx, sy = screen
    gx = (sx / config.cell_width + sy / config.cell_height) / 2
    gy = (sy / config.cell_height - sx / config.cell_width) / 2
    return GridPosition(round(gx), round(gy))


def sprite_placement(
    position: tuple[int, int], config: IsometricGridConfig = DEFAULT_GRID
) -> ScreenPosition:
    """Top-left corner of a sprite centred on ``position``."""
    screen = grid_to_screen(position, config)
    half = config.sprite_size / 2
    return ScreenPosition(screen.x - half, screen.y - half)


def depth_index(position: tuple[int, int]) -> int:
    """Z-order of a tile; cells further down-screen draw on top."""
    x, y = position
    return BEHIND_DEPTH_BASE + x + y
