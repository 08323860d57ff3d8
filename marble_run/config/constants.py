"""Centralized domain constants for the marble run.

All magic numbers that appear across multiple modules are defined here.
Consuming modules should import from this module rather than defining
their own inline literals.
"""

from __future__ import annotations

GRID_MIN = -10
"""Lowest addressable grid coordinate on both axes (inclusive)."""

GRID_MAX = 10
"""Highest addressable grid coordinate on both axes (inclusive)."""

GRID_SIZE = GRID_MAX - GRID_MIN + 1
"""Torus width in cells; coordinates wrap modulo this value."""

FALL_VECTOR: tuple[int, int] = (1, 1)
"""Grid displacement of one gravity step (straight down on screen)."""

OCCLUSION_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, 0),
    (0, -1),
    (-1, -1),
    (-2, -1),
    (-1, -2),
    (-2, -2),
)
"""Relative cells whose tiles hide a marble passing behind them. (0, 0) is excluded."""

ROTATION_STEP_DEGREES = 15
"""Rotation added to a marble for every rolling step."""

HUE_RANGE = 360
"""Hue modulus in degrees."""

HUE_SHIFT_MIN = 30
"""Smallest hue increment applied when a marble enters free fall."""

HUE_SHIFT_MAX = 140
"""Largest hue increment applied when a marble enters free fall (inclusive)."""

SPRITE_SIZE = 100
"""Edge length of a square tile sprite in pixels."""

CELL_WIDTH = SPRITE_SIZE // 2
"""Isometric cell width in pixels (half a sprite)."""

CELL_HEIGHT = SPRITE_SIZE // 4
"""Isometric cell height in pixels (a quarter sprite)."""

BEHIND_DEPTH_BASE = 100
"""Base z-index for depth ordering of tiles and occluded marbles."""

TICK_INTERVAL_MS = 150
"""Default presentation tick period; never read by the transition engine."""

FLUSH_THRESHOLD = 8_192
"""Flush trajectory rows to Parquet once this in-memory row count is reached."""

TAP_VOLUME = 0.6
"""Volume of the one-shot tap cue played when a marble lands on a tile."""

ROLL_VOLUME = 0.4
"""Volume of the looping roll cue played while a marble rolls."""

MARBLE_FOREGROUND_DEPTH = 200
"""Z-index of a marble that is not behind any tile."""

MARBLE_BACKGROUND_DEPTH = 1
"""Z-index of a behind marble whose entry cell is unknown."""
