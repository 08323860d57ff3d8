"""Configuration layer: constants and typed config dataclasses."""

from marble_run.config.constants import (
    BEHIND_DEPTH_BASE,
    CELL_HEIGHT,
    CELL_WIDTH,
    FALL_VECTOR,
    FLUSH_THRESHOLD,
    GRID_MAX,
    GRID_MIN,
    GRID_SIZE,
    HUE_RANGE,
    HUE_SHIFT_MAX,
    HUE_SHIFT_MIN,
    OCCLUSION_OFFSETS,
    ROTATION_STEP_DEGREES,
    SPRITE_SIZE,
    TICK_INTERVAL_MS,
)
from marble_run.config.types import RunConfig, RunResult

__all__ = [
    "BEHIND_DEPTH_BASE",
    "CELL_HEIGHT",
    "CELL_WIDTH",
    "FALL_VECTOR",
    "FLUSH_THRESHOLD",
    "GRID_MAX",
    "GRID_MIN",
    "GRID_SIZE",
    "HUE_RANGE",
    "HUE_SHIFT_MAX",
    "HUE_SHIFT_MIN",
    "OCCLUSION_OFFSETS",
    "ROTATION_STEP_DEGREES",
    "RunConfig",
    "RunResult",
    "SPRITE_SIZE",
    "TICK_INTERVAL_MS",
]
