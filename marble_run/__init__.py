"""Discrete marble-run simulation on a wrapping isometric grid."""

from marble_run.domain import (
    BlockKind,
    Board,
    GridPosition,
    Marble,
    MarbleState,
    Momentum,
    TrackTile,
    create_marble,
    step_marble,
)

__all__ = [
    "BlockKind",
    "Board",
    "GridPosition",
    "Marble",
    "MarbleState",
    "Momentum",
    "TrackTile",
    "create_marble",
    "step_marble",
]
