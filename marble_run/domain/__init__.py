"""Domain layer: grid geometry, tile behaviours, marbles, and board snapshots."""

from marble_run.domain.blocks import (
    BLOCK_BEHAVIORS,
    BlockBehavior,
    BlockKind,
    ConditionalOutput,
    Momentum,
    coerce_momentum,
    lookup_behavior,
    resolve_output,
)
from marble_run.domain.board import Board
from marble_run.domain.grid import (
    GridPosition,
    IsometricGridConfig,
    create_isometric_grid,
    grid_to_screen,
    is_occluded,
    screen_to_grid,
    wrap_coordinate,
    wrap_position,
)
from marble_run.domain.marble import (
    Marble,
    MarbleState,
    TrackTile,
    create_marble,
    step_marble,
)

__all__ = [
    "BLOCK_BEHAVIORS",
    "BlockBehavior",
    "BlockKind",
    "Board",
    "ConditionalOutput",
    "GridPosition",
    "IsometricGridConfig",
    "Marble",
    "MarbleState",
    "Momentum",
    "TrackTile",
    "coerce_momentum",
    "create_isometric_grid",
    "create_marble",
    "grid_to_screen",
    "is_occluded",
    "lookup_behavior",
    "resolve_output",
    "screen_to_grid",
    "step_marble",
    "wrap_coordinate",
    "wrap_position",
]
