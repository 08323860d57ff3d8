"""Marble transition engine.

``step_marble`` is a pure function of (marble, tiles, rng): it never mutates
its inputs and never touches a global random generator. States are checked
in priority order each call:

1. ``behind``: keep falling; re-emerge as ``falling`` once no tile occludes.
2. Tile of a known kind at the current cell: roll per the tile's behaviour.
3. Otherwise free fall. A marble rolling with negative momentum drops
   *behind* the tiles it just left instead of in front of them.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from random import Random

from marble_run.config.constants import (
    FALL_VECTOR,
    HUE_RANGE,
    HUE_SHIFT_MAX,
    HUE_SHIFT_MIN,
    MARBLE_BACKGROUND_DEPTH,
    MARBLE_FOREGROUND_DEPTH,
    ROTATION_STEP_DEGREES,
)
from marble_run.domain.blocks import (
    BlockKind,
    Momentum,
    coerce_momentum,
    lookup_behavior,
    parse_block_kind,
    resolve_output,
)
from marble_run.domain.grid import (
    GridPosition,
    depth_index,
    is_occluded,
    offset_position,
    wrap_position,
)

logger = logging.getLogger(__name__)


class MarbleState(Enum):
    ROLLING = "rolling"
    FALLING = "falling"
    BEHIND = "behind"


@dataclass(frozen=True)
class TrackTile:
    """A placed tile. ``sprite_path`` and ``hue`` are presentation-only."""

    position: GridPosition
    block_name: str
    sprite_path: str = ""
    hue: int | None = None

    @property
    def kind(self) -> BlockKind | None:
        return parse_block_kind(self.block_name)


@dataclass(frozen=True)
class Marble:
    """Immutable marble value; each tick produces a new one."""

    marble_id: str
    position: GridPosition
    state: MarbleState
    momentum: Momentum
    rotation: int
    hue: int
    behind_coordinates: GridPosition | None = None
    """Cell where the marble fell behind; set only while ``state`` is BEHIND."""


TileBoard = Mapping[GridPosition, TrackTile]


def create_marble(
    position: tuple[int, int], rng: Random, marble_id: str | None = None
) -> Marble:
    """Create a freshly dropped marble with a random hue in [0, 360)."""
    return Marble(
        marble_id=marble_id if marble_id is not None else f"marble-{uuid.uuid4().hex[:12]}",
        position=wrap_position(position),
        state=MarbleState.FALLING,
        momentum=Momentum.ZERO,
        rotation=0,
        hue=rng.randrange(HUE_RANGE),
    )


def shift_hue(hue: int, rng: Random) -> int:
    """Rotate ``hue`` by a random increment in [HUE_SHIFT_MIN, HUE_SHIFT_MAX]."""
    return (hue + rng.randint(HUE_SHIFT_MIN, HUE_SHIFT_MAX)) % HUE_RANGE


def _coerce_state(raw: object) -> MarbleState:
    if isinstance(raw, MarbleState):
        return raw
    try:
        return MarbleState(raw)
    except ValueError:
        logger.warning("Malformed marble state %r coerced to %s", raw, MarbleState.FALLING.value)
        return MarbleState.FALLING


def _fall(position: GridPosition) -> GridPosition:
    return offset_position(position, *FALL_VECTOR)


def step_marble(marble: Marble, tiles: TileBoard, rng: Random) -> Marble:
    """Advance ``marble`` by one tick against an immutable ``tiles`` snapshot."""
    state = _coerce_state(marble.state)
    momentum = coerce_momentum(marble.momentum)
    position = wrap_position(marble.position)

    if state is MarbleState.BEHIND:
        new_position = _fall(position)
        if is_occluded(new_position, tiles):
            return replace(
                marble,
                position=new_position,
                state=MarbleState.BEHIND,
                momentum=Momentum.ZERO,
                behind_coordinates=marble.behind_coordinates or position,
            )
        return replace(
            marble,
            position=new_position,
            state=MarbleState.FALLING,
            momentum=Momentum.ZERO,
            hue=shift_hue(marble.hue, rng),
            behind_coordinates=None,
        )

    tile = tiles.get(position)
    behavior = None
    if tile is not None:
        behavior = lookup_behavior(tile.block_name)
        if behavior is None:
            logger.warning(
                "Unknown tile kind %r at %s; marble %s falls through",
                tile.block_name,
                tuple(position),
                marble.marble_id,
            )

    if behavior is not None:
        output = resolve_output(momentum, behavior, rng)
        dx, dy = output.velocity
        return replace(
            marble,
            position=offset_position(position, dx, dy),
            state=MarbleState.ROLLING,
            momentum=output,
            rotation=(marble.rotation + ROTATION_STEP_DEGREES) % 360,
            behind_coordinates=None,
        )

    new_position = _fall(position)
    if state is MarbleState.ROLLING and momentum.is_negative:
        logger.debug("Marble %s falls behind at %s", marble.marble_id, tuple(position))
        return replace(
            marble,
            position=new_position,
            state=MarbleState.BEHIND,
            momentum=Momentum.ZERO,
            behind_coordinates=position,
        )
    return replace(
        marble,
        position=new_position,
        state=MarbleState.FALLING,
        momentum=Momentum.ZERO,
        hue=marble.hue if state is MarbleState.FALLING else shift_hue(marble.hue, rng),
        behind_coordinates=None,
    )


def marble_depth_index(marble: Marble) -> int:
    """Z-order for drawing ``marble`` among tiles.

    A marble that fell behind draws just under the tile it left; any other
    marble draws above every tile.
    """
    if marble.state is MarbleState.BEHIND:
        if marble.behind_coordinates is None:
            return MARBLE_BACKGROUND_DEPTH
        return depth_index(marble.behind_coordinates) - 1
    return MARBLE_FOREGROUND_DEPTH
