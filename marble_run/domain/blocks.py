"""Tile behaviour registry: how each track tile transforms marble momentum.

Each ``BlockKind`` carries one static ``BlockBehavior``. A behaviour is a
default output plus ordered conditional rules keyed on the incoming
momentum. Outputs are either a single ``Momentum`` or a tuple of candidates,
in which case one is drawn uniformly from the injected RNG on every
traversal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from random import Random
from types import MappingProxyType
from typing import TypeAlias

logger = logging.getLogger(__name__)


class Momentum(Enum):
    """Discrete lateral direction carried between ticks. ZERO means vertical fall."""

    PLUS_X = "+x"
    MINUS_X = "-x"
    PLUS_Y = "+y"
    MINUS_Y = "-y"
    ZERO = "0"

    @property
    def velocity(self) -> tuple[int, int]:
        return _VELOCITIES[self]

    @property
    def is_negative(self) -> bool:
        return self in (Momentum.MINUS_X, Momentum.MINUS_Y)


_VELOCITIES: dict[Momentum, tuple[int, int]] = {
    Momentum.PLUS_X: (1, 0),
    Momentum.MINUS_X: (-1, 0),
    Momentum.PLUS_Y: (0, 1),
    Momentum.MINUS_Y: (0, -1),
    Momentum.ZERO: (0, 0),
}

MomentumOutput: TypeAlias = Momentum | tuple[Momentum, ...]
"""A fixed output direction, or candidates sampled uniformly."""


def coerce_momentum(raw: object) -> Momentum:
    """Return ``raw`` as a Momentum, degrading anything malformed to ZERO."""
    if isinstance(raw, Momentum):
        return raw
    if isinstance(raw, str):
        try:
            return Momentum(raw)
        except ValueError:
            pass
    logger.warning("Malformed momentum %r coerced to %s", raw, Momentum.ZERO.value)
    return Momentum.ZERO


def momentum_to_velocity(momentum: Momentum) -> tuple[int, int]:
    return momentum.velocity


def velocity_to_momentum(velocity: tuple[int, int]) -> Momentum:
    """Collapse a velocity to a momentum; the x axis takes priority."""
    vx, vy = velocity
    if vx > 0:
        return Momentum.PLUS_X
    if vx < 0:
        return Momentum.MINUS_X
    if vy > 0:
        return Momentum.PLUS_Y
    if vy < 0:
        return Momentum.MINUS_Y
    return Momentum.ZERO


class BlockKind(Enum):
    """Closed set of track tile kinds. The value is the block name used by editors."""

    STRAIGHT_X = "StraightX"
    STRAIGHT_Y = "StraightY"
    LANDING_PLUS_X = "LandingPlusX"
    LANDING_MINUS_X = "LandingMinusX"
    LANDING_PLUS_Y = "LandingPlusY"
    LANDING_MINUS_Y = "LandingMinusY"
    TURN_PLUS_X_PLUS_Y = "TurnPlusXPlusY"
    TURN_PLUS_X_MINUS_Y = "TurnPlusXMinusY"
    TURN_MINUS_X_PLUS_Y = "TurnMinusXPlusY"
    TURN_MINUS_X_MINUS_Y = "TurnMinusXMinusY"
    JUNCTION_NO_PLUS_X = "JunctionNoPlusX"
    JUNCTION_NO_MINUS_X = "JunctionNoMinusX"
    JUNCTION_NO_PLUS_Y = "JunctionNoPlusY"
    JUNCTION_NO_MINUS_Y = "JunctionNoMinusY"
    CRISS_CROSS = "CrissCross"


@dataclass(frozen=True)
class ConditionalOutput:
    """Rule applied when the incoming momentum equals ``input_momentum``."""

    input_momentum: Momentum
    output: MomentumOutput


@dataclass(frozen=True)
class BlockBehavior:
    """Static momentum-transformation rules for one tile kind."""

    kind: BlockKind
    default_output: MomentumOutput
    conditional_outputs: tuple[ConditionalOutput, ...] = ()

    @property
    def block_name(self) -> str:
        return self.kind.value


_OPPOSITE: dict[Momentum, Momentum] = {
    Momentum.PLUS_X: Momentum.MINUS_X,
    Momentum.MINUS_X: Momentum.PLUS_X,
    Momentum.PLUS_Y: Momentum.MINUS_Y,
    Momentum.MINUS_Y: Momentum.PLUS_Y,
}


def _pass_through(kind: BlockKind, exits: tuple[Momentum, ...]) -> BlockBehavior:
    """Straight and criss-cross tiles: every exit direction is conserved."""
    return BlockBehavior(
        kind=kind,
        default_output=exits,
        conditional_outputs=tuple(ConditionalOutput(m, m) for m in exits),
    )


def _landing(kind: BlockKind, output: Momentum) -> BlockBehavior:
    return BlockBehavior(kind=kind, default_output=output)


def _turn(kind: BlockKind, a: Momentum, b: Momentum) -> BlockBehavior:
    """Turn joining exits ``a`` and ``b``.

    Heading out an exit keeps going; heading into the wall opposite an exit
    means the marble entered through that exit, so it leaves by the other one.
    """
    return BlockBehavior(
        kind=kind,
        default_output=(a, b),
        conditional_outputs=(
            ConditionalOutput(a, a),
            ConditionalOutput(b, b),
            ConditionalOutput(_OPPOSITE[a], b),
            ConditionalOutput(_OPPOSITE[b], a),
        ),
    )


def _junction(kind: BlockKind, missing: Momentum) -> BlockBehavior:
    """Three-way junction with the ``missing`` side closed."""
    exits = tuple(m for m in _OPPOSITE if m is not missing)
    perpendicular = tuple(m for m in exits if m is not _OPPOSITE[missing])
    return BlockBehavior(
        kind=kind,
        default_output=exits,
        conditional_outputs=tuple(ConditionalOutput(m, m) for m in exits)
        + (ConditionalOutput(missing, perpendicular),),
    )


_LEGACY_NAMES: dict[str, BlockKind] = {
    "StrightX": BlockKind.STRAIGHT_X,
    "StrightY": BlockKind.STRAIGHT_Y,
}
"""Block names written by earlier editors, still used as sprite asset names."""

_SPRITE_NAMES: dict[BlockKind, str] = {kind: name for name, kind in _LEGACY_NAMES.items()}

_PX, _MX, _PY, _MY = Momentum.PLUS_X, Momentum.MINUS_X, Momentum.PLUS_Y, Momentum.MINUS_Y

BLOCK_BEHAVIORS: MappingProxyType[BlockKind, BlockBehavior] = MappingProxyType(
    {
        BlockKind.STRAIGHT_X: _pass_through(BlockKind.STRAIGHT_X, (_PX, _MX)),
        BlockKind.STRAIGHT_Y: _pass_through(BlockKind.STRAIGHT_Y, (_PY, _MY)),
        BlockKind.LANDING_PLUS_X: _landing(BlockKind.LANDING_PLUS_X, _PX),
        BlockKind.LANDING_MINUS_X: _landing(BlockKind.LANDING_MINUS_X, _MX),
        BlockKind.LANDING_PLUS_Y: _landing(BlockKind.LANDING_PLUS_Y, _PY),
        BlockKind.LANDING_MINUS_Y: _landing(BlockKind.LANDING_MINUS_Y, _MY),
        BlockKind.TURN_PLUS_X_PLUS_Y: _turn(BlockKind.TURN_PLUS_X_PLUS_Y, _PX, _PY),
        BlockKind.TURN_PLUS_X_MINUS_Y: _turn(BlockKind.TURN_PLUS_X_MINUS_Y, _PX, _MY),
        BlockKind.TURN_MINUS_X_PLUS_Y: _turn(BlockKind.TURN_MINUS_X_PLUS_Y, _MX, _PY),
        BlockKind.TURN_MINUS_X_MINUS_Y: _turn(BlockKind.TURN_MINUS_X_MINUS_Y, _MX, _MY),
        BlockKind.JUNCTION_NO_PLUS_X: _junction(BlockKind.JUNCTION_NO_PLUS_X, _PX),
        BlockKind.JUNCTION_NO_MINUS_X: _junction(BlockKind.JUNCTION_NO_MINUS_X, _MX),
        BlockKind.JUNCTION_NO_PLUS_Y: _junction(BlockKind.JUNCTION_NO_PLUS_Y, _PY),
        BlockKind.JUNCTION_NO_MINUS_Y: _junction(BlockKind.JUNCTION_NO_MINUS_Y, _MY),
        BlockKind.CRISS_CROSS: _pass_through(BlockKind.CRISS_CROSS, (_PX, _MX, _PY, _MY)),
    }
)


def parse_block_kind(name: BlockKind | str) -> BlockKind | None:
    """Return the kind for a block name, or None when the name is unknown.

    Legacy spellings (``StrightX``, ``StrightY``) resolve to the straight kinds.
    """
    if isinstance(name, BlockKind):
        return name
    if name in _LEGACY_NAMES:
        return _LEGACY_NAMES[name]
    try:
        return BlockKind(name)
    except ValueError:
        return None


def lookup_behavior(name: BlockKind | str) -> BlockBehavior | None:
    """Return the static behaviour for a tile kind, or None for unknown names."""
    kind = parse_block_kind(name)
    if kind is None:
        return None
    return BLOCK_BEHAVIORS[kind]


def _pick(output: MomentumOutput, rng: Random) -> Momentum:
    if isinstance(output, Momentum):
        return output
    return rng.choice(output)


def resolve_output(input_momentum: Momentum, behavior: BlockBehavior, rng: Random) -> Momentum:
    """Resolve the momentum a marble leaves ``behavior``'s tile with.

    Conditional rules are scanned in declaration order and the first exact
    match on ``input_momentum`` wins; otherwise the default applies. Candidate
    tuples are sampled from ``rng`` on every call.
    """
    for conditional in behavior.conditional_outputs:
        if conditional.input_momentum is input_momentum:
            return _pick(conditional.output, rng)
    return _pick(behavior.default_output, rng)


def sprite_path_for(kind: BlockKind) -> str:
    """Sprite asset path used by editors and renderers for ``kind``."""
    return f"/sprites/isometric-cubes/{_SPRITE_NAMES.get(kind, kind.value)}.png"
