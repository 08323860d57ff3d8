"""Run summary metrics: state tallies and grid occupancy."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np

from marble_run.config.constants import GRID_MIN, GRID_SIZE
from marble_run.domain.marble import Marble, MarbleState


def state_counts(marbles: Iterable[Marble]) -> dict[str, int]:
    """Count marbles per state; every state is present, possibly with zero."""
    counts = {state.value: 0 for state in MarbleState}
    for marble in marbles:
        counts[marble.state.value] += 1
    return counts


def occupancy_grid(positions: Iterable[tuple[int, int]]) -> np.ndarray:
    """Visit counts on the torus as a ``(GRID_SIZE, GRID_SIZE)`` array indexed ``[y, x]``.

    Row/column 0 corresponds to ``GRID_MIN``; positions are wrapped first.
    """
    grid = np.zeros((GRID_SIZE, GRID_SIZE), dtype=np.int64)
    coords = np.asarray(list(positions), dtype=np.int64).reshape(-1, 2)
    if coords.size == 0:
        return grid
    idx = (coords - GRID_MIN) % GRID_SIZE
    np.add.at(grid, (idx[:, 1], idx[:, 0]), 1)
    return grid


def rolling_fraction(states: Sequence[MarbleState]) -> float:
    """Fraction of observations spent rolling; NaN when there are none."""
    if not states:
        return float("nan")
    return sum(1 for s in states if s is MarbleState.ROLLING) / len(states)
