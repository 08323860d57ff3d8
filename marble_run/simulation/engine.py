"""Simulation driver: per-tick generation stepping, sessions, and seeded batch runs.

The driver owns the marble collection and the current board snapshot. Each
tick computes the whole next generation from one immutable snapshot before
committing it, so marbles never observe each other's partial updates.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from random import Random

import pyarrow.parquet as pq

from marble_run.config.types import RunConfig, RunResult
from marble_run.domain.board import Board
from marble_run.domain.grid import wrap_position
from marble_run.domain.marble import Marble, MarbleState, create_marble, step_marble
from marble_run.io.paths import (
    logs_dir,
    resolve_within_base,
    run_summary_path,
    runs_dir,
    trajectory_log_path,
)
from marble_run.io.schemas import RUN_SUMMARY_SCHEMA_VERSION, TRAJECTORY_SCHEMA
from marble_run.metrics import occupancy_grid, rolling_fraction, state_counts
from marble_run.simulation.persistence import (
    TrajectoryColumns,
    flush_trajectory_columns,
    trajectory_columns,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarbleStatus:
    """``{id, state}`` pair emitted to renderers and audio after each tick."""

    marble_id: str
    state: MarbleState


def marble_rng(sim_seed: int, tick: int, marble_id: str) -> Random:
    """Independent deterministic stream for one marble at one tick.

    Keyed on the marble id rather than iteration order, so draws for one
    marble never shift the sequence another marble sees.
    """
    return Random(f"{sim_seed}:{tick}:{marble_id}")


def advance_marbles(
    marbles: Iterable[Marble],
    board: Board,
    rng_for: Callable[[Marble], Random],
) -> tuple[Marble, ...]:
    """Step every marble once against the same ``board`` snapshot."""
    return tuple(step_marble(marble, board, rng_for(marble)) for marble in marbles)


class MarbleRun:
    """Marble arena plus the currently published board snapshot."""

    def __init__(self, board: Board | None = None, sim_seed: int = 0) -> None:
        self.sim_seed = sim_seed
        self.tick = 0
        self._board = board if board is not None else Board.empty()
        self._marbles: dict[str, Marble] = {}
        self._spawned = 0

    @property
    def board(self) -> Board:
        return self._board

    @property
    def marbles(self) -> tuple[Marble, ...]:
        return tuple(self._marbles.values())

    def set_board(self, board: Board) -> None:
        """Publish a new board snapshot; takes effect from the next tick."""
        self._board = board

    def edit_board(self, edit: Callable[[Board], Board]) -> Board:
        """Apply ``edit`` to the current snapshot and publish the result."""
        self._board = edit(self._board)
        return self._board

    def add_marble(self, position: tuple[int, int], marble_id: str | None = None) -> Marble:
        if marble_id is None:
            marble_id = self._next_marble_id()
        elif marble_id in self._marbles:
            raise ValueError(f"marble id already in use: {marble_id}")
        rng = marble_rng(self.sim_seed, self.tick, f"spawn:{marble_id}")
        marble = create_marble(position, rng, marble_id=marble_id)
        self._marbles[marble_id] = marble
        return marble

    def _next_marble_id(self) -> str:
        while True:
            candidate = f"marble-{self._spawned}"
            self._spawned += 1
            if candidate not in self._marbles:
                return candidate

    def remove_marble(self, marble_id: str) -> None:
        if marble_id not in self._marbles:
            raise KeyError(f"unknown marble id: {marble_id}")
        del self._marbles[marble_id]

    def clear_marbles(self) -> None:
        self._marbles.clear()

    def statuses(self) -> list[MarbleStatus]:
        return [MarbleStatus(m.marble_id, m.state) for m in self._marbles.values()]

    def step(self) -> list[MarbleStatus]:
        """Advance all marbles by one tick and return their new states."""
        tick = self.tick
        next_generation = advance_marbles(
            self._marbles.values(),
            self._board,
            lambda marble: marble_rng(self.sim_seed, tick, marble.marble_id),
        )
        self._marbles = {marble.marble_id: marble for marble in next_generation}
        self.tick += 1
        return self.statuses()


def _deterministic_run_id(
    sim_seed: int, steps: int, board: Board, spawn_positions: Sequence[tuple[int, int]]
) -> str:
    """Build reproducible run ID stable across runs for identical inputs.

    The digest covers tile kinds and cells plus spawn cells in order, so two
    layouts with equal counts get distinct IDs.
    """
    tiles = sorted(
        (tuple(position), tile.kind.value if tile.kind is not None else tile.block_name)
        for position, tile in board.items()
    )
    spawns = [tuple(wrap_position(position)) for position in spawn_positions]
    digest = hashlib.sha256(str((tiles, spawns)).encode()).hexdigest()[:8]
    return f"run_ss{sim_seed}_n{len(spawns)}_t{len(tiles)}_st{steps}_{digest}"


def _append_rows(
    columns: TrajectoryColumns, run_id: str, tick: int, marbles: Sequence[Marble]
) -> None:
    for marble in marbles:
        behind = marble.behind_coordinates
        columns["run_id"].append(run_id)
        columns["tick"].append(tick)
        columns["marble_id"].append(marble.marble_id)
        columns["x"].append(marble.position.x)
        columns["y"].append(marble.position.y)
        columns["state"].append(marble.state.value)
        columns["momentum"].append(marble.momentum.value)
        columns["rotation"].append(marble.rotation)
        columns["hue"].append(marble.hue)
        columns["behind_x"].append(behind.x if behind is not None else None)
        columns["behind_y"].append(behind.y if behind is not None else None)


def run_simulation(
    config: RunConfig,
    board: Board,
    spawn_positions: Sequence[tuple[int, int]],
    out_dir: Path,
    base_dir: Path | None = None,
) -> RunResult:
    """Run a seeded simulation and persist Parquet/JSON outputs.

    Tick 0 is the freshly spawned state; ``config.steps`` ticks follow. When
    ``base_dir`` is given, ``out_dir`` must resolve inside it.
    """
    out_dir = Path(out_dir)
    if base_dir is not None:
        out_dir = resolve_within_base(out_dir, Path(base_dir))
    logs_dir(out_dir).mkdir(parents=True, exist_ok=True)
    runs_dir(out_dir).mkdir(parents=True, exist_ok=True)

    run_id = _deterministic_run_id(config.sim_seed, config.steps, board, spawn_positions)
    session = MarbleRun(board=board, sim_seed=config.sim_seed)
    for position in spawn_positions:
        session.add_marble(position)

    visited: list[tuple[int, int]] = [m.position for m in session.marbles]
    observed_states: list[MarbleState] = [m.state for m in session.marbles]
    columns = trajectory_columns()
    writer: pq.ParquetWriter | None = None
    log_path = trajectory_log_path(out_dir)

    try:
        if config.write_trajectory:
            _append_rows(columns, run_id, 0, session.marbles)
        for _ in range(config.steps):
            session.step()
            marbles = session.marbles
            visited.extend(m.position for m in marbles)
            observed_states.extend(m.state for m in marbles)
            if config.write_trajectory:
                _append_rows(columns, run_id, session.tick, marbles)
                if len(columns["run_id"]) >= config.flush_threshold:
                    writer = flush_trajectory_columns(columns, log_path, writer)
        if config.write_trajectory:
            writer = flush_trajectory_columns(columns, log_path, writer)
            if writer is None:
                # no marbles: still leave a schema-only file behind
                writer = pq.ParquetWriter(log_path, TRAJECTORY_SCHEMA)
    finally:
        if writer is not None:
            writer.close()

    final_marbles = session.marbles
    counts = state_counts(final_marbles)
    occupancy = occupancy_grid(visited)
    fraction = rolling_fraction(observed_states)
    summary = {
        "schema_version": RUN_SUMMARY_SCHEMA_VERSION,
        "run_id": run_id,
        "steps": config.steps,
        "sim_seed": config.sim_seed,
        "tick_interval_ms": config.tick_interval_ms,
        "n_marbles": len(final_marbles),
        "n_tiles": len(board),
        "state_counts": counts,
        "rolling_fraction": None if math.isnan(fraction) else fraction,
        "cells_visited": int((occupancy > 0).sum()),
        "max_cell_visits": int(occupancy.max()),
    }
    run_summary_path(out_dir, run_id).write_text(
        json.dumps(summary, ensure_ascii=False, indent=2)
    )
    logger.info(
        "Run %s finished after %d ticks with %d marbles", run_id, config.steps, len(final_marbles)
    )

    return RunResult(
        run_id=run_id,
        steps=config.steps,
        n_marbles=len(final_marbles),
        n_tiles=len(board),
        state_counts=counts,
        final_marbles=final_marbles,
    )
