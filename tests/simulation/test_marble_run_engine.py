"""Tests for marble_run.simulation.engine."""

from __future__ import annotations

import json
from pathlib import Path

import pyarrow.parquet as pq
import pytest

from marble_run.config.types import RunConfig
from marble_run.domain.blocks import BlockKind, Momentum
from marble_run.domain.board import Board
from marble_run.domain.marble import MarbleState
from marble_run.io.schemas import TRAJECTORY_SCHEMA
from marble_run.simulation.engine import (
    MarbleRun,
    MarbleStatus,
    advance_marbles,
    marble_rng,
    run_simulation,
)


def _junction_board() -> Board:
    board = Board.empty()
    for x in range(-10, 11, 2):
        for y in range(-10, 11, 3):
            board = board.place((x, y), BlockKind.CRISS_CROSS)
    return board


class TestMarbleRng:
    def test_deterministic(self) -> None:
        assert marble_rng(1, 2, "a").random() == marble_rng(1, 2, "a").random()

    def test_streams_differ_by_key(self) -> None:
        base = marble_rng(1, 2, "a").random()
        assert marble_rng(1, 2, "b").random() != base
        assert marble_rng(1, 3, "a").random() != base
        assert marble_rng(2, 2, "a").random() != base


class TestMarbleRun:
    def test_default_ids_are_sequential(self) -> None:
        session = MarbleRun()
        first = session.add_marble((0, 0))
        second = session.add_marble((1, 1))
        assert (first.marble_id, second.marble_id) == ("marble-0", "marble-1")

    def test_default_id_skips_explicit_ids(self) -> None:
        session = MarbleRun()
        session.add_marble((0, 0), marble_id="marble-0")
        assert session.add_marble((0, 0)).marble_id == "marble-1"

    def test_duplicate_id_rejected(self) -> None:
        session = MarbleRun()
        session.add_marble((0, 0), marble_id="a")
        with pytest.raises(ValueError, match="already in use"):
            session.add_marble((1, 1), marble_id="a")

    def test_remove_marble(self) -> None:
        session = MarbleRun()
        session.add_marble((0, 0), marble_id="a")
        session.remove_marble("a")
        assert session.marbles == ()
        with pytest.raises(KeyError):
            session.remove_marble("a")

    def test_clear_marbles(self) -> None:
        session = MarbleRun()
        session.add_marble((0, 0))
        session.add_marble((1, 0))
        session.clear_marbles()
        assert session.statuses() == []

    def test_step_reports_every_marble(self) -> None:
        session = MarbleRun()
        session.add_marble((0, 0), marble_id="a")
        session.add_marble((5, 5), marble_id="b")
        statuses = session.step()
        assert statuses == [
            MarbleStatus("a", MarbleState.FALLING),
            MarbleStatus("b", MarbleState.FALLING),
        ]
        assert session.tick == 1

    def test_drop_onto_landing_and_roll_off(self) -> None:
        board = Board.empty().place((0, 0), BlockKind.LANDING_PLUS_X)
        session = MarbleRun(board=board)
        hue = session.add_marble((-2, -2), marble_id="a").hue

        session.step()
        session.step()
        (marble,) = session.marbles
        assert marble.position == (0, 0)
        assert marble.state is MarbleState.FALLING

        session.step()
        (marble,) = session.marbles
        assert marble.state is MarbleState.ROLLING
        assert marble.momentum is Momentum.PLUS_X
        assert marble.position == (1, 0)
        assert marble.hue == hue

        session.step()
        (marble,) = session.marbles
        assert marble.state is MarbleState.FALLING
        assert marble.position == (2, 1)
        assert marble.hue != hue

    def test_board_edit_applies_from_next_tick(self) -> None:
        session = MarbleRun()
        session.add_marble((0, 0), marble_id="a")
        session.edit_board(lambda board: board.place((1, 1), BlockKind.LANDING_MINUS_Y))
        session.step()
        assert session.marbles[0].state is MarbleState.FALLING
        session.step()
        (marble,) = session.marbles
        assert marble.state is MarbleState.ROLLING
        assert marble.position == (1, 0)

    def test_set_board(self) -> None:
        session = MarbleRun()
        board = Board.empty().place((0, 0), BlockKind.STRAIGHT_X)
        session.set_board(board)
        assert session.board is board

    def test_insertion_order_does_not_change_outcomes(self) -> None:
        board = _junction_board()
        spawns = {"a": (-10, -10), "b": (-8, -7), "c": (0, -4)}

        def run(order: list[str]) -> dict[str, object]:
            session = MarbleRun(board=board, sim_seed=11)
            for marble_id in order:
                session.add_marble(spawns[marble_id], marble_id=marble_id)
            for _ in range(40):
                session.step()
            return {m.marble_id: m for m in session.marbles}

        assert run(["a", "b", "c"]) == run(["c", "a", "b"])

    def test_advance_marbles_uses_one_snapshot(self) -> None:
        session = MarbleRun()
        session.add_marble((0, 0), marble_id="a")
        session.add_marble((0, 0), marble_id="b")
        board = Board.empty().place((1, 1), BlockKind.LANDING_PLUS_X)
        moved = advance_marbles(session.marbles, board, lambda m: marble_rng(0, 0, m.marble_id))
        assert [m.position for m in moved] == [(1, 1), (1, 1)]
        assert [m.position for m in session.marbles] == [(0, 0), (0, 0)]


class TestRunSimulation:
    def test_writes_trajectory_and_summary(self, tmp_path: Path) -> None:
        board = Board.empty().place((0, 0), BlockKind.LANDING_PLUS_X)
        config = RunConfig(steps=5, sim_seed=3)
        result = run_simulation(config, board, [(-2, -2), (4, 4)], tmp_path)

        assert result.run_id.startswith("run_ss3_n2_t1_st5_")
        assert result.n_marbles == 2
        assert result.n_tiles == 1
        assert sum(result.state_counts.values()) == 2

        table = pq.read_table(tmp_path / "logs" / "trajectory_log.parquet")
        assert table.schema.names == TRAJECTORY_SCHEMA.names
        assert table.num_rows == (config.steps + 1) * 2
        assert set(table.column("tick").to_pylist()) == set(range(6))
        assert set(table.column("state").to_pylist()) <= {s.value for s in MarbleState}

        summary = json.loads((tmp_path / "runs" / f"{result.run_id}.json").read_text())
        assert summary["schema_version"] == 1
        assert summary["steps"] == 5
        assert summary["state_counts"] == result.state_counts
        assert 0.0 <= summary["rolling_fraction"] <= 1.0
        assert summary["cells_visited"] >= 1

    def test_deterministic_across_runs(self, tmp_path: Path) -> None:
        board = _junction_board()
        config = RunConfig(steps=30, sim_seed=9)
        spawns = [(-10, -10), (-3, -6), (5, 0)]
        first = run_simulation(config, board, spawns, tmp_path / "a")
        second = run_simulation(config, board, spawns, tmp_path / "b")
        assert first.final_marbles == second.final_marbles
        table_a = pq.read_table(tmp_path / "a" / "logs" / "trajectory_log.parquet")
        table_b = pq.read_table(tmp_path / "b" / "logs" / "trajectory_log.parquet")
        assert table_a.equals(table_b)

    def test_run_id_distinguishes_layouts(self, tmp_path: Path) -> None:
        config = RunConfig(steps=2)
        straight = Board.empty().place((0, 0), BlockKind.STRAIGHT_X)
        landing = Board.empty().place((0, 0), BlockKind.LANDING_PLUS_X)
        first = run_simulation(config, straight, [(1, 1)], tmp_path)
        second = run_simulation(config, landing, [(1, 1)], tmp_path)
        moved = run_simulation(config, straight, [(2, 2)], tmp_path)
        again = run_simulation(config, straight, [(1, 1)], tmp_path / "again")
        assert len({first.run_id, second.run_id, moved.run_id}) == 3
        assert again.run_id == first.run_id
        assert len(list((tmp_path / "runs").glob("*.json"))) == 3

    def test_run_id_includes_steps(self, tmp_path: Path) -> None:
        short = run_simulation(RunConfig(steps=2), Board.empty(), [(0, 0)], tmp_path)
        long = run_simulation(RunConfig(steps=3), Board.empty(), [(0, 0)], tmp_path)
        assert short.run_id != long.run_id
        assert "_st3_" in long.run_id

    def test_small_flush_threshold_keeps_all_rows(self, tmp_path: Path) -> None:
        config = RunConfig(steps=7, flush_threshold=3)
        run_simulation(config, Board.empty(), [(0, 0), (1, 0)], tmp_path)
        table = pq.read_table(tmp_path / "logs" / "trajectory_log.parquet")
        assert table.num_rows == 16

    def test_no_marbles_writes_empty_log(self, tmp_path: Path) -> None:
        result = run_simulation(RunConfig(steps=2), Board.empty(), [], tmp_path)
        table = pq.read_table(tmp_path / "logs" / "trajectory_log.parquet")
        assert table.num_rows == 0
        assert table.schema.names == TRAJECTORY_SCHEMA.names
        summary = json.loads((tmp_path / "runs" / f"{result.run_id}.json").read_text())
        assert summary["rolling_fraction"] is None

    def test_trajectory_can_be_disabled(self, tmp_path: Path) -> None:
        config = RunConfig(steps=2, write_trajectory=False)
        run_simulation(config, Board.empty(), [(0, 0)], tmp_path)
        assert not (tmp_path / "logs" / "trajectory_log.parquet").exists()

    def test_behind_coordinates_logged(self, tmp_path: Path) -> None:
        board = Board.empty().place((0, 0), BlockKind.LANDING_MINUS_X)
        run_simulation(RunConfig(steps=3), board, [(-1, -1)], tmp_path)
        rows = pq.read_table(tmp_path / "logs" / "trajectory_log.parquet").to_pylist()
        behind = [row for row in rows if row["state"] == "behind"]
        assert behind
        assert all(row["behind_x"] is not None for row in behind)
        assert all(row["behind_x"] is None for row in rows if row["state"] != "behind")

    def test_out_dir_must_stay_within_base(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="escapes base_dir"):
            run_simulation(
                RunConfig(steps=1), Board.empty(), [], Path("../outside"), base_dir=tmp_path
            )
