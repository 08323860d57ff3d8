"""Tests for marble_run.domain.board module."""

from __future__ import annotations

import pytest

from marble_run.domain.blocks import BlockKind
from marble_run.domain.board import Board
from marble_run.domain.grid import GridPosition
from marble_run.domain.marble import TrackTile


class TestBoardPlace:
    def test_place_returns_new_board(self) -> None:
        empty = Board.empty()
        board = empty.place((1, 2), BlockKind.STRAIGHT_Y)
        assert len(empty) == 0
        assert len(board) == 1
        tile = board[GridPosition(1, 2)]
        assert tile.block_name == "StraightY"
        assert tile.kind is BlockKind.STRAIGHT_Y
        assert tile.sprite_path == "/sprites/isometric-cubes/StrightY.png"

    def test_place_wraps_position(self) -> None:
        board = Board.empty().place((11, 0), "CrissCross")
        assert board.tile_at((-10, 0)) is not None
        assert board.tile_at((11, 0)) is not None
        assert GridPosition(-10, 0) in board

    def test_place_replaces_by_default(self) -> None:
        board = Board.empty().place((0, 0), BlockKind.STRAIGHT_X)
        board = board.place((0, 0), BlockKind.STRAIGHT_Y)
        assert len(board) == 1
        assert board[GridPosition(0, 0)].kind is BlockKind.STRAIGHT_Y

    def test_place_without_replace_rejects_occupied(self) -> None:
        board = Board.empty().place((0, 0), BlockKind.STRAIGHT_X)
        with pytest.raises(ValueError, match="already occupied"):
            board.place((21, 0), BlockKind.STRAIGHT_Y, replace=False)

    def test_place_unknown_name_is_kept(self) -> None:
        tile = Board.empty().place((0, 0), "Teleporter")[GridPosition(0, 0)]
        assert tile.block_name == "Teleporter"
        assert tile.kind is None
        assert tile.sprite_path == ""

    def test_place_with_hue(self) -> None:
        board = Board.empty().place((0, 0), BlockKind.CRISS_CROSS, hue=120)
        assert board[GridPosition(0, 0)].hue == 120

    @pytest.mark.parametrize("hue", [-1, 360])
    def test_invalid_hue(self, hue: int) -> None:
        with pytest.raises(ValueError, match="hue must be in"):
            Board.empty().place((0, 0), BlockKind.CRISS_CROSS, hue=hue)


class TestBoardEdits:
    def test_remove(self) -> None:
        board = Board.empty().place((0, 0), BlockKind.STRAIGHT_X).remove((0, 0))
        assert len(board) == 0

    def test_remove_missing_is_noop(self) -> None:
        board = Board.empty().place((0, 0), BlockKind.STRAIGHT_X)
        assert board.remove((5, 5)) is board

    def test_toggle(self) -> None:
        board = Board.empty().toggle((2, 2), BlockKind.LANDING_PLUS_X)
        assert board.tile_at((2, 2)) is not None
        board = board.toggle((2, 2), BlockKind.LANDING_PLUS_X)
        assert board.tile_at((2, 2)) is None

    def test_set_hue(self) -> None:
        board = Board.empty().place((0, 0), BlockKind.STRAIGHT_X)
        recoloured = board.set_hue((0, 0), 45)
        assert recoloured[GridPosition(0, 0)].hue == 45
        assert board[GridPosition(0, 0)].hue is None

    def test_set_hue_missing_tile(self) -> None:
        with pytest.raises(KeyError, match="no tile at position"):
            Board.empty().set_hue((0, 0), 45)


class TestBoardFromTiles:
    def test_wraps_tile_positions(self) -> None:
        board = Board.from_tiles([TrackTile(GridPosition(12, 0), "StraightX")])
        tile = board[GridPosition(-9, 0)]
        assert tile.position == (-9, 0)

    def test_duplicate_positions_rejected(self) -> None:
        tiles = [
            TrackTile(GridPosition(0, 0), "StraightX"),
            TrackTile(GridPosition(21, 0), "StraightY"),
        ]
        with pytest.raises(ValueError, match="multiple tiles at position"):
            Board.from_tiles(tiles)

    def test_mapping_protocol(self) -> None:
        board = Board.from_tiles(
            [TrackTile(GridPosition(0, 0), "StraightX"), TrackTile(GridPosition(1, 1), "StraightY")]
        )
        assert set(board) == {(0, 0), (1, 1)}
        assert board.get(GridPosition(3, 3)) is None
        assert repr(board) == "Board(2 tiles)"
