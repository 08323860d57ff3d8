"""Immutable tile board snapshots published by the editor.

Every edit returns a new ``Board``; the engine only ever reads one. At most
one tile occupies a cell, which this module enforces so the engine can
assume it.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from marble_run.config.constants import HUE_RANGE
from marble_run.domain.blocks import BlockKind, parse_block_kind, sprite_path_for
from marble_run.domain.grid import GridPosition, wrap_position
from marble_run.domain.marble import TrackTile


class Board(Mapping[GridPosition, TrackTile]):
    """Read-only mapping of wrapped grid positions to placed tiles."""

    __slots__ = ("_tiles",)

    def __init__(self, tiles: Mapping[GridPosition, TrackTile] | None = None) -> None:
        self._tiles: MappingProxyType[GridPosition, TrackTile] = MappingProxyType(
            dict(tiles or {})
        )

    @classmethod
    def empty(cls) -> Board:
        return cls()

    @classmethod
    def from_tiles(cls, tiles: Iterable[TrackTile]) -> Board:
        """Build a board from tiles; two tiles on one (wrapped) cell is an error."""
        placed: dict[GridPosition, TrackTile] = {}
        for tile in tiles:
            position = wrap_position(tile.position)
            if position in placed:
                raise ValueError(f"multiple tiles at position {tuple(position)}")
            placed[position] = _with_position(tile, position)
        return cls(placed)

    def __getitem__(self, position: GridPosition) -> TrackTile:
        return self._tiles[position]

    def __iter__(self) -> Iterator[GridPosition]:
        return iter(self._tiles)

    def __len__(self) -> int:
        return len(self._tiles)

    def __repr__(self) -> str:
        return f"Board({len(self._tiles)} tiles)"

    def tile_at(self, position: tuple[int, int]) -> TrackTile | None:
        return self._tiles.get(wrap_position(position))

    def place(
        self,
        position: tuple[int, int],
        kind: BlockKind | str,
        hue: int | None = None,
        replace: bool = True,
    ) -> Board:
        """Return a board with a tile of ``kind`` at ``position``.

        With ``replace=False`` an occupied cell raises ``ValueError``.
        Unknown block names are accepted; the engine treats them as inert.
        """
        cell = wrap_position(position)
        if not replace and cell in self._tiles:
            raise ValueError(f"position {tuple(cell)} is already occupied")
        _validate_hue(hue)
        parsed = parse_block_kind(kind)
        block_name = parsed.value if parsed is not None else str(kind)
        tile = TrackTile(
            position=cell,
            block_name=block_name,
            sprite_path=sprite_path_for(parsed) if parsed is not None else "",
            hue=hue,
        )
        tiles = dict(self._tiles)
        tiles[cell] = tile
        return Board(tiles)

    def remove(self, position: tuple[int, int]) -> Board:
        """Return a board without the tile at ``position`` (no-op if empty)."""
        cell = wrap_position(position)
        if cell not in self._tiles:
            return self
        tiles = dict(self._tiles)
        del tiles[cell]
        return Board(tiles)

    def toggle(self, position: tuple[int, int], kind: BlockKind | str) -> Board:
        """Remove the tile at ``position`` if present, otherwise place ``kind`` there."""
        if wrap_position(position) in self._tiles:
            return self.remove(position)
        return self.place(position, kind)

    def set_hue(self, position: tuple[int, int], hue: int | None) -> Board:
        cell = wrap_position(position)
        if cell not in self._tiles:
            raise KeyError(f"no tile at position {tuple(cell)}")
        _validate_hue(hue)
        tiles = dict(self._tiles)
        tiles[cell] = dataclasses.replace(self._tiles[cell], hue=hue)
        return Board(tiles)


def _with_position(tile: TrackTile, position: GridPosition) -> TrackTile:
    if type(tile.position) is GridPosition and tile.position == position:
        return tile
    return dataclasses.replace(tile, position=position)


def _validate_hue(hue: int | None) -> None:
    if hue is not None and not 0 <= hue < HUE_RANGE:
        raise ValueError(f"hue must be in [0, {HUE_RANGE})")
