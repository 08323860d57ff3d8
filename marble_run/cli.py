"""CLI entrypoint for seeded marble-run simulations.

This module owns CLI argument parsing and logging setup. All domain logic
lives in the extracted modules:

- ``marble_run.config``            – configuration dataclasses and constants
- ``marble_run.domain``            – grid, tile behaviours, marbles, boards
- ``marble_run.simulation.engine`` – ``run_simulation`` driver
"""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Sequence
from pathlib import Path

from marble_run.config.types import RunConfig
from marble_run.domain.blocks import BlockKind, parse_block_kind
from marble_run.domain.board import Board
from marble_run.domain.grid import GridPosition
from marble_run.simulation.engine import run_simulation

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# ---------------------------------------------------------------------------
# CLI parsing helpers
# ---------------------------------------------------------------------------


def _parse_int_token(raw: str, label: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{label} must be an integer, got {raw.strip()!r}") from exc


def _parse_marble(tokens: Sequence[str]) -> GridPosition:
    """Parse a marble spawn given as ``X Y``."""
    if len(tokens) != 2:
        raise ValueError("marble entries must be given as X Y")
    return GridPosition(
        _parse_int_token(tokens[0], "marble x"), _parse_int_token(tokens[1], "marble y")
    )


def _parse_tile(tokens: Sequence[str]) -> tuple[GridPosition, BlockKind, int | None]:
    """Parse a tile given as ``X Y KIND`` or ``X Y KIND HUE``."""
    if len(tokens) not in (3, 4):
        raise ValueError("tile entries must be given as X Y KIND [HUE]")
    position = GridPosition(
        _parse_int_token(tokens[0], "tile x"), _parse_int_token(tokens[1], "tile y")
    )
    kind = parse_block_kind(tokens[2].strip())
    if kind is None:
        valid = ", ".join(k.value for k in BlockKind)
        raise ValueError(f"tile kind must be one of {valid}")
    hue = _parse_int_token(tokens[3], "tile hue") if len(tokens) == 4 else None
    return position, kind, hue


def _build_board(raw_tiles: list[list[str]]) -> Board:
    board = Board.empty()
    for raw in raw_tiles:
        position, kind, hue = _parse_tile(raw)
        board = board.place(position, kind, hue=hue, replace=False)
    return board


def _coerce_bool(raw: object, key: str) -> bool:
    """Coerce raw value to bool with strict string-check."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"{key} must be a boolean value")


def _coerce_int(raw: object, key: str) -> int:
    """Coerce raw value to int; rejects booleans and non-integer floats."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be an integer value")
    if isinstance(raw, float):
        if raw != int(raw):
            raise ValueError(f"{key} must be an integer value, got {raw!r}")
        return int(raw)
    if isinstance(raw, (int, str)):
        try:
            return int(raw)
        except ValueError as exc:
            raise ValueError(f"{key} must be an integer value, got {raw!r}") from exc
    raise ValueError(f"{key} must be an integer value")


def _coerce_str(raw: object, key: str) -> str:
    """Coerce raw value to str; rejects booleans."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be a string-coercible value")
    if isinstance(raw, (str, Path)):
        return str(raw)
    raise ValueError(f"{key} must be a string-coercible value")


def _get_val(cli_val: object, key: str, file_cfg: dict[str, object], default: object) -> object:
    """CLI > file > default resolution."""
    if cli_val is not None:
        return cli_val
    return file_cfg.get(key, default)


def _get_bool(cli_val: bool | None, key: str, file_cfg: dict[str, object], default: bool) -> bool:
    return _coerce_bool(_get_val(cli_val, key, file_cfg, default), key)


def _get_int(cli_val: int | None, key: str, file_cfg: dict[str, object], default: int) -> int:
    return _coerce_int(_get_val(cli_val, key, file_cfg, default), key)


def _get_str(cli_val: str | None, key: str, file_cfg: dict[str, object], default: str) -> str:
    return _coerce_str(_get_val(cli_val, key, file_cfg, default), key)


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Run a seeded marble-run simulation")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (CLI args override file values)",
    )
    parser.add_argument("--steps", type=int, default=None)
    parser.add_argument("--sim-seed", type=int, default=None)
    parser.add_argument("--out-dir", type=Path, default=None)
    parser.add_argument(
        "--write-trajectory", action=argparse.BooleanOptionalAction, default=None
    )
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=None)
    parser.add_argument(
        "--tile",
        action="append",
        default=[],
        nargs="+",
        metavar="X Y KIND [HUE]",
        help="Place a track tile (repeatable), e.g. --tile -2 0 StraightX",
    )
    parser.add_argument(
        "--marble",
        action="append",
        default=[],
        nargs=2,
        metavar=("X", "Y"),
        help="Drop a marble (repeatable), e.g. --marble -2 -2",
    )
    return parser


# ---------------------------------------------------------------------------
# Main CLI
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for a seeded run.

    Supports ``--config path/to/config.json`` for run knobs. CLI arguments
    override config-file values; config-file values override built-in
    defaults. Tiles and marbles are only taken from the command line.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    file_cfg: dict[str, object] = {}
    if args.config is not None:
        try:
            file_cfg = json.loads(Path(args.config).read_text(encoding="utf-8"))
        except FileNotFoundError:
            parser.error(f"Config file not found: {args.config}")
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {args.config}: {exc}")
        except (OSError, UnicodeDecodeError) as exc:
            parser.error(f"Config file could not be read: {args.config}: {exc}")
        if not isinstance(file_cfg, dict):
            parser.error(f"Config file must contain a JSON object: {args.config}")

    try:
        log_level = _get_str(args.log_level, "log_level", file_cfg, "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        config = RunConfig(
            steps=_get_int(args.steps, "steps", file_cfg, 200),
            sim_seed=_get_int(args.sim_seed, "sim_seed", file_cfg, 0),
            write_trajectory=_get_bool(args.write_trajectory, "write_trajectory", file_cfg, True),
        )
        out_dir = Path(_get_str(args.out_dir, "out_dir", file_cfg, "data"))
        board = _build_board(args.tile)
        spawns = [_parse_marble(raw) for raw in args.marble]
    except ValueError as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    result = run_simulation(config, board, spawns, out_dir)
    summary = {
        "run_id": result.run_id,
        "steps": result.steps,
        "marbles": result.n_marbles,
        "tiles": result.n_tiles,
        "state_counts": result.state_counts,
    }
    print(json.dumps(summary, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
