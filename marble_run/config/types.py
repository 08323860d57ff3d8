"""Configuration dataclasses and result containers for marble-run simulations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from marble_run.config.constants import FLUSH_THRESHOLD, TICK_INTERVAL_MS

if TYPE_CHECKING:
    from marble_run.domain.marble import Marble

__all__ = [
    "RunConfig",
    "RunResult",
]


@dataclass(frozen=True)
class RunConfig:
    """Runtime knobs for one seeded batch run."""

    steps: int = 200
    sim_seed: int = 0
    tick_interval_ms: int = TICK_INTERVAL_MS
    """Presentation cadence, recorded in the run summary only."""
    write_trajectory: bool = True
    flush_threshold: int = FLUSH_THRESHOLD

    def __post_init__(self) -> None:
        if self.steps < 1:
            raise ValueError("steps must be >= 1")
        if self.tick_interval_ms < 1:
            raise ValueError("tick_interval_ms must be >= 1")
        if self.flush_threshold < 1:
            raise ValueError("flush_threshold must be >= 1")


@dataclass(frozen=True)
class RunResult:
    """Top-level result for one batch run."""

    run_id: str
    steps: int
    n_marbles: int
    n_tiles: int
    state_counts: dict[str, int] = field(default_factory=dict)
    final_marbles: tuple[Marble, ...] = ()
