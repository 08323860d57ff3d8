"""Simulation driver: tick stepping, sessions, audio cues, and Parquet persistence."""

from marble_run.simulation.cues import AudioCue, CueKind, CueTracker
from marble_run.simulation.engine import (
    MarbleRun,
    MarbleStatus,
    advance_marbles,
    marble_rng,
    run_simulation,
)
from marble_run.simulation.persistence import flush_trajectory_columns, trajectory_columns

__all__ = [
    "AudioCue",
    "CueKind",
    "CueTracker",
    "MarbleRun",
    "MarbleStatus",
    "advance_marbles",
    "flush_trajectory_columns",
    "marble_rng",
    "run_simulation",
    "trajectory_columns",
]
