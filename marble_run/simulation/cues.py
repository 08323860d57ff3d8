"""Audio cue derivation from per-tick marble state transitions.

``CueTracker`` turns the ``MarbleStatus`` lists the driver emits into
play/stop instructions for an audio backend. It only reacts to emitted
states and never feeds back into the engine.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from random import Random

from marble_run.config.constants import ROLL_VOLUME, TAP_VOLUME
from marble_run.domain.marble import MarbleState
from marble_run.simulation.engine import MarbleStatus


class CueKind(Enum):
    TAP = "tap"
    ROLL_START = "roll_start"
    ROLL_STOP = "roll_stop"


@dataclass(frozen=True)
class AudioCue:
    kind: CueKind
    marble_id: str
    volume: float = 0.0
    playback_rate: float = 1.0


class CueTracker:
    """Track previous marble states and emit cues on transitions.

    A landing (falling -> rolling) plays a tap with a random pitch. Entering
    rolling starts one looping roll per marble with its own pitch; leaving
    rolling, or disappearing, stops it.
    """

    def __init__(self, rng: Random, enabled: bool = False) -> None:
        self._rng = rng
        self._enabled = enabled
        self._previous: dict[str, MarbleState] = {}
        self._rolling: set[str] = set()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def active_rolls(self) -> frozenset[str]:
        return frozenset(self._rolling)

    def set_enabled(self, enabled: bool) -> list[AudioCue]:
        """Toggle cue output; disabling stops every active roll."""
        self._enabled = enabled
        if enabled:
            return []
        cues = [AudioCue(CueKind.ROLL_STOP, marble_id) for marble_id in sorted(self._rolling)]
        self._rolling.clear()
        self._previous.clear()
        return cues

    def update(self, statuses: Iterable[MarbleStatus]) -> list[AudioCue]:
        if not self._enabled:
            return []
        cues: list[AudioCue] = []
        current: dict[str, MarbleState] = {}
        for status in statuses:
            current[status.marble_id] = status.state
            previous = self._previous.get(status.marble_id)
            if previous is MarbleState.FALLING and status.state is MarbleState.ROLLING:
                cues.append(
                    AudioCue(
                        CueKind.TAP,
                        status.marble_id,
                        volume=TAP_VOLUME,
                        playback_rate=0.8 + self._rng.random() * 1.2,
                    )
                )
            if status.state is MarbleState.ROLLING and previous is not MarbleState.ROLLING:
                cues.extend(self._start_roll(status.marble_id))
            elif status.state is not MarbleState.ROLLING and previous is MarbleState.ROLLING:
                cues.extend(self._stop_roll(status.marble_id))

        for marble_id in self._previous:
            if marble_id not in current:
                cues.extend(self._stop_roll(marble_id))

        self._previous = current
        return cues

    def _start_roll(self, marble_id: str) -> list[AudioCue]:
        if marble_id in self._rolling:
            return []
        self._rolling.add(marble_id)
        return [
            AudioCue(
                CueKind.ROLL_START,
                marble_id,
                volume=ROLL_VOLUME,
                playback_rate=0.9 + self._rng.random() * 0.2,
            )
        ]

    def _stop_roll(self, marble_id: str) -> list[AudioCue]:
        if marble_id not in self._rolling:
            return []
        self._rolling.discard(marble_id)
        return [AudioCue(CueKind.ROLL_STOP, marble_id)]
