"""Recorded gestures and the in-memory gesture library."""

from __future__ import annotations

import json
import logging
from typing import Iterable, Iterator, Optional

from waypoint_engine.waypoints import Waypoint

logger = logging.getLogger("waypoint_engine.gestures")


class GestureNotFound(KeyError):
    """Raised when a gesture name (or menu index) is not in the library."""


class GestureFinalizedError(RuntimeError):
    """Raised when appending to a gesture whose recording has ended."""


class Gesture:
    """An ordered path of waypoints, the recorded reference motion.

    Append-only while recording; :meth:`finalize` freezes it. Matching only
    ever reads it.
    """

    def __init__(self, waypoints: Optional[Iterable[Waypoint]] = None, finalized: bool = False):
        self._waypoints: list[Waypoint] = list(waypoints or [])
        self._finalized = finalized

    def append(self, waypoint: Waypoint):
        if self._finalized:
            raise GestureFinalizedError("Cannot append to a finalized gesture")
        self._waypoints.append(waypoint)

    def finalize(self) -> Gesture:
        """Mark the recording as finished. Returns self for chaining."""
        self._finalized = True
        return self

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def waypoints(self) -> tuple[Waypoint, ...]:
        return tuple(self._waypoints)

    @property
    def num_steps(self) -> int:
        return len(self._waypoints)

    def step_matches(self, waypoint: Waypoint, step: int, tolerance: int) -> bool:
        """Tolerance-compare ``waypoint`` against the ``step``-th recorded waypoint."""
        return self._waypoints[step].tolerance_equal(waypoint, tolerance)

    def to_dict(self) -> dict:
        return {"gesture": [w.to_dict() for w in self._waypoints]}

    @classmethod
    def from_dict(cls, data: dict) -> Gesture:
        return cls(
            (Waypoint.from_dict(entry) for entry in data.get("gesture", [])),
            finalized=True,
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __len__(self) -> int:
        return len(self._waypoints)

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self._waypoints)

    def __getitem__(self, index: int) -> Waypoint:
        return self._waypoints[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Gesture):
            return NotImplemented
        return self._waypoints == other._waypoints

    def __repr__(self) -> str:
        state = "finalized" if self._finalized else "recording"
        return f"Gesture({len(self._waypoints)} waypoints, {state})"


class GestureLibrary:
    """Name-keyed collection of recorded gestures, in insertion order.

    Lives in memory only; there is no removal operation.
    """

    def __init__(self):
        self._gestures: dict[str, Gesture] = {}

    def save(self, name: str, gesture: Gesture):
        """Store ``gesture`` under ``name``, replacing any existing entry."""
        if not name or not name.strip():
            raise ValueError("Gesture name must be non-empty")
        if name in self._gestures:
            logger.info("Overwriting gesture '%s'", name)
        self._gestures[name] = gesture
        logger.info("Saved gesture '%s' (%d waypoints)", name, len(gesture))

    def get(self, name: str) -> Gesture:
        try:
            return self._gestures[name]
        except KeyError:
            raise GestureNotFound(name) from None

    def names(self) -> list[str]:
        return list(self._gestures.keys())

    def name_at(self, index: int) -> str:
        """Name at a 1-based menu position."""
        names = self.names()
        if not 1 <= index <= len(names):
            raise GestureNotFound(f"No gesture at position {index}")
        return names[index - 1]

    def __contains__(self, name: object) -> bool:
        return name in self._gestures

    def __len__(self) -> int:
        return len(self._gestures)

    def __iter__(self) -> Iterator[str]:
        return iter(self._gestures)
