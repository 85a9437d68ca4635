"""Waypoint debouncing: keep only significant orientation transitions.

Drops exact repeats (no new information) and single-bin nudges against the
last emitted waypoint. Small moves in one direction still register once
they drift more than ``jitter_bins`` away from the last emitted waypoint.
There is no time constant, only a one-step memory.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from waypoint_engine.waypoints import Waypoint

logger = logging.getLogger("waypoint_engine.debounce")


class WaypointDebouncer:
    """Filters a stream of quantized waypoints.

    Not restartable: create one per recording or matching session.

    :attr:`pending_nudge` is informational only. Every nudge is dropped
    whether or not the previous input was one, so the flag never changes
    what :meth:`feed` returns.

    Usage:
        debouncer = WaypointDebouncer()
        for wp in debouncer.filter(raw_waypoints):
            gesture.append(wp)
    """

    def __init__(self, jitter_bins: int = 1, initial: Optional[Waypoint] = None):
        self.jitter_bins = jitter_bins
        self._prev = initial if initial is not None else Waypoint()
        self._minor = False
        self._emitted = 0
        self._dropped = 0

    def feed(self, waypoint: Waypoint) -> Optional[Waypoint]:
        """Process one raw waypoint. Returns it if significant, else None."""
        if waypoint == self._prev:
            self._minor = False
            self._dropped += 1
            return None

        if waypoint.max_delta(self._prev) <= self.jitter_bins:
            self._minor = True
            self._dropped += 1
            return None

        self._prev = waypoint
        self._minor = False
        self._emitted += 1
        logger.debug("Waypoint %s", waypoint)
        return waypoint

    def filter(self, waypoints: Iterable[Waypoint]) -> Iterator[Waypoint]:
        """Lazily yield only the significant waypoints of ``waypoints``."""
        for waypoint in waypoints:
            emitted = self.feed(waypoint)
            if emitted is not None:
                yield emitted

    @property
    def last_emitted(self) -> Waypoint:
        return self._prev

    @property
    def pending_nudge(self) -> bool:
        """True while the most recent input was a suppressed minor nudge."""
        return self._minor

    @property
    def emitted_count(self) -> int:
        return self._emitted

    @property
    def dropped_count(self) -> int:
        return self._dropped
