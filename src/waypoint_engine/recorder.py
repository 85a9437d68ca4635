"""Gesture recording: capture a reference waypoint path from a live stream.

Usage:
    recorder = GestureRecorder(config)
    gesture = recorder.record(session_ticks(source, state, config))
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

from waypoint_engine.config import EngineConfig
from waypoint_engine.debounce import WaypointDebouncer
from waypoint_engine.device import Tick
from waypoint_engine.gestures import Gesture
from waypoint_engine.waypoints import Waypoint

logger = logging.getLogger("waypoint_engine.recorder")


class GestureRecorder:
    """Records every debounced waypoint until the stop event.

    Each :meth:`record` call starts a fresh gesture and a fresh debouncer;
    previously returned gestures are never touched again.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._gesture: Optional[Gesture] = None
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def step_count(self) -> int:
        """Waypoints captured so far in the current (or last) session."""
        return len(self._gesture) if self._gesture is not None else 0

    @property
    def last_gesture(self) -> Optional[Gesture]:
        return self._gesture

    def record(
        self,
        ticks: Iterable[Tick],
        on_waypoint: Optional[Callable[[Waypoint], None]] = None,
    ) -> Gesture:
        """Record until the stop event (or the end of the stream).

        Returns:
            The finalized gesture, possibly empty.
        """
        gesture = Gesture()
        debouncer = WaypointDebouncer()
        self._gesture = gesture
        self._recording = True
        start = time.monotonic()
        stopped = False

        logger.info("Recording started")
        try:
            for tick in ticks:
                if tick.has(self.config.stop_event):
                    stopped = True
                    break

                waypoint = debouncer.feed(tick.waypoint)
                if waypoint is None:
                    continue

                gesture.append(waypoint)
                if on_waypoint:
                    on_waypoint(waypoint)
        finally:
            self._recording = False
            gesture.finalize()

        logger.info(
            "Recording %s: %d waypoints in %.1fs",
            "stopped" if stopped else "ended with stream",
            len(gesture),
            time.monotonic() - start,
        )
        return gesture
