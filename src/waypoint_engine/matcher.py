"""Gesture matching: anchored, strike-tolerant walk over a recorded path.

The performer must reproduce every recorded waypoint in order, each within
``tolerance_bins`` on every axis. Up to ``max_strikes`` disagreements are
tolerated; the next one discards the attempt and the walk restarts from the
first waypoint while still consuming the same live stream.

This is not DTW or edit distance: steps are never skipped or merged.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional

from waypoint_engine.config import EngineConfig
from waypoint_engine.debounce import WaypointDebouncer
from waypoint_engine.device import Tick
from waypoint_engine.gestures import Gesture
from waypoint_engine.waypoints import Waypoint

logger = logging.getLogger("waypoint_engine.matcher")


class MatchResult(Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"      # abort event observed
    EXHAUSTED = "exhausted"  # stream ended first


@dataclass
class MatchStats:
    """Counters for the current (or last) matching session."""
    progress: int = 0
    strikes: int = 0
    restarts: int = 0
    total_strikes: int = 0
    waypoints_seen: int = 0
    duration: float = 0.0


class GestureMatcher:
    """Validates a live waypoint stream against a recorded gesture.

    Step-level use:
        matcher.start(gesture)
        for wp in debounced_waypoints:
            if matcher.feed(wp):
                break  # completed

    Session-level use:
        result = matcher.match(session_ticks(source, state, config), gesture)
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._gesture: Optional[Gesture] = None
        self.stats = MatchStats()

    def start(self, gesture: Gesture):
        """Begin a new attempt against ``gesture``."""
        self._gesture = gesture
        self.stats = MatchStats()

    @property
    def progress(self) -> int:
        return self.stats.progress

    @property
    def strikes(self) -> int:
        return self.stats.strikes

    @property
    def completed(self) -> bool:
        return self._gesture is not None and self.stats.progress >= len(self._gesture)

    @property
    def target(self) -> Optional[Waypoint]:
        """The recorded waypoint the next input is compared with."""
        if self._gesture is None or self.completed:
            return None
        return self._gesture[self.stats.progress]

    def feed(self, waypoint: Waypoint) -> bool:
        """Compare one debounced waypoint with the current target.

        Returns:
            True once every recorded waypoint has been confirmed.
        """
        if self._gesture is None:
            raise RuntimeError("start() must be called before feed()")
        if self.completed:
            return True

        stats = self.stats
        stats.waypoints_seen += 1

        if self._gesture.step_matches(waypoint, stats.progress, self.config.tolerance_bins):
            # Strikes carry over between confirmed steps.
            stats.progress += 1
            logger.debug("Step %d/%d confirmed by %s", stats.progress, len(self._gesture), waypoint)
        elif stats.strikes >= self.config.max_strikes:
            logger.debug("Reset after %d strikes at step %d", stats.strikes, stats.progress)
            stats.progress = 0
            stats.strikes = 0
            stats.restarts += 1
        else:
            stats.strikes += 1
            stats.total_strikes += 1
            logger.debug("Strike %d at step %d (%s vs %s)", stats.strikes, stats.progress, waypoint, self.target)

        return self.completed

    def match(
        self,
        ticks: Iterable[Tick],
        gesture: Gesture,
        on_waypoint: Optional[Callable[[Waypoint], None]] = None,
    ) -> MatchResult:
        """Run one attempt over a tick stream.

        The abort event is checked before each tick's waypoint is used, so an
        abort always wins over a completion in the same period.
        """
        self.start(gesture)
        debouncer = WaypointDebouncer()
        start = time.monotonic()
        result = MatchResult.EXHAUSTED

        if self.completed:
            result = MatchResult.COMPLETED
        else:
            for tick in ticks:
                if tick.has(self.config.abort_event):
                    result = MatchResult.ABORTED
                    break

                waypoint = debouncer.feed(tick.waypoint)
                if waypoint is None:
                    continue

                if on_waypoint:
                    on_waypoint(waypoint)
                if self.feed(waypoint):
                    result = MatchResult.COMPLETED
                    break

        self.stats.duration = time.monotonic() - start
        logger.info(
            "Match %s: step %d/%d, %d strikes, %d restarts",
            result.value,
            self.stats.progress,
            len(gesture),
            self.stats.total_strikes,
            self.stats.restarts,
        )
        return result


@dataclass
class RepReport:
    """Outcome of a set of repetitions."""
    completed: int
    total: int
    results: list[MatchResult] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.completed >= self.total

    @property
    def interrupted_by(self) -> Optional[MatchResult]:
        """The non-completed result that ended the set early, if any."""
        if self.results and self.results[-1] is not MatchResult.COMPLETED:
            return self.results[-1]
        return None

    @property
    def aborted(self) -> bool:
        return self.interrupted_by is MatchResult.ABORTED


class RepCounter:
    """Loops the matcher for a number of repetitions of one gesture.

    Only completed attempts count. An aborted or exhausted attempt ends
    the set.
    """

    def __init__(self, matcher: GestureMatcher, gesture: Gesture, total: int):
        if total < 0:
            raise ValueError("total must be >= 0")
        self.matcher = matcher
        self.gesture = gesture
        self.total = total

    def run(
        self,
        ticks_factory: Callable[[], Iterable[Tick]],
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> RepReport:
        """``ticks_factory`` is called once per attempt for a fresh tick stream."""
        report = RepReport(completed=0, total=self.total)

        for _ in range(self.total):
            if on_progress:
                on_progress(report.completed, self.total)

            result = self.matcher.match(ticks_factory(), self.gesture)
            report.results.append(result)
            if result is not MatchResult.COMPLETED:
                logger.info("Rep set ended early: %s", result.value)
                break
            report.completed += 1

        if report.finished and on_progress:
            on_progress(report.completed, self.total)
        return report
