"""Motion sources: the boundary between a sensor and the waypoint engine.

A source delivers orientation samples and named events; the engine pulls
them once per sampling period via ``poll(timeout)``. Real hardware lives
behind :class:`MotionSource`; :class:`ScriptedSource` replays a scripted
session so everything runs without a device.

Script format (YAML):
    ticks:
      - quaternion: [1.0, 0.0, 0.0, 0.0]   # (w, x, y, z)
      - euler: [0.5, 0.0, -1.2]            # roll, pitch, yaw in radians
      - waypoint: [12, 9, 4]               # centre of the given bins
        events: [stop-recording]
      - {}                                 # a period with nothing delivered
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Union

import yaml

from waypoint_engine.config import EngineConfig
from waypoint_engine.waypoints import (
    DEFAULT_RESOLUTION,
    Waypoint,
    bin_center,
    euler_to_quaternion,
    quantize,
)

logger = logging.getLogger("waypoint_engine.device")

# Device lifecycle events understood by DeviceState
DISCONNECTED = "disconnected"
ARM_SYNCED = "arm-synced"
ARM_UNSYNCED = "arm-unsynced"
LOCKED = "locked"
UNLOCKED = "unlocked"


class DeviceUnavailable(ConnectionError):
    """No motion source could be found within the discovery timeout."""


@dataclass
class Sample:
    """One orientation reading as a unit quaternion (w, x, y, z)."""
    quaternion: tuple[float, float, float, float]
    timestamp: float = 0.0


@dataclass
class Event:
    """A discrete named signal, e.g. "stop-recording" or "abort-matching"."""
    name: str
    timestamp: float = 0.0


Item = Union[Sample, Event]


@dataclass
class Tick:
    """What the engine sees at the end of one sampling period."""
    waypoint: Waypoint
    events: frozenset[str] = field(default_factory=frozenset)
    timestamp: float = 0.0

    def has(self, event_name: str) -> bool:
        return event_name in self.events


class MotionSource(ABC):
    """A provider of samples and events, pumped once per sampling period."""

    @abstractmethod
    def poll(self, timeout: float) -> list[Item]:
        """Block for at most ``timeout`` seconds; return what arrived meanwhile."""

    @property
    @abstractmethod
    def exhausted(self) -> bool:
        """True once the source will never deliver anything again."""

    def close(self):
        """Release resources."""

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class ScriptedSource(MotionSource):
    """Replays pre-built per-period batches of samples and events.

    Usage:
        source = ScriptedSource.from_waypoints(
            [Waypoint(5, 5, 5), Waypoint(10, 5, 5)],
            events={2: ["stop-recording"]},
        )
    """

    def __init__(self, batches: Iterable[Sequence[Item]], realtime: bool = False):
        self._batches = [list(b) for b in batches]
        self._cursor = 0
        self.realtime = realtime

    def poll(self, timeout: float) -> list[Item]:
        if self.realtime and timeout > 0:
            time.sleep(timeout)
        if self.exhausted:
            return []
        batch = self._batches[self._cursor]
        self._cursor += 1
        return batch

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._batches)

    @property
    def remaining(self) -> int:
        return len(self._batches) - self._cursor

    def __len__(self) -> int:
        return len(self._batches)

    @classmethod
    def from_waypoints(
        cls,
        waypoints: Iterable[Optional[Waypoint]],
        events: Optional[dict[int, list[str]]] = None,
        resolution: int = DEFAULT_RESOLUTION,
        realtime: bool = False,
    ) -> ScriptedSource:
        """One batch per waypoint, sampled at the centre of its bins.

        ``None`` entries produce empty periods. ``events`` maps a batch index
        to event names delivered in that period; indices past the end of
        ``waypoints`` add event-only periods.
        """
        events = events or {}
        batches: list[list[Item]] = []
        for wp in waypoints:
            batch: list[Item] = []
            if wp is not None:
                batch.append(Sample(euler_to_quaternion(*bin_center(wp, resolution))))
            batches.append(batch)

        last = max(events, default=-1)
        while len(batches) <= last:
            batches.append([])

        for index, names in events.items():
            batches[index].extend(Event(name) for name in names)

        return cls(batches, realtime=realtime)


def _parse_tick(entry: dict, resolution: int) -> list[Item]:
    batch: list[Item] = []
    if "quaternion" in entry:
        batch.append(Sample(tuple(float(v) for v in entry["quaternion"])))
    elif "euler" in entry:
        batch.append(Sample(euler_to_quaternion(*(float(v) for v in entry["euler"]))))
    elif "waypoint" in entry:
        wp = Waypoint(*(int(v) for v in entry["waypoint"]))
        batch.append(Sample(euler_to_quaternion(*bin_center(wp, resolution))))

    unknown = set(entry) - {"quaternion", "euler", "waypoint", "events"}
    if unknown:
        logger.warning("Ignoring unknown script keys: %s", sorted(unknown))

    batch.extend(Event(str(name)) for name in entry.get("events", []))
    return batch


def load_script(
    path: str | Path,
    resolution: int = DEFAULT_RESOLUTION,
    realtime: bool = False,
) -> ScriptedSource:
    """Load a scripted session from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    batches = [_parse_tick(entry or {}, resolution) for entry in data.get("ticks", [])]
    return ScriptedSource(batches, realtime=realtime)


def open_source(path: str | Path, config: Optional[EngineConfig] = None) -> ScriptedSource:
    """Wait up to the discovery timeout for a session script to appear.

    Raises:
        DeviceUnavailable: nothing found in time, or the script is empty.
    """
    config = config or EngineConfig()
    path = Path(path)
    deadline = time.monotonic() + config.discovery_timeout_s

    logger.info("Attempting to find a motion source at %s...", path)
    while not path.exists():
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DeviceUnavailable(f"Unable to find a motion source at {path}")
        time.sleep(min(0.1, remaining))

    source = load_script(path, resolution=config.resolution, realtime=config.realtime)
    if len(source) == 0:
        raise DeviceUnavailable(f"Motion source {path} has no data")

    logger.info("Connected to %s (%d periods)", path, len(source))
    return source


class DeviceState:
    """Latest orientation and device status, updated from polled items.

    Persists across sessions, like the sensor itself; sessions only read
    :attr:`waypoint`.
    """

    def __init__(self, resolution: int = DEFAULT_RESOLUTION):
        self.resolution = resolution
        self.quaternion: Optional[tuple[float, float, float, float]] = None
        self.timestamp = 0.0
        self.on_arm = False
        self.unlocked = False
        self.last_event: Optional[str] = None
        self._waypoint = Waypoint()

    def apply(self, item: Item):
        if isinstance(item, Sample):
            self.quaternion = item.quaternion
            self.timestamp = item.timestamp
            self._waypoint = quantize(item.quaternion, self.resolution)
            return

        self.last_event = item.name
        if item.name == DISCONNECTED:
            self.quaternion = None
            self._waypoint = Waypoint()
            self.on_arm = False
            self.unlocked = False
            logger.warning("Motion source disconnected")
        elif item.name == ARM_SYNCED:
            self.on_arm = True
        elif item.name == ARM_UNSYNCED:
            self.on_arm = False
        elif item.name == UNLOCKED:
            self.unlocked = True
        elif item.name == LOCKED:
            self.unlocked = False

    @property
    def waypoint(self) -> Waypoint:
        """Quantized current orientation; the default waypoint before any sample."""
        return self._waypoint

    def status_line(self) -> str:
        line = str(self._waypoint)
        if self.on_arm:
            lock = "unlocked" if self.unlocked else "locked  "
            line += f"[{lock}][{(self.last_event or ''):<14}]"
        else:
            line += "[" + " " * 8 + "][" + " " * 14 + "]"
        return line


def session_ticks(
    source: MotionSource,
    state: DeviceState,
    config: Optional[EngineConfig] = None,
) -> Iterator[Tick]:
    """Pump ``source`` once per sampling period, yielding one :class:`Tick` each.

    Ends when the source is exhausted.
    """
    config = config or EngineConfig()
    while not source.exhausted:
        items = source.poll(config.sampling_period)
        names: set[str] = set()
        for item in items:
            state.apply(item)
            if isinstance(item, Event):
                names.add(item.name)
        yield Tick(state.waypoint, frozenset(names), time.monotonic())
