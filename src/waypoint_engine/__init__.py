"""waypoint-engine - Orientation gesture recording and repetition matching."""

__version__ = "0.1.0"

from waypoint_engine.waypoints import Waypoint, quantize, quaternion_to_euler, euler_to_quaternion
from waypoint_engine.debounce import WaypointDebouncer
from waypoint_engine.gestures import Gesture, GestureLibrary, GestureNotFound, GestureFinalizedError
from waypoint_engine.config import EngineConfig
from waypoint_engine.device import (
    DeviceState,
    DeviceUnavailable,
    Event,
    MotionSource,
    Sample,
    ScriptedSource,
    Tick,
    load_script,
    open_source,
    session_ticks,
)
from waypoint_engine.recorder import GestureRecorder
from waypoint_engine.matcher import GestureMatcher, MatchResult, MatchStats, RepCounter, RepReport
