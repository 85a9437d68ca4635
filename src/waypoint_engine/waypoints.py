"""Orientation quantization: continuous quaternions to discrete waypoints.

A waypoint is the dominant orientation bucket at one sample instant:
roll, pitch and yaw each mapped onto ``resolution`` integer bins.

Usage:
    wp = quantize((1.0, 0.0, 0.0, 0.0))       # identity → Waypoint(9, 9, 9)
    wp.tolerance_equal(Waypoint(10, 8, 9))    # True with the default tolerance
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

DEFAULT_RESOLUTION = 18
DEFAULT_TOLERANCE = 2


@dataclass(frozen=True)
class Waypoint:
    """Discretized (roll, pitch, yaw) triple, each axis in [0, resolution)."""
    roll: int = 0
    pitch: int = 0
    yaw: int = 0

    def max_delta(self, other: Waypoint) -> int:
        """Largest per-axis absolute difference."""
        return max(
            abs(self.roll - other.roll),
            abs(self.pitch - other.pitch),
            abs(self.yaw - other.yaw),
        )

    def tolerance_equal(self, other: Waypoint, tolerance: int = DEFAULT_TOLERANCE) -> bool:
        """True when every axis is within ``tolerance`` bins of ``other``."""
        return self.max_delta(other) <= tolerance

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.roll, self.pitch, self.yaw)

    def to_dict(self) -> dict:
        return {"roll": self.roll, "pitch": self.pitch, "yaw": self.yaw}

    @classmethod
    def from_dict(cls, data: dict) -> Waypoint:
        return cls(
            roll=int(data.get("roll", 0)),
            pitch=int(data.get("pitch", 0)),
            yaw=int(data.get("yaw", 0)),
        )

    def __str__(self) -> str:
        return f"[R: {self.roll}][P: {self.pitch}][Y: {self.yaw}]"


def quaternion_to_euler(quaternion: Sequence[float]) -> tuple[float, float, float]:
    """Convert a unit quaternion (w, x, y, z) to (roll, pitch, yaw) radians.

    Roll and yaw fall in [-π, π], pitch in [-π/2, π/2].
    """
    w, x, y, z = np.asarray(quaternion, dtype=np.float64)

    roll = math.atan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))
    pitch = math.asin(float(np.clip(2.0 * (w * y - z * x), -1.0, 1.0)))
    yaw = math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))
    return roll, pitch, yaw


def euler_to_quaternion(roll: float, pitch: float, yaw: float) -> tuple[float, float, float, float]:
    """Inverse of :func:`quaternion_to_euler`, returning (w, x, y, z)."""
    cr, sr = math.cos(roll / 2), math.sin(roll / 2)
    cp, sp = math.cos(pitch / 2), math.sin(pitch / 2)
    cy, sy = math.cos(yaw / 2), math.sin(yaw / 2)

    return (
        cr * cp * cy + sr * sp * sy,
        sr * cp * cy - cr * sp * sy,
        cr * sp * cy + sr * cp * sy,
        cr * cp * sy - sr * sp * cy,
    )


def _to_bin(angle: float, low: float, span: float, resolution: int) -> int:
    # Truncate, never round; only the closed upper bound is pulled back in range.
    return min(int((angle - low) / span * resolution), resolution - 1)


def quantize(quaternion: Sequence[float], resolution: int = DEFAULT_RESOLUTION) -> Waypoint:
    """Map one orientation sample onto a discrete waypoint."""
    roll, pitch, yaw = quaternion_to_euler(quaternion)
    return Waypoint(
        roll=_to_bin(roll, -math.pi, 2 * math.pi, resolution),
        pitch=_to_bin(pitch, -math.pi / 2, math.pi, resolution),
        yaw=_to_bin(yaw, -math.pi, 2 * math.pi, resolution),
    )


def bin_center(waypoint: Waypoint, resolution: int = DEFAULT_RESOLUTION) -> tuple[float, float, float]:
    """Euler angles (radians) at the middle of each of the waypoint's bins.

    Handy for building synthetic sample streams that quantize to a known waypoint.
    """
    def center(index: int, low: float, span: float) -> float:
        return low + (index + 0.5) * span / resolution

    return (
        center(waypoint.roll, -math.pi, 2 * math.pi),
        center(waypoint.pitch, -math.pi / 2, math.pi),
        center(waypoint.yaw, -math.pi, 2 * math.pi),
    )
