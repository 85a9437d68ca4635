"""Tests for orientation quantization and waypoint comparison."""

import math

import numpy as np
import pytest

from waypoint_engine.waypoints import (
    Waypoint,
    bin_center,
    euler_to_quaternion,
    quantize,
    quaternion_to_euler,
)


def random_quaternions(n=500, seed=7):
    rng = np.random.default_rng(seed)
    q = rng.normal(size=(n, 4))
    return q / np.linalg.norm(q, axis=1, keepdims=True)


class TestQuantize:
    def test_identity_is_middle_bin(self):
        assert quantize((1.0, 0.0, 0.0, 0.0)) == Waypoint(9, 9, 9)

    def test_range_for_random_orientations(self):
        for q in random_quaternions():
            wp = quantize(q)
            for axis in wp.as_tuple():
                assert 0 <= axis <= 17

    def test_range_with_other_resolution(self):
        for q in random_quaternions(200, seed=3):
            wp = quantize(q, resolution=36)
            assert all(0 <= axis <= 35 for axis in wp.as_tuple())

    def test_roll_at_upper_bound_stays_in_range(self):
        # 180° about x gives roll == +π exactly
        wp = quantize((0.0, 1.0, 0.0, 0.0))
        assert wp.roll == 17

    def test_pitch_at_upper_bound_stays_in_range(self):
        s = math.sqrt(0.5)
        wp = quantize((s, 0.0, s, 0.0))
        assert wp.pitch == 17

    def test_truncates_instead_of_rounding(self):
        # Just below the 10th roll bin boundary
        roll = -math.pi + 9.9 * (2 * math.pi / 18)
        wp = quantize(euler_to_quaternion(roll, 0.0, 0.0))
        assert wp.roll == 9

    def test_bin_center_quantizes_back(self):
        wp = Waypoint(12, 4, 3)
        q = euler_to_quaternion(*bin_center(wp))
        assert quantize(q) == wp

    def test_pure_function(self):
        q = (0.9, 0.1, -0.3, 0.2)
        assert quantize(q) == quantize(q)


class TestEulerConversion:
    def test_round_trip_angles(self):
        roll, pitch, yaw = 0.4, -0.7, 2.1
        out = quaternion_to_euler(euler_to_quaternion(roll, pitch, yaw))
        assert out == pytest.approx((roll, pitch, yaw), abs=1e-9)

    def test_pitch_clamped_for_slightly_non_unit_input(self):
        s = math.sqrt(0.5) * 1.0001
        _, pitch, _ = quaternion_to_euler((s, 0.0, s, 0.0))
        assert pitch == pytest.approx(math.pi / 2)


class TestWaypoint:
    def test_default_is_origin(self):
        assert Waypoint() == Waypoint(0, 0, 0)

    def test_tolerance_equal_within_bound(self):
        assert Waypoint(5, 5, 5).tolerance_equal(Waypoint(7, 3, 7))

    def test_tolerance_equal_outside_bound(self):
        assert not Waypoint(5, 5, 5).tolerance_equal(Waypoint(8, 5, 5))

    def test_every_axis_must_agree(self):
        assert not Waypoint(5, 5, 5).tolerance_equal(Waypoint(5, 5, 2))

    def test_custom_tolerance(self):
        assert Waypoint(5, 5, 5).tolerance_equal(Waypoint(8, 5, 5), tolerance=3)
        assert not Waypoint(5, 5, 5).tolerance_equal(Waypoint(6, 5, 5), tolerance=0)

    def test_tolerance_symmetry(self):
        rng = np.random.default_rng(11)
        for _ in range(300):
            a = Waypoint(*(int(v) for v in rng.integers(0, 18, 3)))
            b = Waypoint(*(int(v) for v in rng.integers(0, 18, 3)))
            assert a.tolerance_equal(b) == b.tolerance_equal(a)

    def test_max_delta(self):
        assert Waypoint(1, 9, 4).max_delta(Waypoint(3, 2, 4)) == 7

    def test_dict_round_trip(self):
        wp = Waypoint(3, 14, 0)
        assert wp.to_dict() == {"roll": 3, "pitch": 14, "yaw": 0}
        assert Waypoint.from_dict(wp.to_dict()) == wp

    def test_str(self):
        assert str(Waypoint(1, 2, 3)) == "[R: 1][P: 2][Y: 3]"

    def test_hashable(self):
        assert len({Waypoint(1, 2, 3), Waypoint(1, 2, 3)}) == 1
