#!/usr/bin/env python3
"""
Tests for the physics primitives.

Tests cover:
1. Vector2 arithmetic (add, subtract, scale, divide, dot, cross, magnitude)
2. Vector2 angles and rotation
3. ShipState snapshot
4. Angle wrapping and shortest signed heading difference
"""

import math
import pytest

from gunnery.physics import (
    BULLET_SPEED,
    TICK_LENGTH,
    ShipState,
    Vector2,
    angle_diff,
    normalize_angle,
)


# =============================================================================
# VECTOR2 TESTS
# =============================================================================

class TestVector2BasicOperations:
    """Tests for basic Vector2 arithmetic."""

    @pytest.mark.parametrize("v1,v2,expected", [
        ((1, 2), (3, 4), (4, 6)),
        ((0, 0), (1, 1), (1, 1)),
        ((-1, -2), (1, 2), (0, 0)),
    ])
    def test_vector_addition(self, v1, v2, expected):
        """Test vector addition."""
        assert Vector2(*v1) + Vector2(*v2) == Vector2(*expected)

    def test_vector_subtraction(self):
        """Test vector subtraction."""
        assert Vector2(5, 7) - Vector2(4, 5) == Vector2(1, 2)

    @pytest.mark.parametrize("scalar", [2.0, 0.0, -1.5])
    def test_scalar_multiplication_both_sides(self, scalar):
        """Scalar multiplication commutes."""
        v = Vector2(1.0, -2.0)
        assert v * scalar == scalar * v == Vector2(scalar, -2.0 * scalar)

    def test_division(self):
        """Test scalar division."""
        assert Vector2(4, 6) / 2 == Vector2(2, 3)

    def test_division_by_zero_raises(self):
        """Division by zero raises ValueError."""
        with pytest.raises(ValueError):
            Vector2(1, 1) / 0

    def test_negation(self):
        """Test unary minus."""
        assert -Vector2(1, -2) == Vector2(-1, 2)

    def test_dot_and_cross(self):
        """Dot and planar cross products."""
        a = Vector2(1, 0)
        b = Vector2(0, 1)
        assert a.dot(b) == 0.0
        assert a.cross(b) == 1.0
        assert b.cross(a) == -1.0

    def test_magnitude(self):
        """3-4-5 triangle."""
        v = Vector2(3, 4)
        assert v.magnitude == pytest.approx(5.0)
        assert v.magnitude_squared == pytest.approx(25.0)

    def test_normalized_zero_vector_stays_zero(self):
        """Normalizing the zero vector does not divide by zero."""
        assert Vector2.zero().normalized() == Vector2.zero()

    def test_normalized_unit_length(self):
        """Normalized vectors have unit length."""
        assert Vector2(10, -10).normalized().magnitude == pytest.approx(1.0)

    def test_vectors_are_immutable(self):
        """Vector2 is a value type."""
        v = Vector2(1, 2)
        with pytest.raises(AttributeError):
            v.x = 5

    def test_tuple_round_trip(self):
        """Conversion to and from tuples."""
        assert Vector2.from_tuple((1.5, 2.5)).to_tuple() == (1.5, 2.5)


class TestVector2Angles:
    """Tests for bearings and rotation."""

    @pytest.mark.parametrize("v,expected", [
        (Vector2(1, 0), 0.0),
        (Vector2(0, 1), math.pi / 2),
        (Vector2(-1, 0), math.pi),
        (Vector2(0, -1), -math.pi / 2),
    ], ids=["east", "north", "west", "south"])
    def test_angle(self, v, expected):
        """Bearing follows atan2 convention."""
        assert v.angle == pytest.approx(expected)

    def test_rotate_quarter_turn(self):
        """Rotating +x by 90 degrees gives +y."""
        rotated = Vector2(1, 0).rotate(math.pi / 2)
        assert rotated.x == pytest.approx(0.0, abs=1e-12)
        assert rotated.y == pytest.approx(1.0)

    def test_from_angle(self):
        """from_angle produces a vector with the requested bearing and length."""
        v = Vector2.from_angle(0.7, 3.0)
        assert v.magnitude == pytest.approx(3.0)
        assert v.angle == pytest.approx(0.7)

    def test_distance_to(self):
        """Distance between points."""
        assert Vector2(1, 1).distance_to(Vector2(4, 5)) == pytest.approx(5.0)


# =============================================================================
# SHIP STATE TESTS
# =============================================================================

class TestShipState:
    """Tests for the own-ship snapshot."""

    def test_defaults(self):
        """Default snapshot sits at the origin facing +x."""
        state = ShipState()
        assert state.position == Vector2.zero()
        assert state.velocity == Vector2.zero()
        assert state.forward.x == pytest.approx(1.0)

    def test_snapshot_is_read_only(self):
        """Snapshots cannot be mutated by the control loop."""
        state = ShipState(heading=1.0)
        with pytest.raises(AttributeError):
            state.heading = 2.0

    def test_reference_constants(self):
        """World constants match the reference arena."""
        assert BULLET_SPEED == 1000.0
        assert TICK_LENGTH == pytest.approx(1.0 / 60.0)


# =============================================================================
# ANGLE TESTS
# =============================================================================

class TestAngleDiff:
    """Tests for shortest signed angular difference."""

    @pytest.mark.parametrize("a,b,expected", [
        (0.0, 0.5, 0.5),
        (0.5, 0.0, -0.5),
        (3.0, -3.0, 2 * math.pi - 6.0),
        (-3.0, 3.0, 6.0 - 2 * math.pi),
        (0.0, 2 * math.pi, 0.0),
    ], ids=["ccw", "cw", "wrap_ccw", "wrap_cw", "full_turn"])
    def test_angle_diff(self, a, b, expected):
        """Differences take the short way around."""
        assert angle_diff(a, b) == pytest.approx(expected, abs=1e-12)

    def test_half_turn_is_positive_pi(self):
        """The range is (-pi, pi]: a half turn maps to +pi."""
        assert angle_diff(0.0, math.pi) == pytest.approx(math.pi)
        assert normalize_angle(-math.pi) == pytest.approx(math.pi)

    @pytest.mark.parametrize("angle", [-10.0, -math.pi + 1e-9, 0.0, 4.0, 100.0])
    def test_normalize_range(self, angle):
        """Wrapped angles land in (-pi, pi]."""
        wrapped = normalize_angle(angle)
        assert -math.pi < wrapped <= math.pi
        assert math.cos(wrapped) == pytest.approx(math.cos(angle))
        assert math.sin(wrapped) == pytest.approx(math.sin(angle))
