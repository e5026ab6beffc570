#!/usr/bin/env python3
"""
Physics Primitives for the Gunnery guidance core.

Implements the planar kinematics every other module builds on:
- 2D vector operations
- Own-ship kinematic snapshot read once per tick
- Shortest signed angular difference between two headings

Reference world constants (bullet speed, tick length) match the arena the
guidance loop was tuned for. They are defaults only; the control loop reads
the values it uses from GunneryConfig.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field


# =============================================================================
# WORLD CONSTANTS
# =============================================================================

# Projectile muzzle speed (m/s)
BULLET_SPEED = 1000.0

# Fixed simulation step (s)
TICK_LENGTH = 1.0 / 60.0

# Shared numerical epsilon for near-zero guards
EPSILON = 1e-6

TWO_PI = 2.0 * math.pi


# =============================================================================
# VECTOR2 CLASS
# =============================================================================

@dataclass(frozen=True)
class Vector2:
    """
    2D vector for positions, velocities, accelerations and directions.

    Angles follow the mathematical convention: 0 rad points along +X and
    angles grow counter-clockwise.

    All units in SI (meters, m/s, etc.) unless otherwise specified.
    """
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector2) -> Vector2:
        """Vector addition."""
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        """Vector subtraction."""
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector2:
        """Scalar multiplication."""
        return Vector2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> Vector2:
        """Right scalar multiplication."""
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Vector2:
        """Scalar division."""
        if scalar == 0:
            raise ValueError("Cannot divide vector by zero")
        return Vector2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> Vector2:
        """Negation."""
        return Vector2(-self.x, -self.y)

    def __eq__(self, other: object) -> bool:
        """Equality check with tolerance."""
        if not isinstance(other, Vector2):
            return False
        eps = 1e-10
        return abs(self.x - other.x) < eps and abs(self.y - other.y) < eps

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def dot(self, other: Vector2) -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vector2) -> float:
        """Z component of the 3D cross product of the two planar vectors."""
        return self.x * other.y - self.y * other.x

    @property
    def magnitude(self) -> float:
        """Vector magnitude (length)."""
        return math.hypot(self.x, self.y)

    @property
    def magnitude_squared(self) -> float:
        """Squared magnitude (avoids sqrt for comparisons)."""
        return self.x * self.x + self.y * self.y

    @property
    def angle(self) -> float:
        """Bearing of the vector in radians, in (-pi, pi]."""
        return math.atan2(self.y, self.x)

    def normalized(self) -> Vector2:
        """Return unit vector in same direction."""
        mag = self.magnitude
        if mag == 0:
            return Vector2(0.0, 0.0)
        return self / mag

    def distance_to(self, other: Vector2) -> float:
        """Distance to another point."""
        return (self - other).magnitude

    def rotate(self, angle_rad: float) -> Vector2:
        """Rotate counter-clockwise by the given angle."""
        cos_a = math.cos(angle_rad)
        sin_a = math.sin(angle_rad)
        return Vector2(
            self.x * cos_a - self.y * sin_a,
            self.x * sin_a + self.y * cos_a,
        )

    def to_tuple(self) -> tuple[float, float]:
        """Convert to tuple."""
        return (self.x, self.y)

    @classmethod
    def from_tuple(cls, t: tuple[float, float]) -> Vector2:
        """Create from tuple."""
        return cls(t[0], t[1])

    @classmethod
    def from_angle(cls, angle_rad: float, length: float = 1.0) -> Vector2:
        """Vector of the given length pointing along a bearing."""
        return cls(math.cos(angle_rad) * length, math.sin(angle_rad) * length)

    @classmethod
    def zero(cls) -> Vector2:
        """Zero vector."""
        return cls(0.0, 0.0)

    def __repr__(self) -> str:
        return f"Vector2({self.x:.6g}, {self.y:.6g})"


# =============================================================================
# SHIP STATE
# =============================================================================

@dataclass(frozen=True)
class ShipState:
    """
    Read-only kinematic snapshot of own ship, sampled once per tick.

    Attributes:
        position: Ship position in world coordinates (meters)
        velocity: Ship velocity in world coordinates (m/s)
        heading: Nose bearing in radians
    """
    position: Vector2 = field(default_factory=Vector2.zero)
    velocity: Vector2 = field(default_factory=Vector2.zero)
    heading: float = 0.0

    @property
    def forward(self) -> Vector2:
        """Unit vector along the ship's nose."""
        return Vector2.from_angle(self.heading)


# =============================================================================
# ANGLES
# =============================================================================

def normalize_angle(angle_rad: float) -> float:
    """
    Wrap an angle into the half-open range (-pi, pi].

    Args:
        angle_rad: Any angle in radians.

    Returns:
        Equivalent angle in (-pi, pi].
    """
    wrapped = angle_rad % TWO_PI
    if wrapped > math.pi:
        wrapped -= TWO_PI
    return wrapped


def angle_diff(from_angle: float, to_angle: float) -> float:
    """
    Shortest signed rotation that takes one heading onto another.

    Positive results mean a counter-clockwise turn.

    Args:
        from_angle: Current heading in radians.
        to_angle: Desired heading in radians.

    Returns:
        Signed difference in (-pi, pi].
    """
    return normalize_angle(to_angle - from_angle)
