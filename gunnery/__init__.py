"""Gunnery: intercept solving, target tracking and fire control for a gun-armed fighter."""

from .physics import (
    BULLET_SPEED,
    EPSILON,
    TICK_LENGTH,
    ShipState,
    Vector2,
    angle_diff,
    normalize_angle,
)

from .linalg import Matrix2, Matrix4

from .pid import PIDController

from .intercept import (
    InterceptSolution,
    refine_constant_acceleration,
    solve_constant_velocity,
    solve_intercept,
)

from .kalman import KalmanPosVel2D

from .tracking import Contact, Target, TrackedTarget

from .sensors import Actuators, RadarCommand, RecordingActuators

from .config import GunneryConfig, load_config

from .fighter import FighterController, select_best

__all__ = [
    # Physics
    "BULLET_SPEED",
    "EPSILON",
    "TICK_LENGTH",
    "ShipState",
    "Vector2",
    "angle_diff",
    "normalize_angle",
    # Matrices
    "Matrix2",
    "Matrix4",
    # Control
    "PIDController",
    # Intercept
    "InterceptSolution",
    "refine_constant_acceleration",
    "solve_constant_velocity",
    "solve_intercept",
    # Estimation
    "KalmanPosVel2D",
    # Tracking
    "Contact",
    "Target",
    "TrackedTarget",
    # Host interface
    "Actuators",
    "RadarCommand",
    "RecordingActuators",
    # Configuration
    "GunneryConfig",
    "load_config",
    # Control loop
    "FighterController",
    "select_best",
]
