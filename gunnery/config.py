#!/usr/bin/env python3
"""
Configuration for the Gunnery guidance core.

GunneryConfig holds every tunable the control loop reads: world constants,
PID gains, radar cadence and beam widths, the fire threshold, Newton
solver limits and the noise model used for tracked targets.

Settings can be loaded from a JSON file; unknown keys are ignored and
missing keys fall back to the defaults below.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Tuple

from .intercept import DEFAULT_TOLERANCE, MAX_ITERATIONS
from .linalg import Matrix2
from .physics import BULLET_SPEED, TICK_LENGTH


@dataclass
class GunneryConfig:
    """
    Tunables for one FighterController.

    Attributes:
        projectile_speed: Muzzle speed of the gun (m/s).
        tick_length: Fixed control step (s).
        pid_kp: Heading loop proportional gain.
        pid_ki: Heading loop integral gain.
        pid_kd: Heading loop derivative gain.
        search_interval_ticks: A wide search scan runs every this many ticks.
        search_beam_width: Beam width of search scans (rad).
        track_beam_width: Beam width of directed scans (rad).
        fire_threshold: Fire when |bearing error| x shot distance is below
                        this miss distance (m).
        pursuit_gain: Thrust scale applied to the relative aim vector.
        weapon_index: Gun fired on a valid solution.
        intercept_tolerance: Newton convergence tolerance (s).
        max_newton_iterations: Newton iteration cap.
        position_measurement_std: Position observation noise (m).
        velocity_measurement_std: Velocity observation noise (m/s).
        acceleration_std: Prior uncertainty of target acceleration (m/s^2).
        position_process_std: Kalman position process noise (m).
        velocity_process_std: Kalman velocity process noise (m/s).
        use_kalman_filter: Track new targets with a Kalman filter instead
                           of plain dead-reckoning.
    """
    projectile_speed: float = BULLET_SPEED
    tick_length: float = TICK_LENGTH
    pid_kp: float = 8.0
    pid_ki: float = 0.0
    pid_kd: float = 5.0
    search_interval_ticks: int = 15
    search_beam_width: float = math.pi / 4
    track_beam_width: float = math.pi / 64
    fire_threshold: float = 10.0
    pursuit_gain: float = 1000.0
    weapon_index: int = 0
    intercept_tolerance: float = DEFAULT_TOLERANCE
    max_newton_iterations: int = MAX_ITERATIONS
    position_measurement_std: float = 1.0
    velocity_measurement_std: float = 1.0
    acceleration_std: float = 10.0
    position_process_std: float = 0.1
    velocity_process_std: float = 0.1
    use_kalman_filter: bool = False

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.projectile_speed <= 0:
            raise ValueError("Projectile speed must be positive")
        if self.tick_length <= 0:
            raise ValueError("Tick length must be positive")
        if self.search_interval_ticks < 1:
            raise ValueError("Search interval must be at least one tick")
        if self.search_beam_width <= 0 or self.track_beam_width <= 0:
            raise ValueError("Radar beam widths must be positive")
        if self.fire_threshold <= 0:
            raise ValueError("Fire threshold must be positive")
        if self.intercept_tolerance <= 0:
            raise ValueError("Intercept tolerance must be positive")
        if self.max_newton_iterations < 1:
            raise ValueError("Newton iteration cap must be at least 1")
        for name in (
            "position_measurement_std",
            "velocity_measurement_std",
            "acceleration_std",
            "position_process_std",
            "velocity_process_std",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GunneryConfig:
        """
        Create a config from a dictionary of settings.

        Args:
            data: Settings keyed by attribute name. Unknown keys are ignored.

        Returns:
            A validated GunneryConfig.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def measurement_covariances(self) -> Tuple[Matrix2, Matrix2]:
        """Diagonal (position, velocity) covariances of one observation."""
        pos_var = self.position_measurement_std ** 2
        vel_var = self.velocity_measurement_std ** 2
        return Matrix2.diagonal(pos_var, pos_var), Matrix2.diagonal(vel_var, vel_var)

    def acceleration_covariance(self) -> Matrix2:
        """Diagonal prior covariance of target acceleration."""
        var = self.acceleration_std ** 2
        return Matrix2.diagonal(var, var)


def load_config(filepath: str | Path) -> GunneryConfig:
    """
    Load settings from a JSON file.

    Args:
        filepath: Path to a JSON object of settings.

    Returns:
        A validated GunneryConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    with open(filepath, "r") as f:
        return GunneryConfig.from_dict(json.load(f))
