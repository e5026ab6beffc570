#!/usr/bin/env python3
"""
Target tracking for the Gunnery guidance core.

This module implements:
- Contact: a single position/velocity observation of a target
- TrackedTarget: per-target state estimate with uncertainty, cached
  intercept solution and the two priorities used by the control loop
- Target: the simplified single-target variant without uncertainty

Tracked targets dead-reckon every tick, so an estimate (and its intercept
solution) stays available between observations while its uncertainty grows.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Hashable, Optional

from .intercept import (
    DEFAULT_TOLERANCE,
    MAX_ITERATIONS,
    InterceptSolution,
    solve_intercept,
)
from .kalman import KalmanPosVel2D
from .linalg import Matrix2
from .physics import EPSILON, ShipState, Vector2

logger = logging.getLogger(__name__)


# =============================================================================
# CONTACT
# =============================================================================

@dataclass(frozen=True)
class Contact:
    """
    One sensor observation of a target, in world coordinates.

    Attributes:
        position: Observed position (meters).
        velocity: Observed velocity (m/s).
        acceleration: Observed acceleration (m/s^2), if the sensor reports
                      one. When None the previous estimate is kept.
    """
    position: Vector2
    velocity: Vector2
    acceleration: Optional[Vector2] = None


def _intercept_in_world_frame(
    own: ShipState,
    solution: Optional[InterceptSolution]
) -> Optional[InterceptSolution]:
    """Shift a relative aim point into world coordinates."""
    if solution is None:
        return None
    return InterceptSolution(solution.time, own.position + solution.point)


# =============================================================================
# TRACKED TARGET
# =============================================================================

@dataclass
class TrackedTarget:
    """
    State estimate, uncertainty and engagement data for one target.

    Attributes:
        target_id: Sensing identity of the target (its slot in the
                   controller's collection).
        position: Estimated position (meters).
        velocity: Estimated velocity (m/s).
        acceleration: Estimated acceleration (m/s^2).
        position_cov: Position covariance (m^2).
        velocity_cov: Velocity covariance.
        acceleration_cov: Acceleration covariance.
        measurement_position_cov: Covariance assigned to observed positions.
        measurement_velocity_cov: Covariance assigned to observed velocities.
        estimator: Optional Kalman filter that replaces dead-reckoning.
        solution: Intercept solution (world-frame aim point), or None.
        firing_priority: Engagement priority, recomputed every tick.
        radar_priority: Sensing priority, recomputed every tick.
    """
    target_id: Hashable
    position: Vector2
    velocity: Vector2
    acceleration: Vector2 = field(default_factory=Vector2.zero)
    position_cov: Matrix2 = field(default_factory=Matrix2.zero)
    velocity_cov: Matrix2 = field(default_factory=Matrix2.zero)
    acceleration_cov: Matrix2 = field(default_factory=Matrix2.zero)
    measurement_position_cov: Matrix2 = field(default_factory=Matrix2.zero)
    measurement_velocity_cov: Matrix2 = field(default_factory=Matrix2.zero)
    estimator: Optional[KalmanPosVel2D] = None
    solution: Optional[InterceptSolution] = None
    firing_priority: float = 0.0
    radar_priority: float = 0.0
    min_possible_distance: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        """Start from the filter's estimate when one is attached."""
        if self.estimator is not None:
            self._read_estimator()

    @property
    def time_to_intercept(self) -> Optional[float]:
        """Time to impact in seconds, or None without a solution."""
        return self.solution.time if self.solution is not None else None

    @property
    def intercept_point(self) -> Optional[Vector2]:
        """World-frame aim point, or None without a solution."""
        return self.solution.point if self.solution is not None else None

    @property
    def has_solution(self) -> bool:
        return self.solution is not None

    # -------------------------------------------------------------------------
    # State estimation
    # -------------------------------------------------------------------------

    def propagate(self, dt: float) -> None:
        """
        Dead-reckon the estimate forward by one step.

        Uncertainty only grows here: position covariance accumulates the
        velocity covariance and velocity covariance the acceleration
        covariance, both scaled by dt.
        """
        self.position = self.position + self.velocity * dt
        self.velocity = self.velocity + self.acceleration * dt
        self.position_cov = self.position_cov + self.velocity_cov * dt
        self.velocity_cov = self.velocity_cov + self.acceleration_cov * dt

    def observe(self, contact: Contact) -> None:
        """
        Replace the estimate with a fresh observation.

        Position and velocity covariances drop back to the measurement
        covariances.
        """
        self.position = contact.position
        self.velocity = contact.velocity
        if contact.acceleration is not None:
            self.acceleration = contact.acceleration
        self.position_cov = self.measurement_position_cov
        self.velocity_cov = self.measurement_velocity_cov

    def _read_estimator(self) -> None:
        self.position = self.estimator.position
        self.velocity = self.estimator.velocity
        self.position_cov = self.estimator.position_covariance
        self.velocity_cov = self.estimator.velocity_covariance

    def _step_estimator(self, contact: Optional[Contact]) -> None:
        if contact is None:
            self.estimator.predict()
        else:
            self.estimator.predict_and_update(contact.position, contact.velocity)
            if contact.acceleration is not None:
                self.acceleration = contact.acceleration
        self._read_estimator()

    # -------------------------------------------------------------------------
    # Engagement
    # -------------------------------------------------------------------------

    def update_firing_solution(
        self,
        own: ShipState,
        projectile_speed: float,
        tolerance: float = DEFAULT_TOLERANCE,
        max_iterations: int = MAX_ITERATIONS
    ) -> Optional[InterceptSolution]:
        """
        Recompute the intercept solution against the current estimate.

        Warm-starts from the cached time-to-intercept when there is one.

        Returns:
            The new solution, or None if no valid intercept exists.
        """
        had_solution = self.solution is not None
        relative = solve_intercept(
            self.position - own.position,
            self.velocity - own.velocity,
            self.acceleration,
            projectile_speed,
            previous_time=self.time_to_intercept,
            tolerance=tolerance,
            max_iterations=max_iterations,
        )
        self.solution = _intercept_in_world_frame(own, relative)
        if had_solution and self.solution is None:
            logger.debug("Target %r: intercept solution lost", self.target_id)
        return self.solution

    def update_priorities(self, own: ShipState) -> None:
        """
        Recompute firing and radar priorities.

        Firing priority is the inverse time-to-impact. Radar priority
        discounts it by the closest distance the target could plausibly be
        at, using a 2-sigma bound on the position uncertainty along the line
        of sight.
        """
        if self.solution is not None:
            self.firing_priority = 1.0 / max(self.solution.time, EPSILON)
        else:
            self.firing_priority = 0.0

        r_rel = self.position - own.position
        distance = r_rel.magnitude
        line_of_sight = r_rel / distance if distance > 0 else Vector2(1.0, 0.0)
        radial_variance = max(self.position_cov.quadratic_form(line_of_sight), 0.0)
        self.min_possible_distance = max(distance - 2.0 * math.sqrt(radial_variance), 0.0)

        # +1 keeps the priority finite at zero distance
        self.radar_priority = self.firing_priority / (self.min_possible_distance + 1.0)

    def tick(
        self,
        own: ShipState,
        dt: float,
        projectile_speed: float,
        contact: Optional[Contact] = None,
        tolerance: float = DEFAULT_TOLERANCE,
        max_iterations: int = MAX_ITERATIONS
    ) -> None:
        """
        Advance the target by one control tick.

        Args:
            own: Own-ship snapshot for this tick.
            dt: Tick length in seconds.
            projectile_speed: Projectile speed (m/s).
            contact: Fresh observation this tick, if any.
            tolerance: Newton convergence tolerance.
            max_iterations: Newton iteration cap.
        """
        if self.estimator is not None:
            self._step_estimator(contact)
        else:
            self.propagate(dt)
            if contact is not None:
                self.observe(contact)

        self.update_firing_solution(own, projectile_speed, tolerance, max_iterations)
        self.update_priorities(own)


# =============================================================================
# SINGLE TARGET
# =============================================================================

@dataclass
class Target:
    """
    Single-target variant: state is refreshed from the sensor every tick.

    No uncertainty is carried and there is no dead-reckoning gap.
    """
    position: Vector2 = field(default_factory=Vector2.zero)
    velocity: Vector2 = field(default_factory=Vector2.zero)
    acceleration: Vector2 = field(default_factory=Vector2.zero)
    solution: Optional[InterceptSolution] = None

    @property
    def time_to_intercept(self) -> Optional[float]:
        return self.solution.time if self.solution is not None else None

    @property
    def intercept_point(self) -> Optional[Vector2]:
        return self.solution.point if self.solution is not None else None

    def update_state(self, position: Vector2, velocity: Vector2, acceleration: Vector2) -> None:
        self.position = position
        self.velocity = velocity
        self.acceleration = acceleration

    def update_firing_solution(
        self,
        own: ShipState,
        projectile_speed: float
    ) -> Optional[InterceptSolution]:
        relative = solve_intercept(
            self.position - own.position,
            self.velocity - own.velocity,
            self.acceleration,
            projectile_speed,
            previous_time=self.time_to_intercept,
        )
        self.solution = _intercept_in_world_frame(own, relative)
        return self.solution
