#!/usr/bin/env python3
"""
Per-tick fire control loop for a single gun-armed fighter.

Each tick the controller:
1. Advances every tracked target (observation or dead-reckoning), then
   recomputes its intercept solution and priorities.
2. Allocates the radar: a wide search sweep every few ticks (or whenever
   nothing is tracked), otherwise a narrow beam on the target with the
   highest radar priority.
3. Engages the target with the highest firing priority that has a
   solution: PID heading control on the bearing error, pursuit thrust
   toward the aim point, and a fire decision gated on the expected miss
   distance.

All inputs arrive as arguments and all outputs leave through an Actuators
implementation, so a tick has no hidden dependencies on the host.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, Hashable, Iterable, Mapping, Optional

from .config import GunneryConfig
from .kalman import KalmanPosVel2D
from .physics import TWO_PI, ShipState, Vector2, angle_diff
from .pid import PIDController
from .sensors import Actuators
from .tracking import Contact, TrackedTarget

logger = logging.getLogger(__name__)


def _score(value: float) -> float:
    """Sort key that ranks NaN below every number."""
    return -math.inf if math.isnan(value) else value


def select_best(
    targets: Iterable[TrackedTarget],
    key: Callable[[TrackedTarget], float]
) -> Optional[TrackedTarget]:
    """
    Highest-scoring target, or None for an empty input.

    NaN scores never win over a number. On ties the earliest target in
    iteration order wins.
    """
    best: Optional[TrackedTarget] = None
    best_score = -math.inf
    for target in targets:
        score = _score(key(target))
        if best is None or score > best_score:
            best = target
            best_score = score
    return best


class FighterController:
    """
    Orchestrates tracking, radar allocation and engagement for one ship.

    Attributes:
        config: Tunables for this controller.
        pid: Heading loop.
        targets: Tracked targets keyed by sensing identity, in first-seen order.
        tick_count: Ticks processed so far.
        search_index: Search scans issued so far; drives the sweep heading.
    """

    def __init__(self, config: Optional[GunneryConfig] = None) -> None:
        self.config = config if config is not None else GunneryConfig()
        self.pid = PIDController(self.config.pid_kp, self.config.pid_ki, self.config.pid_kd)
        self.targets: Dict[Hashable, TrackedTarget] = {}
        self.tick_count = 0
        self.search_index = 0

    # -------------------------------------------------------------------------
    # Target bookkeeping
    # -------------------------------------------------------------------------

    def create_target(self, target_id: Hashable, contact: Contact) -> TrackedTarget:
        """
        Start tracking a newly observed target.

        Covariances start at the measurement noise, with the configured
        prior on acceleration.
        """
        cfg = self.config
        pos_cov, vel_cov = cfg.measurement_covariances()
        estimator = None
        if cfg.use_kalman_filter:
            estimator = KalmanPosVel2D.from_state(
                contact.position,
                contact.velocity,
                cfg.position_measurement_std,
                cfg.velocity_measurement_std,
                cfg.position_process_std,
                cfg.velocity_process_std,
                cfg.tick_length,
            )

        target = TrackedTarget(
            target_id=target_id,
            position=contact.position,
            velocity=contact.velocity,
            acceleration=contact.acceleration if contact.acceleration is not None else Vector2.zero(),
            position_cov=pos_cov,
            velocity_cov=vel_cov,
            acceleration_cov=cfg.acceleration_covariance(),
            measurement_position_cov=pos_cov,
            measurement_velocity_cov=vel_cov,
            estimator=estimator,
        )
        self.targets[target_id] = target
        logger.debug("Tracking new target %r at %s", target_id, contact.position)
        return target

    def drop_target(self, target_id: Hashable) -> bool:
        """
        Stop tracking a target.

        Returns:
            True if the target was tracked and is now dropped.
        """
        if target_id in self.targets:
            del self.targets[target_id]
            logger.debug("Dropped target %r", target_id)
            return True
        return False

    def update_targets(self, own: ShipState, contacts: Mapping[Hashable, Contact]) -> None:
        """
        Advance known targets and start tracking new ones.

        A target created this tick is solved against its first observation
        without being dead-reckoned past it.
        """
        cfg = self.config
        for target_id, target in self.targets.items():
            target.tick(
                own,
                cfg.tick_length,
                cfg.projectile_speed,
                contact=contacts.get(target_id),
                tolerance=cfg.intercept_tolerance,
                max_iterations=cfg.max_newton_iterations,
            )

        for target_id, contact in contacts.items():
            if target_id in self.targets:
                continue
            target = self.create_target(target_id, contact)
            target.update_firing_solution(
                own, cfg.projectile_speed, cfg.intercept_tolerance, cfg.max_newton_iterations
            )
            target.update_priorities(own)

    # -------------------------------------------------------------------------
    # Radar
    # -------------------------------------------------------------------------

    def is_search_tick(self) -> bool:
        """True when this tick belongs to the wide search sweep."""
        return not self.targets or self.tick_count % self.config.search_interval_ticks == 0

    def radar_target(self) -> Optional[TrackedTarget]:
        """Target most deserving of the radar, or None when nothing is tracked."""
        return select_best(self.targets.values(), lambda t: t.radar_priority)

    def update_radar(self, own: ShipState, actuators: Actuators) -> None:
        """Issue this tick's radar beam and scan."""
        cfg = self.config
        focus = None if self.is_search_tick() else self.radar_target()

        if focus is None:
            heading = (self.search_index * cfg.search_beam_width) % TWO_PI
            self.search_index += 1
            actuators.point_radar(heading, cfg.search_beam_width)
            logger.debug("Search scan at %.3f rad", heading)
        else:
            heading = (focus.position - own.position).angle
            actuators.point_radar(heading, cfg.track_beam_width)
            logger.debug("Track scan on %r at %.3f rad", focus.target_id, heading)
        actuators.scan()

    # -------------------------------------------------------------------------
    # Engagement
    # -------------------------------------------------------------------------

    def firing_target(self) -> Optional[TrackedTarget]:
        """Highest firing-priority target that has an intercept solution."""
        return select_best(
            (t for t in self.targets.values() if t.solution is not None),
            lambda t: t.firing_priority,
        )

    def engage(self, own: ShipState, target: TrackedTarget, actuators: Actuators) -> float:
        """
        Steer toward the target's aim point, thrust, and fire if aligned.

        Returns:
            The bearing error in radians.
        """
        cfg = self.config
        solution = target.solution
        aim = solution.point - own.position
        bearing_error = angle_diff(own.heading, aim.angle)

        actuators.torque(self.pid.update(bearing_error, cfg.tick_length))

        shot_distance = cfg.projectile_speed * solution.time
        if abs(bearing_error) * shot_distance < cfg.fire_threshold:
            actuators.fire(cfg.weapon_index)
            logger.debug(
                "Firing at %r: error %.5f rad, impact in %.3f s",
                target.target_id, bearing_error, solution.time,
            )

        actuators.accelerate(aim * cfg.pursuit_gain)
        return bearing_error

    def tick(
        self,
        own: ShipState,
        contacts: Mapping[Hashable, Contact],
        actuators: Actuators
    ) -> Optional[TrackedTarget]:
        """
        Run one control tick.

        Args:
            own: Own-ship snapshot for this tick.
            contacts: Observations received this tick, keyed by sensing identity.
            actuators: Command sink for this tick.

        Returns:
            The engaged target, or None if nothing could be engaged.
        """
        self.update_targets(own, contacts)
        self.update_radar(own, actuators)

        target = self.firing_target()
        if target is not None:
            self.engage(own, target, actuators)

        self.tick_count += 1
        return target
