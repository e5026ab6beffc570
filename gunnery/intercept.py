#!/usr/bin/env python3
"""
Intercept solvers for a constant-speed projectile.

Answers "when and where will a projectile fired now meet the target",
with every quantity expressed in the shooter's frame (target minus
shooter):

- solve_constant_velocity: closed-form quadratic for a target moving at
  constant relative velocity.
- refine_constant_acceleration: Newton-Raphson on the quartic for a target
  under constant acceleration, warm-started from a previous answer.
- solve_intercept: seed + refine + validation, shared by both target types.

A missing solution is always None, never a sentinel time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .physics import EPSILON, Vector2


# Iteration cap for the Newton refiner. Bounds worst-case per-tick work.
MAX_ITERATIONS = 100

# Default convergence tolerance between successive Newton iterates (s)
DEFAULT_TOLERANCE = 1e-4

# Below this |a| the intercept quadratic is treated as linear
DEGENERATE_EPSILON = 1e-10


@dataclass(frozen=True)
class InterceptSolution:
    """
    Where and when a projectile fired now meets the target.

    Attributes:
        time: Time to impact in seconds, strictly positive.
        point: Aim point. Relative to the shooter when returned by the
               solvers; targets store it in world coordinates.
    """
    time: float
    point: Vector2


def solve_constant_velocity(
    r_rel: Vector2,
    v_rel: Vector2,
    projectile_speed: float
) -> Optional[InterceptSolution]:
    """
    Earliest intercept of a target at constant relative velocity.

    Solves |r + v t| = s t, i.e. (v.v - s^2) t^2 + 2 (v.r) t + r.r = 0, for
    the smallest strictly positive t.

    Args:
        r_rel: Target position relative to the shooter.
        v_rel: Target velocity relative to the shooter.
        projectile_speed: Projectile speed relative to the shooter.

    Returns:
        InterceptSolution with the relative aim point r + v t, or None if no
        positive-time root exists.
    """
    a = v_rel.magnitude_squared - projectile_speed * projectile_speed
    b = 2.0 * v_rel.dot(r_rel)
    c = r_rel.magnitude_squared

    # Target speed equals projectile speed: the quadratic collapses to b t + c = 0
    if abs(a) < DEGENERATE_EPSILON:
        if abs(b) < DEGENERATE_EPSILON:
            return None
        t = -c / b
        if t <= 0:
            return None
        return InterceptSolution(t, r_rel + v_rel * t)

    discriminant = b * b - 4.0 * a * c
    if discriminant < 0:
        return None

    sqrt_disc = math.sqrt(discriminant)
    t1 = (-b - sqrt_disc) / (2.0 * a)
    t2 = (-b + sqrt_disc) / (2.0 * a)

    # Pick the smallest positive time
    if t1 > 0 and t2 > 0:
        t = min(t1, t2)
    elif t1 > 0:
        t = t1
    elif t2 > 0:
        t = t2
    else:
        return None

    return InterceptSolution(t, r_rel + v_rel * t)


def refine_constant_acceleration(
    r_rel: Vector2,
    v_rel: Vector2,
    a_rel: Vector2,
    projectile_speed: float,
    t_guess: float,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = MAX_ITERATIONS
) -> float:
    """
    Intercept time for a target under constant relative acceleration.

    Governing equation |r + v t + 0.5 a t^2| = s t, squared into the quartic

        p4 t^4 + p3 t^3 + p2 t^2 + p1 t + p0 = 0

    with p4 = 0.5 a.a, p3 = v.a, p2 = v.v + r.a - s^2, p1 = 2 r.v, p0 = r.r.

    Successive ticks have strongly correlated answers, so Newton's method
    warm-started from the previous tick converges in a few steps. There is
    no bracketing: a poor guess can land on a negative or wrong-branch root.

    Args:
        r_rel: Target position relative to the shooter.
        v_rel: Target velocity relative to the shooter.
        a_rel: Target acceleration relative to the projectile.
        projectile_speed: Projectile speed relative to the shooter.
        t_guess: Starting time, normally last tick's answer.
        tolerance: Stop once successive iterates differ by less than this.
        max_iterations: Hard cap on Newton steps.

    Returns:
        The refined time. May be non-positive; callers must reject t <= 0.
    """
    p4 = 0.5 * a_rel.dot(a_rel)
    p3 = v_rel.dot(a_rel)
    p2 = v_rel.dot(v_rel) + r_rel.dot(a_rel) - projectile_speed * projectile_speed
    p1 = 2.0 * r_rel.dot(v_rel)
    p0 = r_rel.dot(r_rel)

    t = t_guess
    for _ in range(max_iterations):
        f = (((p4 * t + p3) * t + p2) * t + p1) * t + p0
        df = ((4.0 * p4 * t + 3.0 * p3) * t + 2.0 * p2) * t + p1
        if abs(df) < EPSILON:
            # Flat derivative, give up with the current iterate
            break
        t_next = t - f / df
        if abs(t_next - t) < tolerance:
            break
        t = t_next
    return t


def solve_intercept(
    r_rel: Vector2,
    v_rel: Vector2,
    a_rel: Vector2,
    projectile_speed: float,
    previous_time: Optional[float] = None,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = MAX_ITERATIONS
) -> Optional[InterceptSolution]:
    """
    Full intercept solve for an accelerating target.

    Seeds Newton's method with the previous time-to-intercept when there is
    one, otherwise with the constant-velocity closed form, then refines.

    Args:
        r_rel: Target position relative to the shooter.
        v_rel: Target velocity relative to the shooter.
        a_rel: Target acceleration relative to the projectile.
        projectile_speed: Projectile speed relative to the shooter.
        previous_time: Last converged time-to-intercept, if any.
        tolerance: Newton convergence tolerance.
        max_iterations: Newton iteration cap.

    Returns:
        InterceptSolution with the relative aim point r + v t + 0.5 a t^2,
        or None if no seed exists or the refined time is not positive.
    """
    if previous_time is None:
        seed = solve_constant_velocity(r_rel, v_rel, projectile_speed)
        if seed is None:
            return None
        t_guess = seed.time
    else:
        t_guess = previous_time

    t = refine_constant_acceleration(
        r_rel, v_rel, a_rel, projectile_speed, t_guess, tolerance, max_iterations
    )
    if not t > 0:
        return None

    return InterceptSolution(t, r_rel + v_rel * t + a_rel * (0.5 * t * t))
