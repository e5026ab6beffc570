#!/usr/bin/env python3
"""
Tests for the intercept solvers.

Tests cover:
1. Constant-velocity closed form: root selection, no-solution cases,
   degenerate (target speed == projectile speed) geometry
2. Constant-acceleration Newton refiner: agreement with the closed form,
   accelerating targets, iteration cap
3. solve_intercept: seeding, warm start, rejection of non-positive roots
"""

import pytest

from gunnery.intercept import (
    InterceptSolution,
    refine_constant_acceleration,
    solve_constant_velocity,
    solve_intercept,
)
from gunnery.physics import Vector2


BULLET_SPEED = 1000.0


def _miss(r: Vector2, v: Vector2, s: float, t: float) -> float:
    """| |r + v t| - s t |, zero at an exact constant-velocity intercept."""
    return abs((r + v * t).magnitude - s * t)


def _newton_step(r: Vector2, v: Vector2, a: Vector2, s: float, t: float) -> float:
    """Size of the next Newton step on the refiner's quartic at time t."""
    p4 = 0.5 * a.dot(a)
    p3 = v.dot(a)
    p2 = v.dot(v) + r.dot(a) - s * s
    p1 = 2.0 * r.dot(v)
    p0 = r.dot(r)
    f = (((p4 * t + p3) * t + p2) * t + p1) * t + p0
    df = ((4.0 * p4 * t + 3.0 * p3) * t + 2.0 * p2) * t + p1
    return abs(f / df)


# =============================================================================
# CONSTANT VELOCITY
# =============================================================================

class TestConstantVelocitySolver:
    """Tests for the closed-form quadratic solver."""

    def test_stationary_target(self):
        """A stationary target 1000 m away is hit after 1 s."""
        solution = solve_constant_velocity(Vector2(1000, 0), Vector2.zero(), BULLET_SPEED)
        assert solution is not None
        assert solution.time == pytest.approx(1.0)
        assert solution.point == Vector2(1000, 0)

    @pytest.mark.parametrize("r,v", [
        (Vector2(2000, 0), Vector2(-100, 0)),
        (Vector2(1000, 500), Vector2(0, 300)),
        (Vector2(-800, 1200), Vector2(250, -400)),
        (Vector2(3000, 0), Vector2(500, 0)),
    ], ids=["closing", "crossing", "oblique", "receding_slower"])
    def test_solution_satisfies_intercept_equation(self, r, v):
        """|r + v t| == s t at the returned time, when s > |v|."""
        solution = solve_constant_velocity(r, v, BULLET_SPEED)
        assert solution is not None
        assert solution.time > 0
        assert _miss(r, v, BULLET_SPEED, solution.time) < 1e-6
        assert solution.point == r + v * solution.time

    def test_picks_earliest_positive_root(self):
        """When both roots are positive the smaller one wins."""
        # Target faster than the shot crossing in front: two intercept times
        r = Vector2(1000, 0)
        v = Vector2(-1500, 0)
        solution = solve_constant_velocity(r, v, BULLET_SPEED)
        assert solution is not None
        # Head-on closure at 2500 m/s
        assert solution.time == pytest.approx(1000 / 2500)

    def test_faster_target_moving_away_has_no_solution(self):
        """s < |v| and receding: no intercept."""
        assert solve_constant_velocity(Vector2(100, 0), Vector2(2000, 0), BULLET_SPEED) is None

    def test_negative_discriminant_has_no_solution(self):
        """A fast crossing target that the shot can never reach."""
        assert solve_constant_velocity(Vector2(0, 1000), Vector2(5000, 0), BULLET_SPEED) is None

    def test_equal_speed_closing_uses_linear_solution(self):
        """|v| == s degenerates to a linear equation instead of dividing by zero."""
        solution = solve_constant_velocity(Vector2(1000, 0), Vector2(-1000, 0), BULLET_SPEED)
        assert solution is not None
        assert solution.time == pytest.approx(0.5)

    def test_equal_speed_receding_has_no_solution(self):
        """|v| == s moving directly away: no positive root."""
        assert solve_constant_velocity(Vector2(1000, 0), Vector2(1000, 0), BULLET_SPEED) is None

    def test_equal_speed_perpendicular_has_no_solution(self):
        """|v| == s with no closing component: both coefficients vanish."""
        assert solve_constant_velocity(Vector2.zero(), Vector2(0, 1000), BULLET_SPEED) is None


# =============================================================================
# CONSTANT ACCELERATION
# =============================================================================

class TestConstantAccelerationRefiner:
    """Tests for the Newton-Raphson quartic refiner."""

    @pytest.mark.parametrize("r,v", [
        (Vector2(1000, 0), Vector2.zero()),
        (Vector2(2000, 0), Vector2(-100, 0)),
        (Vector2(1000, 500), Vector2(0, 300)),
    ], ids=["stationary", "closing", "crossing"])
    def test_zero_acceleration_matches_closed_form(self, r, v):
        """With a = 0 the refiner lands on the quadratic's root."""
        exact = solve_constant_velocity(r, v, BULLET_SPEED)
        t = refine_constant_acceleration(r, v, Vector2.zero(), BULLET_SPEED, exact.time * 0.8)
        assert t == pytest.approx(exact.time, abs=1e-3)

    def test_converged_guess_is_returned_unchanged(self):
        """Starting at the root stops on the first step."""
        exact = solve_constant_velocity(Vector2(1000, 0), Vector2.zero(), BULLET_SPEED)
        t = refine_constant_acceleration(
            Vector2(1000, 0), Vector2.zero(), Vector2.zero(), BULLET_SPEED, exact.time
        )
        assert t == exact.time

    @pytest.mark.parametrize("a", [
        Vector2(0, 50),
        Vector2(-80, 20),
        Vector2(100, 100),
    ], ids=["lateral", "braking", "diagonal"])
    def test_accelerating_target_satisfies_quartic(self, a):
        """The refined time is a fixed point of the quartic's Newton iteration."""
        r = Vector2(2000, 300)
        v = Vector2(-150, 50)
        seed = solve_constant_velocity(r, v, BULLET_SPEED)
        t = refine_constant_acceleration(r, v, a, BULLET_SPEED, seed.time)
        assert t > 0
        assert _newton_step(r, v, a, BULLET_SPEED, t) < 1e-3

    def test_flat_derivative_returns_guess(self):
        """A vanishing derivative stops iteration at the current iterate."""
        # r = v = a = 0 makes every coefficient but p2 zero; f'(0) = p1 = 0
        t = refine_constant_acceleration(
            Vector2.zero(), Vector2.zero(), Vector2.zero(), BULLET_SPEED, 0.0
        )
        assert t == 0.0

    def test_iteration_cap_is_respected(self):
        """With one iteration allowed only a single Newton step is taken."""
        r = Vector2(1000, 0)
        t = refine_constant_acceleration(
            r, Vector2.zero(), Vector2.zero(), BULLET_SPEED, 0.5, max_iterations=1
        )
        # f(0.5) = 750000, f'(0.5) = -1e6: one step to 1.25 and no convergence check
        assert t == pytest.approx(1.25)

    def test_bad_guess_can_land_on_negative_root(self):
        """No bracketing: a negative guess converges to the negative root."""
        t = refine_constant_acceleration(
            Vector2(1000, 0), Vector2.zero(), Vector2.zero(), BULLET_SPEED, -0.8
        )
        assert t == pytest.approx(-1.0, abs=1e-3)


# =============================================================================
# FULL SOLVE
# =============================================================================

class TestSolveIntercept:
    """Tests for seeded, validated intercept solving."""

    def test_seeds_from_closed_form(self):
        """Without a previous time the quadratic seeds Newton."""
        solution = solve_intercept(Vector2(1000, 0), Vector2.zero(), Vector2.zero(), BULLET_SPEED)
        assert isinstance(solution, InterceptSolution)
        assert solution.time == pytest.approx(1.0, abs=1e-3)

    def test_relative_aim_point_includes_acceleration(self):
        """The aim point is r + v t + 0.5 a t^2."""
        r = Vector2(1500, 0)
        v = Vector2(0, 100)
        a = Vector2(0, 40)
        solution = solve_intercept(r, v, a, BULLET_SPEED)
        t = solution.time
        expected = r + v * t + a * (0.5 * t * t)
        assert solution.point == expected
        assert solution.point != r + v * t

    def test_no_seed_means_no_solution(self):
        """Closed form fails and there is no previous time."""
        assert solve_intercept(
            Vector2(100, 0), Vector2(2000, 0), Vector2.zero(), BULLET_SPEED
        ) is None

    def test_warm_start_from_previous_time(self):
        """A previous time replaces the closed-form seed."""
        solution = solve_intercept(
            Vector2(1000, 0), Vector2.zero(), Vector2.zero(), BULLET_SPEED, previous_time=1.2
        )
        assert solution.time == pytest.approx(1.0, abs=1e-3)

    def test_non_positive_refined_time_is_rejected(self):
        """A warm start that converges to a negative root yields None."""
        assert solve_intercept(
            Vector2(1000, 0), Vector2.zero(), Vector2.zero(), BULLET_SPEED, previous_time=-0.8
        ) is None
