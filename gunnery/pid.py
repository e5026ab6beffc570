#!/usr/bin/env python3
"""
PID controller for scalar signals.

Computes a control effort from an error signal:

    u(t) = Kp * e(t) + Ki * integral(e dt) + Kd * de/dt

The integral uses the trapezoidal rule (rectangular on the very first
sample) and the derivative a backward difference. There is no anti-windup,
filtering or output clamping: the integral grows without bound under a
persistent error until reset() is called.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PIDController:
    """
    Proportional-integral-derivative loop with internal memory.

    Attributes:
        kp: Proportional gain.
        ki: Integral gain.
        kd: Derivative gain.
        integral: Accumulated integral of the error.
        previous_error: Error at the previous update; None until the first call.
    """
    kp: float
    ki: float
    kd: float
    integral: float = field(default=0.0, init=False)
    previous_error: Optional[float] = field(default=None, init=False)

    def reset(self) -> None:
        """Clear the integral and derivative memory. Gains are unchanged."""
        self.integral = 0.0
        self.previous_error = None

    def update(self, error: float, dt: float) -> float:
        """
        Advance the controller by one step.

        Args:
            error: Current error signal.
            dt: Time since the previous update in seconds. Must be positive.

        Returns:
            The control effort.

        Raises:
            ValueError: If dt is not strictly positive.
        """
        if not dt > 0.0:
            raise ValueError(f"dt ({dt}) must be > 0")

        p = self.kp * error

        if self.previous_error is None:
            self.integral += error * dt
            derivative = 0.0
        else:
            self.integral += 0.5 * (error + self.previous_error) * dt
            derivative = (error - self.previous_error) / dt
        i = self.ki * self.integral
        d = self.kd * derivative

        self.previous_error = error

        return p + i + d
