#!/usr/bin/env python3
"""
Kalman filter for 2D position and velocity tracking.

System model (constant velocity, direct full-state measurement):

    x(k+1) = F x(k) + w      w ~ N(0, Q)
    z(k)   = H x(k) + v      v ~ N(0, R),  H = I

with state x = [x, y, vx, vy]. Covariance updates use the Joseph form
(I - KH) P (I - KH)^T + K R K^T, which keeps P symmetric.
"""

from __future__ import annotations

import logging

import numpy as np

from .linalg import Matrix2, Matrix4
from .physics import TICK_LENGTH, Vector2

logger = logging.getLogger(__name__)

# Diagonal of the initial state covariance: effectively "unknown"
INITIAL_VARIANCE = 1e3


class KalmanPosVel2D:
    """
    Recursive estimator fusing noisy position/velocity measurements.

    Call predict() on ticks without a measurement and predict_and_update()
    on ticks with one. All four noise parameters are standard deviations.
    """

    def __init__(
        self,
        position_meas_std: float,
        velocity_meas_std: float,
        position_process_std: float,
        velocity_process_std: float,
        dt: float = TICK_LENGTH
    ) -> None:
        """
        Build the fixed model matrices.

        Args:
            position_meas_std: Position measurement noise (m).
            velocity_meas_std: Velocity measurement noise (m/s).
            position_process_std: Position process noise per step (m).
            velocity_process_std: Velocity process noise per step (m/s).
            dt: Step length in seconds.
        """
        if dt <= 0:
            raise ValueError(f"dt ({dt}) must be > 0")

        self.dt = dt
        self.x = np.zeros(4)
        self.p = Matrix4.from_diagonal(
            INITIAL_VARIANCE, INITIAL_VARIANCE, INITIAL_VARIANCE, INITIAL_VARIANCE
        )

        self.f = Matrix4.from_rows(
            (1.0, 0.0, dt, 0.0),
            (0.0, 1.0, 0.0, dt),
            (0.0, 0.0, 1.0, 0.0),
            (0.0, 0.0, 0.0, 1.0),
        )
        self.q = Matrix4.from_diagonal(
            position_process_std ** 2,
            position_process_std ** 2,
            velocity_process_std ** 2,
            velocity_process_std ** 2,
        )
        self.h = Matrix4.identity()
        self.r = Matrix4.from_diagonal(
            position_meas_std ** 2,
            position_meas_std ** 2,
            velocity_meas_std ** 2,
            velocity_meas_std ** 2,
        )

    @classmethod
    def from_state(
        cls,
        position: Vector2,
        velocity: Vector2,
        position_meas_std: float,
        velocity_meas_std: float,
        position_process_std: float,
        velocity_process_std: float,
        dt: float = TICK_LENGTH
    ) -> KalmanPosVel2D:
        """
        Create a filter already initialised from a first measurement.

        The state is set to the measurement and the covariance to the
        measurement noise, so the next update does not start from the
        large default uncertainty.
        """
        kf = cls(position_meas_std, velocity_meas_std,
                 position_process_std, velocity_process_std, dt)
        kf.x = np.array([position.x, position.y, velocity.x, velocity.y])
        kf.p = Matrix4(kf.r.m)
        return kf

    def predict(self) -> None:
        """
        Advance state and covariance by one step without a measurement.
        """
        self.x = self.f @ self.x
        self.p = self.f @ self.p @ self.f.T + self.q

    def predict_and_update(self, position_meas: Vector2, velocity_meas: Vector2) -> None:
        """
        Predict one step, then fuse a position/velocity measurement.

        A singular residual covariance skips the fusion and keeps the
        prediction.
        """
        z = np.array([position_meas.x, position_meas.y, velocity_meas.x, velocity_meas.y])

        self.predict()

        y = z - self.h @ self.x
        s = self.h @ self.p @ self.h.T + self.r
        try:
            s_inv = s.inverse()
        except np.linalg.LinAlgError:
            logger.warning("Singular residual covariance, skipping measurement update")
            return
        k = self.p @ self.h.T @ s_inv

        self.x = self.x + k @ y
        i_minus_kh = Matrix4.identity() - k @ self.h
        self.p = i_minus_kh @ self.p @ i_minus_kh.T + k @ self.r @ k.T

    @property
    def position(self) -> Vector2:
        """Latest position estimate."""
        return Vector2(float(self.x[0]), float(self.x[1]))

    @property
    def velocity(self) -> Vector2:
        """Latest velocity estimate."""
        return Vector2(float(self.x[2]), float(self.x[3]))

    @property
    def state(self) -> np.ndarray:
        """Copy of the [x, y, vx, vy] state vector."""
        return self.x.copy()

    @property
    def covariance(self) -> Matrix4:
        """Joint [x, y, vx, vy] covariance."""
        return self.p

    @property
    def position_covariance(self) -> Matrix2:
        return self.p.block(0, 0)

    @property
    def velocity_covariance(self) -> Matrix2:
        return self.p.block(2, 2)
