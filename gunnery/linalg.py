#!/usr/bin/env python3
"""
Small fixed-size matrices for uncertainty propagation and state estimation.

- Matrix2: pure-Python 2x2 matrix, used for per-target covariances of
  position, velocity and acceleration.
- Matrix4: numpy-backed 4x4 matrix, used by the Kalman filter over the
  joint [x, y, vx, vy] state.

Covariance instances are expected to stay symmetric with a non-negative
diagonal. Nothing here enforces that; only additive and scaling propagation
is applied to them, which preserves positive semi-definiteness.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Union

import numpy as np

from .physics import Vector2


# =============================================================================
# MATRIX2
# =============================================================================

@dataclass(frozen=True)
class Matrix2:
    """
    A 2x2 matrix laid out as::

        [xx xy]
        [yx yy]
    """
    xx: float = 0.0
    xy: float = 0.0
    yx: float = 0.0
    yy: float = 0.0

    @classmethod
    def identity(cls) -> Matrix2:
        """Identity matrix."""
        return cls(1.0, 0.0, 0.0, 1.0)

    @classmethod
    def zero(cls) -> Matrix2:
        """Zero matrix."""
        return cls(0.0, 0.0, 0.0, 0.0)

    @classmethod
    def diagonal(cls, a: float, d: float) -> Matrix2:
        """Diagonal matrix, e.g. an axis-aligned covariance."""
        return cls(a, 0.0, 0.0, d)

    def __add__(self, other: Matrix2) -> Matrix2:
        return Matrix2(
            self.xx + other.xx,
            self.xy + other.xy,
            self.yx + other.yx,
            self.yy + other.yy,
        )

    def __sub__(self, other: Matrix2) -> Matrix2:
        return Matrix2(
            self.xx - other.xx,
            self.xy - other.xy,
            self.yx - other.yx,
            self.yy - other.yy,
        )

    def __mul__(self, other: Union[Matrix2, float]) -> Matrix2:
        """Matrix product, or scaling when given a number."""
        if isinstance(other, Matrix2):
            return self.matmul(other)
        return self.scale(other)

    def __rmul__(self, k: float) -> Matrix2:
        return self.scale(k)

    def __matmul__(self, other: Union[Matrix2, Vector2]) -> Union[Matrix2, Vector2]:
        if isinstance(other, Vector2):
            return self.mul_vec(other)
        return self.matmul(other)

    def matmul(self, other: Matrix2) -> Matrix2:
        """Matrix-matrix product."""
        return Matrix2(
            self.xx * other.xx + self.xy * other.yx,
            self.xx * other.xy + self.xy * other.yy,
            self.yx * other.xx + self.yy * other.yx,
            self.yx * other.xy + self.yy * other.yy,
        )

    def scale(self, k: float) -> Matrix2:
        """Scalar multiplication."""
        return Matrix2(self.xx * k, self.xy * k, self.yx * k, self.yy * k)

    def mul_vec(self, vec: Vector2) -> Vector2:
        """Matrix-vector product."""
        return Vector2(
            self.xx * vec.x + self.xy * vec.y,
            self.yx * vec.x + self.yy * vec.y,
        )

    def det(self) -> float:
        """Determinant."""
        return self.xx * self.yy - self.xy * self.yx

    def inverse(self) -> Matrix2:
        """
        Matrix inverse.

        Raises:
            ValueError: If the matrix is singular.
        """
        det = self.det()
        if det == 0:
            raise ValueError("Cannot invert a singular matrix")
        return Matrix2(self.yy / det, -self.xy / det, -self.yx / det, self.xx / det)

    def solve(self, vec: Vector2) -> Vector2:
        """Solve ``M x = vec`` for x."""
        return self.inverse().mul_vec(vec)

    def transpose(self) -> Matrix2:
        return Matrix2(self.xx, self.yx, self.xy, self.yy)

    def trace(self) -> float:
        return self.xx + self.yy

    def frobenius_norm(self) -> float:
        return math.sqrt(
            self.xx * self.xx + self.xy * self.xy + self.yx * self.yx + self.yy * self.yy
        )

    def is_symmetric(self) -> bool:
        return self.xy == self.yx

    def quadratic_form(self, u: Vector2) -> float:
        """
        Evaluate ``u . (M u)``.

        For a covariance and a unit vector this is the variance of the
        quantity projected onto that direction.
        """
        return u.dot(self.mul_vec(u))


# =============================================================================
# MATRIX4
# =============================================================================

class Matrix4:
    """
    A 4x4 matrix backed by a numpy array.

    Matrix-vector products take and return plain length-4 numpy arrays so
    the filter state can stay a simple vector.
    """

    __slots__ = ("m",)

    def __init__(self, values: Union[np.ndarray, Iterable[float]]) -> None:
        m = np.array(values, dtype=float)
        if m.size != 16:
            raise ValueError(f"Matrix4 needs 16 values, got {m.size}")
        self.m = m.reshape(4, 4)

    @classmethod
    def identity(cls) -> Matrix4:
        return cls(np.eye(4))

    @classmethod
    def zero(cls) -> Matrix4:
        return cls(np.zeros((4, 4)))

    @classmethod
    def from_diagonal(cls, a1: float, a2: float, a3: float, a4: float) -> Matrix4:
        return cls(np.diag([a1, a2, a3, a4]))

    @classmethod
    def from_rows(cls, *rows: Iterable[float]) -> Matrix4:
        return cls([list(row) for row in rows])

    def __add__(self, other: Matrix4) -> Matrix4:
        return Matrix4(self.m + other.m)

    def __sub__(self, other: Matrix4) -> Matrix4:
        return Matrix4(self.m - other.m)

    def __mul__(self, k: float) -> Matrix4:
        return Matrix4(self.m * k)

    def __rmul__(self, k: float) -> Matrix4:
        return self.__mul__(k)

    def __matmul__(self, other: Union[Matrix4, np.ndarray]) -> Union[Matrix4, np.ndarray]:
        if isinstance(other, Matrix4):
            return Matrix4(self.m @ other.m)
        return self.m @ np.asarray(other, dtype=float)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix4):
            return NotImplemented
        return bool(np.allclose(self.m, other.m, rtol=0.0, atol=1e-10))

    __hash__ = None

    def __getitem__(self, index: tuple[int, int]) -> float:
        return float(self.m[index])

    def transpose(self) -> Matrix4:
        return Matrix4(self.m.T)

    @property
    def T(self) -> Matrix4:
        return self.transpose()

    def det(self) -> float:
        return float(np.linalg.det(self.m))

    def inverse(self) -> Matrix4:
        """
        Matrix inverse.

        Raises:
            numpy.linalg.LinAlgError: If the matrix is singular.
        """
        return Matrix4(np.linalg.inv(self.m))

    def block(self, row: int, col: int) -> Matrix2:
        """
        Extract the 2x2 sub-block starting at (row, col).

        For a [x, y, vx, vy] covariance, ``block(0, 0)`` is the position
        covariance and ``block(2, 2)`` the velocity covariance.
        """
        b = self.m[row:row + 2, col:col + 2]
        return Matrix2(float(b[0, 0]), float(b[0, 1]), float(b[1, 0]), float(b[1, 1]))

    def is_symmetric(self, tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.m, self.m.T, rtol=0.0, atol=tol))

    def to_numpy(self) -> np.ndarray:
        """Copy of the underlying array."""
        return self.m.copy()

    def __repr__(self) -> str:
        rows = ", ".join("[" + ", ".join(f"{v:.6g}" for v in row) + "]" for row in self.m)
        return f"Matrix4({rows})"
