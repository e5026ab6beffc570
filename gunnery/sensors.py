#!/usr/bin/env python3
"""
Actuator interface between the guidance core and the host simulation.

The core never talks to the simulation directly. Each tick it receives a
ShipState snapshot plus contacts, and issues fire-and-forget commands
through an Actuators implementation supplied by the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from .physics import Vector2


class Actuators(ABC):
    """
    Commands the guidance core can issue, at most once per kind per tick.

    No acknowledgement or return value is consumed by the caller.
    """

    @abstractmethod
    def torque(self, value: float) -> None:
        """Apply an angular torque command."""

    @abstractmethod
    def accelerate(self, acceleration: Vector2) -> None:
        """Apply a linear acceleration command in world coordinates."""

    @abstractmethod
    def fire(self, weapon_index: int) -> None:
        """Fire the given weapon."""

    @abstractmethod
    def point_radar(self, heading: float, width: float) -> None:
        """Aim the radar beam at a bearing with the given angular width."""

    @abstractmethod
    def scan(self) -> None:
        """Trigger a radar scan with the current beam settings."""


@dataclass(frozen=True)
class RadarCommand:
    """A radar beam setting issued during one tick."""
    heading: float
    width: float


@dataclass
class RecordingActuators(Actuators):
    """
    Actuators that only remember what was commanded.

    Useful for replaying a tick's decisions or driving a host simulation
    that polls for commands instead of receiving calls.

    Attributes:
        torques: Torque commands in issue order.
        accelerations: Acceleration commands in issue order.
        shots: Weapon indices fired.
        radar: Radar beam settings.
        scans: Number of scans triggered.
    """
    torques: List[float] = field(default_factory=list)
    accelerations: List[Vector2] = field(default_factory=list)
    shots: List[int] = field(default_factory=list)
    radar: List[RadarCommand] = field(default_factory=list)
    scans: int = 0

    def torque(self, value: float) -> None:
        self.torques.append(value)

    def accelerate(self, acceleration: Vector2) -> None:
        self.accelerations.append(acceleration)

    def fire(self, weapon_index: int) -> None:
        self.shots.append(weapon_index)

    def point_radar(self, heading: float, width: float) -> None:
        self.radar.append(RadarCommand(heading, width))

    def scan(self) -> None:
        self.scans += 1

    @property
    def last_torque(self) -> Optional[float]:
        return self.torques[-1] if self.torques else None

    @property
    def last_radar(self) -> Optional[RadarCommand]:
        return self.radar[-1] if self.radar else None

    def clear(self) -> None:
        """Forget everything recorded so far."""
        self.torques.clear()
        self.accelerations.clear()
        self.shots.clear()
        self.radar.clear()
        self.scans = 0
