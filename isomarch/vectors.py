from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IVec3:
    """Integer grid coordinate (cell index or corner index)."""

    x: int
    y: int
    z: int

    def __add__(self, other: IVec3) -> IVec3:
        return IVec3(self.x + other.x, self.y + other.y, self.z + other.z)


@dataclass(frozen=True)
class Vec3:
    """World-space point. Coordinates are plain Python floats (float64)."""

    x: float
    y: float
    z: float

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, s: float) -> Vec3:
        return Vec3(self.x * s, self.y * s, self.z * s)

    __rmul__ = __mul__

    def midpoint(self, other: Vec3) -> Vec3:
        return (self + other) * 0.5

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)
