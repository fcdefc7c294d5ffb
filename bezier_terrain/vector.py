"""Lightweight 3D vector math utilities.

Terrain generation only needs value-typed points with a handful of
arithmetic helpers, so vectors are immutable dataclasses. Bulk math
(basis products, normals) converts to numpy arrays at the call site.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple


@dataclass(frozen=True)
class Vector3:
    """Immutable 3D vector with a handful of math helpers."""

    x: float
    y: float
    z: float

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vector3":
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def with_y(self, y: float) -> "Vector3":
        return Vector3(self.x, float(y), self.z)

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @staticmethod
    def zero() -> "Vector3":
        return Vector3(0.0, 0.0, 0.0)

    @staticmethod
    def unit_y() -> "Vector3":
        return Vector3(0.0, 1.0, 0.0)

    @staticmethod
    def from_iter(values: Iterable[float]) -> "Vector3":
        components = tuple(values)
        if len(components) != 3:
            raise ValueError(f"Vector3 requires exactly three components, got {len(components)}")
        x, y, z = components
        return Vector3(float(x), float(y), float(z))


Point3 = Vector3
