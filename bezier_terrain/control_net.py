"""The 16-point control net shaping a single bicubic Bezier patch."""
from __future__ import annotations

from enum import IntEnum
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .vector import Vector3

CONTROL_NET_SIZE = 16
NET_SIDE = 4

LEFT_INDICES = (0, 1, 2, 3)
RIGHT_INDICES = (12, 13, 14, 15)
FRONT_INDICES = (3, 7, 11, 15)
BACK_INDICES = (0, 4, 8, 12)
MID_INDICES = (5, 6, 9, 10)


class Axis(IntEnum):
    X = 0
    Y = 1
    Z = 2


def _coerce_point(value: object) -> Vector3:
    if isinstance(value, Vector3):
        return value
    try:
        return Vector3.from_iter(value)  # type: ignore[arg-type]
    except TypeError as exc:
        raise ValueError(f"Control points must be 3D points, got {value!r}") from exc


class ControlNet:
    """Exactly sixteen control points laid out as a row-major 4x4 grid.

    ``index = row * 4 + col``. Rows run along the patch ``u`` direction and
    columns along ``v``. Passing a sequence of any other length raises
    :class:`ValueError`; passing nothing yields a zeroed net.
    """

    __slots__ = ("_points",)

    def __init__(self, points: Optional[Iterable[object]] = None) -> None:
        if points is None:
            self._points: List[Vector3] = [Vector3.zero() for _ in range(CONTROL_NET_SIZE)]
            return
        values = [_coerce_point(point) for point in points]
        if len(values) != CONTROL_NET_SIZE:
            raise ValueError(
                f"A control net needs exactly {CONTROL_NET_SIZE} points, got {len(values)}"
            )
        self._points = values

    @classmethod
    def from_grid(cls, rows: Sequence[Sequence[object]]) -> "ControlNet":
        if len(rows) != NET_SIDE or any(len(row) != NET_SIDE for row in rows):
            raise ValueError("A control net grid must be 4 rows of 4 points")
        return cls(point for row in rows for point in row)

    @property
    def points(self) -> Tuple[Vector3, ...]:
        return tuple(self._points)

    def __len__(self) -> int:
        return CONTROL_NET_SIZE

    def __getitem__(self, index: int) -> Vector3:
        return self._points[index]

    def __iter__(self) -> Iterator[Vector3]:
        return iter(self._points)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ControlNet):
            return NotImplemented
        return self._points == other._points

    def __repr__(self) -> str:
        return f"ControlNet({self._points!r})"

    def copy(self) -> "ControlNet":
        return ControlNet(self._points)

    def point(self, row: int, col: int) -> Vector3:
        if not (0 <= row < NET_SIDE and 0 <= col < NET_SIDE):
            raise IndexError(f"Control net cell ({row}, {col}) is out of range")
        return self._points[row * NET_SIDE + col]

    def row(self, row: int) -> Tuple[Vector3, ...]:
        return tuple(self.point(row, col) for col in range(NET_SIDE))

    def column(self, col: int) -> Tuple[Vector3, ...]:
        return tuple(self.point(row, col) for row in range(NET_SIDE))

    def as_array(self) -> np.ndarray:
        """Return the net as a ``(4, 4, 3)`` float array indexed ``[row, col]``."""

        return np.array([p.to_tuple() for p in self._points], dtype=float).reshape(
            NET_SIDE, NET_SIDE, 3
        )

    # -- Edge and interior views ---------------------------------------------

    @property
    def left(self) -> Tuple[Vector3, ...]:
        return self.get_points(LEFT_INDICES)

    @left.setter
    def left(self, values: Sequence[object]) -> None:
        self.set_points(LEFT_INDICES, values)

    @property
    def right(self) -> Tuple[Vector3, ...]:
        return self.get_points(RIGHT_INDICES)

    @right.setter
    def right(self, values: Sequence[object]) -> None:
        self.set_points(RIGHT_INDICES, values)

    @property
    def front(self) -> Tuple[Vector3, ...]:
        return self.get_points(FRONT_INDICES)

    @front.setter
    def front(self, values: Sequence[object]) -> None:
        self.set_points(FRONT_INDICES, values)

    @property
    def back(self) -> Tuple[Vector3, ...]:
        return self.get_points(BACK_INDICES)

    @back.setter
    def back(self, values: Sequence[object]) -> None:
        self.set_points(BACK_INDICES, values)

    @property
    def mid(self) -> Tuple[Vector3, ...]:
        return self.get_points(MID_INDICES)

    def get_points(self, indices: Sequence[int]) -> Tuple[Vector3, ...]:
        return tuple(self._points[index] for index in indices)

    def set_points(self, indices: Sequence[int], values: Sequence[object]) -> None:
        if len(values) != len(indices):
            raise ValueError(f"Expected {len(indices)} points, got {len(values)}")
        for index, value in zip(indices, values):
            self._points[index] = _coerce_point(value)

    def fill_points(self, indices: Sequence[int], value: object) -> None:
        point = _coerce_point(value)
        for index in indices:
            self._points[index] = point

    def set_coordinate(self, indices: Sequence[int], axis: Axis, value: float) -> None:
        for index in indices:
            components = list(self._points[index].to_tuple())
            components[int(axis)] = float(value)
            self._points[index] = Vector3.from_iter(components)

    def set_edge_values(self, value: object) -> None:
        """Set every boundary point (all four edges) to ``value``."""

        for indices in (FRONT_INDICES, BACK_INDICES, LEFT_INDICES, RIGHT_INDICES):
            self.fill_points(indices, value)

    def set_edge_coordinate(self, axis: Axis, value: float) -> None:
        """Set one coordinate of every boundary point, leaving the others intact."""

        for indices in (FRONT_INDICES, BACK_INDICES, LEFT_INDICES, RIGHT_INDICES):
            self.set_coordinate(indices, axis, value)

    def compute_points(
        self,
        left: Sequence[object],
        right: Sequence[object],
        front: Sequence[object],
        back: Sequence[object],
    ) -> None:
        """Assign the four edges in order, then derive the interior points."""

        self.left = left
        self.right = right
        self.front = front
        self.back = back
        self.interpolate_mid_points()

    def interpolate_mid_points(self) -> None:
        """Place each interior point at the centroid of its nearest corner triple."""

        p = self._points
        p[5] = (p[0] + p[1] + p[4]) / 3
        p[6] = (p[2] + p[3] + p[7]) / 3
        p[9] = (p[8] + p[12] + p[13]) / 3
        p[10] = (p[11] + p[14] + p[15]) / 3


def as_control_net(points: object) -> ControlNet:
    """Return ``points`` as a :class:`ControlNet`, validating the point count."""

    if isinstance(points, ControlNet):
        return points
    if points is None:
        raise ValueError("A control net is required")
    return ControlNet(points)  # type: ignore[arg-type]
