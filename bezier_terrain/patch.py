"""Evaluation of a single bicubic Bezier patch into vertices and triangles."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from .control_net import NET_SIDE, as_control_net
from .vector import Vector3

BERNSTEIN_BASIS = np.array(
    [
        [-1.0, 3.0, -3.0, 1.0],
        [3.0, -6.0, 3.0, 0.0],
        [-3.0, 3.0, 0.0, 0.0],
        [1.0, 0.0, 0.0, 0.0],
    ]
)
BERNSTEIN_BASIS.setflags(write=False)


@dataclass
class PatchBuffer:
    """Vertices and triangle indices for one evaluated patch.

    ``indices`` are already shifted by ``vertex_offset`` so they address the
    shared buffer the patch will be appended to.
    """

    vertices: List[Vector3]
    indices: List[int]
    u_resolution: int
    v_resolution: int
    vertex_offset: int = 0

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    def grid_vertex(self, u: int, v: int) -> Vector3:
        return self.vertices[u * (self.v_resolution + 1) + v]


def validate_resolution(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return int(value)


def bezier_coefficients(points: np.ndarray) -> np.ndarray:
    """Convert four control points ``(4, 3)`` into cubic coefficients ``(4, 3)``.

    Row ``k`` holds the per-axis coefficient of ``t**(3 - k)``.
    """

    points = np.asarray(points, dtype=float)
    if points.shape[0] != NET_SIDE:
        raise ValueError(f"A cubic Bezier curve needs 4 control points, got {points.shape[0]}")
    return BERNSTEIN_BASIS @ points


def _parameter_powers(resolution: int) -> np.ndarray:
    t = np.arange(resolution + 1, dtype=float) / resolution
    return np.stack([t**3, t**2, t, np.ones_like(t)], axis=1)


def evaluate_cubic(coefficients: np.ndarray, t: float) -> np.ndarray:
    return np.array([t**3, t**2, t, 1.0]) @ coefficients


def sample_curve(points: np.ndarray, resolution: int) -> np.ndarray:
    """Evaluate a cubic Bezier curve at ``resolution + 1`` evenly spaced ``t``.

    Coefficients are taken relative to the first control point, so a
    coordinate that is constant across all four points is reproduced
    exactly. The first and last samples are the end control points.
    """

    points = np.asarray(points, dtype=float)
    anchor = points[0]
    coefficients = bezier_coefficients(points - anchor)
    samples = anchor + _parameter_powers(resolution) @ coefficients
    samples[0] = points[0]
    samples[-1] = points[-1]
    return samples


def patch_triangles(u_resolution: int, v_resolution: int, vertex_offset: int = 0) -> List[int]:
    """Two triangles per grid cell, wound counter-clockwise seen from +y.

    With ``u`` along +x and ``v`` along +z the face normal of
    ``(a, a+1, a+stride)`` is ``(+z) x (+x) = +y``.
    """

    stride = v_resolution + 1
    indices: List[int] = []
    for u in range(u_resolution):
        for v in range(v_resolution):
            vert = vertex_offset + u * stride + v
            indices.extend([
                vert,
                vert + 1,
                vert + stride,
                vert + stride,
                vert + 1,
                vert + stride + 1,
            ])
    return indices


def patch_vertices(control_points: np.ndarray, u_resolution: int, v_resolution: int) -> np.ndarray:
    """Evaluate a ``(4, 4, 3)`` net into a ``((u+1) * (v+1), 3)`` vertex array."""

    # Each net column is a curve along u; sampling all four gives the
    # cross-section control points for every u step.
    cross_sections = np.stack(
        [sample_curve(control_points[:, col], u_resolution) for col in range(NET_SIDE)],
        axis=1,
    )
    rows = [sample_curve(section, v_resolution) for section in cross_sections]
    return np.concatenate(rows, axis=0)


def evaluate_patch(
    control_net: object,
    u_resolution: int,
    v_resolution: int,
    vertex_offset: int = 0,
) -> PatchBuffer:
    """Evaluate one patch into a :class:`PatchBuffer`.

    ``control_net`` must hold exactly 16 points; ``u_resolution`` and
    ``v_resolution`` are the segment counts along each axis. Every triangle
    index falls in ``[vertex_offset, vertex_offset + vertex_count)``.
    """

    net = as_control_net(control_net)
    u_resolution = validate_resolution(u_resolution, "u_resolution")
    v_resolution = validate_resolution(v_resolution, "v_resolution")
    if (
        isinstance(vertex_offset, bool)
        or not isinstance(vertex_offset, (int, np.integer))
        or vertex_offset < 0
    ):
        raise ValueError(f"vertex_offset must be a non-negative integer, got {vertex_offset!r}")
    vertex_offset = int(vertex_offset)

    grid = patch_vertices(net.as_array(), u_resolution, v_resolution)
    vertices = [Vector3(float(x), float(y), float(z)) for x, y, z in grid]
    indices = patch_triangles(u_resolution, v_resolution, vertex_offset)
    return PatchBuffer(
        vertices=vertices,
        indices=indices,
        u_resolution=u_resolution,
        v_resolution=v_resolution,
        vertex_offset=vertex_offset,
    )
