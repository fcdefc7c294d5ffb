"""Data structures describing the assembled terrain mesh."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .control_net import ControlNet
from .patch import evaluate_patch
from .vector import Vector3

LOGGER = logging.getLogger(__name__)


def _unit_normals(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    normals = np.cross(b - a, c - a)
    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    return np.divide(normals, lengths, out=np.zeros_like(normals), where=lengths > 0.0)


@dataclass
class TerrainMesh:
    """Shared vertex and triangle buffers for every patch of the terrain."""

    vertices: List[Vector3] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    patch_offsets: List[int] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def vertex_array(self) -> np.ndarray:
        if not self.vertices:
            return np.zeros((0, 3), dtype=float)
        return np.array([v.to_tuple() for v in self.vertices], dtype=float)

    def triangle_array(self) -> np.ndarray:
        return np.asarray(self.indices, dtype=np.int64).reshape(-1, 3)

    def patch_vertices(self, patch_index: int) -> List[Vector3]:
        start = self.patch_offsets[patch_index]
        if patch_index + 1 < len(self.patch_offsets):
            end = self.patch_offsets[patch_index + 1]
        else:
            end = len(self.vertices)
        return self.vertices[start:end]

    def _triangle_corners(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        positions = self.vertex_array()
        triangles = self.triangle_array()
        return positions[triangles[:, 0]], positions[triangles[:, 1]], positions[triangles[:, 2]]

    def face_normals(self) -> np.ndarray:
        """Unit normal per triangle; degenerate triangles get a zero vector."""

        return _unit_normals(*self._triangle_corners())

    def vertex_normals(self) -> np.ndarray:
        """Area-weighted unit normal per vertex."""

        a, b, c = self._triangle_corners()
        weighted = np.cross(b - a, c - a)
        accum = np.zeros((self.vertex_count, 3), dtype=float)
        triangles = self.triangle_array()
        for corner in range(3):
            np.add.at(accum, triangles[:, corner], weighted)
        lengths = np.linalg.norm(accum, axis=1, keepdims=True)
        return np.divide(accum, lengths, out=np.zeros_like(accum), where=lengths > 0.0)

    def bounds(self) -> Tuple[Vector3, Vector3]:
        if not self.vertices:
            return Vector3.zero(), Vector3.zero()
        positions = self.vertex_array()
        return Vector3.from_iter(positions.min(axis=0)), Vector3.from_iter(positions.max(axis=0))

    def surface(self) -> "MeshSurface":
        """Snapshot the triangle corners and normals for repeated ray casts."""

        a, b, c = self._triangle_corners()
        return MeshSurface(a=a, b=b, c=c, normals=_unit_normals(a, b, c))

    def raycast_down(self, x: float, z: float) -> Optional[Tuple[Vector3, Vector3]]:
        return self.surface().raycast_down(x, z)

    def height_at(self, x: float, z: float) -> Optional[float]:
        hit = self.raycast_down(x, z)
        if hit is None:
            return None
        return hit[0].y

    def summary(self) -> str:
        low, high = self.bounds()
        return (
            f"Terrain mesh: patches={len(self.patch_offsets)}, vertices={self.vertex_count}, "
            f"triangles={self.triangle_count}, height range=({low.y:.2f}, {high.y:.2f})"
        )


def build_terrain_mesh(
    patches: Iterable[ControlNet],
    u_resolution: int,
    v_resolution: int,
) -> TerrainMesh:
    """Evaluate every patch and stitch the results into one mesh.

    Each patch's triangle indices are shifted by the number of vertices
    already emitted so they address the shared vertex buffer.
    """

    mesh = TerrainMesh()
    for net in patches:
        offset = len(mesh.vertices)
        buffer = evaluate_patch(net, u_resolution, v_resolution, offset)
        mesh.patch_offsets.append(offset)
        mesh.vertices.extend(buffer.vertices)
        mesh.indices.extend(buffer.indices)

    LOGGER.debug(
        "Assembled %d patches into %d vertices and %d triangles",
        len(mesh.patch_offsets),
        mesh.vertex_count,
        mesh.triangle_count,
    )
    return mesh


@dataclass(frozen=True)
class MeshSurface:
    """Triangle corners ``(M, 3)`` and unit face normals of a mesh.

    Built once by :meth:`TerrainMesh.surface`; later edits to the mesh are
    not reflected.
    """

    a: np.ndarray
    b: np.ndarray
    c: np.ndarray
    normals: np.ndarray

    def raycast_down(self, x: float, z: float) -> Optional[Tuple[Vector3, Vector3]]:
        """Highest surface hit below ``(x, z)`` as ``(point, face_normal)``.

        Returns ``None`` when no triangle covers the column.
        """

        if len(self.a) == 0:
            return None
        a, b, c = self.a, self.b, self.c
        # Barycentric coordinates of (x, z) in each triangle's xz projection.
        e1 = b[:, [0, 2]] - a[:, [0, 2]]
        e2 = c[:, [0, 2]] - a[:, [0, 2]]
        rel = np.array([x, z], dtype=float) - a[:, [0, 2]]
        det = e1[:, 0] * e2[:, 1] - e1[:, 1] * e2[:, 0]
        valid = np.abs(det) > 1e-12
        safe_det = np.where(valid, det, 1.0)
        s = (rel[:, 0] * e2[:, 1] - rel[:, 1] * e2[:, 0]) / safe_det
        t = (e1[:, 0] * rel[:, 1] - e1[:, 1] * rel[:, 0]) / safe_det
        eps = 1e-9
        inside = valid & (s >= -eps) & (t >= -eps) & (s + t <= 1.0 + eps)
        if not np.any(inside):
            return None
        heights = a[:, 1] + s * (b[:, 1] - a[:, 1]) + t * (c[:, 1] - a[:, 1])
        candidates = np.flatnonzero(inside)
        best = candidates[np.argmax(heights[candidates])]
        point = Vector3(float(x), float(heights[best]), float(z))
        return point, Vector3.from_iter(self.normals[best])
