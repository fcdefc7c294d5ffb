from __future__ import annotations

import random
import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure the bezier_terrain package is importable when running tests from repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from bezier_terrain.control_net_generator import (  # noqa: E402
    generate_master_net,
    generate_terrain_patches,
)
from bezier_terrain.mesh import build_terrain_mesh  # noqa: E402
from bezier_terrain.patch import evaluate_patch  # noqa: E402
from bezier_terrain.vector import Vector3  # noqa: E402


def _edge(buffer, side: str):
    last_u, last_v = buffer.u_resolution, buffer.v_resolution
    if side == "u_end":
        return [buffer.grid_vertex(last_u, v) for v in range(last_v + 1)]
    if side == "u_start":
        return [buffer.grid_vertex(0, v) for v in range(last_v + 1)]
    if side == "v_end":
        return [buffer.grid_vertex(u, last_v) for u in range(last_u + 1)]
    return [buffer.grid_vertex(u, 0) for u in range(last_u + 1)]


class TestPatchStitching:
    @pytest.mark.parametrize("resolution", [1, 2, 3, 4, 5])
    def test_neighbouring_patch_edges_are_identical(self, resolution: int) -> None:
        master = generate_master_net(
            Vector3(3.0, -1.0, 7.0), 12.0, 9.0, 8.0, random.Random(resolution)
        )
        grid = generate_terrain_patches(master, resolution)
        buffers = {
            (row, col): evaluate_patch(grid.patch(row, col), 4, 3)
            for row in range(resolution)
            for col in range(resolution)
        }
        for (row, col), buffer in buffers.items():
            if row + 1 < resolution:
                assert _edge(buffer, "u_end") == _edge(buffers[(row + 1, col)], "u_start")
            if col + 1 < resolution:
                assert _edge(buffer, "v_end") == _edge(buffers[(row, col + 1)], "v_start")

    @pytest.mark.parametrize("resolution", [1, 2, 3, 4, 5])
    def test_assembled_mesh_is_well_formed(self, resolution: int) -> None:
        master = generate_master_net(Vector3.zero(), 10.0, 10.0, 10.0, random.Random(42))
        grid = generate_terrain_patches(master, resolution)
        mesh = build_terrain_mesh(grid, 3, 2)
        assert mesh.vertex_count == resolution * resolution * 4 * 3
        assert len(mesh.indices) == resolution * resolution * 3 * 2 * 6
        triangles = mesh.triangle_array()
        assert triangles.min() >= 0
        assert triangles.max() < mesh.vertex_count
        assert np.all(mesh.face_normals()[:, 1] > 0.0)
        low, high = mesh.bounds()
        assert (low.x, low.z, high.x, high.z) == (-10.0, -10.0, 10.0, 10.0)
