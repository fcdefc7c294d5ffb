"""Tests for the high-level terrain generator."""
from __future__ import annotations

import random

import pytest

from bezier_terrain.config import NoiseSettings, TerrainParams
from bezier_terrain.control_net import MID_INDICES
from bezier_terrain.noise import is_edge_vertex
from bezier_terrain.terrain_generator import (
    BezierTerrainGenerator,
    generate_terrain,
    resolve_tessellation,
)
from bezier_terrain.vector import Vector3


def _make_params(**overrides: object) -> TerrainParams:
    base = dict(
        half_width=10.0,
        half_length=10.0,
        height_range=(10.0, 10.0),
        resolution=2,
        surface_resolution=3,
        seed=1234,
    )
    base.update(overrides)
    return TerrainParams(**base)


class TestResolveTessellation:
    def test_square_terrain_uses_full_resolution(self) -> None:
        assert resolve_tessellation(10.0, 10.0, 10) == (10, 10)

    def test_shorter_axis_gets_proportional_share(self) -> None:
        assert resolve_tessellation(20.0, 5.0, 10) == (10, 3)
        assert resolve_tessellation(5.0, 20.0, 10) == (3, 10)
        assert resolve_tessellation(100.0, 1.0, 4) == (4, 1)

    def test_degenerate_extents_fall_back_to_one(self) -> None:
        assert resolve_tessellation(0.0, 0.0, 5) == (1, 1)
        assert resolve_tessellation(10.0, 0.0, 5) == (5, 1)

    def test_invalid_resolution_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            resolve_tessellation(10.0, 10.0, 0)


class TestBezierTerrainGenerator:
    def test_counts_follow_patch_and_surface_resolution(self) -> None:
        result = generate_terrain(_make_params())
        assert len(result.patches) == 4
        assert (result.u_resolution, result.v_resolution) == (3, 3)
        assert result.mesh.vertex_count == 4 * 16
        assert len(result.mesh.indices) == 4 * 3 * 3 * 6
        assert result.noise_offset is None

    def test_equal_seeds_reproduce_the_mesh(self) -> None:
        first = generate_terrain(_make_params(height_range=(5.0, 15.0)))
        second = generate_terrain(_make_params(height_range=(5.0, 15.0)))
        assert first.mesh.vertices == second.mesh.vertices
        assert first.peak == second.peak
        assert 5.0 <= first.height <= 15.0

    def test_injected_generator_takes_precedence(self) -> None:
        params = _make_params(seed=None)
        first = BezierTerrainGenerator(params, random.Random(9)).generate()
        second = BezierTerrainGenerator(params, random.Random(9)).generate()
        assert first.mesh.vertices == second.mesh.vertices

    def test_peak_and_boundary_heights(self) -> None:
        result = generate_terrain(_make_params(origin=Vector3(0.0, 2.0, 0.0)))
        assert result.peak.peak_index in MID_INDICES
        assert result.master_net[result.peak.peak_index].y == 12.0
        origin = Vector3(0.0, 2.0, 0.0)
        for vertex in result.mesh.vertices:
            if is_edge_vertex(vertex, origin, 10.0, 10.0):
                assert vertex.y == 2.0
            assert 2.0 - 1e-9 <= vertex.y <= 12.0 + 1e-9

    def test_clamped_noise_leaves_boundary_flat(self) -> None:
        noise = NoiseSettings(enabled=True, scale=0.3, clamp_edges=True, amplitude=2.0)
        plain = generate_terrain(_make_params())
        noisy = generate_terrain(_make_params(noise=noise))
        assert noisy.noise_offset is not None
        raised = 0
        for before, after in zip(plain.mesh.vertices, noisy.mesh.vertices):
            if is_edge_vertex(before, Vector3.zero(), 10.0, 10.0):
                assert after == before
            elif after.y > before.y:
                raised += 1
        assert raised > 0

    def test_unclamped_noise_lifts_boundary(self) -> None:
        noise = NoiseSettings(enabled=True, scale=0.3)
        noisy = generate_terrain(_make_params(noise=noise))
        edge_heights = [
            vertex.y
            for vertex in noisy.mesh.vertices
            if is_edge_vertex(vertex, Vector3.zero(), 10.0, 10.0)
        ]
        assert edge_heights
        assert any(height > 0.0 for height in edge_heights)
