"""High-level terrain generation entry point."""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import TerrainParams, create_generator
from .control_net import ControlNet
from .control_net_generator import (
    PatchGrid,
    PeakSelection,
    generate_master_net,
    generate_terrain_patches,
    select_peak,
)
from .mesh import TerrainMesh, build_terrain_mesh
from .noise import apply_noise, draw_noise_offset

LOGGER = logging.getLogger(__name__)


def resolve_tessellation(
    half_width: float, half_length: float, surface_resolution: int
) -> Tuple[int, int]:
    """Split ``surface_resolution`` between the two axes by aspect ratio.

    The longer side gets the full resolution and the shorter one a
    proportional share rounded up, never below one segment. ``u`` runs along
    x (width) and ``v`` along z (length).
    """

    if isinstance(surface_resolution, bool) or not isinstance(surface_resolution, int):
        raise ValueError(f"surface_resolution must be an integer, got {surface_resolution!r}")
    if surface_resolution < 1:
        raise ValueError(f"surface_resolution must be >= 1, got {surface_resolution}")
    longest = max(half_width, half_length)
    if longest <= 0:
        return 1, 1

    def share(extent: float) -> int:
        if extent <= 0:
            return 1
        return max(1, math.ceil(extent / longest * surface_resolution))

    return share(half_width), share(half_length)


@dataclass(frozen=True)
class TerrainResult:
    """Everything produced by a single generation run."""

    mesh: TerrainMesh
    master_net: ControlNet
    patches: PatchGrid
    peak: PeakSelection
    height: float
    u_resolution: int
    v_resolution: int
    noise_offset: Optional[Tuple[float, float]] = None


class BezierTerrainGenerator:
    """Builds a single mountain-like terrain mesh from :class:`TerrainParams`.

    When no ``rng`` is given one is created from ``params.seed``, so equal
    seeds reproduce equal meshes.
    """

    def __init__(self, params: TerrainParams, rng: Optional[random.Random] = None) -> None:
        self.params = params
        self.rng = rng if rng is not None else create_generator(params.seed)

    def sample_height(self) -> float:
        low, high = self.params.height_range
        if low == high:
            return float(low)
        return self.rng.uniform(low, high)

    def generate(self) -> TerrainResult:
        params = self.params
        height = self.sample_height()
        peak = select_peak(self.rng, params.attenuation_range)
        master_net = generate_master_net(
            params.origin, params.half_width, height, params.half_length, peak=peak
        )
        patches = generate_terrain_patches(master_net, params.resolution)
        u_resolution, v_resolution = resolve_tessellation(
            params.half_width, params.half_length, params.surface_resolution
        )
        LOGGER.debug(
            "Tessellating %d patches at %dx%d segments each",
            len(patches),
            u_resolution,
            v_resolution,
        )
        mesh = build_terrain_mesh(patches, u_resolution, v_resolution)

        noise_offset = None
        if params.noise.enabled:
            noise_offset = draw_noise_offset(self.rng)
            apply_noise(
                mesh.vertices,
                params.origin,
                params.half_width,
                params.half_length,
                params.noise.scale,
                params.noise.clamp_edges,
                offset=noise_offset,
                amplitude=params.noise.amplitude,
                seed=params.noise.seed,
                edge_tolerance=params.noise.edge_tolerance,
                in_place=True,
            )
            LOGGER.debug("Applied noise with offset (%.3f, %.3f)", *noise_offset)

        LOGGER.info(
            "Generated terrain: peak index %d, height %.2f, %d vertices, %d triangles",
            peak.peak_index,
            height,
            mesh.vertex_count,
            mesh.triangle_count,
        )
        return TerrainResult(
            mesh=mesh,
            master_net=master_net,
            patches=patches,
            peak=peak,
            height=height,
            u_resolution=u_resolution,
            v_resolution=v_resolution,
            noise_offset=noise_offset,
        )


def generate_terrain(params: TerrainParams, rng: Optional[random.Random] = None) -> TerrainResult:
    return BezierTerrainGenerator(params, rng).generate()
