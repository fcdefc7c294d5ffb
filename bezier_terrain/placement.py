"""Noise-driven scattering of props across a generated terrain mesh."""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .mesh import MeshSurface, TerrainMesh
from .noise import draw_noise_offset, perlin01
from .vector import Vector3

LOGGER = logging.getLogger(__name__)


# //1.- Describe when and where one kind of prop may appear.
@dataclass(frozen=True)
class PlacementRule:
    """Noise thresholds, height band and grid density for one prop kind.

    ``density`` is the number of grid cells per axis across the full
    placement area.
    """

    name: str
    min_threshold: float = 0.0
    max_threshold: float = 1.0
    min_height: float = 0.0
    max_height: float = 100.0
    density: float = 1.0
    align_with_normal: bool = False

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_threshold <= self.max_threshold <= 1.0:
            raise ValueError(
                "thresholds must satisfy 0 <= min <= max <= 1, "
                f"got ({self.min_threshold}, {self.max_threshold})"
            )
        if self.max_height < self.min_height:
            raise ValueError(
                f"height band must satisfy min <= max, got ({self.min_height}, {self.max_height})"
            )
        if self.density < 1.0:
            raise ValueError(f"density must be >= 1, got {self.density}")

    def valid_noise_value(self, value: float) -> bool:
        return self.min_threshold <= value <= self.max_threshold

    def can_spawn(self, value: float, height: float) -> bool:
        """Check ``value`` against a threshold that rises with ``height``.

        At ``min_height`` the threshold is ``min_threshold``; at
        ``max_height`` it reaches ``max_threshold``. Heights outside the band
        never spawn.
        """

        if not self.min_height <= height <= self.max_height:
            return False
        band = self.max_height - self.min_height
        t = (height - self.min_height) / band if band > 0.0 else 0.0
        threshold = self.min_threshold + (self.max_threshold - self.min_threshold) * t
        return threshold <= value <= self.max_threshold


# //2.- Record a single accepted spawn location.
@dataclass(frozen=True)
class Placement:
    rule: PlacementRule
    position: Vector3
    normal: Vector3


# //3.- Lay out cell anchors; x includes the far edge and z excludes it.
def _cell_positions(
    origin: Vector3, half_width: float, half_length: float, density: float
) -> Tuple[List[float], List[float], Tuple[float, float]]:
    cell_x = 2.0 * half_width / density
    cell_z = 2.0 * half_length / density
    count_x = math.floor(density) + 1 if half_width > 0 else 1
    count_z = math.ceil(density) if half_length > 0 else 1
    xs = [origin.x - half_width + i * cell_x for i in range(count_x)]
    zs = [origin.z - half_length + j * cell_z for j in range(count_z)]
    return xs, zs, (cell_x, cell_z)


def _scatter_rule(
    surface: MeshSurface,
    origin: Vector3,
    half_width: float,
    half_length: float,
    rule: PlacementRule,
    rng: random.Random,
    offset: Tuple[float, float],
    scale: float,
    seed: int,
) -> List[Placement]:
    xs, zs, (cell_x, cell_z) = _cell_positions(origin, half_width, half_length, rule.density)
    placements: List[Placement] = []
    for x in xs:
        for z in zs:
            value = perlin01(seed, (x + offset[0]) * scale, (z + offset[1]) * scale)
            if not rule.valid_noise_value(value):
                continue
            # //4.- Jitter inside the cell, then drop the candidate onto the surface.
            candidate_x = rng.uniform(x - cell_x / 2.0, x + cell_x / 2.0)
            candidate_z = rng.uniform(z - cell_z / 2.0, z + cell_z / 2.0)
            hit = surface.raycast_down(candidate_x, candidate_z)
            if hit is None:
                continue
            point, normal = hit
            if not rule.can_spawn(value, point.y):
                continue
            placements.append(
                Placement(
                    rule=rule,
                    position=point,
                    normal=normal if rule.align_with_normal else Vector3.unit_y(),
                )
            )
    return placements


# //5.- Scatter every rule over the terrain using one shared noise offset.
def scatter_placements(
    mesh: TerrainMesh,
    origin: Vector3,
    half_width: float,
    half_length: float,
    rules: Iterable[PlacementRule],
    rng: random.Random,
    *,
    scale: float = 1.0,
    seed: int = 0,
) -> List[Placement]:
    if scale <= 0.0:
        raise ValueError(f"placement noise scale must be > 0, got {scale}")
    if half_width < 0 or half_length < 0:
        raise ValueError(
            f"half_width and half_length must be non-negative, got ({half_width}, {half_length})"
        )
    offset = draw_noise_offset(rng)
    surface = mesh.surface()
    placements: List[Placement] = []
    for rule in rules:
        spawned = _scatter_rule(
            surface, origin, half_width, half_length, rule, rng, offset, scale, seed
        )
        LOGGER.debug("Placed %d instances of %s", len(spawned), rule.name)
        placements.extend(spawned)
    return placements
