"""Coherent 2D noise and the vertical displacement pass applied to terrain."""
from __future__ import annotations

import math
import random
from typing import List, Optional, Sequence, Tuple

from .vector import Vector3

NOISE_OFFSET_RANGE = 999999.0


# -- Hash helpers ---------------------------------------------------------

def _hash2(seed: int, x: int, y: int) -> int:
    value = seed ^ (x * 374761393) ^ (y * 668265263)
    value = (value ^ (value >> 13)) * 1274126177
    value = value ^ (value >> 16)
    return value & 0xFFFFFFFF


def _gradient(seed: int, x: int, y: int) -> Tuple[float, float]:
    # Low byte picks one of 256 evenly spaced unit directions.
    angle = (_hash2(seed, x, y) & 0xFF) / 256.0 * math.tau
    return math.cos(angle), math.sin(angle)


def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


# -- Noise evaluators -----------------------------------------------------

def noise2(seed: int, x: float, y: float) -> float:
    """Classic Perlin-style gradient noise in 2D, roughly in ``[-0.71, 0.71]``."""

    xi = math.floor(x)
    yi = math.floor(y)
    xf = x - xi
    yf = y - yi

    dots = {}
    for dx in (0, 1):
        for dy in (0, 1):
            gx, gy = _gradient(seed, xi + dx, yi + dy)
            dots[(dx, dy)] = (xf - dx) * gx + (yf - dy) * gy

    u = _fade(xf)
    v = _fade(yf)
    x1 = _lerp(dots[(0, 0)], dots[(1, 0)], u)
    x2 = _lerp(dots[(0, 1)], dots[(1, 1)], u)
    return _lerp(x1, x2, v)


def perlin01(seed: int, x: float, y: float) -> float:
    """Gradient noise remapped into ``[0, 1]``."""

    value = 0.5 + noise2(seed, x, y) / math.sqrt(2.0)
    return min(1.0, max(0.0, value))


# -- Terrain displacement -------------------------------------------------

def is_edge_vertex(
    vertex: Vector3,
    origin: Vector3,
    half_width: float,
    half_length: float,
    tolerance: float = 0.0,
) -> bool:
    """Whether ``vertex`` lies on the outer bounding box in x or z."""

    edges_x = (origin.x - half_width, origin.x + half_width)
    edges_z = (origin.z - half_length, origin.z + half_length)
    return any(abs(vertex.x - edge) <= tolerance for edge in edges_x) or any(
        abs(vertex.z - edge) <= tolerance for edge in edges_z
    )


def draw_noise_offset(
    rng: random.Random, offset_range: float = NOISE_OFFSET_RANGE
) -> Tuple[float, float]:
    return rng.uniform(0.0, offset_range), rng.uniform(0.0, offset_range)


def apply_noise(
    vertices: List[Vector3],
    origin: Vector3,
    half_width: float,
    half_length: float,
    scale: float,
    clamp_edges: bool,
    rng: Optional[random.Random] = None,
    *,
    offset: Optional[Sequence[float]] = None,
    amplitude: float = 1.0,
    seed: int = 0,
    edge_tolerance: float = 0.0,
    in_place: bool = False,
) -> List[Vector3]:
    """Raise vertices by noise sampled at ``(x + ox, z + oz) * scale``.

    One offset pair is drawn from ``rng`` per call unless ``offset`` is
    supplied. With ``clamp_edges`` the vertices on the outer bounding box
    keep their height. Returns ``vertices`` itself when ``in_place``,
    otherwise a new list.
    """

    if scale <= 0.0:
        raise ValueError(f"noise scale must be > 0, got {scale}")
    if edge_tolerance < 0.0:
        raise ValueError(f"edge_tolerance must be >= 0, got {edge_tolerance}")
    if offset is None:
        offset_x, offset_z = draw_noise_offset(rng or random.Random())
    else:
        offset_x, offset_z = (float(value) for value in offset)

    result = vertices if in_place else list(vertices)
    for index, vertex in enumerate(result):
        if clamp_edges and is_edge_vertex(vertex, origin, half_width, half_length, edge_tolerance):
            continue
        sample = perlin01(seed, (vertex.x + offset_x) * scale, (vertex.z + offset_z) * scale)
        result[index] = vertex.with_y(vertex.y + amplitude * sample)
    return result
