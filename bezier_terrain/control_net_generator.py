"""Master control net construction and re-slicing into a grid of patches."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from .control_net import MID_INDICES, NET_SIDE, Axis, ControlNet
from .patch import evaluate_patch, validate_resolution
from .vector import Vector3

LOGGER = logging.getLogger(__name__)

DEFAULT_ATTENUATION_RANGE: Tuple[int, int] = (2, 5)
SEGMENTS_PER_PATCH = NET_SIDE - 1


@dataclass(frozen=True)
class PeakSelection:
    """Which interior point becomes the summit, and how the others are damped.

    ``denominators`` maps each non-peak interior index to the integer ``k``
    its height is divided by.
    """

    peak_index: int
    denominators: Tuple[Tuple[int, int], ...]

    def __post_init__(self) -> None:
        if self.peak_index not in MID_INDICES:
            raise ValueError(f"peak_index must be one of {MID_INDICES}, got {self.peak_index}")
        expected = set(MID_INDICES) - {self.peak_index}
        indices = [index for index, _ in self.denominators]
        if sorted(indices) != sorted(expected):
            raise ValueError(f"denominators must cover exactly {sorted(expected)}, got {indices}")
        for index, denominator in self.denominators:
            if denominator < 1:
                raise ValueError(f"denominator for index {index} must be >= 1, got {denominator}")

    def applied_heights(self, height: float) -> Dict[int, float]:
        heights = {self.peak_index: float(height)}
        for index, denominator in self.denominators:
            heights[index] = float(height) / denominator
        return heights


def _validate_attenuation_range(attenuation_range: Tuple[int, int]) -> Tuple[int, int]:
    low, high = (int(value) for value in attenuation_range)
    if low < 1:
        raise ValueError(f"attenuation range low must be >= 1, got {low}")
    if high <= low:
        raise ValueError(f"attenuation range high must exceed low, got ({low}, {high})")
    return low, high


def select_peak(
    rng: random.Random,
    attenuation_range: Tuple[int, int] = DEFAULT_ATTENUATION_RANGE,
) -> PeakSelection:
    """Pick the peak uniformly from the interior points.

    Each remaining interior point draws its own denominator from
    ``[low, high)`` (inclusive low, exclusive high).
    """

    low, high = _validate_attenuation_range(attenuation_range)
    peak_index = rng.choice(MID_INDICES)
    denominators = tuple(
        (index, rng.randrange(low, high)) for index in MID_INDICES if index != peak_index
    )
    return PeakSelection(peak_index=peak_index, denominators=denominators)


def generate_master_net(
    origin: Vector3,
    half_width: float,
    height: float,
    half_length: float,
    rng: Optional[random.Random] = None,
    *,
    attenuation_range: Tuple[int, int] = DEFAULT_ATTENUATION_RANGE,
    peak: Optional[PeakSelection] = None,
) -> ControlNet:
    """Build the outer 4x4 net spanning ``origin +/- (half_width, half_length)``.

    Rows step along x and columns along z. Boundary points sit at the
    origin's height; the four interior points are raised according to
    ``peak`` (drawn from ``rng`` when not given).
    """

    if not isinstance(origin, Vector3):
        origin = Vector3.from_iter(origin)
    if half_width < 0 or half_length < 0:
        raise ValueError(
            f"half_width and half_length must be non-negative, got ({half_width}, {half_length})"
        )
    if height < 0:
        raise ValueError(f"height must be non-negative, got {height}")
    if peak is None:
        peak = select_peak(rng or random.Random(), attenuation_range)

    xs = (-half_width, -half_width / 2, half_width / 2, half_width)
    zs = (-half_length, -half_length / 2, half_length / 2, half_length)
    net = ControlNet(
        origin + Vector3(float(xs[row]), 0.0, float(zs[col]))
        for row in range(NET_SIDE)
        for col in range(NET_SIDE)
    )
    net.set_edge_coordinate(Axis.Y, origin.y)
    for index, applied in peak.applied_heights(height).items():
        net.set_coordinate((index,), Axis.Y, origin.y + applied)

    LOGGER.debug(
        "Master net built with peak at index %d (height %.3f)", peak.peak_index, height
    )
    return net


def dense_side(resolution: int) -> int:
    return SEGMENTS_PER_PATCH * resolution + 1


def compute_jumps(resolution: int) -> Tuple[int, ...]:
    """Offsets of a patch's 16 control points relative to its base index.

    The master net is evaluated on a ``(3R + 1) x (3R + 1)`` grid, so the
    jump between successive control-point rows is ``3R + 1``.
    """

    resolution = validate_resolution(resolution, "resolution")
    jump = dense_side(resolution)
    return tuple(row * jump + col for row in range(NET_SIDE) for col in range(NET_SIDE))


def patch_base_index(row: int, col: int, resolution: int) -> int:
    if not (0 <= row < resolution and 0 <= col < resolution):
        raise IndexError(f"Patch ({row}, {col}) is outside a {resolution}x{resolution} grid")
    return SEGMENTS_PER_PATCH * (row * dense_side(resolution) + col)


@dataclass(frozen=True)
class PatchGrid:
    """Row-major ``resolution x resolution`` control nets."""

    resolution: int
    patches: Tuple[ControlNet, ...]

    def __post_init__(self) -> None:
        if len(self.patches) != self.resolution * self.resolution:
            raise ValueError(
                f"A {self.resolution}x{self.resolution} grid needs "
                f"{self.resolution * self.resolution} patches, got {len(self.patches)}"
            )

    def __len__(self) -> int:
        return len(self.patches)

    def __iter__(self) -> Iterator[ControlNet]:
        return iter(self.patches)

    def __getitem__(self, index: int) -> ControlNet:
        return self.patches[index]

    def patch(self, row: int, col: int) -> ControlNet:
        if not (0 <= row < self.resolution and 0 <= col < self.resolution):
            raise IndexError(f"Patch ({row}, {col}) is outside the grid")
        return self.patches[row * self.resolution + col]


def generate_terrain_patches(master_net: ControlNet, resolution: int) -> PatchGrid:
    """Split the terrain described by ``master_net`` into ``resolution**2`` patches.

    Neighbouring patches share the dense-grid points along their common
    edge, so their evaluated borders coincide.
    """

    resolution = validate_resolution(resolution, "resolution")
    segments = SEGMENTS_PER_PATCH * resolution
    dense = evaluate_patch(master_net, segments, segments)

    if resolution == 1:
        return PatchGrid(resolution=1, patches=(ControlNet(dense.vertices),))

    jumps = compute_jumps(resolution)
    patches = []
    for surface in range(resolution * resolution):
        row, col = divmod(surface, resolution)
        base = patch_base_index(row, col, resolution)
        patches.append(ControlNet(dense.vertices[base + jump] for jump in jumps))

    LOGGER.debug(
        "Sliced %d patches from a %dx%d dense grid", len(patches), segments + 1, segments + 1
    )
    return PatchGrid(resolution=resolution, patches=tuple(patches))
