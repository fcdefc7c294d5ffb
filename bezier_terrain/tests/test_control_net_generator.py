"""Tests for master net construction and patch slicing."""
from __future__ import annotations

import random
from collections import Counter

import pytest

from bezier_terrain.control_net import BACK_INDICES, FRONT_INDICES, LEFT_INDICES, MID_INDICES, RIGHT_INDICES
from bezier_terrain.control_net_generator import (
    PeakSelection,
    compute_jumps,
    generate_master_net,
    generate_terrain_patches,
    patch_base_index,
    select_peak,
)
from bezier_terrain.patch import evaluate_patch
from bezier_terrain.vector import Vector3

BOUNDARY = set(LEFT_INDICES + RIGHT_INDICES + FRONT_INDICES + BACK_INDICES)


def test_master_net_spans_bounding_box() -> None:
    origin = Vector3(5.0, 2.0, -3.0)
    net = generate_master_net(origin, 10.0, 8.0, 4.0, random.Random(1))
    assert net[0] == Vector3(-5.0, 2.0, -7.0)
    assert net[3] == Vector3(-5.0, 2.0, 1.0)
    assert net[12] == Vector3(15.0, 2.0, -7.0)
    assert net[15] == Vector3(15.0, 2.0, 1.0)
    assert net.point(1, 2).x == pytest.approx(0.0)
    assert all(net[index].y == 2.0 for index in BOUNDARY)


def test_peak_receives_full_height_and_others_are_damped() -> None:
    rng = random.Random(7)
    net = generate_master_net(Vector3.zero(), 10.0, 12.0, 10.0, rng)
    heights = sorted(net[index].y for index in MID_INDICES)
    assert heights[-1] == 12.0
    for height in heights[:-1]:
        assert height in (12.0 / 2, 12.0 / 3, 12.0 / 4)


def test_explicit_peak_selection_is_applied() -> None:
    peak = PeakSelection(peak_index=9, denominators=((5, 2), (6, 3), (10, 4)))
    net = generate_master_net(Vector3.zero(), 1.0, 6.0, 1.0, peak=peak)
    assert net[9].y == 6.0
    assert net[5].y == 3.0
    assert net[6].y == 2.0
    assert net[10].y == 1.5


def test_invalid_peak_selection_is_rejected() -> None:
    with pytest.raises(ValueError):
        PeakSelection(peak_index=4, denominators=((5, 2), (6, 3), (10, 4)))
    with pytest.raises(ValueError):
        PeakSelection(peak_index=5, denominators=((6, 3), (10, 4)))
    with pytest.raises(ValueError):
        PeakSelection(peak_index=5, denominators=((6, 0), (9, 2), (10, 4)))


def test_peak_choice_is_roughly_uniform() -> None:
    rng = random.Random(2024)
    counts = Counter(select_peak(rng).peak_index for _ in range(4000))
    assert set(counts) == set(MID_INDICES)
    for index in MID_INDICES:
        assert 850 <= counts[index] <= 1150


def test_denominators_stay_in_half_open_range() -> None:
    rng = random.Random(3)
    seen = set()
    for _ in range(500):
        seen.update(k for _, k in select_peak(rng, (2, 5)).denominators)
    assert seen == {2, 3, 4}
    with pytest.raises(ValueError):
        select_peak(rng, (3, 3))
    with pytest.raises(ValueError):
        select_peak(rng, (0, 2))


def test_negative_dimensions_are_rejected() -> None:
    with pytest.raises(ValueError):
        generate_master_net(Vector3.zero(), -1.0, 1.0, 1.0, random.Random(0))
    with pytest.raises(ValueError):
        generate_master_net(Vector3.zero(), 1.0, 1.0, -1.0, random.Random(0))
    with pytest.raises(ValueError):
        generate_master_net(Vector3.zero(), 1.0, -1.0, 1.0, random.Random(0))


def test_jump_table_follows_dense_grid_stride() -> None:
    assert compute_jumps(1) == tuple(range(16))
    assert compute_jumps(2) == (0, 1, 2, 3, 7, 8, 9, 10, 14, 15, 16, 17, 21, 22, 23, 24)
    assert compute_jumps(3)[4] == 10
    assert patch_base_index(1, 1, 2) == 24
    assert patch_base_index(0, 2, 3) == 6
    with pytest.raises(IndexError):
        patch_base_index(2, 0, 2)


def test_single_patch_is_the_evaluated_master_grid() -> None:
    master = generate_master_net(Vector3.zero(), 10.0, 10.0, 10.0, random.Random(5))
    grid = generate_terrain_patches(master, 1)
    assert len(grid) == 1
    assert list(grid[0]) == evaluate_patch(master, 3, 3).vertices


def test_neighbouring_patches_share_edge_controls() -> None:
    master = generate_master_net(Vector3.zero(), 10.0, 10.0, 10.0, random.Random(9))
    grid = generate_terrain_patches(master, 3)
    assert len(grid) == 9
    for row in range(3):
        for col in range(3):
            patch = grid.patch(row, col)
            if row + 1 < 3:
                assert patch.row(3) == grid.patch(row + 1, col).row(0)
            if col + 1 < 3:
                assert patch.column(3) == grid.patch(row, col + 1).column(0)
    assert grid.patch(0, 0)[0] == master[0]
    assert grid.patch(2, 2)[15] == master[15]


def test_invalid_resolution_is_rejected() -> None:
    master = generate_master_net(Vector3.zero(), 1.0, 1.0, 1.0, random.Random(0))
    with pytest.raises(ValueError):
        generate_terrain_patches(master, 0)
