"""Bezier terrain package.

Generates a single mountain-like terrain mesh from a tiled grid of
bicubic Bezier patches, with an optional noise pass and prop scattering.
"""

from .vector import Vector3
from .control_net import Axis, ControlNet
from .patch import PatchBuffer, evaluate_patch
from .control_net_generator import (
    PatchGrid,
    PeakSelection,
    compute_jumps,
    generate_master_net,
    generate_terrain_patches,
    select_peak,
)
from .mesh import TerrainMesh, build_terrain_mesh
from .noise import apply_noise, perlin01
from .config import NoiseSettings, TerrainParams, load_terrain_config, load_terrain_params
from .terrain_generator import BezierTerrainGenerator, TerrainResult, generate_terrain, resolve_tessellation
from .placement import Placement, PlacementRule, scatter_placements

__all__ = [
    "Vector3",
    "Axis",
    "ControlNet",
    "PatchBuffer",
    "evaluate_patch",
    "PatchGrid",
    "PeakSelection",
    "compute_jumps",
    "generate_master_net",
    "generate_terrain_patches",
    "select_peak",
    "TerrainMesh",
    "build_terrain_mesh",
    "apply_noise",
    "perlin01",
    "NoiseSettings",
    "TerrainParams",
    "load_terrain_config",
    "load_terrain_params",
    "BezierTerrainGenerator",
    "TerrainResult",
    "generate_terrain",
    "resolve_tessellation",
    "Placement",
    "PlacementRule",
    "scatter_placements",
]
