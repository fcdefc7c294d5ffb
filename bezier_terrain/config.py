"""Configuration helpers for deterministic terrain generation."""
from __future__ import annotations

import json
import os
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .control_net_generator import DEFAULT_ATTENUATION_RANGE
from .vector import Vector3

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


# //1.- Capture the optional noise pass that roughens the generated surface.
@dataclass(frozen=True)
class NoiseSettings:
    """Parameters of the vertical noise displacement."""

    enabled: bool = False
    scale: float = 1.0
    clamp_edges: bool = False
    amplitude: float = 1.0
    seed: int = 0
    edge_tolerance: float = 0.0

    def __post_init__(self) -> None:
        if self.scale <= 0.0:
            raise ValueError(f"noise scale must be > 0, got {self.scale}")
        if self.edge_tolerance < 0.0:
            raise ValueError(f"noise edge_tolerance must be >= 0, got {self.edge_tolerance}")

    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]] = None) -> "NoiseSettings":
        if not payload:
            return cls()
        return cls(
            enabled=_parse_bool(payload.get("enabled", False)),
            scale=float(payload.get("scale", 1.0)),
            clamp_edges=_parse_bool(payload.get("clamp_edges", False)),
            amplitude=float(payload.get("amplitude", 1.0)),
            seed=int(payload.get("seed", 0)),
            edge_tolerance=float(payload.get("edge_tolerance", 0.0)),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "scale": self.scale,
            "clamp_edges": self.clamp_edges,
            "amplitude": self.amplitude,
            "seed": self.seed,
            "edge_tolerance": self.edge_tolerance,
        }


# //2.- Aggregate every knob of a single terrain generation run.
@dataclass(frozen=True)
class TerrainParams:
    """Inputs to :class:`~bezier_terrain.terrain_generator.BezierTerrainGenerator`.

    ``half_width`` spans x and ``half_length`` spans z around ``origin``.
    The peak height is drawn uniformly from ``height_range`` on each run.
    """

    origin: Vector3 = field(default_factory=Vector3.zero)
    half_width: float = 10.0
    half_length: float = 10.0
    height_range: Tuple[float, float] = (10.0, 10.0)
    resolution: int = 1
    surface_resolution: int = 10
    attenuation_range: Tuple[int, int] = DEFAULT_ATTENUATION_RANGE
    noise: NoiseSettings = field(default_factory=NoiseSettings)
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.half_width < 0 or self.half_length < 0:
            raise ValueError(
                "half_width and half_length must be non-negative, "
                f"got ({self.half_width}, {self.half_length})"
            )
        low, high = self.height_range
        if low < 0 or high < low:
            raise ValueError(f"height_range must satisfy 0 <= min <= max, got {self.height_range}")
        for name in ("resolution", "surface_resolution"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be an integer >= 1, got {value!r}")
        att_low, att_high = self.attenuation_range
        if att_low < 1 or att_high <= att_low:
            raise ValueError(
                f"attenuation_range must satisfy 1 <= low < high, got {self.attenuation_range}"
            )

    # //3.- Parse JSON-style payloads, filling gaps with the defaults above.
    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]] = None) -> "TerrainParams":
        if not payload:
            return cls()
        defaults = cls()
        origin = payload.get("origin")
        height_range = payload.get("height_range", defaults.height_range)
        attenuation = payload.get("attenuation_range", defaults.attenuation_range)
        seed = payload.get("seed")
        return cls(
            origin=Vector3.from_iter(float(value) for value in origin) if origin else defaults.origin,
            half_width=float(payload.get("half_width", defaults.half_width)),
            half_length=float(payload.get("half_length", defaults.half_length)),
            height_range=(float(height_range[0]), float(height_range[1])),
            resolution=_parse_count(payload.get("resolution", defaults.resolution), "resolution"),
            surface_resolution=_parse_count(
                payload.get("surface_resolution", defaults.surface_resolution), "surface_resolution"
            ),
            attenuation_range=(int(attenuation[0]), int(attenuation[1])),
            noise=NoiseSettings.from_mapping(payload.get("noise")),
            seed=None if seed is None else int(seed),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "origin": list(self.origin.to_tuple()),
            "half_width": self.half_width,
            "half_length": self.half_length,
            "height_range": list(self.height_range),
            "resolution": self.resolution,
            "surface_resolution": self.surface_resolution,
            "attenuation_range": list(self.attenuation_range),
            "noise": self.noise.to_mapping(),
            "seed": self.seed,
        }


def _parse_count(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if not number.is_integer():
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return int(number)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean")


# //4.- Load a single JSON configuration file into terrain parameters.
def load_terrain_config(path: str) -> TerrainParams:
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Terrain config {path} must contain a JSON object")
    return TerrainParams.from_mapping(payload)


# //5.- Layer environment overrides on top of the mapping or file configuration.
def load_terrain_params(
    mapping: Optional[Mapping[str, Any]] = None,
    *,
    path: Optional[str] = None,
    env_prefix: str = "BEZIER_TERRAIN",
) -> TerrainParams:
    if mapping is not None:
        payload: Dict[str, Any] = dict(mapping)
    elif path is not None:
        payload = load_terrain_config(path).to_mapping()
    else:
        payload = {}

    seed = os.getenv(f"{env_prefix}_SEED")
    resolution = os.getenv(f"{env_prefix}_RESOLUTION")
    surface_resolution = os.getenv(f"{env_prefix}_SURFACE_RESOLUTION")
    noise = os.getenv(f"{env_prefix}_NOISE")
    if seed is not None:
        payload["seed"] = int(seed)
    if resolution is not None:
        payload["resolution"] = resolution
    if surface_resolution is not None:
        payload["surface_resolution"] = surface_resolution
    if noise is not None:
        noise_payload = dict(payload.get("noise") or {})
        noise_payload["enabled"] = _parse_bool(noise)
        payload["noise"] = noise_payload
    return TerrainParams.from_mapping(payload)


# //6.- Build the random source that drives peak selection and noise offsets.
def create_generator(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)
