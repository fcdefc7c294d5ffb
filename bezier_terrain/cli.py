"""Command line entry point for generating a terrain mesh."""
from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import TerrainParams, load_terrain_params
from .terrain_generator import TerrainResult, generate_terrain

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="bezier-terrain", description="Generate a Bezier patch mountain mesh."
    )
    ap.add_argument("--config", type=str, default=None, help="JSON file with terrain parameters")
    ap.add_argument("--seed", type=int, default=None, help="Seed for peak selection and noise")
    ap.add_argument("--width", type=float, default=None, help="Half extent along x")
    ap.add_argument("--length", type=float, default=None, help="Half extent along z")
    ap.add_argument("--height-min", type=float, default=None, help="Lowest peak height")
    ap.add_argument("--height-max", type=float, default=None, help="Highest peak height")
    ap.add_argument("--resolution", type=int, default=None, help="Patches per side")
    ap.add_argument(
        "--surface-resolution", type=int, default=None, help="Segments along the longer axis of each patch"
    )
    ap.add_argument("--noise", action="store_true", default=None, help="Apply vertical noise")
    ap.add_argument("--noise-scale", type=float, default=None, help="Noise sampling scale")
    ap.add_argument(
        "--clamp-edges", action="store_true", default=None, help="Keep boundary vertices flat under noise"
    )
    ap.add_argument("--output", type=str, default=None, help="Write the mesh as JSON to this path")
    ap.add_argument("--log-level", type=str, default="INFO", help="Logging level name")
    return ap


def resolve_params(args: argparse.Namespace) -> TerrainParams:
    """Merge file, environment and command line settings, flags winning."""

    payload: Dict[str, Any] = load_terrain_params(path=args.config).to_mapping()
    if args.seed is not None:
        payload["seed"] = args.seed
    if args.width is not None:
        payload["half_width"] = args.width
    if args.length is not None:
        payload["half_length"] = args.length
    low, high = payload["height_range"]
    if args.height_min is not None:
        low = args.height_min
    if args.height_max is not None:
        high = args.height_max
    payload["height_range"] = [low, high]
    if args.resolution is not None:
        payload["resolution"] = args.resolution
    if args.surface_resolution is not None:
        payload["surface_resolution"] = args.surface_resolution

    noise = payload["noise"]
    if args.noise is not None:
        noise["enabled"] = args.noise
    if args.noise_scale is not None:
        noise["scale"] = args.noise_scale
    if args.clamp_edges is not None:
        noise["clamp_edges"] = args.clamp_edges
    return TerrainParams.from_mapping(payload)


def result_to_mapping(result: TerrainResult, params: TerrainParams) -> Dict[str, Any]:
    vertices: List[List[float]] = [list(v.to_tuple()) for v in result.mesh.vertices]
    return {
        "vertices": vertices,
        "indices": list(result.mesh.indices),
        "patch_offsets": list(result.mesh.patch_offsets),
        "metadata": {
            "peak_index": result.peak.peak_index,
            "height": result.height,
            "u_resolution": result.u_resolution,
            "v_resolution": result.v_resolution,
            "noise_offset": list(result.noise_offset) if result.noise_offset else None,
            "params": params.to_mapping(),
        },
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # //1.- Configure stdout logging once, here, so library imports stay silent.
    level = getattr(logging, str(args.log_level).upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="[%(asctime)s] %(levelname)s %(message)s")

    # //2.- Reject invalid parameters with a distinct exit code.
    try:
        params = resolve_params(args)
        result = generate_terrain(params)
    except (ValueError, OSError) as exc:
        LOGGER.error("Terrain generation failed: %s", exc)
        return 2

    print(result.mesh.summary())
    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as handle:
                json.dump(result_to_mapping(result, params), handle, indent=2)
        except OSError as exc:
            LOGGER.error("Could not write terrain mesh: %s", exc)
            return 2
        LOGGER.info("Wrote terrain mesh to %s", args.output)
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised via ``python -m`` execution
    raise SystemExit(main())
