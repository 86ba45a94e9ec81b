#!/usr/bin/env python3
"""
Generate a kirigami pop-up design: folded mesh plus flat cut/fold pattern.

Every design parameter has a flag; --config loads a saved design.json first
and the flags given on the command line override it.

Usage:
    python scripts/generate_kirigami.py --algorithm sphere
    python scripts/generate_kirigami.py --algorithm ripple --cols 41 --rows 16 --fold 1.0
    python scripts/generate_kirigami.py --algorithm custom --formula "sin(x * 6 * f)" --paper a3
    python scripts/generate_kirigami.py --image skyline.png --cols 61 --png
    python scripts/generate_kirigami.py --config runs/latest/input/design.json --no-mesh
"""
import sys
import argparse
import logging
from dataclasses import replace
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from design_config import (
    Algorithm,
    DesignConfig,
    PAPER_SIZES,
    RasterImage,
    load_design_config,
)
from mesh_exporter import MESH_FILE_TYPES
from pipeline import PipelineConfig, run_pipeline_from_config

logger = logging.getLogger("generate_kirigami")

# argparse dest -> DesignConfig field
_FIELD_FLAGS = {
    "rows": "rows",
    "cols": "cols",
    "amplitude": "amplitude",
    "frequency": "frequency",
    "spread": "spread",
    "curvature": "curvature",
    "roughness": "roughness",
    "octaves": "fractal_octaves",
    "formula": "custom_formula",
    "fold": "fold_progress",
    "thickness": "thickness",
}


def _parse_sketch(raw: str):
    """Parse "x,y;x,y;..." into sketch points."""
    points = []
    for pair in raw.split(";"):
        pair = pair.strip()
        if not pair:
            continue
        try:
            x, y = (float(v) for v in pair.split(","))
        except ValueError:
            raise argparse.ArgumentTypeError(f"Bad sketch point {pair!r}, expected x,y")
        points.append((x, y))
    return tuple(points)


def _load_raster(path: str) -> RasterImage:
    """Decode an image file into a raster for the image profile."""
    from matplotlib import image as mpimg

    if not Path(path).is_file():
        raise FileNotFoundError(f"Image not found: {path}")
    try:
        pixels = mpimg.imread(path)
    except OSError as exc:
        raise ValueError(f"Cannot read image {path}: {exc}") from exc
    return RasterImage.from_array(pixels)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a kirigami pop-up mesh and cut/fold pattern.",
    )
    parser.add_argument(
        "--config", default=None,
        help="Load a design JSON first; other flags override its values",
    )
    parser.add_argument(
        "--name", default="kirigami",
        help="Design name used for the run folder (default: kirigami)",
    )
    parser.add_argument(
        "--algorithm", default=None,
        choices=[a.value for a in Algorithm],
        help="Profile algorithm (default: sphere)",
    )
    parser.add_argument("--rows", type=int, default=None,
                        help="Riser/tread pairs per active strip (default: 12)")
    parser.add_argument("--cols", type=int, default=None,
                        help="Number of strips (default: 31)")
    parser.add_argument("--amplitude", type=float, default=None,
                        help="Maximum pop-up height in mm (default: 50)")
    parser.add_argument("--frequency", type=float, default=None,
                        help="Wave frequency / primitive scale (default: 1.0)")
    parser.add_argument("--spread", type=float, default=None,
                        help="Gaussian/ripple width (default: 300)")
    parser.add_argument("--curvature", type=float, default=None,
                        help="Primitive shape exponent (default: 2)")
    parser.add_argument("--roughness", type=float, default=None,
                        help="Primitive roughness 0-1 (default: 0)")
    parser.add_argument("--octaves", type=int, default=None,
                        help="Fractal octaves (default: 3)")
    parser.add_argument("--formula", default=None,
                        help="Custom profile expression of x, f, i")
    parser.add_argument("--sketch", type=_parse_sketch, default=None,
                        help='Sketch control points, e.g. "0,0;0.5,0.8;1,0"')
    parser.add_argument(
        "--image", default=None,
        help="Image whose mid-height scanline drives the profile (selects --algorithm image)",
    )
    parser.add_argument("--fold", type=float, default=None,
                        help="Fold progress 0-1 (default: 0.8)")
    parser.add_argument("--thickness", type=float, default=None,
                        help="Material thickness in mm (default: 0.2)")
    parser.add_argument(
        "--paper", default=None, choices=sorted(PAPER_SIZES),
        help="Paper size (default: a4)",
    )
    parser.add_argument(
        "--runs-dir", default="runs",
        help="Root folder for run outputs (default: runs)",
    )
    parser.add_argument("--no-svg", action="store_true", help="Skip SVG export")
    parser.add_argument("--no-dxf", action="store_true", help="Skip DXF export")
    parser.add_argument("--png", action="store_true", help="Also render a PNG preview of the pattern")
    parser.add_argument("--no-mesh", action="store_true", help="Skip mesh export")
    parser.add_argument(
        "--mesh-format", default="glb", choices=list(MESH_FILE_TYPES),
        help="Mesh file type (default: glb)",
    )
    parser.add_argument("--no-checks", action="store_true",
                        help="Skip pattern checks")
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )
    return parser


def config_from_args(args) -> DesignConfig:
    """DesignConfig from --config (if any) with explicit flags applied."""
    config = load_design_config(args.config) if args.config else DesignConfig()

    overrides = {}
    if args.algorithm is not None:
        overrides["algorithm"] = Algorithm(args.algorithm)
    for dest, field_name in _FIELD_FLAGS.items():
        value = getattr(args, dest)
        if value is not None:
            overrides[field_name] = value
    if args.sketch is not None:
        overrides["sketch_points"] = args.sketch
    if args.image is not None:
        overrides["raster"] = _load_raster(args.image)
        if args.algorithm is None:
            overrides["algorithm"] = Algorithm.IMAGE
    if args.paper is not None:
        overrides["paper"] = PAPER_SIZES[args.paper]
    return replace(config, **overrides)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = config_from_args(args)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    if config.algorithm is Algorithm.IMAGE and config.raster is None:
        logger.warning("Image profile without --image: every column stays flat")

    pipeline_config = PipelineConfig(
        runs_dir=args.runs_dir,
        export_svg=not args.no_svg,
        export_dxf=not args.no_dxf,
        export_png=args.png,
        export_mesh=not args.no_mesh,
        mesh_file_type=args.mesh_format,
        run_pattern_checks=not args.no_checks,
    )

    print(f"Generating {args.name} ({config.algorithm.value}) ...")
    result = run_pipeline_from_config(config, args.name, pipeline_config)

    stats = result.geometry.stats
    print(f"\nResult: {result.status.upper()}")
    print(f"  Triangles: {stats.triangle_count}")
    print(f"  Cut length: {stats.total_cut_length:.1f} mm")
    print(f"  Fold length: {stats.total_fold_length:.1f} mm")
    for v in result.report.violations:
        print(f"  [{v.severity}] {v.rule_name}: {v.message}")

    for label, path in (("SVG", result.svg_path), ("DXF", result.dxf_path),
                        ("PNG", result.png_path), ("Mesh", result.mesh_path)):
        if path:
            print(f"  {label}: {path}")
    print(f"\nRun folder: {result.run_dir}")
    return 0 if result.status == "pass" else 1


if __name__ == "__main__":
    sys.exit(main())
