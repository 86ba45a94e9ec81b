"""Single-path pipeline: design config -> kirigami geometry -> run artifacts."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from design_config import DesignConfig
from dxf_exporter import pattern_to_dxf
from kirigami_engine import GeometryOutput, generate_kirigami_geometry
from mesh_exporter import MESH_FILE_TYPES, export_mesh
from pattern_checks import PatternReport, check_pattern
from png_exporter import pattern_to_png
from run_protocol import (
    prepare_run_dir,
    slugify,
    snapshot_design,
    update_latest_pointer,
    write_json,
    write_text,
)
from strip_builder import StripRole
from svg_exporter import pattern_to_svg

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    runs_dir: str = "runs"
    export_svg: bool = True
    export_dxf: bool = True
    export_png: bool = False
    export_mesh: bool = True
    mesh_file_type: str = "glb"
    run_pattern_checks: bool = True


@dataclass
class PipelineResult:
    run_id: str
    run_dir: str
    design_json_path: str
    metrics_path: str
    summary_path: str
    manifest_path: str
    status: str
    svg_path: Optional[str] = None
    dxf_path: Optional[str] = None
    png_path: Optional[str] = None
    mesh_path: Optional[str] = None
    geometry: Optional[GeometryOutput] = None
    report: PatternReport = field(default_factory=PatternReport)


def run_pipeline_from_config(
    config: DesignConfig,
    design_name: str = "design",
    pipeline_config: Optional[PipelineConfig] = None,
) -> PipelineResult:
    """Generate one design and write its run folder.

    Args:
        config: Design to generate.
        design_name: Used for the run id and artifact file names.
        pipeline_config: Which artifacts to write and where.

    Returns:
        PipelineResult with the paths written and the generated geometry.
    """
    if pipeline_config is None:
        pipeline_config = PipelineConfig()
    if pipeline_config.export_mesh and pipeline_config.mesh_file_type not in MESH_FILE_TYPES:
        raise ValueError(
            f"Unsupported mesh file type {pipeline_config.mesh_file_type!r}; "
            f"use one of {MESH_FILE_TYPES}"
        )

    started = time.perf_counter()
    paths = prepare_run_dir(pipeline_config.runs_dir, design_name)
    design_json_path = snapshot_design(config, paths)

    logger.info(
        "Generating %s: %s, %d cols x %d rows",
        design_name, config.algorithm.value, config.cols, config.rows,
    )
    geometry = generate_kirigami_geometry(config)
    effective = config.clamped()

    report = PatternReport()
    if pipeline_config.run_pattern_checks:
        report = check_pattern(geometry, effective)
    status = "fail" if report.errors else "pass"

    stem = slugify(design_name)
    svg_path = None
    if pipeline_config.export_svg:
        svg_path = pattern_to_svg(
            geometry.blueprint_lines, effective.paper,
            str(paths.artifact(stem, "pattern", "svg")),
        )

    dxf_path = None
    if pipeline_config.export_dxf:
        dxf_path = pattern_to_dxf(
            geometry.blueprint_lines, effective.paper,
            str(paths.artifact(stem, "pattern", "dxf")),
        )

    png_path = None
    if pipeline_config.export_png:
        png_path = pattern_to_png(
            geometry.blueprint_lines, effective.paper,
            str(paths.artifact(stem, "pattern", "png")),
            label=f"Kirigami | {effective.algorithm.value.upper()}",
        )

    mesh_path = None
    if pipeline_config.export_mesh and geometry.vertex_count:
        mesh_path = export_mesh(
            geometry,
            str(paths.artifact(stem, "model", pipeline_config.mesh_file_type)),
            pipeline_config.mesh_file_type,
        )

    elapsed = time.perf_counter() - started

    metrics_payload: Dict[str, object] = {
        "run_id": paths.run_id,
        "status": status,
        "elapsed_s": round(elapsed, 3),
        "stats": geometry.stats.to_dict(),
        "violations": [asdict(v) for v in report.violations],
        "counts": _counts(geometry),
    }
    write_json(paths.metrics_path, metrics_payload)

    summary = _build_summary(
        design_name, effective, geometry, report, status, paths.run_id, elapsed,
    )
    write_text(paths.summary_path, summary)

    manifest = {
        "run_id": paths.run_id,
        "design_name": design_name,
        "algorithm": config.algorithm.value,
        "status": status,
        "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": {
            "pipeline": asdict(pipeline_config),
            "design": config.to_dict(),
        },
        "artifacts": {
            "design_json": str(design_json_path),
            "metrics": str(paths.metrics_path),
            "summary": str(paths.summary_path),
            "svg": svg_path,
            "dxf": dxf_path,
            "png": png_path,
            "mesh": mesh_path,
        },
    }
    write_json(paths.manifest_path, manifest)
    update_latest_pointer(pipeline_config.runs_dir, paths.run_dir)

    logger.info("Run %s finished (%s) in %.2fs", paths.run_id, status, elapsed)

    return PipelineResult(
        run_id=paths.run_id,
        run_dir=str(paths.run_dir),
        design_json_path=str(design_json_path),
        metrics_path=str(paths.metrics_path),
        summary_path=str(paths.summary_path),
        manifest_path=str(paths.manifest_path),
        status=status,
        svg_path=svg_path,
        dxf_path=dxf_path,
        png_path=png_path,
        mesh_path=mesh_path,
        geometry=geometry,
        report=report,
    )


def _counts(geometry: GeometryOutput) -> Dict[str, int]:
    counts = {
        "vertices": geometry.vertex_count,
        "triangles": geometry.stats.triangle_count,
        "blueprint_lines": len(geometry.blueprint_lines),
    }
    for role in StripRole:
        counts[f"{role.value}_strips"] = sum(1 for s in geometry.strips if s.role is role)
    return counts


def _build_summary(
    design_name: str,
    config: DesignConfig,
    geometry: GeometryOutput,
    report: PatternReport,
    status: str,
    run_id: str,
    elapsed_s: float,
) -> str:
    stats = geometry.stats
    lines = [
        f"# Run {run_id}",
        "",
        f"- Design: {design_name}",
        f"- Status: **{status.upper()}**",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Algorithm: {config.algorithm.value}",
        f"- Grid: {config.cols} cols x {config.rows} rows",
        f"- Paper: {config.paper.width:g} x {config.paper.height:g} mm "
        f"(margin {config.paper.margin:g} mm)",
        f"- Cut length: {stats.total_cut_length:.1f} mm",
        f"- Fold length: {stats.total_fold_length:.1f} mm",
        f"- Triangles: {stats.triangle_count}",
        f"- Violations: {len(report.errors)} errors, {len(report.warnings)} warnings",
        "",
        "## Key Violations",
    ]

    if not report.violations:
        lines.append("- None")
    else:
        for v in report.violations[:12]:
            lines.append(f"- [{v.severity}] {v.rule_name}: {v.message}")

    return "\n".join(lines) + "\n"
