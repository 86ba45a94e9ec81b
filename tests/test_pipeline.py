from __future__ import annotations

import json
from pathlib import Path

import pytest

from design_config import DesignConfig, load_design_config
from pipeline import PipelineConfig, run_pipeline_from_config


def test_pipeline_creates_run_folder_structure(small_config: DesignConfig, tmp_path: Path):
    config = PipelineConfig(runs_dir=str(tmp_path))

    result = run_pipeline_from_config(small_config, design_name="Small Sphere", pipeline_config=config)

    run_dir = Path(result.run_dir)
    assert run_dir.exists()
    assert (run_dir / "input" / "design.json").exists()
    assert (run_dir / "artifacts").exists()
    assert (run_dir / "manifest.json").exists()
    assert (run_dir / "metrics.json").exists()
    assert (run_dir / "summary.md").exists()
    assert result.run_id.endswith("small-sphere")

    manifest = json.loads((run_dir / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["run_id"] == result.run_id
    assert manifest["algorithm"] == "sphere"
    assert manifest["status"] == "pass"
    assert manifest["config"]["design"]["cols"] == 7

    latest = tmp_path / "latest"
    assert latest.exists() or latest.is_symlink()


def test_pipeline_exports_all_artifacts(small_config: DesignConfig, tmp_path: Path):
    result = run_pipeline_from_config(
        small_config, "exports", PipelineConfig(runs_dir=str(tmp_path), mesh_file_type="stl"),
    )

    for path in (result.svg_path, result.dxf_path, result.mesh_path):
        assert path is not None
        assert Path(path).exists()
    assert result.mesh_path.endswith("exports_model.stl")


def test_pipeline_metrics_match_geometry(small_config: DesignConfig, tmp_path: Path):
    result = run_pipeline_from_config(
        small_config, "metrics", PipelineConfig(runs_dir=str(tmp_path)),
    )

    metrics = json.loads(Path(result.metrics_path).read_text(encoding="utf-8"))
    assert metrics["status"] == result.status
    assert metrics["stats"] == result.geometry.stats.to_dict()
    assert metrics["counts"]["triangles"] == result.geometry.stats.triangle_count
    assert metrics["counts"]["fixed_strips"] == 4
    assert metrics["counts"]["active_strips"] + metrics["counts"]["spacer_strips"] == 3
    assert metrics["elapsed_s"] >= 0.0


def test_pipeline_snapshot_reloads(small_config: DesignConfig, tmp_path: Path):
    result = run_pipeline_from_config(
        small_config, "snapshot", PipelineConfig(runs_dir=str(tmp_path)),
    )
    assert load_design_config(result.design_json_path) == small_config


def test_pipeline_exports_can_be_disabled(small_config: DesignConfig, tmp_path: Path):
    config = PipelineConfig(
        runs_dir=str(tmp_path),
        export_svg=False,
        export_dxf=False,
        export_mesh=False,
        run_pattern_checks=False,
    )
    result = run_pipeline_from_config(small_config, "bare", config)

    assert result.svg_path is None
    assert result.dxf_path is None
    assert result.mesh_path is None
    assert result.report.violations == []
    assert not list((Path(result.run_dir) / "artifacts").iterdir())


def test_pipeline_reports_failed_checks(tmp_path: Path):
    result = run_pipeline_from_config(
        DesignConfig(cols=200, rows=2), "narrow", PipelineConfig(runs_dir=str(tmp_path), export_mesh=False),
    )

    assert result.status == "fail"
    summary = Path(result.summary_path).read_text(encoding="utf-8")
    assert "**FAIL**" in summary
    assert "strip_width" in summary


def test_pipeline_rejects_unknown_mesh_type(small_config: DesignConfig, tmp_path: Path):
    with pytest.raises(ValueError):
        run_pipeline_from_config(
            small_config, "bad", PipelineConfig(runs_dir=str(tmp_path), mesh_file_type="fbx"),
        )


def test_pipeline_png_preview_is_opt_in(small_config: DesignConfig, tmp_path: Path):
    default = run_pipeline_from_config(
        small_config, "no-png", PipelineConfig(runs_dir=str(tmp_path), export_mesh=False),
    )
    assert default.png_path is None

    result = run_pipeline_from_config(
        small_config, "with-png",
        PipelineConfig(runs_dir=str(tmp_path), export_mesh=False, export_png=True),
    )
    assert result.png_path.endswith("with-png_pattern.png")
    assert Path(result.png_path).exists()
    manifest = json.loads(Path(result.manifest_path).read_text(encoding="utf-8"))
    assert manifest["artifacts"]["png"] == result.png_path
