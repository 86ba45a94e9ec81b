from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import numpy as np
from matplotlib import image as mpimg

from design_config import DesignConfig, save_design_config

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT = REPO_ROOT / "scripts" / "generate_kirigami.py"


def test_cli_generates_run(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--algorithm",
        "ripple",
        "--cols",
        "9",
        "--rows",
        "4",
        "--name",
        "cli_ripple",
        "--runs-dir",
        str(tmp_path),
        "--no-mesh",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr
    assert "Run folder:" in proc.stdout

    manifests = list(tmp_path.glob("*_cli-ripple/manifest.json"))
    assert len(manifests) == 1
    manifest = json.loads(manifests[0].read_text(encoding="utf-8"))
    assert manifest["config"]["design"]["algorithm"] == "ripple"
    assert manifest["artifacts"]["mesh"] is None


def test_cli_flags_override_config_file(tmp_path: Path):
    design = save_design_config(
        DesignConfig(cols=5, rows=3, amplitude=30.0), str(tmp_path / "design.json"),
    )
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--config",
        design,
        "--rows",
        "2",
        "--runs-dir",
        str(tmp_path / "runs"),
        "--no-mesh",
        "--no-dxf",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr

    manifest = next((tmp_path / "runs").glob("*/manifest.json"))
    saved = json.loads(manifest.read_text(encoding="utf-8"))["config"]["design"]
    assert saved["cols"] == 5
    assert saved["rows"] == 2
    assert saved["amplitude"] == 30.0


def test_cli_rejects_unknown_algorithm(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--algorithm",
        "hexagon",
        "--runs-dir",
        str(tmp_path),
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode != 0


def test_cli_missing_config_file(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--config",
        str(tmp_path / "missing.json"),
        "--runs-dir",
        str(tmp_path),
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 2
    assert "not found" in proc.stderr


def test_cli_image_drives_profile(tmp_path: Path):
    ramp = np.tile(np.linspace(0, 255, 16).astype(np.uint8), (4, 1))
    image_path = tmp_path / "ramp.png"
    mpimg.imsave(str(image_path), np.stack([ramp] * 3, axis=-1))

    cmd = [
        sys.executable,
        str(SCRIPT),
        "--image",
        str(image_path),
        "--cols",
        "9",
        "--rows",
        "4",
        "--runs-dir",
        str(tmp_path / "runs"),
        "--no-mesh",
        "--png",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr
    assert "PNG:" in proc.stdout

    manifest_path = next((tmp_path / "runs").glob("*/manifest.json"))
    manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    assert manifest["algorithm"] == "image"
    assert manifest["config"]["design"]["has_raster"] is True
    assert Path(manifest["artifacts"]["png"]).exists()

    metrics = json.loads(Path(manifest["artifacts"]["metrics"]).read_text(encoding="utf-8"))
    assert metrics["stats"]["total_cut_length"] > 0.0


def test_cli_warns_when_image_profile_has_no_image(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--algorithm",
        "image",
        "--cols",
        "5",
        "--rows",
        "2",
        "--runs-dir",
        str(tmp_path),
        "--no-mesh",
        "--no-dxf",
        "--no-svg",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr
    assert "every column stays flat" in proc.stderr


def test_cli_missing_image_file(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--image",
        str(tmp_path / "missing.png"),
        "--runs-dir",
        str(tmp_path),
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 2
    assert "Image not found" in proc.stderr
