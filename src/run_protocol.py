"""Run folders for kirigami generation.

Each run gets ``<runs_dir>/<utc stamp>_<design slug>/`` holding the design
snapshot under ``input/``, pattern and model files under ``artifacts/``,
and ``manifest.json``, ``metrics.json`` and ``summary.md`` at the top.
``<runs_dir>/latest`` points at the most recent run.
"""

from __future__ import annotations

import json
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from design_config import DesignConfig, save_design_config

LATEST_NAME = "latest"
LATEST_POINTER_FILE = "latest_run.txt"


@dataclass
class RunPaths:
    run_id: str
    run_dir: Path
    input_dir: Path
    artifacts_dir: Path
    manifest_path: Path
    metrics_path: Path
    summary_path: Path

    @property
    def design_path(self) -> Path:
        return self.input_dir / "design.json"

    def artifact(self, stem: str, kind: str, extension: str) -> Path:
        """Path for an exported file, e.g. ``artifacts/stairs_pattern.svg``."""
        return self.artifacts_dir / f"{stem}_{kind}.{extension.lstrip('.')}"


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "design"


def create_run_id(design_name: str) -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
    return f"{stamp}_{slugify(design_name)}"


def prepare_run_dir(runs_root: str, design_name: str) -> RunPaths:
    runs_path = Path(runs_root)
    runs_path.mkdir(parents=True, exist_ok=True)

    base_id = create_run_id(design_name)
    run_id = base_id
    suffix = 1
    while (runs_path / run_id).exists():
        run_id = f"{base_id}-{suffix}"
        suffix += 1

    run_dir = runs_path / run_id
    paths = RunPaths(
        run_id=run_id,
        run_dir=run_dir,
        input_dir=run_dir / "input",
        artifacts_dir=run_dir / "artifacts",
        manifest_path=run_dir / "manifest.json",
        metrics_path=run_dir / "metrics.json",
        summary_path=run_dir / "summary.md",
    )
    for directory in (paths.input_dir, paths.artifacts_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return paths


def snapshot_design(config: DesignConfig, paths: RunPaths) -> Path:
    """Save the exact design of a run so it can be regenerated with ``--config``."""
    return Path(save_design_config(config, str(paths.design_path)))


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    write_text(path, json.dumps(payload, indent=2) + "\n")


def _clear_latest(latest: Path) -> None:
    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    elif latest.is_dir():
        shutil.rmtree(latest)


def update_latest_pointer(runs_root: str, run_dir: Path) -> None:
    runs_path = Path(runs_root)
    latest = runs_path / LATEST_NAME
    _clear_latest(latest)

    try:
        latest.symlink_to(os.path.relpath(run_dir, runs_path))
    except OSError:
        # No symlink support: leave the run id in a pointer file.
        write_text(latest / LATEST_POINTER_FILE, run_dir.name)
