"""
Rigid fold pose of the two half-sheets.

The sheet is hinged along the x axis at y = 0. The floor half stays in the
z = 0 plane; the wall half rotates about the hinge by fold_progress * 90
degrees. Every strip reuses the same pose, so all strips fold in unison.
"""
import math
from dataclasses import dataclass

import numpy as np

FLOOR_DIR = np.array([0.0, 1.0, 0.0])
FLOOR_NORMAL = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True)
class FoldPose:
    """Instantaneous pose of floor and wall planes."""
    angle_rad: float
    floor_dir: np.ndarray     # (3,) unit, along the sheet away from the hinge
    wall_dir: np.ndarray      # (3,) unit
    floor_normal: np.ndarray  # (3,) unit
    wall_normal: np.ndarray   # (3,) unit


def fold_pose(t: float) -> FoldPose:
    """Pose for fold progress t (clamped to [0, 1]).

    t = 0 is the flat sheet, t = 1 stands the wall upright at 90 degrees.
    """
    t = min(max(float(t), 0.0), 1.0) if math.isfinite(t) else 0.0
    angle = t * (math.pi / 2)
    c, s = math.cos(angle), math.sin(angle)
    return FoldPose(
        angle_rad=angle,
        floor_dir=FLOOR_DIR.copy(),
        wall_dir=np.array([0.0, c, s]),
        floor_normal=FLOOR_NORMAL.copy(),
        wall_normal=np.array([0.0, -s, c]),
    )
