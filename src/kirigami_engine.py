"""
Kirigami geometry engine: DesignConfig -> mesh buffers + flat pattern.

One call is one independent pass: evaluate the profile per active column,
compute the fold pose once, build every strip, then merge the strips into a
single position/normal/uv/index set with pattern statistics. Nothing is
cached between calls and the input config is never modified.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from blueprint import BlueprintLine, LineType, total_length
from design_config import DesignConfig, PaperSize
from fold_kinematics import fold_pose
from profiles import ProfileEvaluator, column_position
from strip_builder import StripGeometry, build_strip, is_active_column

logger = logging.getLogger(__name__)


@dataclass
class Stats:
    """Aggregate pattern and mesh statistics."""
    total_cut_length: float
    total_fold_length: float
    triangle_count: int

    def to_dict(self) -> Dict[str, float]:
        return {
            "total_cut_length": round(self.total_cut_length, 4),
            "total_fold_length": round(self.total_fold_length, 4),
            "triangle_count": self.triangle_count,
        }


@dataclass
class GeometryOutput:
    """Buffers of one generation pass, owned by the caller.

    positions/normals are (N, 3) float32, uvs (N, 2) float32 and indices a
    flat uint32 array holding three entries per triangle.
    """
    positions: np.ndarray
    normals: np.ndarray
    uvs: np.ndarray
    indices: np.ndarray
    blueprint_lines: List[BlueprintLine]
    stats: Stats
    strips: List[StripGeometry] = field(default_factory=list, repr=False)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def faces(self) -> np.ndarray:
        """Indices reshaped to (M, 3)."""
        return self.indices.reshape(-1, 3)

    def lines_of_type(self, line_type: LineType) -> List[BlueprintLine]:
        return [line for line in self.blueprint_lines if line.type is line_type]


def generate_kirigami_geometry(config: DesignConfig) -> GeometryOutput:
    """Generate the folded mesh and the flat pattern for one config.

    Never raises for a well-typed config: out-of-range parameters are
    clamped, non-finite segments dropped and formula failures read as a
    flat profile.
    """
    config = config.clamped()
    cols = config.cols
    pose = fold_pose(config.fold_progress)
    evaluator = ProfileEvaluator(config)

    strips: List[StripGeometry] = []
    for column in range(cols):
        factor = 0.0
        if is_active_column(column):
            factor = evaluator.evaluate(column_position(column, cols), column)
        strips.append(build_strip(column, cols, factor, config, pose))

    positions, normals, indices = merge_strips(strips)
    uvs = planar_uvs(positions, config.paper)

    lines = [line for strip in strips for line in strip.lines]
    stats = Stats(
        total_cut_length=total_length(lines, LineType.CUT),
        total_fold_length=total_length(lines, LineType.MOUNTAIN, LineType.VALLEY),
        triangle_count=len(indices) // 3,
    )

    discarded = sum(s.discarded_segments for s in strips)
    if discarded:
        logger.debug("Discarded %d non-finite segments", discarded)
    logger.debug(
        "Generated %s: %d columns, %d vertices, %d triangles, %d pattern lines",
        config.algorithm.value, cols, len(positions), stats.triangle_count, len(lines),
    )

    return GeometryOutput(
        positions=positions,
        normals=normals,
        uvs=uvs,
        indices=indices,
        blueprint_lines=lines,
        stats=stats,
        strips=strips,
    )


def merge_strips(strips: List[StripGeometry]):
    """Concatenate strip buffers, offsetting each strip's indices.

    Returns:
        (positions float32 (N, 3), normals float32 (N, 3), indices uint32 (3M,))
    """
    total_vertices = sum(len(s.positions) for s in strips)
    total_indices = sum(len(s.indices) for s in strips)

    positions = np.empty((total_vertices, 3), dtype=np.float32)
    normals = np.empty((total_vertices, 3), dtype=np.float32)
    indices = np.empty(total_indices, dtype=np.uint32)

    v_offset = 0
    i_offset = 0
    for strip in strips:
        nv = len(strip.positions)
        ni = len(strip.indices)
        positions[v_offset:v_offset + nv] = strip.positions
        normals[v_offset:v_offset + nv] = strip.normals
        indices[i_offset:i_offset + ni] = strip.indices + v_offset
        v_offset += nv
        i_offset += ni

    return positions, normals, indices


def planar_uvs(positions: np.ndarray, paper: PaperSize) -> np.ndarray:
    """Project (x, y) onto the sheet rectangle, normalised to [0, 1]."""
    uvs = np.empty((len(positions), 2), dtype=np.float32)
    if len(positions) == 0:
        return uvs
    uvs[:, 0] = (positions[:, 0] + paper.half_width) / paper.width
    uvs[:, 1] = (positions[:, 1] + paper.half_height) / paper.height
    np.clip(uvs, 0.0, 1.0, out=uvs)
    return uvs
