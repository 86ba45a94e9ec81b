"""
Per-column strip builder.

Columns alternate between fixed strips (even index), which simply fold at
the hinge, and active strips (odd index), which are cut free of their
neighbours and carry a staircase of treads and risers that pops out of the
fold. Each strip is emitted as a chain of volumetric segments together with
its flat-pattern lines.

Active strip chain, in paper order from the floor edge:

    floor margin -> (tread, riser) x rows -> wall margin

Treads run parallel to the floor and risers parallel to the wall, each
advancing by profile_height / rows.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

import numpy as np

from blueprint import (
    BlueprintLine,
    LineType,
    SegmentOrientation,
    classify_joint,
    fixed_strip_lines,
    fold_line,
    strip_cut_lines,
)
from design_config import DesignConfig, PaperSize
from fold_kinematics import FoldPose
from geometry_primitives import MeshBuffers, extrude_quad_to_box, segments_per_column

logger = logging.getLogger(__name__)

# Material removed between neighbouring strips by the cutter.
KERF_MM = 0.15
# Active strips with a shorter pop-up fold flat like fixed strips.
NEGLIGIBLE_HEIGHT_MM = 1.0
# Both segments at a joint must be at least this long to score a fold.
MIN_FOLD_SEGMENT_MM = 0.01
# Segments shorter than this produce no geometry.
MIN_SEGMENT_MM = 1e-9


class StripRole(Enum):
    FIXED = "fixed"
    ACTIVE = "active"
    SPACER = "spacer"  # active column whose profile was too low to pop up


@dataclass
class StripGeometry:
    """One column's mesh (local indices) and pattern lines."""
    column: int
    role: StripRole
    x_left: float
    x_right: float
    profile_height: float
    positions: np.ndarray
    normals: np.ndarray
    indices: np.ndarray
    lines: List[BlueprintLine] = field(default_factory=list)
    segment_count: int = 0
    discarded_segments: int = 0

    @property
    def vertex_count(self) -> int:
        return len(self.positions)


def is_active_column(column: int) -> bool:
    return column % 2 == 1


def strip_extent(column: int, cols: int, paper: PaperSize) -> Tuple[float, float]:
    """Left/right x of a strip, each pulled in by half a kerf."""
    strip_width = paper.effective_width / cols
    x_base = -paper.half_width + paper.margin + column * strip_width
    return x_base + KERF_MM / 2, x_base + strip_width - KERF_MM / 2


def profile_height(height_factor: float, config: DesignConfig) -> float:
    """Pop-up height in mm: amplitude-scaled and kept inside the margin."""
    h = config.amplitude * height_factor
    return float(min(max(h, 0.0), config.paper.max_profile_height))


class _SegmentChain:
    """Writes consecutive segments of one strip into its buffers."""

    def __init__(self, x_left: float, x_right: float, thickness: float, segments: int):
        self.x_left = x_left
        self.x_right = x_right
        self.thickness = thickness
        self.buffers = MeshBuffers.for_segments(segments)
        self.segment_count = 0
        self.discarded = 0

    def add(self, start: np.ndarray, end: np.ndarray, normal: np.ndarray) -> None:
        """Segment between two centreline points (only y/z are used)."""
        if float(np.linalg.norm(end - start)) < MIN_SEGMENT_MM:
            return
        xl, xr = self.x_left, self.x_right
        quads = extrude_quad_to_box(
            np.array([xl, start[1], start[2]]),
            np.array([xr, start[1], start[2]]),
            np.array([xr, end[1], end[2]]),
            np.array([xl, end[1], end[2]]),
            normal,
            self.thickness,
        )
        if quads is None:
            self.discarded += 1
            logger.debug("Discarded non-finite segment at x=[%.2f, %.2f]", xl, xr)
            return
        self.buffers.push_quads(quads)
        self.segment_count += 1


def build_strip(
    column: int,
    cols: int,
    height_factor: float,
    config: DesignConfig,
    pose: FoldPose,
) -> StripGeometry:
    """Build one column's segments and pattern lines.

    height_factor is the profile evaluator's [0, 1] output for the column;
    fixed columns ignore it.
    """
    paper = config.paper
    x_left, x_right = strip_extent(column, cols, paper)

    if not is_active_column(column):
        chain, lines = _hinge_strip(x_left, x_right, config, pose)
        lines.extend(fixed_strip_lines(x_left, x_right, paper))
        return _finish(column, StripRole.FIXED, x_left, x_right, 0.0, chain, lines)

    h = profile_height(height_factor, config)
    if h < NEGLIGIBLE_HEIGHT_MM:
        chain, lines = _hinge_strip(x_left, x_right, config, pose)
        lines.append(fold_line(x_left, x_right, 0.0, LineType.VALLEY))
        return _finish(column, StripRole.SPACER, x_left, x_right, h, chain, lines)

    chain, lines = _popup_strip(x_left, x_right, h, config, pose)
    return _finish(column, StripRole.ACTIVE, x_left, x_right, h, chain, lines)


# ─── Strip kinds ─────────────────────────────────────────────────────────────

def _hinge_strip(x_left, x_right, config: DesignConfig, pose: FoldPose):
    """Floor anchor and wall anchor meeting at the hinge."""
    half_h = config.paper.half_height
    chain = _SegmentChain(x_left, x_right, config.thickness, 2)
    hinge = np.zeros(3)
    chain.add(-half_h * pose.floor_dir, hinge, pose.floor_normal)
    chain.add(hinge, half_h * pose.wall_dir, pose.wall_normal)
    return chain, []


def _popup_strip(x_left, x_right, h: float, config: DesignConfig, pose: FoldPose):
    paper = config.paper
    half_h = paper.half_height
    rows = max(1, config.rows)
    step = h / rows

    horizontal, vertical = SegmentOrientation.HORIZONTAL, SegmentOrientation.VERTICAL
    plan = [(horizontal, half_h - h)]
    for _ in range(rows):
        plan.append((horizontal, step))
        plan.append((vertical, step))
    plan.append((vertical, half_h - h))

    chain = _SegmentChain(x_left, x_right, config.thickness, segments_per_column(rows))
    lines = strip_cut_lines(x_left, x_right, paper)

    position = -half_h * pose.floor_dir
    paper_y = -half_h
    for k, (orientation, length) in enumerate(plan):
        if k > 0:
            prev_orientation, prev_length = plan[k - 1]
            line_type = classify_joint(prev_orientation, orientation)
            if line_type is not None \
                    and prev_length >= MIN_FOLD_SEGMENT_MM and length >= MIN_FOLD_SEGMENT_MM:
                lines.append(fold_line(x_left, x_right, paper_y, line_type))

        if orientation is horizontal:
            direction, normal = pose.floor_dir, pose.floor_normal
        else:
            direction, normal = pose.wall_dir, pose.wall_normal

        if k == len(plan) - 1:
            # The wall margin always ends at the sheet's far edge.
            end = half_h * pose.wall_dir
        else:
            end = position + direction * length
        chain.add(position, end, normal)
        position = end
        paper_y += length

    return chain, lines


def _finish(column, role, x_left, x_right, h, chain: _SegmentChain, lines) -> StripGeometry:
    positions, normals, indices = chain.buffers.trimmed()
    return StripGeometry(
        column=column,
        role=role,
        x_left=x_left,
        x_right=x_right,
        profile_height=h,
        positions=positions,
        normals=normals,
        indices=indices,
        lines=lines,
        segment_count=chain.segment_count,
        discarded_segments=chain.discarded,
    )
