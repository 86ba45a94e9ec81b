"""
Blueprint lines and fold classification for the flat (unfolded) pattern.

Classification depends only on where a joint sits in a strip's segment
chain, never on the live fold angle: the pattern always describes the flat
sheet as it is cut and scored.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from design_config import PaperSize


class LineType(Enum):
    """Semantic type of a pattern line."""
    CUT = "cut"
    MOUNTAIN = "mountain"
    VALLEY = "valley"
    SPINE = "spine"
    OUTLINE = "outline"


FOLD_TYPES = frozenset({LineType.MOUNTAIN, LineType.VALLEY})


class SegmentOrientation(Enum):
    """Which half-sheet a segment runs parallel to once folded."""
    HORIZONTAL = "horizontal"  # floor-parallel: margins and treads
    VERTICAL = "vertical"      # wall-parallel: risers and the wall margin


@dataclass(frozen=True)
class BlueprintLine:
    """A straight pattern line in paper coordinates (origin at sheet centre)."""
    x1: float
    y1: float
    x2: float
    y2: float
    type: LineType

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    @property
    def is_fold(self) -> bool:
        return self.type in FOLD_TYPES


def classify_joint(
    before: SegmentOrientation,
    after: SegmentOrientation,
) -> Optional[LineType]:
    """Fold type where one segment ends and the next begins.

    A tread running into a riser (horizontal -> vertical) is the inner corner
    of a step: valley. A riser running into the next tread (vertical ->
    horizontal) is the outer step edge: mountain. Coplanar joints need no
    fold and return None.
    """
    if before is after:
        return None
    if before is SegmentOrientation.HORIZONTAL:
        return LineType.VALLEY
    return LineType.MOUNTAIN


def fold_line(x_left: float, x_right: float, y: float, line_type: LineType) -> BlueprintLine:
    """Horizontal fold across a strip at paper height y."""
    return BlueprintLine(x_left, y, x_right, y, line_type)


def strip_cut_lines(x_left: float, x_right: float, paper: PaperSize) -> List[BlueprintLine]:
    """Full-height cuts separating an active strip from its neighbours."""
    y0, y1 = -paper.half_height, paper.half_height
    return [
        BlueprintLine(x_left, y0, x_left, y1, LineType.CUT),
        BlueprintLine(x_right, y0, x_right, y1, LineType.CUT),
    ]


def fixed_strip_lines(x_left: float, x_right: float, paper: PaperSize) -> List[BlueprintLine]:
    """Spine references along a fixed strip plus the hinge valley."""
    y0, y1 = -paper.half_height, paper.half_height
    return [
        BlueprintLine(x_left, y0, x_left, 0.0, LineType.SPINE),
        BlueprintLine(x_right, y0, x_right, 0.0, LineType.SPINE),
        fold_line(x_left, x_right, 0.0, LineType.VALLEY),
        BlueprintLine(x_left, 0.0, x_left, y1, LineType.SPINE),
        BlueprintLine(x_right, 0.0, x_right, y1, LineType.SPINE),
    ]


def paper_outline_lines(paper: PaperSize) -> List[BlueprintLine]:
    """The four sheet edges, counter-clockwise from the bottom-left corner."""
    hw, hh = paper.half_width, paper.half_height
    return [
        BlueprintLine(-hw, -hh, hw, -hh, LineType.OUTLINE),
        BlueprintLine(hw, -hh, hw, hh, LineType.OUTLINE),
        BlueprintLine(hw, hh, -hw, hh, LineType.OUTLINE),
        BlueprintLine(-hw, hh, -hw, -hh, LineType.OUTLINE),
    ]


def total_length(lines: List[BlueprintLine], *types: LineType) -> float:
    """Summed Euclidean length of lines of the given types."""
    wanted = set(types)
    return sum(line.length for line in lines if line.type in wanted)
