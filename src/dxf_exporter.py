"""
DXF export of the flat kirigami pattern.

Uses ezdxf to produce one layer per line type:
  - CUT (red, ACI 1): strip cuts
  - MOUNTAIN (blue, ACI 5, dashed): mountain folds
  - VALLEY (green, ACI 3, dashed): valley folds
  - OUTLINE (white/black, ACI 7): sheet outline and spine references

Every line is a single two-point LINE entity at z = 0.
Units: millimeters. Format: R2010.
"""
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

import ezdxf

from blueprint import BlueprintLine, LineType, paper_outline_lines
from design_config import PaperSize

logger = logging.getLogger(__name__)


@dataclass
class DXFExportConfig:
    """Configuration for DXF export."""
    cut_layer: str = "CUT"
    mountain_layer: str = "MOUNTAIN"
    valley_layer: str = "VALLEY"
    outline_layer: str = "OUTLINE"
    cut_color: int = 1        # ACI red
    mountain_color: int = 5   # ACI blue
    valley_color: int = 3     # ACI green
    outline_color: int = 7    # ACI white/black
    fold_linetype: str = "DASHED"
    include_paper_outline: bool = True

    def layer_for(self, line_type: LineType) -> str:
        return {
            LineType.CUT: self.cut_layer,
            LineType.MOUNTAIN: self.mountain_layer,
            LineType.VALLEY: self.valley_layer,
            LineType.SPINE: self.outline_layer,
            LineType.OUTLINE: self.outline_layer,
        }[line_type]


def build_pattern_document(
    lines: List[BlueprintLine],
    paper: PaperSize,
    config: Optional[DXFExportConfig] = None,
):
    """Build an in-memory ezdxf document holding the pattern."""
    if config is None:
        config = DXFExportConfig()

    # setup=True loads the standard linetypes (DASHED).
    doc = ezdxf.new("R2010", setup=True)
    doc.units = ezdxf.units.MM
    msp = doc.modelspace()

    _setup_layers(doc, config)

    all_lines = list(lines)
    if config.include_paper_outline:
        all_lines.extend(paper_outline_lines(paper))

    for line in all_lines:
        msp.add_line(
            (line.x1, line.y1, 0.0),
            (line.x2, line.y2, 0.0),
            dxfattribs={"layer": config.layer_for(line.type)},
        )
    return doc


def pattern_to_dxf(
    lines: List[BlueprintLine],
    paper: PaperSize,
    filepath: str,
    config: Optional[DXFExportConfig] = None,
) -> str:
    """Export the pattern to a DXF file.

    Args:
        lines: Blueprint lines in paper coordinates.
        paper: Sheet the lines were generated on.
        filepath: Output DXF file path.
        config: DXF export settings.

    Returns:
        Path to created DXF file.
    """
    doc = build_pattern_document(lines, paper, config)
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    doc.saveas(filepath)
    logger.info("Exported DXF: %s", filepath)
    return filepath


def count_entities_by_layer(doc) -> Dict[str, int]:
    """Number of LINE entities per layer in a document's modelspace."""
    counts: Dict[str, int] = {}
    for entity in doc.modelspace().query("LINE"):
        layer = entity.dxf.layer
        counts[layer] = counts.get(layer, 0) + 1
    return counts


# ─── Internal helpers ────────────────────────────────────────────────────────

def _setup_layers(doc, config: DXFExportConfig) -> None:
    """Create the four pattern layers."""
    doc.layers.add(config.cut_layer, color=config.cut_color)
    doc.layers.add(config.mountain_layer, color=config.mountain_color,
                   linetype=config.fold_linetype)
    doc.layers.add(config.valley_layer, color=config.valley_color,
                   linetype=config.fold_linetype)
    doc.layers.add(config.outline_layer, color=config.outline_color)
