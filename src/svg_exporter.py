"""
SVG export of the flat kirigami pattern.

Line classes follow the usual cutter conventions:
  - cut: solid red
  - mountain: dashed blue
  - valley: dotted green
  - border: solid gray (sheet edge, spines and outlines)

The document is sized in millimeters with its viewBox centred on the
paper origin, so pattern coordinates are written unchanged.
"""
import logging
import os
from dataclasses import dataclass
from typing import List, Optional

import svgwrite

from blueprint import BlueprintLine, LineType
from design_config import PaperSize

logger = logging.getLogger(__name__)

LINE_CLASSES = {
    LineType.CUT: "cut",
    LineType.MOUNTAIN: "mountain",
    LineType.VALLEY: "valley",
    LineType.SPINE: "border",
    LineType.OUTLINE: "border",
}


@dataclass
class SVGExportConfig:
    """Configuration for SVG export."""
    cut_color: str = "#ef4444"
    mountain_color: str = "#3b82f6"
    valley_color: str = "#22c55e"
    border_color: str = "#94a3b8"
    stroke_width_mm: float = 0.1
    mountain_dasharray: str = "2,1"
    valley_dasharray: str = "1,1"
    draw_border: bool = True


def _stylesheet(config: SVGExportConfig) -> str:
    sw = f"{config.stroke_width_mm}mm"
    return f"""
        .cut {{ stroke: {config.cut_color}; stroke-width: {sw}; fill: none; }}
        .mountain {{ stroke: {config.mountain_color}; stroke-width: {sw}; stroke-dasharray: {config.mountain_dasharray}; fill: none; }}
        .valley {{ stroke: {config.valley_color}; stroke-width: {sw}; stroke-dasharray: {config.valley_dasharray}; fill: none; }}
        .border {{ stroke: {config.border_color}; stroke-width: {sw}; fill: none; }}
    """


def build_pattern_drawing(
    lines: List[BlueprintLine],
    paper: PaperSize,
    filepath: str = "pattern.svg",
    config: Optional[SVGExportConfig] = None,
) -> svgwrite.Drawing:
    """Build (but do not save) the pattern drawing."""
    if config is None:
        config = SVGExportConfig()

    w, h = paper.width, paper.height
    dwg = svgwrite.Drawing(
        filepath,
        size=(f"{w}mm", f"{h}mm"),
        viewBox=f"{-w / 2} {-h / 2} {w} {h}",
    )
    dwg.defs.add(dwg.style(_stylesheet(config)))

    if config.draw_border:
        dwg.add(dwg.rect(insert=(-w / 2, -h / 2), size=(w, h), class_="border"))

    group = dwg.g(id="pattern")
    for line in lines:
        group.add(dwg.line(
            start=(line.x1, line.y1),
            end=(line.x2, line.y2),
            class_=LINE_CLASSES[line.type],
        ))
    dwg.add(group)
    return dwg


def pattern_to_svg_string(
    lines: List[BlueprintLine],
    paper: PaperSize,
    config: Optional[SVGExportConfig] = None,
) -> str:
    """Pattern as an SVG document string."""
    return build_pattern_drawing(lines, paper, config=config).tostring()


def pattern_to_svg(
    lines: List[BlueprintLine],
    paper: PaperSize,
    filepath: str,
    config: Optional[SVGExportConfig] = None,
) -> str:
    """Export the pattern to an SVG file.

    Args:
        lines: Blueprint lines in paper coordinates.
        paper: Sheet the lines were generated on.
        filepath: Output SVG file path.
        config: Styling options.

    Returns:
        Path to created SVG file.
    """
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    dwg = build_pattern_drawing(lines, paper, filepath, config)
    dwg.save()
    logger.info("Exported SVG: %s", filepath)
    return filepath
