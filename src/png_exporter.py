"""
PNG preview of the flat kirigami pattern.

A raster companion to the SVG export, for sharing or printing a quick proof.
Colors match the SVG classes; mountain folds are dashed and valley folds
dotted. Rendered with matplotlib's Agg backend so it works headless.
"""
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from blueprint import BlueprintLine, LineType
from design_config import PaperSize

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72.0


@dataclass
class PNGExportConfig:
    """Configuration for PNG export."""
    pixels_per_mm: float = 8.0
    line_width_mm: float = 0.3
    border_width_mm: float = 0.5
    cut_color: str = "#ef4444"
    mountain_color: str = "#3b82f6"
    valley_color: str = "#22c55e"
    spine_color: str = "#cbd5e1"
    border_color: str = "#94a3b8"
    label_color: str = "#64748b"
    background_color: str = "#ffffff"
    # Dash patterns in mm (on, off).
    mountain_dash_mm: Tuple[float, float] = (2.0, 2.0)
    valley_dash_mm: Tuple[float, float] = (1.0, 1.0)
    draw_border: bool = True


def _line_styles(config: PNGExportConfig) -> Dict[LineType, Tuple[str, object]]:
    # matplotlib scales dash lengths by the line width.
    def dashes(pattern_mm):
        return (0, tuple(v / config.line_width_mm for v in pattern_mm))

    return {
        LineType.CUT: (config.cut_color, "solid"),
        LineType.MOUNTAIN: (config.mountain_color, dashes(config.mountain_dash_mm)),
        LineType.VALLEY: (config.valley_color, dashes(config.valley_dash_mm)),
        LineType.SPINE: (config.spine_color, "solid"),
        LineType.OUTLINE: (config.spine_color, "solid"),
    }


def pattern_image_size(paper: PaperSize, config: Optional[PNGExportConfig] = None) -> Tuple[int, int]:
    """(width, height) in pixels of the rendered pattern."""
    if config is None:
        config = PNGExportConfig()
    return (
        int(round(paper.width * config.pixels_per_mm)),
        int(round(paper.height * config.pixels_per_mm)),
    )


def pattern_to_png(
    lines: List[BlueprintLine],
    paper: PaperSize,
    filepath: str,
    config: Optional[PNGExportConfig] = None,
    label: Optional[str] = None,
) -> str:
    """Render the pattern to a PNG file.

    The image covers the whole sheet with y pointing down, as in the SVG.

    Args:
        lines: Blueprint lines in paper coordinates.
        paper: Sheet the lines were generated on.
        filepath: Output PNG file path.
        config: Resolution and styling options.
        label: Optional caption drawn in the lower-left corner.

    Returns:
        Path to created PNG file.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from matplotlib.collections import LineCollection

    if config is None:
        config = PNGExportConfig()

    width_px, height_px = pattern_image_size(paper, config)
    dpi = 100.0
    fig = plt.figure(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)
    fig.patch.set_facecolor(config.background_color)
    ax = fig.add_axes([0.0, 0.0, 1.0, 1.0])
    ax.set_axis_off()
    ax.set_xlim(-paper.half_width, paper.half_width)
    ax.set_ylim(paper.half_height, -paper.half_height)

    # Points per mm on the sheet at this resolution.
    scale = config.pixels_per_mm * POINTS_PER_INCH / dpi
    line_width_pt = config.line_width_mm * scale

    if config.draw_border:
        ax.add_patch(plt.Rectangle(
            (-paper.half_width, -paper.half_height), paper.width, paper.height,
            fill=False, edgecolor=config.border_color,
            linewidth=config.border_width_mm * scale,
        ))

    styles = _line_styles(config)
    for line_type, (color, linestyle) in styles.items():
        segments = [
            [(l.x1, l.y1), (l.x2, l.y2)] for l in lines if l.type is line_type
        ]
        if not segments:
            continue
        ax.add_collection(LineCollection(
            segments, colors=color, linewidths=line_width_pt, linestyles=linestyle,
        ))

    if label:
        fig.text(
            0.02, 0.015, label, color=config.label_color,
            family="monospace", fontsize=3.0 * scale,
        )

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    fig.savefig(filepath, dpi=dpi, facecolor=config.background_color)
    plt.close(fig)
    logger.info("Exported PNG: %s", filepath)
    return filepath
