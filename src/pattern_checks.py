"""
Fabrication checks for a generated kirigami pattern.

Checks the flat pattern against what a cutter and a folded sheet can
actually deliver: every line on the sheet, strips wide enough to survive
cutting, folds not so close together that the material cannot bend
between them, and cuts that never run through a fold.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from shapely.geometry import LineString, box
from shapely.strtree import STRtree

from blueprint import LineType
from design_config import DesignConfig
from kirigami_engine import GeometryOutput
from strip_builder import KERF_MM, StripRole

logger = logging.getLogger(__name__)


@dataclass
class PatternCheckConfig:
    """Limits used by the pattern checks."""

    min_strip_width_mm: float = 2.0
    # Parallel folds closer than this many material thicknesses cannot bend.
    min_fold_spacing_factor: float = 2.0
    bounds_tolerance_mm: float = 1e-6


@dataclass
class PatternViolation:
    """A single pattern rule violation."""

    rule_name: str
    severity: str  # "error" or "warning"
    message: str
    value: float = 0.0
    limit: float = 0.0
    column: Optional[int] = None


@dataclass
class PatternReport:
    violations: List[PatternViolation] = field(default_factory=list)

    @property
    def errors(self) -> List[PatternViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> List[PatternViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    @property
    def ok(self) -> bool:
        return not self.errors


def check_pattern(
    geometry: GeometryOutput,
    config: DesignConfig,
    check_config: Optional[PatternCheckConfig] = None,
) -> PatternReport:
    """Run all pattern checks.

    Args:
        geometry: Output of generate_kirigami_geometry for config.
        config: The design the geometry was generated from.
        check_config: Check limits.

    Returns:
        PatternReport listing every violation found.
    """
    if check_config is None:
        check_config = PatternCheckConfig()
    config = config.clamped()

    report = PatternReport()
    report.violations.extend(_check_paper_bounds(geometry, config, check_config))
    report.violations.extend(_check_strip_width(config, check_config))
    report.violations.extend(_check_fold_spacing(geometry, config, check_config))
    report.violations.extend(_check_profile_clamped(config))
    report.violations.extend(_check_cut_fold_crossings(geometry))

    if report.violations:
        logger.info(
            "Pattern check: %d errors, %d warnings",
            len(report.errors), len(report.warnings),
        )
    return report


# ─── Individual checks ───────────────────────────────────────────────────────

def _check_paper_bounds(geometry, config, check_config) -> List[PatternViolation]:
    paper = config.paper
    sheet = box(-paper.half_width, -paper.half_height,
                paper.half_width, paper.half_height).buffer(check_config.bounds_tolerance_mm)
    violations = []
    for line in geometry.blueprint_lines:
        segment = LineString([(line.x1, line.y1), (line.x2, line.y2)])
        if not sheet.covers(segment):
            violations.append(PatternViolation(
                rule_name="paper_bounds",
                severity="error",
                message=(
                    f"{line.type.value} line ({line.x1:.2f}, {line.y1:.2f})-"
                    f"({line.x2:.2f}, {line.y2:.2f}) leaves the sheet"
                ),
            ))
    return violations


def _check_strip_width(config, check_config) -> List[PatternViolation]:
    width = config.paper.effective_width / config.cols - KERF_MM
    if width >= check_config.min_strip_width_mm:
        return []
    return [PatternViolation(
        rule_name="strip_width",
        severity="error",
        message=(
            f"Strips are {width:.2f}mm wide after kerf, "
            f"minimum is {check_config.min_strip_width_mm:.2f}mm"
        ),
        value=width,
        limit=check_config.min_strip_width_mm,
    )]


def _check_fold_spacing(geometry, config, check_config) -> List[PatternViolation]:
    limit = config.thickness * check_config.min_fold_spacing_factor
    if limit <= 0:
        return []

    violations = []
    for strip in geometry.strips:
        if strip.role is not StripRole.ACTIVE:
            continue
        ys = sorted(line.y1 for line in strip.lines if line.is_fold)
        if len(ys) < 2:
            continue
        spacing = min(b - a for a, b in zip(ys, ys[1:]))
        if spacing < limit:
            violations.append(PatternViolation(
                rule_name="fold_spacing",
                severity="warning",
                message=(
                    f"Column {strip.column}: folds {spacing:.2f}mm apart, "
                    f"material needs {limit:.2f}mm"
                ),
                value=spacing,
                limit=limit,
                column=strip.column,
            ))
    return violations


def _check_profile_clamped(config) -> List[PatternViolation]:
    limit = config.paper.max_profile_height
    if config.amplitude <= limit:
        return []
    return [PatternViolation(
        rule_name="profile_clamped",
        severity="warning",
        message=(
            f"Amplitude {config.amplitude:.1f}mm exceeds the "
            f"{limit:.1f}mm the sheet allows; tall columns are clipped"
        ),
        value=config.amplitude,
        limit=limit,
    )]


def _check_cut_fold_crossings(geometry) -> List[PatternViolation]:
    cuts = [l for l in geometry.blueprint_lines if l.type is LineType.CUT]
    folds = [l for l in geometry.blueprint_lines if l.is_fold]
    if not cuts or not folds:
        return []

    fold_geoms = [LineString([(l.x1, l.y1), (l.x2, l.y2)]) for l in folds]
    tree = STRtree(fold_geoms)
    violations = []
    for cut in cuts:
        cut_geom = LineString([(cut.x1, cut.y1), (cut.x2, cut.y2)])
        hits = tree.query(cut_geom, predicate="crosses")
        if len(hits):
            violations.append(PatternViolation(
                rule_name="cut_crosses_fold",
                severity="error",
                message=f"Cut at x={cut.x1:.2f} crosses {len(hits)} fold line(s)",
                value=float(len(hits)),
            ))
    return violations
