"""
Profile evaluator: column position -> relative pop-up height.

Every algorithm maps a normalised column position x in [-1, 1] (sheet centre
at 0) to a height factor in [0, 1]. Amplitude scaling and clamping to the
paper happen downstream in the strip builder, so new profiles only have to
honour the [0, 1] range.

Geometric primitives (sphere, pyramid, steps, torus, pagoda, vase, canyon)
read ``frequency`` as a scale: their support radius is 1 / frequency in
normalised units, ``curvature`` is the shaping exponent and ``roughness``
perturbs or quantises the base curve.
"""
import logging
import math
from typing import Callable, Dict, List, Optional

import numpy as np

from design_config import Algorithm, DesignConfig
from formula import CompiledFormula, FormulaError, compile_formula
from sketch_spline import Point, evaluate_sketch, normalize_sketch_points

logger = logging.getLogger(__name__)

ProfileFunction = Callable[[float, int, DesignConfig], float]


def column_position(column: int, cols: int) -> float:
    """Normalised x of a column's left edge, in [-1, 1)."""
    return (column / cols) * 2.0 - 1.0


# ─── Periodic profiles ───────────────────────────────────────────────────────

def stairs_profile(x: float, column: int, config: DesignConfig) -> float:
    return 1.0


def sine_profile(x: float, column: int, config: DesignConfig) -> float:
    return 0.5 + 0.5 * math.cos(math.pi * x * config.frequency)


def gaussian_profile(x: float, column: int, config: DesignConfig) -> float:
    sigma = _spread_width(config)
    return math.exp(-0.5 * (x / sigma) ** 2)


def ripple_profile(x: float, column: int, config: DesignConfig) -> float:
    """Concentric ripple decaying away from the centre."""
    r = abs(x)
    envelope = math.exp(-r / _spread_width(config))
    return envelope * (0.5 + 0.5 * math.cos(4.0 * math.pi * r * config.frequency))


def voronoi_profile(x: float, column: int, config: DesignConfig) -> float:
    """Distance to the nearest jittered 1D cell seed."""
    s = (x + 1.0) * config.frequency * 4.0
    cell = math.floor(s)
    nearest = min(abs(s - (k + _hash01(k))) for k in (cell - 1, cell, cell + 1))
    return nearest


def noise_profile(x: float, column: int, config: DesignConfig) -> float:
    a = math.pi * x * config.frequency
    return (
        0.5
        + 0.25 * math.sin(7.3 * a)
        + 0.15 * math.sin(13.7 * a + 1.3)
        + 0.10 * math.sin(29.1 * a + 2.1)
    )


def fractal_profile(x: float, column: int, config: DesignConfig) -> float:
    """Octave sum: amplitude halves and frequency doubles per octave."""
    total = 0.5
    amp = 0.25
    freq = 2.0 * math.pi * config.frequency
    for octave in range(config.fractal_octaves):
        total += amp * math.sin(freq * x + octave)
        amp *= 0.5
        freq *= 2.0
    return total


# ─── Geometric primitives ────────────────────────────────────────────────────

def sphere_profile(x: float, column: int, config: DesignConfig) -> float:
    u = abs(x) * config.frequency
    if u >= 1.0:
        return 0.0
    p = config.curvature
    base = (1.0 - u ** p) ** (1.0 / p)
    return _roughen(base, x, config.roughness)


def pyramid_profile(x: float, column: int, config: DesignConfig) -> float:
    u = abs(x) * config.frequency
    if u >= 1.0:
        return 0.0
    base = (1.0 - u) ** (config.curvature / 2.0)
    if config.roughness > 0:
        # Rougher pyramids get fewer, taller steps.
        steps = max(2, int(round(2 + (1.0 - config.roughness) * 14)))
        base = math.ceil(base * steps) / steps
    return base


def steps_profile(x: float, column: int, config: DesignConfig) -> float:
    """Ziggurat: a cone quantised into terraces."""
    u = abs(x) * config.frequency
    if u >= 1.0:
        return 0.0
    levels = max(2, int(round(config.curvature * 2)))
    base = math.ceil((1.0 - u) * levels) / levels
    return _roughen(base, x, config.roughness)


def torus_profile(x: float, column: int, config: DesignConfig) -> float:
    """Section through a ring: two humps around a hollow centre."""
    u = abs(x) * config.frequency
    d = abs(u - 0.5) / 0.5
    if d >= 1.0:
        return 0.0
    p = config.curvature
    base = (1.0 - d ** p) ** (1.0 / p)
    return _roughen(base, x, config.roughness)


PAGODA_TIERS = 4


def pagoda_profile(x: float, column: int, config: DesignConfig) -> float:
    """Stacked tiers with flared eaves."""
    u = abs(x) * config.frequency
    if u >= 1.0:
        return 0.0
    s = (1.0 - u) * PAGODA_TIERS
    tier = math.floor(s)
    flare = (s - tier) ** config.curvature
    base = (tier + flare) / PAGODA_TIERS
    return _roughen(base, x, config.roughness)


def vase_profile(x: float, column: int, config: DesignConfig) -> float:
    """Silhouette of a vase lying along the sheet: belly, neck, lip."""
    s = (x * config.frequency + 1.0) / 2.0
    if s <= 0.0 or s >= 1.0:
        return 0.0
    belly = 0.85 * math.sin(math.pi * s) ** (config.curvature / 2.0)
    neck = 0.40 * math.exp(-((s - 0.75) / 0.10) ** 2)
    lip = 0.25 * math.exp(-((s - 0.93) / 0.05) ** 2)
    base = max(0.0, belly - neck + lip)
    return _roughen(base, x, config.roughness)


def canyon_profile(x: float, column: int, config: DesignConfig) -> float:
    """Valley floor at the centre rising to walls at the rim."""
    u = abs(x) * config.frequency
    if u >= 1.0:
        return 0.0
    base = u ** config.curvature
    return _roughen(base, x, config.roughness)


PROFILE_FUNCTIONS: Dict[Algorithm, ProfileFunction] = {
    Algorithm.STAIRS: stairs_profile,
    Algorithm.SINE: sine_profile,
    Algorithm.GAUSSIAN: gaussian_profile,
    Algorithm.RIPPLE: ripple_profile,
    Algorithm.VORONOI: voronoi_profile,
    Algorithm.NOISE: noise_profile,
    Algorithm.FRACTAL: fractal_profile,
    Algorithm.SPHERE: sphere_profile,
    Algorithm.PYRAMID: pyramid_profile,
    Algorithm.STEPS: steps_profile,
    Algorithm.TORUS: torus_profile,
    Algorithm.PAGODA: pagoda_profile,
    Algorithm.VASE: vase_profile,
    Algorithm.CANYON: canyon_profile,
}


class ProfileEvaluator:
    """Evaluates one config's profile for any column.

    Per-pass preparation (formula compilation, sketch normalisation, raster
    scanline extraction) happens once in the constructor. The config is
    clamped on entry.
    """

    def __init__(self, config: DesignConfig):
        self.config = config.clamped()
        self._formula: Optional[CompiledFormula] = None
        self._sketch: List[Point] = []
        self._scanline: Optional[np.ndarray] = None

        algorithm = self.config.algorithm
        if algorithm is Algorithm.CUSTOM:
            try:
                self._formula = compile_formula(self.config.custom_formula)
            except FormulaError as exc:
                logger.warning(
                    "Custom formula rejected, profile is flat: %s", exc
                )
        elif algorithm is Algorithm.SKETCH:
            self._sketch = normalize_sketch_points(self.config.sketch_points)
        elif algorithm is Algorithm.IMAGE:
            if self.config.raster is None:
                logger.debug("Image profile without a raster, profile is flat")
            else:
                self._scanline = self.config.raster.scanline_brightness()

        self._dispatch: Dict[Algorithm, ProfileFunction] = dict(PROFILE_FUNCTIONS)
        self._dispatch[Algorithm.CUSTOM] = self._custom_profile
        self._dispatch[Algorithm.SKETCH] = self._sketch_profile
        self._dispatch[Algorithm.IMAGE] = self._image_profile

    def evaluate(self, x: float, column: int) -> float:
        """Height factor in [0, 1] for normalised position x."""
        value = self._dispatch[self.config.algorithm](x, column, self.config)
        return _unit(value)

    def _custom_profile(self, x: float, column: int, config: DesignConfig) -> float:
        if self._formula is None:
            return 0.0
        try:
            return self._formula.evaluate(x, config.frequency, column)
        except FormulaError as exc:
            logger.debug("Custom formula failed at x=%.3f column=%d: %s", x, column, exc)
            return 0.0

    def _sketch_profile(self, x: float, column: int, config: DesignConfig) -> float:
        return evaluate_sketch(self._sketch, (x + 1.0) / 2.0)

    def _image_profile(self, x: float, column: int, config: DesignConfig) -> float:
        if self._scanline is None or len(self._scanline) == 0:
            return 0.0
        width = len(self._scanline)
        px = int(round((x + 1.0) / 2.0 * (width - 1)))
        px = min(max(px, 0), width - 1)
        return float(self._scanline[px])


def evaluate_profile(x: float, column: int, config: DesignConfig) -> float:
    """Height factor in [0, 1] for one column.

    Convenience wrapper; build a ProfileEvaluator when evaluating many
    columns of the same config.
    """
    return ProfileEvaluator(config).evaluate(x, column)


# ─── Internal helpers ────────────────────────────────────────────────────────

def _unit(value: float) -> float:
    """Clamp to [0, 1]; anything non-finite becomes 0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def _spread_width(config: DesignConfig) -> float:
    # spread is in thousandths of the half-width
    return max(config.spread, 1.0) / 1000.0


def _hash01(k: int) -> float:
    """Deterministic pseudo-random value in [0, 1) for an integer."""
    v = math.sin(k * 12.9898 + 78.233) * 43758.5453
    return v - math.floor(v)


def _roughen(base: float, x: float, roughness: float) -> float:
    """Scale by a ripple factor in [1 - roughness / 2, 1]."""
    if roughness <= 0.0 or base <= 0.0:
        return base
    ripple = 0.5 + 0.5 * math.cos(24.0 * math.pi * x)
    return base * (1.0 - 0.5 * roughness * ripple)
