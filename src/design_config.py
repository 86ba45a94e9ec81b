"""
Design configuration for kirigami pop-up generation.

A DesignConfig is an immutable snapshot of every parameter the geometry
engine reads: the profile algorithm and its numeric parameters, the strip
structure, the fold progress, and the paper. Paper sizes are kept in a small
catalog keyed by slug.
"""
import json
import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Algorithm(Enum):
    """Profile algorithms available to the profile evaluator."""
    STAIRS = "stairs"
    SINE = "sine"
    GAUSSIAN = "gaussian"
    RIPPLE = "ripple"
    VORONOI = "voronoi"
    NOISE = "noise"
    FRACTAL = "fractal"
    CUSTOM = "custom"
    SPHERE = "sphere"
    PYRAMID = "pyramid"
    STEPS = "steps"
    TORUS = "torus"
    PAGODA = "pagoda"
    VASE = "vase"
    CANYON = "canyon"
    IMAGE = "image"
    SKETCH = "sketch"


GEOMETRIC_ALGORITHMS = frozenset({
    Algorithm.SPHERE,
    Algorithm.PYRAMID,
    Algorithm.STEPS,
    Algorithm.TORUS,
    Algorithm.PAGODA,
    Algorithm.VASE,
    Algorithm.CANYON,
})

MAX_FRACTAL_OCTAVES = 8
MIN_FREQUENCY = 1e-3
MIN_CURVATURE = 0.05


@dataclass(frozen=True)
class PaperSize:
    """A sheet of paper, in millimeters, with origin at its centre."""

    width: float
    height: float
    margin: float

    @property
    def half_width(self) -> float:
        return self.width / 2

    @property
    def half_height(self) -> float:
        return self.height / 2

    @property
    def effective_width(self) -> float:
        """Width available to strips after removing both side margins."""
        return self.width - 2 * self.margin

    @property
    def max_profile_height(self) -> float:
        """Tallest pop-up a strip can carry before hitting the margin."""
        return self.height / 2 - self.margin


PAPER_SIZES = {
    "a4": PaperSize(width=210.0, height=297.0, margin=20.0),
    "a5": PaperSize(width=148.0, height=210.0, margin=15.0),
    "a3": PaperSize(width=297.0, height=420.0, margin=25.0),
    "letter": PaperSize(width=215.9, height=279.4, margin=20.0),
}

PAPER_A4 = PAPER_SIZES["a4"]


@dataclass(frozen=True, eq=False)
class RasterImage:
    """A decoded RGBA raster used as a height source.

    pixels is an (height, width, 4) uint8 array. Decoding image files is the
    caller's job.
    """

    width: int
    height: int
    pixels: np.ndarray = field(repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterImage):
            return NotImplemented
        return (self.width, self.height) == (other.width, other.height) \
            and bool(np.array_equal(self.pixels, other.pixels))

    def __hash__(self) -> int:
        return hash((self.width, self.height))

    @classmethod
    def from_rgba(cls, width: int, height: int, data: Sequence[int]) -> "RasterImage":
        """Build a raster from a flat RGBA byte sequence (row-major)."""
        arr = np.asarray(data, dtype=np.uint8)
        expected = width * height * 4
        if arr.size != expected:
            raise ValueError(
                f"RGBA buffer has {arr.size} values, expected {expected} "
                f"for {width}x{height}"
            )
        return cls(width=width, height=height, pixels=arr.reshape(height, width, 4))

    @classmethod
    def from_array(cls, array) -> "RasterImage":
        """Build a raster from a decoded image array.

        Accepts gray (H, W), RGB (H, W, 3) or RGBA (H, W, 4) arrays, either
        uint8 or floats in [0, 1] as returned by ``matplotlib.image.imread``.
        """
        arr = np.asarray(array)
        if arr.ndim == 2:
            arr = np.stack([arr] * 3, axis=-1)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Unsupported image array shape {arr.shape}")
        if np.issubdtype(arr.dtype, np.floating):
            arr = np.clip(np.round(arr * 255.0), 0, 255)
        arr = arr.astype(np.uint8)
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=-1)
        height, width = arr.shape[:2]
        return cls(width=width, height=height, pixels=np.ascontiguousarray(arr))

    def scanline_brightness(self, row: Optional[int] = None) -> np.ndarray:
        """Grayscale brightness of one row, normalised to [0, 1].

        Defaults to the mid-height row.
        """
        if self.width == 0 or self.height == 0:
            return np.zeros(0)
        if row is None:
            row = self.height // 2
        row = min(max(int(row), 0), self.height - 1)
        rgb = self.pixels[row, :, :3].astype(np.float64)
        gray = rgb @ np.array([0.299, 0.587, 0.114])
        return np.clip(gray / 255.0, 0.0, 1.0)


DEFAULT_SKETCH_POINTS: Tuple[Tuple[float, float], ...] = (
    (0.0, 0.0),
    (0.5, 0.8),
    (1.0, 0.0),
)


@dataclass(frozen=True)
class DesignConfig:
    """Every parameter of one generation pass.

    Attributes:
        algorithm: Profile algorithm selector.
        rows: Riser/tread pairs per active strip (resolution).
        cols: Number of strips across the sheet (density).
        amplitude: Maximum pop-up height in mm.
        frequency: Wave frequency, or scale of geometric primitives.
        spread: Gaussian/ripple width, in thousandths of the half-width.
        curvature: Exponent shaping geometric primitives.
        roughness: Perturbation/stepping strength of geometric primitives.
        fractal_octaves: Octave count for the fractal profile.
        custom_formula: Expression of (x, f, i) for the custom profile.
        sketch_points: Freehand control points in [0, 1] x [0, 1].
        fold_progress: 0 = flat, 1 = folded to 90 degrees.
        thickness: Material thickness in mm (0 = single-sided surface).
        paper: Sheet dimensions.
        raster: Optional decoded raster for the image profile.
    """

    algorithm: Algorithm = Algorithm.SPHERE
    rows: int = 12
    cols: int = 31
    amplitude: float = 50.0
    frequency: float = 1.0
    spread: float = 300.0
    curvature: float = 2.0
    roughness: float = 0.0
    fractal_octaves: int = 3
    custom_formula: str = "Math.sin(x * 10 * f) * Math.cos(x * 5)"
    sketch_points: Tuple[Tuple[float, float], ...] = DEFAULT_SKETCH_POINTS
    fold_progress: float = 0.8
    thickness: float = 0.2
    paper: PaperSize = PAPER_A4
    raster: Optional[RasterImage] = None

    def clamped(self) -> "DesignConfig":
        """Return a copy with every parameter pulled into its valid domain."""
        paper = self.paper
        margin_limit = min(paper.width, paper.height) / 2
        margin = _finite_or(paper.margin, 0.0)
        if margin < 0:
            margin = 0.0
        elif margin >= margin_limit:
            margin = math.nextafter(margin_limit, 0.0)
        if margin != paper.margin:
            paper = replace(paper, margin=margin)

        return replace(
            self,
            rows=max(1, int(self.rows)),
            cols=max(1, int(self.cols)),
            amplitude=max(0.0, _finite_or(self.amplitude, 0.0)),
            frequency=max(MIN_FREQUENCY, _finite_or(self.frequency, 1.0)),
            spread=max(1.0, _finite_or(self.spread, 300.0)),
            curvature=max(MIN_CURVATURE, _finite_or(self.curvature, 2.0)),
            roughness=min(1.0, max(0.0, _finite_or(self.roughness, 0.0))),
            fractal_octaves=min(MAX_FRACTAL_OCTAVES, max(1, int(self.fractal_octaves))),
            fold_progress=min(1.0, max(0.0, _finite_or(self.fold_progress, 0.0))),
            thickness=max(0.0, _finite_or(self.thickness, 0.0)),
            paper=paper,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict. The raster is reported, not serialised."""
        return {
            "algorithm": self.algorithm.value,
            "rows": self.rows,
            "cols": self.cols,
            "amplitude": self.amplitude,
            "frequency": self.frequency,
            "spread": self.spread,
            "curvature": self.curvature,
            "roughness": self.roughness,
            "fractal_octaves": self.fractal_octaves,
            "custom_formula": self.custom_formula,
            "sketch_points": [list(p) for p in self.sketch_points],
            "fold_progress": self.fold_progress,
            "thickness": self.thickness,
            "paper": {
                "width": self.paper.width,
                "height": self.paper.height,
                "margin": self.paper.margin,
            },
            "has_raster": self.raster is not None,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DesignConfig":
        """Build a config from a dict produced by to_dict (or a subset).

        Raises:
            ValueError: on an unknown algorithm or malformed field.
        """
        kwargs: Dict[str, Any] = {}
        if "algorithm" in payload:
            try:
                kwargs["algorithm"] = Algorithm(payload["algorithm"])
            except ValueError:
                raise ValueError(f"Unknown algorithm: {payload['algorithm']!r}")

        for key in ("rows", "cols", "fractal_octaves"):
            if key in payload:
                kwargs[key] = int(payload[key])
        for key in ("amplitude", "frequency", "spread", "curvature",
                    "roughness", "fold_progress", "thickness"):
            if key in payload:
                kwargs[key] = float(payload[key])
        if "custom_formula" in payload:
            kwargs["custom_formula"] = str(payload["custom_formula"])
        if "sketch_points" in payload:
            kwargs["sketch_points"] = _parse_points(payload["sketch_points"])

        paper = payload.get("paper")
        if isinstance(paper, str):
            if paper not in PAPER_SIZES:
                raise ValueError(f"Unknown paper size: {paper!r}")
            kwargs["paper"] = PAPER_SIZES[paper]
        elif isinstance(paper, dict):
            try:
                kwargs["paper"] = PaperSize(
                    width=float(paper["width"]),
                    height=float(paper["height"]),
                    margin=float(paper.get("margin", 0.0)),
                )
            except (KeyError, TypeError) as exc:
                raise ValueError(f"Malformed paper entry: {paper!r}") from exc

        return cls(**kwargs)


def load_design_config(path: str) -> DesignConfig:
    """Read a DesignConfig from a JSON file."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Design config not found: {path}")
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Malformed design config {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Design config {path} must be a JSON object")
    config = DesignConfig.from_dict(payload)
    logger.debug("Loaded design config from %s (%s)", path, config.algorithm.value)
    return config


def save_design_config(config: DesignConfig, path: str) -> str:
    """Write a DesignConfig to a JSON file and return the path."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
    return str(p)


# ─── Internal helpers ────────────────────────────────────────────────────────

def _finite_or(value: float, default: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def _parse_points(raw) -> Tuple[Tuple[float, float], ...]:
    points = []
    try:
        for item in raw:
            if isinstance(item, dict):
                x, y = item["x"], item["y"]
            else:
                x, y = item
            points.append((float(x), float(y)))
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed sketch points: {raw!r}") from exc
    return tuple(points)
