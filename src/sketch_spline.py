"""
Catmull-Rom interpolation through freehand sketch control points.

Sketch points live in the unit square: x runs across the sheet, y is the
relative pop-up height.
"""
import math
from typing import Iterable, List, Sequence, Tuple

Point = Tuple[float, float]

# Points closer than this in x are treated as duplicates.
DEDUP_EPSILON = 1e-6
# Ends further than this from the sheet edge are padded with a flat point.
EDGE_PAD = 0.01

FALLBACK_HEIGHT = 0.5


def normalize_sketch_points(points: Iterable[Sequence[float]]) -> List[Point]:
    """Clamp to the unit square, sort by x, drop duplicates and pad the ends.

    The curve must span x in [0, 1], so a sketch that starts late or ends
    early gets a flat extension at its first/last height. Fewer than two
    distinct points are returned unpadded.
    """
    cleaned: List[Point] = []
    for p in points:
        x, y = float(p[0]), float(p[1])
        if not (math.isfinite(x) and math.isfinite(y)):
            continue
        cleaned.append((min(max(x, 0.0), 1.0), min(max(y, 0.0), 1.0)))

    cleaned.sort(key=lambda p: p[0])

    deduped: List[Point] = []
    for p in cleaned:
        if deduped and p[0] - deduped[-1][0] < DEDUP_EPSILON:
            continue
        deduped.append(p)

    # A single control point is not a curve; leave it for the fallback.
    if len(deduped) >= 2:
        if deduped[0][0] > EDGE_PAD:
            deduped.insert(0, (0.0, deduped[0][1]))
        if deduped[-1][0] < 1.0 - EDGE_PAD:
            deduped.append((1.0, deduped[-1][1]))
    return deduped


def catmull_rom(p0: float, p1: float, p2: float, p3: float, t: float) -> float:
    """Uniform Catmull-Rom value between p1 (t=0) and p2 (t=1)."""
    t2 = t * t
    t3 = t2 * t
    return 0.5 * (
        2.0 * p1
        + (-p0 + p2) * t
        + (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * t2
        + (-p0 + 3.0 * p1 - 3.0 * p2 + p3) * t3
    )


def evaluate_sketch(points: Sequence[Point], u: float) -> float:
    """Height of the sketch curve at u in [0, 1], clamped to [0, 1].

    points must already be normalised. Fewer than two points give a constant
    mid-height profile.
    """
    n = len(points)
    if n < 2:
        return FALLBACK_HEIGHT

    u = min(max(u, points[0][0]), points[-1][0])

    seg = 0
    while seg < n - 2 and u > points[seg + 1][0]:
        seg += 1

    (x1, y1), (x2, y2) = points[seg], points[seg + 1]
    # Missing neighbours are the reflection of the nearest interior segment.
    y0 = points[seg - 1][1] if seg > 0 else 2.0 * y1 - y2
    y3 = points[seg + 2][1] if seg + 2 < n else 2.0 * y2 - y1

    span = x2 - x1
    t = (u - x1) / span if span > 0 else 0.0
    value = catmull_rom(y0, y1, y2, y3, t)
    return min(max(value, 0.0), 1.0)
