"""
Mesh-building primitives for the strip builder.

MeshBuffers holds pre-sized position/normal/index arrays filled through a
write cursor, so a generation pass allocates once per strip instead of
growing Python lists. extrude_quad_to_box turns one quad into a solid slab:
top face, reversed bottom face and the two side walls along the strip edges.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

VERTICES_PER_QUAD = 4
INDICES_PER_QUAD = 6
# top + bottom + left wall + right wall
QUADS_PER_SEGMENT = 4
VERTICES_PER_SEGMENT = QUADS_PER_SEGMENT * VERTICES_PER_QUAD
INDICES_PER_SEGMENT = QUADS_PER_SEGMENT * INDICES_PER_QUAD

# Side-wall edges shorter than this (squared, mm^2) are skipped.
MIN_EDGE_LENGTH_SQ = 1e-6


def segments_per_column(rows: int) -> int:
    """Upper bound on segments one strip emits: two margins plus rows pairs."""
    return 2 + 2 * max(1, rows)


@dataclass
class QuadFace:
    """One planar quad (v0, v1, v2, v3 counter-clockwise about normal)."""
    vertices: Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]
    normal: np.ndarray


class MeshBuffers:
    """Pre-sized vertex/index storage with a write cursor."""

    def __init__(self, capacity_vertices: int, capacity_indices: int):
        self.positions = np.empty((max(0, capacity_vertices), 3), dtype=np.float64)
        self.normals = np.empty((max(0, capacity_vertices), 3), dtype=np.float64)
        self.indices = np.empty(max(0, capacity_indices), dtype=np.int64)
        self.vertex_count = 0
        self.index_count = 0

    @classmethod
    def for_segments(cls, segments: int) -> "MeshBuffers":
        return cls(segments * VERTICES_PER_SEGMENT, segments * INDICES_PER_SEGMENT)

    def _reserve(self, vertices: int, indices: int) -> None:
        need_v = self.vertex_count + vertices
        if need_v > len(self.positions):
            new_cap = max(need_v, 2 * len(self.positions))
            self.positions = _grow(self.positions, new_cap)
            self.normals = _grow(self.normals, new_cap)
        need_i = self.index_count + indices
        if need_i > len(self.indices):
            self.indices = _grow(self.indices, max(need_i, 2 * len(self.indices)))

    def push_quad(self, quad: QuadFace) -> None:
        """Append a quad as two triangles (0, 1, 2) and (0, 2, 3)."""
        self._reserve(VERTICES_PER_QUAD, INDICES_PER_QUAD)
        base = self.vertex_count
        self.positions[base:base + 4] = quad.vertices
        self.normals[base:base + 4] = quad.normal
        i = self.index_count
        self.indices[i:i + 6] = (base, base + 1, base + 2, base, base + 2, base + 3)
        self.vertex_count += VERTICES_PER_QUAD
        self.index_count += INDICES_PER_QUAD

    def push_quads(self, quads: Sequence[QuadFace]) -> None:
        for quad in quads:
            self.push_quad(quad)

    def trimmed(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Views of the filled part of each buffer."""
        return (
            self.positions[:self.vertex_count],
            self.normals[:self.vertex_count],
            self.indices[:self.index_count],
        )


def extrude_quad_to_box(
    v0: np.ndarray,
    v1: np.ndarray,
    v2: np.ndarray,
    v3: np.ndarray,
    normal: np.ndarray,
    thickness: float,
) -> Optional[list]:
    """Quads of a slab of the given thickness behind the top face.

    v0-v1 is the leading edge across the strip, v0-v3 its left side and
    v1-v2 its right side. The slab is pushed along -normal. With zero
    thickness only the top face is returned.

    Returns None if any vertex or normal comes out non-finite; the caller
    drops the whole segment.
    """
    n = np.asarray(normal, dtype=np.float64)
    top = np.array([v0, v1, v2, v3], dtype=np.float64)
    if not (np.all(np.isfinite(top)) and np.all(np.isfinite(n))):
        return None

    quads = [QuadFace(vertices=(top[0], top[1], top[2], top[3]), normal=n)]
    if thickness <= 0:
        return quads

    n_len = float(np.linalg.norm(n))
    unit_n = n / n_len if n_len > 0 else np.array([0.0, 0.0, 1.0])
    bottom = top - unit_n * thickness
    b0, b1, b2, b3 = bottom
    t0, t1, t2, t3 = top

    quads.append(QuadFace(vertices=(b0, b3, b2, b1), normal=-unit_n))

    left_edge = t3 - t0
    if float(left_edge @ left_edge) > MIN_EDGE_LENGTH_SQ:
        quads.append(QuadFace(
            vertices=(t0, t3, b3, b0),
            normal=_unit(np.cross(unit_n, left_edge)),
        ))

    right_edge = t2 - t1
    if float(right_edge @ right_edge) > MIN_EDGE_LENGTH_SQ:
        quads.append(QuadFace(
            vertices=(t1, b1, b2, t2),
            normal=_unit(np.cross(right_edge, unit_n)),
        ))

    for quad in quads:
        if not (np.all(np.isfinite(quad.normal))
                and all(np.all(np.isfinite(v)) for v in quad.vertices)):
            return None
    return quads


# ─── Internal helpers ────────────────────────────────────────────────────────

def _unit(v: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(v))
    if length == 0.0:
        return np.full(3, np.nan)
    return v / length


def _grow(arr: np.ndarray, capacity: int) -> np.ndarray:
    grown = np.empty((capacity,) + arr.shape[1:], dtype=arr.dtype)
    grown[:len(arr)] = arr
    return grown
