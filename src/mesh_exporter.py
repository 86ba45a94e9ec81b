"""
Mesh export of a generated kirigami model via trimesh.

Strips are written as authored: vertices are not merged, so every segment
keeps its own flat normals and the kerf gaps stay open.
"""
import logging
import os
from typing import Optional

import trimesh

from kirigami_engine import GeometryOutput

logger = logging.getLogger(__name__)

MESH_FILE_TYPES = ("glb", "stl", "obj", "ply")
PAPER_COLOR_RGBA = [245, 243, 238, 255]


def geometry_to_trimesh(geometry: GeometryOutput) -> trimesh.Trimesh:
    """Wrap engine buffers in a trimesh.Trimesh with UVs attached."""
    mesh = trimesh.Trimesh(
        vertices=geometry.positions.astype(float),
        faces=geometry.faces.astype(int),
        vertex_normals=geometry.normals.astype(float),
        process=False,
    )
    if geometry.vertex_count:
        mesh.visual = trimesh.visual.TextureVisuals(
            uv=geometry.uvs.astype(float),
            material=trimesh.visual.material.PBRMaterial(
                name="paper", baseColorFactor=PAPER_COLOR_RGBA,
            ),
        )
    return mesh


def export_mesh(
    geometry: GeometryOutput,
    filepath: str,
    file_type: Optional[str] = None,
) -> str:
    """Write the model to a mesh file.

    Args:
        geometry: Engine output.
        filepath: Output path.
        file_type: One of MESH_FILE_TYPES; inferred from the extension
            when omitted.

    Returns:
        Path to created mesh file.
    """
    if file_type is None:
        file_type = os.path.splitext(filepath)[1].lstrip(".").lower()
    if file_type not in MESH_FILE_TYPES:
        raise ValueError(
            f"Unsupported mesh file type {file_type!r}; use one of {MESH_FILE_TYPES}"
        )

    mesh = geometry_to_trimesh(geometry)
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    mesh.export(filepath, file_type=file_type)
    logger.info("Exported mesh: %s", filepath)
    return filepath
