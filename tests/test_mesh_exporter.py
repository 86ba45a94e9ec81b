"""Tests for mesh_exporter module."""
import os

import numpy as np
import pytest
import trimesh

from mesh_exporter import export_mesh, geometry_to_trimesh


class TestGeometryToTrimesh:
    """Engine buffers wrapped without modification."""

    def test_counts_preserved(self, stairs_geometry):
        mesh = geometry_to_trimesh(stairs_geometry)
        assert isinstance(mesh, trimesh.Trimesh)
        assert len(mesh.vertices) == stairs_geometry.vertex_count
        assert len(mesh.faces) == stairs_geometry.stats.triangle_count

    def test_vertices_match(self, stairs_geometry):
        mesh = geometry_to_trimesh(stairs_geometry)
        np.testing.assert_allclose(mesh.vertices, stairs_geometry.positions, atol=1e-6)

    def test_uvs_attached(self, stairs_geometry):
        mesh = geometry_to_trimesh(stairs_geometry)
        assert mesh.visual.uv.shape == (stairs_geometry.vertex_count, 2)


class TestExportMesh:
    """File output."""

    @pytest.mark.parametrize("ext", ["glb", "stl"])
    def test_writes_file(self, stairs_geometry, tmp_path, ext):
        filepath = os.path.join(str(tmp_path), f"model.{ext}")
        assert export_mesh(stairs_geometry, filepath) == filepath
        assert os.path.getsize(filepath) > 0

    def test_stl_reloads(self, stairs_geometry, tmp_path):
        filepath = os.path.join(str(tmp_path), "model.stl")
        export_mesh(stairs_geometry, filepath)
        loaded = trimesh.load(filepath, process=False)
        assert len(loaded.faces) == stairs_geometry.stats.triangle_count

    def test_explicit_type_overrides_extension(self, stairs_geometry, tmp_path):
        filepath = os.path.join(str(tmp_path), "model.bin")
        export_mesh(stairs_geometry, filepath, file_type="stl")
        assert os.path.isfile(filepath)

    def test_unsupported_type(self, stairs_geometry, tmp_path):
        with pytest.raises(ValueError):
            export_mesh(stairs_geometry, os.path.join(str(tmp_path), "model.fbx"))
