from __future__ import annotations

import xml.etree.ElementTree as ET

import numpy as np
import pytest

from isomarch.domain import Domain
from isomarch.fields import Force, point_source_field
from isomarch.io_output import read_mesh_nc, write_mesh_nc
from isomarch.mesh import Mesh
from isomarch.plotting import plot_mesh_png
from isomarch.refine import refine_bisect
from isomarch.vectors import Vec3
from isomarch.vtk_io import write_mesh_vtp, write_vtp_polydata


def _sphere_domain() -> Domain:
    d = Domain(from_=Vec3(-2.0, -2.0, -2.0), to=Vec3(2.0, 2.0, 2.0), surface_weight=1.0, width=4, height=4, depth=4)
    d.march_tetrahedras(point_source_field, refine_bisect, [Force(Vec3(0.1, 0.0, 0.0), 1.0)])
    return d


def test_write_mesh_vtp(tmp_path):
    mesh = _sphere_domain().meshes[0]
    n_faces = len(mesh.faces)
    assert n_faces > 0
    p = tmp_path / "mesh.vtp"
    write_mesh_vtp(p, mesh, point_data={"radius": np.linalg.norm(mesh.as_arrays()[0], axis=1)})

    root = ET.parse(p).getroot()
    piece = root.find("PolyData/Piece")
    assert piece.get("NumberOfPoints") == str(3 * n_faces)
    assert piece.get("NumberOfPolys") == str(n_faces)
    assert piece.get("NumberOfLines") == str(3 * n_faces)
    conn = piece.find("Polys/DataArray[@Name='connectivity']").text.split()
    assert len(conn) == 3 * n_faces
    radius = piece.find("PointData/DataArray[@Name='radius']")
    assert len(radius.text.split()) == 3 * n_faces


def test_write_mesh_vtp_without_edges(tmp_path):
    mesh = _sphere_domain().meshes[0]
    p = tmp_path / "faces_only.vtp"
    write_mesh_vtp(p, mesh, include_edges=False)

    piece = ET.parse(p).getroot().find("PolyData/Piece")
    assert piece.get("NumberOfLines") == "0"
    assert piece.get("NumberOfPolys") == str(len(mesh.faces))
    assert len(piece.find("Lines")) == 0


def test_write_vtp_rejects_bad_indices(tmp_path):
    pts = np.zeros((3, 3))
    with pytest.raises(ValueError, match="out-of-range"):
        write_vtp_polydata(tmp_path / "bad.vtp", points=pts, polys=[[0, 1, 3]])
    with pytest.raises(ValueError, match="points"):
        write_vtp_polydata(tmp_path / "bad.vtp", points=np.zeros((3, 2)))


def test_mesh_nc_roundtrip(tmp_path):
    d = _sphere_domain()
    p = tmp_path / "mesh.nc"
    write_mesh_nc(p, d, residuals=[{"n_verts": 3, "max_abs": 0.5, "rms": 0.25}])
    got = read_mesh_nc(p)
    assert got.from_ == d.from_ and got.to == d.to
    assert (got.width, got.height, got.depth) == (d.width, d.height, d.depth)
    assert got.surface_weight == d.surface_weight
    assert got.include_boundary_cells is True
    assert len(got.meshes) == 1
    assert got.meshes[0] == d.meshes[0]


def test_plot_mesh_png(tmp_path):
    mesh = _sphere_domain().meshes[0]
    p = tmp_path / "mesh.png"
    plot_mesh_png(p, mesh)
    assert p.exists() and p.stat().st_size > 0

    p_empty = tmp_path / "empty.png"
    plot_mesh_png(p_empty, Mesh())
    assert p_empty.exists()
