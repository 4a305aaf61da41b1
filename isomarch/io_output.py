from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np

from .domain import Domain
from .mesh import Mesh
from .vectors import Vec3


def _netcdf4():
    try:
        import netCDF4
    except ImportError as e:
        raise ImportError("netCDF4 is required to read/write isomarch .nc files.") from e
    return netCDF4


def write_mesh_nc(
    path: str | Path,
    domain: Domain,
    *,
    residuals: list[dict[str, float]] | None = None,
) -> None:
    """Write the domain settings and every mesh in `domain.meshes` to a netCDF file.

    Layout:
      global dims `xyz` (3); scalars surface_weight, width/height/depth,
      include_boundary_cells, nmesh; 1D domain_from/domain_to.
      group `mesh_<i>` per mesh with dims nvert/nface/nedge and variables
      verts (nvert,xyz), faces (nface,three), edges (nedge,two).
      Optional residual summaries are stored as group attributes.
    """
    nc = _netcdf4()
    ds = nc.Dataset(str(path), "w")
    try:
        ds.createDimension("xyz", 3)
        ds.createDimension("three", 3)
        ds.createDimension("two", 2)

        def _write_scalar(name: str, value, *, dtype="f8"):
            v = ds.createVariable(name, dtype)
            v[...] = value

        _write_scalar("surface_weight", float(domain.surface_weight))
        _write_scalar("width", int(domain.width), dtype="i4")
        _write_scalar("height", int(domain.height), dtype="i4")
        _write_scalar("depth", int(domain.depth), dtype="i4")
        _write_scalar("include_boundary_cells", int(bool(domain.include_boundary_cells)), dtype="i4")
        _write_scalar("nmesh", len(domain.meshes), dtype="i4")
        ds.createVariable("domain_from", "f8", ("xyz",))[:] = np.asarray(domain.from_.as_tuple())
        ds.createVariable("domain_to", "f8", ("xyz",))[:] = np.asarray(domain.to.as_tuple())

        for i, mesh in enumerate(domain.meshes):
            points, faces, edges = mesh.as_arrays()
            g = ds.createGroup(f"mesh_{i}")
            # A zero-length netCDF dimension is unlimited; it still reads back as empty.
            g.createDimension("nvert", points.shape[0])
            g.createDimension("nface", faces.shape[0])
            g.createDimension("nedge", edges.shape[0])
            v_verts = g.createVariable("verts", "f8", ("nvert", "xyz"))
            v_faces = g.createVariable("faces", "i8", ("nface", "three"))
            v_edges = g.createVariable("edges", "i8", ("nedge", "two"))
            if faces.shape[0] > 0:
                v_verts[:] = points
                v_faces[:] = faces
                v_edges[:] = edges
            if residuals is not None and i < len(residuals):
                for key, value in residuals[i].items():
                    g.setncattr(f"residual_{key}", value)
    finally:
        ds.close()


def _read(ds: Any, name: str) -> np.ndarray:
    if name not in ds.variables:
        raise KeyError(f"Missing variable {name!r} in netCDF file")
    return np.asarray(ds.variables[name][:])


def _read_scalar(ds: Any, name: str):
    if name not in ds.variables:
        raise KeyError(f"Missing variable {name!r} in netCDF file")
    return ds.variables[name][()]


def read_mesh_nc(path: str | Path) -> Domain:
    """Read a file written by `write_mesh_nc` back into a Domain with its meshes."""
    nc = _netcdf4()
    ds = nc.Dataset(str(path), "r")
    try:
        f = _read(ds, "domain_from")
        t = _read(ds, "domain_to")
        domain = Domain(
            from_=Vec3(float(f[0]), float(f[1]), float(f[2])),
            to=Vec3(float(t[0]), float(t[1]), float(t[2])),
            surface_weight=float(_read_scalar(ds, "surface_weight")),
            width=int(_read_scalar(ds, "width")),
            height=int(_read_scalar(ds, "height")),
            depth=int(_read_scalar(ds, "depth")),
            include_boundary_cells=bool(int(_read_scalar(ds, "include_boundary_cells"))),
        )
        for i in range(int(_read_scalar(ds, "nmesh"))):
            g = ds.groups[f"mesh_{i}"]
            domain.meshes.append(Mesh.from_arrays(_read(g, "verts"), _read(g, "faces"), _read(g, "edges")))
    finally:
        ds.close()
    return domain
