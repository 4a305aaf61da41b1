from __future__ import annotations

from pathlib import Path
from typing import Any, TextIO

import numpy as np

from .mesh import Mesh


def _fmt_f(arr: np.ndarray) -> str:
    return " ".join(f"{x:.16e}" for x in np.asarray(arr, dtype=float).reshape(-1))


def _fmt_i(arr: np.ndarray) -> str:
    return " ".join(str(int(x)) for x in np.asarray(arr).reshape(-1))


def _check_indices(name: str, cells: np.ndarray, n_points: int) -> None:
    if cells.ndim != 2:
        raise ValueError(f"{name} must be (M,k) int array, got shape={cells.shape}")
    if cells.size and (np.any(cells < 0) or np.any(cells >= n_points)):
        raise ValueError(f"{name} contains out-of-range point indices")


def _write_data_arrays(f: TextIO, tag: str, data: dict[str, Any] | None, *, n_expected: int) -> None:
    if not data:
        f.write(f"      <{tag}/>\n")
        return
    f.write(f"      <{tag}>\n")
    for name, arr_any in data.items():
        arr = np.asarray(arr_any, dtype=float)
        if arr.ndim not in (1, 2):
            raise ValueError(f"{name}: expected 1D or 2D array, got shape={arr.shape}")
        if arr.shape[0] != n_expected:
            raise ValueError(f"{name}: first dimension {arr.shape[0]} != expected {n_expected}")
        ncomp = 1 if arr.ndim == 1 else int(arr.shape[1])
        f.write(f'        <DataArray type="Float64" Name="{name}" NumberOfComponents="{ncomp}" format="ascii">\n')
        f.write(f"          {_fmt_f(arr)}\n")
        f.write("        </DataArray>\n")
    f.write(f"      </{tag}>\n")


def _write_cells(f: TextIO, tag: str, cells: np.ndarray | None) -> None:
    if cells is None:
        f.write(f"      <{tag}/>\n")
        return
    offsets = np.arange(1, cells.shape[0] + 1, dtype=np.int64) * cells.shape[1]
    f.write(f"      <{tag}>\n")
    f.write('        <DataArray type="Int64" Name="connectivity" format="ascii">\n')
    f.write(f"          {_fmt_i(cells)}\n")
    f.write("        </DataArray>\n")
    f.write('        <DataArray type="Int64" Name="offsets" format="ascii">\n')
    f.write(f"          {_fmt_i(offsets)}\n")
    f.write("        </DataArray>\n")
    f.write(f"      </{tag}>\n")


def write_vtp_polydata(
    path: str | Path,
    *,
    points: Any,
    polys: Any | None = None,
    lines: Any | None = None,
    point_data: dict[str, Any] | None = None,
    cell_data: dict[str, Any] | None = None,
) -> None:
    """Write an ASCII VTK XML PolyData (`.vtp`) file for ParaView.

    Args:
      points: (N,3) float array
      polys:  (M,k) int array, k vertices per polygon
      lines:  (L,m) int array, m vertices per polyline
      point_data: arrays with first dimension N
      cell_data: arrays with first dimension L + M (VTK orders lines before polys)
    """
    path = Path(path)
    pts = np.asarray(points, dtype=float)
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise ValueError(f"Expected points shaped (N,3), got shape={pts.shape}")
    n_points = int(pts.shape[0])

    polys_arr = None
    if polys is not None:
        polys_arr = np.asarray(polys, dtype=np.int64)
        _check_indices("polys", polys_arr, n_points)
    lines_arr = None
    if lines is not None:
        lines_arr = np.asarray(lines, dtype=np.int64)
        _check_indices("lines", lines_arr, n_points)

    n_polys = int(polys_arr.shape[0]) if polys_arr is not None else 0
    n_lines = int(lines_arr.shape[0]) if lines_arr is not None else 0

    with path.open("w", encoding="utf-8") as f:
        f.write('<?xml version="1.0"?>\n')
        f.write('<VTKFile type="PolyData" version="0.1" byte_order="LittleEndian">\n')
        f.write("  <PolyData>\n")
        f.write(
            f'    <Piece NumberOfPoints="{n_points}" NumberOfVerts="0" NumberOfLines="{n_lines}" '
            f'NumberOfStrips="0" NumberOfPolys="{n_polys}">\n'
        )
        _write_data_arrays(f, "PointData", point_data, n_expected=n_points)
        _write_data_arrays(f, "CellData", cell_data, n_expected=n_lines + n_polys)
        f.write("      <Points>\n")
        f.write('        <DataArray type="Float64" NumberOfComponents="3" format="ascii">\n')
        f.write(f"          {_fmt_f(pts)}\n")
        f.write("        </DataArray>\n")
        f.write("      </Points>\n")
        _write_cells(f, "Lines", lines_arr)
        _write_cells(f, "Polys", polys_arr)
        f.write("    </Piece>\n")
        f.write("  </PolyData>\n")
        f.write("</VTKFile>\n")


def write_mesh_vtp(
    path: str | Path,
    mesh: Mesh,
    *,
    point_data: dict[str, Any] | None = None,
    include_edges: bool = True,
) -> None:
    """Write a marched mesh: faces as triangles, edge records as 2-point lines."""
    points, faces, edges = mesh.as_arrays()
    write_vtp_polydata(
        path,
        points=points,
        polys=faces,
        lines=edges if include_edges else None,
        point_data=point_data,
    )
