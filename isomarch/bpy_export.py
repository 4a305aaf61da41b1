"""Blender (`bpy`) script emitter.

The generated script rebuilds each mesh with `Mesh.from_pydata` and links it to the
active scene collection, e.g. run it with `blender --python marching.py`.
"""

from __future__ import annotations

import io
import math
from typing import Iterable, TextIO

from .mesh import Mesh

PREAMBLE = "import bpy"


def _fmt_float(x: float) -> str:
    # repr() round-trips exactly; non-finite values are spelled so the script still parses.
    x = float(x)
    if math.isfinite(x):
        return repr(x)
    if math.isnan(x):
        return "float('nan')"
    return "float('inf')" if x > 0 else "float('-inf')"


def _write_mesh(f: TextIO, mesh: Mesh, name: str) -> None:
    f.write("verts = [\n")
    for v in mesh.verts:
        f.write(f"  ({_fmt_float(v.x):>8}, {_fmt_float(v.y):>8}, {_fmt_float(v.z):>8}),\n")
    f.write("]\n")
    f.write("edges = [\n")
    for e in mesh.edges:
        f.write(f"  ({e.v1:4d}, {e.v2:4d}),\n")
    f.write("]\n")
    f.write("faces = [\n")
    for fc in mesh.faces:
        f.write(f"  ({fc.v1:4d}, {fc.v2:4d}, {fc.v3:4d}),\n")
    f.write("]\n")
    f.write(f"new_mesh = bpy.data.meshes.new({name!r})\n")
    f.write("new_mesh.from_pydata(verts, edges, faces)\n")
    f.write("\n")
    f.write(f"new_object = bpy.data.objects.new({name!r}, new_mesh)\n")
    f.write("bpy.context.scene.collection.objects.link(new_object)\n")


def write_script(meshes: Iterable[Mesh], stream: TextIO, *, name: str = "Marching") -> None:
    """Write the import preamble followed by one construction block per mesh."""
    stream.write(PREAMBLE + "\n")
    stream.write("\n")
    for mesh in meshes:
        _write_mesh(stream, mesh, name)


def format_mesh(mesh: Mesh, name: str = "Marching") -> str:
    buf = io.StringIO()
    _write_mesh(buf, mesh, name)
    return buf.getvalue()


def format_script(meshes: Iterable[Mesh], name: str = "Marching") -> str:
    buf = io.StringIO()
    write_script(meshes, buf, name=name)
    return buf.getvalue()
