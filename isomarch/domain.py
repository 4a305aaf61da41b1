from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

from .bpy_export import write_script
from .mesh import Edge, Face, Mesh
from .orientation import cell_vert_offsets
from .refine import RefineFunction, WeightFunction
from .tables import CELL_TO_TETS, MAX_FACES_PER_TET, TET_EDGES, VMASK_TO_TRI_EDGES
from .vectors import IVec3, Vec3


@dataclass
class Domain:
    """Axis-aligned extraction box, grid resolution and iso-value.

    Attributes:
      from_, to: box corners, normally `from_` < `to` on every axis. Swapping the two on
        one axis mirrors every vertex along that axis.
      surface_weight: iso-value; a grid corner is inside when f(p) > surface_weight.
      width, height, depth: number of cells along x, y, z.
      include_boundary_cells: when True the sweep also visits cell index `n` on each axis,
        one row past the box (its far corners lie beyond `to`). When False only the
        `width * height * depth` cells inside the box are visited.
      meshes: one entry per `march_tetrahedras` call.
    """

    from_: Vec3
    to: Vec3
    surface_weight: float
    width: int
    height: int
    depth: int
    include_boundary_cells: bool = True
    meshes: list[Mesh] = field(default_factory=list)

    def vertex_grid_size(self) -> IVec3:
        return IVec3(self.width + 1, self.height + 1, self.depth + 1)

    def cell_range(self) -> IVec3:
        if self.include_boundary_cells:
            return self.vertex_grid_size()
        return IVec3(self.width, self.height, self.depth)

    def vertex_position(self, vertex_grid_position: IVec3) -> Vec3:
        f, t = self.from_, self.to
        return Vec3(
            f.x + vertex_grid_position.x * (t.x - f.x) / self.width,
            f.y + vertex_grid_position.y * (t.y - f.y) / self.height,
            f.z + vertex_grid_position.z * (t.z - f.z) / self.depth,
        )

    def march_tetrahedras(
        self,
        weight_function: WeightFunction,
        refine_function: RefineFunction,
        weight_user_data: Any = None,
    ) -> Mesh:
        """Extract the iso-surface of `weight_function` and append it to `self.meshes`.

        Cells are visited x-outer, z-inner. Each cell is split into the five tetrahedra of
        `CELL_TO_TETS` (after the parity mirroring of `cell_vert_offsets`); every
        tetrahedron contributes zero, one or two triangles, each with three freshly
        refined vertices. Nothing is shared or cached between tetrahedra.

        Returns the appended mesh.
        """
        iso = self.surface_weight
        mesh = Mesh()
        verts, faces, edges = mesh.verts, mesh.faces, mesh.edges

        n = self.cell_range()
        for x in range(n.x):
            for y in range(n.y):
                for z in range(n.z):
                    cell = IVec3(x, y, z)
                    offsets, grid_inverse = cell_vert_offsets(cell)
                    positions = [self.vertex_position(cell + o) for o in offsets]
                    inside = [weight_function(p, weight_user_data) > iso for p in positions]

                    for tet in CELL_TO_TETS:
                        mask = 0
                        for bit, corner in enumerate(tet):
                            if inside[corner]:
                                mask |= 1 << bit
                        if mask > 7:
                            row = VMASK_TO_TRI_EDGES[15 - mask]
                            inverted = not grid_inverse
                        else:
                            row = VMASK_TO_TRI_EDGES[mask]
                            inverted = grid_inverse

                        for slot in range(MAX_FACES_PER_TET):
                            e1, e2, e3 = row[3 * slot : 3 * slot + 3]
                            if e1 == -1:
                                break
                            base = len(verts)
                            if inverted:
                                faces.append(Face(base, base + 2, base + 1))
                            else:
                                faces.append(Face(base, base + 1, base + 2))
                            edges.append(Edge(base, base + 1))
                            edges.append(Edge(base + 1, base + 2))
                            edges.append(Edge(base + 2, base))
                            for e in (e1, e2, e3):
                                a, b = TET_EDGES[e]
                                verts.append(
                                    refine_function(
                                        positions[tet[a]],
                                        positions[tet[b]],
                                        weight_function,
                                        weight_user_data,
                                        iso,
                                    )
                                )

        self.meshes.append(mesh)
        return mesh

    def export(self, stream: TextIO | None = None, *, name: str = "Marching") -> None:
        """Write all accumulated meshes as a Blender Python script (stdout by default)."""
        write_script(self.meshes, sys.stdout if stream is None else stream, name=name)
