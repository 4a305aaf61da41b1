"""Constant lookup tables for the marching-tetrahedra case analysis.

Corner numbering of a unit cell:

    0:(0,0,0) 1:(1,0,0) 2:(1,1,0) 3:(0,1,0) 4:(0,0,1) 5:(1,0,1) 6:(1,1,1) 7:(0,1,1)

A tetrahedron is a 4-tuple of cell corners. The first corner is its apex, the
other three form its base.
"""

from __future__ import annotations

from .vectors import IVec3

GRID_VERT_OFFSETS: tuple[IVec3, ...] = (
    IVec3(0, 0, 0),
    IVec3(1, 0, 0),
    IVec3(1, 1, 0),
    IVec3(0, 1, 0),
    IVec3(0, 0, 1),
    IVec3(1, 0, 1),
    IVec3(1, 1, 1),
    IVec3(0, 1, 1),
)

# Five tetrahedra per cell: the central one on corners (0,2,7,5) plus one per cut-off corner.
CELL_TO_TETS: tuple[tuple[int, int, int, int], ...] = (
    (0, 2, 7, 5),
    (1, 0, 5, 2),
    (3, 2, 7, 0),
    (4, 0, 7, 5),
    (6, 2, 5, 7),
)

# Edges of a tetrahedron as pairs of local corner indices (0..3).
TET_EDGES: tuple[tuple[int, int], ...] = (
    (0, 1),
    (0, 2),
    (0, 3),
    (1, 2),
    (2, 3),
    (3, 1),
)

# Vertex mask -> up to two triangles, three TET_EDGES indices each; -1 marks an unused slot.
# Masks 8..15 reuse entry 15 - mask with the winding reversed.
VMASK_TO_TRI_EDGES: tuple[tuple[int, int, int, int, int, int], ...] = (
    (-1, -1, -1, -1, -1, -1),  # 0000 / 1111
    (0, 1, 2, -1, -1, -1),  # 0001 / 1110
    (0, 5, 3, -1, -1, -1),  # 0010 / 1101
    (1, 2, 3, 3, 2, 5),  # 0011 / 1100
    (1, 3, 4, -1, -1, -1),  # 0100 / 1011
    (4, 2, 3, 3, 2, 0),  # 0101 / 1010
    (1, 0, 4, 4, 0, 5),  # 0110 / 1001
    (2, 5, 4, -1, -1, -1),  # 0111 / 1000
)

MAX_FACES_PER_TET = 2
