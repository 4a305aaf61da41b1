from __future__ import annotations

from .tables import GRID_VERT_OFFSETS
from .vectors import IVec3


def cell_flips(cell: IVec3) -> tuple[bool, bool, bool]:
    """Per-axis mirror flags of a cell: an axis is flipped when its coordinate is odd."""
    return (abs(cell.x) & 1 == 1, abs(cell.y) & 1 == 1, abs(cell.z) & 1 == 1)


def cell_vert_offsets(cell: IVec3) -> tuple[tuple[IVec3, ...], bool]:
    """Corner offsets of `cell` after mirroring, and whether the mirroring flips handedness.

    Mirroring the canonical corner layout on every odd axis makes the five-tetrahedron
    split alternate from cell to cell, so two neighbours always cut their shared face
    along the same diagonal. An odd number of mirrored axes turns the cell inside out,
    which the caller must compensate for by reversing triangle winding.

    Returns:
      offsets: 8 offsets in `GRID_VERT_OFFSETS` order, each component in {0, 1}.
      grid_inverse: True when an odd number of axes is flipped.
    """
    flip_x, flip_y, flip_z = cell_flips(cell)
    grid_inverse = flip_x ^ flip_y ^ flip_z

    offsets = tuple(
        IVec3(
            1 - o.x if flip_x else o.x,
            1 - o.y if flip_y else o.y,
            1 - o.z if flip_z else o.z,
        )
        for o in GRID_VERT_OFFSETS
    )
    return offsets, grid_inverse
