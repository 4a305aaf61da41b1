from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .vectors import Vec3


@dataclass(frozen=True)
class Face:
    v1: int
    v2: int
    v3: int


@dataclass(frozen=True)
class Edge:
    v1: int
    v2: int


@dataclass
class Mesh:
    """Triangle soup produced by one marcher run.

    Vertices are not shared: every face owns three consecutive entries of `verts`, and
    `edges` holds the three boundary edges of each face in face order, so
    len(verts) == len(edges) == 3 * len(faces).
    """

    verts: list[Vec3] = field(default_factory=list)
    faces: list[Face] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return (points (V,3) float64, faces (F,3) int64, edges (E,2) int64)."""
        points = np.array([v.as_tuple() for v in self.verts], dtype=float).reshape(-1, 3)
        faces = np.array([(f.v1, f.v2, f.v3) for f in self.faces], dtype=np.int64).reshape(-1, 3)
        edges = np.array([(e.v1, e.v2) for e in self.edges], dtype=np.int64).reshape(-1, 2)
        return points, faces, edges

    @classmethod
    def from_arrays(cls, points, faces, edges) -> Mesh:
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        tri = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
        edg = np.asarray(edges, dtype=np.int64).reshape(-1, 2)
        return cls(
            verts=[Vec3(float(x), float(y), float(z)) for x, y, z in pts],
            faces=[Face(int(a), int(b), int(c)) for a, b, c in tri],
            edges=[Edge(int(a), int(b)) for a, b in edg],
        )
