from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO


def _fmt_E3(x: float) -> str:
    return f"{float(x):.3E}"


def _fmt_time_s(sec: float) -> str:
    return f"{float(sec):.8E} sec."


@dataclass
class MarchVerbose:
    """Progress printer for the run layer and CLI.

    Messages go to `stream` (stderr when unset, since stdout may carry the script).
    """

    enabled: bool = False
    stream: TextIO | None = None

    def p(self, msg: str = "") -> None:
        if self.enabled:
            print(msg, file=self.stream if self.stream is not None else sys.stderr)

    def header(self) -> None:
        self.p(" This is ISOMARCH,")
        self.p(" marching-tetrahedra iso-surface extraction.")

    def domain_block(
        self,
        *,
        source: str,
        domain_from: tuple[float, float, float],
        domain_to: tuple[float, float, float],
        resolution: tuple[int, int, int],
        surface_weight: float,
        include_boundary_cells: bool,
        n_forces: int,
        refine_name: str,
    ) -> None:
        self.p(f" Parameters from {source}.")
        self.p(" Domain:")
        self.p("   from           = " + " ".join(f"{x:10.4f}" for x in domain_from))
        self.p("   to             = " + " ".join(f"{x:10.4f}" for x in domain_to))
        self.p("   resolution     = " + " ".join(f"{n:5d}" for n in resolution))
        self.p(f"   surface_weight = {_fmt_E3(surface_weight)}")
        if include_boundary_cells:
            self.p("   cell sweep     : 0..n inclusive (one extra row past `to`)")
        else:
            self.p("   cell sweep     : 0..n-1")
        self.p(f"   point sources  = {n_forces:5d}")
        self.p(f"   refiner        = {refine_name}")

    def phase(self, msg: str) -> None:
        self.p(f" {msg}")

    def phase_done(self, sec: float) -> None:
        self.p(f" Done. Took {_fmt_time_s(sec)}")

    def mesh_summary(self, *, index: int, n_verts: int, n_edges: int, n_faces: int) -> None:
        self.p(f" Mesh {index}: {n_verts} verts, {n_edges} edges, {n_faces} faces.")

    def residual_summary(self, *, max_abs: float, rms: float) -> None:
        self.p(f"   |f(v) - surface_weight|: max {_fmt_E3(max_abs)},  rms {_fmt_E3(rms)}")

    def wrote(self, path: str) -> None:
        self.p(f" Wrote {path}")

    def complete(self, *, sec: float) -> None:
        self.p(f" ISOMARCH complete. Total time= {_fmt_time_s(sec)}")
