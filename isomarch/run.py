from __future__ import annotations

import os
import sys
import time as _time
from dataclasses import dataclass
from typing import Any, TextIO

from .domain import Domain
from .fields import (
    DEMO_FORCES,
    DEMO_FROM,
    DEMO_SIZE,
    DEMO_SURFACE_WEIGHT,
    DEMO_TO,
    Force,
    forces_as_arrays,
    forces_from_arrays,
    point_source_field,
)
from .refine import BISECT_ITERATIONS, refiner_from_option
from .utils import parse_namelist, resolve_existing_path
from .vectors import Vec3
from .verbose import MarchVerbose

INPUT_PREFIX = "isomarch_in."
OUTPUT_PREFIX = "isomarch_out."


@dataclass(frozen=True)
class RunConfig:
    domain_from: Vec3
    domain_to: Vec3
    resolution: tuple[int, int, int]
    surface_weight: float
    forces: tuple[Force, ...]
    refine_option: str = "bisect"
    bisect_iterations: int = BISECT_ITERATIONS
    include_boundary_cells: bool = True
    mesh_name: str = "Marching"
    save_vtp: bool = False
    save_nc: bool = False
    save_png: bool = False


@dataclass(frozen=True)
class RunResult:
    input_path: str
    output_script: str
    output_vtp: str | None
    output_nc: str | None
    output_png: str | None
    output_log: str
    n_verts: int
    n_faces: int
    residual_max_abs: float
    residual_rms: float


def demo_config(*, refine_option: str = "bisect") -> RunConfig:
    """The canonical three-source demo."""
    return RunConfig(
        domain_from=DEMO_FROM,
        domain_to=DEMO_TO,
        resolution=(DEMO_SIZE, DEMO_SIZE, DEMO_SIZE),
        surface_weight=DEMO_SURFACE_WEIGHT,
        forces=DEMO_FORCES,
        refine_option=refine_option,
    )


def _vec3_option(inputs: dict[str, Any], key: str, default: Vec3) -> Vec3:
    if key not in inputs:
        return default
    val = inputs[key]
    if (
        not isinstance(val, list)
        or len(val) != 3
        or any(isinstance(x, bool) or not isinstance(x, (int, float)) for x in val)
    ):
        raise ValueError(f"{key} must be an array of 3 numbers, got {val!r}")
    return Vec3(float(val[0]), float(val[1]), float(val[2]))


def _float_option(inputs: dict[str, Any], key: str, default: float) -> float:
    val = inputs.get(key, default)
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ValueError(f"{key} must be a number, got {val!r}")
    return float(val)


def _int_option(inputs: dict[str, Any], key: str, default: int) -> int:
    val = inputs.get(key, default)
    if isinstance(val, bool) or not isinstance(val, int):
        raise ValueError(f"{key} must be an integer, got {val!r}")
    return val


def _bool_option(inputs: dict[str, Any], key: str, default: bool) -> bool:
    val = inputs.get(key, default)
    if not isinstance(val, bool):
        raise ValueError(f"{key} must be .true. or .false., got {val!r}")
    return val


def _str_option(inputs: dict[str, Any], key: str, default: str) -> str:
    val = inputs.get(key, default)
    if not isinstance(val, str):
        raise ValueError(f"{key} must be a quoted string, got {val!r}")
    return val


def config_from_inputs(inputs: dict[str, Any]) -> RunConfig:
    """Validate a parsed `&isomarch_nml` namelist; missing keys fall back to the demo."""
    base = demo_config()
    domain_from = _vec3_option(inputs, "domain_from", base.domain_from)
    domain_to = _vec3_option(inputs, "domain_to", base.domain_to)
    for axis in ("x", "y", "z"):
        if not getattr(domain_from, axis) < getattr(domain_to, axis):
            raise ValueError(f"domain_from.{axis} must be below domain_to.{axis}")

    resolution = base.resolution
    if "resolution" in inputs:
        res = inputs["resolution"]
        if isinstance(res, int):
            res = [res, res, res]
        if (
            not isinstance(res, list)
            or len(res) != 3
            or any(isinstance(n, bool) or not isinstance(n, int) for n in res)
        ):
            raise ValueError(f"resolution must be one integer or an array of 3 integers, got {res!r}")
        resolution = (res[0], res[1], res[2])
    if min(resolution) < 1:
        raise ValueError(f"resolution must be positive, got {resolution}")

    forces = base.forces
    if "force_positions" in inputs or "force_weights" in inputs:
        if "force_positions" not in inputs or "force_weights" not in inputs:
            raise ValueError("force_positions and force_weights must be given together")
        forces = tuple(forces_from_arrays(inputs["force_positions"], inputs["force_weights"]))

    refine_option = _str_option(inputs, "refine_option", base.refine_option).strip().lower()
    iterations = _int_option(inputs, "bisect_iterations", BISECT_ITERATIONS)
    # Validates both settings.
    refiner_from_option(refine_option, iterations=iterations)

    return RunConfig(
        domain_from=domain_from,
        domain_to=domain_to,
        resolution=resolution,
        surface_weight=_float_option(inputs, "surface_weight", base.surface_weight),
        forces=forces,
        refine_option=refine_option,
        bisect_iterations=iterations,
        include_boundary_cells=_bool_option(inputs, "include_boundary_cells", True),
        mesh_name=_str_option(inputs, "mesh_name", base.mesh_name),
        save_vtp=_bool_option(inputs, "save_vtp", False),
        save_nc=_bool_option(inputs, "save_nc", False),
        save_png=_bool_option(inputs, "save_png", False),
    )


def build_domain(cfg: RunConfig) -> Domain:
    nx, ny, nz = cfg.resolution
    return Domain(
        from_=cfg.domain_from,
        to=cfg.domain_to,
        surface_weight=cfg.surface_weight,
        width=nx,
        height=ny,
        depth=nz,
        include_boundary_cells=cfg.include_boundary_cells,
    )


def _enable_x64() -> None:
    import jax

    jax.config.update("jax_enable_x64", True)
    os.environ.setdefault("JAX_ENABLE_X64", "True")


def march_config(cfg: RunConfig, *, verbose: MarchVerbose | None = None, source: str = "defaults") -> Domain:
    """Build the domain for `cfg`, march it once with the point-source field, and return it."""
    v = verbose if verbose is not None else MarchVerbose(enabled=False)
    refine = refiner_from_option(cfg.refine_option, iterations=cfg.bisect_iterations)
    domain = build_domain(cfg)

    v.header()
    v.domain_block(
        source=source,
        domain_from=cfg.domain_from.as_tuple(),
        domain_to=cfg.domain_to.as_tuple(),
        resolution=cfg.resolution,
        surface_weight=cfg.surface_weight,
        include_boundary_cells=cfg.include_boundary_cells,
        n_forces=len(cfg.forces),
        refine_name=getattr(refine, "__name__", repr(refine)),
    )
    v.phase("Marching tetrahedra.")
    t0 = _time.perf_counter()
    mesh = domain.march_tetrahedras(point_source_field, refine, cfg.forces)
    v.phase_done(_time.perf_counter() - t0)
    v.mesh_summary(index=len(domain.meshes) - 1, n_verts=len(mesh.verts), n_edges=len(mesh.edges), n_faces=len(mesh.faces))
    return domain


def mesh_residuals(domain: Domain, cfg: RunConfig) -> list[dict[str, float]]:
    _enable_x64()
    from .diagnostics import residual_summary

    return [residual_summary(m, cfg.forces, cfg.surface_weight) for m in domain.meshes]


def run_demo(
    stream: TextIO | None = None,
    *,
    refine_option: str = "bisect",
    verbose: bool = False,
) -> Domain:
    """Run the canonical demo and write the Blender script to `stream` (stdout by default)."""
    t_start = _time.perf_counter()
    cfg = demo_config(refine_option=refine_option)
    v = MarchVerbose(enabled=verbose, stream=sys.stderr)
    domain = march_config(cfg, verbose=v, source="built-in demo")
    if verbose:
        for res in mesh_residuals(domain, cfg):
            v.residual_summary(max_abs=res["max_abs"], rms=res["rms"])
    domain.export(stream, name=cfg.mesh_name)
    v.complete(sec=_time.perf_counter() - t_start)
    return domain


def run_isomarch(input_path: str, *, verbose: bool = False) -> RunResult:
    """Run on a namelist file `isomarch_in.<ext>`, writing outputs next to it.

    Always writes `isomarch_out.<ext>.py` (Blender script) and `isomarch_out.<ext>.log`;
    `.vtp`, `.nc` and `.png` are written when `save_vtp`, `save_nc`, `save_png` are set.
    """
    t_start = _time.perf_counter()
    input_path = resolve_existing_path(input_path)
    input_path_abs = os.path.abspath(input_path)
    input_dir = os.path.dirname(input_path_abs) or "."
    base = os.path.basename(input_path_abs)
    if not base.startswith(INPUT_PREFIX):
        raise ValueError(f"Input file must be named {INPUT_PREFIX}XXX for some extension XXX")
    stem = os.path.join(input_dir, OUTPUT_PREFIX + base[len(INPUT_PREFIX):])

    cfg = config_from_inputs(parse_namelist(input_path_abs))
    v = MarchVerbose(enabled=verbose, stream=sys.stdout)
    domain = march_config(cfg, verbose=v, source=base)
    mesh = domain.meshes[-1]

    v.phase("Evaluating iso residuals.")
    residuals = mesh_residuals(domain, cfg)
    res = residuals[-1]
    v.residual_summary(max_abs=res["max_abs"], rms=res["rms"])

    script_path = stem + ".py"
    with open(script_path, "w", encoding="utf-8") as f:
        domain.export(f, name=cfg.mesh_name)
    v.wrote(script_path)

    vtp_path = nc_path = png_path = None
    if cfg.save_vtp:
        from .diagnostics import iso_residuals
        from .vtk_io import write_mesh_vtp

        vtp_path = stem + ".vtp"
        positions, weights = forces_as_arrays(cfg.forces)
        points, _faces, _edges = mesh.as_arrays()
        point_data = None
        if points.shape[0] > 0:
            point_data = {
                "iso_residual": iso_residuals(
                    points=points, positions=positions, weights=weights, surface_weight=cfg.surface_weight
                )
            }
        write_mesh_vtp(vtp_path, mesh, point_data=point_data)
        v.wrote(vtp_path)
    if cfg.save_nc:
        from .io_output import write_mesh_nc

        nc_path = stem + ".nc"
        write_mesh_nc(nc_path, domain, residuals=residuals)
        v.wrote(nc_path)
    if cfg.save_png:
        from .plotting import plot_mesh_png

        png_path = stem + ".png"
        plot_mesh_png(png_path, mesh, title=cfg.mesh_name)
        v.wrote(png_path)

    log_path = stem + ".log"
    with open(log_path, "w", encoding="utf-8") as f:
        f.write(f"input={input_path_abs}\n")
        f.write(f"resolution={cfg.resolution[0]} {cfg.resolution[1]} {cfg.resolution[2]}\n")
        f.write(f"surface_weight={cfg.surface_weight:.6e}\n")
        f.write(f"refine_option={cfg.refine_option}\n")
        f.write(f"include_boundary_cells={cfg.include_boundary_cells}\n")
        f.write(f"n_verts={len(mesh.verts)}\n")
        f.write(f"n_edges={len(mesh.edges)}\n")
        f.write(f"n_faces={len(mesh.faces)}\n")
        f.write(f"residual_max_abs={res['max_abs']:.6e}\n")
        f.write(f"residual_rms={res['rms']:.6e}\n")

    v.complete(sec=_time.perf_counter() - t_start)
    return RunResult(
        input_path=input_path_abs,
        output_script=script_path,
        output_vtp=vtp_path,
        output_nc=nc_path,
        output_png=png_path,
        output_log=log_path,
        n_verts=len(mesh.verts),
        n_faces=len(mesh.faces),
        residual_max_abs=float(res["max_abs"]),
        residual_rms=float(res["rms"]),
    )
