from __future__ import annotations

import ast
import io
import subprocess
import sys
from pathlib import Path

import pytest

from isomarch.cli import main
from isomarch.fields import DEMO_FORCES
from isomarch.io_output import read_mesh_nc
from isomarch.run import config_from_inputs, demo_config, march_config, run_isomarch
from isomarch.utils import parse_namelist
from isomarch.vectors import Vec3
from isomarch.verbose import MarchVerbose

HERE = Path(__file__).resolve()
PROJECT_ROOT = HERE.parents[1]

SPHERE_NML = """\
! unit sphere
&isomarch_nml
  domain_from = (/ -2.0, -2.0, -2.0 /)   ! lower corner
  domain_to = (/ 2.0, 2.0, 2.0 /)
  resolution = (/ 6, 6, 6 /)
  surface_weight = 1.0d0
  force_positions = (/ 0.05, 0.0,
                       0.0 /)
  force_weights = (/ 1.0 /)
  include_boundary_cells = .false.
  mesh_name = 'Sphere!'
  save_vtp = .true.
  save_nc = .t.
  save_png = T
/
"""


def _write_input(tmp_path: Path, text: str = SPHERE_NML, ext: str = "sphere") -> Path:
    p = tmp_path / f"isomarch_in.{ext}"
    p.write_text(text, encoding="utf-8")
    return p


def test_parse_namelist(tmp_path):
    inputs = parse_namelist(str(_write_input(tmp_path)))
    assert inputs["domain_from"] == [-2.0, -2.0, -2.0]
    assert inputs["resolution"] == [6, 6, 6]
    assert inputs["surface_weight"] == 1.0
    assert inputs["force_positions"] == [0.05, 0.0, 0.0]
    assert inputs["include_boundary_cells"] is False
    assert inputs["mesh_name"] == "Sphere!"
    assert inputs["save_nc"] is True and inputs["save_png"] is True


def test_parse_namelist_requires_the_group(tmp_path):
    p = tmp_path / "isomarch_in.empty"
    p.write_text("&other_nml\n a = 1\n/\n", encoding="utf-8")
    with pytest.raises(ValueError, match="isomarch_nml"):
        parse_namelist(str(p))


def test_parse_namelist_value_forms(tmp_path):
    p = tmp_path / "isomarch_in.forms"
    p.write_text(
        "&isomarch_nml\n"
        "  refine_option = \"center\",\n"
        "  bisect_iterations = +12\n"
        "  surface_weight = 2.5D-1\n"
        "  save_vtp = .F.\n"
        "  domain_to = (/ 1, 2.0, 3d0 /),\n"
        "&end\n"
        "  mesh_name = 'ignored'\n",
        encoding="utf-8",
    )
    inputs = parse_namelist(str(p))
    assert inputs == {
        "refine_option": "center",
        "bisect_iterations": 12,
        "surface_weight": 0.25,
        "save_vtp": False,
        "domain_to": [1, 2.0, 3.0],
    }

    p.write_text("&isomarch_nml\n  save_nc = maybe\n/\n", encoding="utf-8")
    with pytest.raises(ValueError, match="maybe"):
        parse_namelist(str(p))


def test_empty_namelist_gives_the_demo():
    cfg = config_from_inputs({})
    assert cfg == demo_config()
    assert cfg.forces == DEMO_FORCES
    assert cfg.resolution == (32, 32, 32)
    assert cfg.domain_from == Vec3(-16.0, -16.0, -16.0)


@pytest.mark.parametrize(
    "inputs, match",
    [
        ({"resolution": [4, 0, 4]}, "resolution"),
        ({"resolution": [4, 4]}, "resolution"),
        ({"domain_from": [0.0, 0.0, 0.0], "domain_to": [1.0, 0.0, 1.0]}, "domain_from.y"),
        ({"domain_to": [1.0, 2.0]}, "domain_to"),
        ({"force_positions": [0.0, 0.0, 0.0]}, "together"),
        ({"force_positions": [0.0, 0.0, 0.0, 1.0], "force_weights": [1.0]}, "3 values"),
        ({"force_positions": [0.0, 0.0, 0.0], "force_weights": [1.0, 2.0]}, "force_weights"),
        ({"refine_option": "secant"}, "refine_option"),
        ({"bisect_iterations": 0}, "iteration"),
        ({"resolution": [4.7, 4, 4]}, "resolution"),
        ({"resolution": 4.0}, "resolution"),
        ({"surface_weight": [1.0, 2.0]}, "surface_weight"),
        ({"surface_weight": "one"}, "surface_weight"),
        ({"domain_from": [0.0, "a", 0.0]}, "domain_from"),
        ({"bisect_iterations": 8.5}, "bisect_iterations"),
        ({"save_vtp": "no"}, "save_vtp"),
        ({"save_png": 1}, "save_png"),
        ({"include_boundary_cells": "yes"}, "include_boundary_cells"),
        ({"mesh_name": 3}, "mesh_name"),
    ],
)
def test_config_validation(inputs, match):
    with pytest.raises(ValueError, match=match):
        config_from_inputs(inputs)


def test_run_isomarch_writes_outputs(tmp_path):
    inp = _write_input(tmp_path)
    res = run_isomarch(str(inp))

    assert res.n_faces > 0
    assert res.n_verts == 3 * res.n_faces
    assert res.residual_max_abs < 0.05
    for path in (res.output_script, res.output_vtp, res.output_nc, res.output_png, res.output_log):
        assert path is not None and Path(path).exists()
    assert Path(res.output_script).name == "isomarch_out.sphere.py"

    tree = ast.parse(Path(res.output_script).read_text(encoding="utf-8"))
    faces = [n for n in tree.body if isinstance(n, ast.Assign) and n.targets[0].id == "faces"][0]
    assert len(ast.literal_eval(faces.value)) == res.n_faces
    assert "bpy.data.meshes.new('Sphere!')" in Path(res.output_script).read_text(encoding="utf-8")

    domain = read_mesh_nc(res.output_nc)
    assert domain.include_boundary_cells is False
    assert len(domain.meshes[0].faces) == res.n_faces

    log = Path(res.output_log).read_text(encoding="utf-8")
    assert f"n_faces={res.n_faces}" in log


def test_run_isomarch_rejects_bad_filename(tmp_path):
    p = tmp_path / "sphere.nml"
    p.write_text(SPHERE_NML, encoding="utf-8")
    with pytest.raises(ValueError, match="isomarch_in"):
        run_isomarch(str(p))


def test_cli_runs_namelist(tmp_path):
    text = SPHERE_NML.replace("save_png = T", "save_png = F").replace("save_nc = .t.", "save_nc = .f.")
    inp = _write_input(tmp_path, text, ext="cli")
    proc = subprocess.run(
        [sys.executable, "-m", "isomarch.cli", "--platform", "cpu", "--verbose", str(inp)],
        cwd=str(PROJECT_ROOT),
        capture_output=True,
        text=True,
        timeout=600,
        check=False,
    )
    assert proc.returncode == 0, proc.stderr
    assert "ISOMARCH complete" in proc.stdout
    assert (tmp_path / "isomarch_out.cli.py").exists()
    assert (tmp_path / "isomarch_out.cli.vtp").exists()
    assert not (tmp_path / "isomarch_out.cli.nc").exists()


def test_cli_reports_config_errors(tmp_path):
    inp = _write_input(tmp_path, SPHERE_NML.replace("(/ 6, 6, 6 /)", "(/ 6, -1, 6 /)"), ext="bad")
    proc = subprocess.run(
        [sys.executable, "-m", "isomarch.cli", str(inp)],
        cwd=str(PROJECT_ROOT),
        capture_output=True,
        text=True,
        timeout=600,
        check=False,
    )
    assert proc.returncode != 0
    assert "resolution" in proc.stderr


def test_cli_turns_bad_value_types_into_exit_messages(tmp_path):
    text = SPHERE_NML.replace("surface_weight = 1.0d0", "surface_weight = (/ 1.0, 2.0 /)")
    inp = _write_input(tmp_path, text, ext="badtype")
    with pytest.raises(SystemExit) as e:
        main([str(inp)])
    assert "surface_weight" in str(e.value.code)
    assert str(e.value.code).startswith("[isomarch]")
    assert not (tmp_path / "isomarch_out.badtype.py").exists()


@pytest.mark.parametrize("flag", [["--refine", "center"], ["--output", "demo.py"]])
def test_cli_rejects_demo_flags_with_namelist(tmp_path, capsys, flag):
    inp = _write_input(tmp_path, ext="flags")
    with pytest.raises(SystemExit) as e:
        main([str(inp), *flag])
    assert e.value.code == 2
    assert flag[0] in capsys.readouterr().err
    assert not (tmp_path / "isomarch_out.flags.py").exists()


@pytest.mark.parametrize("option, name", [("center", "refine_center"), ("bisect", "refine_bisect")])
def test_verbose_output_names_the_configured_refiner(option, name):
    cfg = config_from_inputs({"resolution": 2, "refine_option": option})
    buf = io.StringIO()
    march_config(cfg, verbose=MarchVerbose(enabled=True, stream=buf), source="test")
    text = buf.getvalue()
    assert text.startswith(" This is ISOMARCH,")
    assert f"refiner        = {name}" in text
    assert "bisection" not in text
