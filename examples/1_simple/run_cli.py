#!/usr/bin/env python3
"""End-to-end example runner.

Runs the CLI on one of the namelist inputs in this directory, producing
isomarch_out.*.{py,log} and, when enabled in the namelist, .vtp/.nc/.png files.
Open the .py output in Blender (Scripting tab or `blender --python ...`) and
the .vtp output in ParaView.
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path


def main() -> None:
    default_input = Path(__file__).with_name("isomarch_in.three_sources")

    parser = argparse.ArgumentParser()
    parser.add_argument("--input", type=str, default=str(default_input), help="Path to isomarch_in.*")
    parser.add_argument("--platform", type=str, default="cpu", choices=["cpu", "gpu"])
    args = parser.parse_args()

    input_path = Path(args.input).resolve()
    if not input_path.name.startswith("isomarch_in."):
        raise SystemExit("Input must be named isomarch_in.*")

    project_root = Path(__file__).resolve().parents[2]
    cmd = [sys.executable, "-m", "isomarch.cli", "--platform", args.platform, "--verbose", str(input_path)]
    print("[examples/1_simple] running:", " ".join(cmd))
    subprocess.run(cmd, cwd=str(project_root), check=True)


if __name__ == "__main__":
    main()
