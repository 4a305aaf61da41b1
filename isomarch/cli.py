from __future__ import annotations

import argparse
import os


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="isomarch: marching-tetrahedra iso-surface extraction with Blender script output"
    )
    parser.add_argument(
        "input",
        type=str,
        nargs="?",
        default=None,
        help="Optional namelist file (isomarch_in.*). Without it the built-in demo is printed to stdout.",
    )
    parser.add_argument("--output", type=str, default=None, help="Write the demo script to this file instead of stdout.")
    parser.add_argument(
        "--refine",
        type=str,
        default=None,
        choices=["bisect", "center"],
        help="Edge refiner for the demo run (default: bisect). Namelist runs use refine_option.",
    )
    parser.add_argument("--platform", type=str, default=None, choices=["cpu", "gpu"],
                        help="Force JAX platform for diagnostics (must be set before JAX is imported)")
    parser.add_argument("--verbose", action="store_true", help="Print progress, timings and iso residuals.")
    args = parser.parse_args(argv)
    if args.input is not None:
        demo_only = [name for name, val in (("--output", args.output), ("--refine", args.refine)) if val is not None]
        if demo_only:
            parser.error(
                f"{', '.join(demo_only)} only applies to the built-in demo; "
                "namelist runs read refine_option from the file and write outputs next to it"
            )
    refine_option = args.refine or "bisect"

    # Must be set before importing jax:
    if args.platform:
        os.environ["JAX_PLATFORM_NAME"] = args.platform

    from .run import run_demo, run_isomarch

    if args.input is None:
        if args.output is None:
            run_demo(refine_option=refine_option, verbose=args.verbose)
        else:
            with open(args.output, "w", encoding="utf-8") as f:
                run_demo(f, refine_option=refine_option, verbose=args.verbose)
            if args.verbose:
                print(f"[isomarch] wrote: {args.output}")
        return 0

    try:
        result = run_isomarch(args.input, verbose=args.verbose)
    except ValueError as e:
        raise SystemExit(f"[isomarch] {e}") from e

    print(f"[isomarch] faces={result.n_faces}  verts={result.n_verts}  "
          f"max|f-iso|={result.residual_max_abs:.3e}")
    for path in (result.output_script, result.output_vtp, result.output_nc, result.output_png, result.output_log):
        if path is not None:
            print(f"[isomarch] wrote: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
