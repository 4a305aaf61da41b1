from __future__ import annotations

from pathlib import Path

import numpy as np

from .mesh import Mesh


def _setup_matplotlib():
    import matplotlib

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt

    plt.rcParams.update(
        {
            "figure.dpi": 160,
            "savefig.dpi": 160,
            "font.size": 11,
        }
    )
    return plt


def plot_mesh_png(path: str | Path, mesh: Mesh, *, title: str = "isomarch surface") -> None:
    """Save a shaded 3D preview of `mesh` to a PNG file."""
    plt = _setup_matplotlib()
    points, faces, _edges = mesh.as_arrays()

    fig = plt.figure(figsize=(6.0, 6.0))
    ax = fig.add_subplot(111, projection="3d")
    if faces.shape[0] > 0:
        ax.plot_trisurf(
            points[:, 0],
            points[:, 1],
            points[:, 2],
            triangles=faces,
            cmap="viridis",
            linewidth=0.0,
            antialiased=True,
        )
        extent = np.max(points, axis=0) - np.min(points, axis=0)
        # Flat meshes still need a visible box along the collapsed axis.
        floor = 0.05 * max(float(np.max(extent)), 1.0)
        ax.set_box_aspect(tuple(float(e) for e in np.maximum(extent, floor)))
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")
    ax.set_title(f"{title}\n{faces.shape[0]} triangles")
    fig.tight_layout()
    fig.savefig(str(path))
    plt.close(fig)
