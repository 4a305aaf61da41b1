from __future__ import annotations

from typing import Any, Sequence

import jax
import jax.numpy as jnp
import numpy as np

from .fields import Force, forces_as_arrays
from .mesh import Mesh


def point_source_field_jnp(*, points: Any, positions: Any, weights: Any) -> jnp.ndarray:
    """Vectorized point-source field: f(x) = sum_i w_i / |x - c_i|.

    Args:
      points:    (N,3) or (3,)
      positions: (M,3) source locations
      weights:   (M,) source strengths
    Returns:
      f: (N,)
    """
    x = jnp.asarray(points, dtype=jnp.float64)
    if x.ndim == 1:
        x = x[None, :]
    if x.ndim != 2 or x.shape[1] != 3:
        raise ValueError(f"points must be (3,) or (N,3), got {x.shape}")
    pos = jnp.asarray(positions, dtype=jnp.float64).reshape((-1, 3))
    w = jnp.asarray(weights, dtype=jnp.float64).reshape((-1,))
    if w.shape[0] != pos.shape[0]:
        raise ValueError("weights must have one entry per source position")
    if pos.shape[0] == 0:
        return jnp.zeros((x.shape[0],), dtype=jnp.float64)

    def f_at_point(xi: jnp.ndarray) -> jnp.ndarray:
        r = jnp.sqrt(jnp.sum((xi[None, :] - pos) ** 2, axis=-1))
        return jnp.sum(w / r)

    return jax.vmap(f_at_point)(x)


def iso_residuals(*, points: Any, positions: Any, weights: Any, surface_weight: float) -> jnp.ndarray:
    """f(points) - surface_weight for the point-source field."""
    return point_source_field_jnp(points=points, positions=positions, weights=weights) - float(surface_weight)


def residual_summary(mesh: Mesh, forces: Sequence[Force], surface_weight: float) -> dict[str, float]:
    """How far the refined vertices of `mesh` are from the iso-value.

    Returns a dict with the vertex count, max |f - iso| and rms(f - iso).
    """
    points, _faces, _edges = mesh.as_arrays()
    if points.shape[0] == 0:
        return {"n_verts": 0, "max_abs": 0.0, "rms": 0.0}
    positions, weights = forces_as_arrays(forces)
    res = np.asarray(
        iso_residuals(points=points, positions=positions, weights=weights, surface_weight=surface_weight),
        dtype=float,
    )
    return {
        "n_verts": int(points.shape[0]),
        "max_abs": float(np.max(np.abs(res))),
        "rms": float(np.sqrt(np.mean(res**2))),
    }
