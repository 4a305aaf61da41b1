from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

from .vectors import Vec3


@dataclass(frozen=True)
class Force:
    """Point source of strength `force` located at `position`."""

    position: Vec3
    force: float


def point_source_field(position: Vec3, data: Sequence[Force]) -> float:
    """Sum of force / distance over all point sources.

    The field is singular at a source; there the source contributes a signed infinity.
    """
    total_weight = 0.0
    for f in data:
        dx = position.x - f.position.x
        dy = position.y - f.position.y
        dz = position.z - f.position.z
        distance = math.sqrt(dx * dx + dy * dy + dz * dz)
        if distance > 0.0:
            total_weight += f.force / distance
        else:
            total_weight += math.copysign(math.inf, f.force)
    return total_weight


def forces_from_arrays(positions: Any, weights: Any) -> list[Force]:
    """Build forces from a flat (3N,) or (N,3) position array and an (N,) weight array."""
    pos = np.asarray(positions, dtype=float).reshape(-1)
    w = np.asarray(weights, dtype=float).reshape(-1)
    if pos.size % 3 != 0:
        raise ValueError(f"force_positions must hold 3 values per force, got {pos.size} values")
    pos = pos.reshape(-1, 3)
    if pos.shape[0] != w.size:
        raise ValueError(f"force_positions describes {pos.shape[0]} forces but force_weights has {w.size}")
    return [Force(Vec3(float(p[0]), float(p[1]), float(p[2])), float(wi)) for p, wi in zip(pos, w)]


def forces_as_arrays(forces: Sequence[Force]) -> tuple[np.ndarray, np.ndarray]:
    """Inverse of `forces_from_arrays`: positions (N,3) and weights (N,)."""
    positions = np.array([f.position.as_tuple() for f in forces], dtype=float).reshape(-1, 3)
    weights = np.array([f.force for f in forces], dtype=float).reshape(-1)
    return positions, weights


# Canonical demo inputs.
DEMO_SIZE = 32
DEMO_FROM = Vec3(-16.0, -16.0, -16.0)
DEMO_TO = Vec3(16.0, 16.0, 16.0)
DEMO_SURFACE_WEIGHT = 1.0
DEMO_FORCES: tuple[Force, ...] = (
    Force(Vec3(4.0, 6.0, 0.0), 2.0),
    Force(Vec3(-4.0, 6.0, 0.0), 2.5),
    Force(Vec3(4.0, -6.0, -4.0), 2.5),
)
