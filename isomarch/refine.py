from __future__ import annotations

from typing import Any, Callable

from .vectors import Vec3

WeightFunction = Callable[[Vec3, Any], float]
RefineFunction = Callable[[Vec3, Vec3, WeightFunction, Any, float], Vec3]

BISECT_ITERATIONS = 8


def refine_center(
    v1: Vec3,
    v2: Vec3,
    weight_function: WeightFunction,
    weight_user_data: Any,
    surface_weight: float,
) -> Vec3:
    """Edge midpoint. Exact when the field is linear along the edge and centred on the iso-value."""
    return v1.midpoint(v2)


def _bisect(
    v1: Vec3,
    v2: Vec3,
    weight_function: WeightFunction,
    weight_user_data: Any,
    surface_weight: float,
    iterations: int,
) -> Vec3:
    pos_left = v1
    pos_right = v2
    if weight_function(pos_left, weight_user_data) > weight_function(pos_right, weight_user_data):
        pos_left, pos_right = pos_right, pos_left

    pos_center = pos_left
    for _ in range(iterations):
        pos_center = pos_left.midpoint(pos_right)
        if weight_function(pos_center, weight_user_data) < surface_weight:
            pos_left = pos_center
        else:
            pos_right = pos_center
    return pos_center


def refine_bisect(
    v1: Vec3,
    v2: Vec3,
    weight_function: WeightFunction,
    weight_user_data: Any,
    surface_weight: float,
) -> Vec3:
    """Locate the iso crossing on [v1, v2] by fixed-count bisection.

    The endpoint with the lower field value becomes the left bracket, so the result does
    not depend on argument order. After `BISECT_ITERATIONS` halvings the returned point is
    within 2**-8 of the edge length from the crossing (when the endpoints straddle it).
    The field is only evaluated on the segment.
    """
    return _bisect(v1, v2, weight_function, weight_user_data, surface_weight, BISECT_ITERATIONS)


def make_bisect_refiner(iterations: int) -> RefineFunction:
    """Bisection refiner with a custom iteration count."""
    iterations = int(iterations)
    if iterations < 1:
        raise ValueError(f"bisection needs at least one iteration, got {iterations}")
    if iterations == BISECT_ITERATIONS:
        return refine_bisect

    def refine(v1, v2, weight_function, weight_user_data, surface_weight):
        return _bisect(v1, v2, weight_function, weight_user_data, surface_weight, iterations)

    refine.__name__ = f"refine_bisect_{iterations}"
    return refine


REFINERS: dict[str, RefineFunction] = {
    "bisect": refine_bisect,
    "center": refine_center,
}


def refiner_from_option(option: str, *, iterations: int = BISECT_ITERATIONS) -> RefineFunction:
    key = str(option).strip().lower()
    if key not in REFINERS:
        raise ValueError(f"refine_option must be one of {sorted(REFINERS)}, got {option!r}")
    if key == "bisect":
        return make_bisect_refiner(iterations)
    return REFINERS[key]
