"""Utility functions

This module implements absolute value, maximum and sign based on the real part only. The numerics
use them in place of ``abs`` and ``max`` to remain analytic for complex-valued states, such that
derivatives can be obtained by complex step.

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

import numpy as np

from .state import HEAT_RATIO
from .state import FaceState


def real_sign(value: float | complex | np.ndarray) -> float | np.ndarray:
    """Gets the sign of the real part, with ``+1`` for zero"""
    if np.ndim(value) == 0:
        return -1. if np.real(value) < 0. else 1.
    return np.where(np.real(value) < 0., -1., 1.)


def real_abs(value: float | complex | np.ndarray) -> float | complex | np.ndarray:
    """Gets the absolute value with respect to the real part

    Args:
        value: Real or complex scalar or array.

    Returns:
        ``-value`` where the real part is negative, ``value`` otherwise.
    """
    return real_sign(value) * value


def real_max(
    value_a: float | complex | np.ndarray,
    value_b: float | complex | np.ndarray,
) -> float | complex | np.ndarray:
    """Gets the maximum with respect to the real part

    Args:
        value_a: Real or complex scalar or array.
        value_b: Real or complex scalar or array.

    Returns:
        Element-wise the value with the larger real part, ``value_a`` on ties.
    """
    if np.ndim(value_a) == 0 and np.ndim(value_b) == 0:
        return value_a if np.real(value_a) >= np.real(value_b) else value_b
    return np.where(np.real(value_a) >= np.real(value_b), value_a, value_b)


def get_ideal_gas_state(
    conservative: np.ndarray,
    heat_ratio: float = HEAT_RATIO,
    grid_velocity: np.ndarray | None = None,
) -> FaceState:
    """Gets the face state of a calorically perfect gas from its conserved variables

    Args:
        conservative: Conserved variables `[ρ, ρv, ρE]` in shape ``(n_dim+2,)``.
        heat_ratio: Ratio of specific heats `γ`.
        grid_velocity: Grid velocity in shape ``(n_dim,)``.

    Returns:
        Face state.
    """
    density = conservative[0]
    velocity = conservative[1:-1] / density
    pressure = (heat_ratio - 1.) * (conservative[-1] - 0.5 * density * np.dot(velocity, velocity))
    return FaceState.from_ideal_gas(
        density, velocity, pressure, heat_ratio=heat_ratio, grid_velocity=grid_velocity)
