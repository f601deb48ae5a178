"""Roe averaging, wave strengths and entropy fixes

This module implements the pieces of the generalized Roe scheme that do not depend on the residual
path: the Roe-averaged state between two face states, the characteristic wave strengths of a jump
and the eigenvalue limiting policies.

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

import numpy as np

from .config import RoeClosure
from .flux import get_convective_basis
from .state import FaceState
from .state import RoeAverageState
from .utils import real_abs
from .utils import real_max

CLOSURE_CORRECTION_TOLERANCE = 1e-3


def _weighted_mean(value_i: float | complex, value_j: float | complex) -> float | complex:
    """Blends the arithmetic mean with the weights `(1, 4, 1)/6`"""
    mean = 0.5 * (value_i + value_j)
    return (value_i + value_j + 4. * mean) / 6.


def _correct_closure(
    state_i: FaceState,
    state_j: FaceState,
    chi: float | complex,
    kappa: float | complex,
) -> tuple[float | complex, float | complex]:
    """Corrects the averaged closure coefficients to reproduce the pressure jump

    The correction is skipped if the jump is too small relative to the density at ``state_i``.

    Args:
        state_i: State at point i.
        state_j: State at point j.
        chi: Averaged closure coefficient `χ`.
        kappa: Averaged closure coefficient `κ`.

    Returns:
        Corrected `χ` and `κ`.
    """
    delta_rho = state_j.density - state_i.density
    delta_p = state_j.pressure - state_i.pressure
    kappa_static_enthalpy = _weighted_mean(
        state_i.static_enthalpy * state_i.kappa, state_j.static_enthalpy * state_j.kappa)
    s = chi + kappa_static_enthalpy
    d = s * s * delta_rho * delta_rho + delta_p * delta_p
    delta_rho_static_energy = (
        state_j.density * state_j.static_energy - state_i.density * state_i.static_energy)
    err_p = delta_p - chi * delta_rho - kappa * delta_rho_static_energy
    denominator = d - delta_p * err_p
    if (
        abs(np.real(denominator / state_i.density)) > CLOSURE_CORRECTION_TOLERANCE
        and abs(np.real(delta_rho / state_i.density)) > CLOSURE_CORRECTION_TOLERANCE
        and np.real(s / state_i.density) > CLOSURE_CORRECTION_TOLERANCE
    ):
        kappa = d * kappa / denominator
        chi = (d * chi + s * s * delta_rho * err_p) / denominator
    return chi, kappa


def compute_roe_average(
    state_i: FaceState,
    state_j: FaceState,
    closure: RoeClosure = RoeClosure.SIMPSON,
) -> RoeAverageState:
    """Computes the Roe-averaged state between two face states

    Args:
        state_i: State at point i.
        state_j: State at point j.
        closure: Averaging policy of the closure coefficients.

    Returns:
        Roe-averaged state. Its squared speed of sound may be non-positive.
    """
    ratio = np.sqrt(real_abs(state_j.density / state_i.density))
    density = ratio * state_i.density
    velocity = (ratio * state_j.velocity + state_i.velocity) / (ratio + 1.)
    enthalpy = (ratio * state_j.enthalpy + state_i.enthalpy) / (ratio + 1.)
    kappa = _weighted_mean(state_i.kappa, state_j.kappa)
    chi = _weighted_mean(state_i.chi, state_j.chi)
    if closure is RoeClosure.PRESSURE_CORRECTED:
        chi, kappa = _correct_closure(state_i, state_j, chi, kappa)
    sound_speed2 = chi + kappa * (enthalpy - 0.5 * np.dot(velocity, velocity))
    return RoeAverageState(density, velocity, enthalpy, chi, kappa, sound_speed2)


def get_wave_strengths(
    density: float | complex,
    sound_speed: float | complex,
    delta_rho: float | complex,
    delta_p: float | complex,
    delta_vel: np.ndarray,
    unit_normal: np.ndarray,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """Gets the characteristic wave strengths of a jump

    The strengths match the right eigenvectors of ``get_p_matrix``:

    * 2D: `[Δρ - Δp/c², n_yΔu - n_xΔv, Δvₙ + Δp/(ρc), -Δvₙ + Δp/(ρc)]`,
    * 3D: `[nₖ(Δρ - Δp/c²) + (Δv × n)ₖ for k = x,y,z, Δvₙ + Δp/(ρc), -Δvₙ + Δp/(ρc)]`.

    Args:
        density: Roe density.
        sound_speed: Roe speed of sound.
        delta_rho: Density jump `ρⱼ - ρᵢ`.
        delta_p: Pressure jump `pⱼ - pᵢ`.
        delta_vel: Velocity jump `vⱼ - vᵢ` in shape ``(n_dim,)``.
        unit_normal: Unit normal in shape ``(n_dim,)``.
        out: Array of shape ``(n_dim+2,)`` into which to write. If not provided, a
            newly-allocated array will be returned.

    Returns:
        Wave strengths.
    """
    n_dim = delta_vel.shape[0]
    if out is None:
        out = np.empty(n_dim + 2, dtype=np.result_type(
            float, density, sound_speed, delta_rho, delta_p, delta_vel, unit_normal))
    weights, tangents = get_convective_basis(unit_normal)
    proj_delta_vel = np.dot(delta_vel, unit_normal)
    entropy_strength = delta_rho - delta_p / (sound_speed * sound_speed)
    out[:n_dim] = weights * entropy_strength + tangents @ delta_vel
    out[-2] = proj_delta_vel + delta_p / (density * sound_speed)
    out[-1] = -proj_delta_vel + delta_p / (density * sound_speed)
    return out


def get_wave_speeds(
    proj_velocity: float | complex,
    sound_speed: float | complex,
    n_dim: int,
) -> np.ndarray:
    """Gets the signed eigenvalues `[vₙ (n_dim times), vₙ + c, vₙ - c]`"""
    speeds = np.full(n_dim + 2, proj_velocity, dtype=np.result_type(float, proj_velocity))
    speeds[-2] = proj_velocity + sound_speed
    speeds[-1] = proj_velocity - sound_speed
    return speeds


def lax_entropy_fix(
    eigenvalues: np.ndarray,
    proj_velocity: float | complex,
    sound_speed: float | complex,
    coefficient: float,
) -> np.ndarray:
    """Floors the absolute eigenvalues at a fraction of the spectral radius (Mavriplis)

    Args:
        eigenvalues: Signed eigenvalues.
        proj_velocity: Projected Roe velocity.
        sound_speed: Roe speed of sound.
        coefficient: Entropy fix coefficient `δ`.

    Returns:
        `max(|λ|, δ⋅(|vₙ| + c))`.
    """
    max_lambda = real_abs(proj_velocity) + sound_speed
    return real_max(real_abs(eigenvalues), coefficient * max_lambda)


def harten_hyman_entropy_fix(
    eigenvalues: np.ndarray,
    wave_speeds_i: np.ndarray,
    wave_speeds_j: np.ndarray,
) -> np.ndarray:
    """Smooths the absolute eigenvalues near zero after Harten and Hyman (1983)

    Args:
        eigenvalues: Signed eigenvalues at the Roe state.
        wave_speeds_i: Signed eigenvalues at point i.
        wave_speeds_j: Signed eigenvalues at point j.

    Returns:
        Absolute eigenvalues, replaced by `(λ² + ε²)/(2ε)` where `|λ| < ε` with
        `ε = 4⋅max(0, λ - λᵢ, λⱼ - λ)`.
    """
    result = np.empty_like(eigenvalues)
    for k, eigenvalue in enumerate(eigenvalues):
        epsilon = 4. * real_max(
            0., real_max(eigenvalue - wave_speeds_i[k], wave_speeds_j[k] - eigenvalue))
        if np.real(real_abs(eigenvalue)) < np.real(epsilon):
            result[k] = (eigenvalue * eigenvalue + epsilon * epsilon) / (2. * epsilon)
        else:
            result[k] = real_abs(eigenvalue)
    return result
