"""Inviscid flux kernels

This module implements the projected inviscid flux of the compressible Euler equations, its exact
Jacobian with respect to the conserved variables and the right and left eigenvectors of that
Jacobian. All kernels are formulated with the closure coefficients `χ` and `κ` instead of a
constant heat ratio, so they hold for a general equation of state.

The eigenvalues are ordered `[vₙ (n_dim times), vₙ + c, vₙ - c]`. The right eigenvectors of the
`n_dim` convective waves are, for a unit normal `n`,

* 2D: the entropy wave `(1, v, ½|v|² - χ/κ)` and the shear wave along `t = (n_y, -n_x)`,
* 3D: the entropy wave weighted with `nₖ` plus the shear wave along `n × eₖ`, for `k = x, y, z`,

so that the left eigenvectors, i.e. the wave strengths, are regular for any normal direction.

All kernels are analytic in their arguments and can therefore be differentiated by complex step.

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

import numpy as np


def _allocate(out: np.ndarray | None, shape: tuple, *args) -> np.ndarray:
    if out is None:
        return np.empty(shape, dtype=np.result_type(float, *args))
    return out


def get_convective_basis(unit_normal: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Gets entropy weights and tangents spanning the convective waves

    Args:
        unit_normal: Unit normal in shape ``(n_dim,)``.

    Returns:
        Entropy weight of each convective wave in shape ``(n_dim,)`` and tangent of each
        convective wave in shape ``(n_dim,n_dim)``.
    """
    if unit_normal.shape[0] == 2:
        weights = np.array([1., 0.], dtype=unit_normal.dtype)
        tangents = np.zeros((2, 2), dtype=unit_normal.dtype)
        tangents[1] = unit_normal[1], -unit_normal[0]
        return weights, tangents
    return unit_normal.copy(), np.cross(unit_normal, np.eye(3))


def get_inviscid_proj_flux(
    density: float | complex,
    velocity: np.ndarray,
    pressure: float | complex,
    enthalpy: float | complex,
    normal: np.ndarray,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """Gets the inviscid flux projected onto a face normal

    Args:
        density: Density.
        velocity: Velocity in shape ``(n_dim,)``.
        pressure: Static pressure.
        enthalpy: Total enthalpy.
        normal: Face normal in shape ``(n_dim,)`` whose magnitude is the face area.
        out: Array of shape ``(n_dim+2,)`` into which to write. If not provided, a
            newly-allocated array will be returned.

    Returns:
        Projected flux `[ρvₙ, ρvvₙ + pn, ρHvₙ]`.
    """
    out = _allocate(out, (velocity.shape[0] + 2,), density, velocity, pressure, enthalpy, normal)
    mass_flux = density * np.dot(velocity, normal)
    out[0] = mass_flux
    out[1:-1] = mass_flux * velocity + pressure * normal
    out[-1] = mass_flux * enthalpy
    return out


def get_inviscid_proj_jac(
    velocity: np.ndarray,
    enthalpy: float | complex,
    chi: float | complex,
    kappa: float | complex,
    normal: np.ndarray,
    scale: float,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """Gets the Jacobian of the projected inviscid flux wrt the conserved variables

    Exact for a general equation of state, where `∂p/∂ρ = φ = χ + ½κ|v|²`, `∂p/∂(ρv) = -κv` and
    `∂p/∂(ρE) = κ`.

    Args:
        velocity: Velocity in shape ``(n_dim,)``.
        enthalpy: Total enthalpy.
        chi: Closure coefficient `χ`.
        kappa: Closure coefficient `κ`.
        normal: Face normal in shape ``(n_dim,)`` whose magnitude is the face area.
        scale: Factor to scale the Jacobian with.
        out: Array of shape ``(n_dim+2,n_dim+2)`` into which to write. If not provided, a
            newly-allocated array will be returned.

    Returns:
        Scaled Jacobian.
    """
    n_dim = velocity.shape[0]
    out = _allocate(out, (n_dim + 2, n_dim + 2), velocity, enthalpy, chi, kappa, normal, scale)
    proj_vel = np.dot(velocity, normal)
    phi = chi + 0.5 * kappa * np.dot(velocity, velocity)

    out[0, 0] = 0.
    out[0, 1:-1] = scale * normal
    out[0, -1] = 0.

    out[1:-1, 0] = scale * (normal * phi - velocity * proj_vel)
    out[1:-1, 1:-1] = scale * (
        np.outer(velocity, normal) - kappa * np.outer(normal, velocity)
        + proj_vel * np.eye(n_dim)
    )
    out[1:-1, -1] = scale * kappa * normal

    out[-1, 0] = scale * proj_vel * (phi - enthalpy)
    out[-1, 1:-1] = scale * (normal * enthalpy - kappa * velocity * proj_vel)
    out[-1, -1] = scale * (kappa + 1.) * proj_vel
    return out


def get_p_matrix(
    density: float | complex,
    velocity: np.ndarray,
    sound_speed: float | complex,
    enthalpy: float | complex,
    chi: float | complex,
    kappa: float | complex,
    unit_normal: np.ndarray,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """Gets the right eigenvectors `P` of the projected flux Jacobian

    Requires `κ ≠ 0`.

    Args:
        density: Density.
        velocity: Velocity in shape ``(n_dim,)``.
        sound_speed: Speed of sound.
        enthalpy: Total enthalpy.
        chi: Closure coefficient `χ`.
        kappa: Closure coefficient `κ`.
        unit_normal: Unit normal in shape ``(n_dim,)``.
        out: Array of shape ``(n_dim+2,n_dim+2)`` into which to write. If not provided, a
            newly-allocated array will be returned.

    Returns:
        Eigenvectors as columns.
    """
    n_dim = velocity.shape[0]
    out = _allocate(
        out, (n_dim + 2, n_dim + 2), density, velocity, sound_speed, enthalpy, chi, kappa,
        unit_normal,
    )
    weights, tangents = get_convective_basis(unit_normal)
    rho_over_c = density / sound_speed
    zeta = 0.5 * np.dot(velocity, velocity) - chi / kappa
    proj_vel = np.dot(velocity, unit_normal)

    out[0, :n_dim] = weights
    out[1:-1, :n_dim] = np.outer(velocity, weights) + density * tangents.T
    out[-1, :n_dim] = zeta * weights + density * (tangents @ velocity)

    out[0, -2:] = 0.5 * rho_over_c
    out[1:-1, -2] = 0.5 * (velocity * rho_over_c + unit_normal * density)
    out[1:-1, -1] = 0.5 * (velocity * rho_over_c - unit_normal * density)
    out[-1, -2] = 0.5 * (enthalpy * rho_over_c + density * proj_vel)
    out[-1, -1] = 0.5 * (enthalpy * rho_over_c - density * proj_vel)
    return out


def get_p_matrix_inv(
    density: float | complex,
    velocity: np.ndarray,
    sound_speed: float | complex,
    chi: float | complex,
    kappa: float | complex,
    unit_normal: np.ndarray,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """Gets the left eigenvectors `P⁻¹` of the projected flux Jacobian

    The rows map a jump of the conserved variables onto the wave strengths. The speed of sound must
    be consistent with the enthalpy used for `P`, i.e. `c² = χ + κ⋅(H - ½|v|²)`.

    Args:
        density: Density.
        velocity: Velocity in shape ``(n_dim,)``.
        sound_speed: Speed of sound.
        chi: Closure coefficient `χ`.
        kappa: Closure coefficient `κ`.
        unit_normal: Unit normal in shape ``(n_dim,)``.
        out: Array of shape ``(n_dim+2,n_dim+2)`` into which to write. If not provided, a
            newly-allocated array will be returned.

    Returns:
        Eigenvectors as rows.
    """
    n_dim = velocity.shape[0]
    out = _allocate(
        out, (n_dim + 2, n_dim + 2), density, velocity, sound_speed, chi, kappa, unit_normal,
    )
    weights, tangents = get_convective_basis(unit_normal)
    sound_speed2 = sound_speed * sound_speed
    phi = chi + 0.5 * kappa * np.dot(velocity, velocity)
    proj_vel = np.dot(velocity, unit_normal)

    # entropy `Δρ - Δp/c²` plus shear `t⋅Δv`
    out[:n_dim, 0] = weights * (1. - phi / sound_speed2) - (tangents @ velocity) / density
    out[:n_dim, 1:-1] = np.outer(weights, kappa * velocity / sound_speed2) + tangents / density
    out[:n_dim, -1] = -weights * kappa / sound_speed2

    # acoustic `±Δvₙ + Δp/(ρc)`
    out[-2, 0] = (-proj_vel + phi / sound_speed) / density
    out[-2, 1:-1] = (unit_normal - kappa * velocity / sound_speed) / density
    out[-2, -1] = kappa / (density * sound_speed)
    out[-1, 0] = (proj_vel + phi / sound_speed) / density
    out[-1, 1:-1] = (-unit_normal - kappa * velocity / sound_speed) / density
    out[-1, -1] = kappa / (density * sound_speed)
    return out
