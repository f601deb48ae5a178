"""Generalized Roe upwind scheme

This module implements the face residual of Roe's approximate Riemann solver for a general
equation of state, together with its Jacobians wrt the conserved variables on both sides of the
face for implicit time integration.

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

import logging
from typing import NamedTuple

import numpy as np

from .base import Numerics
from .config import EntropyFix
from .config import NumericsConfig
from .exceptions import ConfigurationError
from .flux import get_inviscid_proj_flux
from .flux import get_inviscid_proj_jac
from .flux import get_p_matrix
from .flux import get_p_matrix_inv
from .roe import compute_roe_average
from .roe import get_wave_speeds
from .roe import get_wave_strengths
from .roe import harten_hyman_entropy_fix
from .roe import lax_entropy_fix
from .state import FaceState
from .state import RoeAverageState
from .utils import real_abs

logger = logging.getLogger(__name__)


class EigenSystem(NamedTuple):
    """Eigen decomposition used for the last face

    Attributes:
        eigenvalues: Absolute eigenvalues after entropy fix in shape ``(n_var,)``.
        p_tensor: Right eigenvectors as columns in shape ``(n_var,n_var)``.
        inv_p_tensor: Left eigenvectors as rows in shape ``(n_var,n_var)``. Only computed in
            implicit mode, ``None`` otherwise.
    """

    eigenvalues: np.ndarray
    p_tensor: np.ndarray
    inv_p_tensor: np.ndarray | None


class FaceResidual(NamedTuple):
    """Residual and Jacobians of one face

    Attributes:
        residual: Residual in shape ``(n_var,)``.
        jacobian_i: Jacobian wrt the conserved variables at point i in shape ``(n_var,n_var)``.
            ``None`` in explicit mode.
        jacobian_j: Jacobian wrt the conserved variables at point j in shape ``(n_var,n_var)``.
            ``None`` in explicit mode.
        degenerate: Whether the Roe state lost hyperbolicity and the residual was zeroed.
    """

    residual: np.ndarray
    jacobian_i: np.ndarray | None
    jacobian_j: np.ndarray | None
    degenerate: bool


class UpwindGeneralRoe(Numerics):
    """Roe's upwind scheme for a general equation of state

    Computes the residual `½(Fᵢ + Fⱼ)⋅n - ½|A|⋅ΔU⋅|n|` of a face with normal `n` pointing from
    point i to point j, where `|A| = P⋅|Λ|⋅P⁻¹` is the absolute flux Jacobian at the Roe state. In
    explicit mode, `P⁻¹⋅ΔU` is replaced by the characteristic wave strengths. In implicit mode, the
    central part is blended with the factor `κ_b`, and the Jacobians
    `κ_b⋅∂(F⋅n)/∂U ± (1 - κ_b)⋅|A|⋅|n|` are returned.

    If the squared Roe speed of sound is not positive, the residual and the Jacobians' diagonals
    are set to zero. A vanishing Roe closure coefficient `κ` is rejected, since the eigenvectors
    contain `χ/κ`.

    Density and pressure are not checked for positivity, and non-physical states lead to undefined
    results.
    """

    _implicit: bool
    _dynamic_grid: bool
    _kappa: float
    _u_i: np.ndarray
    _u_j: np.ndarray
    _diff_u: np.ndarray
    _delta_wave: np.ndarray
    _proj_flux_i: np.ndarray
    _proj_flux_j: np.ndarray
    _lambda: np.ndarray
    _p_tensor: np.ndarray
    _inv_p_tensor: np.ndarray
    _proj_mod_jac_tensor: np.ndarray

    def __init__(self, n_dim: int, config: NumericsConfig, dtype: type = float) -> None:
        """Initialize the scheme and allocate the scratch arrays

        Args:
            n_dim: Number of spatial dimensions, 2 or 3.
            config: Numerics parameters.
            dtype: Data type of the scratch and output arrays. Use ``complex`` for complex-step
                differentiation.
        """
        super().__init__(n_dim, config, dtype)
        self._implicit = config.implicit
        self._dynamic_grid = config.dynamic_grid
        self._kappa = config.roe_kappa
        n_var = self.n_var
        self._u_i = np.zeros(n_var, dtype=self.dtype)
        self._u_j = np.zeros(n_var, dtype=self.dtype)
        self._diff_u = np.zeros(n_var, dtype=self.dtype)
        self._delta_wave = np.zeros(n_var, dtype=self.dtype)
        self._proj_flux_i = np.zeros(n_var, dtype=self.dtype)
        self._proj_flux_j = np.zeros(n_var, dtype=self.dtype)
        self._lambda = np.zeros(n_var, dtype=self.dtype)
        self._p_tensor = np.zeros((n_var, n_var), dtype=self.dtype)
        self._inv_p_tensor = np.zeros((n_var, n_var), dtype=self.dtype)
        self._proj_mod_jac_tensor = np.zeros((n_var, n_var), dtype=self.dtype)
        logger.debug(
            "Created %s with n_dim=%d, implicit=%s, dynamic_grid=%s, kappa=%g, entropy fix %s",
            type(self).__name__, n_dim, self._implicit, self._dynamic_grid, self._kappa,
            config.entropy_fix.value,
        )

    @property
    def implicit(self) -> bool:
        """Whether Jacobians are computed"""
        return self._implicit

    @property
    def dynamic_grid(self) -> bool:
        """Whether the grid-motion correction is applied"""
        return self._dynamic_grid

    def eigen_system(self) -> EigenSystem:
        """Gets a copy of the eigen decomposition of the last non-degenerate face"""
        return EigenSystem(
            self._lambda.copy(),
            self._p_tensor.copy(),
            self._inv_p_tensor.copy() if self._implicit else None,
        )

    def _check_state(self, state: FaceState, name: str) -> None:
        self._check_vector(state.velocity, self.n_dim, f"{name}.velocity")
        if self._dynamic_grid:
            if state.grid_velocity is None:
                raise ConfigurationError(f"Grid velocity of {name} is required on a dynamic grid")
            self._check_vector(state.grid_velocity, self.n_dim, f"{name}.grid_velocity")

    def _apply_entropy_fix(
        self,
        state_i: FaceState,
        state_j: FaceState,
        proj_velocity: float | complex,
        proj_velocity_i: float | complex,
        proj_velocity_j: float | complex,
        sound_speed: float | complex,
    ) -> None:
        """Replaces the signed eigenvalues by their limited absolute values"""
        policy = self.config.entropy_fix
        if policy is EntropyFix.LAX:
            self._lambda[:] = lax_entropy_fix(
                self._lambda, proj_velocity, sound_speed, self.config.entropy_fix_coeff)
        elif policy is EntropyFix.HARTEN_HYMAN:
            self._lambda[:] = harten_hyman_entropy_fix(
                self._lambda,
                get_wave_speeds(proj_velocity_i, np.sqrt(state_i.sound_speed2), self.n_dim),
                get_wave_speeds(proj_velocity_j, np.sqrt(state_j.sound_speed2), self.n_dim),
            )
        else:
            self._lambda[:] = real_abs(self._lambda)

    def compute_residual(
        self,
        state_i: FaceState,
        state_j: FaceState,
        normal: np.ndarray,
        residual: np.ndarray | None = None,
        jacobian_i: np.ndarray | None = None,
        jacobian_j: np.ndarray | None = None,
    ) -> FaceResidual:
        """Computes the residual of a face and, in implicit mode, its Jacobians

        Args:
            state_i: State at point i. Must carry a grid velocity on a dynamic grid.
            state_j: State at point j. Must carry a grid velocity on a dynamic grid.
            normal: Face normal in shape ``(n_dim,)`` pointing from i to j, whose magnitude is the
                face area.
            residual: Array of shape ``(n_var,)`` into which to write. If not provided, a
                newly-allocated array will be returned.
            jacobian_i: Array of shape ``(n_var,n_var)`` into which to write the Jacobian wrt the
                conserved variables at point i. Only used in implicit mode. If not provided, a
                newly-allocated array will be returned.
            jacobian_j: Array of shape ``(n_var,n_var)`` into which to write the Jacobian wrt the
                conserved variables at point j. Only used in implicit mode. If not provided, a
                newly-allocated array will be returned.

        Returns:
            Residual, Jacobians and degeneracy flag.

        Raises:
            ConfigurationError: If the dimensions of the inputs or outputs do not match, or if grid
                velocities are missing on a dynamic grid, or if the Roe closure
                coefficient `κ` vanishes.
        """
        n_dim, n_var = self.n_dim, self.n_var
        normal = np.asarray(normal)
        self._check_vector(normal, n_dim, "normal")
        self._check_state(state_i, "state_i")
        self._check_state(state_j, "state_j")
        residual = self._output(residual, (n_var,), "residual")
        if self._implicit:
            jacobian_i = self._output(jacobian_i, (n_var, n_var), "jacobian_i")
            jacobian_j = self._output(jacobian_j, (n_var, n_var), "jacobian_j")
        else:
            jacobian_i = jacobian_j = None

        area = np.sqrt(np.dot(normal, normal))
        unit_normal = normal / area

        state_i.conservative(out=self._u_i)
        state_j.conservative(out=self._u_j)

        roe = compute_roe_average(state_i, state_j, self.config.roe_closure)
        if not roe.hyperbolic:
            residual[:] = 0.
            if self._implicit:
                np.fill_diagonal(jacobian_i, 0.)
                np.fill_diagonal(jacobian_j, 0.)
            logger.debug("Loss of hyperbolicity at face %s: c² = %s", normal, roe.sound_speed2)
            return FaceResidual(residual, jacobian_i, jacobian_j, True)
        if np.real(roe.kappa) == 0.:
            raise ConfigurationError(
                "Roe closure coefficient kappa must be non-zero, the eigenvectors are singular for "
                f"a barotropic closure. Got {roe.kappa}")
        sound_speed = roe.sound_speed

        get_inviscid_proj_flux(
            state_i.density, state_i.velocity, state_i.pressure, state_i.enthalpy, normal,
            out=self._proj_flux_i,
        )
        get_inviscid_proj_flux(
            state_j.density, state_j.velocity, state_j.pressure, state_j.enthalpy, normal,
            out=self._proj_flux_j,
        )
        get_p_matrix(
            roe.density, roe.velocity, sound_speed, roe.enthalpy, roe.chi, roe.kappa, unit_normal,
            out=self._p_tensor,
        )

        proj_velocity = np.dot(roe.velocity, unit_normal)
        proj_velocity_i = np.dot(state_i.velocity, unit_normal)
        proj_velocity_j = np.dot(state_j.velocity, unit_normal)
        if self._dynamic_grid:
            proj_grid_velocity = np.dot(
                0.5 * (state_i.grid_velocity + state_j.grid_velocity), unit_normal)
            proj_velocity -= proj_grid_velocity
            proj_velocity_i -= proj_grid_velocity
            proj_velocity_j -= proj_grid_velocity

        self._lambda[:] = get_wave_speeds(proj_velocity, sound_speed, n_dim)
        self._apply_entropy_fix(
            state_i, state_j, proj_velocity, proj_velocity_i, proj_velocity_j, sound_speed)

        if self._implicit:
            self._compute_implicit(
                state_i, state_j, roe, sound_speed, normal, unit_normal, area,
                residual, jacobian_i, jacobian_j,
            )
        else:
            self._compute_explicit(state_i, state_j, roe, sound_speed, unit_normal, area, residual)

        if self._dynamic_grid:
            # flux and Jacobians due to grid motion, with the area-weighted projection
            proj_grid_flux = np.dot(0.5 * (state_i.grid_velocity + state_j.grid_velocity), normal)
            residual -= proj_grid_flux * 0.5 * (self._u_i + self._u_j)
            if self._implicit:
                jacobian_i[np.diag_indices(n_var)] -= 0.5 * proj_grid_flux
                jacobian_j[np.diag_indices(n_var)] -= 0.5 * proj_grid_flux

        return FaceResidual(residual, jacobian_i, jacobian_j, False)

    def _compute_explicit(
        self,
        state_i: FaceState,
        state_j: FaceState,
        roe: RoeAverageState,
        sound_speed: float | complex,
        unit_normal: np.ndarray,
        area: float | complex,
        residual: np.ndarray,
    ) -> None:
        """Computes Roe's flux from the characteristic wave strengths"""
        get_wave_strengths(
            roe.density, sound_speed,
            state_j.density - state_i.density,
            state_j.pressure - state_i.pressure,
            state_j.velocity - state_i.velocity,
            unit_normal, out=self._delta_wave,
        )
        residual[:] = 0.5 * (self._proj_flux_i + self._proj_flux_j)
        residual -= 0.5 * area * (self._p_tensor @ (self._lambda * self._delta_wave))

    def _compute_implicit(
        self,
        state_i: FaceState,
        state_j: FaceState,
        roe: RoeAverageState,
        sound_speed: float | complex,
        normal: np.ndarray,
        unit_normal: np.ndarray,
        area: float | complex,
        residual: np.ndarray,
        jacobian_i: np.ndarray,
        jacobian_j: np.ndarray,
    ) -> None:
        """Computes the blended Roe flux from the absolute flux Jacobian, and the Jacobians"""
        kappa = self._kappa
        get_p_matrix_inv(
            roe.density, roe.velocity, sound_speed, roe.chi, roe.kappa, unit_normal,
            out=self._inv_p_tensor,
        )
        # `κ_b⋅(Fᵢ + Fⱼ)⋅n` is the central part, hence its Jacobians are scaled by `κ_b`
        get_inviscid_proj_jac(
            state_i.velocity, state_i.enthalpy, state_i.chi, state_i.kappa, normal, kappa,
            out=jacobian_i,
        )
        get_inviscid_proj_jac(
            state_j.velocity, state_j.enthalpy, state_j.chi, state_j.kappa, normal, kappa,
            out=jacobian_j,
        )
        np.subtract(self._u_j, self._u_i, out=self._diff_u)
        # |A| = P⋅|Λ|⋅P⁻¹
        np.matmul(self._p_tensor * self._lambda, self._inv_p_tensor, out=self._proj_mod_jac_tensor)
        residual[:] = kappa * (self._proj_flux_i + self._proj_flux_j)
        residual -= (1. - kappa) * area * (self._proj_mod_jac_tensor @ self._diff_u)
        jacobian_i += (1. - kappa) * area * self._proj_mod_jac_tensor
        jacobian_j -= (1. - kappa) * area * self._proj_mod_jac_tensor
