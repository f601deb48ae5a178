"""Source term numerics

This module implements the cell-based source terms sharing the residual interface of the flux
numerics: the body force and the conservative source term of the continuous adjoint equations.

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

from collections.abc import Callable

import numpy as np

from .base import Numerics
from .config import NumericsConfig
from .exceptions import ConfigurationError

AdjointSourceClosure = Callable[[np.ndarray, np.ndarray], np.ndarray]


class SourceBodyForce(Numerics):
    """Source term of a body force per unit mass

    The residual is `-V⋅[0, ρf, ρv⋅f]/F_ref` for the cell volume `V`, the body force `f` and the
    reference force `F_ref` of the configuration. No Jacobian is provided.
    """

    _body_force_vector: np.ndarray

    def __init__(self, n_dim: int, config: NumericsConfig, dtype: type = float) -> None:
        """Initialize the source term

        Args:
            n_dim: Number of spatial dimensions, 2 or 3.
            config: Numerics parameters. An empty body force is taken as zero.
            dtype: Data type of the output arrays.

        Raises:
            ConfigurationError: If the body force does not have ``n_dim`` components.
        """
        super().__init__(n_dim, config, dtype)
        body_force = config.body_force if config.body_force else (0.,) * n_dim
        if len(body_force) != n_dim:
            raise ConfigurationError(
                f"Incorrect body force length. Got {len(body_force)}, expected {n_dim}")
        self._body_force_vector = np.asarray(body_force, dtype=float) / config.force_ref

    @property
    def body_force_vector(self) -> np.ndarray:
        """Non-dimensional body force"""
        return self._body_force_vector

    def compute_residual(
        self,
        conservative: np.ndarray,
        volume: float,
        residual: np.ndarray | None = None,
    ) -> np.ndarray:
        """Computes the body force residual of a cell

        Args:
            conservative: Conserved variables `[ρ, ρv, ρE]` of the cell in shape ``(n_var,)``.
            volume: Cell volume.
            residual: Array of shape ``(n_var,)`` into which to write. If not provided, a
                newly-allocated array will be returned.

        Returns:
            Residual.
        """
        self._check_vector(conservative, self.n_var, "conservative")
        residual = self._output(residual, (self.n_var,), "residual")
        residual[0] = 0.
        residual[1:-1] = -volume * conservative[0] * self._body_force_vector
        residual[-1] = -volume * np.dot(conservative[1:-1], self._body_force_vector)
        return residual


class SourceConservativeAdjFlow(Numerics):
    """Conservative source term of the continuous adjoint flow equations

    The source term is integrated as the mean of two partial residuals, each evaluated by a closure
    from the primitive variables at one point and the mean primitive variable gradient of both
    points. The closure encodes the problem-specific source of the adjoint equations.
    """

    _closure: AdjointSourceClosure
    _residual_i: np.ndarray
    _residual_j: np.ndarray
    _mean_residual: np.ndarray

    def __init__(
        self,
        n_dim: int,
        config: NumericsConfig,
        closure: AdjointSourceClosure,
        dtype: type = float,
    ) -> None:
        """Initialize the source term

        Args:
            n_dim: Number of spatial dimensions, 2 or 3.
            config: Numerics parameters.
            closure: Function mapping the primitive variables of one point and the mean primitive
                variable gradient in shape ``(num_primitive,n_dim)`` to a partial residual in shape
                ``(n_var,)``.
            dtype: Data type of the scratch and output arrays.
        """
        super().__init__(n_dim, config, dtype)
        self._closure = closure
        self._residual_i = np.zeros(self.n_var, dtype=self.dtype)
        self._residual_j = np.zeros(self.n_var, dtype=self.dtype)
        self._mean_residual = np.zeros(self.n_var, dtype=self.dtype)

    def _partial_residual(
        self,
        primitive: np.ndarray,
        mean_prim_var_grad: np.ndarray,
        out: np.ndarray,
    ) -> None:
        partial = np.asarray(self._closure(primitive, mean_prim_var_grad))
        self._check_vector(partial, self.n_var, "closure result")
        out[:] = partial

    def compute_residual(
        self,
        primitive_i: np.ndarray,
        primitive_j: np.ndarray,
        prim_var_grad_i: np.ndarray,
        prim_var_grad_j: np.ndarray,
        volume: float,
        residual: np.ndarray | None = None,
    ) -> np.ndarray:
        """Computes the conservative adjoint source residual

        Args:
            primitive_i: Primitive variables at point i.
            primitive_j: Primitive variables at point j.
            prim_var_grad_i: Primitive variable gradients at point i in shape
                ``(num_primitive,n_dim)``.
            prim_var_grad_j: Primitive variable gradients at point j in shape
                ``(num_primitive,n_dim)``.
            volume: Control volume.
            residual: Array of shape ``(n_var,)`` into which to write. If not provided, a
                newly-allocated array will be returned.

        Returns:
            Residual.

        Raises:
            ConfigurationError: If the gradients' shapes differ or do not have ``n_dim`` columns.
        """
        prim_var_grad_i = np.asarray(prim_var_grad_i)
        prim_var_grad_j = np.asarray(prim_var_grad_j)
        if (
            prim_var_grad_i.shape != prim_var_grad_j.shape
            or prim_var_grad_i.ndim != 2
            or prim_var_grad_i.shape[1] != self.n_dim
        ):
            raise ConfigurationError(
                f"Incorrect gradient shapes. Got {prim_var_grad_i.shape} and "
                f"{prim_var_grad_j.shape}, expected (num_primitive, {self.n_dim})")
        residual = self._output(residual, (self.n_var,), "residual")
        mean_prim_var_grad = 0.5 * (prim_var_grad_i + prim_var_grad_j)
        self._partial_residual(primitive_i, mean_prim_var_grad, self._residual_i)
        self._partial_residual(primitive_j, mean_prim_var_grad, self._residual_j)
        self._mean_residual[:] = 0.5 * (self._residual_i + self._residual_j)
        residual[:] = self._mean_residual * volume
        return residual
