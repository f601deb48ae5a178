"""Differentiation boundary of the face residual

This module declares the independent inputs and the dependent output of the generalized Roe
residual, and evaluates the residual as a pure function of a flat input vector. An external
reverse-mode or checkpointing facility can instrument exactly this boundary. As a self-contained
facility, the Jacobian of the residual wrt all inputs is computed by complex step and applied in
forward and reverse mode.

The input vector is ordered as `[Vᵢ, Vⱼ, Sᵢ, Sⱼ, n, (wᵢ, wⱼ)]` with the primitive variables
`V = [ρ, v, p, H]`, the closure coefficients `S = [χ, κ]`, the face normal `n` and, on dynamic grids
only, the grid velocities `w`.

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

import numpy as np

from .config import NumericsConfig
from .core import UpwindGeneralRoe
from .exceptions import ConfigurationError
from .state import FaceState

COMPLEX_STEP = 1e-30


class DifferentiationBoundary:
    """Layout of the independent inputs and the dependent output of a face residual"""

    _n_dim: int
    _dynamic_grid: bool
    _slices: dict[str, slice]

    def __init__(self, n_dim: int, dynamic_grid: bool = False) -> None:
        """Initialize the layout

        Args:
            n_dim: Number of spatial dimensions.
            dynamic_grid: Whether the grid velocities are independent inputs.
        """
        self._n_dim = n_dim
        self._dynamic_grid = dynamic_grid
        sizes = {
            "primitive_i": n_dim + 3,
            "primitive_j": n_dim + 3,
            "closure_i": 2,
            "closure_j": 2,
            "normal": n_dim,
        }
        if dynamic_grid:
            sizes["grid_velocity_i"] = n_dim
            sizes["grid_velocity_j"] = n_dim
        self._slices = {}
        start = 0
        for name, size in sizes.items():
            self._slices[name] = slice(start, start + size)
            start += size

    @property
    def num_inputs(self) -> int:
        """Number of independent inputs"""
        return max(s.stop for s in self._slices.values())

    @property
    def num_outputs(self) -> int:
        """Number of dependent outputs, i.e. the residual's length"""
        return self._n_dim + 2

    @property
    def input_names(self) -> list[str]:
        """Names of the independent inputs in order"""
        names = []
        for side in ("i", "j"):
            names += [f"density_{side}"]
            names += [f"velocity_{side}[{k}]" for k in range(self._n_dim)]
            names += [f"pressure_{side}", f"enthalpy_{side}"]
        names += ["chi_i", "kappa_i", "chi_j", "kappa_j"]
        names += [f"normal[{k}]" for k in range(self._n_dim)]
        if self._dynamic_grid:
            for side in ("i", "j"):
                names += [f"grid_velocity_{side}[{k}]" for k in range(self._n_dim)]
        return names

    def pack(
        self,
        state_i: FaceState,
        state_j: FaceState,
        normal: np.ndarray,
        dtype: type = float,
    ) -> np.ndarray:
        """Packs the independent inputs of a face into a vector

        Args:
            state_i: State at point i.
            state_j: State at point j.
            normal: Face normal in shape ``(n_dim,)``.
            dtype: Data type of the vector.

        Returns:
            Input vector in shape ``(num_inputs,)``.
        """
        inputs = np.empty(self.num_inputs, dtype=dtype)
        for side, state in (("i", state_i), ("j", state_j)):
            inputs[self._slices[f"primitive_{side}"]] = np.hstack((
                state.density, state.velocity, state.pressure, state.enthalpy))
            inputs[self._slices[f"closure_{side}"]] = state.chi, state.kappa
            if self._dynamic_grid:
                if state.grid_velocity is None:
                    raise ConfigurationError(
                        f"Grid velocity of state_{side} is required on a dynamic grid")
                inputs[self._slices[f"grid_velocity_{side}"]] = state.grid_velocity
        inputs[self._slices["normal"]] = normal
        return inputs

    def unpack(self, inputs: np.ndarray) -> tuple[FaceState, FaceState, np.ndarray]:
        """Unpacks an input vector

        Args:
            inputs: Input vector in shape ``(num_inputs,)``.

        Returns:
            State at point i, state at point j, and face normal.

        Raises:
            ConfigurationError: If the vector has the wrong shape.
        """
        if inputs.shape != (self.num_inputs,):
            raise ConfigurationError(
                f"Incorrect shape of inputs. Got {inputs.shape}, expected {(self.num_inputs,)}")
        states = []
        for side in ("i", "j"):
            primitive = inputs[self._slices[f"primitive_{side}"]]
            chi, kappa = inputs[self._slices[f"closure_{side}"]]
            grid_velocity = None
            if self._dynamic_grid:
                grid_velocity = inputs[self._slices[f"grid_velocity_{side}"]].copy()
            states.append(FaceState(
                primitive[0], primitive[1:-2].copy(), primitive[-2], primitive[-1], chi, kappa,
                grid_velocity,
            ))
        return states[0], states[1], inputs[self._slices["normal"]].copy()


class ResidualLinearization:
    """Linearization of the generalized Roe residual wrt all independent inputs

    Holds a complex-valued instance of ``UpwindGeneralRoe`` and the Jacobian of the residual wrt
    the inputs declared by its ``DifferentiationBoundary``. The general procedure is to call
    ``linearize`` for a face and afterwards apply the Jacobian in forward or reverse mode.
    """

    _boundary: DifferentiationBoundary
    _numerics: UpwindGeneralRoe
    _residual_wrt_inputs: np.ndarray

    def __init__(self, n_dim: int, config: NumericsConfig) -> None:
        """Initialize the linearization

        Args:
            n_dim: Number of spatial dimensions, 2 or 3.
            config: Numerics parameters.
        """
        self._numerics = UpwindGeneralRoe(n_dim, config, dtype=complex)
        self._boundary = DifferentiationBoundary(n_dim, config.dynamic_grid)
        self._residual_wrt_inputs = np.zeros(
            (self._boundary.num_outputs, self._boundary.num_inputs), dtype=float)

    @property
    def boundary(self) -> DifferentiationBoundary:
        """Layout of inputs and outputs"""
        return self._boundary

    @property
    def residual_wrt_inputs(self) -> np.ndarray:
        """Jacobian of the residual wrt the inputs in shape ``(num_outputs,num_inputs)``

        Can be computed through ``linearize``.
        """
        return self._residual_wrt_inputs

    def evaluate(self, inputs: np.ndarray) -> np.ndarray:
        """Evaluates the residual as pure function of the inputs

        Args:
            inputs: Real or complex input vector in shape ``(num_inputs,)``.

        Returns:
            Complex residual in shape ``(num_outputs,)``.
        """
        state_i, state_j, normal = self._boundary.unpack(np.asarray(inputs, dtype=complex))
        return self._numerics.compute_residual(state_i, state_j, normal).residual

    def linearize(self, state_i: FaceState, state_j: FaceState, normal: np.ndarray) -> np.ndarray:
        """Computes the Jacobian of the residual wrt the inputs by complex step

        Args:
            state_i: State at point i.
            state_j: State at point j.
            normal: Face normal in shape ``(n_dim,)``.

        Returns:
            Residual at the linearization point.
        """
        inputs = self._boundary.pack(state_i, state_j, normal, dtype=complex)
        for k in range(self._boundary.num_inputs):
            inputs_pert = inputs.copy()
            inputs_pert[k] += COMPLEX_STEP * 1j
            self._residual_wrt_inputs[:, k] = self.evaluate(inputs_pert).imag / COMPLEX_STEP
        return self.evaluate(inputs).real

    @staticmethod
    def _check_array(array: np.ndarray, shape: tuple) -> None:
        if array.shape != shape:
            raise ConfigurationError(f"Incorrect shape. Got {array.shape}, expected {shape}")

    def apply_residual_wrt_inputs_fwd(
        self,
        d_inputs: np.ndarray,
        d_residual: np.ndarray | None = None,
    ) -> np.ndarray:
        """Applies the Jacobian in forward mode

        Computes the matrix-vector-product `∂R/∂x⋅δx`, i.e. the directional derivative.

        Args:
            d_inputs: Vector to multiply to the Jacobian in shape ``(num_inputs,)``.
            d_residual: Vector into which to store the vector-product in shape
                ``(num_outputs,)``. If not provided, a newly-allocated array will be returned.

        Returns:
            Vector-product.
        """
        self._check_array(d_inputs, (self._boundary.num_inputs,))
        if d_residual is None:
            d_residual = np.empty(
                self._boundary.num_outputs, dtype=np.result_type(float, d_inputs))
        else:
            self._check_array(d_residual, (self._boundary.num_outputs,))
        np.matmul(self._residual_wrt_inputs, d_inputs, out=d_residual)
        return d_residual

    def apply_residual_wrt_inputs_rev(
        self,
        d_residual: np.ndarray,
        d_inputs: np.ndarray | None = None,
    ) -> np.ndarray:
        """Applies the Jacobian in reverse mode

        Computes the matrix-vector-product `∂R/∂xᵀ⋅δR`.

        Args:
            d_residual: Covector to multiply to the Jacobian in shape ``(num_outputs,)``.
            d_inputs: Covector into which to store the covector-product in shape
                ``(num_inputs,)``. If not provided, a newly-allocated array will be returned.

        Returns:
            Covector-product.
        """
        self._check_array(d_residual, (self._boundary.num_outputs,))
        if d_inputs is None:
            d_inputs = np.empty(
                self._boundary.num_inputs, dtype=np.result_type(float, d_residual))
        else:
            self._check_array(d_inputs, (self._boundary.num_inputs,))
        np.matmul(self._residual_wrt_inputs.T, d_residual, out=d_inputs)
        return d_inputs
