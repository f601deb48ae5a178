#!/usr/bin/env python

"""Unittests for the linearization features of ``ResidualLinearization``

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

import unittest

import numpy as np

from py_flow_numerics import ConfigurationError
from py_flow_numerics import DifferentiationBoundary
from py_flow_numerics import FaceState
from py_flow_numerics import NumericsConfig
from py_flow_numerics import ResidualLinearization
from py_flow_numerics import TimeIntegration


class TestBoundary(unittest.TestCase):
    """Tests for the layout of the inputs"""

    def test_num_inputs(self) -> None:
        """Check the number of inputs with and without grid velocities"""
        for n_dim in (2, 3):
            static = DifferentiationBoundary(n_dim)
            dynamic = DifferentiationBoundary(n_dim, dynamic_grid=True)
            self.assertEqual(static.num_inputs, 2 * (n_dim + 3) + 4 + n_dim)
            self.assertEqual(dynamic.num_inputs, static.num_inputs + 2 * n_dim)
            self.assertEqual(len(static.input_names), static.num_inputs)
            self.assertEqual(len(dynamic.input_names), dynamic.num_inputs)
            self.assertEqual(static.num_outputs, n_dim + 2)

    def test_pack_unpack(self) -> None:
        """Check that unpacking recovers the packed states"""
        boundary = DifferentiationBoundary(3, dynamic_grid=True)
        state_i = FaceState(1.1, np.array([0.1, 0.2, 0.3]), 0.9, 3.2, 0.05, 0.38, np.ones(3))
        state_j = FaceState(0.9, np.array([0.3, 0.2, 0.1]), 0.8, 3.0, 0.02, 0.41, np.zeros(3))
        normal = np.array([0.2, -0.4, 0.1])
        inputs = boundary.pack(state_i, state_j, normal)
        self.assertEqual(inputs[boundary.input_names.index("kappa_j")], 0.41)
        unpacked_i, unpacked_j, unpacked_normal = boundary.unpack(inputs)
        for state, unpacked in ((state_i, unpacked_i), (state_j, unpacked_j)):
            for name in ("density", "pressure", "enthalpy", "chi", "kappa"):
                self.assertEqual(getattr(unpacked, name), getattr(state, name))
            np.testing.assert_array_equal(unpacked.velocity, state.velocity)
            np.testing.assert_array_equal(unpacked.grid_velocity, state.grid_velocity)
        np.testing.assert_array_equal(unpacked_normal, normal)

    def test_pack_missing_grid_velocity(self) -> None:
        """Check that grid velocities are required on dynamic grids"""
        boundary = DifferentiationBoundary(2, dynamic_grid=True)
        state = FaceState.from_ideal_gas(1., [0.5, 0.], 1.)
        with self.assertRaises(ConfigurationError):
            boundary.pack(state, state, np.array([1., 0.]))

    def test_unpack_shape(self) -> None:
        """Check that an input vector of wrong shape is rejected"""
        boundary = DifferentiationBoundary(2)
        with self.assertRaises(ConfigurationError):
            boundary.unpack(np.ones(boundary.num_inputs + 1))


class TestJacobi(unittest.TestCase):
    """Tests for the Jacobian of the residual wrt the inputs"""

    def setUp(self) -> None:
        """Preparation done for each test

        Creates a fresh ``ResidualLinearization`` instance for a dynamic grid, sets the states
        randomly, but similar to a subsonic flow with a non-ideal closure, and performs
        linearization.
        """
        self.rng = np.random.default_rng(seed=1)
        self.linearization = ResidualLinearization(
            3, NumericsConfig(
                time_integration=TimeIntegration.EULER_IMPLICIT, dynamic_grid=True, roe_kappa=0.4),
        )
        self.state_i = FaceState.from_thermo_derivatives(
            1. + 0.1 * self.rng.random(), 0.3 + 0.1 * self.rng.random(3), 0.9, 3.4, 1.3, 0.45,
            grid_velocity=0.05 * self.rng.random(3),
        )
        self.state_j = FaceState.from_thermo_derivatives(
            1.2 + 0.1 * self.rng.random(), 0.4 + 0.1 * self.rng.random(3), 1.1, 3.3, 1.2, 0.5,
            grid_velocity=0.05 * self.rng.random(3),
        )
        self.normal = np.array([0.5, 0.3, -0.2])
        self.residual = self.linearization.linearize(self.state_i, self.state_j, self.normal)

    def random_like(self, array: np.ndarray) -> np.ndarray:
        """Creates a randomly populated complex array

        Args:
            array: Array whose shape to copy.

        Returns:
            Random array
        """
        return self.rng.random(array.shape) + self.rng.random(array.shape) * 1j

    def test_residual(self) -> None:
        """Compare the residual at the linearization point with the evaluation"""
        boundary = self.linearization.boundary
        inputs = boundary.pack(self.state_i, self.state_j, self.normal)
        np.testing.assert_allclose(self.residual, self.linearization.evaluate(inputs).real)
        self.assertEqual(self.residual.dtype, np.dtype(float))

    def test_residual_wrt_inputs(self) -> None:
        """Compare Jacobians of ``residual`` wrt ``inputs`` with central finite-difference"""
        boundary = self.linearization.boundary
        inputs_0 = boundary.pack(self.state_i, self.state_j, self.normal)
        residual_0 = self.linearization.evaluate(inputs_0).real
        jacobi_fd = np.zeros((boundary.num_outputs, boundary.num_inputs))
        for k in range(boundary.num_inputs):
            inputs_p, inputs_m = inputs_0.copy(), inputs_0.copy()
            inputs_p[k] += 1e-6
            inputs_m[k] -= 1e-6
            jacobi_fd[:, k] = (
                self.linearization.evaluate(inputs_p).real
                - self.linearization.evaluate(inputs_m).real
            ) / 2e-6
        # testing jacobians
        np.testing.assert_allclose(
            jacobi_fd, self.linearization.residual_wrt_inputs, atol=1e-6, rtol=1e-5)
        # testing fwd
        d_inputs = self.random_like(inputs_0)
        np.testing.assert_allclose(
            jacobi_fd @ d_inputs,
            self.linearization.apply_residual_wrt_inputs_fwd(d_inputs),
            atol=1e-6, rtol=1e-5,
        )
        # testing rev
        d_residual = self.random_like(residual_0)
        np.testing.assert_allclose(
            jacobi_fd.T @ d_residual,
            self.linearization.apply_residual_wrt_inputs_rev(d_residual),
            atol=1e-6, rtol=1e-5,
        )

    def test_fwd_rev(self) -> None:
        """Check that forward and reverse mode are adjoint"""
        boundary = self.linearization.boundary
        d_inputs = self.random_like(np.empty(boundary.num_inputs))
        d_residual = self.random_like(np.empty(boundary.num_outputs))
        np.testing.assert_allclose(
            d_residual @ self.linearization.apply_residual_wrt_inputs_fwd(d_inputs),
            self.linearization.apply_residual_wrt_inputs_rev(d_residual) @ d_inputs,
        )

    def test_outputs(self) -> None:
        """Check that the products are written into the supplied arrays"""
        boundary = self.linearization.boundary
        d_residual = np.empty(boundary.num_outputs)
        result = self.linearization.apply_residual_wrt_inputs_fwd(
            np.ones(boundary.num_inputs), d_residual=d_residual)
        self.assertIs(result, d_residual)
        np.testing.assert_allclose(
            d_residual, self.linearization.residual_wrt_inputs.sum(axis=1))
        with self.assertRaises(ConfigurationError):
            self.linearization.apply_residual_wrt_inputs_rev(np.ones(boundary.num_inputs))

    def test_normal_homogeneity(self) -> None:
        """Check that the residual is homogeneous of degree one in the normal"""
        boundary = self.linearization.boundary
        start = boundary.input_names.index("normal[0]")
        residual_wrt_normal = self.linearization.residual_wrt_inputs[:, start:start + 3]
        np.testing.assert_allclose(residual_wrt_normal @ self.normal, self.residual, atol=1e-12)


if __name__ == "__main__":
    unittest.main()
