#!/usr/bin/env python

"""Unittests for Roe averaging, wave strengths and entropy fixes

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

import unittest

import numpy as np

from py_flow_numerics import FaceState
from py_flow_numerics import RoeClosure
from py_flow_numerics import compute_roe_average
from py_flow_numerics import get_p_matrix
from py_flow_numerics import get_wave_strengths
from py_flow_numerics.roe import get_wave_speeds
from py_flow_numerics.roe import harten_hyman_entropy_fix
from py_flow_numerics.roe import lax_entropy_fix


class TestRoeAverage(unittest.TestCase):
    """Tests for the Roe-averaged state"""

    def test_average(self) -> None:
        """Compare the averages with the square-root density weighting"""
        state_i = FaceState(1., np.array([0.1, 0.2]), 1., 3., 0.1, 0.4)
        state_j = FaceState(4., np.array([0.4, -0.1]), 2., 4., 0.3, 0.2)
        roe = compute_roe_average(state_i, state_j)
        self.assertAlmostEqual(roe.density, 2.)
        np.testing.assert_allclose(roe.velocity, (2. * state_j.velocity + state_i.velocity) / 3.)
        self.assertAlmostEqual(roe.enthalpy, (2. * 4. + 3.) / 3.)
        self.assertAlmostEqual(roe.chi, 0.2)
        self.assertAlmostEqual(roe.kappa, 0.3)
        self.assertAlmostEqual(
            roe.sound_speed2,
            roe.chi + roe.kappa * (roe.enthalpy - 0.5 * np.dot(roe.velocity, roe.velocity)),
        )
        self.assertTrue(roe.hyperbolic)

    def test_identical_states(self) -> None:
        """Check that the average of identical states is the state itself"""
        state = FaceState.from_ideal_gas(1.3, [0.2, -0.1, 0.4], 0.9)
        roe = compute_roe_average(state, state)
        self.assertAlmostEqual(roe.density, state.density)
        np.testing.assert_allclose(roe.velocity, state.velocity)
        self.assertAlmostEqual(roe.enthalpy, state.enthalpy)
        self.assertAlmostEqual(roe.sound_speed2, state.sound_speed2)
        self.assertAlmostEqual(roe.sound_speed, np.sqrt(state.sound_speed2))

    def test_loss_of_hyperbolicity(self) -> None:
        """Check that a negative closure coefficient yields a non-hyperbolic state"""
        state = FaceState(1., np.array([0.1, 0.]), 1., 2., -10., 0.4)
        roe = compute_roe_average(state, state)
        self.assertFalse(roe.hyperbolic)
        with self.assertRaises(ValueError):
            _ = roe.sound_speed

    def test_pressure_corrected_small_jump(self) -> None:
        """Check that the pressure correction is skipped for a tiny density jump"""
        state_i = FaceState.from_ideal_gas(1., [0.2, 0.], 1.)
        state_j = FaceState.from_ideal_gas(1. + 1e-6, [0.2, 0.], 1.)
        roe_simpson = compute_roe_average(state_i, state_j)
        roe_corrected = compute_roe_average(state_i, state_j, RoeClosure.PRESSURE_CORRECTED)
        self.assertEqual(roe_corrected.chi, roe_simpson.chi)
        self.assertEqual(roe_corrected.kappa, roe_simpson.kappa)

    def test_pressure_corrected_ideal_gas(self) -> None:
        """Check that the correction preserves the closure of an ideal gas"""
        state_i = FaceState.from_ideal_gas(1., [0.2, 0.1], 1.)
        state_j = FaceState.from_ideal_gas(0.5, [0.4, -0.1], 0.4)
        roe = compute_roe_average(state_i, state_j, RoeClosure.PRESSURE_CORRECTED)
        self.assertAlmostEqual(roe.kappa, 0.4)
        self.assertAlmostEqual(roe.chi, 0.)


class TestWaveStrengths(unittest.TestCase):
    """Tests for the characteristic wave strengths"""

    def setUp(self) -> None:
        """Preparation done for each test"""
        self.density = 1.2
        self.sound_speed = 1.1

    def test_length(self) -> None:
        """Check the number of waves"""
        for n_dim in (2, 3):
            strengths = get_wave_strengths(
                self.density, self.sound_speed, 0.1, 0.2, np.full(n_dim, 0.1),
                np.eye(n_dim)[0],
            )
            self.assertEqual(strengths.shape, (n_dim + 2,))

    def test_entropy_wave(self) -> None:
        """Check that a density jump alone is an entropy wave"""
        strengths = get_wave_strengths(
            self.density, self.sound_speed, 1., 0., np.zeros(2), np.array([1., 0.]))
        np.testing.assert_allclose(strengths, [1., 0., 0., 0.])

    def test_shear_wave(self) -> None:
        """Check that a tangential velocity jump alone is a shear wave"""
        strengths = get_wave_strengths(
            self.density, self.sound_speed, 0., 0., np.array([0., 1.]), np.array([1., 0.]))
        np.testing.assert_allclose(strengths, [0., -1., 0., 0.])

    def test_acoustic_wave(self) -> None:
        """Check that an isentropic compression along the normal is a right-running wave"""
        delta_p = self.density * self.sound_speed
        strengths = get_wave_strengths(
            self.density, self.sound_speed, delta_p / self.sound_speed**2, delta_p,
            np.array([1., 0.]), np.array([1., 0.]),
        )
        np.testing.assert_allclose(strengths, [0., 0., 2., 0.], atol=1e-14)

    def test_shear_wave_3d_axis_aligned(self) -> None:
        """Check that no shear component is lost for a normal without x-component"""
        unit_normal = np.array([0., 0., 1.])
        for delta_vel in np.eye(3)[:2]:
            strengths = get_wave_strengths(
                self.density, self.sound_speed, 0., 0., delta_vel, unit_normal)
            self.assertGreater(np.linalg.norm(strengths[:3]), 0.5)
            np.testing.assert_allclose(strengths[3:], 0.)

    def test_reconstruction(self) -> None:
        """Check that the waves reconstruct density, momentum and pressure jumps to first order"""
        rng = np.random.default_rng(seed=1)
        for n_dim in (2, 3):
            unit_normal = rng.random(n_dim) - 0.5
            unit_normal /= np.linalg.norm(unit_normal)
            velocity = rng.random(n_dim) - 0.5
            delta_rho, delta_p = 1e-3 * (rng.random(2) - 0.5)
            delta_vel = 1e-3 * (rng.random(n_dim) - 0.5)
            kappa = 0.4
            enthalpy = self.sound_speed**2 / kappa + 0.5 * np.dot(velocity, velocity)
            p_tensor = get_p_matrix(
                self.density, velocity, self.sound_speed, enthalpy, 0., kappa, unit_normal)
            strengths = get_wave_strengths(
                self.density, self.sound_speed, delta_rho, delta_p, delta_vel, unit_normal)
            delta_u = p_tensor @ strengths
            np.testing.assert_allclose(delta_u[0], delta_rho, atol=1e-14)
            np.testing.assert_allclose(
                delta_u[1:-1], velocity * delta_rho + self.density * delta_vel, atol=1e-14)


class TestEntropyFix(unittest.TestCase):
    """Tests for the eigenvalue limiting policies"""

    def test_lax(self) -> None:
        """Check that the absolute eigenvalues are floored at a fraction of the spectral radius"""
        eigenvalues = get_wave_speeds(-1e-4, 1., 2)
        fixed = lax_entropy_fix(eigenvalues, -1e-4, 1., 0.01)
        floor = 0.01 * (1e-4 + 1.)
        np.testing.assert_allclose(fixed, [floor, floor, 1. - 1e-4, 1. + 1e-4])

    def test_lax_zero_coefficient(self) -> None:
        """Check that a zero coefficient yields the absolute eigenvalues"""
        eigenvalues = get_wave_speeds(0.3, 1., 3)
        np.testing.assert_allclose(
            lax_entropy_fix(eigenvalues, 0.3, 1., 0.), np.abs(eigenvalues))

    def test_harten_hyman(self) -> None:
        """Check the smoothing of a sonic rarefaction and the absolute value elsewhere"""
        eigenvalues = np.array([0.5, 0.5, 1.5, -0.05])
        wave_speeds_i = np.array([0.5, 0.5, 1.5, -0.2])
        wave_speeds_j = np.array([0.5, 0.5, 1.5, 0.1])
        fixed = harten_hyman_entropy_fix(eigenvalues, wave_speeds_i, wave_speeds_j)
        epsilon = 4. * 0.15
        np.testing.assert_allclose(
            fixed, [0.5, 0.5, 1.5, (0.05**2 + epsilon**2) / (2. * epsilon)])


if __name__ == "__main__":
    unittest.main()
