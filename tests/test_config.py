#!/usr/bin/env python

"""Unittests for the configuration and the selection of the numerics

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

import unittest

import numpy as np

from py_flow_numerics import ConfigurationError
from py_flow_numerics import NumericsConfig
from py_flow_numerics import SourceBodyForce
from py_flow_numerics import SourceConservativeAdjFlow
from py_flow_numerics import TimeIntegration
from py_flow_numerics import UpwindGeneralRoe
from py_flow_numerics import create_numerics


class TestNumericsConfig(unittest.TestCase):
    """Tests for ``NumericsConfig``"""

    def test_defaults(self) -> None:
        """Check the default parameters"""
        config = NumericsConfig()
        self.assertFalse(config.implicit)
        self.assertFalse(config.dynamic_grid)
        self.assertEqual(config.roe_kappa, 0.5)
        self.assertEqual(config.body_force, ())

    def test_implicit(self) -> None:
        """Check the implicit flag"""
        config = NumericsConfig(time_integration=TimeIntegration.EULER_IMPLICIT)
        self.assertTrue(config.implicit)

    def test_body_force(self) -> None:
        """Check that the body force is stored as tuple of floats"""
        config = NumericsConfig(body_force=np.array([0, -1]))
        self.assertEqual(config.body_force, (0., -1.))

    def test_invalid(self) -> None:
        """Check that inadmissible parameters are rejected"""
        for kwargs in (
            {"roe_kappa": -0.1},
            {"roe_kappa": 1.5},
            {"entropy_fix_coeff": -1.},
            {"force_ref": 0.},
            {"time_integration": "euler_implicit"},
            {"entropy_fix": "lax"},
            {"roe_closure": "simpson"},
        ):
            with self.subTest(**kwargs), self.assertRaises(ConfigurationError):
                NumericsConfig(**kwargs)

    def test_error_type(self) -> None:
        """Check that configuration errors are runtime errors"""
        with self.assertRaises(RuntimeError):
            NumericsConfig(roe_kappa=2.)


class TestCreateNumerics(unittest.TestCase):
    """Tests for ``create_numerics``"""

    def test_kinds(self) -> None:
        """Check the classes created by name"""
        config = NumericsConfig()
        self.assertIsInstance(create_numerics("general_roe", 2, config), UpwindGeneralRoe)
        self.assertIsInstance(create_numerics("body_force", 3, config), SourceBodyForce)
        self.assertIsInstance(
            create_numerics(
                "adjoint_conservative", 2, config, closure=lambda primitive, grad: np.zeros(4)),
            SourceConservativeAdjFlow,
        )

    def test_dtype(self) -> None:
        """Check that further arguments are passed on"""
        numerics = create_numerics("general_roe", 3, NumericsConfig(), dtype=complex)
        self.assertEqual(numerics.dtype, np.dtype(complex))
        self.assertEqual(numerics.n_var, 5)

    def test_unknown(self) -> None:
        """Check that unknown kinds are rejected"""
        with self.assertRaises(ConfigurationError):
            create_numerics("hllc", 2, NumericsConfig())


if __name__ == "__main__":
    unittest.main()
