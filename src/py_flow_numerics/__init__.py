"""Finite volume numerics for the compressible Euler equations with a general equation of state.

This package implements the face and cell "numerics" of a density-based finite volume solver, i.e.
the residual contribution of one face or one cell and, for implicit time integration, its Jacobians
wrt the conserved variables. The core is Roe's approximate Riemann solver generalized to arbitrary
equations of state through the closure coefficients `χ = ∂p/∂ρ|ₑ - κ⋅e` and `κ = ∂p/∂e|ᵨ / ρ`.

Key features:
    * Roe averaging with weighted closure coefficients and optional pressure-jump correction
    * Exact inviscid flux Jacobians and eigenvector matrices for a general equation of state
    * Explicit (wave strength) and implicit (blended, with Jacobians) residual paths
    * Selectable entropy fixes, grid-motion (ALE) correction, and degenerate-state recovery
    * Complex-step safe kernels and a declared differentiation boundary of the face residual
    * Body force and conservative adjoint source terms sharing the residual interface

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

from .assembly import EdgeAssembly
from .assembly import assemble_edge_residuals
from .base import Numerics
from .config import EntropyFix
from .config import NumericsConfig
from .config import RoeClosure
from .config import TimeIntegration
from .core import EigenSystem
from .core import FaceResidual
from .core import UpwindGeneralRoe
from .exceptions import ConfigurationError
from .factory import create_numerics
from .flux import get_inviscid_proj_flux
from .flux import get_inviscid_proj_jac
from .flux import get_p_matrix
from .flux import get_p_matrix_inv
from .linearization import DifferentiationBoundary
from .linearization import ResidualLinearization
from .roe import compute_roe_average
from .roe import get_wave_strengths
from .sources import SourceBodyForce
from .sources import SourceConservativeAdjFlow
from .state import HEAT_RATIO
from .state import FaceState
from .state import RoeAverageState
from .utils import get_ideal_gas_state

__all__ = [
    "HEAT_RATIO",
    "ConfigurationError",
    "DifferentiationBoundary",
    "EdgeAssembly",
    "EigenSystem",
    "EntropyFix",
    "FaceResidual",
    "FaceState",
    "Numerics",
    "NumericsConfig",
    "ResidualLinearization",
    "RoeAverageState",
    "RoeClosure",
    "SourceBodyForce",
    "SourceConservativeAdjFlow",
    "TimeIntegration",
    "UpwindGeneralRoe",
    "assemble_edge_residuals",
    "compute_roe_average",
    "create_numerics",
    "get_ideal_gas_state",
    "get_inviscid_proj_flux",
    "get_inviscid_proj_jac",
    "get_p_matrix",
    "get_p_matrix_inv",
    "get_wave_strengths",
]
