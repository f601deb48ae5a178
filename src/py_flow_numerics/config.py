"""Configuration of the numerics

This module implements the parameter bundle read by the numerics at construction time, i.e. the
time-integration kind selecting the implicit or explicit residual path, the dynamic-grid flag, the
Roe blending factor, the entropy fix and the body force.

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

from dataclasses import dataclass
from enum import Enum

from .exceptions import ConfigurationError


class TimeIntegration(Enum):
    """Kind of time integration scheme of the flow equations"""

    EXPLICIT = "explicit"
    EULER_IMPLICIT = "euler_implicit"


class EntropyFix(Enum):
    """Eigenvalue limiting policy of the Roe scheme

    ``LAX`` floors all absolute eigenvalues at a fraction of the spectral radius (Mavriplis). The
    Harten-Hyman (1983) smoothing and the plain absolute value are kept as selectable alternatives.
    ``HARTEN_HYMAN`` takes the speed of sound at both sides, which is NaN with a ``RuntimeWarning``
    for a side state with non-positive squared speed of sound; only the Roe state is guarded.
    """

    LAX = "lax"
    HARTEN_HYMAN = "harten_hyman"
    NONE = "none"


class RoeClosure(Enum):
    """Averaging of the closure coefficients `χ` and `κ` at the Roe state

    ``SIMPSON`` blends the arithmetic mean with a weighted correction. ``PRESSURE_CORRECTED``
    additionally corrects both coefficients such that the pressure jump is reproduced.
    """

    SIMPSON = "simpson"
    PRESSURE_CORRECTED = "pressure_corrected"


@dataclass(frozen=True)
class NumericsConfig:
    """Parameters of the flux and source numerics

    Attributes:
        time_integration: Selects the implicit (with Jacobians) or explicit residual path.
        dynamic_grid: Whether the grid moves, i.e. grid velocities are supplied and the ALE
            correction is applied.
        roe_kappa: Blending factor `κ_b` of the implicit Roe residual. ``1`` is unstable.
        entropy_fix_coeff: Entropy fix coefficient `δ`.
        entropy_fix: Eigenvalue limiting policy.
        roe_closure: Averaging policy of the closure coefficients.
        body_force: Body force per unit mass, empty for none.
        force_ref: Reference force for non-dimensionalization of the body force.
    """

    time_integration: TimeIntegration = TimeIntegration.EXPLICIT
    dynamic_grid: bool = False
    roe_kappa: float = 0.5
    entropy_fix_coeff: float = 0.001
    entropy_fix: EntropyFix = EntropyFix.LAX
    roe_closure: RoeClosure = RoeClosure.SIMPSON
    body_force: tuple[float, ...] = ()
    force_ref: float = 1.

    def __post_init__(self) -> None:
        """Validates the parameters

        Raises:
            ConfigurationError: If a parameter is out of its admissible range.
        """
        if not isinstance(self.time_integration, TimeIntegration):
            msg = f"Unknown time integration {self.time_integration!r}"
        elif not isinstance(self.entropy_fix, EntropyFix):
            msg = f"Unknown entropy fix {self.entropy_fix!r}"
        elif not isinstance(self.roe_closure, RoeClosure):
            msg = f"Unknown Roe closure {self.roe_closure!r}"
        elif not 0. <= self.roe_kappa <= 1.:
            msg = f"Roe kappa must be in [0,1]. Got {self.roe_kappa}"
        elif self.entropy_fix_coeff < 0.:
            msg = f"Entropy fix coefficient must be non-negative. Got {self.entropy_fix_coeff}"
        elif self.force_ref <= 0.:
            msg = f"Reference force must be positive. Got {self.force_ref}"
        else:
            object.__setattr__(self, "body_force", tuple(float(f) for f in self.body_force))
            return
        raise ConfigurationError(msg)

    @property
    def implicit(self) -> bool:
        """Whether Jacobians are assembled"""
        return self.time_integration is TimeIntegration.EULER_IMPLICIT
