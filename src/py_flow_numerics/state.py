"""Face and Roe-averaged flow states

This module implements the primitive flow state supplied on either side of a face together with
the closure coefficients of a general equation of state, and the Roe-averaged state in between.

The closure coefficients generalize the speed of sound beyond a constant heat ratio. With the
pressure derivatives `∂p/∂ρ|ₑ` and `∂p/∂e|ᵨ` of the equation of state and the static energy `e`
they read `κ = ∂p/∂e|ᵨ / ρ` and `χ = ∂p/∂ρ|ₑ - κ⋅e`, such that `c² = χ + κ⋅h` for the static
enthalpy `h`. A calorically perfect gas has `χ = 0` and `κ = γ - 1`.

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

from dataclasses import dataclass
from dataclasses import field

import numpy as np

HEAT_RATIO = 1.4


@dataclass(frozen=True, eq=False)
class FaceState:
    """Primitive state at one side of a face

    Values may be complex for complex-step differentiation.

    Attributes:
        density: Density `ρ`.
        velocity: Velocity `v` in shape ``(n_dim,)``.
        pressure: Static pressure `p`.
        enthalpy: Total enthalpy `H`.
        chi: Closure coefficient `χ`.
        kappa: Closure coefficient `κ`.
        grid_velocity: Grid velocity in shape ``(n_dim,)``. Only read on dynamic grids.
    """

    density: float | complex
    velocity: np.ndarray
    pressure: float | complex
    enthalpy: float | complex
    chi: float | complex
    kappa: float | complex
    grid_velocity: np.ndarray | None = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "velocity", np.asarray(self.velocity))
        if self.grid_velocity is not None:
            object.__setattr__(self, "grid_velocity", np.asarray(self.grid_velocity))

    @classmethod
    def from_thermo_derivatives(
        cls,
        density: float | complex,
        velocity: np.ndarray,
        pressure: float | complex,
        enthalpy: float | complex,
        dpdrho_e: float | complex,
        dpde_rho: float | complex,
        grid_velocity: np.ndarray | None = None,
    ) -> "FaceState":
        """Creates the state from the pressure derivatives of the equation of state

        Args:
            density: Density.
            velocity: Velocity in shape ``(n_dim,)``.
            pressure: Static pressure.
            enthalpy: Total enthalpy.
            dpdrho_e: Pressure derivative wrt density at constant static energy.
            dpde_rho: Pressure derivative wrt static energy at constant density.
            grid_velocity: Grid velocity in shape ``(n_dim,)``.

        Returns:
            Face state.
        """
        velocity = np.asarray(velocity)
        static_energy = enthalpy - 0.5 * np.dot(velocity, velocity) - pressure / density
        kappa = dpde_rho / density
        chi = dpdrho_e - kappa * static_energy
        return cls(density, velocity, pressure, enthalpy, chi, kappa, grid_velocity)

    @classmethod
    def from_ideal_gas(
        cls,
        density: float | complex,
        velocity: np.ndarray,
        pressure: float | complex,
        heat_ratio: float = HEAT_RATIO,
        grid_velocity: np.ndarray | None = None,
    ) -> "FaceState":
        """Creates the state of a calorically perfect gas

        Args:
            density: Density.
            velocity: Velocity in shape ``(n_dim,)``.
            pressure: Static pressure.
            heat_ratio: Ratio of specific heats `γ`.
            grid_velocity: Grid velocity in shape ``(n_dim,)``.

        Returns:
            Face state with `χ = 0` and `κ = γ - 1`.
        """
        velocity = np.asarray(velocity)
        enthalpy = (
            heat_ratio / (heat_ratio - 1.) * pressure / density + 0.5 * np.dot(velocity, velocity)
        )
        return cls(density, velocity, pressure, enthalpy, 0., heat_ratio - 1., grid_velocity)

    @property
    def n_dim(self) -> int:
        """Number of spatial dimensions"""
        return self.velocity.shape[0]

    @property
    def velocity2(self) -> float | complex:
        """Squared velocity magnitude"""
        return np.dot(self.velocity, self.velocity)

    @property
    def static_enthalpy(self) -> float | complex:
        """Static enthalpy `h = H - ½|v|²`"""
        return self.enthalpy - 0.5 * self.velocity2

    @property
    def static_energy(self) -> float | complex:
        """Static energy `e = h - p/ρ`"""
        return self.static_enthalpy - self.pressure / self.density

    @property
    def energy(self) -> float | complex:
        """Total energy `E = H - p/ρ`"""
        return self.enthalpy - self.pressure / self.density

    @property
    def sound_speed2(self) -> float | complex:
        """Squared speed of sound `c² = χ + κ⋅h`"""
        return self.chi + self.kappa * self.static_enthalpy

    def conservative(self, out: np.ndarray | None = None) -> np.ndarray:
        """Gets the conserved variables `[ρ, ρv, ρE]`

        Args:
            out: Array of shape ``(n_dim+2,)`` into which to write. If not provided, a
                newly-allocated array will be returned.

        Returns:
            Conserved variables.
        """
        if out is None:
            out = np.empty(self.n_dim + 2, dtype=np.result_type(
                self.density, self.velocity, self.pressure, self.enthalpy))
        out[0] = self.density
        out[1:-1] = self.density * self.velocity
        out[-1] = self.density * self.energy
        return out

    def validate(self) -> None:
        """Checks the state for physical admissibility

        Not called by the numerics, which leave invalid input undefined.

        Raises:
            ValueError: If any value is not finite, or density, pressure or squared speed of sound
                are not positive.
        """
        values = np.hstack((
            self.density, self.velocity, self.pressure, self.enthalpy, self.chi, self.kappa,
        ))
        if not np.all(np.isfinite(values)):
            msg = f"Non-finite state {values}"
        elif np.real(self.density) <= 0.:
            msg = f"Non-positive density {self.density}"
        elif np.real(self.pressure) <= 0.:
            msg = f"Non-positive pressure {self.pressure}"
        elif np.real(self.sound_speed2) <= 0.:
            msg = f"Non-positive squared speed of sound {self.sound_speed2}"
        else:
            return
        raise ValueError(msg)


@dataclass(frozen=True, eq=False)
class RoeAverageState:
    """Roe-averaged state between two face states

    Attributes:
        density: Roe density.
        velocity: Roe velocity in shape ``(n_dim,)``.
        enthalpy: Roe total enthalpy.
        chi: Roe closure coefficient `χ`.
        kappa: Roe closure coefficient `κ`.
        sound_speed2: Squared Roe speed of sound `c² = χ + κ⋅(H - ½|v|²)`.
    """

    density: float | complex
    velocity: np.ndarray
    enthalpy: float | complex
    chi: float | complex
    kappa: float | complex
    sound_speed2: float | complex

    @property
    def hyperbolic(self) -> bool:
        """Whether the squared speed of sound is positive"""
        return np.real(self.sound_speed2) > 0.

    @property
    def sound_speed(self) -> float | complex:
        """Roe speed of sound

        Raises:
            ValueError: If the squared speed of sound is not positive.
        """
        if not self.hyperbolic:
            raise ValueError(f"Loss of hyperbolicity: c² = {self.sound_speed2}")
        return np.sqrt(self.sound_speed2)
