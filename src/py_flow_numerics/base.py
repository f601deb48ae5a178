"""Common interface of the numerics

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

from abc import ABC
from abc import abstractmethod

import numpy as np

from .config import NumericsConfig
from .exceptions import ConfigurationError

SUPPORTED_DIMS = (2, 3)


class Numerics(ABC):
    """Base of flux and source numerics

    A numerics object computes the residual contribution of one face or one cell. The dimensions are
    fixed at construction, and per-instance scratch arrays are reused between calls. An instance
    must therefore not be shared between threads; use one instance per worker.
    """

    _n_dim: int
    _n_var: int
    _config: NumericsConfig
    _dtype: np.dtype

    def __init__(self, n_dim: int, config: NumericsConfig, dtype: type = float) -> None:
        """Initialize the numerics

        Args:
            n_dim: Number of spatial dimensions, 2 or 3.
            config: Numerics parameters.
            dtype: Data type of the scratch and output arrays. Use ``complex`` for complex-step
                differentiation.

        Raises:
            ConfigurationError: If the number of dimensions is not supported.
        """
        if n_dim not in SUPPORTED_DIMS:
            raise ConfigurationError(
                f"Unsupported number of dimensions. Got {n_dim}, expected one of {SUPPORTED_DIMS}")
        self._n_dim = n_dim
        self._n_var = n_dim + 2
        self._config = config
        self._dtype = np.dtype(dtype)

    @property
    def n_dim(self) -> int:
        """Number of spatial dimensions"""
        return self._n_dim

    @property
    def n_var(self) -> int:
        """Number of conserved variables `n_dim + 2`"""
        return self._n_var

    @property
    def config(self) -> NumericsConfig:
        """Numerics parameters"""
        return self._config

    @property
    def dtype(self) -> np.dtype:
        """Data type of the scratch and output arrays"""
        return self._dtype

    @abstractmethod
    def compute_residual(self, *args, **kwargs):
        """Computes the residual contribution"""

    @staticmethod
    def _check_vector(vector: np.ndarray, length: int, name: str) -> None:
        """Checks the length of an input vector

        Args:
            vector: Vector to be checked.
            length: Required length.
            name: Name of the vector for the message.

        Raises:
            ConfigurationError: If the vector is not one-dimensional with the required length.
        """
        if np.shape(vector) != (length,):
            raise ConfigurationError(
                f"Incorrect shape of {name}. Got {np.shape(vector)}, expected {(length,)}")

    def _check_array(self, array: np.ndarray, shape: tuple, name: str) -> None:
        """Checks if the array is suitable as output buffer

        Args:
            array: Array to be checked.
            shape: Required shape.
            name: Name of the array for the message.

        Raises:
             ConfigurationError: If the array has a different shape or data type.
        """
        if array.shape != shape:
            msg = f"Incorrect shape of {name}. Got {array.shape}, expected {shape}"
        elif array.dtype != self._dtype:
            msg = (
                f"Incorrect data type of {name}. Got {array.dtype.name}, "
                f"expected {self._dtype.name}"
            )
        else:
            return
        raise ConfigurationError(msg)

    def _output(self, array: np.ndarray | None, shape: tuple, name: str) -> np.ndarray:
        """Gets a checked caller-supplied or a newly-allocated zero output array"""
        if array is None:
            return np.zeros(shape, dtype=self._dtype)
        self._check_array(array, shape, name)
        return array
