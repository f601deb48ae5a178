"""Selection of the numerics by name

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

from .base import Numerics
from .config import NumericsConfig
from .core import UpwindGeneralRoe
from .exceptions import ConfigurationError
from .sources import SourceBodyForce
from .sources import SourceConservativeAdjFlow

NUMERICS = {
    "general_roe": UpwindGeneralRoe,
    "body_force": SourceBodyForce,
    "adjoint_conservative": SourceConservativeAdjFlow,
}


def create_numerics(kind: str, n_dim: int, config: NumericsConfig, **kwargs) -> Numerics:
    """Creates a numerics object

    Args:
        kind: One of ``"general_roe"``, ``"body_force"`` and ``"adjoint_conservative"``.
        n_dim: Number of spatial dimensions, 2 or 3.
        config: Numerics parameters.
        **kwargs: Further arguments passed to the constructor, e.g. the ``closure`` of
            ``"adjoint_conservative"``.

    Returns:
        Numerics object.

    Raises:
        ConfigurationError: If ``kind`` is unknown.
    """
    try:
        numerics_class = NUMERICS[kind]
    except KeyError:
        raise ConfigurationError(
            f"Unknown numerics {kind!r}, expected one of {sorted(NUMERICS)}") from None
    return numerics_class(n_dim, config, **kwargs)
