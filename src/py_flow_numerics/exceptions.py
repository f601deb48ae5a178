"""Exception types

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""


class ConfigurationError(RuntimeError):
    """Raised when dimensions, buffers or parameters do not match the numerics' configuration."""
