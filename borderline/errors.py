"""
Borderline Exceptions
=====================

Configuration and input errors are fatal and surface immediately.
No silent fallbacks. No sneaky defaults.

Usage:
    from borderline.errors import MissingParameterError

    if w is None:
        raise MissingParameterError("rp_perp requires the angle threshold 'w'")
"""


class BorderlineError(Exception):
    """Base class for all borderline errors."""
    pass


class MalformedRecurrencePlotError(BorderlineError, ValueError):
    """Raised when a recurrence plot is not a square binary matrix."""
    pass


class MissingParameterError(BorderlineError, ValueError):
    """Raised when a required correction parameter is not provided."""
    pass


class ConfigurationError(BorderlineError, ValueError):
    """Raised when a configuration file contains unknown or invalid entries."""
    pass
