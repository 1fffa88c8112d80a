"""
Exceptions raised by the lip tracking core.
"""


class LipTrackingError(Exception):
    """Base class for lip tracking errors."""


class InvalidInput(LipTrackingError, ValueError):
    """A frame or mask is malformed or empty."""


class InvalidParameter(LipTrackingError, ValueError):
    """A configuration value is outside its valid domain."""
