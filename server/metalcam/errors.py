"""
Errors Module
=============

Exception types raised by the metalcam package.
"""


class MetalCamError(Exception):
    """Base class for all metalcam errors."""


class HomogeneousConversionError(MetalCamError, ValueError):
    """Raised when point buffers cannot be dehomogenized."""


class ClinkDataError(MetalCamError, ValueError):
    """Raised when a clink data buffer does not match the grid layout."""
