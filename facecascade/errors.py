"""
Exception types raised by the face cascade library.
"""


class FaceCascadeError(Exception):
    """Base error for known face cascade failures."""


class DecodeError(FaceCascadeError, ValueError):
    """Raised when a cascade buffer is truncated or otherwise unreadable."""


class RegionBoundsError(FaceCascadeError, IndexError):
    """Raised when a detection window samples outside the pixel buffer."""
