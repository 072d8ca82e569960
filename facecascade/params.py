"""
Scan inputs: the grayscale image view and the scan configuration.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ImageParams:
    """Read-only view over single-channel 8-bit pixel data.

    Attributes:
        pixels: Flat row-major uint8 buffer.
        rows: Number of image rows.
        cols: Number of image columns.
        dim: Row stride in pixels. Normally equal to cols; may be larger
             when the view covers a sub-region of a wider buffer.
    """

    pixels: np.ndarray
    rows: int
    cols: int
    dim: int

    @classmethod
    def from_array(cls, gray: np.ndarray) -> "ImageParams":
        """Build an ImageParams from a 2-D uint8 array.

        Raises:
            ValueError: If the array is not 2-D uint8.
        """
        if gray.ndim != 2:
            raise ValueError(
                f"Expected a 2-dimensional grayscale array, got shape {gray.shape}."
            )
        if gray.dtype != np.uint8:
            raise ValueError(f"Expected dtype uint8, got {gray.dtype}.")

        rows, cols = gray.shape
        pixels = np.ascontiguousarray(gray).reshape(-1)
        return cls(pixels=pixels, rows=rows, cols=cols, dim=cols)


@dataclass(frozen=True)
class CascadeParams:
    """Multiscale scan configuration.

    Attributes:
        min_size: Smallest window side length in pixels.
        max_size: Largest window side length in pixels (inclusive).
        shift_factor: Fraction of the window size to step between
                      positions, in (0, 1].
        scale_factor: Window growth per scale level, > 1.
    """

    min_size: int = 20
    max_size: int = 1000
    shift_factor: float = 0.1
    scale_factor: float = 1.1
