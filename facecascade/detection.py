"""
Detection data transfer object.

This module defines the Detection dataclass, the output unit of both the
multiscale scanner and the clusterer. A detection is a square window
described by its centre and side length, plus the cascade score.

Non-goals:
    - No rendering logic.
    - No file I/O.
    - No clustering or overlap logic (that belongs in postprocessor).
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Detection:
    """A single detection window with its cascade score.

    Attributes:
        row: Window centre row (absolute pixels).
        col: Window centre column (absolute pixels).
        scale: Window side length in pixels.
        q: Detection score. Positive for every scanner output; after
           clustering this is the sum of the member scores.
    """

    row: int
    col: int
    scale: int
    q: float

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "row": self.row,
            "col": self.col,
            "scale": self.scale,
            "q": round(self.q, 4),
        }

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        """Window corners as (x1, y1, x2, y2) in absolute pixels."""
        half = self.scale // 2
        return (
            self.col - half,
            self.row - half,
            self.col + half,
            self.row + half,
        )
