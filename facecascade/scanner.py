"""
Multiscale sliding-window scan.

Responsibility:
    Slide a square detection window of growing size over the image,
    score every position with the cascade, and collect the windows whose
    score is positive.

Ordering:
    Scales are visited smallest first; positions within a scale are
    visited row-major. Clustering re-sorts, so callers should not rely on
    this order.

Failure behavior:
    - Unusable scan parameters (non-positive sizes or shift, a scale
      factor that does not grow the window) produce no detections and a
      warning rather than an exception.
"""

import logging
from typing import Iterator, List

import numpy as np

from facecascade.cascade import Cascade
from facecascade.classifier import classify_regions
from facecascade.detection import Detection
from facecascade.params import CascadeParams, ImageParams

logger = logging.getLogger(__name__)


def scale_sizes(params: CascadeParams) -> Iterator[int]:
    """Yield the window sizes visited by a scan, smallest first.

    Each size is the previous one multiplied by scale_factor and
    truncated to an integer. Iteration stops once the size exceeds
    max_size, or as soon as a step fails to grow the window.
    """
    scale = params.min_size
    while scale <= params.max_size:
        yield scale
        next_scale = int(scale * params.scale_factor)
        if next_scale <= scale:
            logger.warning(
                "Scale factor %.4f does not grow window size %d; stopping scan.",
                params.scale_factor, scale,
            )
            return
        scale = next_scale


def run_cascade(
    cascade: Cascade,
    image: ImageParams,
    params: CascadeParams,
) -> List[Detection]:
    """Scan an image at every scale and return positive windows.

    Args:
        cascade: Decoded cascade, shared read-only.
        image: Grayscale pixel view.
        params: Window size bounds, shift and scale factors.

    Returns:
        Detections with q > 0.0. Empty if the parameters admit no window.
    """
    if not _is_scannable(params):
        return []

    detections: List[Detection] = []

    for scale in scale_sizes(params):
        step = max(1, int(params.shift_factor * scale))
        offset = scale // 2 + 1

        row_range = np.arange(offset, image.rows - offset + 1, step)
        col_range = np.arange(offset, image.cols - offset + 1, step)
        if row_range.size == 0 or col_range.size == 0:
            continue

        rows, cols = np.meshgrid(row_range, col_range, indexing="ij")
        rows = rows.reshape(-1)
        cols = cols.reshape(-1)

        scores = classify_regions(cascade, rows, cols, scale, image.pixels, image.dim)
        hits = np.flatnonzero(scores > 0.0)

        for k in hits:
            detections.append(Detection(
                row=int(rows[k]),
                col=int(cols[k]),
                scale=scale,
                q=float(scores[k]),
            ))

        logger.debug(
            "Scale %d: %d windows, %d positive", scale, rows.size, hits.size
        )

    return detections


def _is_scannable(params: CascadeParams) -> bool:
    if params.min_size <= 0:
        logger.warning("min_size must be positive, got %d; no scan.", params.min_size)
        return False
    if not params.shift_factor > 0:
        logger.warning(
            "shift_factor must be positive, got %s; no scan.", params.shift_factor
        )
        return False
    if not params.scale_factor > 1:
        logger.warning(
            "scale_factor must be greater than 1, got %s; no scan.",
            params.scale_factor,
        )
        return False
    return True
