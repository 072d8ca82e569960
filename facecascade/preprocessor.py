"""
Preprocessing for the face cascade pipeline.

Responsibility:
    Convert a raw frame (numpy array, BGR or already grayscale) into the
    single-channel ImageParams view consumed by the scanner.

Non-goals:
    - No frame acquisition or I/O.
    - No scanning or clustering.

Hard-coded:
    - Colour frames are BGR (as returned by OpenCV).
"""

import cv2
import numpy as np

from facecascade.params import ImageParams


def preprocess(frame: np.ndarray) -> ImageParams:
    """Convert a frame into a grayscale ImageParams.

    Args:
        frame: Image as a numpy array, either (H, W) grayscale or
               (H, W, 3) BGR, dtype uint8.

    Returns:
        An ImageParams over a contiguous copy of the grayscale pixels.

    Raises:
        ValueError: If the frame is empty or has unexpected dimensions.
    """
    if frame is None or frame.size == 0:
        raise ValueError(
            "Cannot preprocess an empty frame. "
            "Ensure the input source is providing valid frames."
        )

    if frame.ndim == 3 and frame.shape[2] == 3:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    elif frame.ndim == 2:
        gray = frame
    else:
        raise ValueError(
            f"Expected a grayscale (H, W) or BGR (H, W, 3) frame, "
            f"got shape {frame.shape}."
        )

    if gray.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {gray.dtype}.")

    return ImageParams.from_array(gray)
