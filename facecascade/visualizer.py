"""
Visualization for the face cascade pipeline.

Responsibility:
    Draw detection windows (as rectangles or circles) and optional score
    labels onto a frame. Produces an annotated copy; performs no I/O.

Non-goals:
    - No file writing or detection logic.
"""

from typing import List

import cv2
import numpy as np

from facecascade.config import VisualizationConfig
from facecascade.detection import Detection

_FONT = cv2.FONT_HERSHEY_SIMPLEX
_FONT_SCALE = 0.5
_FONT_THICKNESS = 1
_LABEL_PADDING = 4
_WINDOW_NAME = "Face Cascade"


def draw_detections(
    frame: np.ndarray,
    detections: List[Detection],
    config: VisualizationConfig,
) -> np.ndarray:
    """Draw detection markers and score labels onto a frame.

    Args:
        frame: Input BGR or grayscale image (not modified).
        detections: Detections to render.
        config: Visualization parameters.

    Returns:
        A new BGR image with detections drawn.
    """
    if frame.ndim == 2:
        annotated = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    else:
        annotated = frame.copy()

    for det in detections:
        x1, y1, x2, y2 = det.bounds

        if config.shape == "circle":
            cv2.circle(
                annotated,
                (det.col, det.row),
                det.scale // 2,
                color=config.box_color,
                thickness=config.thickness,
            )
        else:
            cv2.rectangle(
                annotated,
                (x1, y1),
                (x2, y2),
                color=config.box_color,
                thickness=config.thickness,
            )

        if config.show_score:
            _draw_label(annotated, f"{det.q:.1f}", x1, y1, y2, config)

    return annotated


def _draw_label(
    image: np.ndarray,
    label: str,
    x1: int,
    y1: int,
    y2: int,
    config: VisualizationConfig,
) -> None:
    (text_w, text_h), _ = cv2.getTextSize(label, _FONT, _FONT_SCALE, _FONT_THICKNESS)

    # Above the window, or below it when too close to the top edge
    label_y = y1 - _LABEL_PADDING
    if label_y - text_h - _LABEL_PADDING < 0:
        label_y = y2 + text_h + _LABEL_PADDING

    cv2.rectangle(
        image,
        (x1, label_y - text_h - _LABEL_PADDING),
        (x1 + text_w + _LABEL_PADDING, label_y + _LABEL_PADDING),
        color=config.box_color,
        thickness=cv2.FILLED,
    )
    cv2.putText(
        image,
        label,
        (x1 + _LABEL_PADDING // 2, label_y),
        _FONT,
        _FONT_SCALE,
        (255, 255, 255),
        _FONT_THICKNESS,
        cv2.LINE_AA,
    )


def show_frame(
    frame: np.ndarray,
    detections: List[Detection],
    config: VisualizationConfig,
) -> int:
    """Show the annotated frame in a window and return the key pressed."""
    annotated = draw_detections(frame, detections, config)
    cv2.imshow(_WINDOW_NAME, annotated)
    return cv2.waitKey(0) & 0xFF
