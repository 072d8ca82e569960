"""
Detector: the high-level API for face detection.

Public contract:
    Detector.detect(frame: np.ndarray) -> list[Detection]

Pipeline:
    frame -> grayscale ImageParams -> multiscale scan -> clustering
    -> score filter

Constraints:
    - Input must be a BGR or grayscale uint8 numpy array.
    - The method is stateless per call and deterministic.
    - The loaded cascade is read-only, so one Detector may be shared
      between threads.

Non-goals:
    - No file reading beyond the cascade, no camera access.
    - No visualization or output writing.
    - No tracking or temporal state.
"""

import logging
from typing import List, Optional

import numpy as np

from facecascade.cascade import Cascade
from facecascade.config import AppConfig, load_config
from facecascade.detection import Detection
from facecascade.model_loader import load_cascade
from facecascade.postprocessor import cluster_detections, filter_by_score
from facecascade.preprocessor import preprocess
from facecascade.scanner import run_cascade

logger = logging.getLogger(__name__)


class Detector:
    """Face detector driven by a pixel-comparison tree cascade.

    Usage:
        detector = Detector()                      # Uses safe defaults
        detector = Detector(config=my_config)      # Custom config
        detector = Detector(cascade=my_cascade)    # Pre-decoded cascade
        detections = detector.detect(frame)

    The constructor loads the cascade once. Subsequent detect() calls
    reuse it.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        cascade: Optional[Cascade] = None,
    ) -> None:
        """Initialize the detector and load the cascade.

        Args:
            config: Application configuration. If None, defaults are used.
            cascade: Already decoded cascade. If None, it is loaded from
                     config.cascade.path.

        Raises:
            FileNotFoundError: If the cascade file is missing.
            DecodeError: If the cascade file is truncated.
        """
        if config is None:
            config = load_config()

        self._config = config
        self._cascade = cascade if cascade is not None else load_cascade(config.cascade)
        self._params = config.scan.to_params()

        logger.info(
            "Detector initialized (sizes=%d..%d, iou_threshold=%.2f, min_score=%.2f)",
            self._params.min_size,
            self._params.max_size,
            config.cluster.iou_threshold,
            config.cluster.min_score,
        )

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """Detect faces in a single frame.

        Args:
            frame: (H, W, 3) BGR or (H, W) grayscale uint8 image.

        Returns:
            Clustered detections scoring above cluster.min_score, sorted
            by score (descending). Empty if nothing is found.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame has incorrect shape or is empty.
        """
        self._validate_frame(frame)

        image = preprocess(frame)
        raw = run_cascade(self._cascade, image, self._params)
        clusters = cluster_detections(raw, self._config.cluster.iou_threshold)
        detections = filter_by_score(clusters, self._config.cluster.min_score)

        logger.debug(
            "Frame %dx%d: %d raw, %d clusters, %d kept",
            image.cols, image.rows, len(raw), len(clusters), len(detections),
        )
        return detections

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config

    @property
    def cascade(self) -> Cascade:
        return self._cascade

    @staticmethod
    def _validate_frame(frame: np.ndarray) -> None:
        """Validate that the input frame meets the API contract.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame is empty or has wrong dimensions.
        """
        if not isinstance(frame, np.ndarray):
            raise TypeError(
                f"Expected frame to be a numpy ndarray, "
                f"got {type(frame).__name__}. "
                f"Use cv2.imread() or VideoCapture.read() to obtain frames."
            )

        if frame.size == 0:
            raise ValueError(
                "Frame is empty (zero size). "
                "Ensure the input source is providing valid frames."
            )

        if frame.ndim not in (2, 3):
            raise ValueError(
                f"Expected a 2- or 3-dimensional frame, "
                f"got {frame.ndim} dimensions with shape {frame.shape}."
            )

        if frame.ndim == 3 and frame.shape[2] != 3:
            raise ValueError(
                f"Expected 3 channels (BGR), got {frame.shape[2]} channels. "
                f"Convert the frame to BGR or grayscale first."
            )
