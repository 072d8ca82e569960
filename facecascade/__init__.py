"""
Face Cascade: face detection with a pixel-comparison tree cascade.

Public API:
    - Detector: Load a cascade once and detect faces in frames.
    - Detection: A detection window (centre row/col, side, score).
    - decode_cascade / Cascade: Parse a packed cascade binary.
    - run_cascade, ImageParams, CascadeParams: Multiscale scan.
    - cluster_detections: Merge overlapping detections.
    - classify_region: Score a single detection window.

Usage:
    from facecascade import Detector

    detector = Detector()
    detections = detector.detect(frame)
"""

from facecascade.cascade import Cascade, decode_cascade
from facecascade.classifier import classify_region
from facecascade.detection import Detection
from facecascade.detector import Detector
from facecascade.errors import DecodeError, FaceCascadeError, RegionBoundsError
from facecascade.params import CascadeParams, ImageParams
from facecascade.postprocessor import cluster_detections
from facecascade.scanner import run_cascade

__all__ = [
    "Cascade",
    "CascadeParams",
    "DecodeError",
    "Detection",
    "Detector",
    "FaceCascadeError",
    "ImageParams",
    "RegionBoundsError",
    "classify_region",
    "cluster_detections",
    "decode_cascade",
    "run_cascade",
]
