"""
Postprocessing for the face cascade pipeline.

Responsibility:
    Merge overlapping scanner detections into clusters, and filter the
    merged results by score.

Non-goals:
    - No drawing, saving, or display logic.
    - No scanning or tree evaluation.

Hard-coded:
    - Overlap ratio: intersection / (s1^2 + s2^2 - intersection), with
      windows treated as squares of side `scale` around their centres.
"""

from typing import List, Sequence

import numpy as np

from facecascade.detection import Detection


def calc_iou(det1: Detection, det2: Detection) -> float:
    """Overlap ratio of two square detection windows."""
    r1, c1, s1 = float(det1.row), float(det1.col), float(det1.scale)
    r2, c2, s2 = float(det2.row), float(det2.col), float(det2.scale)

    over_row = max(0.0, min(r1 + s1 / 2, r2 + s2 / 2) - max(r1 - s1 / 2, r2 - s2 / 2))
    over_col = max(0.0, min(c1 + s1 / 2, c2 + s2 / 2) - max(c1 - s1 / 2, c2 - s2 / 2))

    union = s1 * s1 + s2 * s2 - over_row * over_col
    if union <= 0.0:
        # Two zero-sized windows.
        return 0.0
    return over_row * over_col / union


def cluster_detections(
    detections: Sequence[Detection],
    iou_threshold: float,
) -> List[Detection]:
    """Greedily merge overlapping detections.

    Detections are visited in ascending score order (stable for ties).
    Each unclaimed detection opens a cluster and claims every unclaimed
    detection, itself included, whose overlap ratio with it exceeds
    iou_threshold.

    Args:
        detections: Scanner output.
        iou_threshold: Overlap ratio a detection must exceed to join.

    Returns:
        One Detection per cluster: row, col and scale are the truncated
        member means, q is the sum of member scores.
    """
    ordered = sorted(detections, key=lambda d: d.q)
    claimed = [False] * len(ordered)
    clusters: List[Detection] = []

    for i, anchor in enumerate(ordered):
        if claimed[i]:
            continue

        r = c = s = n = 0
        q = np.float32(0.0)
        for j, candidate in enumerate(ordered):
            if claimed[j]:
                continue
            if calc_iou(anchor, candidate) > iou_threshold:
                claimed[j] = True
                r += candidate.row
                c += candidate.col
                s += candidate.scale
                q += np.float32(candidate.q)
                n += 1

        if n > 0:
            clusters.append(Detection(
                row=int(r / n),
                col=int(c / n),
                scale=int(s / n),
                q=float(q),
            ))

    return clusters


def filter_by_score(
    detections: Sequence[Detection],
    min_score: float,
) -> List[Detection]:
    """Keep detections scoring above min_score, highest score first."""
    kept = [d for d in detections if d.q > min_score]
    kept.sort(key=lambda d: d.q, reverse=True)
    return kept
