"""
Tests for the postprocessing (clustering) module.
"""

import numpy as np
import pytest

from facecascade.detection import Detection
from facecascade.postprocessor import calc_iou, cluster_detections, filter_by_score


def test_cluster_merge_arithmetic():
    """Overlapping windows merge into truncated means with summed score."""
    detections = [
        Detection(row=10, col=10, scale=20, q=1.0),
        Detection(row=12, col=10, scale=20, q=2.0),
    ]

    clusters = cluster_detections(detections, 0.2)

    assert clusters == [Detection(row=11, col=10, scale=20, q=3.0)]


def test_cluster_truncates_means():
    detections = [
        Detection(row=10, col=10, scale=20, q=1.0),
        Detection(row=11, col=13, scale=21, q=1.0),
    ]

    [merged] = cluster_detections(detections, 0.2)

    assert (merged.row, merged.col, merged.scale) == (10, 11, 20)


@pytest.mark.parametrize("threshold", [0.01, 0.3, 0.5, 0.99])
def test_cluster_single_detection_unchanged(threshold):
    det = Detection(row=40, col=25, scale=33, q=7.25)
    assert cluster_detections([det], threshold) == [det]


def test_cluster_empty():
    assert cluster_detections([], 0.3) == []


def test_cluster_disjoint_detections_stay_separate():
    a = Detection(row=10, col=10, scale=10, q=4.0)
    b = Detection(row=100, col=100, scale=10, q=2.0)

    clusters = cluster_detections([a, b], 0.2)

    # Lowest score opens the first cluster
    assert clusters == [b, a]


def test_cluster_equal_scores_keep_input_order():
    a = Detection(row=10, col=10, scale=10, q=3.0)
    b = Detection(row=50, col=50, scale=10, q=3.0)
    c = Detection(row=90, col=90, scale=10, q=3.0)

    assert cluster_detections([c, a, b], 0.2) == [c, a, b]


def test_cluster_claimed_detections_are_not_reused():
    """A overlaps B and B overlaps C, but A and C are disjoint. A claims B,
    so C forms its own cluster without B."""
    a = Detection(row=10, col=10, scale=20, q=1.0)
    b = Detection(row=10, col=20, scale=20, q=2.0)
    c = Detection(row=10, col=30, scale=20, q=4.0)

    clusters = cluster_detections([c, b, a], 0.2)

    assert clusters == [
        Detection(row=10, col=15, scale=20, q=3.0),
        c,
    ]


def test_cluster_score_sum_is_float32():
    detections = [
        Detection(row=10, col=10, scale=20, q=0.1),
        Detection(row=10, col=10, scale=20, q=0.2),
    ]

    [merged] = cluster_detections(detections, 0.5)

    assert merged.q == float(np.float32(0.1) + np.float32(0.2))


def test_cluster_threshold_at_one_drops_everything():
    det = Detection(row=10, col=10, scale=20, q=1.0)
    assert cluster_detections([det], 1.0) == []


def test_calc_iou_values():
    a = Detection(row=10, col=10, scale=20, q=1.0)

    assert calc_iou(a, a) == 1.0
    assert calc_iou(a, Detection(row=12, col=10, scale=20, q=1.0)) == pytest.approx(360 / 440)
    assert calc_iou(a, Detection(row=10, col=10, scale=10, q=1.0)) == pytest.approx(100 / 400)
    assert calc_iou(a, Detection(row=100, col=100, scale=20, q=1.0)) == 0.0


def test_calc_iou_zero_scale_windows():
    a = Detection(row=5, col=5, scale=0, q=1.0)

    assert calc_iou(a, a) == 0.0
    assert calc_iou(a, Detection(row=9, col=9, scale=0, q=1.0)) == 0.0


def test_cluster_zero_scale_detections():
    detections = [
        Detection(row=5, col=5, scale=0, q=1.0),
        Detection(row=5, col=5, scale=0, q=2.0),
    ]

    # A zero-sized window overlaps nothing, not even itself.
    assert cluster_detections(detections, 0.2) == []


def test_filter_by_score():
    detections = [
        Detection(row=1, col=1, scale=10, q=4.0),
        Detection(row=2, col=2, scale=10, q=9.0),
        Detection(row=3, col=3, scale=10, q=5.0),
        Detection(row=4, col=4, scale=10, q=6.5),
    ]

    kept = filter_by_score(detections, 5.0)

    assert [d.q for d in kept] == [9.0, 6.5]
