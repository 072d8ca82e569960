"""
Tests for single-window and batched tree evaluation.
"""

import numpy as np
import pytest

from facecascade.cascade import decode_cascade
from facecascade.classifier import classify_region, classify_regions
from facecascade.errors import RegionBoundsError


def _random_cascade(pack_cascade, seed, depth=3, num=6):
    rng = np.random.default_rng(seed)
    leaves = 1 << depth
    trees = []
    for t in range(num):
        codes = rng.integers(-128, 128, size=4 * leaves - 4).tolist()
        preds = rng.normal(0.0, 1.0, size=leaves).astype(np.float32).tolist()
        threshold = -1.5 - 0.2 * t
        trees.append((codes, preds, threshold))
    return decode_cascade(pack_cascade(depth, trees))


def test_classify_region_passing_window(right_neighbour_cascade):
    pixels = np.zeros(10 * 10, dtype=np.uint8)

    score = classify_region(right_neighbour_cascade, 5, 5, 8, pixels, 10)

    assert score == 1.5


def test_classify_region_rejected_window(right_neighbour_cascade):
    image = np.zeros((10, 10), dtype=np.uint8)
    image[5, 5] = 200

    score = classify_region(right_neighbour_cascade, 5, 5, 8, image.reshape(-1), 10)

    assert score == -1.0


def test_classify_region_accepts_bytes(right_neighbour_cascade):
    assert classify_region(right_neighbour_cascade, 5, 5, 8, bytes(100), 10) == 1.5


def test_classify_region_is_deterministic(pack_cascade):
    cascade = _random_cascade(pack_cascade, seed=1)
    pixels = np.random.default_rng(2).integers(0, 256, size=64 * 64, dtype=np.uint8)

    first = classify_region(cascade, 32, 30, 24, pixels, 64)
    second = classify_region(cascade, 32, 30, 24, pixels, 64)

    assert np.float64(first).tobytes() == np.float64(second).tobytes()


def test_early_rejection_stops_at_first_tree(pack_cascade):
    """A first-tree threshold above any leaf returns -1.0 without reading
    the second tree, whose sample points lie outside the one-pixel buffer."""
    far = [127, 127, 127, 127]
    data = pack_cascade(1, [
        ([0, 0, 0, 0], [1.0, 1.0], 10.0),
        (far, [1.0, 1.0], 0.0),
    ])
    cascade = decode_cascade(data)
    pixels = np.zeros(1, dtype=np.uint8)

    assert classify_region(cascade, 0, 0, 8, pixels, 1) == -1.0


def test_out_of_buffer_sample_raises(pack_cascade):
    far = [127, 127, 127, 127]
    cascade = decode_cascade(pack_cascade(1, [
        ([0, 0, 0, 0], [1.0, 1.0], 0.0),
        (far, [1.0, 1.0], 0.0),
    ]))
    pixels = np.zeros(1, dtype=np.uint8)

    with pytest.raises(RegionBoundsError):
        classify_region(cascade, 0, 0, 8, pixels, 1)

    with pytest.raises(RegionBoundsError):
        classify_regions(cascade, [0], [0], 8, pixels, 1)


def test_negative_sample_row_raises(pack_cascade):
    cascade = decode_cascade(pack_cascade(1, [([-128, 0, 0, 0], [1.0, 1.0], 0.0)]))
    pixels = np.zeros(100, dtype=np.uint8)

    with pytest.raises(RegionBoundsError):
        classify_region(cascade, 0, 5, 8, pixels, 10)


def test_column_wrapping_onto_previous_row_raises(pack_cascade):
    # Column 0 minus half a window lands on the last pixels of row 4.
    cascade = decode_cascade(pack_cascade(1, [([0, -128, 0, 0], [1.0, 1.0], 0.0)]))
    pixels = np.zeros(100, dtype=np.uint8)

    with pytest.raises(RegionBoundsError):
        classify_region(cascade, 5, 0, 8, pixels, 10)
    with pytest.raises(RegionBoundsError):
        classify_regions(cascade, [5], [0], 8, pixels, 10)


def test_column_wrapping_onto_next_row_raises(right_neighbour_cascade):
    pixels = np.zeros(100, dtype=np.uint8)

    with pytest.raises(RegionBoundsError):
        classify_region(right_neighbour_cascade, 5, 8, 8, pixels, 10)
    with pytest.raises(RegionBoundsError):
        classify_regions(right_neighbour_cascade, [3, 5], [3, 8], 8, pixels, 10)


def test_empty_cascade_rejects(pack_cascade):
    cascade = decode_cascade(pack_cascade(2, []))
    pixels = np.zeros(16, dtype=np.uint8)

    assert classify_region(cascade, 2, 2, 2, pixels, 4) == -1.0
    assert classify_regions(cascade, [2], [2], 2, pixels, 4).tolist() == [-1.0]


def test_batched_scores_match_single_window(pack_cascade):
    cascade = _random_cascade(pack_cascade, seed=7)
    rows_n, cols_n = 48, 56
    pixels = np.random.default_rng(8).integers(0, 256, size=rows_n * cols_n, dtype=np.uint8)
    scale = 16
    offset = scale // 2 + 1

    rows, cols = np.meshgrid(
        np.arange(offset, rows_n - offset + 1, 3),
        np.arange(offset, cols_n - offset + 1, 3),
        indexing="ij",
    )
    rows, cols = rows.reshape(-1), cols.reshape(-1)

    batched = classify_regions(cascade, rows, cols, scale, pixels, cols_n)
    single = np.array(
        [classify_region(cascade, int(r), int(c), scale, pixels, cols_n)
         for r, c in zip(rows, cols)],
        dtype=np.float32,
    )

    assert batched.dtype == np.float32
    assert batched.tobytes() == single.tobytes()


def test_batched_length_mismatch(right_neighbour_cascade):
    with pytest.raises(ValueError):
        classify_regions(right_neighbour_cascade, [1, 2], [1], 8, bytes(100), 10)


def test_depth_zero_tree_adds_its_only_leaf(pack_cascade):
    cascade = decode_cascade(pack_cascade(0, [([], [3.0], 1.0)]))
    assert classify_region(cascade, 0, 0, 1, bytes(1), 1) == 2.0
