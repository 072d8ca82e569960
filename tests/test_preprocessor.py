"""
Tests for the preprocessing module.
"""

import numpy as np
import pytest

from facecascade.params import ImageParams
from facecascade.preprocessor import preprocess


def test_preprocess_bgr_frame():
    """A solid BGR frame becomes a flat grayscale buffer."""
    frame = np.zeros((48, 64, 3), dtype=np.uint8)
    frame[:, :, 1] = 255

    image = preprocess(frame)

    assert isinstance(image, ImageParams)
    assert (image.rows, image.cols, image.dim) == (48, 64, 64)
    assert image.pixels.shape == (48 * 64,)
    assert image.pixels.dtype == np.uint8
    assert len(set(image.pixels.tolist())) == 1


def test_preprocess_grayscale_passthrough():
    gray = np.arange(12, dtype=np.uint8).reshape(3, 4)

    image = preprocess(gray)

    assert image.pixels.tolist() == list(range(12))


def test_preprocess_non_contiguous_view():
    gray = np.arange(40, dtype=np.uint8).reshape(5, 8)[:, ::2]

    image = preprocess(gray)

    assert (image.rows, image.cols, image.dim) == (5, 4, 4)
    assert image.pixels[4:8].tolist() == [8, 10, 12, 14]


def test_preprocess_empty_frame():
    with pytest.raises(ValueError):
        preprocess(np.array([], dtype=np.uint8))


def test_preprocess_none_frame():
    with pytest.raises(ValueError):
        preprocess(None)


def test_preprocess_wrong_dtype():
    with pytest.raises(ValueError, match="uint8"):
        preprocess(np.zeros((10, 10), dtype=np.float32))


def test_preprocess_wrong_channels():
    with pytest.raises(ValueError):
        preprocess(np.zeros((10, 10, 4), dtype=np.uint8))
