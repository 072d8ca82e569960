"""
Tree evaluation for detection windows.

Responsibility:
    Walk every tree of a cascade for a detection window and return the
    accumulated score, rejecting early as soon as the running total drops
    to a tree's threshold.

Arithmetic:
    Window centres are scaled by 256 so that the signed 8-bit sample codes,
    multiplied by the window size and shifted right by 8, land on integer
    pixel coordinates. No floating point is used to locate sample points.
    Scores are accumulated in float32, tree by tree, in a fixed order, so
    the scalar and batched paths produce identical bits.

Failure behavior:
    - A sample point outside the pixel buffer raises RegionBoundsError.
      So does a point whose column is negative or not less than the row
      stride, since its flat index would wrap onto a neighbouring row.
      Only points that are actually read are checked.
"""

from typing import Union

import numpy as np

from facecascade.cascade import Cascade
from facecascade.errors import RegionBoundsError

# Score returned for a window rejected by any tree threshold.
REJECTED = -1.0

PixelBuffer = Union[np.ndarray, bytes, bytearray]


def classify_region(
    cascade: Cascade,
    row: int,
    col: int,
    scale: int,
    pixels: PixelBuffer,
    dim: int,
) -> float:
    """Score a single detection window.

    Args:
        cascade: Decoded cascade.
        row: Window centre row.
        col: Window centre column.
        scale: Window side length in pixels.
        pixels: Flat row-major uint8 pixel buffer.
        dim: Row stride of the pixel buffer.

    Returns:
        -1.0 if any tree rejects the window, otherwise the final total
        minus the last tree's threshold. A cascade without trees rejects
        every window.

    Raises:
        RegionBoundsError: If a sample point lands outside the pixel buffer.
    """
    if cascade.tree_num == 0:
        return REJECTED

    size = len(pixels)
    leaves = cascade.leaves_per_tree
    r = row * 256
    c = col * 256

    out = np.float32(0.0)
    for i in range(cascade.tree_num):
        tree = cascade.codes[i]
        idx = 1
        for _ in range(cascade.tree_depth):
            r1, c1, r2, c2 = tree[idx].tolist()
            x1 = _sample_index(r + r1 * scale, c + c1 * scale, dim, size)
            x2 = _sample_index(r + r2 * scale, c + c2 * scale, dim, size)
            if x1 is None or x2 is None:
                raise RegionBoundsError(
                    f"Window (row={row}, col={col}, scale={scale}) samples "
                    f"outside a {size}-pixel buffer of stride {dim} (tree {i})."
                )
            idx = 2 * idx + (1 if pixels[x1] <= pixels[x2] else 0)

        out += cascade.pred[i, idx - leaves]
        if out <= cascade.threshold[i]:
            return REJECTED

    return float(out - cascade.threshold[cascade.tree_num - 1])


def classify_regions(
    cascade: Cascade,
    rows: np.ndarray,
    cols: np.ndarray,
    scale: int,
    pixels: PixelBuffer,
    dim: int,
) -> np.ndarray:
    """Score many same-sized windows at once.

    Each window follows exactly the arithmetic of classify_region; windows
    are dropped from the working set as soon as a tree rejects them.

    Args:
        cascade: Decoded cascade.
        rows: Window centre rows (1-D, any integer dtype).
        cols: Window centre columns, same length as rows.
        scale: Window side length shared by all windows.
        pixels: Flat row-major uint8 pixel buffer.
        dim: Row stride of the pixel buffer.

    Returns:
        float32 array of scores, -1.0 for rejected windows.

    Raises:
        RegionBoundsError: If a sample point of a live window lands outside the
                           pixel buffer.
    """
    rows = np.asarray(rows, dtype=np.int64).reshape(-1)
    cols = np.asarray(cols, dtype=np.int64).reshape(-1)
    if rows.shape != cols.shape:
        raise ValueError(
            f"rows and cols must have the same length, "
            f"got {rows.size} and {cols.size}."
        )

    scores = np.full(rows.size, REJECTED, dtype=np.float32)
    if cascade.tree_num == 0 or rows.size == 0:
        return scores

    pixels = _as_pixel_array(pixels)
    size = pixels.size
    leaves = cascade.leaves_per_tree
    codes = cascade.codes.astype(np.int64)

    alive = np.arange(rows.size)
    r = rows * 256
    c = cols * 256
    out = np.zeros(rows.size, dtype=np.float32)

    for i in range(cascade.tree_num):
        tree = codes[i]
        idx = np.ones(alive.size, dtype=np.int64)
        for _ in range(cascade.tree_depth):
            node = tree[idx]
            x1 = _sample_indices(
                r + node[:, 0] * scale, c + node[:, 1] * scale, dim, size, scale, i
            )
            x2 = _sample_indices(
                r + node[:, 2] * scale, c + node[:, 3] * scale, dim, size, scale, i
            )
            idx = 2 * idx + (pixels[x1] <= pixels[x2])

        out = out + cascade.pred[i, idx - leaves]
        keep = out > cascade.threshold[i]
        if not keep.all():
            alive, r, c, out = alive[keep], r[keep], c[keep], out[keep]
            if alive.size == 0:
                return scores

    scores[alive] = out - cascade.threshold[cascade.tree_num - 1]
    return scores


def _as_pixel_array(pixels: PixelBuffer) -> np.ndarray:
    if isinstance(pixels, np.ndarray):
        return pixels.reshape(-1)
    return np.frombuffer(pixels, dtype=np.uint8)


def _sample_index(r: int, c: int, dim: int, size: int):
    """Flat pixel index of a fixed-point sample point, or None when it
    leaves the buffer or crosses a row boundary."""
    pr = r >> 8
    pc = c >> 8
    if pr < 0 or not 0 <= pc < dim:
        return None
    x = pr * dim + pc
    return x if x < size else None


def _sample_indices(
    r: np.ndarray,
    c: np.ndarray,
    dim: int,
    size: int,
    scale: int,
    tree: int,
) -> np.ndarray:
    pr = r >> 8
    pc = c >> 8
    x = pr * dim + pc
    if pr.min() < 0 or pc.min() < 0 or pc.max() >= dim or x.max() >= size:
        raise RegionBoundsError(
            f"Window of scale {scale} samples outside a {size}-pixel buffer "
            f"of stride {dim} (tree {tree})."
        )
    return x
