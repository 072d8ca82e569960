"""
Cascade forest and its binary decoder.

Responsibility:
    Parse a packed, little-endian cascade buffer into an immutable forest
    of fixed-depth binary trees.

Binary layout:
    [8 bytes: header, ignored]
    [4 bytes: tree_depth, u32]
    [4 bytes: tree_num, u32]
    tree_num x (
        [4 * 2^depth - 4 bytes: node codes, int8]
        [2^depth x 4 bytes: leaf predictions, float32]
        [4 bytes: rejection threshold, float32]
    )

Trailing bytes after the last tree are ignored.

Storage:
    Trees are kept as fixed-stride numpy blocks rather than node objects.
    tree_codes has shape (tree_num, 2^depth, 4): row 0 of every block is a
    zero placeholder so that node indices start at 1 (implicit heap
    indexing). tree_pred has shape (tree_num, 2^depth).

Non-goals:
    - No file I/O (see model_loader).
    - No training or re-serialization.
"""

import logging
import struct
from dataclasses import dataclass

import numpy as np

from facecascade.errors import DecodeError

logger = logging.getLogger(__name__)

_HEADER_SIZE = 8
_COUNTS = struct.Struct("<II")
_MAX_TREE_DEPTH = 32


@dataclass(frozen=True, eq=False)
class Cascade:
    """Immutable tree ensemble, safe to share across concurrent scans.

    Cascades compare and hash by identity.

    Attributes:
        tree_depth: Depth D of every tree (2^D leaves per tree).
        tree_num: Number of trees.
        codes: int8 array of shape (tree_num, 2^D, 4). Each node holds
               (row1, col1, row2, col2) sample-point offsets.
        pred: float32 array of shape (tree_num, 2^D) of leaf predictions.
        threshold: float32 array of shape (tree_num,) of rejection thresholds.
    """

    tree_depth: int
    tree_num: int
    codes: np.ndarray
    pred: np.ndarray
    threshold: np.ndarray

    def __post_init__(self) -> None:
        for array in (self.codes, self.pred, self.threshold):
            array.flags.writeable = False

    @property
    def leaves_per_tree(self) -> int:
        return 1 << self.tree_depth

    @property
    def tree_codes(self) -> np.ndarray:
        """Flat code sequence, 4 * 2^D values per tree."""
        return self.codes.reshape(-1)

    @property
    def tree_pred(self) -> np.ndarray:
        """Flat leaf prediction sequence, 2^D values per tree."""
        return self.pred.reshape(-1)

    @property
    def tree_threshold(self) -> np.ndarray:
        return self.threshold


class _Reader:
    """Bounds-checked cursor over a byte buffer."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def skip(self, size: int, what: str) -> None:
        self._require(size, what)
        self._pos += size

    def counts(self):
        self._require(_COUNTS.size, "tree depth and count")
        values = _COUNTS.unpack_from(self._data, self._pos)
        self._pos += _COUNTS.size
        return values

    def array(self, dtype: str, count: int, what: str) -> np.ndarray:
        size = np.dtype(dtype).itemsize * count
        self._require(size, what)
        if count == 0:
            return np.zeros(0, dtype=dtype)
        # frombuffer reinterprets the raw bytes; no numeric conversion.
        values = np.frombuffer(self._data, dtype=dtype, count=count, offset=self._pos)
        self._pos += size
        return values

    def _require(self, size: int, what: str) -> None:
        remaining = len(self._data) - self._pos
        if size > remaining:
            raise DecodeError(
                f"Truncated cascade data while reading {what}: "
                f"need {size} bytes at offset {self._pos}, "
                f"only {remaining} remain."
            )


def decode_cascade(data: bytes) -> Cascade:
    """Decode a packed cascade buffer.

    Args:
        data: Raw cascade bytes (bytes, bytearray or memoryview).

    Returns:
        A read-only Cascade.

    Raises:
        TypeError: If data is not a bytes-like object.
        DecodeError: If the buffer ends before a required field.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(
            f"Expected cascade data as bytes, got {type(data).__name__}."
        )
    data = bytes(data)

    reader = _Reader(data)
    reader.skip(_HEADER_SIZE, "header")
    tree_depth, tree_num = reader.counts()
    if tree_num == 0:
        # Nothing to read, so the depth only sizes empty arrays.
        leaves = 1 << tree_depth if tree_depth < _MAX_TREE_DEPTH else 0
    elif tree_depth >= _MAX_TREE_DEPTH:
        # A single tree of this depth needs more than 16 GiB of codes.
        raise DecodeError(
            f"Truncated cascade data: tree depth {tree_depth} cannot fit "
            f"in a {len(data)}-byte buffer."
        )
    else:
        leaves = 1 << tree_depth
    node_codes = 4 * leaves - 4

    codes = []
    preds = []
    thresholds = []
    for t in range(tree_num):
        tree_codes = reader.array("i1", node_codes, f"codes of tree {t}")
        codes.append(np.zeros(4, dtype=np.int8))
        codes.append(tree_codes)
        preds.append(reader.array("<f4", leaves, f"predictions of tree {t}"))
        thresholds.append(reader.array("<f4", 1, f"threshold of tree {t}"))

    if tree_num:
        flat_codes = np.concatenate(codes)
        flat_pred = np.concatenate(preds)
        flat_threshold = np.concatenate(thresholds)
    else:
        flat_codes = np.zeros(0, dtype=np.int8)
        flat_pred = np.zeros(0, dtype=np.float32)
        flat_threshold = np.zeros(0, dtype=np.float32)

    cascade = Cascade(
        tree_depth=tree_depth,
        tree_num=tree_num,
        codes=flat_codes.astype(np.int8).reshape(tree_num, leaves, 4),
        pred=flat_pred.astype(np.float32).reshape(tree_num, leaves),
        threshold=flat_threshold.astype(np.float32),
    )

    logger.debug(
        "Decoded cascade: depth=%d, trees=%d, bytes=%d",
        tree_depth, tree_num, len(data),
    )
    return cascade
