"""
Shared fixtures: synthetic cascade binaries built in memory.
"""

import struct

import pytest

from facecascade.cascade import decode_cascade


def _pack(depth, trees, header=b"\x00" * 8):
    """Pack (codes, preds, threshold) triples into a cascade binary."""
    data = bytearray(header)
    data += struct.pack("<II", depth, len(trees))
    for codes, preds, threshold in trees:
        data += struct.pack(f"<{len(codes)}b", *codes)
        data += struct.pack(f"<{len(preds)}f", *preds)
        data += struct.pack("<f", threshold)
    return bytes(data)


@pytest.fixture
def pack_cascade():
    return _pack


@pytest.fixture
def always_pass_cascade():
    """Depth-1 cascade whose only tree scores 1.0 for every window."""
    return decode_cascade(_pack(1, [([0, 0, 0, 0], [1.0, 1.0], 0.0)]))


@pytest.fixture
def always_reject_cascade():
    """Depth-1 cascade whose only tree rejects every window."""
    return decode_cascade(_pack(1, [([0, 0, 0, 0], [-1.0, -1.0], 0.0)]))


@pytest.fixture
def right_neighbour_cascade():
    """One depth-1 tree comparing the centre pixel with the pixel two
    columns to its right (for scale 8). Equal or brighter neighbour
    scores 2.0, darker neighbour scores -1.0; threshold 0.5."""
    return decode_cascade(_pack(1, [([0, 0, 0, 64], [-1.0, 2.0], 0.5)]))
