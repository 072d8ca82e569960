"""
Tests for JSON/CSV export and the file-writing output sinks.
"""

import csv
import json

import numpy as np

from facecascade.config import AppConfig, OutputConfig
from facecascade.detection import Detection
from facecascade.output_handler import OutputHandler
from facecascade.serializer import save_csv, save_json

_DETECTIONS = {
    1: [Detection(row=40, col=30, scale=24, q=12.5)],
    0: [
        Detection(row=10, col=10, scale=20, q=6.0),
        Detection(row=80, col=60, scale=32, q=8.5),
    ],
}


def test_save_json(tmp_path):
    output = tmp_path / "nested" / "detections.json"

    save_json(_DETECTIONS, str(output))

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["total_frames"] == 2
    assert payload["total_detections"] == 3
    assert [f["frame_id"] for f in payload["frames"]] == [0, 1]
    assert payload["frames"][1]["detections"] == [
        {"row": 40, "col": 30, "scale": 24, "q": 12.5}
    ]


def test_save_csv(tmp_path):
    output = tmp_path / "detections.csv"

    save_csv(_DETECTIONS, str(output))

    with open(output, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["frame_id"] for r in rows] == ["0", "0", "1"]
    assert rows[1] == {"frame_id": "0", "row": "80", "col": "60", "scale": "32", "q": "8.5"}


def test_output_handler_writes_files(tmp_path):
    config = AppConfig(
        output=OutputConfig(mode="save_image,save_json,save_csv", save_path=str(tmp_path)),
    )
    handler = OutputHandler(config)
    frame = np.zeros((100, 100, 3), dtype=np.uint8)

    assert handler.process_frame(0, frame, _DETECTIONS[0]) is True
    handler.finalize()

    assert (tmp_path / "frame_000000.jpg").is_file()
    assert json.loads((tmp_path / "detections.json").read_text())["total_detections"] == 2
    assert (tmp_path / "detections.csv").is_file()
