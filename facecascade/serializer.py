"""
Serialization for the face cascade pipeline.

Responsibility:
    Export detection results to JSON or CSV for downstream consumption.

Non-goals:
    - No rendering, display, or detection logic.
    - No streaming output; files are written whole.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Dict, List

from facecascade.detection import Detection

logger = logging.getLogger(__name__)

_CSV_FIELDS = ["frame_id", "row", "col", "scale", "q"]


def save_json(
    detections_by_frame: Dict[int, List[Detection]],
    output_path: str,
) -> None:
    """Export all detections to a JSON file.

    Output schema:
        {
            "frames": [
                {
                    "frame_id": 0,
                    "detections": [
                        {"row": ..., "col": ..., "scale": ..., "q": ...}
                    ]
                }
            ],
            "total_frames": N,
            "total_detections": M
        }

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    frames = [
        {
            "frame_id": frame_id,
            "detections": [d.to_dict() for d in detections_by_frame[frame_id]],
        }
        for frame_id in sorted(detections_by_frame)
    ]
    total_detections = sum(len(f["detections"]) for f in frames)

    payload = {
        "frames": frames,
        "total_frames": len(frames),
        "total_detections": total_detections,
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(
        "JSON output saved: %s (%d frames, %d detections)",
        output_path, len(frames), total_detections,
    )


def save_csv(
    detections_by_frame: Dict[int, List[Detection]],
    output_path: str,
) -> None:
    """Export all detections to a CSV file, one row per detection.

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    total = 0
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_FIELDS)
        writer.writeheader()
        for frame_id in sorted(detections_by_frame):
            for det in detections_by_frame[frame_id]:
                writer.writerow({"frame_id": frame_id, **det.to_dict()})
                total += 1

    logger.info("CSV output saved: %s (%d rows)", output_path, total)


def _ensure_parent_dir(path: str) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
