"""
Output handling for the face cascade pipeline.

Responsibility:
    Route detection results to the configured sinks: display window,
    annotated images, JSON and CSV files. Several modes may be active
    at once.

Non-goals:
    - No detection logic.
    - No input acquisition.
"""

import logging
from pathlib import Path
from typing import Dict, List, Set

import cv2
import numpy as np

from facecascade.config import AppConfig, get_project_root
from facecascade.detection import Detection
from facecascade.serializer import save_csv, save_json
from facecascade.visualizer import draw_detections, show_frame

logger = logging.getLogger(__name__)

_FILE_MODES = {"save_image", "save_json", "save_csv"}


class OutputHandler:
    """Routes detection results to configured output sinks.

    Usage:
        handler = OutputHandler(config)
        handler.process_frame(frame_id, frame, detections)
        ...
        handler.finalize()
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._modes: Set[str] = set(m.strip() for m in config.output.mode.split(","))
        self._detections_buffer: Dict[int, List[Detection]] = {}

        save_path = Path(config.output.save_path)
        if not save_path.is_absolute():
            save_path = get_project_root() / save_path
        self._save_path = save_path

        if self._modes & _FILE_MODES:
            self._save_path.mkdir(parents=True, exist_ok=True)

        logger.info(
            "OutputHandler initialized: modes=%s, save_path=%s",
            self._modes, self._save_path,
        )

    @property
    def save_path(self) -> Path:
        return self._save_path

    def process_frame(
        self,
        frame_id: int,
        frame: np.ndarray,
        detections: List[Detection],
    ) -> bool:
        """Send one frame's detections to every active sink.

        Returns:
            False if the user asked to stop ('q' or ESC in display mode),
            True otherwise.
        """
        should_continue = True

        if "display" in self._modes:
            key = show_frame(frame, detections, self._config.visualization)
            if key == ord("q") or key == 27:
                logger.info("Quit signal received (key press).")
                should_continue = False

        if "save_image" in self._modes:
            annotated = draw_detections(frame, detections, self._config.visualization)
            output_file = self._save_path / f"frame_{frame_id:06d}.jpg"
            cv2.imwrite(str(output_file), annotated)
            logger.debug("Saved frame %d to %s", frame_id, output_file)

        if self._modes & {"save_json", "save_csv"}:
            self._detections_buffer[frame_id] = detections

        return should_continue

    def finalize(self) -> None:
        """Write buffered JSON/CSV output and close any windows."""
        if "save_json" in self._modes and self._detections_buffer:
            save_json(self._detections_buffer, str(self._save_path / "detections.json"))

        if "save_csv" in self._modes and self._detections_buffer:
            save_csv(self._detections_buffer, str(self._save_path / "detections.csv"))

        if "display" in self._modes:
            cv2.destroyAllWindows()

        self._detections_buffer.clear()
        logger.info("OutputHandler finalized.")
