"""
Input handling for the face cascade pipeline.

Responsibility:
    Yield (frame_id, frame) pairs from a single image, a directory of
    images, or a video file.

Non-goals:
    - No detection, drawing, or output writing.
    - No camera capture.

Robustness:
    - The source is validated at construction time.
    - Unreadable images are logged and skipped.
"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp"}
_VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".mkv"}


class InputHandler:
    """Frame iterator over images, image directories, and video files.

    Usage:
        handler = InputHandler(source="photos/")
        for frame_id, frame in handler:
            ...
        handler.release()
    """

    def __init__(self, source: str, resize_width: Optional[int] = None) -> None:
        """Validate the source and prepare iteration.

        Raises:
            FileNotFoundError: If the source path does not exist.
            ValueError: If the file type is unsupported or a directory
                        holds no images.
            RuntimeError: If a video file cannot be opened.
        """
        self._resize_width = resize_width
        self._cap: Optional[cv2.VideoCapture] = None
        self._image_paths: List[Path] = []

        path = Path(str(source).strip())

        if path.is_dir():
            self._mode = "directory"
            self._image_paths = sorted(
                p for p in path.iterdir() if p.suffix.lower() in _IMAGE_EXTENSIONS
            )
            if not self._image_paths:
                raise ValueError(
                    f"No image files found in directory: '{path}'. "
                    f"Supported extensions: {_IMAGE_EXTENSIONS}."
                )
        elif path.is_file():
            ext = path.suffix.lower()
            if ext in _IMAGE_EXTENSIONS:
                self._mode = "image"
                self._image_paths = [path]
            elif ext in _VIDEO_EXTENSIONS:
                self._mode = "video"
                self._cap = cv2.VideoCapture(str(path))
                if not self._cap.isOpened():
                    raise RuntimeError(f"Failed to open video file '{path}'.")
            else:
                raise ValueError(
                    f"Unrecognized file extension: '{ext}' for source '{path}'. "
                    f"Supported images: {_IMAGE_EXTENSIONS}. "
                    f"Supported videos: {_VIDEO_EXTENSIONS}."
                )
        else:
            raise FileNotFoundError(
                f"Input source not found: '{path}'. "
                f"Provide a valid image, directory, or video path."
            )

        logger.info("InputHandler initialized: mode=%s, source=%s", self._mode, path)

    def __iter__(self) -> Iterator[Tuple[int, np.ndarray]]:
        if self._mode == "video":
            yield from self._iterate_video()
        else:
            yield from self._iterate_images()

    def _iterate_images(self) -> Iterator[Tuple[int, np.ndarray]]:
        for idx, path in enumerate(self._image_paths):
            frame = cv2.imread(str(path))
            if frame is None:
                logger.warning("Skipping unreadable image (frame_id=%d): %s", idx, path)
                continue
            yield idx, self._maybe_resize(frame)

    def _iterate_video(self) -> Iterator[Tuple[int, np.ndarray]]:
        frame_id = 0
        while True:
            ret, frame = self._cap.read()
            if not ret or frame is None:
                logger.info("End of video reached at frame %d.", frame_id)
                break
            yield frame_id, self._maybe_resize(frame)
            frame_id += 1

    def _maybe_resize(self, frame: np.ndarray) -> np.ndarray:
        """Downscale to resize_width, preserving aspect ratio."""
        if self._resize_width is None:
            return frame

        h, w = frame.shape[:2]
        if w <= self._resize_width:
            return frame

        new_h = int(h * self._resize_width / w)
        return cv2.resize(frame, (self._resize_width, new_h), interpolation=cv2.INTER_AREA)

    def release(self) -> None:
        """Release the video capture handle, if any."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug("VideoCapture released.")
