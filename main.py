"""
Face Cascade CLI Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, wire together
    the detector and I/O handlers, and run the processing loop.

Usage:
    python main.py --source photo.jpg --cascade cascade/facefinder
    python main.py --source images/ --output-mode save_image,save_json
    python main.py --source clip.mp4 --min-size 40 --iou 0.2
    python main.py --config my_config.yaml

This module is the executable entry point. It should not be imported
by other modules.
"""

import argparse
import dataclasses
import logging
import sys
import time

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

from facecascade.config import AppConfig, validate_config, load_config
from facecascade.detector import Detector
from facecascade.errors import FaceCascadeError
from facecascade.input_handler import InputHandler
from facecascade.output_handler import OutputHandler


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Face Cascade: pixel-comparison cascade face detection",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("--source", type=str,
                        help="Image file, image directory, or video file.")
    parser.add_argument("--config", type=str,
                        help="Path to YAML configuration file.")
    parser.add_argument("--cascade", type=str,
                        help="Path to the cascade binary. Overrides config.")
    parser.add_argument("--min-size", type=int,
                        help="Minimum detection window size in pixels.")
    parser.add_argument("--max-size", type=int,
                        help="Maximum detection window size in pixels.")
    parser.add_argument("--shift", type=float,
                        help="Window shift as a fraction of its size.")
    parser.add_argument("--scale", type=float,
                        help="Window growth factor between scales.")
    parser.add_argument("--iou", type=float,
                        help="Overlap threshold for merging detections.")
    parser.add_argument("--min-score", type=float,
                        help="Drop merged detections scoring at or below this.")
    parser.add_argument("--output-mode", type=str,
                        help="Comma-separated output modes: display, save_image, "
                             "save_json, save_csv.")
    parser.add_argument("--output-path", type=str,
                        help="Directory for output artifacts.")

    return parser.parse_args()


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return a copy of config with any CLI values applied."""

    def override(section, **values):
        values = {k: v for k, v in values.items() if v is not None}
        return dataclasses.replace(section, **values) if values else section

    config = dataclasses.replace(
        config,
        cascade=override(config.cascade, path=args.cascade),
        scan=override(
            config.scan,
            min_size=args.min_size,
            max_size=args.max_size,
            shift_factor=args.shift,
            scale_factor=args.scale,
        ),
        cluster=override(config.cluster, iou_threshold=args.iou, min_score=args.min_score),
        input=override(config.input, source=args.source),
        output=override(config.output, mode=args.output_mode, save_path=args.output_path),
    )
    validate_config(config)
    return config


def main() -> int:
    """Main execution loop."""
    args = parse_args()

    # 1. Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = apply_overrides(load_config(args.config), args)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Configuration error: %s", e)
        return 1

    # 2. Components
    try:
        detector = Detector(config)
        input_handler = InputHandler(
            source=config.input.source,
            resize_width=config.input.resize_width,
        )
        output_handler = OutputHandler(config)
    except (FileNotFoundError, ValueError, RuntimeError, FaceCascadeError) as e:
        logger.error("Initialization failed: %s", e)
        return 1

    # 3. Processing loop
    frame_count = 0
    start_time = time.perf_counter()

    try:
        for frame_id, frame in input_handler:
            frame_count += 1
            detections = detector.detect(frame)
            logger.info("Frame %d: %d face(s) detected.", frame_id, len(detections))

            if not output_handler.process_frame(frame_id, frame, detections):
                logger.info("Stopping loop per user request.")
                break
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    finally:
        elapsed = time.perf_counter() - start_time
        input_handler.release()
        output_handler.finalize()
        logger.info(
            "Processing finished. Total frames: %d in %.2fs.",
            frame_count, elapsed,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
