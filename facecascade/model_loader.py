"""
Cascade loading for the face cascade system.

Responsibility:
    Read the packed cascade binary from disk and decode it into a
    ready-to-scan Cascade.

Non-goals:
    - No scanning or frame-level logic.
    - No automatic cascade downloading.

Failure behavior:
    - A missing cascade file raises FileNotFoundError with the exact
      missing path.
    - A truncated file raises DecodeError.
"""

import logging
from pathlib import Path

from facecascade.cascade import Cascade, decode_cascade
from facecascade.config import CascadeConfig, get_project_root

logger = logging.getLogger(__name__)


def resolve_cascade_path(config: CascadeConfig) -> Path:
    """Resolve the configured cascade path against the project root."""
    path = Path(config.path)
    if not path.is_absolute():
        path = get_project_root() / path
    return path


def load_cascade(config: CascadeConfig) -> Cascade:
    """Load and decode the configured cascade file.

    Args:
        config: CascadeConfig holding the cascade file path.

    Returns:
        The decoded Cascade.

    Raises:
        FileNotFoundError: If the cascade file does not exist.
        DecodeError: If the file is truncated.
    """
    path = resolve_cascade_path(config)

    if not path.is_file():
        raise FileNotFoundError(
            f"Cascade file not found.\n"
            f"  Expected: {path}\n"
            f"  Provide the file or update 'cascade.path' in your config."
        )

    logger.info("Loading cascade: %s", path)
    cascade = decode_cascade(path.read_bytes())

    logger.info(
        "Cascade loaded (depth=%d, trees=%d).",
        cascade.tree_depth, cascade.tree_num,
    )
    return cascade
