"""
Configuration management for the face cascade system.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI arguments > Environment variables > YAML config file > Defaults

Design constraints:
    - The system MUST run with zero configuration (safe defaults only).
    - Missing or invalid values fail early and loudly.
    - No detection logic, I/O, or cascade decoding belongs here.

Non-goals:
    - No dynamic reloading.
    - No remote configuration.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import yaml

from facecascade.params import CascadeParams

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root resolution
# ---------------------------------------------------------------------------
# facecascade/config.py -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Return the resolved project root directory."""
    return _PROJECT_ROOT


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CascadeConfig:
    """Cascade file location.

    Attributes:
        path: Path to the packed cascade binary (relative to project root).
    """

    path: str = "cascade/facefinder"


@dataclass(frozen=True)
class ScanConfig:
    """Multiscale scan parameters.

    Attributes:
        min_size: Smallest detection window side, in pixels.
        max_size: Largest detection window side, in pixels.
        shift_factor: Step between windows as a fraction of window size.
        scale_factor: Window growth between scale levels.
    """

    min_size: int = 20
    max_size: int = 1000
    shift_factor: float = 0.1
    scale_factor: float = 1.1

    def to_params(self) -> CascadeParams:
        return CascadeParams(
            min_size=self.min_size,
            max_size=self.max_size,
            shift_factor=self.shift_factor,
            scale_factor=self.scale_factor,
        )


@dataclass(frozen=True)
class ClusterConfig:
    """Clustering and final filtering.

    Attributes:
        iou_threshold: Overlap ratio above which detections are merged.
        min_score: Merged detections scoring at or below this are dropped.
    """

    iou_threshold: float = 0.2
    min_score: float = 5.0


@dataclass(frozen=True)
class InputConfig:
    """Input source configuration.

    Attributes:
        source: Image file, image directory, or video file path.
        resize_width: Optional width to downscale input frames before detection.
                      None means no resizing.
    """

    source: str = "images/"
    resize_width: Optional[int] = None


@dataclass(frozen=True)
class OutputConfig:
    """Output behavior configuration.

    Attributes:
        mode: Comma-separated output modes: 'display', 'save_image',
              'save_json', 'save_csv'.
        save_path: Directory where output artifacts are written.
    """

    mode: str = "save_image"
    save_path: str = "output/"


@dataclass(frozen=True)
class VisualizationConfig:
    """Visualization rendering parameters.

    Attributes:
        box_color: BGR color tuple for detection markers.
        thickness: Line thickness in pixels.
        show_score: Whether to render the score label.
        shape: 'rect' or 'circle'.
    """

    box_color: Tuple[int, int, int] = (0, 0, 255)
    thickness: int = 2
    show_score: bool = True
    shape: str = "rect"


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    cascade: CascadeConfig = field(default_factory=CascadeConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

_VALID_OUTPUT_MODES = {"display", "save_image", "save_json", "save_csv"}
_VALID_SHAPES = {"rect", "circle"}


def validate_config(config: AppConfig) -> None:
    """Validate configuration values. Raises ValueError on invalid state."""

    modes = set(m.strip() for m in config.output.mode.split(","))
    invalid_modes = modes - _VALID_OUTPUT_MODES
    if invalid_modes:
        raise ValueError(
            f"Invalid output.mode(s): {invalid_modes}. "
            f"Valid modes: {_VALID_OUTPUT_MODES}. "
            f"Use comma-separated values for multiple outputs."
        )

    scan = config.scan
    if scan.min_size <= 0:
        raise ValueError(f"scan.min_size must be positive, got {scan.min_size}.")

    if scan.max_size < scan.min_size:
        raise ValueError(
            f"scan.max_size must be >= scan.min_size, "
            f"got {scan.max_size} < {scan.min_size}."
        )

    if not (0.0 < scan.shift_factor <= 1.0):
        raise ValueError(
            f"scan.shift_factor must be in (0.0, 1.0], got {scan.shift_factor}."
        )

    if scan.scale_factor <= 1.0:
        raise ValueError(
            f"scan.scale_factor must be greater than 1.0, got {scan.scale_factor}."
        )

    if not (0.0 < config.cluster.iou_threshold < 1.0):
        raise ValueError(
            f"cluster.iou_threshold must be in (0.0, 1.0), "
            f"got {config.cluster.iou_threshold}."
        )

    if config.visualization.shape not in _VALID_SHAPES:
        raise ValueError(
            f"Invalid visualization.shape: '{config.visualization.shape}'. "
            f"Must be one of {_VALID_SHAPES}."
        )

    if config.input.resize_width is not None and config.input.resize_width <= 0:
        raise ValueError(
            f"input.resize_width must be positive or None, "
            f"got {config.input.resize_width}."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _parse_tuple(value, expected_len: int, cast_type=float):
    """Convert a list from YAML into a tuple of the expected type and length."""
    if isinstance(value, (list, tuple)):
        if len(value) != expected_len:
            raise ValueError(
                f"Expected {expected_len} values, got {len(value)}: {value}"
            )
        return tuple(cast_type(v) for v in value)
    return value


def _build(cls, raw: dict, casts: dict):
    """Build a config dataclass from the keys of raw that cls knows about."""
    kwargs = {}
    for key, cast in casts.items():
        if key in raw:
            kwargs[key] = cast(raw[key])
    return cls(**kwargs)


def _optional_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


_CASTS = {
    "cascade": (CascadeConfig, {"path": str}),
    "scan": (ScanConfig, {
        "min_size": int,
        "max_size": int,
        "shift_factor": float,
        "scale_factor": float,
    }),
    "cluster": (ClusterConfig, {
        "iou_threshold": float,
        "min_score": float,
    }),
    "input": (InputConfig, {
        "source": str,
        "resize_width": _optional_int,
    }),
    "output": (OutputConfig, {
        "mode": lambda v: str(v).lower(),
        "save_path": str,
    }),
    "visualization": (VisualizationConfig, {
        "box_color": lambda v: _parse_tuple(v, 3, int),
        "thickness": int,
        "show_score": _bool,
        "shape": lambda v: str(v).lower(),
    }),
}


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "FACE_CASCADE_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        FACE_CASCADE_SCAN_MIN_SIZE=40
        FACE_CASCADE_CLUSTER_IOU_THRESHOLD=0.3
    """
    env_map = {
        f"{_ENV_PREFIX}CASCADE_PATH": ("cascade", "path"),
        f"{_ENV_PREFIX}SCAN_MIN_SIZE": ("scan", "min_size"),
        f"{_ENV_PREFIX}SCAN_MAX_SIZE": ("scan", "max_size"),
        f"{_ENV_PREFIX}SCAN_SHIFT_FACTOR": ("scan", "shift_factor"),
        f"{_ENV_PREFIX}SCAN_SCALE_FACTOR": ("scan", "scale_factor"),
        f"{_ENV_PREFIX}CLUSTER_IOU_THRESHOLD": ("cluster", "iou_threshold"),
        f"{_ENV_PREFIX}CLUSTER_MIN_SCORE": ("cluster", "min_score"),
        f"{_ENV_PREFIX}INPUT_SOURCE": ("input", "source"),
        f"{_ENV_PREFIX}INPUT_RESIZE_WIDTH": ("input", "resize_width"),
        f"{_ENV_PREFIX}OUTPUT_MODE": ("output", "mode"),
        f"{_ENV_PREFIX}OUTPUT_SAVE_PATH": ("output", "save_path"),
    }

    for env_var, (section, key) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw.setdefault(section, {})[key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest -> lowest):
        Environment variables > YAML file > Hard-coded defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the system runs entirely on defaults.

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    if config_path is not None:
        resolved = Path(config_path)
        if not resolved.is_absolute():
            resolved = _PROJECT_ROOT / resolved

        if not resolved.is_file():
            raise FileNotFoundError(
                f"Configuration file not found: {resolved}. "
                f"Provide a valid path or omit to use defaults."
            )

        logger.info("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    raw = _apply_env_overrides(raw)

    sections = {
        name: _build(cls, raw.get(name) or {}, casts)
        for name, (cls, casts) in _CASTS.items()
    }
    config = AppConfig(**sections)

    validate_config(config)

    logger.debug("Configuration loaded: %s", config)
    return config
