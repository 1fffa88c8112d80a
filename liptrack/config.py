"""
Configuration loader and typed config classes for the lip tracking tool.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional
import yaml

logger = logging.getLogger(__name__)


@dataclass
class VideoConfig:
    default_dir: str = "data"
    width: int = 320  # Processing resolution
    height: int = 240


@dataclass
class SegmentationConfig:
    threshold_fraction: float = 0.18  # Lower = stricter lip region


@dataclass
class BoundaryConfig:
    column_sample_count: int = 50


@dataclass
class DisplayConfig:
    frame_width: int = 640
    frame_height: int = 480
    mask_width: int = 320
    mask_height: int = 240
    curve_color: List[int] = field(default_factory=lambda: [0, 255, 0])  # RGB
    marker_radius: int = 2


@dataclass
class DiagnosticsConfig:
    enabled: bool = False
    output_dir: str = "output/diagnostics"


@dataclass
class SystemConfig:
    output_dir: str = "output"
    log_level: str = "INFO"


@dataclass
class Config:
    """Main configuration container."""
    video: VideoConfig = field(default_factory=VideoConfig)
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    boundary: BoundaryConfig = field(default_factory=BoundaryConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    system: SystemConfig = field(default_factory=SystemConfig)


def _dict_to_dataclass(data: dict, cls):
    """Convert a dictionary to a dataclass, ignoring unknown keys."""
    if data is None:
        return cls()

    field_names = set(cls.__dataclass_fields__)
    kwargs = {key: value for key, value in data.items() if key in field_names}

    return cls(**kwargs)


def default_config_path() -> str:
    """Path of config/settings.yaml relative to the project root."""
    package_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(package_dir)
    return os.path.join(project_root, "config", "settings.yaml")


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML config file. If None, looks for config/settings.yaml
                    relative to the project root.

    Returns:
        Config object with all settings.
    """
    if config_path is None:
        config_path = default_config_path()

    if not os.path.exists(config_path):
        logger.warning(f"Config file not found at {config_path}, using defaults")
        return Config()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None:
        return Config()

    config = Config(
        video=_dict_to_dataclass(data.get('video'), VideoConfig),
        segmentation=_dict_to_dataclass(data.get('segmentation'), SegmentationConfig),
        boundary=_dict_to_dataclass(data.get('boundary'), BoundaryConfig),
        display=_dict_to_dataclass(data.get('display'), DisplayConfig),
        diagnostics=_dict_to_dataclass(data.get('diagnostics'), DiagnosticsConfig),
        system=_dict_to_dataclass(data.get('system'), SystemConfig),
    )

    logger.debug(f"Loaded configuration from {config_path}")
    return config


def validate_config(config: Config) -> List[str]:
    """
    Validate configuration values.

    Returns:
        List of error messages (empty if valid).
    """
    errors = []

    fraction = config.segmentation.threshold_fraction
    if not isinstance(fraction, (int, float)) or not 0 < fraction < 1:
        errors.append(f"threshold_fraction must be between 0 and 1: {fraction}")

    count = config.boundary.column_sample_count
    if not isinstance(count, int) or isinstance(count, bool) or count < 1:
        errors.append(f"column_sample_count must be a positive integer: {count}")

    # Processing and display sizes
    sizes = {
        "video.width": config.video.width,
        "video.height": config.video.height,
        "display.frame_width": config.display.frame_width,
        "display.frame_height": config.display.frame_height,
        "display.mask_width": config.display.mask_width,
        "display.mask_height": config.display.mask_height,
    }
    for name, value in sizes.items():
        if not isinstance(value, int) or value <= 0:
            errors.append(f"Invalid {name}: {value}")

    color = config.display.curve_color
    if len(color) != 3 or any(not 0 <= c <= 255 for c in color):
        errors.append(f"curve_color must be three values in 0..255: {color}")

    if config.display.marker_radius < 0:
        errors.append(f"Invalid marker_radius: {config.display.marker_radius}")

    if logging.getLevelName(str(config.system.log_level).upper()) not in (
        logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL
    ):
        errors.append(f"Unknown log_level: {config.system.log_level}")

    return errors


if __name__ == "__main__":
    # Test config loading
    logging.basicConfig(level=logging.INFO)

    config = load_config()
    print("Loaded configuration:")
    print(f"  Processing resolution: {config.video.width}x{config.video.height}")
    print(f"  Threshold fraction: {config.segmentation.threshold_fraction}")
    print(f"  Column sample count: {config.boundary.column_sample_count}")
    print(f"  Diagnostics: {'on' if config.diagnostics.enabled else 'off'} ({config.diagnostics.output_dir})")

    errors = validate_config(config)
    if errors:
        print("\nValidation errors:")
        for error in errors:
            print(f"  - {error}")
    else:
        print("\nConfiguration valid!")
