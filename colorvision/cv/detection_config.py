"""
Configuration persistence for the color vision processor.

Handles loading/saving VisionConfig from:
1. Config file ($COLORVISION_CONFIG_DIR/color_vision_config.json)
2. Environment variables (COLORVISION_*)
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..utils.config import SETTINGS
from .processor import ColorVisionProcessor, VisionConfig
from .region_analysis import DEFAULT_REGIONS, Region, RegionConfigError
from .tile_classifier import ClassifierConfig


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "color_vision_config.json"


def get_config_path() -> Path:
    """Get path to the color vision config file."""
    config_dir = Path(os.environ.get("COLORVISION_CONFIG_DIR", str(SETTINGS.config_dir)))
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / CONFIG_FILENAME


def load_config() -> VisionConfig:
    """
    Load processor configuration from file and environment.

    Priority: environment > config file > defaults

    Returns:
        VisionConfig instance

    Raises:
        RegionConfigError: If the merged configuration is invalid
    """
    config_dict: Dict[str, Any] = {}

    # 1. Try loading from config file
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path) as f:
                file_config = json.load(f)
            config_dict = _flatten_config(file_config)
            logger.info(f"Loaded color vision config from {config_path}")
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to load config file {config_path}: {e}")
            config_dict = {}

    # 2. Override with environment variables
    config_dict.update(_load_from_env())

    # 3. Create VisionConfig instance
    config = _dict_to_config(config_dict)
    config.validate()
    return config


def build_processor() -> ColorVisionProcessor:
    """Create a ColorVisionProcessor from the saved configuration."""
    config = load_config()
    logger.info(
        f"Building color vision processor | regions={config.num_regions} "
        f"tile_size={config.classifier.tile_size}"
    )
    return ColorVisionProcessor(config)


def save_config(config: VisionConfig, metadata: Optional[Dict[str, Any]] = None) -> Path:
    """
    Save processor configuration to file.

    Args:
        config: VisionConfig to save
        metadata: Optional metadata (e.g., calibration notes)

    Returns:
        Path the config was written to

    Raises:
        ValueError: If config validation fails
        IOError: If file write fails
    """
    try:
        config.validate()
    except RegionConfigError as e:
        logger.error(f"❌ {e}")
        raise

    config_path = get_config_path()
    classifier = config.classifier
    config_dict: Dict[str, Any] = {
        "num_regions": config.num_regions,
        "regions": [region.to_list() for region in config.regions],
        "classifier": {
            "min_saturation": classifier.min_saturation,
            "min_brightness": classifier.min_brightness,
            "max_std_dev": classifier.max_std_dev,
            "tile_size": classifier.tile_size,
        },
        "input_color_order": config.input_color_order,
    }

    if metadata:
        config_dict["metadata"] = metadata

    try:
        # Atomic write (temp file + rename)
        temp_path = config_path.with_suffix('.json.tmp')
        with open(temp_path, 'w') as f:
            json.dump(config_dict, f, indent=2)
        temp_path.replace(config_path)

        logger.info(
            f"✓ Saved color vision config to {config_path} | "
            f"regions={len(config.regions)} tile_size={classifier.tile_size}"
        )
    except OSError as e:
        logger.error(f"Failed to save config to {config_path}: {e}", exc_info=True)
        raise IOError(f"Failed to save config: {e}") from e

    return config_path


def parse_regions(value: str) -> list:
    """
    Parse a region list of the form "x,y,w,h;x,y,w,h;...".

    Raises:
        RegionConfigError: If an entry is malformed
    """
    regions = []
    for chunk in value.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            parts = [int(p) for p in chunk.split(",")]
        except ValueError as e:
            raise RegionConfigError(f"Invalid region entry {chunk!r}: {e}") from e
        regions.append(Region.from_sequence(parts))
    return regions


def _flatten_config(nested: Dict[str, Any]) -> Dict[str, Any]:
    """Convert nested config dict to flat dict for VisionConfig."""
    flat: Dict[str, Any] = {}

    if "num_regions" in nested:
        flat["num_regions"] = int(nested["num_regions"])
    if "regions" in nested:
        flat["regions"] = [Region.from_sequence(r) for r in nested["regions"]]
    if "input_color_order" in nested:
        flat["input_color_order"] = str(nested["input_color_order"])

    classifier = nested.get("classifier", {})
    for key in ("min_saturation", "min_brightness", "tile_size"):
        if key in classifier:
            flat[key] = int(classifier[key])
    if "max_std_dev" in classifier:
        flat["max_std_dev"] = float(classifier["max_std_dev"])

    return flat


def _load_from_env() -> Dict[str, Any]:
    """Load configuration from environment variables."""
    config: Dict[str, Any] = {}

    if "COLORVISION_MIN_SATURATION" in os.environ:
        config["min_saturation"] = int(os.environ["COLORVISION_MIN_SATURATION"])
    if "COLORVISION_MIN_BRIGHTNESS" in os.environ:
        config["min_brightness"] = int(os.environ["COLORVISION_MIN_BRIGHTNESS"])
    if "COLORVISION_MAX_STD_DEV" in os.environ:
        config["max_std_dev"] = float(os.environ["COLORVISION_MAX_STD_DEV"])
    if "COLORVISION_TILE_SIZE" in os.environ:
        config["tile_size"] = int(os.environ["COLORVISION_TILE_SIZE"])
    if "COLORVISION_INPUT_ORDER" in os.environ:
        config["input_color_order"] = os.environ["COLORVISION_INPUT_ORDER"]

    if "COLORVISION_REGIONS" in os.environ:
        regions = parse_regions(os.environ["COLORVISION_REGIONS"])
        if regions:
            config["regions"] = regions

    return config


def _dict_to_config(config_dict: Dict[str, Any]) -> VisionConfig:
    """Convert flat dict to VisionConfig instance."""
    defaults = ClassifierConfig()
    return VisionConfig(
        num_regions=config_dict.get("num_regions", 3),
        regions=list(config_dict.get("regions", DEFAULT_REGIONS)),
        classifier=ClassifierConfig(
            min_saturation=config_dict.get("min_saturation", defaults.min_saturation),
            min_brightness=config_dict.get("min_brightness", defaults.min_brightness),
            max_std_dev=config_dict.get("max_std_dev", defaults.max_std_dev),
            tile_size=config_dict.get("tile_size", defaults.tile_size),
        ),
        input_color_order=config_dict.get("input_color_order", "RGB"),
    )
