"""
Computer Vision module for region color classification.

This module provides:
- Tile classification of HSV pixel blocks into a fixed color palette
- Region scanning and per-frame aggregation of per-color statistics
- Thread-safe publishing of the latest results for other threads
- Query helpers for control loops (best region, region-has-color)
- Configuration persistence (JSON file + environment)
"""

from .colors import (
    CLASSIFIABLE_COLORS,
    Color,
    ColorObservation,
    DebugMark,
    TelemetryEntry,
    get_color_scalar,
)
from .region_analysis import (
    DEFAULT_REGIONS,
    ColorVisionError,
    Region,
    RegionConfigError,
    draw_debug_marks,
    extract_region,
)
from .tile_classifier import ClassifierConfig, TileClassification, classify_tile
from .region_scanner import FrameSnapshot, RegionResult, scan_region
from .frame_aggregator import FrameResult, aggregate_frame, select_display_color
from .frame_buffer import SnapshotMetadata, SnapshotStore
from .queries import ColorQueries, find_best_region
from .processor import ColorVisionProcessor, VisionConfig

__all__ = [
    # Palette and value types
    "CLASSIFIABLE_COLORS",
    "Color",
    "ColorObservation",
    "DebugMark",
    "TelemetryEntry",
    "get_color_scalar",

    # Regions
    "DEFAULT_REGIONS",
    "ColorVisionError",
    "Region",
    "RegionConfigError",
    "draw_debug_marks",
    "extract_region",

    # Classification
    "ClassifierConfig",
    "TileClassification",
    "classify_tile",
    "FrameSnapshot",
    "RegionResult",
    "scan_region",
    "FrameResult",
    "aggregate_frame",
    "select_display_color",

    # Snapshot handoff
    "SnapshotMetadata",
    "SnapshotStore",
    "ColorQueries",
    "find_best_region",

    # Processor
    "ColorVisionProcessor",
    "VisionConfig",
]
