"""
Frame processor that searches for colors within user-defined regions.

For every camera frame it classifies each region tile by tile, publishes
per-region, per-color results for other threads to query, and draws debug
rectangles on the frame it hands back to the camera pipeline.

Example:
    >>> processor = ColorVisionProcessor()
    >>> output = processor.process_frame(rgb_frame, capture_time_ns)
    >>> # from the control loop thread
    >>> if processor.is_camera_initialized():
    >>>     region = processor.get_region(Color.RED)
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .colors import Color, TelemetryEntry
from .frame_aggregator import FrameResult, aggregate_frame
from .frame_buffer import SnapshotStore
from .queries import ColorQueries
from .region_analysis import (
    DEFAULT_REGIONS,
    Region,
    RegionConfigError,
    draw_debug_marks,
    validate_regions,
)
from .region_scanner import FrameSnapshot
from .tile_classifier import ClassifierConfig

logger = logging.getLogger(__name__)

_HSV_CONVERSIONS = {
    "RGB": cv2.COLOR_RGB2HSV,
    "BGR": cv2.COLOR_BGR2HSV,
}


@dataclass
class VisionConfig:
    """Color vision processor configuration."""
    num_regions: int = 3
    regions: List[Region] = field(default_factory=lambda: list(DEFAULT_REGIONS))
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    input_color_order: str = "RGB"  # Channel order of frames given to process_frame

    def validate(self) -> None:
        """
        Check the configuration, reporting every problem at once.

        Raises:
            RegionConfigError: If any value is out of range
        """
        errors = []
        if self.num_regions <= 0:
            errors.append(f"num_regions must be > 0 (got {self.num_regions})")
        elif len(self.regions) < self.num_regions:
            errors.append(
                f"Expected at least {self.num_regions} regions, got {len(self.regions)}"
            )
        for index, region in enumerate(self.regions):
            if not isinstance(region, Region):
                errors.append(f"regions[{index}] must be a Region (got {type(region).__name__})")

        cls = self.classifier
        if cls.tile_size <= 0:
            errors.append(f"tile_size must be > 0 (got {cls.tile_size})")
        if not (0 <= cls.min_saturation <= 255):
            errors.append(f"min_saturation must be 0-255 (got {cls.min_saturation})")
        if not (0 <= cls.min_brightness <= 255):
            errors.append(f"min_brightness must be 0-255 (got {cls.min_brightness})")
        if cls.max_std_dev <= 0:
            errors.append(f"max_std_dev must be > 0 (got {cls.max_std_dev})")
        if self.input_color_order.upper() not in _HSV_CONVERSIONS:
            errors.append(
                f"input_color_order must be one of {sorted(_HSV_CONVERSIONS)} "
                f"(got {self.input_color_order!r})"
            )

        if errors:
            raise RegionConfigError(
                "Config validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


class ColorVisionProcessor:
    """
    Classifies colors in configured regions, one camera frame at a time.

    ``process_frame``/``process_hsv`` run on the camera thread; the query
    methods may be called from any other thread.
    """

    def __init__(self, config: Optional[VisionConfig] = None):
        self.config = config or VisionConfig()
        self.config.validate()

        self.store = SnapshotStore()
        self.queries = ColorQueries(self.store, self.config.num_regions)
        self._frame_size: Optional[Tuple[int, int]] = None

        # Performance tracking
        self._frame_count = 0
        self._total_time_ms = 0.0
        self._max_time_ms = 0.0
        self._min_time_ms = float('inf')

    @property
    def num_regions(self) -> int:
        return self.config.num_regions

    def init(self, width: int, height: int) -> None:
        """
        Record the stream size and check the regions against it.

        Raises:
            RegionConfigError: If a region does not fit in the stream
        """
        validate_regions(self.config.regions, self.num_regions, width, height)
        self._frame_size = (width, height)
        logger.info(f"Color vision processor initialized for {width}x{height} stream")

    def set_region(self, index: int, region: Region) -> None:
        """
        Reconfigure one region. Call between frames only.

        Raises:
            IndexError: If ``index`` is not a configured region
            RegionConfigError: If the region does not fit in the known stream size
        """
        if not 0 <= index < self.num_regions:
            raise IndexError(f"Region index {index} out of range (0..{self.num_regions - 1})")
        if self._frame_size is not None and not region.fits_in(*self._frame_size):
            width, height = self._frame_size
            raise RegionConfigError(
                f"Region {region.top_left}-{region.bottom_right} exceeds frame {width}x{height}"
            )
        self.config.regions[index] = region
        logger.info(f"Region {index} set to {region.top_left} {region.width}x{region.height}")

    def process_hsv(self, hsv_frame: np.ndarray, capture_time_ns: Optional[int] = None) -> FrameResult:
        """
        Classify an HSV frame and publish the results.

        Args:
            hsv_frame: HSV frame (OpenCV convention, hue 0-179)
            capture_time_ns: Camera timestamp, passed through

        Returns:
            FrameResult for this frame (marks are only returned, never stored)
        """
        start = time.perf_counter()

        result = aggregate_frame(
            hsv_frame,
            tuple(self.config.regions),
            self.num_regions,
            self.config.classifier,
            capture_time_ns=capture_time_ns,
        )
        self.store.publish(result.snapshot, capture_time_ns=capture_time_ns)
        self.store.publish_telemetry(result.telemetry)

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        self._frame_count += 1
        self._total_time_ms += elapsed_ms
        self._max_time_ms = max(self._max_time_ms, elapsed_ms)
        self._min_time_ms = min(self._min_time_ms, elapsed_ms)
        logger.debug(f"Processed frame #{self._frame_count} in {elapsed_ms:.2f}ms")

        return result

    def process_frame(self, frame: np.ndarray, capture_time_ns: Optional[int] = None) -> np.ndarray:
        """
        Convert a camera frame to HSV, classify it and draw the debug marks.

        Args:
            frame: Camera frame in ``config.input_color_order`` channel order
            capture_time_ns: Camera timestamp, passed through

        Returns:
            Copy of the frame with region and tile rectangles drawn
        """
        order = self.config.input_color_order.upper()
        hsv = cv2.cvtColor(frame, _HSV_CONVERSIONS[order])
        result = self.process_hsv(hsv, capture_time_ns)
        return draw_debug_marks(frame, result.marks, order=order)

    # Queries (safe to call from other threads)

    def get_color_data(self) -> FrameSnapshot:
        """Latest published snapshot, empty before the first frame."""
        return self.store.current()

    def get_telemetry_data(self) -> Tuple[TelemetryEntry, ...]:
        """Latest published telemetry entries."""
        return self.store.telemetry()

    def is_camera_initialized(self) -> bool:
        return self.queries.is_initialized()

    def get_region(self, color: Color) -> Optional[int]:
        """Region with the most tiles of ``color``, or None."""
        return self.queries.best_region_for(color)

    def region_has_color(self, region: int, color: Color) -> bool:
        return self.queries.region_has_color(region, color)

    def is_region_red(self, region: int) -> bool:
        return self.queries.is_region_red(region)

    def is_region_green(self, region: int) -> bool:
        return self.queries.is_region_green(region)

    def is_region_blue(self, region: int) -> bool:
        return self.queries.is_region_blue(region)

    def is_region_yellow(self, region: int) -> bool:
        return self.queries.is_region_yellow(region)

    def get_performance_stats(self) -> dict:
        """
        Get frame processing statistics.

        Returns:
            Dictionary with avg_ms, max_ms, min_ms, count
        """
        if self._frame_count == 0:
            return {
                "avg_ms": 0.0,
                "max_ms": 0.0,
                "min_ms": 0.0,
                "count": 0
            }

        return {
            "avg_ms": self._total_time_ms / self._frame_count,
            "max_ms": self._max_time_ms,
            "min_ms": self._min_time_ms,
            "count": self._frame_count
        }

    def reset_performance_stats(self) -> None:
        """Reset performance tracking counters."""
        self._total_time_ms = 0.0
        self._max_time_ms = 0.0
        self._min_time_ms = float('inf')
        self._frame_count = 0
