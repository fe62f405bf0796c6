"""
Per-frame aggregation of region scans into a FrameSnapshot.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from .colors import CLASSIFIABLE_COLORS, Color, DebugMark, TelemetryEntry
from .queries import find_best_region
from .region_analysis import Region, validate_regions
from .region_scanner import FrameSnapshot, RegionResult, scan_region
from .tile_classifier import ClassifierConfig

logger = logging.getLogger(__name__)

# Line width of the outline drawn around every region
REGION_OUTLINE_WIDTH = 2


class FrameResult(NamedTuple):
    """Everything produced for one frame."""
    snapshot: FrameSnapshot
    marks: List[DebugMark]
    telemetry: List[TelemetryEntry]
    capture_time_ns: Optional[int] = None


def select_display_color(result: RegionResult) -> Color:
    """
    Pick the single outline color shown for a region.

    Fixed priority: green > yellow > red > blue, WHITE when nothing matched.
    Yellow is chosen when a yellow tile was recorded rather than on score,
    which is how the display has always behaved.
    """
    if result[Color.GREEN].score > 0:
        return Color.GREEN
    if result[Color.YELLOW].color is Color.YELLOW:
        return Color.YELLOW
    if result[Color.RED].score > 0:
        return Color.RED
    if result[Color.BLUE].score > 0:
        return Color.BLUE
    return Color.WHITE


def aggregate_frame(
    hsv_frame: np.ndarray,
    regions: Sequence[Region],
    num_regions: int,
    config: Optional[ClassifierConfig] = None,
    capture_time_ns: Optional[int] = None,
) -> FrameResult:
    """
    Scan every configured region of an HSV frame.

    Regions past ``num_regions`` are ignored.

    Args:
        hsv_frame: HSV frame (H x W x 3, OpenCV 0-179 hue)
        regions: Region list owned by the caller
        num_regions: Number of regions to process
        config: Classifier thresholds and tile size
        capture_time_ns: Camera timestamp, passed through untouched

    Returns:
        FrameResult with the new snapshot, debug marks and telemetry

    Raises:
        RegionConfigError: If regions are missing or fall outside the frame
    """
    config = config or ClassifierConfig()
    frame_height, frame_width = hsv_frame.shape[:2]
    validate_regions(regions, num_regions, frame_width, frame_height)

    results: List[RegionResult] = []
    marks: List[DebugMark] = []
    telemetry: List[TelemetryEntry] = []

    for index, region in enumerate(regions[:num_regions]):
        scan = scan_region(hsv_frame, region, config)
        results.append(scan.result)
        marks.extend(scan.marks)
        for color in CLASSIFIABLE_COLORS:
            telemetry.append(TelemetryEntry(
                f"Region {index} {color} score", scan.result[color].score
            ))

    snapshot: FrameSnapshot = tuple(results)

    telemetry.append(TelemetryEntry("Red region", find_best_region(snapshot, Color.RED, num_regions)))
    telemetry.append(TelemetryEntry("Blue region", find_best_region(snapshot, Color.BLUE, num_regions)))

    for index, (region, result) in enumerate(zip(regions, snapshot)):
        display = select_display_color(result)
        telemetry.append(TelemetryEntry(f"Region {index} color", display))
        marks.append(DebugMark(
            color=display,
            upper_left=region.top_left,
            lower_right=region.bottom_right,
            line_width=REGION_OUTLINE_WIDTH,
        ))

    logger.debug(
        f"Aggregated frame {frame_width}x{frame_height} | regions={len(snapshot)} "
        f"marks={len(marks)}"
    )
    return FrameResult(
        snapshot=snapshot,
        marks=marks,
        telemetry=telemetry,
        capture_time_ns=capture_time_ns,
    )
