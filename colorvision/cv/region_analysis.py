"""
Region geometry and rendering utilities for CV frames.

Provides:
- Region definitions (absolute pixel rectangles) with validation
- Region extraction from frames
- Drawing of classifier debug marks onto frames
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import cv2
import numpy as np

from .colors import DebugMark, get_color_scalar

logger = logging.getLogger(__name__)


class ColorVisionError(Exception):
    """Base error for the color vision pipeline."""
    pass


class RegionConfigError(ColorVisionError, ValueError):
    """Raised when region geometry or region configuration is malformed."""
    pass


@dataclass(frozen=True)
class Region:
    """
    Rectangular region of interest in absolute pixel coordinates.

    Example of how the corners relate:

        (x, y) top_left ----------------+
        |                                |
        |                                |
        +------ bottom_right (x+w, y+h)
    """
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        """Validate geometry."""
        if self.width <= 0 or self.height <= 0:
            raise RegionConfigError(
                f"Region size must be positive (got {self.width}x{self.height})"
            )
        if self.x < 0 or self.y < 0:
            raise RegionConfigError(
                f"Region top-left must be non-negative (got ({self.x},{self.y}))"
            )

    @property
    def top_left(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def bottom_right(self) -> Tuple[int, int]:
        return (self.x + self.width, self.y + self.height)

    def fits_in(self, frame_width: int, frame_height: int) -> bool:
        """Check whether the whole region lies inside a frame of the given size."""
        right, bottom = self.bottom_right
        return right <= frame_width and bottom <= frame_height

    def to_list(self) -> List[int]:
        """Convert to [x, y, width, height] for JSON serialization."""
        return [self.x, self.y, self.width, self.height]

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "Region":
        """Create a Region from [x, y, width, height]."""
        if len(values) != 4:
            raise RegionConfigError(f"Region needs 4 values x,y,w,h (got {len(values)})")
        x, y, w, h = (int(v) for v in values)
        return cls(x=x, y=y, width=w, height=h)


# Region layout used when nothing else is configured (3 side-by-side zones)
DEFAULT_REGIONS: Tuple[Region, ...] = (
    Region(x=109, y=98, width=60, height=80),
    Region(x=181, y=98, width=60, height=80),
    Region(x=253, y=98, width=60, height=80),
)


def validate_regions(
    regions: Sequence[Region],
    num_regions: int,
    frame_width: int = None,
    frame_height: int = None,
) -> None:
    """
    Validate a region list against the configured count and, optionally, a frame size.

    Args:
        regions: Configured regions
        num_regions: Number of regions the processor works with
        frame_width, frame_height: Frame size to check bounds against

    Raises:
        RegionConfigError: If there are too few regions or a region leaves the frame
    """
    if num_regions <= 0:
        raise RegionConfigError(f"num_regions must be > 0 (got {num_regions})")
    if len(regions) < num_regions:
        raise RegionConfigError(
            f"Expected at least {num_regions} regions, got {len(regions)}"
        )
    if frame_width is None or frame_height is None:
        return
    for index, region in enumerate(regions[:num_regions]):
        if not region.fits_in(frame_width, frame_height):
            raise RegionConfigError(
                f"Region {index} {region.top_left}-{region.bottom_right} "
                f"exceeds frame {frame_width}x{frame_height}"
            )


def extract_region(frame: np.ndarray, region: Region) -> np.ndarray:
    """
    Extract a region from a frame (view, not a copy).

    Args:
        frame: Input frame (H x W x C numpy array)
        region: Region definition

    Returns:
        Cropped region as numpy array
    """
    return frame[region.y:region.y + region.height, region.x:region.x + region.width]


def draw_debug_marks(
    frame: np.ndarray,
    marks: Iterable[DebugMark],
    order: str = "RGB",
    in_place: bool = False,
) -> np.ndarray:
    """
    Draw debug rectangles on a frame.

    Args:
        frame: Frame to draw on
        marks: Draw instructions produced by the frame aggregator
        order: Channel order of the frame ("RGB" or "BGR")
        in_place: Draw directly on ``frame`` instead of a copy

    Returns:
        Frame with rectangles drawn
    """
    result = frame if in_place else frame.copy()
    count = 0
    for mark in marks:
        cv2.rectangle(
            result,
            mark.upper_left,
            mark.lower_right,
            get_color_scalar(mark.color, order),
            mark.line_width,
        )
        count += 1
    logger.debug(f"Drew {count} debug marks on frame {result.shape[1]}x{result.shape[0]}")
    return result
