"""
Tile-grid scan of one region.

The region is walked in non-overlapping square tiles (row-major, any
margin smaller than one tile is ignored). Every tile is classified and the
results are reduced into one ColorObservation per classifiable color.
"""

import logging
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .colors import CLASSIFIABLE_COLORS, Color, ColorObservation, DebugMark
from .region_analysis import Region, RegionConfigError, extract_region
from .tile_classifier import ClassifierConfig, classify_tile

logger = logging.getLogger(__name__)

# Tiles scoring at least this are drawn with a thicker outline
HIGH_CONFIDENCE_SCORE = 98

_SLOT_INDEX: Dict[Color, int] = {color: i for i, color in enumerate(CLASSIFIABLE_COLORS)}


class RegionResult:
    """
    Per-color observations for one region.

    Stored as a fixed slot array in CLASSIFIABLE_COLORS order, so every
    classifiable color always has an entry (zero observation when unseen).
    Indexing with NONE or WHITE raises KeyError.
    """

    __slots__ = ("_observations",)

    def __init__(self, observations: Optional[Sequence[ColorObservation]] = None):
        if observations is None:
            observations = [ColorObservation() for _ in CLASSIFIABLE_COLORS]
        if len(observations) != len(CLASSIFIABLE_COLORS):
            raise ValueError(
                f"RegionResult needs {len(CLASSIFIABLE_COLORS)} observations "
                f"(got {len(observations)})"
            )
        self._observations: Tuple[ColorObservation, ...] = tuple(observations)

    def __getitem__(self, color: Color) -> ColorObservation:
        try:
            return self._observations[_SLOT_INDEX[color]]
        except KeyError:
            raise KeyError(f"{color!r} is not a classifiable color") from None

    def __contains__(self, color: object) -> bool:
        return color in _SLOT_INDEX

    def __iter__(self) -> Iterator[Color]:
        return iter(CLASSIFIABLE_COLORS)

    def __len__(self) -> int:
        return len(self._observations)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegionResult):
            return NotImplemented
        return self._observations == other._observations

    def __hash__(self) -> int:
        return hash(self._observations)

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{color}={obs.tile_count}/{obs.score:.1f}" for color, obs in self.items()
        )
        return f"RegionResult({parts})"

    def items(self) -> Iterator[Tuple[Color, ColorObservation]]:
        return zip(CLASSIFIABLE_COLORS, self._observations)

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {color.value: obs.to_dict() for color, obs in self.items()}


# One RegionResult per region, index = region index
FrameSnapshot = Tuple[RegionResult, ...]

EMPTY_SNAPSHOT: FrameSnapshot = ()


class RegionScan(NamedTuple):
    """Output of scanning one region."""
    result: RegionResult
    marks: List[DebugMark]


def iter_tiles(region: Region, tile_size: int) -> Iterator[Tuple[int, int]]:
    """Yield (row, column) offsets of every whole tile inside a region."""
    for row in range(0, region.height - tile_size + 1, tile_size):
        for column in range(0, region.width - tile_size + 1, tile_size):
            yield row, column


def scan_region(
    hsv_frame: np.ndarray,
    region: Region,
    config: Optional[ClassifierConfig] = None,
) -> RegionScan:
    """
    Classify every tile of a region and keep the best tile per color.

    Args:
        hsv_frame: Full HSV frame (H x W x 3)
        region: Region to scan, must lie inside the frame
        config: Classifier thresholds and tile size

    Returns:
        RegionScan with the per-color result and one debug mark per classified tile

    Raises:
        RegionConfigError: If the region does not fit in the frame
    """
    config = config or ClassifierConfig()
    tile_size = config.tile_size
    if tile_size <= 0:
        raise RegionConfigError(f"tile_size must be > 0 (got {tile_size})")

    frame_height, frame_width = hsv_frame.shape[:2]
    if not region.fits_in(frame_width, frame_height):
        raise RegionConfigError(
            f"Region {region.top_left}-{region.bottom_right} exceeds frame "
            f"{frame_width}x{frame_height}"
        )

    roi = extract_region(hsv_frame, region)
    counts = [0] * len(CLASSIFIABLE_COLORS)
    best = [ColorObservation() for _ in CLASSIFIABLE_COLORS]
    marks: List[DebugMark] = []

    for row, column in iter_tiles(region, tile_size):
        tile = roi[row:row + tile_size, column:column + tile_size]
        classification = classify_tile(tile, config)
        if not classification.matched:
            continue

        x = region.x + column
        y = region.y + row
        slot = _SLOT_INDEX[classification.color]
        counts[slot] += 1

        width = 2 if classification.score >= HIGH_CONFIDENCE_SCORE else 1
        marks.append(DebugMark(
            color=classification.color,
            upper_left=(x, y),
            lower_right=(x + tile_size, y + tile_size),
            line_width=width,
        ))

        # Strictly greater: ties keep the earlier tile in scan order
        if classification.score > best[slot].score:
            best[slot] = ColorObservation(
                color=classification.color,
                score=classification.score,
                x=x,
                y=y,
            )

    observations = [
        ColorObservation(color=obs.color, score=obs.score, tile_count=count, x=obs.x, y=obs.y)
        for obs, count in zip(best, counts)
    ]
    result = RegionResult(observations)
    logger.debug(f"Scanned region {region.top_left} {region.width}x{region.height}: {result!r}")
    return RegionScan(result=result, marks=marks)
