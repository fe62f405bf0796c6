"""
Solid-color classification of small HSV tiles.

A tile is run through a short-circuit pipeline of rejection stages:

1. Brightness: dark tiles (background) are rejected
2. Saturation: washed-out tiles (white/gray) are rejected
3. Hue variance: mixed or noisy tiles cannot match a non-red band
4. Hue band: blue, green and yellow are matched on the mean hue
5. Red wraparound: hues below 90 are shifted by +180 so red clusters
   around 180 instead of straddling 0/180, then re-checked

Hue follows the OpenCV 8-bit convention (0-179, cyclic).
"""

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

import numpy as np

from .colors import Color

logger = logging.getLogger(__name__)

# Hue values below this are shifted by +180 for the red check
RED_SHIFT_THRESHOLD = 90
RED_SHIFT = 180

# Stage names reported in TileClassification.rejected_by
STAGE_BRIGHTNESS = "brightness"
STAGE_SATURATION = "saturation"
STAGE_HUE_VARIANCE = "hue_variance"
STAGE_HUE_BAND = "hue_band"


@dataclass
class ClassifierConfig:
    """Tile classifier tunables."""
    min_saturation: int = 100   # Mean S below this is treated as white/gray
    min_brightness: int = 75    # Mean V below this is treated as background
    max_std_dev: float = 10.0   # Hue standard deviation limit for a solid tile
    tile_size: int = 5          # Edge length of a square tile in pixels


class HueBand(NamedTuple):
    """Open hue interval mapped to a color, with the ideal HSV used for scoring."""
    color: Color
    low: float
    high: float
    ideal_hue: float
    ideal_sat: float

    def contains(self, hue: float) -> bool:
        return self.low < hue < self.high


# Checked in order, first match wins
HUE_BANDS: Tuple[HueBand, ...] = (
    HueBand(Color.BLUE, 90, 120, ideal_hue=105, ideal_sat=150),
    HueBand(Color.GREEN, 45, 85, ideal_hue=75, ideal_sat=150),
    HueBand(Color.YELLOW, 20, 40, ideal_hue=30, ideal_sat=150),
)

# Red is matched on the shifted hue channel
RED_BAND = HueBand(Color.RED, 170, 190, ideal_hue=180, ideal_sat=150)


@dataclass(frozen=True)
class TileStats:
    """Channel statistics of one tile."""
    mean_hue: float
    std_hue: float
    mean_sat: float
    mean_val: float


@dataclass(frozen=True)
class TileClassification:
    """
    Result of classifying one tile.

    ``rejected_by`` names the stage that ruled the tile out, or is None
    when a color matched.
    """
    color: Color = Color.NONE
    score: float = 0.0
    rejected_by: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.color is not Color.NONE


def compute_tile_stats(tile: np.ndarray) -> TileStats:
    """
    Compute mean/std of hue and mean saturation/brightness of an HSV tile.

    Standard deviation is the population value (same as cv2.meanStdDev).
    """
    pixels = np.asarray(tile, dtype=np.float64).reshape(-1, 3)
    if pixels.shape[0] == 0:
        raise ValueError("Cannot classify an empty tile")
    hue = pixels[:, 0]
    return TileStats(
        mean_hue=float(hue.mean()),
        std_hue=float(hue.std()),
        mean_sat=float(pixels[:, 1].mean()),
        mean_val=float(pixels[:, 2].mean()),
    )


def shift_red_hue(hue: np.ndarray) -> np.ndarray:
    """Map hues below 90 to hue+180 so red sits around 180 without wrapping."""
    hue = np.asarray(hue, dtype=np.float64)
    return np.where(hue < RED_SHIFT_THRESHOLD, hue + RED_SHIFT, hue)


def compute_score(ideal_hue: float, ideal_sat: float, hue: float, sat: float) -> float:
    """
    Closeness of an observed hue/saturation to a color's ideal.

    score = 100 - sqrt(dH^2 + dS^2), where saturation above the ideal
    is not penalized (dS is clamped at 0).
    """
    delta_hue = ideal_hue - hue
    delta_sat = max(0.0, ideal_sat - sat)
    return 100.0 - math.sqrt(delta_hue * delta_hue + delta_sat * delta_sat)


def _match_hue_band(mean_hue: float) -> Optional[HueBand]:
    for band in HUE_BANDS:
        if band.contains(mean_hue):
            return band
    return None


def _match_red(tile: np.ndarray, config: ClassifierConfig) -> Optional[TileClassification]:
    pixels = np.asarray(tile, dtype=np.float64).reshape(-1, 3)
    shifted = shift_red_hue(pixels[:, 0])
    mean_hue = float(shifted.mean())
    std_hue = float(shifted.std())
    mean_sat = float(pixels[:, 1].mean())

    if (RED_BAND.contains(mean_hue)
            and mean_sat > config.min_saturation
            and std_hue <= config.max_std_dev):
        score = compute_score(RED_BAND.ideal_hue, RED_BAND.ideal_sat, mean_hue, mean_sat)
        return TileClassification(color=Color.RED, score=score)
    return None


def classify_tile(tile: np.ndarray, config: Optional[ClassifierConfig] = None) -> TileClassification:
    """
    Classify a square block of HSV pixels as one of the palette colors.

    Args:
        tile: HSV pixels, shape (N, N, 3)
        config: Classifier thresholds (defaults when omitted)

    Returns:
        TileClassification with color NONE and score 0 when no color matches
    """
    config = config or ClassifierConfig()
    stats = compute_tile_stats(tile)

    if stats.mean_val < config.min_brightness:
        return TileClassification(rejected_by=STAGE_BRIGHTNESS)

    if stats.mean_sat < config.min_saturation:
        return TileClassification(rejected_by=STAGE_SATURATION)

    # A noisy tile may still be solid red straddling 0/180, so high variance
    # only skips the non-red bands
    is_pure = stats.std_hue < config.max_std_dev
    if is_pure:
        band = _match_hue_band(stats.mean_hue)
        if band is not None:
            score = compute_score(band.ideal_hue, band.ideal_sat, stats.mean_hue, stats.mean_sat)
            return TileClassification(color=band.color, score=score)

    red = _match_red(tile, config)
    if red is not None:
        return red

    return TileClassification(rejected_by=STAGE_HUE_BAND if is_pure else STAGE_HUE_VARIANCE)
