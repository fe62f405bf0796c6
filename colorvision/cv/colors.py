"""
Color palette and the small value types shared by the classifier pipeline.

The palette is closed: four classifiable colors plus ``NONE`` (tile did
not match anything) and ``WHITE`` (display-only outline color).
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Tuple


class Color(Enum):
    """Colors known to the classifier."""
    NONE = "none"
    GREEN = "green"
    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"
    WHITE = "white"

    def __str__(self) -> str:
        return self.value


# Colors a tile can be classified as, in slot order for RegionResult
CLASSIFIABLE_COLORS: Tuple[Color, ...] = (
    Color.GREEN,
    Color.RED,
    Color.BLUE,
    Color.YELLOW,
)

# RGB drawing scalars (frames from the camera arrive in RGB order)
COLOR_SCALARS: Dict[Color, Tuple[int, int, int]] = {
    Color.NONE: (0, 0, 0),
    Color.GREEN: (0, 255, 0),
    Color.RED: (255, 0, 0),
    Color.BLUE: (0, 0, 255),
    Color.YELLOW: (255, 255, 0),
    Color.WHITE: (255, 255, 255),
}


def get_color_scalar(color: Color, order: str = "RGB") -> Tuple[int, int, int]:
    """
    Get the drawing scalar for a color.

    Args:
        color: Palette color
        order: Channel order of the frame being drawn on ("RGB" or "BGR")

    Returns:
        3-tuple of channel values
    """
    r, g, b = COLOR_SCALARS[color]
    if order.upper() == "BGR":
        return (b, g, r)
    return (r, g, b)


@dataclass(frozen=True)
class ColorObservation:
    """
    Best match for one color inside one region.

    Attributes:
        color: Color of the best tile, NONE while no tile has been recorded
        score: Closeness to the ideal color (higher is better, typically <= 100)
        tile_count: Number of tiles in the region classified as this color
        x: Pixel X of the best tile's top-left corner
        y: Pixel Y of the best tile's top-left corner
    """
    color: Color = Color.NONE
    score: float = 0.0
    tile_count: int = 0
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["color"] = self.color.value
        return data


@dataclass(frozen=True)
class DebugMark:
    """Rectangle draw instruction for an external renderer."""
    color: Color
    upper_left: Tuple[int, int]
    lower_right: Tuple[int, int]
    line_width: int = 1


@dataclass(frozen=True)
class TelemetryEntry:
    """One label/value pair reported by the frame processor."""
    label: str
    value: Any
