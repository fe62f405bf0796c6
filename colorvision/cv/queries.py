"""
Read-only queries over the published snapshot, for the control-loop side.
"""

from typing import Optional

from .colors import Color
from .frame_buffer import SnapshotStore
from .region_scanner import FrameSnapshot


def find_best_region(snapshot: FrameSnapshot, color: Color, num_regions: int) -> Optional[int]:
    """
    Find the region with the most tiles of a color.

    Args:
        snapshot: Snapshot to search
        color: Classifiable color
        num_regions: Number of configured regions

    Returns:
        Lowest region index with the largest non-zero tile count, or None if the
        snapshot is incomplete or no region has the color
    """
    if len(snapshot) < num_regions:
        return None

    best_region = None
    max_tiles = 0
    for region in range(num_regions):
        tile_count = snapshot[region][color].tile_count
        if tile_count > max_tiles:
            best_region = region
            max_tiles = tile_count
    return best_region


class ColorQueries:
    """Query façade over a SnapshotStore."""

    def __init__(self, store: SnapshotStore, num_regions: int):
        self.store = store
        self.num_regions = num_regions

    def _check_region(self, region: int) -> None:
        if not 0 <= region < self.num_regions:
            raise IndexError(
                f"Region index {region} out of range (0..{self.num_regions - 1})"
            )

    def is_initialized(self) -> bool:
        """True once a snapshot covering every configured region has been published."""
        return len(self.store.current()) >= self.num_regions

    def best_region_for(self, color: Color) -> Optional[int]:
        """
        Region index that has the most tiles of ``color``.

        Returns None before the first frame or when no region has the color.
        """
        return find_best_region(self.store.current(), color, self.num_regions)

    def region_has_color(self, region: int, color: Color) -> bool:
        """
        Check whether a region has at least one recorded tile of ``color``.

        Raises:
            IndexError: If ``region`` is outside the configured regions
        """
        self._check_region(region)
        snapshot = self.store.current()
        if len(snapshot) < self.num_regions:
            return False
        return snapshot[region][color].color is color

    def is_region_red(self, region: int) -> bool:
        return self.region_has_color(region, Color.RED)

    def is_region_green(self, region: int) -> bool:
        return self.region_has_color(region, Color.GREEN)

    def is_region_blue(self, region: int) -> bool:
        return self.region_has_color(region, Color.BLUE)

    def is_region_yellow(self, region: int) -> bool:
        return self.region_has_color(region, Color.YELLOW)
