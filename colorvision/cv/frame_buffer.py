"""
Thread-safe store for the latest classification snapshot and telemetry.

The frame-processing thread publishes, any number of query threads read.
"""

import threading
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .colors import TelemetryEntry
from .region_scanner import EMPTY_SNAPSHOT, FrameSnapshot, RegionResult


@dataclass(frozen=True)
class SnapshotMetadata:
    """Metadata for a published snapshot."""
    frame_index: int
    published_at: float
    capture_time_ns: Optional[int] = None


class SnapshotStore:
    """
    Copy-on-publish storage for the most recent FrameSnapshot.

    ``publish`` copies the incoming sequence into a tuple *before* taking
    the lock, so the lock only guards a reference swap. Published values
    are immutable, which lets readers keep the reference they got without
    copying and without ever seeing a half-written frame.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: FrameSnapshot = EMPTY_SNAPSHOT
        self._telemetry: Tuple[TelemetryEntry, ...] = ()
        self._metadata: Optional[SnapshotMetadata] = None
        self._frame_index = 0

    def publish(
        self,
        snapshot: Iterable[RegionResult],
        capture_time_ns: Optional[int] = None,
    ) -> SnapshotMetadata:
        """
        Replace the current snapshot.

        Args:
            snapshot: One RegionResult per region
            capture_time_ns: Optional capture timestamp passed through from the camera

        Returns:
            Metadata recorded for the published snapshot
        """
        frozen = tuple(snapshot)
        published_at = time.time()

        with self._lock:
            self._frame_index += 1
            metadata = SnapshotMetadata(
                frame_index=self._frame_index,
                published_at=published_at,
                capture_time_ns=capture_time_ns,
            )
            self._snapshot = frozen
            self._metadata = metadata
        return metadata

    def current(self) -> FrameSnapshot:
        """
        Get the most recently published snapshot.

        Returns:
            Tuple of RegionResult, empty if nothing has been published yet
        """
        with self._lock:
            return self._snapshot

    def publish_telemetry(self, entries: Iterable[TelemetryEntry]) -> None:
        """Replace the current telemetry list."""
        frozen = tuple(entries)
        with self._lock:
            self._telemetry = frozen

    def telemetry(self) -> Tuple[TelemetryEntry, ...]:
        """Get the most recently published telemetry entries."""
        with self._lock:
            return self._telemetry

    def metadata(self) -> Optional[SnapshotMetadata]:
        """Get metadata of the current snapshot, or None if nothing was published."""
        with self._lock:
            return self._metadata

    def clear(self) -> None:
        """Drop the published snapshot and telemetry."""
        with self._lock:
            self._snapshot = EMPTY_SNAPSHOT
            self._telemetry = ()
            self._metadata = None

    def has_snapshot(self) -> bool:
        """Check if a snapshot has been published."""
        with self._lock:
            return self._metadata is not None
