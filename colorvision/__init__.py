"""Per-frame color region classification for camera pipelines."""

__version__ = "0.1.0"
