"""Capture a rendered page as a single self-contained HTML snapshot."""

from .config import CaptureConfig, SnapshotOptions
from .errors import PageSnapError, SnapshotError
from .models import CaptureWarning, SnapshotResult
from .snapshot import capture_snapshot

__all__ = [
    "CaptureConfig",
    "CaptureWarning",
    "PageSnapError",
    "SnapshotError",
    "SnapshotOptions",
    "SnapshotResult",
    "capture_snapshot",
]
