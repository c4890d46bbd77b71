"""Configuration objects and constants for page snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_FILE_STEM = "pagesnap"
RELAY_TIMEOUT_SECONDS = 3.0
FREEZE_ATTRIBUTE = "data-pagesnap-freeze"
EXTRACTED_ATTRIBUTE = "data-pagesnap-extracted"


@dataclass(frozen=True)
class SnapshotOptions:
    """What a single capture keeps, strips and injects."""

    remove_scripts: bool = True
    remove_original_styles: bool = True
    use_relay_fetch: bool = True
    add_csp: bool = False


@dataclass
class CaptureConfig:
    """Top-level settings that control rendering and capture behaviour."""

    output_root: Path
    wait_after_load: float = 1.0
    navigation_timeout: float = 30.0
    relay_timeout: float = RELAY_TIMEOUT_SECONDS
    fetch_timeout: float = 15.0
    settle_frames: int = 2
