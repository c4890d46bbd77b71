"""Persisting snapshots to disk or a text stream."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from .config import DEFAULT_FILE_STEM
from .utils import sanitize_file_name

logger = logging.getLogger("pagesnap")


@dataclass
class ExportResult:
    """Where a snapshot ended up, or why it did not."""

    ok: bool
    path: Optional[Path] = None
    error: Optional[str] = None


def snapshot_file_name(title: Optional[str]) -> str:
    """Suggest a file name for a snapshot of a page titled ``title``."""
    stem = sanitize_file_name(title or "") or DEFAULT_FILE_STEM
    return f"{stem}.html"


def unique_path(directory: Path, file_name: str) -> Path:
    """Return a path in ``directory`` that does not exist yet, numbering on conflict."""
    candidate = directory / file_name
    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem} ({counter}){suffix}"
        counter += 1
    return candidate


def export_snapshot(
    document_text: str,
    file_name: str,
    output_root: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> ExportResult:
    """Write a snapshot to ``stream`` if given, otherwise into ``output_root``."""
    if stream is not None:
        try:
            stream.write(document_text)
            stream.flush()
        except (OSError, ValueError) as exc:
            return ExportResult(ok=False, error=f"Preview failed: {exc}")
        return ExportResult(ok=True)

    directory = output_root or Path.cwd()
    try:
        directory.mkdir(parents=True, exist_ok=True)
        destination = unique_path(directory, file_name)
        destination.write_text(document_text, encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to write snapshot %s: %s", file_name, exc)
        return ExportResult(ok=False, error=f"Download failed to start: {exc}")
    logger.info("Saved snapshot to %s", destination)
    return ExportResult(ok=True, path=destination)
