"""Utility helpers for string normalization and path handling."""

from __future__ import annotations

import re

_PATH_HOSTILE_PATTERN = re.compile(r'[\\/:*?"<>|]+')
_WHITESPACE_PATTERN = re.compile(r"\s+")


def sanitize_file_name(value: str) -> str:
    """Turn an arbitrary title into a token that is safe to use as a file name."""
    sanitized = _PATH_HOSTILE_PATTERN.sub("-", value.strip())
    return _WHITESPACE_PATTERN.sub("-", sanitized)
