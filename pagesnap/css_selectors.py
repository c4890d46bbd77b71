"""Selector list splitting and normalization."""

from __future__ import annotations

import re
from typing import List

_PSEUDO_ELEMENT_PATTERN = re.compile(r"::?(?:before|after)(?![\w-])|::[\w-]+", re.IGNORECASE)
_STATE_PSEUDO_CLASS_PATTERN = re.compile(
    r":(?:hover|active|focus-visible|focus-within|focus|visited|link|checked"
    r"|disabled|enabled|target)(?![\w-])",
    re.IGNORECASE,
)

_OPENERS = "(["
_CLOSERS = ")]"
_QUOTES = "'\""


def split_selectors(selector_text: str) -> List[str]:
    """Split a selector list on top-level commas.

    Commas inside quoted strings, attribute brackets and parentheses do not
    separate clauses. Clauses are trimmed and empty ones are dropped.
    """
    selectors: List[str] = []
    current: List[str] = []
    depth = 0
    quote = None
    previous = ""
    for char in selector_text:
        if quote:
            current.append(char)
            if char == quote and previous != "\\":
                quote = None
            previous = char
            continue
        if char in _QUOTES:
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif char == "," and depth == 0:
            clause = "".join(current).strip()
            if clause:
                selectors.append(clause)
            current = []
            previous = char
            continue
        current.append(char)
        previous = char

    clause = "".join(current).strip()
    if clause:
        selectors.append(clause)
    return selectors


def normalize_selector(selector: str) -> str:
    """Strip pseudo-elements and interaction-state pseudo-classes.

    The result may be empty. Stripping repeats until nothing changes, so
    normalizing an already normalized selector returns it unchanged.
    """
    normalized = selector
    while True:
        stripped = _PSEUDO_ELEMENT_PATTERN.sub("", normalized)
        stripped = _STATE_PSEUDO_CLASS_PATTERN.sub("", stripped)
        if stripped == normalized:
            break
        normalized = stripped
    return normalized.strip()
