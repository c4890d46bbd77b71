"""Rewriting of relative resource references to absolute addresses."""

from __future__ import annotations

import re
from typing import Any, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import urljoin

import tinycss2

_UNTOUCHED_PREFIXES = ("data:", "blob:", "about:", "#")
# tinycss2 counts lines after folding these sequences into a single newline.
_NEWLINE = re.compile(r"\r\n|[\r\n\f]")
_BLOCK_TYPES = ("() block", "[] block", "{} block")


def absolutize_url(value: str, base_url: Optional[str]) -> str:
    """Resolve ``value`` against ``base_url``; returns ``value`` when it cannot."""
    reference = value.strip()
    if not base_url or not reference or reference.lower().startswith(_UNTOUCHED_PREFIXES):
        return value
    try:
        return urljoin(base_url, reference)
    except ValueError:
        return value


def _resolve(reference: str, base_url: str) -> Optional[str]:
    reference = reference.strip()
    if not reference or reference.lower().startswith(_UNTOUCHED_PREFIXES):
        return None
    try:
        absolute = urljoin(base_url, reference)
    except ValueError:
        return None
    if absolute == reference:
        return None
    return absolute


def _url_references(nodes: Iterable[Any]) -> Iterator[Tuple[Any, str]]:
    """Yield every ``url`` token and ``url()`` function with the reference it holds."""
    for node in nodes:
        if node.type == "url":
            yield node, node.value
        elif node.type == "function":
            if node.lower_name != "url":
                yield from _url_references(node.arguments)
                continue
            arguments = [
                argument
                for argument in node.arguments
                if argument.type not in ("whitespace", "comment")
            ]
            if len(arguments) == 1 and arguments[0].type == "string":
                yield node, arguments[0].value
        elif node.type in _BLOCK_TYPES:
            yield from _url_references(node.content)


def _line_starts(text: str) -> List[int]:
    starts = [0]
    starts.extend(match.end() for match in _NEWLINE.finditer(text))
    return starts


def _reference_end(text: str, position: int) -> int:
    """Offset just past the ``)`` closing a ``url(`` whose argument starts at ``position``."""
    quote = None
    index = position
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == ")":
            return index + 1
        index += 1
    return len(text)


def _quoted(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\a ")
    return f'"{escaped}"'


def rewrite_css_urls(css_text: str, base_url: Optional[str]) -> str:
    """Rewrite every relative ``url(...)`` in ``css_text`` as an absolute, quoted reference.

    Only real url tokens and ``url()`` functions are replaced; text inside
    strings and comments, and every byte outside a rewritten reference, is
    left as it was.
    """
    if not base_url:
        return css_text

    nodes = tinycss2.parse_component_value_list(css_text)
    line_starts = _line_starts(css_text)
    pieces: List[str] = []
    cursor = 0
    for node, reference in _url_references(nodes):
        absolute = _resolve(reference, base_url)
        if absolute is None:
            continue
        start = line_starts[node.source_line - 1] + node.source_column - 1
        if start < cursor or css_text[start:start + 4].lower() != "url(":
            continue
        pieces.append(css_text[cursor:start])
        pieces.append(f"url({_quoted(absolute)})")
        cursor = _reference_end(css_text, start + 4)
    pieces.append(css_text[cursor:])
    return "".join(pieces)
