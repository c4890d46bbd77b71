"""Data models used throughout the capture pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterable, List, Optional, Union


@dataclass(frozen=True)
class StyleSource:
    """A style sheet attached to the document, identified by a host-assigned key."""

    key: Hashable
    href: Optional[str] = None
    index: int = 0


@dataclass
class PlainRule:
    """An ordinary selector rule such as ``.a { color: red }``."""

    selector_text: str
    body_text: str
    text: Optional[str] = None

    @property
    def css_text(self) -> str:
        if self.text is not None:
            return self.text
        return f"{self.selector_text} {{ {self.body_text} }}"


@dataclass
class GroupRule:
    """A conditional group (``@media`` or ``@supports``) holding nested rules."""

    kind: str
    condition_text: str
    children: List["StyleRule"] = field(default_factory=list)


@dataclass
class KeyframesRule:
    text: str


@dataclass
class FontFaceRule:
    text: str


@dataclass
class ImportRule:
    """An ``@import``; ``target`` is None when the imported sheet is unreachable."""

    target: Optional[StyleSource] = None


@dataclass
class OpaqueRule:
    """Any other grouping rule, kept as whole text.

    ``children`` is None when the nested rule list could not be read; such a
    rule is kept unconditionally.
    """

    text: str
    children: Optional[List["StyleRule"]] = None


StyleRule = Union[PlainRule, GroupRule, KeyframesRule, FontFaceRule, ImportRule, OpaqueRule]


@dataclass
class CollectedText:
    """Rule texts gathered from every style source of one capture."""

    font_faces: Dict[str, None] = field(default_factory=dict)
    keyframes: Dict[str, None] = field(default_factory=dict)
    rules: List[str] = field(default_factory=list)

    def add_font_face(self, text: str) -> None:
        self.font_faces.setdefault(text, None)

    def add_keyframes(self, text: str) -> None:
        self.keyframes.setdefault(text, None)

    def render(self) -> str:
        return "\n".join([*self.font_faces, *self.keyframes, *self.rules])


@dataclass(frozen=True)
class CaptureWarning:
    """Informational notice attached to a successful capture."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class SnapshotResult:
    """The serialized snapshot along with anything worth telling the user."""

    document_text: str
    warnings: List[CaptureWarning] = field(default_factory=list)
    title: Optional[str] = None


@dataclass(frozen=True)
class FetchResult:
    """Outcome of retrieving a style sheet's text."""

    ok: bool
    text: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, text: str) -> "FetchResult":
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, error: str) -> "FetchResult":
        return cls(ok=False, error=error)


def _source_from_payload(payload: Optional[Dict[str, Any]]) -> Optional[StyleSource]:
    if not payload:
        return None
    return StyleSource(
        key=payload["key"],
        href=payload.get("href") or None,
        index=payload.get("index", 0),
    )


def rule_from_payload(payload: Dict[str, Any]) -> Optional[StyleRule]:
    """Convert one JSON rule description produced by the browser host."""
    kind = payload.get("type")
    if kind == "style":
        return PlainRule(
            selector_text=payload.get("selector", ""),
            body_text=payload.get("body", ""),
            text=payload.get("text"),
        )
    if kind in ("media", "supports"):
        return GroupRule(
            kind=kind,
            condition_text=payload.get("condition", ""),
            children=rules_from_payload(payload.get("children") or []),
        )
    if kind == "keyframes":
        return KeyframesRule(payload.get("text", ""))
    if kind == "font-face":
        return FontFaceRule(payload.get("text", ""))
    if kind == "import":
        return ImportRule(_source_from_payload(payload.get("target")))
    if kind == "opaque":
        children = payload.get("children")
        return OpaqueRule(
            text=payload.get("text", ""),
            children=None if children is None else rules_from_payload(children),
        )
    return None


def rules_from_payload(payloads: Iterable[Dict[str, Any]]) -> List[StyleRule]:
    """Convert a list of JSON rule descriptions, dropping unknown rule types."""
    rules: List[StyleRule] = []
    for payload in payloads:
        rule = rule_from_payload(payload)
        if rule is not None:
            rules.append(rule)
    return rules


def source_from_payload(payload: Dict[str, Any]) -> StyleSource:
    source = _source_from_payload(payload)
    if source is None:
        raise ValueError("Empty style source description")
    return source
