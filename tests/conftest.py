"""Shared fixtures: an in-memory DocumentHost backed by BeautifulSoup."""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pytest
from bs4 import BeautifulSoup

from pagesnap.config import FREEZE_ATTRIBUTE
from pagesnap.errors import InvalidSelector, RuleAccessDenied
from pagesnap.host import DocumentHost, DocumentMarkup
from pagesnap.models import FetchResult, PlainRule, StyleRule, StyleSource

PAGE_URL = "https://example.com/articles/page.html"
FREEZE_SOURCE = StyleSource(key="freeze", href=None)
FREEZE_RULE = PlainRule(selector_text="*", body_text="animation: none !important;")


class FakeHost(DocumentHost):
    """A document whose style sheets are given as ready-made rule lists."""

    def __init__(
        self,
        html: str = "<html><head></head><body></body></html>",
        sheets: Sequence[Tuple[StyleSource, Optional[List[StyleRule]]]] = (),
        fetched: Optional[Dict[str, FetchResult]] = None,
        parser: Optional[Callable[[str], List[StyleRule]]] = None,
        matching_media: Iterable[str] = ("all", "screen"),
        unsupported: Iterable[str] = (),
        doctype: Optional[str] = "html",
        title: Optional[str] = "Example page",
        base: Optional[str] = PAGE_URL,
        pause_fails: bool = False,
        markup_missing: bool = False,
    ) -> None:
        self.soup = BeautifulSoup(html, "html.parser")
        # A source listed with ``None`` rules is cross-origin: reading it is denied.
        self.sources = [source for source, _ in sheets]
        self.rules = {source.key: rules for source, rules in sheets}
        self.fetched = fetched or {}
        self.parser = parser or (lambda text: [])
        self.matching_media = set(matching_media)
        self.unsupported = set(unsupported)
        self.doctype = doctype
        self.title = title
        self.base = base
        self.pause_fails = pause_fails
        self.markup_missing = markup_missing

        self.read_calls: List[object] = []
        self.queries: List[str] = []
        self.parsed_texts: List[str] = []
        self.fetch_calls: List[str] = []
        self.frozen = False
        self.frames_waited = 0

    def add_imported(self, source: StyleSource, rules: Optional[List[StyleRule]]) -> None:
        """Register a sheet that is reachable only through ``@import``."""
        self.rules[source.key] = rules

    async def style_sources(self) -> List[StyleSource]:
        return list(self.sources)

    async def read_rules(self, source: StyleSource) -> List[StyleRule]:
        self.read_calls.append(source.key)
        rules = self.rules.get(source.key)
        if rules is None:
            raise RuleAccessDenied(f"SecurityError: {source.href}")
        return rules

    async def parse_rules(self, css_text: str) -> List[StyleRule]:
        self.parsed_texts.append(css_text)
        return self.parser(css_text)

    async def query_exists(self, selector: str) -> bool:
        self.queries.append(selector)
        try:
            return self.soup.select_one(selector) is not None
        except Exception as exc:  # soupsieve rejects pseudo-elements
            raise InvalidSelector(str(exc)) from exc

    async def media_matches(self, condition: str) -> bool:
        return condition in self.matching_media

    async def supports(self, condition: str) -> bool:
        return condition not in self.unsupported

    async def fetch_text(self, url: str) -> FetchResult:
        self.fetch_calls.append(url)
        return self.fetched.get(url, FetchResult.failure("HTTP 404"))

    async def freeze(self) -> None:
        self.frozen = True
        style = self.soup.new_tag("style", attrs={FREEZE_ATTRIBUTE: "true"})
        style.string = "* { animation: none !important; }"
        head = self.soup.find("head")
        if head is not None:
            head.append(style)
        self.sources.append(FREEZE_SOURCE)
        self.rules[FREEZE_SOURCE.key] = [FREEZE_RULE]

    async def unfreeze(self) -> None:
        self.frozen = False
        for node in self.soup.select(f"[{FREEZE_ATTRIBUTE}]"):
            node.extract()
        self.sources = [source for source in self.sources if source != FREEZE_SOURCE]

    async def pause_media(self) -> None:
        if self.pause_fails:
            raise RuntimeError("media element refused to pause")

    async def wait_for_frames(self, count: int) -> None:
        self.frames_waited += count

    async def snapshot_markup(self) -> Optional[DocumentMarkup]:
        if self.markup_missing or self.soup.html is None:
            return None
        return DocumentMarkup(
            html=str(self.soup.html),
            doctype=self.doctype,
            title=self.title,
            base_url=self.base,
        )

    async def base_url(self) -> Optional[str]:
        return self.base


@pytest.fixture
def make_host() -> Callable[..., FakeHost]:
    return FakeHost
