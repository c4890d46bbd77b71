"""Collection of the style rules that apply to the live document."""

from __future__ import annotations

import logging
from typing import Dict, Hashable, List, Optional, Set, Tuple

from .config import RELAY_TIMEOUT_SECONDS
from .css_selectors import normalize_selector, split_selectors
from .errors import InvalidSelector, PageSnapError, RuleAccessDenied
from .fetch import RelayChannel, fetch_stylesheet_text
from .host import DocumentHost
from .models import (
    CaptureWarning,
    CollectedText,
    FontFaceRule,
    GroupRule,
    ImportRule,
    KeyframesRule,
    OpaqueRule,
    PlainRule,
    StyleRule,
    StyleSource,
)
from .urls import rewrite_css_urls

logger = logging.getLogger("pagesnap")


class SelectorMatcher:
    """Decides whether selectors match anything in the live tree."""

    def __init__(self, host: DocumentHost) -> None:
        self.host = host
        self._cache: Dict[str, bool] = {}

    async def _query(self, selector: str) -> bool:
        try:
            return await self.host.query_exists(selector)
        except InvalidSelector:
            normalized = normalize_selector(selector)
            if not normalized or normalized == selector:
                return False
            try:
                return await self.host.query_exists(normalized)
            except PageSnapError:
                return False
        except PageSnapError as exc:
            logger.debug("Selector query failed for %r: %s", selector, exc)
            return False

    async def clause_matches(self, selector: str) -> bool:
        if selector not in self._cache:
            self._cache[selector] = await self._query(selector)
        return self._cache[selector]

    async def rule_matches(self, selector_text: str) -> bool:
        """A selector list is relevant if any of its clauses matches."""
        for clause in split_selectors(selector_text):
            if await self.clause_matches(clause):
                return True
        return False


class StyleCollector:
    """Walks every active style source and keeps the rules in effect.

    One collector serves one capture: the visited set and the warnings list
    start empty and are only touched from :meth:`collect`.
    """

    def __init__(
        self,
        host: DocumentHost,
        relay: Optional[RelayChannel] = None,
        prefer_relay: bool = True,
        relay_timeout: float = RELAY_TIMEOUT_SECONDS,
        base_url: Optional[str] = None,
    ) -> None:
        self.host = host
        self.relay = relay
        self.prefer_relay = prefer_relay
        self.relay_timeout = relay_timeout
        self.base_url = base_url
        self.matcher = SelectorMatcher(host)
        self.collected = CollectedText()
        self.warnings: List[CaptureWarning] = []
        self._visited: Set[Hashable] = set()

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(CaptureWarning(message))

    async def collect(self) -> CollectedText:
        for source in await self.host.style_sources():
            self.collected.rules.extend(await self._collect_source(source))
        return self.collected

    async def _collect_source(self, source: StyleSource) -> List[str]:
        if source.key in self._visited:
            return []
        self._visited.add(source.key)

        base_url = source.href or self.base_url
        try:
            rules = await self.host.read_rules(source)
        except RuleAccessDenied:
            return await self._collect_blocked(source)
        return await self._collect_rules(rules, base_url)

    async def _collect_blocked(self, source: StyleSource) -> List[str]:
        if not source.href:
            return []
        self._warn(f"cssRules blocked for stylesheet: {source.href}")
        result = await fetch_stylesheet_text(
            source.href,
            self.host,
            relay=self.relay,
            prefer_relay=self.prefer_relay,
            timeout=self.relay_timeout,
        )
        if not result.ok or result.text is None:
            self._warn(f"Failed to fetch stylesheet: {source.href} ({result.error})")
            return []

        css_text = rewrite_css_urls(result.text, source.href)
        rules = await self.host.parse_rules(css_text)
        return await self._collect_rules(rules, source.href)

    async def _collect_rules(
        self, rules: List[StyleRule], base_url: Optional[str]
    ) -> List[str]:
        collected: List[str] = []
        for rule in rules:
            if isinstance(rule, PlainRule):
                if await self.matcher.rule_matches(rule.selector_text):
                    collected.append(rewrite_css_urls(rule.css_text, base_url))
            elif isinstance(rule, GroupRule):
                text = await self._collect_group(rule, base_url)
                if text:
                    collected.append(text)
            elif isinstance(rule, KeyframesRule):
                self.collected.add_keyframes(rewrite_css_urls(rule.text, base_url))
            elif isinstance(rule, FontFaceRule):
                self.collected.add_font_face(rewrite_css_urls(rule.text, base_url))
            elif isinstance(rule, ImportRule):
                if rule.target is not None:
                    collected.extend(await self._collect_source(rule.target))
            elif isinstance(rule, OpaqueRule):
                if rule.children is None or await self._collect_rules(rule.children, base_url):
                    collected.append(rewrite_css_urls(rule.text, base_url))
        return collected

    async def _collect_group(self, rule: GroupRule, base_url: Optional[str]) -> str:
        try:
            if rule.kind == "supports":
                applies = await self.host.supports(rule.condition_text)
            else:
                applies = await self.host.media_matches(rule.condition_text)
        except PageSnapError as exc:
            logger.debug("Could not evaluate @%s %s: %s", rule.kind, rule.condition_text, exc)
            return ""
        if not applies:
            return ""

        nested = await self._collect_rules(rule.children, base_url)
        if not nested:
            return ""
        return f"@{rule.kind} {rule.condition_text}{{{''.join(nested)}}}"


async def collect_used_css(
    host: DocumentHost,
    relay: Optional[RelayChannel] = None,
    prefer_relay: bool = True,
    relay_timeout: float = RELAY_TIMEOUT_SECONDS,
    base_url: Optional[str] = None,
) -> Tuple[str, List[CaptureWarning]]:
    """Collect the style text in effect for ``host`` along with any warnings."""
    collector = StyleCollector(
        host,
        relay=relay,
        prefer_relay=prefer_relay,
        relay_timeout=relay_timeout,
        base_url=base_url,
    )
    collected = await collector.collect()
    logger.debug(
        "Collected %d font faces, %d keyframes, %d rules",
        len(collected.font_faces),
        len(collected.keyframes),
        len(collected.rules),
    )
    return collected.render(), collector.warnings
