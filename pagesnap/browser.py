"""DocumentHost backed by a page rendered in Playwright."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .config import FREEZE_ATTRIBUTE
from .errors import HostQueryError, InvalidSelector, RuleAccessDenied
from .host import DocumentHost, DocumentMarkup
from .models import FetchResult, StyleRule, StyleSource, rules_from_payload, source_from_payload

logger = logging.getLogger("pagesnap")

FREEZE_CSS = """
* {
  animation: none !important;
  transition: none !important;
  scroll-behavior: auto !important;
  caret-color: auto !important;
}
html, body {
  scroll-behavior: auto !important;
}
"""

# Sheets are registered in a page-side list so their index stays a stable
# identity across evaluate calls.
_PRELUDE = """
const state = window.__pagesnap || (window.__pagesnap = { sheets: [], ids: new WeakMap() });
const register = (sheet) => {
  let key = state.ids.get(sheet);
  if (key === undefined) {
    key = state.sheets.length;
    state.sheets.push(sheet);
    state.ids.set(sheet, key);
  }
  return { key, href: sheet.href || null };
};
const describe = (rules) => Array.from(rules || [], (rule) => {
  if (rule instanceof CSSStyleRule) {
    return { type: 'style', selector: rule.selectorText, body: rule.style.cssText, text: rule.cssText };
  }
  if (rule instanceof CSSMediaRule) {
    return { type: 'media', condition: rule.conditionText || rule.media.mediaText, children: describe(rule.cssRules) };
  }
  if (rule instanceof CSSSupportsRule) {
    return { type: 'supports', condition: rule.conditionText, children: describe(rule.cssRules) };
  }
  if (rule instanceof CSSKeyframesRule) {
    return { type: 'keyframes', text: rule.cssText };
  }
  if (rule instanceof CSSFontFaceRule) {
    return { type: 'font-face', text: rule.cssText };
  }
  if (rule instanceof CSSImportRule) {
    let target = null;
    try {
      if (rule.styleSheet) {
        target = register(rule.styleSheet);
      }
    } catch (error) {
      target = null;
    }
    return { type: 'import', target };
  }
  if ('cssRules' in rule) {
    let children = null;
    try {
      children = describe(rule.cssRules);
    } catch (error) {
      children = null;
    }
    return { type: 'opaque', text: rule.cssText, children };
  }
  return null;
}).filter(Boolean);
"""

_STYLE_SOURCES_JS = (
    "() => {"
    + _PRELUDE
    + """
  return Array.from(document.styleSheets, (sheet, index) => ({ ...register(sheet), index }));
}"""
)

_READ_RULES_JS = (
    "(key) => {"
    + _PRELUDE
    + """
  const sheet = state.sheets[key];
  if (!sheet) {
    return { ok: false, error: 'Unknown stylesheet' };
  }
  try {
    return { ok: true, rules: describe(sheet.cssRules) };
  } catch (error) {
    return { ok: false, error: String(error) };
  }
}"""
)

_PARSE_RULES_JS = (
    "(cssText) => {"
    + _PRELUDE
    + """
  const tempDoc = document.implementation.createHTMLDocument('');
  const styleEl = tempDoc.createElement('style');
  styleEl.textContent = cssText;
  tempDoc.head.appendChild(styleEl);
  return styleEl.sheet ? describe(styleEl.sheet.cssRules) : [];
}"""
)

_QUERY_JS = """(selector) => {
  try {
    return { ok: true, found: document.querySelector(selector) !== null };
  } catch (error) {
    return { ok: false, name: error && error.name, error: String(error) };
  }
}"""

_FETCH_JS = """async (url) => {
  try {
    const response = await fetch(url, { credentials: 'include' });
    if (!response.ok) {
      return { ok: false, error: `HTTP ${response.status}` };
    }
    return { ok: true, text: await response.text() };
  } catch (error) {
    return { ok: false, error: error instanceof Error ? error.message : 'Unknown fetch error' };
  }
}"""

_FREEZE_JS = """([attribute, cssText]) => {
  const style = document.createElement('style');
  style.setAttribute(attribute, 'true');
  style.textContent = cssText;
  (document.head || document.documentElement).appendChild(style);
}"""

_UNFREEZE_JS = """(attribute) => {
  document.querySelectorAll(`[${attribute}]`).forEach((node) => node.remove());
}"""

_PAUSE_MEDIA_JS = """() => {
  document.querySelectorAll('audio, video').forEach((el) => {
    try {
      el.pause();
    } catch (error) {
      // Ignore media errors.
    }
  });
}"""

_WAIT_FRAMES_JS = """async (count) => {
  for (let i = 0; i < count; i += 1) {
    await new Promise((resolve) => requestAnimationFrame(() => resolve()));
  }
}"""

_MARKUP_JS = """() => {
  if (!document.documentElement) {
    return null;
  }
  return {
    html: document.documentElement.outerHTML,
    doctype: document.doctype ? document.doctype.name : null,
    title: document.title || null,
    baseUrl: document.baseURI || null,
  };
}"""


class PlaywrightHost(DocumentHost):
    """Runs every query against the live DOM of a Playwright page."""

    def __init__(self, page: Page) -> None:
        self.page = page

    async def _evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self.page.evaluate(script, arg)
        except PlaywrightError as exc:
            raise HostQueryError(str(exc)) from exc

    async def style_sources(self) -> List[StyleSource]:
        payload = await self._evaluate(_STYLE_SOURCES_JS)
        return [source_from_payload(item) for item in payload or []]

    async def read_rules(self, source: StyleSource) -> List[StyleRule]:
        payload = await self._evaluate(_READ_RULES_JS, source.key)
        if not payload or not payload.get("ok"):
            error = payload.get("error") if payload else "no response"
            logger.debug("Rules of %s are not readable: %s", source.href or "inline sheet", error)
            raise RuleAccessDenied(error)
        return rules_from_payload(payload.get("rules") or [])

    async def parse_rules(self, css_text: str) -> List[StyleRule]:
        payload = await self._evaluate(_PARSE_RULES_JS, css_text)
        return rules_from_payload(payload or [])

    async def query_exists(self, selector: str) -> bool:
        payload = await self._evaluate(_QUERY_JS, selector)
        if payload.get("ok"):
            return bool(payload.get("found"))
        if payload.get("name") == "SyntaxError":
            raise InvalidSelector(payload.get("error") or selector)
        raise HostQueryError(payload.get("error") or selector)

    async def media_matches(self, condition: str) -> bool:
        return bool(await self._evaluate("(q) => window.matchMedia(q).matches", condition))

    async def supports(self, condition: str) -> bool:
        return bool(await self._evaluate("(c) => CSS.supports(c)", condition))

    async def fetch_text(self, url: str) -> FetchResult:
        payload = await self._evaluate(_FETCH_JS, url)
        if payload and payload.get("ok") and isinstance(payload.get("text"), str):
            return FetchResult.success(payload["text"])
        return FetchResult.failure((payload or {}).get("error") or "Unknown fetch error")

    async def freeze(self) -> None:
        await self._evaluate(_FREEZE_JS, [FREEZE_ATTRIBUTE, FREEZE_CSS])

    async def unfreeze(self) -> None:
        await self._evaluate(_UNFREEZE_JS, FREEZE_ATTRIBUTE)

    async def pause_media(self) -> None:
        await self._evaluate(_PAUSE_MEDIA_JS)

    async def wait_for_frames(self, count: int) -> None:
        await self._evaluate(_WAIT_FRAMES_JS, count)

    async def base_url(self) -> Optional[str]:
        return await self._evaluate("() => document.baseURI || null")

    async def snapshot_markup(self) -> Optional[DocumentMarkup]:
        payload = await self._evaluate(_MARKUP_JS)
        if not payload or not payload.get("html"):
            return None
        return DocumentMarkup(
            html=payload["html"],
            doctype=payload.get("doctype"),
            title=payload.get("title"),
            base_url=payload.get("baseUrl"),
        )
