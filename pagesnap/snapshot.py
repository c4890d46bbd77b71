"""Assembly of a standalone HTML document from a live page."""

from __future__ import annotations

import logging
from typing import List, Optional

from bs4 import BeautifulSoup

from .config import (
    EXTRACTED_ATTRIBUTE,
    RELAY_TIMEOUT_SECONDS,
    CaptureConfig,
    SnapshotOptions,
)
from .errors import HostQueryError, SnapshotError
from .fetch import RelayChannel
from .host import DocumentHost, DocumentMarkup
from .models import CaptureWarning, SnapshotResult
from .styles import collect_used_css
from .urls import absolutize_url, rewrite_css_urls

logger = logging.getLogger("pagesnap")

DEFAULT_DOCTYPE = "<!DOCTYPE html>"
CSP_POLICY = "default-src 'self' data:; script-src 'none'; object-src 'none'; base-uri 'none';"
SETTLE_FRAMES = 2

EXTENSION_UI_SELECTORS = [
    "plasmo-csui",
    "css-to-tailwind",
    "browser-mcp-container",
    "[data-extension-id]",
]
SCRIPT_SELECTORS = [
    "script",
    'link[rel="modulepreload"]',
    'link[rel="preload"][as="script"]',
]
STYLE_SELECTORS = [
    "style",
    'link[rel~="stylesheet"]',
    'link[rel="preload"][as="style"]',
]
URL_ATTRIBUTES = ("src", "href", "poster")


def _remove_matching(soup: BeautifulSoup, selectors: List[str]) -> int:
    nodes = soup.select(", ".join(selectors))
    for node in nodes:
        node.extract()
    return len(nodes)


def absolutize_attributes(soup: BeautifulSoup, base_url: Optional[str]) -> None:
    """Resolve relative resource attributes, which lose their anchor once ``<base>`` is gone."""
    if not base_url:
        return
    for attribute in URL_ATTRIBUTES:
        for node in soup.find_all(attrs={attribute: True}):
            node[attribute] = absolutize_url(node[attribute], base_url)
    for node in soup.find_all(attrs={"style": True}):
        node["style"] = rewrite_css_urls(node["style"], base_url)


def assemble_document(
    markup: DocumentMarkup,
    css_text: str,
    options: SnapshotOptions,
) -> str:
    """Prune the cloned markup, inject collected styles and serialize it."""
    soup = BeautifulSoup(markup.html, "html.parser")

    _remove_matching(soup, ["base"])
    _remove_matching(soup, EXTENSION_UI_SELECTORS)
    if options.remove_scripts:
        removed = _remove_matching(soup, SCRIPT_SELECTORS)
        logger.debug("Removed %d script elements", removed)
    if options.remove_original_styles:
        removed = _remove_matching(soup, STYLE_SELECTORS)
        logger.debug("Removed %d style elements", removed)

    absolutize_attributes(soup, markup.base_url)

    head = soup.find("head")
    if head is not None and css_text:
        style_tag = soup.new_tag("style", attrs={EXTRACTED_ATTRIBUTE: "true"})
        style_tag.string = css_text
        head.append(style_tag)
    if head is not None and options.add_csp:
        meta = soup.new_tag(
            "meta",
            attrs={"http-equiv": "Content-Security-Policy", "content": CSP_POLICY},
        )
        head.append(meta)

    doctype = f"<!DOCTYPE {markup.doctype}>" if markup.doctype else DEFAULT_DOCTYPE
    return f"{doctype}\n{soup.decode()}"


async def _pause_media(host: DocumentHost) -> None:
    try:
        await host.pause_media()
    except Exception as exc:  # noqa: BLE001
        logger.debug("Ignoring media pause failure: %s", exc)


async def _unfreeze(host: DocumentHost) -> None:
    try:
        await host.unfreeze()
    except Exception as exc:  # noqa: BLE001
        logger.debug("Ignoring unfreeze failure: %s", exc)


async def capture_snapshot(
    host: DocumentHost,
    options: Optional[SnapshotOptions] = None,
    relay: Optional[RelayChannel] = None,
    config: Optional[CaptureConfig] = None,
) -> SnapshotResult:
    """Freeze the document, collect the styles in use and serialize a snapshot.

    Only a document that cannot be read at all raises :class:`SnapshotError`;
    style sheets that cannot be read or fetched end up as warnings.
    """
    options = options or SnapshotOptions()
    settle_frames = config.settle_frames if config else SETTLE_FRAMES
    relay_timeout = config.relay_timeout if config else RELAY_TIMEOUT_SECONDS

    warnings: List[CaptureWarning] = []
    css_text = ""
    try:
        await host.freeze()
        try:
            await _pause_media(host)
            await host.wait_for_frames(settle_frames)

            if options.remove_original_styles:
                css_text, warnings = await collect_used_css(
                    host,
                    relay=relay,
                    prefer_relay=options.use_relay_fetch,
                    relay_timeout=relay_timeout,
                    base_url=await host.base_url(),
                )
            markup = await host.snapshot_markup()
        finally:
            await _unfreeze(host)
    except HostQueryError as exc:
        raise SnapshotError(f"Failed to serialize the page: {exc}") from exc

    if markup is None:
        raise SnapshotError("Failed to serialize the page.")

    document_text = assemble_document(markup, css_text, options)
    logger.info(
        "Serialized %d characters with %d warnings", len(document_text), len(warnings)
    )
    return SnapshotResult(
        document_text=document_text,
        warnings=list(warnings),
        title=markup.title,
    )
