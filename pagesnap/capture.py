"""High-level orchestration for rendering pages and saving snapshots."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO

from playwright.async_api import (
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .browser import PlaywrightHost
from .config import CaptureConfig, SnapshotOptions
from .errors import SnapshotError
from .export import export_snapshot, snapshot_file_name
from .models import CaptureWarning, SnapshotResult
from .relay import BackgroundRelay, load_browser_cookies
from .snapshot import capture_snapshot

logger = logging.getLogger("pagesnap")


@dataclass
class CaptureMetrics:
    """Outcome details for a captured URL."""

    url: str
    output_path: Optional[Path]
    total_seconds: float
    warnings: List[CaptureWarning] = field(default_factory=list)


def build_relay(config: CaptureConfig) -> BackgroundRelay:
    """Relay whose HTTP timeout never outlives the wait for its answer."""
    return BackgroundRelay(timeout=min(config.fetch_timeout, config.relay_timeout))


async def capture_page(
    page: Optional[Page],
    options: SnapshotOptions,
    config: CaptureConfig,
    relay: Optional[BackgroundRelay] = None,
) -> SnapshotResult:
    """Capture a page that is already open."""
    if page is None or page.is_closed():
        raise SnapshotError("No active page detected.")
    result = await capture_snapshot(PlaywrightHost(page), options, relay=relay, config=config)
    if not result.title:
        result.title = await page.title() or None
    return result


async def capture_url(
    playwright: Playwright,
    url: str,
    options: SnapshotOptions,
    config: CaptureConfig,
) -> SnapshotResult:
    """Navigate to a URL using Playwright and capture the rendered page."""
    browser = await playwright.chromium.launch(headless=True)
    relay = build_relay(config)
    try:
        context = await browser.new_context()
        page = await context.new_page()
        page.set_default_navigation_timeout(config.navigation_timeout * 1000)
        logger.info("Loading %s", url)
        await page.goto(url, wait_until="networkidle")
        if config.wait_after_load:
            await page.wait_for_timeout(int(config.wait_after_load * 1000))
        load_browser_cookies(relay.session, await context.cookies())
        return await capture_page(page, options, config, relay=relay)
    finally:
        relay.session.close()
        await browser.close()


async def run_capture(
    urls: List[str],
    options: SnapshotOptions,
    config: CaptureConfig,
    stream: Optional[TextIO] = None,
) -> List[CaptureMetrics]:
    """Capture each URL sequentially and export the resulting snapshots."""
    metrics: List[CaptureMetrics] = []
    async with async_playwright() as playwright:
        for url in urls:
            start = time.perf_counter()
            try:
                result = await capture_url(playwright, url, options, config)
            except PlaywrightTimeoutError as exc:
                logger.error("Timeout while loading %s: %s", url, exc)
                continue
            except SnapshotError as exc:
                logger.error("Could not capture %s: %s", url, exc)
                continue
            except Exception:  # pylint: disable=broad-except
                logger.exception("Unexpected error capturing %s", url)
                continue

            exported = export_snapshot(
                result.document_text,
                snapshot_file_name(result.title),
                output_root=config.output_root,
                stream=stream,
            )
            if not exported.ok:
                logger.error("Could not save snapshot of %s: %s", url, exported.error)
                continue

            metrics.append(
                CaptureMetrics(
                    url=url,
                    output_path=exported.path,
                    total_seconds=time.perf_counter() - start,
                    warnings=result.warnings,
                )
            )
    return metrics
