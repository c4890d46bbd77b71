"""MCP server exposing the pagesnap capture tool."""

from __future__ import annotations

import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP
from playwright.async_api import async_playwright

from .capture import capture_url
from .config import CaptureConfig, SnapshotOptions

logger = logging.getLogger("pagesnap.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="pagesnap")


@mcp.tool()
async def snapshot(
    url: str,
    remove_scripts: bool = True,
    remove_original_styles: bool = True,
    add_csp: bool = False,
    use_relay_fetch: bool = True,
) -> str:
    """Render a web page with Playwright and return it as a standalone HTML document."""

    options = SnapshotOptions(
        remove_scripts=remove_scripts,
        remove_original_styles=remove_original_styles,
        use_relay_fetch=use_relay_fetch,
        add_csp=add_csp,
    )
    config = CaptureConfig(output_root=Path.cwd())
    async with async_playwright() as playwright:
        result = await capture_url(playwright, url, options, config)
    for warning in result.warnings:
        logger.warning("%s: %s", url, warning)
    return result.document_text


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
