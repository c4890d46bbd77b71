"""Privileged side of the style sheet fetch relay.

The page context cannot read cross-origin style sheets, so it asks the
Python process to fetch them instead. Requests and responses are plain
dictionaries::

    {"kind": "FETCH_CSS", "address": "https://cdn.example/site.css"}
    {"ok": True, "text": "..."} or {"ok": False, "error": "HTTP 404"}
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

import requests

logger = logging.getLogger("pagesnap")

FETCH_CSS = "FETCH_CSS"


def classify_response(status: int, text: str) -> Dict[str, Any]:
    """Map an HTTP status and body to a relay response."""
    if not 200 <= status < 300:
        return {"ok": False, "error": f"HTTP {status}"}
    return {"ok": True, "text": text}


def load_browser_cookies(
    session: requests.Session, cookies: Iterable[Mapping[str, Any]]
) -> None:
    """Copy Playwright context cookies into a requests session."""
    for cookie in cookies:
        session.cookies.set(
            cookie["name"],
            cookie["value"],
            domain=cookie.get("domain", ""),
            path=cookie.get("path", "/"),
        )


class BackgroundRelay:
    """Answers ``FETCH_CSS`` requests with a credentialed requests session."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    async def send(self, message: Any) -> Dict[str, Any]:
        return await asyncio.to_thread(self.handle, message)

    def handle(self, message: Any) -> Dict[str, Any]:
        if not isinstance(message, Mapping) or message.get("kind") != FETCH_CSS:
            return {"ok": False, "error": "Unsupported message"}
        address = message.get("address")
        if not address or not isinstance(address, str):
            return {"ok": False, "error": "Invalid URL"}

        logger.debug("Relay fetching %s", address)
        try:
            resp = self.session.get(address, timeout=self.timeout)
        except requests.RequestException as exc:
            return {"ok": False, "error": str(exc) or "Unknown fetch error"}
        return classify_response(resp.status_code, resp.text)
