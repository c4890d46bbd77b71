"""Retrieval of style sheet text for sources whose rules cannot be read."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

from .config import RELAY_TIMEOUT_SECONDS
from .host import DocumentHost
from .models import FetchResult
from .relay import FETCH_CSS

logger = logging.getLogger("pagesnap")

RELAY_FAILED = "Background fetch failed"
RELAY_TIMEOUT = "Background fetch timeout"
RELAY_ERROR = "Background fetch error"
UNKNOWN_FETCH_ERROR = "Unknown fetch error"


class RelayChannel(Protocol):
    async def send(self, message: Any) -> Any:
        ...


def _result_from_response(response: Any) -> FetchResult:
    if not isinstance(response, dict) or "ok" not in response:
        return FetchResult.failure(RELAY_FAILED)
    text = response.get("text")
    if not response.get("ok") or not isinstance(text, str):
        return FetchResult.failure(response.get("error") or RELAY_FAILED)
    return FetchResult.success(text)


async def fetch_via_relay(
    relay: RelayChannel,
    address: str,
    timeout: float = RELAY_TIMEOUT_SECONDS,
) -> FetchResult:
    """Ask the privileged side for ``address``, giving up after ``timeout`` seconds."""
    message = {"kind": FETCH_CSS, "address": address}
    try:
        response = await asyncio.wait_for(relay.send(message), timeout)
    except asyncio.TimeoutError:
        logger.debug("Relay fetch for %s timed out after %.1fs", address, timeout)
        return FetchResult.failure(RELAY_TIMEOUT)
    except Exception as exc:  # noqa: BLE001
        return FetchResult.failure(str(exc) or RELAY_ERROR)
    return _result_from_response(response)


async def fetch_direct(host: DocumentHost, address: str) -> FetchResult:
    """Fetch ``address`` from inside the document itself."""
    try:
        return await host.fetch_text(address)
    except Exception as exc:  # noqa: BLE001
        return FetchResult.failure(str(exc) or UNKNOWN_FETCH_ERROR)


async def fetch_stylesheet_text(
    address: str,
    host: DocumentHost,
    relay: Optional[RelayChannel] = None,
    prefer_relay: bool = True,
    timeout: float = RELAY_TIMEOUT_SECONDS,
) -> FetchResult:
    """Retrieve style sheet text; never raises.

    The relay is used when it is preferred and available, otherwise the
    document fetches the sheet itself.
    """
    if prefer_relay and relay is not None:
        return await fetch_via_relay(relay, address, timeout)
    return await fetch_direct(host, address)
