"""The interface between the capture pipeline and a live document."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import List, Optional

from .models import FetchResult, StyleRule, StyleSource


@dataclass
class DocumentMarkup:
    """Serialized state of the live document at capture time."""

    html: str
    doctype: Optional[str] = None
    title: Optional[str] = None
    base_url: Optional[str] = None


class DocumentHost(abc.ABC):
    """A rendered document the capture pipeline can inspect.

    Implementations talk to whatever holds the live tree. Query methods must
    raise :class:`~pagesnap.errors.InvalidSelector` for selectors the engine
    rejects and :class:`~pagesnap.errors.RuleAccessDenied` for style sources
    whose rule lists cannot be read.
    """

    @abc.abstractmethod
    async def style_sources(self) -> List[StyleSource]:
        """Return the active style sources in document order."""

    @abc.abstractmethod
    async def read_rules(self, source: StyleSource) -> List[StyleRule]:
        """Return the rules of ``source`` or raise ``RuleAccessDenied``."""

    @abc.abstractmethod
    async def parse_rules(self, css_text: str) -> List[StyleRule]:
        """Parse style text into a disconnected rule list."""

    @abc.abstractmethod
    async def query_exists(self, selector: str) -> bool:
        """Return True if ``selector`` matches at least one node."""

    @abc.abstractmethod
    async def media_matches(self, condition: str) -> bool:
        """Return True if the media condition currently holds."""

    @abc.abstractmethod
    async def supports(self, condition: str) -> bool:
        """Return True if the feature condition is supported."""

    @abc.abstractmethod
    async def fetch_text(self, url: str) -> FetchResult:
        """Fetch ``url`` from inside the document with its ambient credentials."""

    @abc.abstractmethod
    async def freeze(self) -> None:
        """Suspend animations, transitions and smooth scrolling."""

    @abc.abstractmethod
    async def unfreeze(self) -> None:
        """Undo :meth:`freeze`."""

    @abc.abstractmethod
    async def pause_media(self) -> None:
        """Pause audio and video playback, ignoring elements that refuse."""

    @abc.abstractmethod
    async def wait_for_frames(self, count: int) -> None:
        """Wait for ``count`` animation frames to pass."""

    @abc.abstractmethod
    async def snapshot_markup(self) -> Optional[DocumentMarkup]:
        """Serialize the live document, or return None if it cannot be read."""

    @abc.abstractmethod
    async def base_url(self) -> Optional[str]:
        """Return the address relative references in the document resolve against."""
