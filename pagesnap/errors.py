"""Exceptions raised while capturing a snapshot."""

from __future__ import annotations


class PageSnapError(Exception):
    """Base class for all pagesnap errors."""


class SnapshotError(PageSnapError):
    """The capture cannot proceed at all."""


class RuleAccessDenied(PageSnapError):
    """The host refused to expose the rule list of a style source."""


class InvalidSelector(PageSnapError):
    """The host's selector engine rejected a selector."""


class HostQueryError(PageSnapError):
    """A host query failed for a reason other than selector syntax."""
