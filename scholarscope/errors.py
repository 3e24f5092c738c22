"""scholarscope.errors
~~~~~~~~~~~~~~~~~~~~~
Exception taxonomy for the aggregation layer.

Optional calls (bibliometric sources, employments, work details) never let
these escape; required calls (token, registry search, registry person) do,
and the web layer renders them as retryable errors.
"""
from __future__ import annotations

from typing import Optional


class ScholarScopeError(Exception):
    """Base class for all scholarscope errors."""


class AuthError(ScholarScopeError):
    """Registry credentials are missing or were rejected."""


class UpstreamError(ScholarScopeError):
    """An external call failed. ``status`` is the HTTP status when one was received."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UpstreamTimeout(UpstreamError):
    """An external call exceeded its time budget."""


class NotFound(UpstreamError):
    """The registry has no record for the requested identifier."""

    def __init__(self, message: str):
        super().__init__(message, status=404)


class SearchFailed(UpstreamError):
    """Every registry query of a search failed."""
