"""Error taxonomy for the search-and-select components."""

from __future__ import annotations


class SearchSelectError(Exception):
    """Base exception for all selector errors."""


class ConfigError(SearchSelectError):
    """Raised when settings are missing or malformed."""


class NoContextError(SearchSelectError):
    """Raised when neither a primary nor a fallback scope id is available."""

    def __init__(self, message: str = "No context available for search"):
        super().__init__(message)


class QueryError(SearchSelectError):
    """Raised when a backend lookup fails.

    `user_message` is safe to show inline; the original exception is kept
    as `__cause__` for logs.
    """

    def __init__(self, user_message: str = "Search failed"):
        super().__init__(user_message)
        self.user_message = user_message


class InvalidTransitionError(SearchSelectError):
    """Raised when an event is not allowed in the current selection state."""
