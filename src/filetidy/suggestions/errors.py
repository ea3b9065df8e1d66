"""Suggestion provider errors."""


class SuggestionProviderError(Exception):
    """Raised when a suggestion provider cannot produce suggestions."""
