"""Rule storage errors."""


class RuleStoreError(Exception):
    """Raised when persisted rules cannot be read or written."""


class RuleNotFoundError(RuleStoreError):
    """Raised when a rule identifier does not exist in the store."""
