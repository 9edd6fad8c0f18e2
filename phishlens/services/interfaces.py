"""Error taxonomy shared by the analyzers, services and integrations."""

from typing import Optional


class PhishLensError(Exception):
    """Base class for all PhishLens errors."""
    pass


class UnknownFrameworkError(PhishLensError, ValueError):
    """Raised when the dispatcher is given an unrecognised framework token."""

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Unknown framework type: {name}")


class MalformedInputError(PhishLensError, ValueError):
    """Raised when an email cannot be evaluated at all.

    This is distinct from a zero score: a zero score means "benign under
    this lens", this error means "could not be evaluated".
    """
    pass


class NarrativeUnavailableError(PhishLensError):
    """Raised when the text-generation service cannot produce a reply."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NarrativeParseError(NarrativeUnavailableError):
    """Raised when a text-generation reply does not follow the expected sections."""
    pass


__all__ = [
    "PhishLensError",
    "UnknownFrameworkError",
    "MalformedInputError",
    "NarrativeUnavailableError",
    "NarrativeParseError",
]
