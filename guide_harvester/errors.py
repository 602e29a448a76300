"""
Harvest Errors
==============
Exception taxonomy for guide imports.

Soft-failure paths (count parsing, header rules, icon embedding) never raise
these; they degrade to defaults.  Everything below aborts the whole import.
"""


class HarvestError(Exception):
    """Base class for every import failure surfaced to the caller."""


class AuthError(HarvestError):
    """Caller has no authenticated identity."""


class ValidationError(HarvestError):
    """Request is missing a required field."""


class NavigationError(HarvestError):
    """A page failed to load or its structural marker never appeared."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class NavigationTimeout(NavigationError):
    """Page load or marker wait exceeded its timeout."""


class NetworkError(NavigationError):
    """Transport-level failure while loading a page."""


class ExtractionError(HarvestError):
    """Required markup is missing or malformed."""


class PersistenceError(HarvestError):
    """The plan document could not be written."""
