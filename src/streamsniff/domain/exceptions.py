"""Extraction error taxonomy."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for all extraction-related errors."""


class InvalidInputError(ExtractionError):
    """Raised when the target URL is missing or malformed (before any browser work)."""


class NavigationFailure(ExtractionError):
    """Navigation timed out or only partially loaded. Tolerated by the engine."""


class ExtractionTimeout(ExtractionError):
    """The outer per-attempt deadline was exceeded."""


class NoStreamsFound(ExtractionError):
    """The engine ran to completion without observing a single candidate."""


class BrowserAcquisitionError(ExtractionError):
    """No pooled browser was usable and a temporary launch failed too."""


class CleanupFailure(ExtractionError):
    """Closing pages, contexts or browsers failed. Logged, never surfaced."""


class RelayError(ExtractionError):
    """The proxy relay could not fetch the upstream resource."""
