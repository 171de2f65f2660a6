"""Extraction engine port: one attempt against one page."""

from __future__ import annotations

from typing import Protocol

from streamsniff.domain.entities.extraction import ExtractionRequest, ExtractionResult


class ExtractionEnginePort(Protocol):
    """Drives a browser session for a single extraction attempt.

    Always returns a result for page-level problems; only
    ``BrowserAcquisitionError`` escapes.
    """

    async def run(self, request: ExtractionRequest) -> ExtractionResult: ...
