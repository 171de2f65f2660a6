"""Result cache port: amortize repeated extractions of the same page."""

from __future__ import annotations

from typing import Protocol

from streamsniff.domain.entities.extraction import ExtractionResult


class ResultCachePort(Protocol):
    """Key-value store of extraction results with a fixed TTL.

    Keys are requested page URLs; implementations may canonicalize them.
    """

    async def get(self, key: str) -> ExtractionResult | None:
        """Return the cached result. None = not found / expired."""
        ...

    async def set(self, key: str, result: ExtractionResult) -> None:
        """Store *result*; implementations ignore unsuccessful results."""
        ...

    async def sweep(self) -> int:
        """Evict expired entries, returning how many were removed."""
        ...

    def size(self) -> int: ...
