"""Browser pool port: lease long-lived browser processes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, eq=False)
class BrowserHandle:
    """A leased browser.

    ``temporary`` handles were launched outside the managed pool because
    no managed browser was free; they are closed on release.
    """

    browser: Any
    temporary: bool = False


@runtime_checkable
class BrowserPoolPort(Protocol):
    """Hands out browsers and takes them back.

    Implementations guarantee the managed set never exceeds its
    configured size; overflow demand is served by temporary browsers.
    """

    async def initialize(self) -> None:
        """Warm up the managed browsers (partial failure tolerated)."""
        ...

    async def acquire(self) -> BrowserHandle:
        """Lease a connected browser. Raises ``BrowserAcquisitionError``."""
        ...

    async def release(self, handle: BrowserHandle, temporary: bool = False) -> None:
        """Return a managed browser, or close a temporary one."""
        ...

    async def shutdown(self) -> None:
        """Close every managed browser and the automation driver."""
        ...
