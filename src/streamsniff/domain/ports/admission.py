"""Admission queue port for cross-request coordination."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


class AdmissionTicketPort(Protocol):
    """A caller's claim on one admission slot."""

    def hand_off(self, task: asyncio.Future[Any]) -> None:
        """Keep the slot occupied until *task* finishes."""
        ...

    async def renew(self) -> None:
        """Wait for a new slot after a hand-off."""
        ...

    def release(self) -> None: ...


@runtime_checkable
class AdmissionQueuePort(Protocol):
    """Bounds how many extraction tasks run at once.

    Callers beyond capacity wait until a running task finishes.
    """

    def admitted(self) -> AbstractAsyncContextManager[AdmissionTicketPort]:
        """Hold a slot for the duration of an ``async with`` block."""
        ...

    async def process(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run *task* once a slot is free and return its result."""
        ...

    def stats(self) -> dict[str, int]:
        """Return ``{"running", "queued", "capacity"}``."""
        ...
