"""Admission queue capping concurrently running extractions.

Each extraction holds a browser for tens of seconds and a few hundred
MiB of memory, so only ``max_concurrent`` of them run at once.  Slots
come from an ``asyncio.Semaphore``; excess callers wait on it in
arrival order, which makes admission roughly FIFO.

A slot is represented by an :class:`AdmissionTicket`.  A ticket can be
handed off to a background task (an extraction attempt that lost its
deadline race); the slot then stays occupied until that task finishes.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")


class AdmissionTicket:
    """One caller's claim on an admission slot.

    Created by :meth:`AdmissionQueue.admitted`, not instantiated directly.
    """

    def __init__(self, queue: AdmissionQueue) -> None:
        self._queue = queue
        self._held = True

    @property
    def held(self) -> bool:
        return self._held

    def hand_off(self, task: asyncio.Future[Any]) -> None:
        """Move the held slot to *task*; it is freed when *task* finishes."""
        if not self._held:
            raise RuntimeError("ticket does not hold a slot")
        self._held = False
        task.add_done_callback(lambda _: self._queue._release_slot())
        log.debug("admission_slot_handed_off", running=self._queue.running)

    async def renew(self) -> None:
        """Wait for a fresh slot after :meth:`hand_off` (no-op while held)."""
        if self._held:
            return
        await self._queue._acquire_slot()
        self._held = True

    def release(self) -> None:
        """Free the held slot (idempotent)."""
        if self._held:
            self._held = False
            self._queue._release_slot()


class AdmissionQueue:
    """Bounded runner for extraction tasks.

    Usage::

        queue = AdmissionQueue(max_concurrent=2)
        result = await queue.process(lambda: engine.run(request))

        async with queue.admitted() as ticket:
            ...
    """

    def __init__(self, max_concurrent: int = 2) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self.capacity = max_concurrent
        self._running = 0
        self._queued = 0
        self._slots = asyncio.Semaphore(max_concurrent)

    @property
    def running(self) -> int:
        return self._running

    @property
    def queued(self) -> int:
        return self._queued

    def stats(self) -> dict[str, int]:
        return {
            "running": self._running,
            "queued": self._queued,
            "capacity": self.capacity,
        }

    async def _acquire_slot(self) -> None:
        if self._slots.locked():
            log.debug("admission_queued", queued=self._queued + 1, running=self._running)
        self._queued += 1
        try:
            await self._slots.acquire()
        finally:
            self._queued -= 1
        self._running += 1

    def _release_slot(self) -> None:
        self._running -= 1
        self._slots.release()

    @asynccontextmanager
    async def admitted(self) -> AsyncIterator[AdmissionTicket]:
        """Wait for a slot and hold it for the body of the ``async with``.

        A caller cancelled while still waiting never takes a slot.  On
        exit the slot is freed unless the ticket was handed off.
        """
        await self._acquire_slot()
        ticket = AdmissionTicket(self)
        try:
            yield ticket
        finally:
            ticket.release()

    async def process(self, task: Callable[[], Awaitable[T]]) -> T:
        """Wait for a slot, run *task* and return (or raise) its outcome.

        The slot is released however the task ends.
        """
        async with self.admitted():
            return await task()
