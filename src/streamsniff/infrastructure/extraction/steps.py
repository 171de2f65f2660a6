"""Explicit outcome of a best-effort engine sub-step."""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

from streamsniff.domain.exceptions import ExtractionError

log = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StepOutcome(Generic[T]):
    """Result of a sub-step that must never abort the attempt.

    ``ok`` steps carry their value; failed steps carry the wrapped error.
    """

    step: str
    ok: bool
    value: T | None = None
    error: ExtractionError | None = None

    @property
    def error_text(self) -> str | None:
        return str(self.error) if self.error is not None else None


async def run_step(
    step: str,
    awaitable: Awaitable[T],
    *,
    wrap: type[ExtractionError] = ExtractionError,
) -> StepOutcome[T]:
    """Await *awaitable*, converting any exception into a failed outcome.

    The failure is logged at debug level together with the step name;
    callers inspect ``ok`` when they care and otherwise move on.
    """
    try:
        value = await awaitable
    except Exception as exc:  # noqa: BLE001
        error = exc if isinstance(exc, ExtractionError) else wrap(f"{step}: {exc}")
        log.debug("extraction_step_failed", step=step, error=str(exc))
        return StepOutcome(step=step, ok=False, error=error)
    return StepOutcome(step=step, ok=True, value=value)
