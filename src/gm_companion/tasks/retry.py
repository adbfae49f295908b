# src/gm_companion/tasks/retry.py

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from ..core.errors import SubmissionError
from ..core.ports import Sleep

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class RetryPolicy:
    """
    Fixed-backoff retry.

    Runs `op` up to max_attempts times, sleeping backoff_seconds between attempts.
    After the last failure a SubmissionError is raised with the last error as __cause__.
    `sleep` is injectable so tests do not have to wait for real.
    """

    max_attempts: int = 3
    backoff_seconds: float = 30.0
    sleep: Sleep = asyncio.sleep

    async def run(self, op: Callable[[], Awaitable[T]], *, what: str = "operation") -> tuple[T, int]:
        attempts = max(1, int(self.max_attempts))
        last_exc: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                return await op(), attempt
            except Exception as e:
                last_exc = e
                left = attempts - attempt
                if left == 0:
                    break
                logger.warning(
                    "%s failed (%s), %d retr%s left, waiting %.0fs",
                    what,
                    e,
                    left,
                    "y" if left == 1 else "ies",
                    self.backoff_seconds,
                )
                await self.sleep(self.backoff_seconds)

        raise SubmissionError(f"{what} failed after {attempts} attempt(s): {last_exc}", attempts=attempts) from last_exc
