"""Batch scheduler for bounded async execution.

This module provides the BatchScheduler class, which runs a coroutine
function over a list of items in fixed-size groups. Each group runs
concurrently and is fully drained before the next one starts, with a
fixed pause in between to throttle the target server.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from redirectfinder.core.constants import DEFAULTS


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class TaskOutcome(Generic[T, R]):
    """Result of running the task function on one item.

    Exactly one of ``result`` and ``error`` is meaningful: ``error`` is
    set when the task raised.
    """
    item: T
    result: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        """Check if the task finished without raising."""
        return self.error is None


def iter_batches(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split items into consecutive batches.

    Args:
        items: Items to split
        size: Maximum batch size

    Returns:
        List of batches preserving input order

    Raises:
        ValueError: If size is less than 1
    """
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    return [items[i:i + size] for i in range(0, len(items), size)]


class BatchScheduler:
    """Run async tasks in fixed-size batches with a pause between them.

    Attributes:
        batch_size: Number of tasks running concurrently
        pause: Seconds to sleep between batches
    """

    def __init__(
        self,
        batch_size: int = DEFAULTS["concurrency"],
        *,
        pause: float = DEFAULTS["batch_pause"],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize batch scheduler.

        Args:
            batch_size: Maximum concurrent tasks per batch
            pause: Seconds to wait between batches
            sleep: Sleep coroutine (replaced in tests)
        """
        if batch_size < 1:
            raise ValueError(f"Batch size must be at least 1, got {batch_size}")
        self.batch_size = batch_size
        self.pause = pause
        self._sleep = sleep

    async def run(
        self,
        items: Sequence[T],
        task_func: Callable[[T], Awaitable[R]],
        *,
        on_batch_done: Optional[Callable[[list[TaskOutcome[T, R]]], None]] = None,
    ) -> list[TaskOutcome[T, R]]:
        """Run task_func over all items.

        A task raising an exception never stops the other tasks; the
        exception is recorded on its TaskOutcome. An exception raised by
        on_batch_done propagates and stops the run.

        Args:
            items: Items to process
            task_func: Coroutine function called once per item
            on_batch_done: Called with each batch's outcomes, in input
                order, after the batch has drained

        Returns:
            Outcomes for every item, in input order
        """
        batches = iter_batches(items, self.batch_size)
        outcomes: list[TaskOutcome[T, R]] = []

        for index, batch in enumerate(batches):
            results = await asyncio.gather(
                *(task_func(item) for item in batch),
                return_exceptions=True,
            )

            batch_outcomes = []
            for item, result in zip(batch, results):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                if isinstance(result, BaseException):
                    logger.error(f"Task failed for {item!r}: {result!r}")
                    batch_outcomes.append(TaskOutcome(item=item, error=result))
                else:
                    batch_outcomes.append(TaskOutcome(item=item, result=result))

            if on_batch_done is not None:
                on_batch_done(batch_outcomes)
            outcomes.extend(batch_outcomes)

            if index < len(batches) - 1 and self.pause > 0:
                await self._sleep(self.pause)

        return outcomes
