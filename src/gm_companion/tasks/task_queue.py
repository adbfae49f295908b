# src/gm_companion/tasks/task_queue.py

"""
Min-priority queue of check-in tasks.

Ordered by execution_time ascending; equal times come out in insertion order.

The queue keeps one live task per account: adding a task for an account that already
has one replaces it. The replaced heap entry stays in the heap but is skipped
(lazy deletion), so add/poll stay O(log n).
"""

from __future__ import annotations

import heapq
import itertools
import logging

from ..core.accounts import Account
from .task_models import CheckinTask

logger = logging.getLogger(__name__)


class TaskQueue:
    def __init__(self) -> None:
        self._heap: list[tuple[float, int, CheckinTask]] = []
        self._live: dict[str, CheckinTask] = {}
        self._counter = itertools.count()

    def add(self, account: Account, execution_time: float) -> CheckinTask:
        task = CheckinTask(execution_time=float(execution_time), account=account, seq=next(self._counter))
        stale = self._live.get(account.address)
        if stale is not None:
            logger.debug(
                "Replacing pending task for %s (%.0f -> %.0f)",
                account.address,
                stale.execution_time,
                task.execution_time,
            )
        self._live[account.address] = task
        heapq.heappush(self._heap, (task.execution_time, task.seq, task))
        return task

    def _is_live(self, task: CheckinTask) -> bool:
        return self._live.get(task.address) is task

    def _drop_stale_head(self) -> None:
        while self._heap and not self._is_live(self._heap[0][2]):
            heapq.heappop(self._heap)

    def peek(self) -> CheckinTask | None:
        self._drop_stale_head()
        return self._heap[0][2] if self._heap else None

    def poll(self) -> CheckinTask | None:
        self._drop_stale_head()
        if not self._heap:
            return None
        _, _, task = heapq.heappop(self._heap)
        del self._live[task.address]
        return task

    def pending_for(self, address: str) -> CheckinTask | None:
        return self._live.get(address.lower())

    def is_empty(self) -> bool:
        return not self._live

    def clear(self) -> None:
        self._heap.clear()
        self._live.clear()

    def __len__(self) -> int:
        return len(self._live)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and address.lower() in self._live
