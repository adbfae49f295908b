# src/gm_companion/tasks/task_scheduler.py

from __future__ import annotations

"""
Check-in scheduler.

A timer-driven loop that:
- seeds the queue from on-chain lastGM timestamps,
- sleeps until the earliest task is due (or re-scans when the queue is empty),
- drains due tasks one at a time through the executor,
- reschedules every executed account, success or failure.

What a check-in actually does belongs to the executor, not the scheduler.
"""

import asyncio
import logging
import time

from ..core.accounts import Account, AccountStore
from ..core.formatting import format_relative_time, short_address
from ..core.ports import ChainClient, Clock, Sleep
from ..logging_setup import SUCCESS
from .executor import CheckinExecutor
from .task_models import CheckinTask
from .task_queue import TaskQueue

logger = logging.getLogger(__name__)


class CheckinScheduler:
    def __init__(
        self,
        accounts: AccountStore,
        chain: ChainClient,
        executor: CheckinExecutor,
        *,
        cooldown_seconds: float = 86400.0 + 60.0,
        rescan_interval_seconds: float = 60.0,
        reschedule_floor_seconds: float = 30.0,
        error_cooldown_seconds: float = 30.0,
        seed_due_accounts: bool = False,
        clock: Clock = time.time,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.accounts = accounts
        self.chain = chain
        self.executor = executor
        self.cooldown_seconds = float(cooldown_seconds)
        self.rescan_interval_seconds = max(0.0, float(rescan_interval_seconds))
        # Must stay > 0: a rescheduled task always lands after the one it replaces.
        self.reschedule_floor_seconds = max(1e-3, float(reschedule_floor_seconds))
        self.error_cooldown_seconds = max(0.0, float(error_cooldown_seconds))
        self.seed_due_accounts = bool(seed_due_accounts)
        self.clock = clock
        self.sleep = sleep

        self.queue = TaskQueue()
        self._timer: asyncio.Task | None = None
        self._stopping = False

    @classmethod
    def from_settings(
        cls,
        settings,
        accounts: AccountStore,
        chain: ChainClient,
        executor: CheckinExecutor,
        **kwargs,
    ) -> CheckinScheduler:
        return cls(
            accounts,
            chain,
            executor,
            cooldown_seconds=settings.cooldown_seconds,
            rescan_interval_seconds=settings.rescan_interval_seconds,
            reschedule_floor_seconds=settings.error_cooldown_seconds,
            error_cooldown_seconds=settings.error_cooldown_seconds,
            seed_due_accounts=settings.seed_due_accounts,
            **kwargs,
        )

    # ---- eligibility ----

    async def next_execution(self, address: str) -> float:
        """lastGM + cooldown. If the read fails the account is treated as due now."""
        try:
            last = await self.chain.last_checkin_time(address)
        except Exception:
            logger.exception("lastGM query failed for %s", short_address(address))
            return self.clock()
        return float(last) + self.cooldown_seconds

    async def rescan(self) -> int:
        """
        Re-derive every account's next eligible time and enqueue the future ones.

        Accounts that are already eligible are skipped unless seed_due_accounts is set,
        in which case they are queued for immediate execution.
        Returns the number of tasks added.
        """
        added = 0
        for account in self.accounts:
            next_ts = await self.next_execution(account.address)
            now = self.clock()
            if next_ts > now:
                self.queue.add(account, next_ts)
                added += 1
            elif self.seed_due_accounts:
                self.queue.add(account, now)
                added += 1
            else:
                logger.debug("%s already eligible; not queued", short_address(account.address))
        logger.info("Scan complete, pending tasks: %d", len(self.queue))
        return added

    seed = rescan
    refresh = rescan

    # ---- execution ----

    async def _reschedule(self, account: Account) -> CheckinTask:
        next_ts = await self.next_execution(account.address)
        floor = self.clock() + self.reschedule_floor_seconds
        return self.queue.add(account, max(next_ts, floor))

    async def _execute(self, task: CheckinTask) -> None:
        account = task.account
        try:
            result = await self.executor.execute(account)
        except Exception as e:
            logger.error("Check-in failed for %s: %s", short_address(account.address), e)
            logger.debug("Check-in failure details", exc_info=True)
            # Error cooldown before the next due task.
            await self.sleep(self.error_cooldown_seconds)
        else:
            logger.log(
                SUCCESS,
                "Sent: %s | recipient: %s | tx: %s",
                short_address(result.sender),
                short_address(result.recipient),
                result.tx_hash,
            )

        new_task = await self._reschedule(account)
        logger.info(
            "Next check-in for %s %s",
            short_address(account.address),
            format_relative_time(new_task.execution_time, now=self.clock()),
        )

    async def drain_due(self) -> int:
        """Execute every task whose time has come, earliest first. Returns how many ran."""
        executed = 0
        while not self._stopping:
            task = self.queue.peek()
            if task is None or task.execution_time > self.clock():
                break
            self.queue.poll()
            await self._execute(task)
            executed += 1
        return executed

    # ---- timer loop ----

    async def _wait(self, delay: float) -> bool:
        """Sleep on the single owned timer. False if stop() cancelled it."""
        self._timer = asyncio.ensure_future(self.sleep(max(0.0, delay)))
        try:
            await self._timer
        except asyncio.CancelledError:
            if self._stopping:
                return False
            raise
        finally:
            self._timer = None
        return not self._stopping

    async def run(self, *, seed: bool = True) -> None:
        """
        Main loop. Returns after stop().

        To stop the scheduler, call stop() (or cancel the coroutine/task).
        """
        if seed:
            await self.seed()

        while not self._stopping:
            task = self.queue.peek()
            if task is None:
                logger.warning("Task queue empty, re-checking in %.0fs", self.rescan_interval_seconds)
                if not await self._wait(self.rescan_interval_seconds):
                    break
                logger.info("Running periodic task check...")
                await self.rescan()
                continue

            delay = max(0.0, task.execution_time - self.clock())
            logger.info(
                "Next execution: %s %s",
                short_address(task.address),
                format_relative_time(task.execution_time, now=self.clock()),
            )
            if not await self._wait(delay):
                break
            await self.drain_due()

        logger.info("Scheduler stopped.")

    def stop(self) -> None:
        """Cancel the pending timer and stop starting new executions."""
        self._stopping = True
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()

    @property
    def stopping(self) -> bool:
        return self._stopping
