# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio

import pytest

from gm_companion.core.accounts import AccountStore
from gm_companion.tasks.task_scheduler import CheckinScheduler

from .conftest import make_executor
from .fakes import FakeChainClient, FakeClock, RecordingSleep

COOLDOWN = 86400.0 + 60.0


def make_scheduler(chain, accounts, clock, sleep, **kwargs) -> CheckinScheduler:
    executor = make_executor(chain, accounts, sleep, max_retries=kwargs.pop("max_retries", 3))
    return CheckinScheduler(
        accounts,
        chain,
        executor,
        cooldown_seconds=COOLDOWN,
        rescan_interval_seconds=60.0,
        reschedule_floor_seconds=30.0,
        clock=clock,
        sleep=sleep,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_seed_skips_accounts_that_are_already_due(
    chain: FakeChainClient, single_account: AccountStore, clock: FakeClock, sleep: RecordingSleep
) -> None:
    # lastGM = 0 -> eligible long ago
    sched = make_scheduler(chain, single_account, clock, sleep)
    assert await sched.seed() == 0
    assert sched.queue.is_empty()

    # Still due on the next re-scan -> queue stays empty.
    clock.advance(60)
    await sched.rescan()
    assert sched.queue.is_empty()

    # Contract now reports a recent check-in -> a future task appears.
    address = single_account[0].address
    chain.last_checkins[address] = int(clock()) - 100
    assert await sched.rescan() == 1
    task = sched.queue.peek()
    assert task.account == single_account[0]
    assert task.execution_time == pytest.approx(clock() - 100 + COOLDOWN)


@pytest.mark.asyncio
async def test_seed_due_accounts_option_enqueues_them_now(
    chain: FakeChainClient, accounts: AccountStore, clock: FakeClock, sleep
) -> None:
    sched = make_scheduler(chain, accounts, clock, sleep, seed_due_accounts=True)
    assert await sched.seed() == len(accounts)
    assert all(sched.queue.pending_for(a.address).execution_time == clock() for a in accounts)


@pytest.mark.asyncio
async def test_rescan_never_duplicates_an_account(
    chain: FakeChainClient, accounts: AccountStore, clock: FakeClock, sleep
) -> None:
    for a in accounts:
        chain.last_checkins[a.address] = int(clock())
    sched = make_scheduler(chain, accounts, clock, sleep)
    await sched.rescan()
    await sched.rescan()
    assert len(sched.queue) == len(accounts)


@pytest.mark.asyncio
async def test_lastgm_failure_treated_as_due_now(
    chain: FakeChainClient, single_account: AccountStore, clock: FakeClock, sleep
) -> None:
    chain.fail_last_checkin = True
    sched = make_scheduler(chain, single_account, clock, sleep)
    assert await sched.next_execution(single_account[0].address) == clock()


@pytest.mark.asyncio
async def test_drain_runs_due_tasks_in_time_order_and_reschedules(
    chain: FakeChainClient, accounts: AccountStore, clock: FakeClock, sleep
) -> None:
    sched = make_scheduler(chain, accounts, clock, sleep)
    now = clock()
    sched.queue.add(accounts[2], now - 5)
    sched.queue.add(accounts[0], now - 1)
    sched.queue.add(accounts[1], now + 3600)  # not due

    assert await sched.drain_due() == 2
    assert chain.submitted == [accounts[2].address, accounts[0].address]

    assert len(sched.queue) == 3
    for a in (accounts[0], accounts[2]):
        nxt = sched.queue.pending_for(a.address)
        assert nxt.execution_time == pytest.approx(chain.last_checkins[a.address] + COOLDOWN)
    assert sched.queue.pending_for(accounts[1].address).execution_time == now + 3600


@pytest.mark.asyncio
async def test_failed_execution_still_reschedules_exactly_once(
    chain: FakeChainClient, single_account: AccountStore, clock: FakeClock, sleep
) -> None:
    account = single_account[0]
    chain.last_checkins[account.address] = int(clock() - COOLDOWN - 10)
    chain.submit_failures = 3

    sched = make_scheduler(chain, single_account, clock, sleep)
    original = sched.queue.add(account, clock())

    assert await sched.drain_due() == 1
    assert chain.submitted == []

    assert len(sched.queue) == 1
    nxt = sched.queue.pending_for(account.address)
    assert nxt is not None
    assert nxt.execution_time > original.execution_time
    # contract still says "due": the floor keeps it from spinning
    assert nxt.execution_time == pytest.approx(clock() + 30.0)


@pytest.mark.asyncio
async def test_failed_execution_waits_error_cooldown_before_next_task(
    chain: FakeChainClient, accounts: AccountStore, clock: FakeClock, sleep: RecordingSleep
) -> None:
    chain.submit_failures = 3
    sched = make_scheduler(chain, accounts, clock, sleep)
    now = clock()
    sched.queue.add(accounts[0], now - 2)
    sched.queue.add(accounts[1], now - 1)

    assert await sched.drain_due() == 2

    # two retry backoffs, the error cooldown, then the success cooldown of the next account
    assert sleep.calls == [30.0, 30.0, 30.0, 10.0]
    assert chain.submitted == [accounts[1].address]
    assert accounts[0].address in sched.queue


@pytest.mark.asyncio
async def test_recovered_execution_reschedules_from_chain(
    chain: FakeChainClient, single_account: AccountStore, clock: FakeClock, sleep: RecordingSleep
) -> None:
    account = single_account[0]
    chain.submit_failures = 2
    sched = make_scheduler(chain, single_account, clock, sleep)
    started = clock()
    original = sched.queue.add(account, started)

    await sched.drain_due()

    assert clock() - started >= 2 * 30.0
    nxt = sched.queue.pending_for(account.address)
    assert nxt.execution_time == pytest.approx(chain.last_checkins[account.address] + COOLDOWN)
    assert nxt.execution_time > original.execution_time


@pytest.mark.asyncio
async def test_lastgm_failure_after_execution_uses_floor(
    chain: FakeChainClient, single_account: AccountStore, clock: FakeClock, sleep
) -> None:
    account = single_account[0]
    sched = make_scheduler(chain, single_account, clock, sleep)
    original = sched.queue.add(account, clock())
    chain.fail_last_checkin = True

    await sched.drain_due()

    nxt = sched.queue.pending_for(account.address)
    assert nxt.execution_time > original.execution_time


@pytest.mark.asyncio
async def test_run_waits_for_next_task_then_executes(
    chain: FakeChainClient, single_account: AccountStore, clock: FakeClock
) -> None:
    account = single_account[0]
    chain.last_checkins[account.address] = int(clock() - COOLDOWN + 100)
    sleeps: list[float] = []
    sched: CheckinScheduler

    async def sleep(delay: float) -> None:
        sleeps.append(delay)
        clock.advance(delay)
        if chain.submitted:
            sched.stop()
        await asyncio.sleep(0)

    sched = make_scheduler(chain, single_account, clock, sleep)
    await asyncio.wait_for(sched.run(), timeout=2.0)

    assert sleeps[0] == pytest.approx(100.0)
    assert chain.submitted == [account.address]
    assert sched.stopping
    assert len(sched.queue) == 1


@pytest.mark.asyncio
async def test_run_empty_queue_rescans_periodically(
    chain: FakeChainClient, single_account: AccountStore, clock: FakeClock
) -> None:
    sleeps: list[float] = []
    sched: CheckinScheduler

    async def sleep(delay: float) -> None:
        sleeps.append(delay)
        clock.advance(delay)
        if len(sleeps) >= 3:
            sched.stop()
        await asyncio.sleep(0)

    sched = make_scheduler(chain, single_account, clock, sleep)
    await asyncio.wait_for(sched.run(), timeout=2.0)

    assert sleeps == [60.0, 60.0, 60.0]
    assert chain.submitted == []


@pytest.mark.asyncio
async def test_stop_cancels_pending_timer(chain: FakeChainClient, single_account: AccountStore) -> None:
    executor = make_executor(chain, single_account, RecordingSleep())
    sched = CheckinScheduler(
        single_account,
        chain,
        executor,
        rescan_interval_seconds=3600.0,
    )

    runner = asyncio.create_task(sched.run())
    await asyncio.sleep(0.05)
    sched.stop()

    # Returns normally (no CancelledError) well before the one-hour timer.
    await asyncio.wait_for(runner, timeout=1.0)
    assert sched.queue.is_empty()


@pytest.mark.asyncio
async def test_external_cancel_propagates(chain: FakeChainClient, single_account: AccountStore) -> None:
    executor = make_executor(chain, single_account, RecordingSleep())
    sched = CheckinScheduler(single_account, chain, executor, rescan_interval_seconds=3600.0)

    runner = asyncio.create_task(sched.run())
    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner
