# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from gm_companion.core.accounts import AccountStore
from gm_companion.chain.gas import GasPriceCache
from gm_companion.tasks.executor import CheckinExecutor
from gm_companion.tasks.retry import RetryPolicy

from .fakes import FakeChainClient, FakeClock, RecordingSleep

KEYS = [
    "0x" + "11" * 32,
    "0x" + "22" * 32,
    "0x" + "33" * 32,
]

DEFAULT_RECIPIENT = "0x9fb72f1a6f51b99ab21ccb6139acaef4d3ce0a66"


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the scheduler.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="gm-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        rpc_url="http://127.0.0.1:8545",
        rpc_timeout_seconds=5.0,
        contract_address="0x9F500d075118272B3564ac6Ef2c70a9067Fd2d3F",
        default_recipient=DEFAULT_RECIPIENT,
        private_key_file=tmp_path / "private_keys.txt",
        max_retries=3,
        gas_multiplier=1.2,
        success_cooldown_seconds=10.0,
        error_cooldown_seconds=30.0,
        receipt_timeout_seconds=5.0,
        checkin_window_seconds=86400.0,
        safety_margin_seconds=60.0,
        cooldown_seconds=86400.0 + 60.0,
        gas_refresh_interval_seconds=300.0,
        rescan_interval_seconds=60.0,
        seed_due_accounts=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def sleep(clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(clock=clock)


@pytest.fixture()
def chain(clock: FakeClock) -> FakeChainClient:
    return FakeChainClient(clock)


@pytest.fixture()
def accounts() -> AccountStore:
    return AccountStore.from_keys(KEYS)


@pytest.fixture()
def single_account() -> AccountStore:
    return AccountStore.from_keys(KEYS[:1])


def make_executor(chain, accounts, sleep, *, max_retries: int = 3) -> CheckinExecutor:
    return CheckinExecutor(
        chain,
        GasPriceCache(chain, multiplier=1.2),
        accounts,
        default_recipient=DEFAULT_RECIPIENT,
        retry=RetryPolicy(max_attempts=max_retries, backoff_seconds=30.0, sleep=sleep),
        success_cooldown_seconds=10.0,
        sleep=sleep,
    )
