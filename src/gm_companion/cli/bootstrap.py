# src/gm_companion/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- loads accounts from the key file and validates the default recipient,
- wires the web3 client, gas cache, executor and scheduler into AppState.
"""

from __future__ import annotations

import asyncio
import logging

from ..chain.client import Web3ChainClient
from ..chain.gas import GasPriceCache
from ..config import get_settings
from ..core.accounts import AccountStore
from ..core.errors import InvalidAddressError
from ..core.formatting import short_address
from ..core.ports import ChainClient, Clock, Sleep
from ..core.state import AppState
from ..logging_setup import SUCCESS
from ..tasks.executor import CheckinExecutor
from ..tasks.retry import RetryPolicy
from ..tasks.task_scheduler import CheckinScheduler

logger = logging.getLogger(__name__)


def verify_address(chain: ChainClient, address: str) -> str:
    if not chain.is_address(address):
        raise InvalidAddressError(address)
    logger.log(SUCCESS, "Address verified: %s", short_address(address))
    return address.lower()


def create_initial_state(
    *,
    settings=None,
    chain: ChainClient | None = None,
    accounts: AccountStore | None = None,
    sleep: Sleep = asyncio.sleep,
    clock: Clock | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    chain/accounts/sleep/clock are injectable so tests can wire fakes without touching
    the network or the filesystem. Raises StartupError subclasses on fatal problems.
    """
    if settings is None:
        settings = get_settings()

    if accounts is None:
        accounts = AccountStore.load(settings.private_key_file)
    if chain is None:
        chain = Web3ChainClient.from_settings(settings)

    default_recipient = verify_address(chain, settings.default_recipient)

    gas = GasPriceCache(chain, multiplier=settings.gas_multiplier, sleep=sleep)
    executor = CheckinExecutor(
        chain,
        gas,
        accounts,
        default_recipient=default_recipient,
        retry=RetryPolicy(
            max_attempts=settings.max_retries,
            backoff_seconds=settings.error_cooldown_seconds,
            sleep=sleep,
        ),
        success_cooldown_seconds=settings.success_cooldown_seconds,
        sleep=sleep,
    )

    extra = {"sleep": sleep}
    if clock is not None:
        extra["clock"] = clock
    scheduler = CheckinScheduler.from_settings(settings, accounts, chain, executor, **extra)

    return AppState(
        settings=settings,
        chain=chain,
        accounts=accounts,
        gas=gas,
        executor=executor,
        scheduler=scheduler,
    )
