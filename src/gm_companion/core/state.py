# src/gm_companion/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..chain.gas import GasPriceCache
from ..tasks.executor import CheckinExecutor
from ..tasks.task_scheduler import CheckinScheduler
from .accounts import AccountStore
from .ports import ChainClient


@dataclass
class AppState:
    # Settings are stored on the state so every component reads the same object.
    settings: object

    chain: ChainClient
    accounts: AccountStore
    gas: GasPriceCache
    executor: CheckinExecutor
    scheduler: CheckinScheduler
