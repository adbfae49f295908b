# src/gm_companion/chain/gas.py

"""
Cached network gas price.

One writer (the periodic refresh loop), many readers (transaction builders).
The value is a single int overwritten in place; readers tolerate a value that is
one refresh interval old, so no lock is taken. A multi-threaded rewrite would need one.
"""

from __future__ import annotations

import asyncio
import logging

from ..core.formatting import format_gwei
from ..core.ports import ChainClient, Sleep

logger = logging.getLogger(__name__)


class GasPriceCache:
    def __init__(self, chain: ChainClient, *, multiplier: float = 1.2, sleep: Sleep = asyncio.sleep) -> None:
        self.chain = chain
        self.sleep = sleep
        self.multiplier = float(multiplier)
        self.cached: int | None = None

    def _apply(self, price: int) -> int:
        return int(price * self.multiplier)

    async def refresh(self) -> int | None:
        """Fetch the network price. On failure keep the previous value."""
        try:
            price = await self.chain.gas_price()
        except Exception as e:
            logger.warning("Gas price refresh failed: %s", e)
            return self.cached

        self.cached = int(price)
        logger.info("Gas price updated: %s", format_gwei(self._apply(self.cached)))
        return self.cached

    async def current(self) -> int:
        """Multiplied gas price for a new transaction; queries the chain when nothing is cached."""
        price = self.cached
        if price is None:
            price = int(await self.chain.gas_price())
        return self._apply(price)

    async def run(self, interval_seconds: float = 300.0) -> None:
        """
        Refresh forever every interval_seconds.

        To stop, cancel the coroutine/task.
        """
        sleep_s = max(1.0, float(interval_seconds))
        while True:
            await self.sleep(sleep_s)
            await self.refresh()
