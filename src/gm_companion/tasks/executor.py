# src/gm_companion/tasks/executor.py

"""
Execution engine: one check-in transaction for one account.

build -> sign -> submit (with retry) -> success cooldown

The cooldown after a success throttles back-to-back sends from the scheduler,
so sequential accounts do not collide on nonces or RPC rate limits.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..chain.gas import GasPriceCache
from ..core.accounts import Account, AccountStore
from ..core.errors import TransactionReverted
from ..core.formatting import short_address
from ..core.ports import ChainClient, Sleep, TxReceipt
from .retry import RetryPolicy
from .task_models import CheckinResult

logger = logging.getLogger(__name__)


class CheckinExecutor:
    def __init__(
        self,
        chain: ChainClient,
        gas: GasPriceCache,
        accounts: AccountStore,
        *,
        default_recipient: str,
        retry: RetryPolicy | None = None,
        success_cooldown_seconds: float = 10.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.chain = chain
        self.gas = gas
        self.accounts = accounts
        self.default_recipient = default_recipient
        self.retry = retry or RetryPolicy(sleep=sleep)
        self.success_cooldown_seconds = float(success_cooldown_seconds)
        self.sleep = sleep

    def recipient_for(self, account: Account) -> str:
        return self.accounts.recipient_for(account.address, self.default_recipient)

    async def build_transaction(self, sender: str, recipient: str) -> dict[str, Any]:
        data = self.chain.encode_checkin(recipient)
        gas_limit = await self.chain.estimate_gas(sender, recipient)
        gas_price = await self.gas.current()
        nonce = await self.chain.transaction_count(sender)
        chain_id = await self.chain.chain_id()

        return {
            "to": self.chain.contract_address,
            "data": data,
            "value": 0,
            "gas": int(gas_limit),
            "gasPrice": int(gas_price),
            "nonce": int(nonce),
            "chainId": int(chain_id),
        }

    async def send(self, tx: dict[str, Any], private_key: str) -> tuple[TxReceipt, int]:
        """Sign and submit `tx`, retrying on any failure. Returns (receipt, attempts)."""

        async def attempt() -> TxReceipt:
            raw = self.chain.sign(tx, private_key)
            receipt = await self.chain.submit(raw)
            if receipt.status != 1:
                raise TransactionReverted(receipt.tx_hash)
            return receipt

        return await self.retry.run(attempt, what=f"gmTo nonce={tx.get('nonce')}")

    async def execute(self, account: Account) -> CheckinResult:
        recipient = self.recipient_for(account)
        logger.debug("Building check-in %s -> %s", short_address(account.address), short_address(recipient))

        tx = await self.build_transaction(account.address, recipient)
        receipt, attempts = await self.send(tx, account.private_key)

        result = CheckinResult(
            sender=account.address,
            recipient=recipient,
            tx_hash=receipt.tx_hash,
            attempts=attempts,
        )
        await self.sleep(self.success_cooldown_seconds)
        return result
