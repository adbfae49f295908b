# src/gm_companion/chain/client.py

"""
web3-backed ChainClient.

Only two contract functions are used:
- lastGM(user) -> uint256 timestamp of the last check-in
- gmTo(recipient) -> the check-in itself

web3's HTTP provider is blocking; every network call is pushed to a worker thread
with asyncio.to_thread so the scheduler loop can keep cooperating.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from eth_account import Account as EthAccount
from web3 import Web3

from ..core.errors import StartupError
from ..core.ports import TxReceipt

logger = logging.getLogger(__name__)

GM_ABI: list[dict[str, Any]] = [
    {
        "inputs": [{"internalType": "address", "name": "recipient", "type": "address"}],
        "name": "gmTo",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "address", "name": "user", "type": "address"}],
        "name": "lastGM",
        "outputs": [{"internalType": "uint256", "name": "lastGM", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class Web3ChainClient:
    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        *,
        request_timeout: float = 60.0,
        receipt_timeout: float = 120.0,
    ) -> None:
        self.rpc_url = rpc_url
        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout}))
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.contract = self.w3.eth.contract(address=self.contract_address, abi=GM_ABI)
        self.receipt_timeout = float(receipt_timeout)
        self._chain_id: int | None = None

    @classmethod
    def from_settings(cls, settings) -> Web3ChainClient:
        return cls(
            settings.rpc_url,
            settings.contract_address,
            request_timeout=settings.rpc_timeout_seconds,
            receipt_timeout=settings.receipt_timeout_seconds,
        )

    async def ensure_connected(self) -> None:
        if not await asyncio.to_thread(self.w3.is_connected):
            raise StartupError(f"RPC endpoint not reachable: {self.rpc_url}")
        logger.info("Connected to %s (chain_id=%s)", self.rpc_url, await self.chain_id())

    # ---- reads ----

    async def last_checkin_time(self, address: str) -> int:
        fn = self.contract.functions.lastGM(Web3.to_checksum_address(address))
        return int(await asyncio.to_thread(fn.call))

    async def gas_price(self) -> int:
        return int(await asyncio.to_thread(lambda: self.w3.eth.gas_price))

    async def transaction_count(self, address: str) -> int:
        checksum = Web3.to_checksum_address(address)
        return int(await asyncio.to_thread(self.w3.eth.get_transaction_count, checksum))

    async def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(await asyncio.to_thread(lambda: self.w3.eth.chain_id))
        return self._chain_id

    # ---- transaction building ----

    def encode_checkin(self, recipient: str) -> str:
        return self.contract.encode_abi("gmTo", args=[Web3.to_checksum_address(recipient)])

    async def estimate_gas(self, sender: str, recipient: str) -> int:
        fn = self.contract.functions.gmTo(Web3.to_checksum_address(recipient))
        params = {"from": Web3.to_checksum_address(sender)}
        return int(await asyncio.to_thread(fn.estimate_gas, params))

    def sign(self, tx: dict[str, Any], private_key: str) -> bytes:
        signed = EthAccount.sign_transaction(tx, private_key)
        return bytes(signed.raw_transaction)

    async def submit(self, raw_tx: bytes) -> TxReceipt:
        """Broadcast and wait until mined. Receipt status 0 is returned, not raised."""
        tx_hash = await asyncio.to_thread(self.w3.eth.send_raw_transaction, raw_tx)
        hex_hash = Web3.to_hex(tx_hash)
        logger.debug("Broadcast %s, waiting for receipt", hex_hash)

        receipt = await asyncio.to_thread(
            self.w3.eth.wait_for_transaction_receipt, tx_hash, self.receipt_timeout
        )
        return TxReceipt(
            tx_hash=hex_hash,
            status=int(receipt["status"]),
            block_number=receipt.get("blockNumber"),
        )

    def is_address(self, value: str) -> bool:
        return Web3.is_address(value)
