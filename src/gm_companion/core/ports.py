# src/gm_companion/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The scheduler and the execution engine depend on Protocols instead of web3 directly.
This keeps the RPC layer swappable and makes testing easier.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

Clock = Callable[[], float]
# Returns the current unix time in seconds.

Sleep = Callable[[float], Awaitable[None]]
# asyncio.sleep-compatible coroutine function.


@dataclass(slots=True, frozen=True)
class TxReceipt:
    tx_hash: str
    status: int
    block_number: int | None = None


class ChainClient(Protocol):
    """
    Everything the bot needs from the chain.

    Implementations may block internally but must expose coroutines so the
    scheduler loop can suspend on network I/O.
    """

    contract_address: str

    async def last_checkin_time(self, address: str) -> int: ...

    async def gas_price(self) -> int: ...

    async def transaction_count(self, address: str) -> int: ...

    async def chain_id(self) -> int: ...

    def encode_checkin(self, recipient: str) -> str: ...

    async def estimate_gas(self, sender: str, recipient: str) -> int: ...

    def sign(self, tx: dict[str, Any], private_key: str) -> bytes: ...

    async def submit(self, raw_tx: bytes) -> TxReceipt: ...

    def is_address(self, value: str) -> bool: ...
