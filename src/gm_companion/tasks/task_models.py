# src/gm_companion/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass

from ..core.accounts import Account


@dataclass(slots=True, frozen=True)
class CheckinTask:
    execution_time: float
    account: Account
    # Insertion counter: tie-breaker for equal times and identity token for the queue.
    seq: int

    @property
    def address(self) -> str:
        return self.account.address


@dataclass(slots=True, frozen=True)
class CheckinResult:
    sender: str
    recipient: str
    tx_hash: str
    attempts: int
