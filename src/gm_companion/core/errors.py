# src/gm_companion/core/errors.py

from __future__ import annotations


class GMError(Exception):
    """Base class for all gm_companion errors."""


class StartupError(GMError):
    """Unrecoverable configuration problem; the process must exit."""


class NoAccountsError(StartupError):
    pass


class InvalidAddressError(StartupError):
    def __init__(self, address: str) -> None:
        super().__init__(f"invalid address format: {address!r}")
        self.address = address


class TransactionReverted(GMError):
    """The transaction was mined but the receipt reports failure (status == 0)."""

    def __init__(self, tx_hash: str) -> None:
        super().__init__(f"transaction reverted: {tx_hash}")
        self.tx_hash = tx_hash


class SubmissionError(GMError):
    """All submission attempts failed. The last underlying error is chained as __cause__."""

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts
