# src/gm_companion/core/accounts.py

"""
Account store.

Accounts are loaded once at startup from a plain text file (one private key per line)
and never change afterwards. The scheduler only ever reads them.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from eth_account import Account as EthAccount

from .errors import NoAccountsError

logger = logging.getLogger(__name__)

PRIVATE_KEY_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")


@dataclass(slots=True, frozen=True)
class Account:
    address: str
    private_key: str = field(repr=False)

    @classmethod
    def from_key(cls, private_key: str) -> Account:
        address = EthAccount.from_key(private_key).address.lower()
        return cls(address=address, private_key=private_key)


def parse_private_keys(lines: Iterable[str]) -> list[str]:
    """Strip lines and keep only well-formed 0x-prefixed 32-byte hex keys."""
    keys: list[str] = []
    dropped = 0
    for line in lines:
        k = line.strip()
        if not k:
            continue
        if PRIVATE_KEY_RE.match(k):
            keys.append(k)
        else:
            dropped += 1
    if dropped:
        logger.debug("Dropped %d malformed key line(s).", dropped)
    return keys


class AccountStore:
    def __init__(self, accounts: Sequence[Account]) -> None:
        self._accounts: tuple[Account, ...] = tuple(accounts)

    @classmethod
    def from_keys(cls, keys: Iterable[str]) -> AccountStore:
        return cls([Account.from_key(k) for k in keys])

    @classmethod
    def load(cls, path: str | Path) -> AccountStore:
        """
        Load accounts from a key file.

        Raises NoAccountsError when the file is missing or holds no valid key.
        """
        path = Path(path)
        try:
            text = path.read_text("utf-8")
        except FileNotFoundError as e:
            raise NoAccountsError(f"private key file not found: {path}") from e

        store = cls.from_keys(parse_private_keys(text.splitlines()))
        if not store:
            raise NoAccountsError(f"no valid private keys in {path}")
        logger.info("Loaded %d account(s) from %s", len(store), path)
        return store

    @property
    def accounts(self) -> tuple[Account, ...]:
        return self._accounts

    def recipient_for(self, sender: str, default_recipient: str) -> str:
        return next_recipient(self._accounts, sender, default_recipient)

    def __iter__(self):
        return iter(self._accounts)

    def __len__(self) -> int:
        return len(self._accounts)

    def __getitem__(self, i: int) -> Account:
        return self._accounts[i]


def next_recipient(accounts: Sequence[Account], sender: str, default_recipient: str) -> str:
    """
    Pick the address `sender` checks in on behalf of.

    - single account: always the configured default recipient
    - N > 1: the account right after the sender (cyclic), never the sender itself
    An unknown sender maps to the first account.
    """
    if len(accounts) <= 1:
        return default_recipient.lower()

    sender = sender.lower()
    idx = -1
    for i, acc in enumerate(accounts):
        if acc.address == sender:
            idx = i
            break
    return accounts[(idx + 1) % len(accounts)].address
