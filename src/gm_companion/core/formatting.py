# src/gm_companion/core/formatting.py

from __future__ import annotations

import time
from decimal import Decimal


def short_address(address: str | None) -> str:
    return f"{address[:6]}...{address[-4:]}" if address else "unknown address"


def format_relative_time(ts: float, *, now: float | None = None) -> str:
    """Human readable distance from now to `ts`, e.g. 'in 23h 59m'."""
    if now is None:
        now = time.time()
    diff = max(0, int(ts - now))
    hours, rem = divmod(diff, 3600)
    minutes = rem // 60
    return f"in {hours}h {minutes}m"


def format_gwei(wei: int) -> str:
    gwei = Decimal(int(wei)) / Decimal(10**9)
    return f"{gwei.normalize():f} Gwei"
