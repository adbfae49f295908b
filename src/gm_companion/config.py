# src/gm_companion/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time (private keys live in a separate file).
- Every constant of the check-in loop is overridable via GM_* variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "GM"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Chain ----
    rpc_url: str
    rpc_timeout_seconds: float
    contract_address: str
    default_recipient: str

    # ---- Accounts ----
    private_key_file: Path

    # ---- Execution ----
    max_retries: int
    gas_multiplier: float
    success_cooldown_seconds: float
    error_cooldown_seconds: float
    receipt_timeout_seconds: float

    # ---- Scheduling ----
    checkin_window_seconds: float
    safety_margin_seconds: float
    gas_refresh_interval_seconds: float
    rescan_interval_seconds: float
    seed_due_accounts: bool

    @property
    def cooldown_seconds(self) -> float:
        """Full wait between two check-ins of the same account."""
        return self.checkin_window_seconds + self.safety_margin_seconds

    @staticmethod
    def from_env() -> "Settings":
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/gm"))

        return Settings(
            app_name=_env(_k("APP_NAME"), "gm-companion"),
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=data_dir,
            rpc_url=_env(_k("RPC_URL"), "https://rpc-gel.inkonchain.com"),
            rpc_timeout_seconds=_env_float(_k("RPC_TIMEOUT_SECONDS"), 60.0),
            contract_address=_env(_k("CONTRACT_ADDRESS"), "0x9F500d075118272B3564ac6Ef2c70a9067Fd2d3F"),
            default_recipient=_env(_k("DEFAULT_RECIPIENT"), "0x9fb72f1a6f51b99ab21ccb6139acaef4d3ce0a66"),
            private_key_file=_env_path(_k("PRIVATE_KEY_FILE"), Path("private_keys.txt")),
            max_retries=max(1, _env_int(_k("MAX_RETRIES"), 3)),
            gas_multiplier=_env_float(_k("GAS_MULTIPLIER"), 1.2),
            success_cooldown_seconds=_env_float(_k("SUCCESS_COOLDOWN_SECONDS"), 10.0),
            error_cooldown_seconds=_env_float(_k("ERROR_COOLDOWN_SECONDS"), 30.0),
            receipt_timeout_seconds=_env_float(_k("RECEIPT_TIMEOUT_SECONDS"), 120.0),
            checkin_window_seconds=_env_float(_k("CHECKIN_WINDOW_SECONDS"), 86400.0),
            safety_margin_seconds=_env_float(_k("SAFETY_MARGIN_SECONDS"), 60.0),
            gas_refresh_interval_seconds=_env_float(_k("GAS_REFRESH_INTERVAL_SECONDS"), 300.0),
            rescan_interval_seconds=_env_float(_k("RESCAN_INTERVAL_SECONDS"), 60.0),
            seed_due_accounts=_env_bool(_k("SEED_DUE_ACCOUNTS"), False),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
