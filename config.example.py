# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Private keys never go into env vars: they live in GM_PRIVATE_KEY_FILE, one 0x-prefixed key per line.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "GM_APP_NAME": "App display name (default: gm-companion).",
    "GM_LOG_LEVEL": "Console logging level (default: INFO).",
    "GM_DATA_DIR": "Local data directory for gm.log (default: .local/gm).",
    # Chain
    "GM_RPC_URL": "JSON-RPC endpoint (default: https://rpc-gel.inkonchain.com).",
    "GM_RPC_TIMEOUT_SECONDS": "HTTP request timeout per RPC call (default: 60).",
    "GM_CONTRACT_ADDRESS": "GM contract address (default: 0x9F50...2d3F).",
    "GM_DEFAULT_RECIPIENT": "Recipient used when only one account is configured.",
    # Accounts
    "GM_PRIVATE_KEY_FILE": "Key file path (default: private_keys.txt).",
    # Execution
    "GM_MAX_RETRIES": "Submission attempts per check-in (default: 3).",
    "GM_GAS_MULTIPLIER": "Multiplier applied to the network gas price (default: 1.2).",
    "GM_SUCCESS_COOLDOWN_SECONDS": "Pause after a successful check-in (default: 10).",
    "GM_ERROR_COOLDOWN_SECONDS": "Pause between failed attempts (default: 30).",
    "GM_RECEIPT_TIMEOUT_SECONDS": "Max wait for a transaction receipt (default: 120).",
    # Scheduling
    "GM_CHECKIN_WINDOW_SECONDS": "Contract cooldown between check-ins (default: 86400).",
    "GM_SAFETY_MARGIN_SECONDS": "Extra wait on top of the window (default: 60).",
    "GM_GAS_REFRESH_INTERVAL_SECONDS": "Background gas price refresh (default: 300).",
    "GM_RESCAN_INTERVAL_SECONDS": "Re-scan interval while the queue is empty (default: 60).",
    "GM_SEED_DUE_ACCOUNTS": "Queue already-eligible accounts immediately (true/false, default: false).",
}
