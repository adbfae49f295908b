# src/gm_companion/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs:
- the gas price refresh loop as a background task,
- the check-in scheduler until SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys

from colorama import Fore, Style

from ..cli.bootstrap import create_initial_state
from ..config import Settings, get_settings
from ..core.errors import StartupError
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def print_banner(app_name: str) -> None:
    title = f"Daily GM check-in bot ({app_name})"
    width = len(title) + 6
    print(f"{Fore.CYAN}{Style.BRIGHT}╔{'═' * width}╗")
    print(f"║   {Fore.YELLOW}{title}{Fore.CYAN}   ║")
    print(f"╚{'═' * width}╝{Style.RESET_ALL}")


def _install_signal_handlers(state: AppState) -> None:
    loop = asyncio.get_running_loop()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signal.Signals(signum).name)
        state.scheduler.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _handle_signal, sig)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support add_signal_handler.
            logger.debug("Signal handler for %s not installed", sig)


async def run(settings: Settings, *, state: AppState | None = None) -> int:
    """Run until stopped. Returns the process exit code."""
    try:
        if state is None:
            state = create_initial_state(settings=settings)
            await state.chain.ensure_connected()
    except StartupError as e:
        logger.error("Startup failed: %s", e)
        return 1

    await state.gas.refresh()
    gas_task = asyncio.create_task(state.gas.run(settings.gas_refresh_interval_seconds))

    _install_signal_handlers(state)
    try:
        await state.scheduler.run()
    finally:
        gas_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await gas_task

    return 0


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    print_banner(settings.app_name)
    logger.info("Starting %s...", settings.app_name)

    try:
        code = asyncio.run(run(settings))
    except KeyboardInterrupt:
        code = 0

    logger.info("Bye.")
    sys.exit(code)


if __name__ == "__main__":
    main()
